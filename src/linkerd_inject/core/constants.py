"""Constants, annotation keys, and the init container definition injected into pod templates."""

import re

# Idempotency witness on the pod template
MARKER_ANNOTATION = "alpha.istio.io/linkerd-daemonset"
MARKER_VALUE = "injected"

# JSON list of init container descriptors (pre-1.6 pod annotation form)
INIT_CONTAINERS_ANNOTATION = "pod.beta.kubernetes.io/init-containers"

INIT_CONTAINER_NAME = "init-linkerd"
INIT_IMAGE = "linkerd/istio-init:v1"
INIT_PULL_POLICY = "IfNotPresent"
INIT_CAPABILITIES = ("NET_ADMIN",)

# fieldRef apiVersion stays pinned (kubernetes/kubernetes#39189)
NODE_NAME_FIELD_API_VERSION = "v1"
NODE_NAME_FIELD_PATH = "spec.nodeName"

DEFAULT_PROXY_PORT = "4140"
DEFAULT_PROXY_SERVICE_NAME = "l5d"
DEFAULT_USE_SERVICE_VIP = False

# Document separator: "---" followed only by whitespace
DOCUMENT_SEPARATOR = "---\n"
_SEPARATOR_RE = re.compile(rb'^---\s*$')

# Read buffer for the input stream
READ_BUFFER_SIZE = 4096

# Boolean spellings accepted on the command line and in config files
_TRUE_STRINGS = ("1", "t", "T", "TRUE", "true", "True")
_FALSE_STRINGS = ("0", "f", "F", "FALSE", "false", "False")

# Config file keys (same spelling as the command-line flags)
CONFIG_KEYS = ("linkerdPort", "linkerdSvcName", "useServiceVip")
