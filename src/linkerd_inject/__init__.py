"""linkerd-inject — add the linkerd iptables init container to Kubernetes workload manifests.

Re-exports the public API so callers can import from the package root.
"""

from linkerd_inject.core.types import InjectParams, RunContext, TypeMeta, WorkloadKind
from linkerd_inject.core.errors import InjectError
from linkerd_inject.core.classify import WORKLOAD_KINDS, classify, locate_pod_template
from linkerd_inject.core.inject import build_init_container, inject_pod_template
from linkerd_inject.core.pipeline import inject_bytes, inject_stream

__version__ = "0.1.0"

__all__ = [
    "InjectParams",
    "RunContext",
    "TypeMeta",
    "WorkloadKind",
    "InjectError",
    "WORKLOAD_KINDS",
    "classify",
    "locate_pod_template",
    "build_init_container",
    "inject_pod_template",
    "inject_bytes",
    "inject_stream",
]
