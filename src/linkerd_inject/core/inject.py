"""Init container injection into a pod template's annotations."""

import json

from linkerd_inject.core.constants import (
    INIT_CAPABILITIES, INIT_CONTAINER_NAME, INIT_CONTAINERS_ANNOTATION, INIT_IMAGE,
    INIT_PULL_POLICY, MARKER_ANNOTATION, MARKER_VALUE,
    NODE_NAME_FIELD_API_VERSION, NODE_NAME_FIELD_PATH,
)
from linkerd_inject.core.errors import JsonEncodeError, JsonParseError, YamlDecodeError
from linkerd_inject.core.types import InjectParams


def build_init_container(params: InjectParams) -> dict:
    """Build the init-linkerd descriptor that installs the iptables redirect."""
    return {
        "name": INIT_CONTAINER_NAME,
        "image": INIT_IMAGE,
        "args": params.init_args(),
        "env": [
            {
                "name": "NODE_NAME",
                "valueFrom": {
                    "fieldRef": {
                        "apiVersion": NODE_NAME_FIELD_API_VERSION,
                        "fieldPath": NODE_NAME_FIELD_PATH,
                    },
                },
            },
        ],
        "imagePullPolicy": INIT_PULL_POLICY,
        "securityContext": {
            "capabilities": {"add": list(INIT_CAPABILITIES)},
        },
    }


def decode_init_containers(value) -> list:
    """Decode an init-containers annotation value into a list of descriptors.

    Entries are kept as generic JSON objects so fields added by other
    tools survive the round trip. JSON ``null`` is an empty list.
    """
    if not isinstance(value, str):
        raise YamlDecodeError(
            f"annotation {INIT_CONTAINERS_ANNOTATION} must be a string, got {type(value).__name__}")
    try:
        containers = json.loads(value)
    except json.JSONDecodeError as exc:
        raise JsonParseError(f"{INIT_CONTAINERS_ANNOTATION}: {exc}") from exc
    if containers is None:
        return []
    if not isinstance(containers, list):
        raise JsonParseError(
            f"{INIT_CONTAINERS_ANNOTATION}: expected a JSON array, "
            f"got {type(containers).__name__}")
    return containers


def encode_init_containers(containers: list) -> str:
    """Encode descriptors compactly with sorted object keys."""
    try:
        return json.dumps(containers, separators=(",", ":"), sort_keys=True)
    except (TypeError, ValueError) as exc:
        raise JsonEncodeError(f"{INIT_CONTAINERS_ANNOTATION}: {exc}") from exc


def inject_pod_template(params: InjectParams, template: dict) -> bool:
    """Add the init container to *template* in place.

    Returns False when the marker annotation is already present (the
    template is left untouched), True after a successful injection.
    """
    meta = template.get("metadata")
    if meta is None:
        meta = template["metadata"] = {}
    elif not isinstance(meta, dict):
        raise YamlDecodeError("pod template metadata is not a mapping")
    annotations = meta.get("annotations")
    if annotations is None:
        annotations = meta["annotations"] = {}
    elif not isinstance(annotations, dict):
        raise YamlDecodeError("pod template annotations are not a mapping")

    # The marker value is not inspected, presence alone means done
    if MARKER_ANNOTATION in annotations:
        return False

    containers = []
    if INIT_CONTAINERS_ANNOTATION in annotations:
        containers = decode_init_containers(annotations[INIT_CONTAINERS_ANNOTATION])
    containers.append(build_init_container(params))
    encoded = encode_init_containers(containers)

    annotations[MARKER_ANNOTATION] = MARKER_VALUE
    annotations[INIT_CONTAINERS_ANNOTATION] = encoded
    return True
