"""Kind classification and pod-template lookup for pod-producing workloads."""

from linkerd_inject.core.errors import MissingTemplateError, YamlDecodeError
from linkerd_inject.core.types import TypeMeta, WorkloadKind

# K8s kinds that carry a pod template (everything else is passed through)
WORKLOAD_KINDS: dict[str, WorkloadKind] = {
    wk.kind: wk for wk in (
        WorkloadKind("Job"),
        WorkloadKind("DaemonSet"),
        WorkloadKind("ReplicaSet"),
        WorkloadKind("Deployment"),
        WorkloadKind("ReplicationController", template_optional=True),
    )
}


def full_name(manifest: dict) -> str:
    """Return 'Kind/name (apiVersion)' string for use in messages."""
    meta = manifest.get("metadata") or {}
    name = meta.get("name", "?") if isinstance(meta, dict) else "?"
    tm = type_meta(manifest)
    if tm.api_version:
        return f"{tm.kind}/{name} ({tm.api_version})"
    return f"{tm.kind}/{name}"


def type_meta(manifest) -> TypeMeta:
    """Extract apiVersion/kind from a decoded document.

    The document must be a mapping with a string ``kind``; apiVersion is
    informational and defaults to an empty string.
    """
    if not isinstance(manifest, dict):
        raise YamlDecodeError(
            f"expected a mapping at the top level, got {type(manifest).__name__}")
    kind = manifest.get("kind")
    if not isinstance(kind, str) or not kind:
        raise YamlDecodeError("document has no 'kind'")
    api_version = manifest.get("apiVersion") or ""
    return TypeMeta(api_version=str(api_version), kind=kind)


def classify(manifest) -> WorkloadKind | None:
    """Return the workload descriptor for this document, or None for passthrough."""
    return WORKLOAD_KINDS.get(type_meta(manifest).kind)


def locate_pod_template(manifest: dict, workload: WorkloadKind) -> dict:
    """Return the pod template of *manifest* as a mutable dict.

    Missing intermediate mappings are created empty, except when the
    template itself is optional in the kind's schema.
    """
    node = manifest
    walked = []
    for key in workload.template_path:
        walked.append(key)
        child = node.get(key)
        if child is None:
            if workload.template_optional and key == workload.template_path[-1]:
                raise MissingTemplateError(
                    f"{full_name(manifest)} has no {'.'.join(walked)}")
            child = node[key] = {}
        elif not isinstance(child, dict):
            raise YamlDecodeError(
                f"{full_name(manifest)}: {'.'.join(walked)} is not a mapping")
        node = child
    return node
