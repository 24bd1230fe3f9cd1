"""Data types shared by the pipeline stages."""

from dataclasses import dataclass, field
from typing import NamedTuple

from linkerd_inject.core.constants import (
    DEFAULT_PROXY_PORT, DEFAULT_PROXY_SERVICE_NAME, DEFAULT_USE_SERVICE_VIP,
)


@dataclass(frozen=True)
class InjectParams:
    """Settings fixed at startup and shared read-only by every document."""
    proxy_port: str = DEFAULT_PROXY_PORT
    proxy_service_name: str = DEFAULT_PROXY_SERVICE_NAME
    use_service_vip: bool = DEFAULT_USE_SERVICE_VIP

    def init_args(self) -> list[str]:
        """Argument vector handed to the init container."""
        return [
            "-p", self.proxy_port,
            "-m", "true" if self.use_service_vip else "false",
            "-s", self.proxy_service_name.upper(),
        ]


class TypeMeta(NamedTuple):
    """Top-level apiVersion/kind of a manifest."""
    api_version: str
    kind: str


@dataclass(frozen=True)
class WorkloadKind:
    """Where a pod-producing kind keeps its pod template."""
    kind: str
    template_path: tuple[str, ...] = ("spec", "template")
    # Optional in the schema: a missing template is an error, not an empty default
    template_optional: bool = False


@dataclass
class RunContext:
    """Shared state for one pass over the input stream."""
    params: InjectParams
    warnings: list[str] = field(default_factory=list)
    documents: int = 0
    injected: int = 0
