"""Document emission: re-serialized workloads and byte-identical passthroughs."""

import sys
from typing import BinaryIO

import yaml

from linkerd_inject.core.constants import DOCUMENT_SEPARATOR
from linkerd_inject.core.errors import InputOutputError, YamlEncodeError
from linkerd_inject.io.parsing import without_timestamp_resolver


class ManifestDumper(yaml.SafeDumper):  # pylint: disable=too-many-ancestors
    """Safe dumper that writes timestamp-looking strings unquoted."""


ManifestDumper.yaml_implicit_resolvers = without_timestamp_resolver(
    yaml.SafeDumper.yaml_implicit_resolvers)


def encode_document(manifest: dict) -> bytes:
    """Serialize a mutated manifest, keeping its key order."""
    try:
        text = yaml.dump(manifest, Dumper=ManifestDumper, default_flow_style=False,
                         sort_keys=False, allow_unicode=True, width=float("inf"))
    except yaml.YAMLError as exc:
        raise YamlEncodeError(str(exc)) from exc
    return text.encode("utf-8")


def write_document(out: BinaryIO, data: bytes) -> None:
    """Write one document followed by the separator line.

    The separator is written after every document, including the last.
    """
    if data and not data.endswith(b"\n"):
        data += b"\n"
    try:
        out.write(data)
        out.write(DOCUMENT_SEPARATOR.encode("ascii"))
    except OSError as exc:
        raise InputOutputError(f"write failed: {exc}") from exc


def emit_warnings(warnings: list[str]) -> None:
    """Print all warnings to stderr."""
    for w in warnings:
        print(f"⚠ {w}", file=sys.stderr)
