"""Multi-document stream splitting and YAML decoding."""

from collections.abc import Iterator
from typing import BinaryIO

import yaml

from linkerd_inject.core.constants import _SEPARATOR_RE
from linkerd_inject.core.errors import InputOutputError, YamlDecodeError

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


def without_timestamp_resolver(resolvers: dict) -> dict:
    """Copy an implicit resolver table without the timestamp entry."""
    return {
        first: [(tag, regexp) for tag, regexp in entries if tag != _TIMESTAMP_TAG]
        for first, entries in resolvers.items()
    }


class ManifestLoader(yaml.SafeLoader):  # pylint: disable=too-many-ancestors
    """Safe loader that keeps timestamp scalars as strings."""


ManifestLoader.yaml_implicit_resolvers = without_timestamp_resolver(
    yaml.SafeLoader.yaml_implicit_resolvers)


def is_separator(line: bytes) -> bool:
    """Check if a raw line is a document separator ("---" plus optional whitespace)."""
    return _SEPARATOR_RE.match(line) is not None


def split_documents(stream: BinaryIO) -> Iterator[bytes]:
    """Yield raw YAML documents from *stream*, in order.

    Separator lines are dropped; empty chunks between consecutive
    separators (and after a trailing one) are not yielded. Whitespace
    and comments inside a document are kept byte for byte.
    """
    buf = bytearray()
    while True:
        try:
            line = stream.readline()
        except OSError as exc:
            raise InputOutputError(f"read failed: {exc}") from exc
        if not line:
            break
        if is_separator(line):
            if buf:
                yield bytes(buf)
                buf.clear()
            continue
        buf.extend(line)
    if buf:
        yield bytes(buf)


def decode_document(raw: bytes):
    """Parse one raw document with the manifest loader.

    Returns None for documents holding only comments or whitespace.
    """
    try:
        return yaml.load(raw, Loader=ManifestLoader)
    except yaml.YAMLError as exc:
        # Collapse multi-line marks into the single error line
        detail = " ".join(str(exc).split())
        raise YamlDecodeError(detail) from exc
