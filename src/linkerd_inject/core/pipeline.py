"""Single pass over a manifest stream: split, classify, inject, emit."""

import io
from typing import BinaryIO

from linkerd_inject.core.classify import classify, locate_pod_template
from linkerd_inject.core.errors import InjectError
from linkerd_inject.core.inject import inject_pod_template
from linkerd_inject.core.types import RunContext
from linkerd_inject.io.output import encode_document, write_document
from linkerd_inject.io.parsing import decode_document, split_documents


def process_document(raw: bytes, ctx: RunContext) -> bytes:
    """Return the bytes to emit for one raw document.

    Unrecognized kinds and already-injected workloads come back unchanged.
    """
    manifest = decode_document(raw)
    if manifest is None:
        ctx.warnings.append(
            f"document {ctx.documents} holds no YAML content, passed through unchanged")
        return raw
    workload = classify(manifest)
    if workload is None:
        return raw
    template = locate_pod_template(manifest, workload)
    if not inject_pod_template(ctx.params, template):
        return raw
    ctx.injected += 1
    return encode_document(manifest)


def inject_stream(ctx: RunContext, in_stream: BinaryIO, out_stream: BinaryIO) -> None:
    """Rewrite every document of *in_stream* into *out_stream*, preserving order.

    The first error aborts the pass; documents already written stay written.
    """
    for raw in split_documents(in_stream):
        ctx.documents += 1
        try:
            updated = process_document(raw, ctx)
        except InjectError as exc:
            raise type(exc)(f"document {ctx.documents}: {exc}") from exc
        write_document(out_stream, updated)


def inject_bytes(data: bytes, ctx: RunContext) -> bytes:
    """Convenience wrapper: run one pass over an in-memory stream."""
    out = io.BytesIO()
    inject_stream(ctx, io.BytesIO(data), out)
    return out.getvalue()
