from __future__ import annotations

import io

import pytest
import yaml

from linkerd_inject.core.errors import InputOutputError
from linkerd_inject.io.output import emit_warnings, encode_document, write_document


def test_write_document_appends_separator() -> None:
    out = io.BytesIO()
    write_document(out, b"kind: A\n")
    write_document(out, b"kind: B\n")
    assert out.getvalue() == b"kind: A\n---\nkind: B\n---\n"


def test_write_document_terminates_last_line() -> None:
    out = io.BytesIO()
    write_document(out, b"kind: A")
    assert out.getvalue() == b"kind: A\n---\n"


class _ClosedSink(io.BytesIO):
    def write(self, *args):
        raise OSError("disk full")


def test_write_failure_is_an_io_error() -> None:
    with pytest.raises(InputOutputError, match="disk full"):
        write_document(_ClosedSink(), b"kind: A\n")


def test_encode_document_keeps_key_order() -> None:
    manifest = {"kind": "Job", "apiVersion": "batch/v1", "metadata": {"name": "j"}}
    text = encode_document(manifest).decode()
    assert text.index("kind") < text.index("apiVersion") < text.index("metadata")
    assert yaml.safe_load(text) == manifest


def test_encode_document_keeps_long_strings_on_one_line() -> None:
    value = '[{"name":"' + "x" * 300 + '"}]'
    text = encode_document({"kind": "Job", "a": value}).decode()
    assert len(text.splitlines()) == 2
    assert yaml.safe_load(text)["a"] == value


def test_emit_warnings(capsys) -> None:
    emit_warnings(["one", "two"])
    assert capsys.readouterr().err == "⚠ one\n⚠ two\n"
