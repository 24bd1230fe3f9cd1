"""Error kinds raised by the injector. Every one of them aborts the run."""


class InjectError(Exception):
    """Base class for all fatal injection errors."""
    kind: str = "error"


class UsageError(InjectError):
    """Required command-line input is missing."""
    kind = "usage"


class ConfigError(InjectError):
    """Config file is unreadable or holds a value of the wrong type."""
    kind = "config"


class InputOutputError(InjectError):
    """Open/read/write/close failure on the input or output stream."""
    kind = "io"


class YamlDecodeError(InjectError):
    """A document is not valid YAML or lacks a parseable kind."""
    kind = "yaml_decode"


class YamlEncodeError(InjectError):
    """Re-serializing a mutated document failed."""
    kind = "yaml_encode"


class JsonParseError(InjectError):
    """The existing init-containers annotation is not a JSON array."""
    kind = "json_parse"


class JsonEncodeError(InjectError):
    """Encoding the init-containers list failed."""
    kind = "json_encode"


class MissingTemplateError(InjectError):
    """A workload has no pod template where its schema makes one optional."""
    kind = "missing_template"
