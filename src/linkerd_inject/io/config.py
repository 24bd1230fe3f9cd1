"""Optional YAML config file and resolution of the injection settings."""

import os

import yaml

from linkerd_inject.core.constants import (
    CONFIG_KEYS, DEFAULT_PROXY_PORT, DEFAULT_PROXY_SERVICE_NAME, DEFAULT_USE_SERVICE_VIP,
    _FALSE_STRINGS, _TRUE_STRINGS,
)
from linkerd_inject.core.errors import ConfigError
from linkerd_inject.core.types import InjectParams


def parse_bool(value: str) -> bool:
    """Parse a boolean flag value (1/t/true and 0/f/false, in the usual casings)."""
    if value in _TRUE_STRINGS:
        return True
    if value in _FALSE_STRINGS:
        return False
    raise ValueError(f"invalid boolean value {value!r}")


def load_config(path: str | None) -> dict:
    """Load the config file or return an empty config."""
    if not path:
        return {}
    if not os.path.exists(path):
        raise ConfigError(f"config file not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except OSError as exc:
        raise ConfigError(f"{path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path}: {' '.join(str(exc).split())}") from exc
    if not isinstance(cfg, dict):
        raise ConfigError(f"{path}: expected a mapping, got {type(cfg).__name__}")
    return cfg


def _config_str(config: dict, key: str) -> str | None:
    val = config.get(key)
    if val is None:
        return None
    # YAML reads an unquoted port as int
    if isinstance(val, bool) or not isinstance(val, (str, int)):
        raise ConfigError(f"{key}: expected a string, got {type(val).__name__}")
    return str(val)


def _config_bool(config: dict, key: str) -> bool | None:
    val = config.get(key)
    if val is None or isinstance(val, bool):
        return val
    try:
        return parse_bool(str(val))
    except ValueError as exc:
        raise ConfigError(f"{key}: {exc}") from exc


def _is_valid_port(port: str) -> bool:
    return port.isdigit() and port.isascii() and 1 <= int(port) <= 65535


def resolve_params(config: dict, warnings: list[str],
                   proxy_port: str | None = None,
                   proxy_service_name: str | None = None,
                   use_service_vip: bool | None = None) -> InjectParams:
    """Merge flag values over config file values over built-in defaults.

    Flags left as None fall back to the config file, then to the defaults.
    """
    for key in config:
        if key not in CONFIG_KEYS:
            warnings.append(f"unknown config key '{key}' ignored")

    if proxy_port is None:
        proxy_port = _config_str(config, "linkerdPort")
    if proxy_service_name is None:
        proxy_service_name = _config_str(config, "linkerdSvcName")
    if use_service_vip is None:
        use_service_vip = _config_bool(config, "useServiceVip")

    params = InjectParams(
        proxy_port=DEFAULT_PROXY_PORT if proxy_port is None else proxy_port,
        proxy_service_name=(DEFAULT_PROXY_SERVICE_NAME if proxy_service_name is None
                            else proxy_service_name),
        use_service_vip=DEFAULT_USE_SERVICE_VIP if use_service_vip is None else use_service_vip,
    )
    # Kept verbatim either way, the init container does its own parsing
    if not _is_valid_port(params.proxy_port):
        warnings.append(f"linkerd port '{params.proxy_port}' is not a port number (1-65535)")
    return params
