"""Application-wide configuration loaded from JSON resources."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Mapping

_CONFIG_RESOURCE = "app.json"
_APP_CONFIG_CACHE: AppConfig | None = None

_DEFAULT_CAPTURE_CAPACITY = 140 + 1
_DEFAULT_VERBOSITY = "info"
_VERBOSITY_NAMES = frozenset({"disabled", "error", "warning", "info", "verbose"})


@dataclass(frozen=True)
class DecoderConfig:
    """Tunables of the streaming MIDI decoder."""

    capture_capacity: int
    log_events: bool

    @property
    def max_stored_bytes(self) -> int:
        return self.capture_capacity - 1


@dataclass(frozen=True)
class LoggingConfig:
    """File log settings applied by command line entry points."""

    verbosity: str


@dataclass(frozen=True)
class AppConfig:
    """Structured configuration values for the MIDI tools."""

    decoder: DecoderConfig
    logging: LoggingConfig


def get_app_config() -> AppConfig:
    """Return the cached application configuration."""

    global _APP_CONFIG_CACHE
    if _APP_CONFIG_CACHE is None:
        _APP_CONFIG_CACHE = load_app_config()
    return _APP_CONFIG_CACHE


def set_app_config(config: AppConfig) -> None:
    """Install ``config`` as the cached configuration."""

    global _APP_CONFIG_CACHE
    _APP_CONFIG_CACHE = config


def reset_app_config_cache() -> None:
    """Reset the cached configuration for subsequent reloads."""

    global _APP_CONFIG_CACHE
    _APP_CONFIG_CACHE = None


def load_app_config(path: str | Path | None = None) -> AppConfig:
    """Load configuration from ``path`` or the bundled JSON resource."""

    data = _read_config_data(path)
    decoder_section = data.get("decoder") if isinstance(data, Mapping) else None
    decoder = _parse_decoder_section(decoder_section)
    logging_section = data.get("logging") if isinstance(data, Mapping) else None
    logging_config = _parse_logging_section(logging_section)
    return AppConfig(decoder=decoder, logging=logging_config)


def get_decoder_config() -> DecoderConfig:
    """Convenience accessor for the decoder configuration."""

    return get_app_config().decoder


def get_logging_config() -> LoggingConfig:
    """Convenience accessor for the logging configuration."""

    return get_app_config().logging


def _read_config_data(path: str | Path | None) -> Mapping[str, Any]:
    if path is not None:
        return _load_json_from_path(Path(path).expanduser())
    return _load_default_config_data()


def _load_json_from_path(path: Path) -> Mapping[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError:
        return {}
    return _parse_json(raw)


def _load_default_config_data() -> Mapping[str, Any]:
    try:
        resource = resources.files(__package__).joinpath(_CONFIG_RESOURCE)
        raw = resource.read_text(encoding="utf-8")
    except (FileNotFoundError, OSError):
        return {}
    return _parse_json(raw)


def _parse_json(raw: str) -> Mapping[str, Any]:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return {}
    if isinstance(parsed, Mapping):
        return parsed
    return {}


def _parse_decoder_section(section: Mapping[str, Any] | None) -> DecoderConfig:
    if not isinstance(section, Mapping):
        return DecoderConfig(capture_capacity=_DEFAULT_CAPTURE_CAPACITY, log_events=False)
    capacity = _coerce_positive_int(section.get("capture_capacity"), default=_DEFAULT_CAPTURE_CAPACITY)
    log_events = _coerce_bool(section.get("log_events"), default=False)
    return DecoderConfig(capture_capacity=capacity, log_events=log_events)


def _parse_logging_section(section: Mapping[str, Any] | None) -> LoggingConfig:
    if not isinstance(section, Mapping):
        return LoggingConfig(verbosity=_DEFAULT_VERBOSITY)
    value = section.get("verbosity")
    if isinstance(value, str) and value.strip().lower() in _VERBOSITY_NAMES:
        return LoggingConfig(verbosity=value.strip().lower())
    return LoggingConfig(verbosity=_DEFAULT_VERBOSITY)


def _coerce_positive_int(value: Any, *, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return default
    if isinstance(value, float):
        if not math.isfinite(value):
            return default
        candidate = int(value)
    elif isinstance(value, int):
        candidate = value
    else:
        return default
    if candidate <= 0:
        return default
    return candidate


def _coerce_bool(value: Any, *, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    return default


__all__ = [
    "AppConfig",
    "DecoderConfig",
    "LoggingConfig",
    "get_app_config",
    "get_decoder_config",
    "get_logging_config",
    "load_app_config",
    "reset_app_config_cache",
    "set_app_config",
]
