"""Telemetry for the editor, built directly on telelog.

Settings come from ``ROPE_EDITOR_*`` environment variables, optionally
overlaid by a named preset. Callers use three entry points:

``get_logger(name)`` -- a cached telelog logger for a component
``record_event(name, ...)`` -- one structured ``event::<name>`` line
``span(name, ...)`` -- profile a block with command context attached
"""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterator, MutableMapping, Optional, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "ROPE_EDITOR_"
ROOT_LOGGER = "rope_editor"

_LOGGER_CACHE: MutableMapping[str, Any] = {}
_ACTIVE_CONFIG: Optional[Any] = None


def env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def env_flag(name: str, default: bool) -> bool:
    raw = env(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def env_int(name: str, default: int) -> int:
    raw = env(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class TelemetrySettings:
    """Everything needed to build a telelog config for the editor."""

    level: str = "INFO"
    # Console output would paint over the full-screen editor, so it is opt-in.
    console: bool = False
    colored: bool = True
    json: bool = False
    log_file: str = ""
    buffered: bool = False
    buffer_size: int = 2048

    @classmethod
    def from_env(cls) -> "TelemetrySettings":
        return cls(
            level=(env("LOG_LEVEL") or "INFO").upper(),
            console=not env_flag("DISABLE_CONSOLE", True),
            colored=not env_flag("NO_COLOR", False),
            json=env_flag("LOG_JSON", False),
            log_file=env("LOG_FILE") or "",
            buffered=env_flag("LOG_BUFFERED", False),
            buffer_size=env_int("LOG_BUFFER_SIZE", 2048),
        )


_PRESETS: Dict[str, Dict[str, Any]] = {
    "development": {"level": "DEBUG", "console": True, "json": False},
    "production": {"level": "INFO", "buffered": True, "log_file": "rope_editor.log"},
    "performance": {
        "level": "DEBUG",
        "buffered": True,
        "json": True,
        "log_file": "rope_editor-performance.log",
    },
}


def settings_for(preset: Optional[str] = None) -> TelemetrySettings:
    """Environment settings, overlaid by ``preset`` when one is named.

    An explicit ``ROPE_EDITOR_LOG_FILE`` wins over a preset's default file.
    """

    base = TelemetrySettings.from_env()
    if preset is None:
        return base
    try:
        overrides = dict(_PRESETS[preset.lower()])
    except KeyError:
        raise ValueError(f"Unknown preset '{preset}'.") from None
    if base.log_file:
        overrides.pop("log_file", None)
    return replace(base, **overrides)


def build_config(settings: TelemetrySettings) -> Any:
    config = tl.Config()
    config.with_min_level(settings.level)
    config.with_console_output(settings.console)
    if settings.console:
        config.with_colored_output(settings.colored)
    config.with_json_format(settings.json)
    if settings.log_file:
        config.with_file_output(settings.log_file)
    if settings.buffered:
        config.with_buffering(True)
        config.with_buffer_size(settings.buffer_size)
    config.with_profiling(True)
    return config


def configure(
    *, settings: Optional[TelemetrySettings] = None, preset: Optional[str] = None
) -> None:
    """Rebuild the telelog config; cached loggers are dropped."""

    global _ACTIVE_CONFIG
    if settings is not None and preset is not None:
        raise ValueError("Provide either `settings` or `preset`, not both.")
    _ACTIVE_CONFIG = build_config(settings or settings_for(preset))
    _LOGGER_CACHE.clear()


def get_logger(name: Optional[str] = None) -> Any:
    global _ACTIVE_CONFIG
    logger_name = name or env("LOGGER") or ROOT_LOGGER
    if logger_name not in _LOGGER_CACHE:
        if _ACTIVE_CONFIG is None:
            _ACTIVE_CONFIG = build_config(settings_for())
        _LOGGER_CACHE[logger_name] = tl.Logger.with_config(
            logger_name, _ACTIVE_CONFIG
        )
    return _LOGGER_CACHE[logger_name]


def _emit(log: Any, level: str, message: str, payload: Dict[str, Any]) -> None:
    pairs = [(str(key), str(value)) for key, value in payload.items()]
    structured = getattr(log, f"{level}_with", None)
    if structured is not None:
        structured(message, pairs)
        return
    plain = getattr(log, level, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    plain(f"{message} {dict(pairs)}")


def record_event(
    name: str,
    *,
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    payload = {"event": name, **(data or {})}
    _emit(get_logger(logger_name), level.lower(), f"event::{name}", payload)


@contextmanager
def span(
    name: str,
    *,
    component: Optional[str] = None,
    logger_name: Optional[str] = None,
    **context: Any,
) -> Iterator[None]:
    """Profile a block under ``name``.

    Keyword ``context`` (buffer name, command label, ...) is attached to every
    line logged inside the block and to the ``span::fail`` line written when
    the block raises.
    """

    log = get_logger(logger_name)
    for key, value in context.items():
        log.add_context(key, str(value))
    try:
        with ExitStack() as stack:
            if component:
                stack.enter_context(log.track_component(component))
            stack.enter_context(log.profile(name))
            try:
                yield
            except Exception as exc:
                _emit(log, "error", "span::fail", {"span": name, "reason": exc, **context})
                raise
    finally:
        for key in context:
            log.remove_context(key)


__all__ = [
    "TelemetrySettings",
    "build_config",
    "configure",
    "env",
    "env_flag",
    "env_int",
    "get_logger",
    "record_event",
    "settings_for",
    "span",
]
