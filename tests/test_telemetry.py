from __future__ import annotations

import pytest

from rope_editor.runtime import telemetry
from rope_editor.runtime.telemetry import TelemetrySettings, settings_for

_VARIABLES = (
    "LOG_LEVEL",
    "DISABLE_CONSOLE",
    "NO_COLOR",
    "LOG_JSON",
    "LOG_FILE",
    "LOG_BUFFERED",
    "LOG_BUFFER_SIZE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARIABLES:
        monkeypatch.delenv(f"ROPE_EDITOR_{name}", raising=False)


def test_defaults_keep_console_quiet() -> None:
    settings = TelemetrySettings.from_env()

    assert settings.level == "INFO"
    assert settings.console is False
    assert settings.log_file == ""


def test_settings_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROPE_EDITOR_LOG_LEVEL", "debug")
    monkeypatch.setenv("ROPE_EDITOR_DISABLE_CONSOLE", "0")
    monkeypatch.setenv("ROPE_EDITOR_LOG_JSON", "yes")
    monkeypatch.setenv("ROPE_EDITOR_LOG_BUFFER_SIZE", "not-a-number")

    settings = TelemetrySettings.from_env()

    assert settings.level == "DEBUG"
    assert settings.console is True
    assert settings.json is True
    assert settings.buffer_size == 2048


def test_preset_overlays_environment() -> None:
    settings = settings_for("production")

    assert settings.buffered is True
    assert settings.log_file == "rope_editor.log"


def test_explicit_log_file_beats_preset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROPE_EDITOR_LOG_FILE", "custom.log")

    settings = settings_for("Performance")

    assert settings.log_file == "custom.log"
    assert settings.json is True


def test_unknown_preset_is_rejected() -> None:
    with pytest.raises(ValueError):
        settings_for("bogus")


def test_configure_rejects_settings_and_preset_together() -> None:
    with pytest.raises(ValueError):
        telemetry.configure(settings=TelemetrySettings(), preset="development")
