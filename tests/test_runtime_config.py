from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path
from typing import Iterator, List, Tuple

import pytest
import telelog  # type: ignore[import]

from undo_engine.runtime import (
    RuntimeSettings,
    current_settings,
    load_settings,
    use_settings,
)
from undo_engine.runtime import telemetry

SRC_DIR = Path(__file__).resolve().parents[1] / "src"


@pytest.fixture
def restore_telemetry() -> Iterator[None]:
    previous = current_settings()
    yield
    telemetry.configure(settings=previous)


class PlainLogger:
    """Logger exposing only plain level methods, no ``<level>_with`` variants."""

    def __init__(self) -> None:
        self.lines: List[Tuple[str, str]] = []

    def error(self, message: str) -> None:
        self.lines.append(("error", message))


def test_load_settings_defaults() -> None:
    settings = load_settings({})

    assert settings == RuntimeSettings()
    assert settings.history_limit == 100
    assert settings.logger_name == "undo_engine"


def test_load_settings_reads_prefixed_variables() -> None:
    settings = load_settings(
        {
            "UNDO_ENGINE_HISTORY_LIMIT": "25",
            "UNDO_ENGINE_LOGGER": "editor.history",
            "UNDO_ENGINE_LOG_LEVEL": "debug",
            "UNDO_ENGINE_LOG_JSON": "yes",
            "UNDO_ENGINE_DISABLE_CONSOLE": "1",
            "UNDO_ENGINE_LOG_BUFFERED": "on",
            "UNDO_ENGINE_LOG_BUFFER_SIZE": "512",
        }
    )

    assert settings.history_limit == 25
    assert settings.logger_name == "editor.history"
    assert settings.log_level == "DEBUG"
    assert settings.log_json is True
    assert settings.console is False
    assert settings.buffered is True
    assert settings.buffer_size == 512


@pytest.mark.parametrize("raw", ["zero", "0", "-4"])
def test_load_settings_rejects_bad_limit(raw: str) -> None:
    with pytest.raises(ValueError):
        load_settings({"UNDO_ENGINE_HISTORY_LIMIT": raw})


def test_configure_rejects_config_and_preset_together() -> None:
    with pytest.raises(ValueError):
        telemetry.configure(config=object(), preset="quiet")


def test_configure_rejects_unknown_preset() -> None:
    with pytest.raises(ValueError):
        telemetry.configure(preset="chatty")


def test_bad_environment_fails_on_construction_not_import() -> None:
    env = dict(os.environ)
    env["UNDO_ENGINE_HISTORY_LIMIT"] = "abc"
    env["PYTHONPATH"] = os.pathsep.join(
        filter(None, [str(SRC_DIR), env.get("PYTHONPATH")])
    )
    script = (
        "import undo_engine\n"
        "try:\n"
        "    undo_engine.UndoManager()\n"
        "except ValueError as exc:\n"
        "    print('rejected:', exc)\n"
    )

    result = subprocess.run(
        [sys.executable, "-c", script],
        env=env,
        capture_output=True,
        text=True,
        check=False,
    )

    assert result.returncode == 0, result.stderr
    assert "rejected: UNDO_ENGINE_HISTORY_LIMIT must be an integer" in result.stdout


def test_settings_are_read_lazily(
    monkeypatch: pytest.MonkeyPatch, restore_telemetry: None
) -> None:
    monkeypatch.setenv("UNDO_ENGINE_HISTORY_LIMIT", "12")
    use_settings(None)

    assert current_settings().history_limit == 12

    monkeypatch.setenv("UNDO_ENGINE_HISTORY_LIMIT", "-1")
    use_settings(None)

    with pytest.raises(ValueError):
        current_settings()


@pytest.mark.parametrize("preset", telemetry.PRESETS)
def test_configure_presets_build_loggers(
    preset: str,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    restore_telemetry: None,
) -> None:
    monkeypatch.chdir(tmp_path)

    telemetry.configure(preset=preset)
    logger = telemetry.get_logger("undo_engine.tests")

    assert telemetry.get_logger("undo_engine.tests") is logger
    telemetry.record_event("preset.ready", data={"preset": preset})


def test_configure_with_explicit_config_drops_cached_loggers(
    restore_telemetry: None,
) -> None:
    before = telemetry.get_logger("undo_engine.tests")

    telemetry.configure(config=telelog.Config())

    assert telemetry.get_logger("undo_engine.tests") is not before


def test_configure_with_settings_installs_them(restore_telemetry: None) -> None:
    settings = RuntimeSettings(history_limit=3, logger_name="undo_engine.custom")

    telemetry.configure(settings=settings)

    assert current_settings() is settings


def test_span_failure_falls_back_to_plain_level_methods() -> None:
    logger = PlainLogger()
    handle = telemetry.SpanHandle(
        logger=logger, span_name="history::undo", component_name="history"
    )

    handle.fail("undo exploded")

    assert len(logger.lines) == 1
    level, message = logger.lines[0]
    assert level == "error"
    assert message.startswith("span::fail")
    assert "undo exploded" in message


def test_span_failure_rejects_unknown_level() -> None:
    class Mute:
        pass

    handle = telemetry.SpanHandle(logger=Mute(), span_name="history::undo")

    with pytest.raises(ValueError):
        handle.fail("nothing to log with")
