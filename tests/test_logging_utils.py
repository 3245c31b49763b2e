"""Tests for logging configuration helpers."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

from quickprompt.utils import logging as logging_utils


@pytest.fixture
def restore_root_logging(monkeypatch: pytest.MonkeyPatch):
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    monkeypatch.setattr(logging_utils, "_installed", [])
    monkeypatch.setattr(logging_utils, "_log_path", None)
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def _flush_root() -> None:
    for handler in logging.getLogger().handlers:
        handler.flush()


def test_setup_logging_writes_rotating_file(tmp_path: Path, restore_root_logging) -> None:
    log_path = logging_utils.setup_logging(logging.DEBUG, log_dir=tmp_path, console=False)

    logging.getLogger("quickprompt.test").debug("hello file")
    _flush_root()

    assert log_path == tmp_path / "quickprompt.log"
    assert logging_utils.get_log_path() == log_path
    assert "hello file" in log_path.read_text(encoding="utf-8")
    assert logging.getLogger("httpx").level == logging.WARNING


def test_console_handler_uses_stderr_with_warning_floor(tmp_path: Path, restore_root_logging) -> None:
    logging_utils.setup_logging(logging.DEBUG, log_dir=tmp_path)

    consoles = [
        handler
        for handler in logging.getLogger().handlers
        if type(handler) is logging.StreamHandler and handler in logging_utils._installed
    ]

    assert len(consoles) == 1
    assert consoles[0].stream is sys.stderr
    assert consoles[0].level == logging.WARNING


def test_repeated_setup_replaces_only_its_own_handlers(tmp_path: Path, restore_root_logging) -> None:
    root = logging.getLogger()
    foreign = logging.NullHandler()
    root.addHandler(foreign)

    first = logging_utils.setup_logging(log_dir=tmp_path / "a", console=False)
    second = logging_utils.setup_logging(logging.DEBUG, log_dir=tmp_path / "b", console=False)
    logging.getLogger("quickprompt.test").debug("after switch")
    _flush_root()

    ours = [handler for handler in root.handlers if handler in logging_utils._installed]
    assert first != second
    assert len(ours) == 1
    assert foreign in root.handlers
    assert root.level == logging.DEBUG
    assert "after switch" in second.read_text(encoding="utf-8")
    assert "after switch" not in first.read_text(encoding="utf-8")


def test_log_dir_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, restore_root_logging) -> None:
    monkeypatch.setenv("QUICKPROMPT_LOG_DIR", str(tmp_path / "env"))

    log_path = logging_utils.setup_logging(console=False)

    assert log_path.parent == tmp_path / "env"


@pytest.mark.parametrize(
    ("env_value", "preference", "expected"),
    [
        (None, False, False),
        (None, True, True),
        ("1", False, True),
        ("Debug", False, True),
        ("off", False, False),
        ("off", True, True),
    ],
)
def test_debug_enabled_combines_environment_and_preference(
    monkeypatch: pytest.MonkeyPatch, env_value: str | None, preference: bool, expected: bool
) -> None:
    if env_value is not None:
        monkeypatch.setenv("QUICKPROMPT_DEBUG", env_value)

    assert logging_utils.debug_enabled(preference) is expected
