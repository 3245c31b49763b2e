"""Logging setup for the command line tool.

Streamed responses own stdout, so log output goes to a rotating file and,
for warnings and above, to stderr next to the status toasts. Calling
:func:`setup_logging` again swaps only the handlers it installed, which lets
the CLI raise the level once preferences have been read.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from pathlib import Path

__all__ = ["debug_enabled", "get_log_path", "setup_logging"]

LOG_DIR_ENV = "QUICKPROMPT_LOG_DIR"
DEBUG_ENV = "QUICKPROMPT_DEBUG"

_DEFAULT_LOG_DIR = Path.home() / ".quickprompt" / "logs"
_LOG_FILENAME = "quickprompt.log"
_NOISY_LOGGERS: tuple[str, ...] = ("asyncio", "httpx", "httpcore", "openai")
_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
_FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"

_installed: list[logging.Handler] = []
_log_path: Path | None = None


def debug_enabled(preference: bool = False) -> bool:
    """Debug logging is on when the preference or ``QUICKPROMPT_DEBUG`` asks for it."""

    value = os.environ.get(DEBUG_ENV)
    from_env = value is not None and value.strip().lower() in _TRUE_VALUES
    return preference or from_env


def setup_logging(
    level: int = logging.INFO,
    *,
    log_dir: Path | str | None = None,
    console: bool = True,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
) -> Path:
    """Install the file handler and the stderr handler on the root logger."""

    global _log_path
    target_dir = Path(log_dir or os.environ.get(LOG_DIR_ENV) or _DEFAULT_LOG_DIR).expanduser()
    target_dir.mkdir(parents=True, exist_ok=True)
    log_path = target_dir / _LOG_FILENAME

    root = logging.getLogger()
    for handler in _installed:
        root.removeHandler(handler)
        handler.close()
    _installed.clear()

    file_handler = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    _installed.append(file_handler)

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(max(level, logging.WARNING))
        console_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
        _installed.append(console_handler)

    for handler in _installed:
        root.addHandler(handler)
    root.setLevel(level)
    quiet_level = max(level, logging.WARNING)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    _log_path = log_path
    return log_path


def get_log_path() -> Path | None:
    """Return the log file written by the last :func:`setup_logging` call."""

    return _log_path
