"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from quickprompt.services.history import InMemoryHistory
from quickprompt.services.notifications import InMemoryNotifier
from quickprompt.services.settings import Preferences


@pytest.fixture
def preferences() -> Preferences:
    return Preferences(api_key="test-key", model="gemini-2.0-flash")


@pytest.fixture
def notifier() -> InMemoryNotifier:
    return InMemoryNotifier()


@pytest.fixture
def history() -> InMemoryHistory:
    return InMemoryHistory()


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "QUICKPROMPT_API_KEY",
        "QUICKPROMPT_MODEL",
        "QUICKPROMPT_CUSTOM_MODEL",
        "QUICKPROMPT_BASE_URL",
        "QUICKPROMPT_SHOW_DIFF",
        "QUICKPROMPT_DISABLE_THINKING",
        "QUICKPROMPT_DEBUG",
        "QUICKPROMPT_DEBUG_LOGGING",
        "QUICKPROMPT_LOG_DIR",
        "QUICKPROMPT_REQUEST_TIMEOUT",
        "QUICKPROMPT_DEFAULT_TARGET_LANGUAGE",
        "QUICKPROMPT_SECOND_TARGET_LANGUAGE",
    ):
        monkeypatch.delenv(name, raising=False)
