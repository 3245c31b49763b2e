"""Toast notifications describing request progress."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

__all__ = ["Toast", "ToastStyle", "Notifier", "InMemoryNotifier"]

LOGGER = logging.getLogger(__name__)


class ToastStyle(Enum):
    ANIMATED = "animated"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(slots=True, frozen=True)
class Toast:
    style: ToastStyle
    title: str
    message: str | None = None


class Notifier(Protocol):
    """Host surface that shows toasts; only the latest one is visible."""

    def show_toast(self, toast: Toast) -> None:  # pragma: no cover - protocol stub
        ...


class InMemoryNotifier:
    """Ring buffer of shown toasts for headless runs and tests."""

    def __init__(self, capacity: int = 50) -> None:
        self._buffer: deque[Toast] = deque(maxlen=max(1, capacity))

    def show_toast(self, toast: Toast) -> None:
        LOGGER.debug("Toast [%s] %s: %s", toast.style.value, toast.title, toast.message or "")
        self._buffer.append(toast)

    @property
    def toasts(self) -> list[Toast]:
        return list(self._buffer)

    @property
    def last(self) -> Toast | None:
        return self._buffer[-1] if self._buffer else None

    def of_style(self, style: ToastStyle) -> list[Toast]:
        return [toast for toast in self._buffer if toast.style is style]
