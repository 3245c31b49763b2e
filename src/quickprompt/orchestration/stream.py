"""Accumulate streamed chunks into a live-rendered buffer."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable

from ..ai.errors import ErrorKind
from ..services.notifications import Notifier, Toast, ToastStyle

__all__ = ["StreamState", "StreamAggregator", "log_callback_fault"]

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class StreamState:
    """Buffer owned by exactly one in-flight request."""

    text: str = ""
    is_loading: bool = True
    started_at: float = field(default_factory=time.monotonic)
    chunk_count: int = 0

    def append(self, chunk: str) -> str:
        self.text += chunk
        self.chunk_count += 1
        return self.text

    def elapsed(self, now: float | None = None) -> float:
        return (time.monotonic() if now is None else now) - self.started_at


class StreamAggregator:
    """Chunk callback handed to the transport.

    Each chunk is appended and the whole buffer is republished. A failure
    while handling one chunk is logged and reported, and later chunks are
    still processed.
    """

    def __init__(
        self,
        state: StreamState,
        publish: Callable[[str], None],
        *,
        notifier: Notifier | None = None,
    ) -> None:
        self._state = state
        self._publish = publish
        self._notifier = notifier
        self._faults = 0

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def text(self) -> str:
        return self._state.text

    @property
    def fault_count(self) -> int:
        return self._faults

    def on_chunk(self, chunk: str | None) -> None:
        if chunk is None:
            return
        try:
            self._publish(self._state.append(chunk))
        except Exception as exc:
            self._faults += 1
            log_callback_fault("stream")
            if self._notifier is not None:
                self._notifier.show_toast(Toast(ToastStyle.FAILURE, "Response Failed", str(exc)))

    __call__ = on_chunk


def log_callback_fault(stage: str) -> None:
    """Log the active exception as a fault in a view callback.

    Must be called from an ``except`` block. The record carries
    ``error_kind`` so faults can be told apart from request failures.
    """

    LOGGER.exception(
        "Error in %s callback",
        stage,
        extra={"error_kind": ErrorKind.STREAM_CALLBACK_FAULT.value},
    )
