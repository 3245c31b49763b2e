"""Issue one streaming request and turn its outcome into view content."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from typing import Any, Callable, Protocol, Sequence

from ..ai.ai_types import Attachment, GenerationConfig, StreamCallback
from ..ai.errors import ErrorKind, ResponseError, describe_error
from ..rendering.diff import render_diff, should_render_diff
from ..services.history import HistorySink
from ..services.notifications import Notifier, Toast, ToastStyle
from ..services.settings import Preferences
from .ports import NullView, ResponseView
from .prompt import RequestSpec, resolve_model, thinking_config
from .stream import StreamAggregator, StreamState, log_callback_fault

__all__ = ["AskClient", "ResponseOrchestrator", "ResponseOutcome", "format_seconds"]

LOGGER = logging.getLogger(__name__)


class AskClient(Protocol):
    """Transport contract: stream chunks through ``stream`` and return the full text."""

    async def ask(
        self,
        prompt: str,
        *,
        model: str | None = None,
        stream: StreamCallback | None = None,
        data: Sequence[Attachment] | None = None,
        generation_config: GenerationConfig | None = None,
    ) -> str:  # pragma: no cover - protocol stub
        ...


@dataclass(slots=True, frozen=True)
class ResponseOutcome:
    """Result of one request: the response, or the kind of failure."""

    model: str
    elapsed: float
    text: str = ""
    rendered: str = ""
    error: ErrorKind | None = None
    error_message: str | None = None
    callback_faults: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


class ResponseOrchestrator:
    """Runs requests for one command with fixed preferences and flags.

    Failures are never raised to the caller: they end as a failure toast,
    an explanatory Markdown body, and an outcome carrying the error kind.
    Faults raised by the view are logged and counted in
    ``ResponseOutcome.callback_faults``; they never change the outcome.
    """

    def __init__(
        self,
        client: AskClient,
        preferences: Preferences,
        *,
        notifier: Notifier,
        history: HistorySink,
        show_diff: bool = False,
        disable_thinking: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._preferences = preferences
        self._notifier = notifier
        self._history = history
        self._show_diff = show_diff
        self._disable_thinking = disable_thinking
        self._clock = clock

    def resolve_model(self, requested: str | None) -> str:
        return resolve_model(requested, self._preferences.custom_model, self._preferences.model)

    async def acquire_response(self, spec: RequestSpec, view: ResponseView | None = None) -> ResponseOutcome:
        target = view or NullView()
        state = StreamState(started_at=self._clock())
        faults = self._deliver(target.set_loading, True, stage="loading")
        self._notifier.show_toast(Toast(ToastStyle.ANIMATED, "Waiting for Gemini..."))

        model = self.resolve_model(spec.model)
        aggregator = StreamAggregator(state, target.set_markdown, notifier=self._notifier)
        prompt = spec.prompt
        LOGGER.debug(
            "Requesting response: model=%s prompt_chars=%d attachments=%d diff_reference=%s",
            model,
            len(prompt),
            len(spec.attachments),
            spec.reference_text is not None,
        )
        try:
            try:
                response = await self._client.ask(
                    prompt,
                    model=model,
                    stream=aggregator.on_chunk,
                    data=spec.attachments,
                    generation_config=thinking_config(model, self._disable_thinking),
                )
            except Exception as exc:
                outcome = self._fail(exc, model=model, state=state)
            else:
                outcome = self._succeed(spec, response, model=model, state=state)
            # History and the terminal toast are settled before the view sees the final text.
            faults += self._deliver(target.set_markdown, outcome.rendered, stage="render")
        finally:
            state.is_loading = False
            faults += self._deliver(target.set_loading, False, stage="loading")
        return replace(outcome, callback_faults=aggregator.fault_count + faults)

    def _succeed(self, spec: RequestSpec, response: str, *, model: str, state: StreamState) -> ResponseOutcome:
        if should_render_diff(self._show_diff, spec.reference_text, response):
            rendered = render_diff(spec.reference_text or "", response)
        else:
            rendered = response

        try:
            self._history.add(spec.prompt, response, model)
        except Exception:
            LOGGER.exception("Failed to record history entry for %s", model)

        elapsed = state.elapsed(self._clock())
        self._notifier.show_toast(Toast(ToastStyle.SUCCESS, "Response Finished", f"{format_seconds(elapsed)} seconds"))
        LOGGER.info("Response finished via %s in %.3fs (%d chunks)", model, elapsed, state.chunk_count)
        return ResponseOutcome(model=model, elapsed=elapsed, text=response, rendered=rendered)

    def _fail(self, exc: Exception, *, model: str, state: StreamState) -> ResponseOutcome:
        error = ResponseError.from_exception(exc)
        presentation = describe_error(error.kind, error.message)
        if error.kind is ErrorKind.GENERIC:
            LOGGER.error("Response via %s failed: %s", model, error.message, exc_info=exc)
        else:
            LOGGER.warning("Response via %s failed (%s): %s", model, error.kind.value, error.message)
        self._notifier.show_toast(Toast(ToastStyle.FAILURE, presentation.title, presentation.message))
        return ResponseOutcome(
            model=model,
            elapsed=state.elapsed(self._clock()),
            rendered=presentation.markdown,
            error=error.kind,
            error_message=error.message,
        )

    @staticmethod
    def _deliver(write: Callable[[Any], None], value: Any, *, stage: str) -> int:
        try:
            write(value)
        except Exception:
            log_callback_fault(stage)
            return 1
        return 0


def format_seconds(elapsed: float) -> str:
    """Whole milliseconds as seconds: ``1.5``, ``0.042``, ``2``."""

    return f"{round(elapsed * 1000) / 1000:g}"
