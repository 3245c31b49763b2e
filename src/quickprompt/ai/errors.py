"""Error taxonomy for response acquisition.

Failures raised by the Gemini transport are classified once, at the client
boundary, into an :class:`ErrorKind`. Everything downstream (notifications,
rendered explanations) keys off the kind instead of re-inspecting messages.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from openai import RateLimitError

__all__ = [
    "ErrorKind",
    "ErrorPresentation",
    "QuickPromptError",
    "ResponseError",
    "SelectionUnavailableError",
    "RATE_LIMIT_MARKER",
    "OVERLOADED_MARKER",
    "classify_error",
    "describe_error",
]

RATE_LIMIT_MARKER = "429"
OVERLOADED_MARKER = "The model is overloaded"
_FAILURE_HEADING = "## Could not access Gemini."


class ErrorKind(Enum):
    """Failure categories surfaced to the user."""

    RATE_LIMITED = "rate_limited"
    OVERLOADED = "overloaded"
    GENERIC = "generic"
    SELECTION_UNAVAILABLE = "selection_unavailable"
    STREAM_CALLBACK_FAULT = "stream_callback_fault"


class QuickPromptError(Exception):
    """Base class for errors raised by quickprompt."""

    kind: ClassVar[ErrorKind] = ErrorKind.GENERIC


class ResponseError(QuickPromptError):
    """A request to the language model failed.

    The instance ``kind`` shadows the class default with the classified
    category; ``message`` keeps the transport's raw text for display.
    """

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind  # type: ignore[misc]
        self.message = message

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ResponseError":
        if isinstance(exc, ResponseError):
            return exc
        return cls(classify_error(exc), _message_of(exc))


class SelectionUnavailableError(QuickPromptError):
    """The host environment could not provide the selected text."""

    kind = ErrorKind.SELECTION_UNAVAILABLE


def classify_error(exc: BaseException | str) -> ErrorKind:
    """Map a transport error (or its message) onto an :class:`ErrorKind`."""

    if isinstance(exc, ResponseError):
        return exc.kind
    if isinstance(exc, RateLimitError):
        return ErrorKind.RATE_LIMITED
    message = exc if isinstance(exc, str) else _message_of(exc)
    if RATE_LIMIT_MARKER in message:
        return ErrorKind.RATE_LIMITED
    if OVERLOADED_MARKER in message:
        return ErrorKind.OVERLOADED
    return ErrorKind.GENERIC


@dataclass(slots=True, frozen=True)
class ErrorPresentation:
    """Toast text plus the Markdown body shown in place of a response."""

    title: str
    message: str
    markdown: str


def describe_error(kind: ErrorKind, raw_message: str = "") -> ErrorPresentation:
    """Return the user-facing explanation for a failed request."""

    if kind is ErrorKind.RATE_LIMITED:
        return ErrorPresentation(
            title="You have been rate-limited.",
            message="Please slow down.",
            markdown=(
                f"{_FAILURE_HEADING}\n\n"
                "You have been rate limited. Please slow down and try again later."
            ),
        )
    if kind is ErrorKind.OVERLOADED:
        return ErrorPresentation(
            title="Model Overloaded",
            message="The model is currently overloaded. Please try again later.",
            markdown=f"{_FAILURE_HEADING}\n\nThe model is currently overloaded. Please try again later.",
        )
    return ErrorPresentation(
        title="Response Failed",
        message=raw_message,
        markdown=(
            f"{_FAILURE_HEADING}\n\n"
            "This may be because Gemini has decided that your prompt did not comply with its "
            "regulations. Please try another prompt, and if it still does not work, create an "
            "issue on GitHub."
        ),
    )


def _message_of(exc: BaseException) -> str:
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc) or exc.__class__.__name__
