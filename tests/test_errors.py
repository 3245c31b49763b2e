"""Tests for response error classification."""

from __future__ import annotations

import httpx
import pytest
from openai import RateLimitError

from quickprompt.ai.errors import (
    ErrorKind,
    ResponseError,
    SelectionUnavailableError,
    classify_error,
    describe_error,
)


@pytest.mark.parametrize(
    ("message", "expected"),
    [
        ("Error code: 429 - Resource has been exhausted", ErrorKind.RATE_LIMITED),
        ("Error code: 503 - The model is overloaded. Please try again later.", ErrorKind.OVERLOADED),
        ("Candidate was blocked due to SAFETY", ErrorKind.GENERIC),
        ("", ErrorKind.GENERIC),
    ],
)
def test_classify_by_message(message: str, expected: ErrorKind) -> None:
    assert classify_error(RuntimeError(message)) is expected
    assert classify_error(message) is expected


def test_rate_limit_exception_type_is_rate_limited() -> None:
    request = httpx.Request("POST", "https://generativelanguage.googleapis.com/v1beta/openai/chat/completions")
    response = httpx.Response(429, request=request)
    exc = RateLimitError("quota exceeded", response=response, body=None)

    assert classify_error(exc) is ErrorKind.RATE_LIMITED


def test_response_error_keeps_existing_classification() -> None:
    original = ResponseError(ErrorKind.OVERLOADED, "busy")

    assert ResponseError.from_exception(original) is original
    assert classify_error(original) is ErrorKind.OVERLOADED


def test_response_error_from_plain_exception() -> None:
    wrapped = ResponseError.from_exception(ValueError("bad things"))

    assert wrapped.kind is ErrorKind.GENERIC
    assert wrapped.message == "bad things"


def test_selection_error_kind() -> None:
    assert SelectionUnavailableError("nothing selected").kind is ErrorKind.SELECTION_UNAVAILABLE


def test_describe_error_texts() -> None:
    rate = describe_error(ErrorKind.RATE_LIMITED)
    overloaded = describe_error(ErrorKind.OVERLOADED)
    generic = describe_error(ErrorKind.GENERIC, "Response was blocked")

    assert rate.title == "You have been rate-limited."
    assert rate.message == "Please slow down."
    assert "rate limited" in rate.markdown
    assert overloaded.title == "Model Overloaded"
    assert "overloaded" in overloaded.markdown
    assert generic.title == "Response Failed"
    assert generic.message == "Response was blocked"
    assert "did not comply with its regulations" in generic.markdown
    for presentation in (rate, overloaded, generic):
        assert presentation.markdown.startswith("## Could not access Gemini.")
