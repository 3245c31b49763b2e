"""Tests for request construction and model resolution."""

from __future__ import annotations

import pytest

from quickprompt.ai.ai_types import Attachment
from quickprompt.orchestration.prompt import (
    THINKING_MODEL,
    RequestSpec,
    direct_request,
    form_request,
    resolve_model,
    selection_request,
    thinking_config,
)


@pytest.mark.parametrize(
    ("per_call", "custom", "default", "expected"),
    [
        ("gemini-1.5-pro", "custom-model", "gemini-2.0-flash", "gemini-1.5-pro"),
        ("default", "custom-model", "gemini-2.0-flash", "custom-model"),
        (None, "custom-model", "gemini-2.0-flash", "custom-model"),
        ("", "custom-model", "gemini-2.0-flash", "custom-model"),
        ("default", "   ", "gemini-2.0-flash", "gemini-2.0-flash"),
        ("default", "", "gemini-2.0-flash", "gemini-2.0-flash"),
        (None, None, "gemini-2.0-flash", "gemini-2.0-flash"),
        ("default", "  padded-model ", "gemini-2.0-flash", "padded-model"),
    ],
)
def test_resolve_model_precedence(per_call, custom, default, expected) -> None:
    assert resolve_model(per_call, custom, default) == expected


def test_thinking_budget_only_zeroed_for_thinking_model() -> None:
    assert thinking_config(THINKING_MODEL, True) == {"thinking_config": {"thinking_budget": 0}}
    assert thinking_config(THINKING_MODEL, False) is None
    assert thinking_config("gemini-2.0-flash", True) is None


def test_direct_request_sends_query_verbatim() -> None:
    spec = direct_request("Summarize")

    assert spec.prompt == "Summarize"
    assert spec.reference_text is None
    assert spec.model == "default"


def test_selection_request_with_query_orders_context_query_selection() -> None:
    spec = selection_request("Hello world", context="Fix grammar.", query="Be brief")

    assert spec.prompt == "Fix grammar.\nBe brief\nHello world"
    assert spec.reference_text == "Hello world"


def test_selection_request_without_query_orders_context_selection() -> None:
    spec = selection_request("Hello world", context="Fix grammar.")

    assert spec.prompt == "Fix grammar.\nHello world"
    assert spec.reference_text == "Hello world"


def test_form_request_with_selection_skips_context() -> None:
    spec = form_request("Rewrite politely", context="ignored", selected="give it back")

    assert spec.prompt == "Rewrite politely\ngive it back"
    assert spec.reference_text == "give it back"


def test_form_request_without_selection_separates_context_with_blank_line() -> None:
    with_context = form_request("What is 2+2?", context="Answer tersely.")
    without_context = form_request("What is 2+2?")

    assert with_context.prompt == "Answer tersely.\n\nWhat is 2+2?"
    assert without_context.prompt == "What is 2+2?"
    assert with_context.reference_text is None


def test_request_spec_is_immutable_and_keeps_attachment_order() -> None:
    first = Attachment(b"1", name="a.png")
    second = Attachment(b"2", name="b.png")
    spec = form_request("Describe", attachments=[first, second])

    assert spec.attachments == (first, second)
    with pytest.raises(AttributeError):
        spec.query = "changed"  # type: ignore[misc]
    assert isinstance(spec, RequestSpec)
