"""Request construction: prompt text, model resolution, generation overrides."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Sequence

from ..ai.ai_types import Attachment
from ..services.settings import DEFAULT_MODEL_SENTINEL

__all__ = [
    "RequestSpec",
    "THINKING_MODEL",
    "direct_request",
    "form_request",
    "resolve_model",
    "selection_request",
    "thinking_config",
]

# Preview model whose reasoning can be switched off per request.
THINKING_MODEL = "gemini-2.5-flash-preview-04-17"


@dataclass(slots=True, frozen=True)
class RequestSpec:
    """Everything needed to issue one request.

    ``prompt`` joins the context template and the query with
    ``context_separator``; an empty context contributes nothing.
    """

    query: str
    context: str = ""
    model: str | None = DEFAULT_MODEL_SENTINEL
    attachments: tuple[Attachment, ...] = ()
    reference_text: str | None = None
    context_separator: str = "\n"

    @property
    def prompt(self) -> str:
        if not self.context:
            return self.query
        return f"{self.context}{self.context_separator}{self.query}"


def resolve_model(per_call: str | None, custom_model: str | None, default_model: str) -> str:
    """Pick the model for a request.

    The per-call choice wins unless it is missing or the ``"default"``
    sentinel; then a non-blank custom model; then the global default.
    """

    if per_call and per_call != DEFAULT_MODEL_SENTINEL:
        return per_call
    custom = (custom_model or "").strip()
    if custom:
        return custom
    return default_model


def thinking_config(model: str, disable_thinking: bool) -> Dict[str, Any] | None:
    """Generation override that turns reasoning off for the thinking preview model."""

    if disable_thinking and model == THINKING_MODEL:
        return {"thinking_config": {"thinking_budget": 0}}
    return None


def direct_request(
    query: str,
    *,
    model: str | None = DEFAULT_MODEL_SENTINEL,
    attachments: Sequence[Attachment] = (),
) -> RequestSpec:
    """A query sent as-is, with nothing to diff against."""

    return RequestSpec(query=query, model=model, attachments=tuple(attachments))


def selection_request(
    selected: str,
    *,
    context: str | None = None,
    query: str = "",
    model: str | None = DEFAULT_MODEL_SENTINEL,
    attachments: Sequence[Attachment] = (),
) -> RequestSpec:
    """Prompt built straight from the selection: ``context, [query,] selection``."""

    body = f"{query}\n{selected}" if query else selected
    return RequestSpec(
        query=body,
        context=context or "",
        model=model,
        attachments=tuple(attachments),
        reference_text=selected,
    )


def form_request(
    query: str,
    *,
    context: str | None = None,
    selected: str | None = None,
    model: str | None = DEFAULT_MODEL_SENTINEL,
    attachments: Sequence[Attachment] = (),
) -> RequestSpec:
    """Prompt typed into the form.

    With a selection the form text is followed by it and the context
    template is not used; otherwise the context is separated from the
    query by a blank line.
    """

    if selected is not None:
        return RequestSpec(
            query=f"{query}\n{selected}",
            model=model,
            attachments=tuple(attachments),
            reference_text=selected,
        )
    return RequestSpec(
        query=query,
        context=context or "",
        model=model,
        attachments=tuple(attachments),
        context_separator="\n\n",
    )
