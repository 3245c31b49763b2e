"""Shared test helpers and stub classes.

Import from here instead of duplicating these fakes in individual test files.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from quickprompt.ai.ai_types import Attachment, GenerationConfig, StreamCallback


@dataclass
class ScriptedAskClient:
    """Transport stub that replays ``chunks`` through the stream callback.

    When ``error`` is set it is raised after the chunks have been delivered.
    """

    chunks: Sequence[str | None] = ("Hello", " world")
    error: BaseException | None = None
    calls: list[dict[str, Any]] = field(default_factory=list)

    async def ask(
        self,
        prompt: str,
        *,
        model: str | None = None,
        stream: StreamCallback | None = None,
        data: Sequence[Attachment] | None = None,
        generation_config: GenerationConfig | None = None,
    ) -> str:
        self.calls.append(
            {
                "prompt": prompt,
                "model": model,
                "data": tuple(data or ()),
                "generation_config": generation_config,
            }
        )
        for chunk in self.chunks:
            if stream is not None:
                stream(chunk)
        if self.error is not None:
            raise self.error
        return "".join(chunk for chunk in self.chunks if chunk)


@dataclass
class RecordingView:
    """Response view that remembers every update."""

    markdown: str = ""
    loading: bool | None = None
    updates: list[str] = field(default_factory=list)
    loading_changes: list[bool] = field(default_factory=list)
    forms: list[Any] = field(default_factory=list)
    details: int = 0

    def show_detail(self) -> None:
        self.details += 1

    def set_markdown(self, text: str) -> None:
        self.markdown = text
        self.updates.append(text)

    def set_loading(self, loading: bool) -> None:
        self.loading = loading
        self.loading_changes.append(loading)

    def show_form(self, form: Any) -> None:
        self.forms.append(form)


class FakeSelection:
    """Selection provider returning ``text`` or raising ``error``."""

    def __init__(self, text: str | None = None, *, error: Exception | None = None) -> None:
        self._text = text
        self._error = error
        self.calls = 0

    async def get_selected_text(self) -> str:
        self.calls += 1
        if self._error is not None:
            raise self._error
        return self._text or ""


@dataclass
class RecordingLauncher:
    launches: list[tuple[str, Any]] = field(default_factory=list)

    async def launch_command(self, name: str, *, context: Any = None) -> None:
        self.launches.append((name, context))


@dataclass
class RecordingClipboard:
    copied: list[str] = field(default_factory=list)
    pasted: list[str] = field(default_factory=list)

    def copy(self, text: str) -> None:
        self.copied.append(text)

    def paste(self, text: str) -> None:
        self.pasted.append(text)
