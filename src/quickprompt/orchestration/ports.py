"""Host-facing interfaces the orchestration layer talks to."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol

__all__ = ["Clipboard", "FormState", "Launcher", "ResponseView", "SelectionProvider", "NullView"]


@dataclass(slots=True, frozen=True)
class FormState:
    """What the prompt form should show when it is opened."""

    selected_text: str = ""
    draft: str = ""
    show_file_picker: bool = True


class ResponseView(Protocol):
    """Live text sink for a single request.

    Hosts may also provide ``show_form(FormState)`` and ``show_detail()``;
    the session calls them when present.
    """

    def set_markdown(self, text: str) -> None:  # pragma: no cover - protocol stub
        ...

    def set_loading(self, loading: bool) -> None:  # pragma: no cover - protocol stub
        ...


class SelectionProvider(Protocol):
    """Reads the text currently selected in the frontmost application.

    Implementations raise when no selection can be obtained.
    """

    async def get_selected_text(self) -> str:  # pragma: no cover - protocol stub
        ...


class Launcher(Protocol):
    """Opens another launcher command, optionally handing it context."""

    async def launch_command(
        self, name: str, *, context: Mapping[str, Any] | None = None
    ) -> None:  # pragma: no cover - protocol stub
        ...


class Clipboard(Protocol):
    def copy(self, text: str) -> None:  # pragma: no cover - protocol stub
        ...

    def paste(self, text: str) -> None:  # pragma: no cover - protocol stub
        ...


class NullView:
    """View that discards everything; used when no live rendering is wanted."""

    def set_markdown(self, text: str) -> None:
        return None

    def set_loading(self, loading: bool) -> None:
        return None
