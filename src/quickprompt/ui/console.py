"""Terminal implementations of the host interfaces used by the CLI."""

from __future__ import annotations

import base64
import logging
import sys
from typing import Any, Callable, Mapping, TextIO

from ..ai.errors import QuickPromptError, SelectionUnavailableError
from ..orchestration.ports import FormState
from ..services.notifications import Toast, ToastStyle

__all__ = ["ConsoleClipboard", "ConsoleLauncher", "ConsoleNotifier", "ConsoleView", "StaticSelection"]

LOGGER = logging.getLogger(__name__)

_TOAST_MARKERS = {
    ToastStyle.ANIMATED: "…",
    ToastStyle.SUCCESS: "✓",
    ToastStyle.FAILURE: "✗",
}


class ConsoleView:
    """Writes the response to a text stream as it grows.

    Streamed updates only extend what is already printed. When the final
    text diverges from the streamed buffer (a rendered diff or an error
    body) it is printed again in full below a separator.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stdout
        self._shown = ""
        self._open_line = False

    @property
    def shown(self) -> str:
        return self._shown

    def set_markdown(self, text: str) -> None:
        if not text:
            self._shown = ""
            return
        if text.startswith(self._shown):
            self._write(text[len(self._shown):])
        else:
            if self._shown:
                self._write("\n\n---\n\n")
            self._write(text)
        self._shown = text

    def show_detail(self) -> None:
        if self._open_line:
            self._write("\n")

    def set_loading(self, loading: bool) -> None:
        if not loading and self._open_line:
            self._write("\n")
            self._open_line = False

    def show_form(self, form: FormState) -> None:
        if form.selected_text:
            self._write(f"Selected text:\n{form.selected_text}\n\n")
            self._open_line = False

    def _write(self, text: str) -> None:
        if not text:
            return
        self._stream.write(text)
        self._stream.flush()
        self._open_line = not text.endswith("\n")


class ConsoleNotifier:
    """Prints toasts as single status lines, on stderr by default."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stderr

    def show_toast(self, toast: Toast) -> None:
        marker = _TOAST_MARKERS.get(toast.style, "-")
        line = f"{marker} {toast.title}"
        if toast.message:
            line = f"{line} ({toast.message})"
        self._stream.write(line + "\n")
        self._stream.flush()


class StaticSelection:
    """Selection provider returning text captured up front (flag or stdin)."""

    def __init__(self, text: str | None) -> None:
        self._text = text

    async def get_selected_text(self) -> str:
        if self._text is None:
            raise SelectionUnavailableError("No selected text was provided")
        return self._text


class ConsoleClipboard:
    """Clipboard over the terminal.

    ``copy`` emits an OSC 52 sequence so the terminal places the text on
    the system clipboard. ``paste`` writes the text to the output stream,
    which is where a piped invocation's caller reads it from.
    """

    def __init__(self, stream: TextIO | None = None, *, terminal: TextIO | None = None) -> None:
        self._stream = stream or sys.stdout
        self._terminal = terminal or sys.stderr

    def copy(self, text: str) -> None:
        encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
        self._terminal.write(f"\x1b]52;c;{encoded}\x07")
        self._terminal.flush()
        LOGGER.debug("Copied %d characters to the clipboard", len(text))

    def paste(self, text: str) -> None:
        self._stream.write(text)
        if not text.endswith("\n"):
            self._stream.write("\n")
        self._stream.flush()


class ConsoleLauncher:
    """Dispatches launcher hand-offs to handlers registered by name."""

    def __init__(self, handlers: Mapping[str, Callable[[Mapping[str, Any] | None], None]] | None = None) -> None:
        self._handlers = dict(handlers or {})

    async def launch_command(self, name: str, *, context: Mapping[str, Any] | None = None) -> None:
        handler = self._handlers.get(name)
        if handler is None:
            raise QuickPromptError(f"Command {name!r} is not available in the terminal")
        LOGGER.debug("Launching %s", name)
        handler(context)
