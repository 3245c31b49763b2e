"""Command session: the page flow shared by every prompt command.

A session starts either on the prompt form or straight in the response
view, depending on whether a query argument was supplied and whether the
command works on the current selection. Every request it issues goes
through :class:`~quickprompt.orchestration.orchestrator.ResponseOrchestrator`.

Requests are not cancelled when a new one starts. Each request is tagged
with a generation number and only the newest generation may write to the
view; an older stream keeps running and still records history when it
succeeds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Sequence

from ..ai.ai_types import Attachment
from ..services.attachments import load_attachments
from ..services.notifications import Notifier, Toast, ToastStyle
from ..services.settings import DEFAULT_MODEL_SENTINEL
from .orchestrator import ResponseOrchestrator, ResponseOutcome
from .ports import Clipboard, FormState, Launcher, ResponseView, SelectionProvider
from .prompt import RequestSpec, direct_request, form_request, selection_request

__all__ = [
    "CHAT_COMMAND",
    "HISTORY_COMMAND",
    "CommandArguments",
    "CommandOptions",
    "CommandSession",
    "Page",
    "SessionAction",
]

LOGGER = logging.getLogger(__name__)

CHAT_COMMAND = "aiChat"
HISTORY_COMMAND = "history"


class Page(Enum):
    FORM = "form"
    DETAIL = "detail"


class SessionAction(Enum):
    SUBMIT = "submit"
    APPEND_SELECTED_TEXT = "append_selected_text"
    PASTE = "paste"
    COPY = "copy"
    CONTINUE_IN_CHAT = "continue_in_chat"
    VIEW_HISTORY = "view_history"


@dataclass(slots=True, frozen=True)
class CommandArguments:
    """Launcher arguments: the typed query, or text the launcher fell back to."""

    query: str | None = None
    fallback_text: str | None = None

    @property
    def effective_query(self) -> str:
        return self.query or self.fallback_text or ""


@dataclass(slots=True, frozen=True)
class CommandOptions:
    """Per-command bindings over the shared flow."""

    context: str | None = None
    model: str | None = DEFAULT_MODEL_SENTINEL
    allow_paste: bool = False
    use_selected: bool = False
    show_diff: bool = False
    disable_thinking: bool = False
    buffer: tuple[Attachment, ...] = ()


class _RequestView:
    """Forwards view writes for one request while it is the newest one."""

    def __init__(self, session: "CommandSession", generation: int) -> None:
        self._session = session
        self._generation = generation

    @property
    def is_current(self) -> bool:
        return self._session.generation == self._generation

    def set_markdown(self, text: str) -> None:
        if self.is_current:
            self._session._set_markdown(text)
        else:
            LOGGER.debug("Dropping output from superseded request %d", self._generation)

    def set_loading(self, loading: bool) -> None:
        if self.is_current:
            self._session._set_loading(loading)


class CommandSession:
    """State machine behind a prompt command's form and response pages."""

    def __init__(
        self,
        arguments: CommandArguments,
        options: CommandOptions,
        *,
        orchestrator: ResponseOrchestrator,
        notifier: Notifier,
        selection: SelectionProvider | None = None,
        view: ResponseView | None = None,
        launcher: Launcher | None = None,
        clipboard: Clipboard | None = None,
    ) -> None:
        self._arguments = arguments
        self._options = options
        self._orchestrator = orchestrator
        self._notifier = notifier
        self._selection = selection
        self._view = view
        self._launcher = launcher
        self._clipboard = clipboard

        self.page = Page.DETAIL
        self.markdown = ""
        self.is_loading = True
        self.selected_text: str | None = None
        self.draft = ""
        self.last_query = ""
        self.last_response = ""
        self.last_outcome: ResponseOutcome | None = None
        self.generation = 0

    @property
    def options(self) -> CommandOptions:
        return self._options

    @property
    def form_state(self) -> FormState:
        return FormState(
            selected_text=self.selected_text or "",
            draft=self.draft,
            show_file_picker=not self._options.buffer,
        )

    async def start(self) -> ResponseOutcome | None:
        """Run the launch flow; returns the outcome if a request was issued."""

        query = self._arguments.effective_query
        options = self._options
        if not options.use_selected:
            if not query:
                self._show_form()
                return None
            return await self._request(
                direct_request(query, model=options.model, attachments=options.buffer)
            )

        try:
            selected = await self._read_selection()
        except Exception as exc:
            LOGGER.warning("Selected text unavailable: %s", exc)
            self._notifier.show_toast(
                Toast(ToastStyle.FAILURE, "Could not get the selected text. Continue without it.")
            )
            if not query:
                self._show_form()
                return None
            return await self._request(
                direct_request(query, model=options.model, attachments=options.buffer)
            )

        if query:
            return await self._request(
                selection_request(
                    selected,
                    context=options.context,
                    query=query,
                    model=options.model,
                    attachments=options.buffer,
                )
            )
        self.selected_text = selected
        if not options.context:
            self._show_form()
            return None
        return await self._request(
            selection_request(selected, context=options.context, model=options.model, attachments=options.buffer)
        )

    async def submit_form(
        self, query: str, files: Iterable[str | Path] | None = None
    ) -> ResponseOutcome:
        """Send the form's prompt, with any picked files as attachments."""

        self.draft = query
        self._set_markdown("")
        attachments: Sequence[Attachment] = load_attachments(files) if files else ()
        if not attachments:
            attachments = self._options.buffer
        selected = self.selected_text if self._options.use_selected else None
        return await self._request(
            form_request(
                query,
                context=self._options.context,
                selected=selected,
                model=self._options.model,
                attachments=attachments,
            )
        )

    async def append_selected_text(self) -> str:
        """Append the current selection to the form draft."""

        try:
            selected = await self._read_selection()
        except Exception as exc:
            LOGGER.warning("Selected text unavailable: %s", exc)
            self._notifier.show_toast(Toast(ToastStyle.FAILURE, "Could not get the selected text"))
            return self.draft
        self.draft += selected
        return self.draft

    def actions(self) -> list[SessionAction]:
        if self.page is Page.FORM:
            return [SessionAction.SUBMIT, SessionAction.APPEND_SELECTED_TEXT]
        if self.is_loading:
            return []
        available: list[SessionAction] = []
        if self._options.allow_paste:
            available.append(SessionAction.PASTE)
        available.append(SessionAction.COPY)
        if self.last_query and self.last_response:
            available.append(SessionAction.CONTINUE_IN_CHAT)
        available.append(SessionAction.VIEW_HISTORY)
        return available

    def copy(self) -> None:
        self._require_clipboard().copy(self.markdown)

    def paste(self) -> None:
        if not self._options.allow_paste:
            raise RuntimeError("This command does not allow pasting the response")
        self._require_clipboard().paste(self.markdown)

    async def continue_in_chat(self) -> None:
        """Hand the last exchange to the chat command."""

        if not (self.last_query and self.last_response):
            raise RuntimeError("No completed response to continue in chat")
        await self._require_launcher().launch_command(
            CHAT_COMMAND,
            context={"query": self.last_query, "response": self.last_response, "creationName": ""},
        )

    async def view_history(self) -> None:
        await self._require_launcher().launch_command(HISTORY_COMMAND)

    async def _request(self, spec: RequestSpec) -> ResponseOutcome:
        self.generation += 1
        request_view = _RequestView(self, self.generation)
        self.last_query = spec.prompt
        self._show_detail()
        outcome = await self._orchestrator.acquire_response(spec, request_view)
        if request_view.is_current:
            self.last_outcome = outcome
            if outcome.ok:
                self.last_response = outcome.text
        return outcome

    async def _read_selection(self) -> str:
        if self._selection is None:
            raise RuntimeError("No selection provider configured")
        return await self._selection.get_selected_text()

    def _show_form(self) -> None:
        self.page = Page.FORM
        self.is_loading = False
        if self._view is not None:
            show_form = getattr(self._view, "show_form", None)
            if callable(show_form):
                show_form(self.form_state)

    def _show_detail(self) -> None:
        self.page = Page.DETAIL
        if self._view is not None:
            show_detail = getattr(self._view, "show_detail", None)
            if callable(show_detail):
                show_detail()

    def _set_markdown(self, text: str) -> None:
        self.markdown = text
        if self._view is not None:
            self._view.set_markdown(text)

    def _set_loading(self, loading: bool) -> None:
        self.is_loading = loading
        if self._view is not None:
            self._view.set_loading(loading)

    def _require_clipboard(self) -> Clipboard:
        if self._clipboard is None:
            raise RuntimeError("No clipboard configured")
        return self._clipboard

    def _require_launcher(self) -> Launcher:
        if self._launcher is None:
            raise RuntimeError("No launcher configured")
        return self._launcher
