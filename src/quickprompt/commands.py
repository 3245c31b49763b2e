"""Launcher commands: parameter bindings over :class:`CommandSession`."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Mapping, Sequence

from .ai.ai_types import Attachment
from .orchestration.orchestrator import AskClient, ResponseOrchestrator
from .orchestration.ports import Clipboard, Launcher, ResponseView, SelectionProvider
from .orchestration.session import CommandArguments, CommandOptions, CommandSession
from .services.history import HistorySink
from .services.notifications import Notifier
from .services.settings import Preferences

__all__ = [
    "COMMANDS",
    "TranslateArguments",
    "ask_about_selected_text",
    "build_session",
    "comment",
    "explain",
    "translate",
    "translation_context",
]


def _selection_options(preferences: Preferences, name: str, *, allow_paste: bool) -> CommandOptions:
    return CommandOptions(
        context=preferences.prompt_for(name),
        model=preferences.model_for(name),
        allow_paste=allow_paste,
        use_selected=True,
        show_diff=preferences.show_diff,
        disable_thinking=preferences.disable_thinking,
    )


def ask_about_selected_text(preferences: Preferences, arguments: CommandArguments) -> CommandOptions:
    return _selection_options(preferences, "askAboutSelectedText", allow_paste=True)


def comment(preferences: Preferences, arguments: CommandArguments) -> CommandOptions:
    return _selection_options(preferences, "comment", allow_paste=True)


def explain(preferences: Preferences, arguments: CommandArguments) -> CommandOptions:
    return _selection_options(preferences, "explain", allow_paste=False)


def translation_context(preferences: Preferences, target_language: str | None = None) -> str:
    """Instruction prefix for the translate command.

    Without an explicit target the text goes to the default language, or to
    the second language when it is already in the default one.
    """

    prompt = preferences.prompt_for("translate")
    if target_language:
        return f"Translate following text to {target_language}. {prompt}"
    default_language = preferences.default_target_language
    return (
        f"If the following text is in {default_language} then translate it to "
        f"{preferences.second_target_language}, otherwise Translate following text to "
        f"{default_language}. {prompt}"
    )


@dataclass(slots=True, frozen=True)
class TranslateArguments(CommandArguments):
    target_language: str | None = None


def translate(preferences: Preferences, arguments: CommandArguments) -> CommandOptions:
    target = getattr(arguments, "target_language", None)
    options = _selection_options(preferences, "translate", allow_paste=True)
    return replace(options, context=translation_context(preferences, target))


CommandFactory = Callable[[Preferences, CommandArguments], CommandOptions]

COMMANDS: Mapping[str, CommandFactory] = {
    "askAboutSelectedText": ask_about_selected_text,
    "comment": comment,
    "explain": explain,
    "translate": translate,
}


def build_session(
    name: str,
    arguments: CommandArguments,
    preferences: Preferences,
    *,
    client: AskClient,
    notifier: Notifier,
    history: HistorySink,
    selection: SelectionProvider | None = None,
    view: ResponseView | None = None,
    launcher: Launcher | None = None,
    clipboard: Clipboard | None = None,
    attachments: Sequence[Attachment] = (),
) -> CommandSession:
    """Wire a command's options into a ready-to-start session."""

    try:
        factory = COMMANDS[name]
    except KeyError as exc:
        raise ValueError(f"Unknown command {name!r}; expected one of {sorted(COMMANDS)}") from exc
    options = factory(preferences, arguments)
    if attachments:
        options = replace(options, buffer=tuple(attachments))
    orchestrator = ResponseOrchestrator(
        client,
        preferences,
        notifier=notifier,
        history=history,
        show_diff=options.show_diff,
        disable_thinking=options.disable_thinking,
    )
    return CommandSession(
        arguments,
        options,
        orchestrator=orchestrator,
        notifier=notifier,
        selection=selection,
        view=view,
        launcher=launcher,
        clipboard=clipboard,
    )
