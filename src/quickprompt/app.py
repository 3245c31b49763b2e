"""Command line entry point for running prompt commands from a terminal."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, TextIO, get_args, get_origin, get_type_hints

from .ai.client import ClientSettings, GeminiClient
from .commands import COMMANDS, TranslateArguments, build_session
from .orchestration.session import HISTORY_COMMAND, CommandArguments, CommandSession, Page, SessionAction
from .services.attachments import load_attachments
from .services.history import CommandHistoryStore
from .services.settings import Preferences, PreferencesStore, redact_secret
from .ui.console import ConsoleClipboard, ConsoleLauncher, ConsoleNotifier, ConsoleView, StaticSelection
from .utils import logging as logging_utils

_LOGGER = logging.getLogger(__name__)
_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
_FALSE_VALUES = {"0", "false", "no", "off", "disabled"}
_TTY_PATH = "/dev/tty"


def configure_logging(debug: bool = False) -> None:
    level = logging.DEBUG if debug else logging.INFO
    log_path = logging_utils.setup_logging(level)
    _LOGGER.debug("Logging to %s (level=%s)", log_path, logging.getLevelName(level))


def load_preferences(
    path: Optional[Path] = None,
    *,
    store: PreferencesStore | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Preferences:
    """Load persisted preferences or fall back to defaults."""

    active_store = store or PreferencesStore(path)
    try:
        return active_store.load(overrides=overrides)
    except (OSError, ValueError) as exc:
        _LOGGER.warning("Failed to load preferences from %s: %s", active_store.path, exc)
        return Preferences()


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point invoked by the ``quickprompt`` console script."""

    args = _parse_cli_args(argv)
    debug = logging_utils.debug_enabled()
    configure_logging(debug)

    settings_path = args.settings_path or os.environ.get("QUICKPROMPT_SETTINGS_PATH")
    resolved_path = Path(settings_path).expanduser() if settings_path else None
    store = PreferencesStore(resolved_path)
    try:
        cli_overrides = _coerce_cli_overrides(args.overrides or [])
    except ValueError as exc:
        print(f"Invalid --set override: {exc}", file=sys.stderr)
        return 2

    preferences = load_preferences(resolved_path, store=store, overrides=cli_overrides or None)
    if logging_utils.debug_enabled(preferences.debug_logging) and not debug:
        configure_logging(True)

    if args.dump_settings:
        _dump_preferences(preferences, store, overrides=cli_overrides)
        return 0

    history_path = resolved_path.with_name("history.json") if resolved_path else None
    history = CommandHistoryStore(history_path, limit=preferences.history_limit)
    if args.show_history:
        _print_history(history)
        return 0

    if not args.command:
        print("A command is required (see --help).", file=sys.stderr)
        return 2
    if not preferences.api_key:
        print("No API key configured; set QUICKPROMPT_API_KEY or use --set api_key=...", file=sys.stderr)
        return 2

    return asyncio.run(_run_command(args, preferences, history))


async def _run_command(args: argparse.Namespace, preferences: Preferences, history: CommandHistoryStore) -> int:
    client = GeminiClient(
        ClientSettings(
            api_key=preferences.api_key,
            model=preferences.model,
            base_url=preferences.base_url,
            request_timeout=preferences.request_timeout,
            debug_logging=preferences.debug_logging,
        )
    )
    query = " ".join(args.query).strip()
    if args.command == "translate":
        arguments: CommandArguments = TranslateArguments(query=query, target_language=args.language)
    else:
        arguments = CommandArguments(query=query)

    session = build_session(
        args.command,
        arguments,
        preferences,
        client=client,
        notifier=ConsoleNotifier(),
        history=history,
        selection=StaticSelection(_read_selection(args)),
        view=ConsoleView(),
        launcher=ConsoleLauncher({HISTORY_COMMAND: lambda _context: _print_history(history)}),
        clipboard=ConsoleClipboard(),
        attachments=load_attachments(args.files),
    )
    try:
        outcome = await session.start()
        if session.page is Page.FORM:
            prompt = _read_form_prompt()
            if prompt is None:
                return 1
            outcome = await session.submit_form(prompt)
        if outcome is not None and outcome.ok:
            await _run_followups(session, args)
    finally:
        await client.aclose()
    return 0 if outcome is not None and outcome.ok else 1


async def _run_followups(session: CommandSession, args: argparse.Namespace) -> None:
    available = session.actions()
    if args.copy and SessionAction.COPY in available:
        session.copy()
    if args.then_history and SessionAction.VIEW_HISTORY in available:
        await session.view_history()


def _read_selection(args: argparse.Namespace) -> str | None:
    if args.selection is not None:
        return args.selection
    if not sys.stdin.isatty():
        return sys.stdin.read()
    return None


def _read_form_prompt() -> str | None:
    """Ask for the form prompt, from the controlling terminal when stdin is piped."""

    if sys.stdin.isatty():
        try:
            return input("Prompt: ")
        except EOFError:
            return None
    # Piped stdin already carried the selection.
    try:
        with open(_TTY_PATH, encoding="utf-8") as terminal:
            sys.stderr.write("Prompt: ")
            sys.stderr.flush()
            line = terminal.readline()
    except OSError as exc:
        _LOGGER.debug("Cannot open %s: %s", _TTY_PATH, exc)
        print("No terminal available to read the prompt; pass the query as an argument.", file=sys.stderr)
        return None
    if not line:
        return None
    return line.rstrip("\r\n")


def _parse_cli_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="quickprompt",
        description="Send selected or typed text to Gemini and stream the response.",
    )
    parser.add_argument("command", nargs="?", choices=sorted(COMMANDS), help="Command to run.")
    parser.add_argument("query", nargs="*", help="Optional query text.")
    parser.add_argument(
        "--selection",
        metavar="TEXT",
        help="Text to treat as the current selection (defaults to piped stdin).",
    )
    parser.add_argument(
        "--file",
        dest="files",
        metavar="PATH",
        action="append",
        default=[],
        help="Attach a file to the request (repeatable). Missing paths are ignored.",
    )
    parser.add_argument("--language", help="Target language for the translate command.")
    parser.add_argument(
        "--copy",
        action="store_true",
        help="Copy the finished response to the clipboard (OSC 52 terminals).",
    )
    parser.add_argument(
        "--then-history",
        action="store_true",
        help="Print the command history after a successful response.",
    )
    parser.add_argument(
        "--show-history",
        action="store_true",
        help="Print recorded exchanges, newest first, and exit.",
    )
    parser.add_argument(
        "--dump-settings",
        action="store_true",
        help="Print the effective preferences (with secrets redacted) and exit.",
    )
    parser.add_argument(
        "--settings-path",
        metavar="PATH",
        help="Override the default ~/.quickprompt/preferences.json path.",
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        metavar="KEY=VALUE",
        action="append",
        default=[],
        help="Override persisted preferences for this run (repeatable).",
    )
    return parser.parse_args(argv)


def _coerce_cli_overrides(items: Sequence[str]) -> Dict[str, Any]:
    """Parse ``--set KEY=VALUE`` entries into typed preference overrides."""

    hints = get_type_hints(Preferences)
    overrides: Dict[str, Any] = {}
    for entry in items:
        key, separator, raw_value = entry.partition("=")
        key = key.strip()
        if not separator or not key:
            raise ValueError(f"Override '{entry}' must use KEY=VALUE syntax.")
        if key not in hints:
            raise ValueError(f"Unknown preference '{key}'.")
        overrides[key] = _coerce_value(key, hints[key], raw_value.strip())
    return overrides


def _coerce_value(key: str, annotation: Any, raw: str) -> Any:
    # Preferences fields are str, bool, int, float | None or dict[str, str].
    members = [arg for arg in get_args(annotation) if arg is not type(None)]
    if len(members) < len(get_args(annotation)):
        if raw.lower() in {"", "none", "null"}:
            return None
        annotation = members[0]
    if get_origin(annotation) is dict:
        return _parse_mapping(key, raw)
    if annotation is bool:
        return _parse_bool(raw)
    if annotation in (int, float):
        return annotation(raw)
    return raw


def _parse_mapping(key: str, raw: str) -> Dict[str, str]:
    try:
        payload = json.loads(raw or "{}")
    except json.JSONDecodeError as exc:
        raise ValueError(f"'{key}' expects a JSON object") from exc
    if not isinstance(payload, dict):
        raise ValueError(f"'{key}' expects a JSON object")
    return {str(name): str(value) for name, value in payload.items()}


def _parse_bool(value: str) -> bool:
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Cannot coerce '{value}' to a boolean.")


def _dump_preferences(
    preferences: Preferences,
    store: PreferencesStore,
    *,
    overrides: Mapping[str, Any],
    stream: TextIO | None = None,
) -> None:
    destination = stream or sys.stdout
    payload = asdict(preferences)
    payload["api_key"] = redact_secret(preferences.api_key)
    metadata = {
        "path": str(store.path),
        "log_path": str(logging_utils.get_log_path() or ""),
        "cli_overrides": sorted(overrides.keys()),
        "environment_variables": sorted(name for name in os.environ if name.startswith("QUICKPROMPT_")),
    }
    json.dump({"preferences": payload, "meta": metadata}, destination, indent=2)
    destination.write("\n")


def _print_history(history: CommandHistoryStore, stream: TextIO | None = None) -> None:
    destination = stream or sys.stdout
    entries = history.entries()
    if not entries:
        destination.write("No history yet.\n")
        return
    for entry in entries:
        stamp = datetime.fromtimestamp(entry.timestamp).strftime("%Y-%m-%d %H:%M")
        destination.write(f"[{stamp}] {entry.model}\n> {entry.query}\n{entry.response}\n\n")


if __name__ == "__main__":  # pragma: no cover - manual invocation
    raise SystemExit(main())
