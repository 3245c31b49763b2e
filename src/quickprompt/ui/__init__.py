"""Host adapters for running commands outside the launcher."""

from .console import ConsoleClipboard, ConsoleLauncher, ConsoleNotifier, ConsoleView, StaticSelection

__all__ = ["ConsoleClipboard", "ConsoleLauncher", "ConsoleNotifier", "ConsoleView", "StaticSelection"]
