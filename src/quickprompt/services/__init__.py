"""Service layer helpers (preferences, history, attachments, notifications)."""

from .attachments import load_attachments
from .history import CommandHistoryStore, HistoryEntry, HistorySink, InMemoryHistory
from .notifications import InMemoryNotifier, Notifier, Toast, ToastStyle
from .settings import Preferences, PreferencesStore, SecretVault

__all__ = [
    "CommandHistoryStore",
    "HistoryEntry",
    "HistorySink",
    "InMemoryHistory",
    "InMemoryNotifier",
    "Notifier",
    "Preferences",
    "PreferencesStore",
    "SecretVault",
    "Toast",
    "ToastStyle",
    "load_attachments",
]
