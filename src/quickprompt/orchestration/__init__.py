"""Response orchestration: request building, streaming, and the command flow."""

from .orchestrator import ResponseOrchestrator, ResponseOutcome
from .ports import FormState, ResponseView, SelectionProvider
from .prompt import RequestSpec, resolve_model, thinking_config
from .session import CommandArguments, CommandOptions, CommandSession, Page, SessionAction
from .stream import StreamAggregator, StreamState

__all__ = [
    "CommandArguments",
    "CommandOptions",
    "CommandSession",
    "FormState",
    "Page",
    "RequestSpec",
    "ResponseOrchestrator",
    "ResponseOutcome",
    "ResponseView",
    "SelectionProvider",
    "SessionAction",
    "StreamAggregator",
    "StreamState",
    "resolve_model",
    "thinking_config",
]
