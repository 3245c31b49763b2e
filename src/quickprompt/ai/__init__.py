"""Gemini client and error classification."""

from .ai_types import Attachment
from .client import ClientSettings, GeminiClient
from .errors import ErrorKind, ResponseError, classify_error

__all__ = [
    "Attachment",
    "ClientSettings",
    "ErrorKind",
    "GeminiClient",
    "ResponseError",
    "classify_error",
]
