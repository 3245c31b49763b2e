"""Shared value types for the Gemini client and orchestration layers."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any, Callable, Mapping

__all__ = ["Attachment", "GenerationConfig", "StreamCallback", "DEFAULT_MIME_TYPE"]

DEFAULT_MIME_TYPE = "application/octet-stream"

StreamCallback = Callable[[str | None], None]
GenerationConfig = Mapping[str, Any]


@dataclass(slots=True, frozen=True)
class Attachment:
    """Raw bytes forwarded alongside a prompt."""

    data: bytes
    mime_type: str = DEFAULT_MIME_TYPE
    name: str | None = None

    @property
    def size(self) -> int:
        return len(self.data)

    def as_data_uri(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"
