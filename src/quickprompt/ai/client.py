"""Async Gemini client built on the OpenAI-compatible endpoint."""

from __future__ import annotations

import inspect
import json
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Mapping, Sequence

from openai import AsyncOpenAI
from openai.lib.streaming.chat import ChatCompletionStreamEvent
from openai.types.chat import ChatCompletionMessageParam

from .ai_types import Attachment, GenerationConfig, StreamCallback
from .errors import ResponseError

LOGGER = logging.getLogger(__name__)

GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
_REDACTED_BLOB_PREFIX = "data:"


@dataclass(slots=True)
class ClientSettings:
    """Subset of preferences required to configure the Gemini client."""

    api_key: str
    model: str
    base_url: str = GEMINI_OPENAI_BASE_URL
    request_timeout: float | None = None
    default_headers: Mapping[str, str] | None = None
    debug_logging: bool = False


class GeminiClient:
    """Streams completions for a single prompt plus optional attachments.

    The client never retries: a failed request is terminal and is raised as
    :class:`~quickprompt.ai.errors.ResponseError` with its kind already
    classified.
    """

    def __init__(self, settings: ClientSettings, *, client: AsyncOpenAI | None = None) -> None:
        self._settings = settings
        self._client = client or self._build_client(settings)

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    async def stream_text(
        self,
        prompt: str,
        *,
        model: str | None = None,
        attachments: Sequence[Attachment] = (),
        generation_config: GenerationConfig | None = None,
    ) -> AsyncIterator[str]:
        """Yield response text chunks in arrival order."""

        payload = self._build_payload(
            prompt,
            model=model or self._settings.model,
            attachments=attachments,
            generation_config=generation_config,
        )
        LOGGER.debug(
            "Starting streamed completion via %s with %s attachment(s)",
            payload["model"],
            len(attachments),
        )
        if self._settings.debug_logging:
            self._log_prompt_payload(payload)

        try:
            async with self._client.chat.completions.stream(**payload) as stream:
                async for event in stream:
                    chunk = self._extract_delta(event)
                    if chunk is not None:
                        yield chunk
        except ResponseError:
            raise
        except Exception as exc:
            raise ResponseError.from_exception(exc) from exc

    async def ask(
        self,
        prompt: str,
        *,
        model: str | None = None,
        stream: StreamCallback | None = None,
        data: Sequence[Attachment] | None = None,
        generation_config: GenerationConfig | None = None,
    ) -> str:
        """Send ``prompt`` and return the full response text.

        ``stream`` is invoked once per chunk before this coroutine resolves.
        """

        parts: List[str] = []
        async for chunk in self.stream_text(
            prompt,
            model=model,
            attachments=tuple(data or ()),
            generation_config=generation_config,
        ):
            parts.append(chunk)
            if stream is not None:
                stream(chunk)
        return "".join(parts)

    def _build_client(self, settings: ClientSettings) -> AsyncOpenAI:
        headers = dict(settings.default_headers) if settings.default_headers else None
        return AsyncOpenAI(
            api_key=settings.api_key,
            base_url=settings.base_url,
            timeout=settings.request_timeout,
            max_retries=0,
            default_headers=headers,
        )

    def _build_payload(
        self,
        prompt: str,
        *,
        model: str,
        attachments: Sequence[Attachment],
        generation_config: GenerationConfig | None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": model,
            "messages": [self._build_user_message(prompt, attachments)],
        }
        if generation_config:
            # Gemini reads vendor options from a nested extra_body object.
            payload["extra_body"] = {"extra_body": {"google": dict(generation_config)}}
        return payload

    @staticmethod
    def _build_user_message(prompt: str, attachments: Sequence[Attachment]) -> ChatCompletionMessageParam:
        if not attachments:
            return {"role": "user", "content": prompt}
        content: List[Dict[str, Any]] = [{"type": "text", "text": prompt}]
        for attachment in attachments:
            content.append({"type": "image_url", "image_url": {"url": attachment.as_data_uri()}})
        return {"role": "user", "content": content}  # type: ignore[typeddict-item]

    @staticmethod
    def _extract_delta(event: ChatCompletionStreamEvent[Any]) -> str | None:
        if getattr(event, "type", None) != "content.delta":
            return None
        delta_text = getattr(event, "delta", None)
        if delta_text:
            return str(delta_text)
        return None

    def _log_prompt_payload(self, payload: Mapping[str, Any]) -> None:
        try:
            serialized = json.dumps(_redact_blobs(payload), ensure_ascii=False, indent=2)
        except (TypeError, ValueError):
            LOGGER.debug("Gemini prompt payload (unserializable): %s", payload.get("model"))
        else:
            LOGGER.debug("Gemini prompt payload:\n%s", serialized)

    async def aclose(self) -> None:
        """Close the underlying OpenAI client to release network resources."""

        close = getattr(self._client, "close", None)
        if close is None:
            return
        result = close()
        if inspect.isawaitable(result):
            await result


def _redact_blobs(payload: Any) -> Any:
    if isinstance(payload, Mapping):
        return {key: _redact_blobs(value) for key, value in payload.items()}
    if isinstance(payload, list):
        return [_redact_blobs(item) for item in payload]
    if isinstance(payload, str) and payload.startswith(_REDACTED_BLOB_PREFIX):
        return f"<{len(payload)} chars redacted>"
    return payload
