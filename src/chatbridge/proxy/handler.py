"""Request parsing and relaying to the Chatbot UI backend."""

from __future__ import annotations

import json
import logging
import math
from contextlib import aclosing, asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncGenerator, AsyncIterator

import httpx

from chatbridge.config import BridgeConfig
from chatbridge.errors import UpstreamError
from chatbridge.proxy.responses import format_models_list
from chatbridge.shapes import BackendShape, ChatbotUIShape

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1024
OUTBOUND_CONTENT_TYPE = "text/plain;charset=UTF-8"


@dataclass
class ChatCompletionRequest:
    """Parsed OpenAI chat completion request."""

    model: str
    messages: list[dict[str, str]]
    temperature: float = 0.0
    stream: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> "ChatCompletionRequest":
        """
        Parse request from JSON dict.

        Args:
            data: Raw request body as decoded JSON.

        Returns:
            Parsed ChatCompletionRequest.

        Raises:
            ValueError: If the body is not a usable chat completion request.
        """
        if not isinstance(data, dict):
            raise ValueError("request body must be a JSON object")
        if "messages" not in data:
            raise ValueError("'messages' is required")

        messages = data["messages"]
        if not isinstance(messages, list):
            raise ValueError("'messages' must be a list")
        if not messages:
            raise ValueError("'messages' must not be empty")
        for msg in messages:
            if not isinstance(msg, dict):
                raise ValueError("Each message must be an object")
            if msg.get("role") is not None and not isinstance(msg["role"], str):
                raise ValueError("Message 'role' must be a string")
            if msg.get("content") is not None and not isinstance(msg["content"], str):
                raise ValueError("Message 'content' must be a string")

        model = data.get("model") or ""
        if not isinstance(model, str):
            raise ValueError("'model' must be a string")

        temperature = data.get("temperature")
        if temperature is None:
            temperature = 0.0
        if isinstance(temperature, bool) or not isinstance(temperature, (int, float)):
            raise ValueError("'temperature' must be a number")
        try:
            temperature = float(temperature)
        except OverflowError as e:
            raise ValueError("'temperature' is out of range") from e
        if not math.isfinite(temperature):
            raise ValueError("'temperature' must be finite")

        stream = data.get("stream")
        if stream is None:
            stream = False
        if not isinstance(stream, bool):
            raise ValueError("'stream' must be a boolean")

        return cls(
            model=model,
            messages=[
                {"role": msg.get("role") or "", "content": msg.get("content") or ""}
                for msg in messages
            ],
            temperature=temperature,
            stream=stream,
        )


async def iter_chunks(
    source: AsyncIterator[bytes],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> AsyncIterator[bytes]:
    """
    Re-slice a byte stream into pieces of at most ``chunk_size`` bytes.

    Each piece is yielded as soon as it is available; nothing is held back
    waiting to fill a chunk.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    async for data in source:
        for start in range(0, len(data), chunk_size):
            yield data[start:start + chunk_size]


class RequestHandler:
    """
    Translates chat completion requests and relays them to the backend.

    Supports:
    - buffered completions, reshaped into the OpenAI response format
    - streamed completions, relayed as raw backend bytes
    - the fixed /v1/models listing
    """

    def __init__(
        self,
        config: BridgeConfig,
        shape: BackendShape | None = None,
        client: httpx.AsyncClient | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        """
        Initialize request handler.

        Args:
            config: Backend URL and cookie.
            shape: Backend request/response shape (default: Chatbot UI).
            client: HTTP client for backend calls. If None, creates one
                with no timeout.
            chunk_size: Max bytes per relayed stream chunk.
        """
        self.config = config
        self.shape = shape or ChatbotUIShape()
        self.client = client or httpx.AsyncClient(timeout=None)
        self.chunk_size = chunk_size

    def build_outbound(self, request: ChatCompletionRequest) -> bytes:
        """Serialize the translated backend request body."""
        return json.dumps(self.shape.to_outbound(request)).encode("utf-8")

    def _build_backend_request(self, request: ChatCompletionRequest) -> httpx.Request:
        return self.client.build_request(
            "POST",
            self.config.chatbot_ui_url,
            content=self.build_outbound(request),
            headers={
                "Content-Type": OUTBOUND_CONTENT_TYPE,
                "Cookie": self.config.cookie,
            },
        )

    async def handle_completion(
        self,
        request: ChatCompletionRequest,
    ) -> dict[str, Any]:
        """
        Handle non-streaming chat completion request.

        Args:
            request: Parsed completion request.

        Returns:
            OpenAI-compatible response dict.

        Raises:
            UpstreamError: If the backend can't be reached or read.
        """
        backend_request = self._build_backend_request(request)
        try:
            response = await self.client.send(backend_request)
        except httpx.HTTPError as e:
            raise UpstreamError(f"Backend request failed: {e}") from e

        logger.debug(f"Backend answered {response.status_code} ({len(response.content)} bytes)")
        return self.shape.translate_response(response.text)

    @asynccontextmanager
    async def open_stream(
        self,
        request: ChatCompletionRequest,
    ) -> AsyncIterator[AsyncGenerator[bytes, None]]:
        """
        Open a streaming backend call.

        Yields an iterator over raw backend bytes in chunks of at most
        ``chunk_size``. The bytes are not reshaped. The backend response is
        closed when the context exits.

        Raises:
            UpstreamError: If the backend can't be reached (on entry) or the
                body can't be read (while iterating).
        """
        backend_request = self._build_backend_request(request)
        try:
            response = await self.client.send(backend_request, stream=True)
        except httpx.HTTPError as e:
            raise UpstreamError(f"Backend request failed: {e}") from e

        logger.debug(f"Backend stream opened with status {response.status_code}")
        body = self._relay_body(response)
        try:
            yield body
        finally:
            # Relay generator first, then the backend response it reads from.
            await body.aclose()
            await response.aclose()

    async def _relay_body(self, response: httpx.Response) -> AsyncGenerator[bytes, None]:
        try:
            async with aclosing(iter_chunks(response.aiter_bytes(), self.chunk_size)) as chunks:
                async for chunk in chunks:
                    yield chunk
        except httpx.HTTPError as e:
            raise UpstreamError(f"Backend stream failed: {e}") from e

    async def handle_models(self) -> dict[str, Any]:
        """
        Return the advertised model list.

        Returns:
            OpenAI-compatible /v1/models response.
        """
        return format_models_list()

    async def aclose(self) -> None:
        """Close the backend HTTP client."""
        await self.client.aclose()
