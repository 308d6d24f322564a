"""Base backend shape interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from chatbridge.proxy.handler import ChatCompletionRequest


class EmptyMessagesError(ValueError):
    """Raised when a request carries no messages to translate."""


class BackendShape(ABC):
    """
    Abstract base class for backend request/response shapes.

    A shape maps an OpenAI-style chat completion request onto the body a
    particular backend expects, and maps the backend's buffered reply back
    into an OpenAI-style response. Streamed replies bypass the shape and are
    relayed as raw bytes.
    """

    name: str = "base"
    stream_content_type: str = "application/octet-stream"

    @abstractmethod
    def to_outbound(self, request: ChatCompletionRequest) -> dict[str, Any]:
        """
        Translate an inbound request into the backend request body.

        Args:
            request: Parsed inbound chat completion request.

        Returns:
            JSON-serializable backend request body.

        Raises:
            EmptyMessagesError: If the request has no messages.
        """
        pass

    @abstractmethod
    def to_inbound(self, content: str) -> dict[str, Any]:
        """
        Wrap backend text in the inbound response shape.

        Args:
            content: Assistant text returned by the backend.

        Returns:
            OpenAI-style chat completion response dict.
        """
        pass

    def extract_content(self, body: str) -> str:
        """Pull the assistant text out of a buffered backend body."""
        return body

    def translate_response(self, body: str) -> dict[str, Any]:
        """Convenience wrapper: extract_content followed by to_inbound."""
        return self.to_inbound(self.extract_content(body))
