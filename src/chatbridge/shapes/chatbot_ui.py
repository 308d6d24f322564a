"""Chatbot UI backend shape."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from chatbridge.shapes.base import BackendShape, EmptyMessagesError

if TYPE_CHECKING:
    from chatbridge.proxy.handler import ChatCompletionRequest

# Sent regardless of the inbound model field
CHATBOT_UI_MODEL = "gpt-4o"
CONTEXT_LENGTH = 4096
EMBEDDINGS_PROVIDER = "openai"


class ChatbotUIShape(BackendShape):
    """
    Shape for the Chatbot UI ``/api/chat`` endpoint.

    The backend takes a ``chatSettings`` block plus the full message list,
    and answers with plain text (streamed or not).

    Example:
        >>> shape = ChatbotUIShape()
        >>> shape.to_inbound("hello")["choices"][0]["message"]
        {'role': 'assistant', 'content': 'hello'}
    """

    name = "chatbot-ui"
    stream_content_type = "text/plain; charset=utf-8"

    def to_outbound(self, request: ChatCompletionRequest) -> dict[str, Any]:
        if not request.messages:
            raise EmptyMessagesError("at least one message is required")

        return {
            "chatSettings": {
                "model": CHATBOT_UI_MODEL,
                "prompt": request.messages[0].get("content", ""),
                "temperature": request.temperature,
                "contextLength": CONTEXT_LENGTH,
                "includeProfileContext": True,
                "includeWorkspaceInstructions": True,
                "embeddingsProvider": EMBEDDINGS_PROVIDER,
            },
            "messages": [
                {"role": msg["role"], "content": msg.get("content", "")}
                for msg in request.messages
            ],
            "customModelId": "",
        }

    def to_inbound(self, content: str) -> dict[str, Any]:
        return {
            "choices": [
                {
                    "message": {
                        "role": "assistant",
                        "content": content,
                    },
                }
            ],
        }

    def extract_content(self, body: str) -> str:
        """
        Return the assistant text from a buffered backend body.

        A JSON object with a string ``content`` field yields that field;
        any other body is returned verbatim.
        """
        try:
            data = json.loads(body)
        except ValueError:
            return body
        if isinstance(data, dict) and isinstance(data.get("content"), str):
            return data["content"]
        return body
