"""Backend request/response shapes."""

from chatbridge.shapes.base import BackendShape, EmptyMessagesError
from chatbridge.shapes.chatbot_ui import ChatbotUIShape

SHAPES: dict[str, type[BackendShape]] = {
    ChatbotUIShape.name: ChatbotUIShape,
}


def get_shape(name: str) -> BackendShape:
    """
    Look up a backend shape by name.

    Raises:
        KeyError: If no shape is registered under ``name``.
    """
    return SHAPES[name]()


__all__ = [
    "BackendShape",
    "ChatbotUIShape",
    "EmptyMessagesError",
    "SHAPES",
    "get_shape",
]
