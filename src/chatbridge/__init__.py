"""
ChatBridge - OpenAI-compatible front end for a Chatbot UI backend

Translates chat completion requests into Chatbot UI requests and relays the replies.
"""

from chatbridge.config import BridgeConfig, ServerConfig, load_config
from chatbridge.errors import ChatBridgeError, ConfigError, UpstreamError
from chatbridge.shapes import BackendShape, ChatbotUIShape

__version__ = "0.1.0"

__all__ = [
    "BackendShape",
    "BridgeConfig",
    "ChatBridgeError",
    "ChatbotUIShape",
    "ConfigError",
    "ServerConfig",
    "UpstreamError",
    "load_config",
]
