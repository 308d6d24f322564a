"""Exceptions raised by ChatBridge."""

from __future__ import annotations


class ChatBridgeError(Exception):
    """Base class for ChatBridge errors."""


class ConfigError(ChatBridgeError):
    """Configuration file is missing, unreadable or malformed."""


class UpstreamError(ChatBridgeError):
    """The Chatbot UI backend could not be reached or its body could not be read."""
