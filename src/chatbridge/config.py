"""Configuration for ChatBridge."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from chatbridge.errors import ConfigError

REQUIRED_KEYS = ("chatbot_ui_url", "cookie")


@dataclass(frozen=True)
class BridgeConfig:
    """Backend connection settings, read once at startup."""

    chatbot_ui_url: str  # Chatbot UI chat endpoint
    cookie: str  # Sent verbatim as the Cookie header

    def __repr__(self) -> str:
        return f"BridgeConfig(chatbot_ui_url={self.chatbot_ui_url!r}, cookie=<{len(self.cookie)} chars>)"


@dataclass
class ServerConfig:
    """Configuration for the proxy server."""

    host: str = "0.0.0.0"
    port: int = 8080
    read_timeout: float = 30.0  # Inbound request head only
    max_request_size: int = 10 * 1024 * 1024  # 10MB
    chunk_size: int = 1024  # Max bytes per relayed stream chunk


def load_config(path: str | Path) -> BridgeConfig:
    """
    Load backend configuration from a JSON file.

    Args:
        path: Path to JSON config file.

    Returns:
        Parsed BridgeConfig.

    Raises:
        ConfigError: If the file can't be read, isn't valid JSON, or lacks
            a required string field.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")

    for key in REQUIRED_KEYS:
        if key not in data:
            raise ConfigError(f"Config file {path} is missing '{key}'")
        if not isinstance(data[key], str):
            raise ConfigError(f"'{key}' in {path} must be a string")

    return BridgeConfig(
        chatbot_ui_url=data["chatbot_ui_url"],
        cookie=data["cookie"],
    )
