"""OpenAI-compatible response formatting."""

from __future__ import annotations

from typing import Any

# Advertised by /v1/models; clients only need one entry to populate a picker.
ADVERTISED_MODEL: dict[str, Any] = {
    "id": "gpt-4o",
    "object": "model",
    "created": 1686935002,
    "owned_by": "openai",
}

INVALID_REQUEST_MESSAGE = "Invalid request payload"
UPSTREAM_FAILURE_MESSAGE = "Failed to get response from third-party API"


def format_error(message: str, status_code: int = 400) -> tuple[dict[str, Any], int]:
    """
    Format an error response.

    Args:
        message: Human-readable error message.
        status_code: HTTP status code.

    Returns:
        Tuple of (error response dict, HTTP status code).
    """
    return {"error": message}, status_code


def format_models_list() -> dict[str, Any]:
    """
    Format the fixed models list response in OpenAI format.

    Returns:
        OpenAI-compatible models list response.
    """
    return {
        "object": "list",
        "data": [dict(ADVERTISED_MODEL)],
    }
