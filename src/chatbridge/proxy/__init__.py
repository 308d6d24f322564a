"""ChatBridge HTTP proxy server - OpenAI-compatible API."""

from chatbridge.proxy.server import ChatBridgeProxyServer
from chatbridge.proxy.handler import ChatCompletionRequest, RequestHandler, iter_chunks
from chatbridge.proxy.responses import format_error, format_models_list

__all__ = [
    "ChatBridgeProxyServer",
    "ChatCompletionRequest",
    "RequestHandler",
    "format_error",
    "format_models_list",
    "iter_chunks",
]
