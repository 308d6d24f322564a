"""OpenAI-compatible HTTP server for ChatBridge."""

from __future__ import annotations

import asyncio
import json
import logging
import signal
from http import HTTPStatus
from typing import Any

from chatbridge.config import BridgeConfig, ServerConfig
from chatbridge.errors import UpstreamError
from chatbridge.proxy.handler import ChatCompletionRequest, RequestHandler
from chatbridge.proxy.responses import (
    INVALID_REQUEST_MESSAGE,
    UPSTREAM_FAILURE_MESSAGE,
    format_error,
)

logger = logging.getLogger(__name__)

CORS_HEADERS = (
    "Access-Control-Allow-Origin: *\r\n"
    "Access-Control-Allow-Methods: GET, POST, OPTIONS\r\n"
    "Access-Control-Allow-Headers: Content-Type, Authorization\r\n"
)


class ChatBridgeProxyServer:
    """
    OpenAI-compatible proxy server in front of a Chatbot UI backend.

    Accepts requests at /v1/chat/completions, translates them for the
    backend and relays the answer. /v1/models returns a fixed listing.

    Example:
        >>> from chatbridge.config import BridgeConfig, ServerConfig
        >>> from chatbridge.proxy import ChatBridgeProxyServer
        >>>
        >>> bridge = BridgeConfig(chatbot_ui_url="http://localhost:3000/api/chat/openai", cookie="...")
        >>> server = ChatBridgeProxyServer(bridge, ServerConfig(port=8080))
        >>> asyncio.run(server.serve_forever())
    """

    def __init__(
        self,
        bridge_config: BridgeConfig,
        config: ServerConfig | None = None,
        handler: RequestHandler | None = None,
    ) -> None:
        """
        Initialize the proxy server.

        Args:
            bridge_config: Backend URL and cookie.
            config: Server configuration (host, port, etc.).
            handler: Pre-built request handler. If None, creates one.
        """
        self.config = config or ServerConfig()
        self.handler = handler or RequestHandler(
            bridge_config,
            chunk_size=self.config.chunk_size,
        )
        self._server: asyncio.Server | None = None
        self._running = False

    @property
    def host(self) -> str:
        """Get server host."""
        return self.config.host

    @property
    def port(self) -> int:
        """Get server port."""
        if self._server and self._server.sockets:
            # Get actual port if using port 0 (random)
            return self._server.sockets[0].getsockname()[1]
        return self.config.port

    async def start(self) -> None:
        """
        Start the server.

        Raises:
            OSError: If the listener can't bind.
        """
        self._server = await asyncio.start_server(
            self._handle_connection,
            self.config.host,
            self.config.port,
        )
        self._running = True
        logger.info(f"Server listening on {self.host}:{self.port}")

    async def stop(self) -> None:
        """Gracefully stop the server."""
        self._running = False
        if self._server:
            self._server.close()
            await self._server.wait_closed()
            self._server = None
            await self.handler.aclose()
            logger.info("Server stopped")

    async def serve_forever(self) -> None:
        """Run the server until interrupted."""
        await self.start()

        # Set up signal handlers for graceful shutdown
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, lambda: asyncio.create_task(self.stop()))

        try:
            while self._running:
                await asyncio.sleep(0.1)
        except asyncio.CancelledError:
            pass
        finally:
            await self.stop()

    async def _handle_connection(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        """Handle a single HTTP connection."""
        try:
            # Read request line and headers
            request_line = await asyncio.wait_for(
                reader.readline(),
                timeout=self.config.read_timeout,
            )
            if not request_line:
                return

            request_line = request_line.decode("utf-8").strip()
            parts = request_line.split(" ")
            if len(parts) < 2:
                await self._send_error(writer, "Bad request", 400)
                return

            method = parts[0].upper()
            path = parts[1].split("?", 1)[0]

            # Read headers
            headers: dict[str, str] = {}
            while True:
                line = await asyncio.wait_for(
                    reader.readline(),
                    timeout=self.config.read_timeout,
                )
                line = line.decode("utf-8").strip()
                if not line:
                    break
                if ":" in line:
                    key, value = line.split(":", 1)
                    headers[key.strip().lower()] = value.strip()

            # Read body if present
            body = b""
            try:
                content_length = int(headers.get("content-length", 0))
            except ValueError:
                await self._send_error(writer, "Bad request", 400)
                return
            if content_length > 0:
                if content_length > self.config.max_request_size:
                    await self._send_error(writer, "Request too large", 413)
                    return
                try:
                    body = await reader.readexactly(content_length)
                except asyncio.IncompleteReadError:
                    await self._send_error(writer, "Bad request", 400)
                    return

            logger.debug(f"{method} {path} ({len(body)} bytes)")
            await self._route_request(writer, method, path, body)

        except asyncio.TimeoutError:
            await self._send_error(writer, "Request timeout", 408)
        except UnicodeDecodeError as e:
            logger.info(f"Rejected request with undecodable head: {e}")
            await self._send_error(writer, "Bad request", 400)
        except ConnectionError as e:
            logger.info(f"Client connection lost: {e}")
        except Exception as e:
            logger.exception(f"Error handling request: {e}")
            await self._send_error(writer, "Internal server error", 500)
        finally:
            try:
                writer.close()
                await writer.wait_closed()
            except OSError as e:
                logger.debug(f"Error closing connection: {e}")

    async def _route_request(
        self,
        writer: asyncio.StreamWriter,
        method: str,
        path: str,
        body: bytes,
    ) -> None:
        """Route request to appropriate handler."""
        # CORS preflight
        if method == "OPTIONS":
            await self._send_no_content(writer)
            return

        # Models list
        if path == "/v1/models" and method == "GET":
            result = await self.handler.handle_models()
            await self._send_json(writer, result, 200)
            return

        # Chat completions
        if path == "/v1/chat/completions" and method == "POST":
            await self._handle_completion(writer, body)
            return

        # 404 for unknown paths
        await self._send_error(writer, "Not found", 404)

    async def _handle_completion(
        self,
        writer: asyncio.StreamWriter,
        body: bytes,
    ) -> None:
        """Handle chat completion request."""
        try:
            data = json.loads(body.decode("utf-8"))
            request = ChatCompletionRequest.from_dict(data)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.info(f"Rejected request with invalid JSON: {e}")
            await self._send_error(writer, INVALID_REQUEST_MESSAGE, 400)
            return
        except ValueError as e:
            logger.info(f"Rejected invalid request: {e}")
            await self._send_error(writer, INVALID_REQUEST_MESSAGE, 400)
            return

        # Streaming response
        if request.stream:
            await self._send_stream(writer, request)
        else:
            # Non-streaming response
            try:
                result = await self.handler.handle_completion(request)
            except UpstreamError as e:
                logger.error(f"Completion error: {e}")
                await self._send_error(writer, UPSTREAM_FAILURE_MESSAGE, 500)
                return
            await self._send_json(writer, result, 200)

    async def _send_stream(
        self,
        writer: asyncio.StreamWriter,
        request: ChatCompletionRequest,
    ) -> None:
        """Relay the backend body to the client as a chunked response."""
        try:
            async with self.handler.open_stream(request) as chunks:
                response_headers = (
                    "HTTP/1.1 200 OK\r\n"
                    f"Content-Type: {self.handler.shape.stream_content_type}\r\n"
                    "Transfer-Encoding: chunked\r\n"
                    "Cache-Control: no-cache\r\n"
                    "Connection: close\r\n"
                    f"{CORS_HEADERS}"
                    "\r\n"
                )
                writer.write(response_headers.encode("utf-8"))
                await writer.drain()

                try:
                    async for chunk in chunks:
                        writer.write(f"{len(chunk):x}\r\n".encode("ascii") + chunk + b"\r\n")
                        await writer.drain()
                except (UpstreamError, ConnectionError) as e:
                    # Headers are out; leave the chunked body unterminated.
                    logger.error(f"Stream aborted: {e}")
                    await chunks.aclose()
                    return

                writer.write(b"0\r\n\r\n")
                await writer.drain()
        except UpstreamError as e:
            logger.error(f"Completion error: {e}")
            await self._send_error(writer, UPSTREAM_FAILURE_MESSAGE, 500)

    async def _send_json(
        self,
        writer: asyncio.StreamWriter,
        data: dict[str, Any],
        status: int,
    ) -> None:
        """Send JSON response."""
        body = json.dumps(data).encode("utf-8")
        await self._send_response(writer, status, body, "application/json; charset=utf-8")

    async def _send_no_content(self, writer: asyncio.StreamWriter) -> None:
        """Send an empty 204 response (CORS preflight)."""
        await self._send_response(writer, 204, b"", None)

    async def _send_response(
        self,
        writer: asyncio.StreamWriter,
        status: int,
        body: bytes,
        content_type: str | None,
    ) -> None:
        head = f"HTTP/1.1 {status} {HTTPStatus(status).phrase}\r\n"
        if content_type:
            head += f"Content-Type: {content_type}\r\n"
        if status != 204:
            head += f"Content-Length: {len(body)}\r\n"
        head += f"Connection: close\r\n{CORS_HEADERS}\r\n"

        writer.write(head.encode("utf-8") + body)
        await writer.drain()

    async def _send_error(
        self,
        writer: asyncio.StreamWriter,
        message: str,
        status: int,
    ) -> None:
        """Send error response."""
        error_body, _ = format_error(message, status_code=status)
        await self._send_json(writer, error_body, status)
