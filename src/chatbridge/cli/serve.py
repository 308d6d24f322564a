"""CLI serve command implementation."""

from __future__ import annotations

import asyncio
import logging
import sys
from argparse import Namespace

from chatbridge.config import ServerConfig, load_config
from chatbridge.errors import ConfigError
from chatbridge.proxy.server import ChatBridgeProxyServer


def run_serve(args: Namespace) -> int:
    """
    Run the serve command.

    Args:
        args: Parsed command line arguments.

    Returns:
        Exit code.
    """
    # Configure logging
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    logger = logging.getLogger("chatbridge.serve")

    # Config must load before anything binds
    logger.info(f"Loading config from {args.config}")
    try:
        bridge_config = load_config(args.config)
    except ConfigError as e:
        logger.error(f"Failed to load config: {e}")
        return 1
    logger.info(f"Forwarding to {bridge_config.chatbot_ui_url}")

    server_config = ServerConfig(
        host=args.host,
        port=args.port,
    )
    server = ChatBridgeProxyServer(bridge_config, server_config)

    print(f"ChatBridge proxy server starting on http://{args.host}:{args.port}")
    print()
    print("Endpoints:")
    print(f"  POST http://{args.host}:{args.port}/v1/chat/completions")
    print(f"  GET  http://{args.host}:{args.port}/v1/models")
    print()
    print("Press Ctrl+C to stop")
    print()

    try:
        asyncio.run(server.serve_forever())
    except KeyboardInterrupt:
        pass
    except OSError as e:
        logger.error(f"Failed to start server: {e}")
        return 1

    return 0
