"""ChatBridge CLI entry point."""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from chatbridge import __version__


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = argparse.ArgumentParser(
        prog="chatbridge",
        description="ChatBridge - OpenAI-compatible proxy for Chatbot UI",
        epilog="Use 'chatbridge <command> --help' for help on specific commands.",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # serve command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Start the ChatBridge proxy server",
        description="Start an OpenAI-compatible server that forwards chat completions to Chatbot UI.",
    )
    serve_parser.add_argument(
        "--config", "-c",
        type=str,
        default="config.json",
        help="Config file path (default: config.json)",
    )
    serve_parser.add_argument(
        "--port", "-p",
        type=int,
        default=8080,
        help="Port to listen on (default: 8080)",
    )
    serve_parser.add_argument(
        "--host", "-H",
        type=str,
        default="0.0.0.0",
        help="Host to bind to (default: 0.0.0.0)",
    )
    serve_parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    # version command
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    args = parser.parse_args(argv)

    if args.command == "serve":
        from chatbridge.cli.serve import run_serve
        return run_serve(args)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
