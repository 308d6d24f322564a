"""Tests for CLI commands."""

import json
from argparse import Namespace
from unittest.mock import patch

import pytest

from chatbridge.cli.main import main
from chatbridge.cli.serve import run_serve
from chatbridge.config import BridgeConfig


def serve_args(config_path, **overrides):
    args = {
        "config": str(config_path),
        "host": "127.0.0.1",
        "port": 8080,
        "log_level": "INFO",
    }
    args.update(overrides)
    return Namespace(**args)


class TestCLIMain:
    """Tests for main CLI entry point."""

    def test_help_flag(self, capsys):
        """Test --help shows usage."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])

        assert exc_info.value.code == 0
        captured = capsys.readouterr()
        assert "ChatBridge" in captured.out
        assert "serve" in captured.out

    def test_version_flag(self, capsys):
        """Test --version shows version."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        captured = capsys.readouterr()
        assert "0.1.0" in captured.out

    def test_serve_help(self, capsys):
        """Test serve --help shows usage."""
        with pytest.raises(SystemExit) as exc_info:
            main(["serve", "--help"])

        assert exc_info.value.code == 0
        captured = capsys.readouterr()
        assert "--config" in captured.out
        assert "config.json" in captured.out
        assert "8080" in captured.out

    def test_no_command_shows_help(self, capsys):
        """Test no command shows help."""
        result = main([])
        assert result == 0
        captured = capsys.readouterr()
        assert "usage" in captured.out.lower()

    @patch("chatbridge.cli.serve.run_serve")
    def test_serve_defaults(self, mock_run_serve):
        """Test serve passes default flags through."""
        mock_run_serve.return_value = 0

        assert main(["serve"]) == 0
        args = mock_run_serve.call_args.args[0]
        assert args.config == "config.json"
        assert args.port == 8080


class TestServeCommand:
    """Tests for the serve command startup sequence."""

    @patch("chatbridge.cli.serve.asyncio")
    @patch("chatbridge.cli.serve.ChatBridgeProxyServer")
    def test_missing_config_fails_before_bind(self, mock_server, mock_asyncio, tmp_path):
        result = run_serve(serve_args(tmp_path / "missing.json"))

        assert result == 1
        mock_server.assert_not_called()
        mock_asyncio.run.assert_not_called()

    @patch("chatbridge.cli.serve.asyncio")
    @patch("chatbridge.cli.serve.ChatBridgeProxyServer")
    def test_malformed_config_fails_before_bind(self, mock_server, mock_asyncio, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text("{ this is not json")

        result = run_serve(serve_args(config_file))

        assert result == 1
        mock_server.assert_not_called()
        mock_asyncio.run.assert_not_called()

    @patch("chatbridge.cli.serve.asyncio")
    @patch("chatbridge.cli.serve.ChatBridgeProxyServer")
    def test_valid_config_starts_server(self, mock_server, mock_asyncio, tmp_path, capsys):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"chatbot_ui_url": "http://backend", "cookie": "c=1"}))

        result = run_serve(serve_args(config_file, port=9000))

        assert result == 0
        bridge_config, server_config = mock_server.call_args.args
        assert bridge_config == BridgeConfig(chatbot_ui_url="http://backend", cookie="c=1")
        assert server_config.port == 9000
        mock_asyncio.run.assert_called_once()
        assert "/v1/chat/completions" in capsys.readouterr().out

    @patch("chatbridge.cli.serve.asyncio")
    @patch("chatbridge.cli.serve.ChatBridgeProxyServer")
    def test_bind_failure_exits_nonzero(self, mock_server, mock_asyncio, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"chatbot_ui_url": "http://backend", "cookie": "c=1"}))
        mock_asyncio.run.side_effect = OSError("address already in use")

        assert run_serve(serve_args(config_file)) == 1
