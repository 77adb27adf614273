"""Tests for ``sparql-mcp serve``."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from sparqlmcp.cli import main


class TestServe:
    def test_builds_server_from_environment_and_flags(self) -> None:
        with patch("sparqlmcp.protocol.server.MCPServer.from_config") as from_config:
            server = MagicMock()
            from_config.return_value = server
            result = CliRunner().invoke(
                main,
                ["serve", "--endpoint", "https://kb.test/sparql", "--timeout", "5"],
                env={"SPARQL_ENDPOINT": "https://ignored.test"},
            )

        assert result.exit_code == 0, result.output
        config = from_config.call_args.args[0]
        assert config.sparql_endpoint == "https://kb.test/sparql"
        assert config.sparql_timeout == 5.0
        server.serve_forever.assert_called_once()

    def test_endpoint_from_environment(self) -> None:
        with patch("sparqlmcp.protocol.server.MCPServer.from_config") as from_config:
            result = CliRunner().invoke(
                main, ["serve"], env={"SPARQL_ENDPOINT": "https://env.test/sparql"}
            )
        assert result.exit_code == 0, result.output
        assert from_config.call_args.args[0].sparql_endpoint == "https://env.test/sparql"

    def test_telemetry_without_sdk_is_reported(self) -> None:
        with (
            patch("sparqlmcp.protocol.server.MCPServer.from_config"),
            patch(
                "sparqlmcp.utils.telemetry.configure_telemetry",
                side_effect=ImportError("opentelemetry-sdk is required"),
            ),
        ):
            result = CliRunner().invoke(main, ["serve", "--otel-console"])
        assert result.exit_code == 1
        assert "opentelemetry-sdk" in result.output

    @pytest.mark.parametrize("timeout", ["0", "-3"])
    def test_rejects_non_positive_timeout(self, timeout: str) -> None:
        with patch("sparqlmcp.protocol.server.MCPServer.from_config") as from_config:
            result = CliRunner().invoke(main, ["serve", "--timeout", timeout])
        assert result.exit_code == 2
        from_config.assert_not_called()

    def test_non_positive_timeout_in_environment_falls_back(self) -> None:
        with patch("sparqlmcp.protocol.server.MCPServer.from_config") as from_config:
            result = CliRunner().invoke(main, ["serve"], env={"SPARQL_TIMEOUT": "-1"})
        assert result.exit_code == 0, result.output
        assert from_config.call_args.args[0].sparql_timeout == 20.0

    def test_rejects_unknown_log_level(self) -> None:
        result = CliRunner().invoke(main, ["serve", "--log-level", "LOUD"])
        assert result.exit_code == 2
