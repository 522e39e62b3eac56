"""Tests for ``a2ac agents`` CLI command."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING
from unittest.mock import patch

from click.testing import CliRunner

from a2ac.cli import main

if TYPE_CHECKING:
    from pathlib import Path

    from conftest import AgentNetwork


class TestAgentsList:
    def test_list_agents_json(self, cli_network: AgentNetwork) -> None:
        cli_network.add("http://alpha.test")
        runner = CliRunner()
        result = runner.invoke(
            main,
            [
                "--endpoints",
                "http://alpha.test,http://down.test",
                "agents",
                "list",
                "--format",
                "json",
            ],
        )

        assert result.exit_code == 0, result.output
        agents = json.loads(result.stdout)
        assert [a["url"] for a in agents] == ["http://alpha.test", "http://down.test"]
        assert [a["connected"] for a in agents] == [True, False]
        assert "error" not in agents[0]
        assert "Could not retrieve agent card" in agents[1]["error"]

    def test_list_agents_table(self, cli_network: AgentNetwork) -> None:
        cli_network.add("http://alpha.test")
        runner = CliRunner()
        result = runner.invoke(main, ["--endpoints", "http://alpha.test", "agents", "list"])

        assert result.exit_code == 0, result.output
        assert "A2A Agents" in result.output
        assert "connected" in result.output

    def test_list_from_env(self, cli_network: AgentNetwork) -> None:
        cli_network.add("http://alpha.test")
        runner = CliRunner()
        result = runner.invoke(
            main,
            ["agents", "list", "--format", "json"],
            env={"A2A_ENDPOINT_URL": "http://alpha.test"},
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)[0]["connected"] is True

    def test_list_from_file(self, cli_network: AgentNetwork, tmp_path: Path) -> None:
        cli_network.add("http://alpha.test")
        path = tmp_path / "agents.yaml"
        path.write_text("- id: planner\n  url: http://alpha.test\n")

        runner = CliRunner()
        result = runner.invoke(
            main, ["--endpoints-file", str(path), "agents", "list", "--format", "json"]
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == [
            {"agentId": "planner", "url": "http://alpha.test", "connected": True}
        ]

    def test_list_nothing_configured(self, cli_network: AgentNetwork) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["agents", "list"])

        assert result.exit_code == 0
        assert "No A2A endpoints configured" in result.output

    def test_invalid_env_setting(self, cli_network: AgentNetwork) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["agents", "list"], env={"A2A_MAX_UPDATES": "zero"})

        assert result.exit_code == 1
        assert "Invalid A2A settings" in result.output

    def test_invalid_endpoints_file(self, cli_network: AgentNetwork, tmp_path: Path) -> None:
        path = tmp_path / "agents.yaml"
        path.write_text("- id: no-url\n")

        runner = CliRunner()
        result = runner.invoke(main, ["--endpoints-file", str(path), "agents", "list"])

        assert result.exit_code == 1
        assert "Invalid endpoint entry" in result.output


class TestAgentsInfo:
    def test_info_by_url(self, cli_network: AgentNetwork) -> None:
        agent = cli_network.add("http://beta.test")
        agent.card["name"] = "beta-agent"
        runner = CliRunner()
        result = runner.invoke(
            main, ["--endpoints", "http://beta.test", "agents", "info", "http://beta.test"]
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["name"] == "beta-agent"

    def test_info_all(self, cli_network: AgentNetwork) -> None:
        cli_network.add("http://alpha.test")
        cli_network.add("http://beta.test")
        runner = CliRunner()
        result = runner.invoke(
            main, ["--endpoints", "http://alpha.test,http://beta.test", "agents", "info"]
        )

        assert result.exit_code == 0, result.output
        entries = json.loads(result.stdout)
        assert len(entries) == 2
        assert all("card" in entry for entry in entries)

    def test_info_unknown_agent(self, cli_network: AgentNetwork) -> None:
        cli_network.add("http://alpha.test")
        runner = CliRunner()
        result = runner.invoke(main, ["--endpoints", "http://alpha.test", "agents", "info", "nope"])

        assert result.exit_code == 1
        assert "No agent found with ID nope" in result.output


class TestTracingOptions:
    def test_trace_without_sdk(self, cli_network: AgentNetwork) -> None:
        runner = CliRunner()
        with patch.dict("sys.modules", {"opentelemetry.sdk.resources": None}):
            result = runner.invoke(main, ["--trace", "agents", "list"])

        assert result.exit_code == 1
        assert "opentelemetry-sdk" in result.output
