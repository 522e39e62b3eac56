"""Tests for ``a2ac tools`` CLI command."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from click.testing import CliRunner

from a2ac.cli import main

if TYPE_CHECKING:
    from typing import Any

    from conftest import AgentNetwork


class TestToolsList:
    def test_list_table(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["tools", "list"])

        assert result.exit_code == 0
        assert "A2A Tools" in result.output
        assert "a2a_send_task" in result.output

    def test_list_json(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["tools", "list", "--json"])

        assert result.exit_code == 0
        names = [tool["function"]["name"] for tool in json.loads(result.stdout)]
        assert "a2a_resubscribe_task" in names
        assert len(names) == 6


class TestToolsCall:
    def test_call_send_task(self, cli_network: AgentNetwork, frames: Any) -> None:
        agent = cli_network.add("http://alpha.test")
        agent.results["tasks/send"] = frames.task("t-3", "input-required")

        runner = CliRunner()
        result = runner.invoke(
            main,
            [
                "--endpoints",
                "http://alpha.test",
                "tools",
                "call",
                "a2a_send_task",
                "--args",
                json.dumps({"message": "hi", "taskId": "t-3"}),
            ],
        )

        assert result.exit_code == 0, result.output
        assert agent.rpc_bodies[0]["params"]["id"] == "t-3"
        assert json.loads(result.stdout)["status"]["state"] == "input-required"

    def test_call_agent_info(self, cli_network: AgentNetwork) -> None:
        cli_network.add("http://alpha.test")
        runner = CliRunner()
        result = runner.invoke(
            main, ["--endpoints", "http://alpha.test", "tools", "call", "a2a_agent_info"]
        )

        assert result.exit_code == 0, result.output
        entries = json.loads(result.stdout)
        assert entries[0]["card"]["name"] == "test-agent"

    def test_call_unknown_tool(self, cli_network: AgentNetwork) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["tools", "call", "a2a_nothing"])

        assert result.exit_code == 1
        assert "Unknown tool: a2a_nothing" in result.output

    def test_call_bad_json(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["tools", "call", "a2a_agent_info", "--args", "{oops"])

        assert result.exit_code == 1
        assert "not valid JSON" in result.output

    def test_call_args_not_object(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["tools", "call", "a2a_agent_info", "--args", "[1]"])

        assert result.exit_code == 1
        assert "must be a JSON object" in result.output
