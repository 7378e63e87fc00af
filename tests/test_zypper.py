import json
import subprocess
from unittest.mock import patch

import pytest

from admintasks import zypper
from admintasks.commands import RunningMode, SubCommand, SystemCommand, ToolsInitMode
from admintasks.mcpserver import INTERNAL_ERROR, ToolCallError, create_server


def _completed(stdout: bytes):
    return subprocess.CompletedProcess(args=[], returncode=0, stdout=stdout)


def _enabled_names():
    return {name for name, sub in zypper.COMMAND.subcommands.items() if sub.is_enabled}


def test_write_definition_round_trip(tmp_path):
    target = zypper.write_definition(tmp_path / "out.json")
    loaded = SystemCommand.from_dict(json.loads(target.read_text(encoding="utf-8")))
    assert loaded == zypper.COMMAND


def test_definition_pins_source_values():
    data = json.loads(zypper.COMMAND.to_json())
    assert data["executable"] == "zypper"
    assert data["needs_root_handling"] is True
    assert data["default_parameters"] == ["--xmlout", "--terse", "--non-interactive"]
    assert data["subcommands"]["repos"]["parameters"] == []
    assert data["subcommands"]["install"]["is_root_required"] is True


def test_register_test_mode_writes_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    tools = zypper.register(None, RunningMode.TEST, ToolsInitMode.TYPED)
    assert tools == []
    written = json.loads((tmp_path / "zypper.json").read_text(encoding="utf-8"))
    assert SystemCommand.from_dict(written) == zypper.COMMAND


def test_register_typed_adds_enabled_tools():
    server = create_server()
    tools = zypper.register(server, RunningMode.PRODUCTION, ToolsInitMode.TYPED)
    expected = {f"zypper_{name}" for name in _enabled_names()}
    assert {tool.name for tool in tools} == expected
    assert set(server.tools) == expected


def test_register_single_adds_generic_tool():
    server = create_server()
    tools = zypper.register(server, RunningMode.DEBUG, ToolsInitMode.SINGLE)
    assert [tool.name for tool in tools] == ["tool_zypper"]
    schema = server.tools["tool_zypper"].to_dict()["inputSchema"]
    assert schema["required"] == ["zyppercmd", "zypperp01", "zypperp02"]
    assert schema["properties"]["zyppercmd"]["description"] == zypper.HELP_TEXT


def test_register_all_mode_adds_nothing():
    server = create_server()
    assert zypper.register(server, RunningMode.PRODUCTION, ToolsInitMode.ALL) == []
    assert server.tools == {}


def test_register_without_server_raises():
    with pytest.raises(ValueError):
        zypper.register(None, RunningMode.PRODUCTION, ToolsInitMode.TYPED)


def test_parameterized_tool_disabled_returns_none():
    server = create_server()
    result = zypper.add_parameterized_tool(server, "repos", zypper.COMMAND.subcommands["repos"])
    assert result is None
    assert server.tools == {}


def test_parameterized_tool_schema_for_search():
    server = create_server()
    tool = zypper.add_parameterized_tool(
        server, "search", zypper.COMMAND.subcommands["search"]
    )
    schema = tool.to_dict()["inputSchema"]
    assert tool.name == "zypper_search"
    assert schema["required"] == ["zypperp00", "zypperp01"]
    assert schema["properties"]["zypperp00"]["description"] == "PATTERN or PACKAGE name"
    assert schema["properties"]["zypperp01"]["description"] == "SEARCHOPTION"


def test_parameterized_tool_with_too_many_parameters_takes_none():
    server = create_server()
    sub = SubCommand(summary="s", is_enabled=True, parameters=["a", "b", "c", "d"])
    tool = zypper.add_parameterized_tool(server, "many", sub)
    assert tool.to_dict()["inputSchema"]["properties"] == {}
    assert tool.required == []


def test_parameterized_tool_runs_with_sudo_for_install():
    server = create_server()
    zypper.add_parameterized_tool(server, "install", zypper.COMMAND.subcommands["install"])
    with patch("admintasks.commands.subprocess.run", return_value=_completed(b"<ok/>")) as run:
        text = server.tools["zypper_install"].handler(
            {"zypperp00": "vim", "zypperp01": "--no-confirm"}
        )
    assert text == "<ok/>"
    argv = run.call_args.args[0]
    assert argv == [
        "sudo", "-b", "zypper", "--xmlout", "--terse", "--non-interactive",
        "install", "vim", "--no-confirm",
    ]


def test_parameterized_tool_missing_argument_raises():
    server = create_server()
    tool = zypper.add_parameterized_tool(server, "info", zypper.COMMAND.subcommands["info"])
    with pytest.raises(ToolCallError):
        tool.handler({})


def test_parameterized_tool_error_through_server():
    server = create_server()
    zypper.add_parameterized_tool(server, "search", zypper.COMMAND.subcommands["search"])
    response = server.handle(
        {
            "jsonrpc": "2.0",
            "id": 7,
            "method": "tools/call",
            "params": {"name": "zypper_search", "arguments": {"zypperp00": "vim"}},
        }
    )
    assert response["error"]["code"] == INTERNAL_ERROR


def test_help_tool_returns_subcommand_table():
    server = create_server()
    tool = zypper.add_parameterized_tool(server, "help", zypper.COMMAND.subcommands["help"])
    text = tool.handler({})
    assert json.loads(text) == json.loads(zypper.COMMAND.subcommands_json())


def test_generic_tool_runs_without_root():
    server = create_server()
    tool = zypper.add_generic_tool(server)
    with patch("admintasks.commands.subprocess.run", return_value=_completed(b"")) as run:
        text = tool.handler({"zyppercmd": "search", "zypperp01": "vim", "zypperp02": "-s"})
    assert json.loads(text) == {"message": "success"}
    assert run.call_args.args[0] == [
        "zypper", "--xmlout", "--terse", "--non-interactive", "search", "vim", "-s",
    ]


def test_generic_tool_rejects_non_string_argument():
    server = create_server()
    tool = zypper.add_generic_tool(server)
    with pytest.raises(ToolCallError):
        tool.handler({"zyppercmd": "search", "zypperp01": 3, "zypperp02": "x"})


def test_typed_tool_call_through_server_returns_text():
    server = create_server()
    zypper.register(server, RunningMode.PRODUCTION, ToolsInitMode.TYPED)
    with patch("admintasks.commands.subprocess.run", return_value=_completed(b"<list/>")) as run:
        response = server.handle(
            {
                "jsonrpc": "2.0",
                "id": 1,
                "method": "tools/call",
                "params": {"name": "zypper_patterns", "arguments": {"Parameters": []}},
            }
        )
    assert response["result"]["content"] == [{"type": "text", "text": "<list/>"}]
    assert run.call_args.args[0][0] == "zypper"