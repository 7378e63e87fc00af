import json
import sys

import pytest

from admintasks.commands import (
    SUCCESS_MESSAGE,
    SubCommand,
    SystemCommand,
    execute_system_call,
    load_system_commands,
)


def python_command(code):
    return SystemCommand(executable=sys.executable, default_parameters=["-c", code])


def sample_command():
    return SystemCommand(
        executable="systemctl",
        description="Query or send control commands to the system manager",
        default_parameters=["--output=json-pretty", "--full", "--no-pager"],
        subcommands={
            "status": SubCommand(
                cmd_group="Unit Commands",
                summary="Show runtime status of one or more units",
                is_enabled=True,
                parameters=["UNIT name"],
            ),
            "halt": SubCommand(cmd_group="System Commands", summary="Shut down"),
        },
    )


def test_subcommand_to_dict_keeps_field_order():
    data = SubCommand(cmd_group="g", summary="s").to_dict()
    assert list(data) == [
        "cmd_group",
        "summary",
        "description",
        "is_enabled",
        "is_root_required",
        "parameters",
    ]
    assert data["parameters"] is None


def test_subcommand_round_trip():
    original = SubCommand("g", "s", "d", True, True, ["a", "b"])
    assert SubCommand.from_dict(original.to_dict()) == original


def test_subcommand_from_dict_defaults():
    sub = SubCommand.from_dict({"summary": "only"})
    assert sub == SubCommand(summary="only")


def test_subcommand_from_dict_rejects_wrong_type():
    with pytest.raises(ValueError):
        SubCommand.from_dict({"is_enabled": "yes"})


def test_system_command_round_trip_through_json():
    command = sample_command()
    assert SystemCommand.from_dict(json.loads(command.to_json())) == command


def test_to_json_sorts_subcommands_and_writes_null():
    text = sample_command().to_json()
    assert text.index('"halt"') < text.index('"status"')
    assert '"parameters": null' in text
    assert text.startswith('{\n  "executable": "systemctl"')


def test_to_json_escapes_html_characters():
    command = SystemCommand("x", description="a <b> & c")
    text = command.to_json()
    assert "\\u003cb\\u003e \\u0026 c" in text
    assert json.loads(text)["description"] == "a <b> & c"


def test_subcommands_json_matches_subcommands():
    command = sample_command()
    loaded = json.loads(command.subcommands_json())
    assert list(loaded) == ["halt", "status"]
    assert loaded["status"] == command.subcommands["status"].to_dict()


def test_build_argv_plain():
    argv = sample_command().build_argv("status", ["sshd"], False)
    assert argv == [
        "systemctl",
        "--output=json-pretty",
        "--full",
        "--no-pager",
        "status",
        "sshd",
    ]


def test_build_argv_as_root():
    argv = sample_command().build_argv("start", ["sshd"], True)
    assert argv[:3] == ["sudo", "-b", "systemctl"]
    assert argv[-2:] == ["start", "sshd"]


def test_load_system_commands(tmp_path):
    (tmp_path / "a.json").write_text(sample_command().to_json(), encoding="utf-8")
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
    (tmp_path / "notes.txt").write_text(json.dumps({"executable": "txt"}), encoding="utf-8")
    (tmp_path / "dir.json").mkdir()
    (tmp_path / "z.json").write_text(
        json.dumps({"executable": "zypper", "subcommands": {}}), encoding="utf-8"
    )
    commands = load_system_commands(tmp_path)
    assert sorted(commands) == ["systemctl", "zypper"]
    assert commands["systemctl"] == sample_command()


def test_load_system_commands_later_file_wins(tmp_path):
    (tmp_path / "1.json").write_text(json.dumps({"executable": "e", "description": "first"}))
    (tmp_path / "2.json").write_text(json.dumps({"executable": "e", "description": "second"}))
    assert load_system_commands(tmp_path)["e"].description == "second"


def test_load_system_commands_missing_directory(tmp_path):
    with pytest.raises(OSError):
        load_system_commands(tmp_path / "missing")


def test_help_returns_help_text_without_running():
    command = SystemCommand(executable="/nonexistent/binary")
    assert execute_system_call(command, "the help", False, "help") == "the help"


def test_execute_passes_subcommand_and_arguments():
    command = python_command("import sys; print(' '.join(sys.argv[1:]))")
    output = execute_system_call(command, "", False, "status", "one", "two")
    assert output.strip() == "status one two"


def test_execute_empty_output_is_success():
    command = python_command("pass")
    assert execute_system_call(command, "", False, "noop") == SUCCESS_MESSAGE


def test_execute_does_not_inherit_stdin():
    command = python_command("import sys; print(len(sys.stdin.read()))")
    assert execute_system_call(command, "", False, "read").strip() == "0"


def test_execute_nonzero_exit_reports_error():
    command = python_command("import sys; sys.exit(3)")
    assert execute_system_call(command, "", False, "fail").startswith("Error running")


def test_execute_missing_executable_reports_error():
    command = SystemCommand(executable="/nonexistent/binary")
    assert execute_system_call(command, "", False, "status").startswith("Error running")