"""Tools for querying and controlling the system manager through systemctl."""

from __future__ import annotations

import logging
from pathlib import Path

from admintasks.commands import RunningMode, SubCommand, SystemCommand, ToolsInitMode
from admintasks.mcpserver import McpServer, Tool, add_command_tool

logger = logging.getLogger(__name__)

DEFINITION_FILE = "systemctl.json"

_UNIT_PATTERN = "UNIT name or PATTERN / regular expression"
_UNIT = "UNIT name"
_PATTERN = "PATTERN / regular expression"

_UNIT_COMMANDS = "Unit Commands"
_UNIT_FILE_COMMANDS = "UnitFile Commands"
_MACHINE_COMMANDS = "Machine Commands"
_JOB_COMMANDS = "Job Commands"
_ENVIRONMENT_COMMANDS = "Environment Commands"
_MANAGER_COMMANDS = "ManagerState Commands"
_SYSTEM_COMMANDS = "System Commands"


def _sub(
    group: str,
    summary: str,
    enabled: bool = False,
    parameters: list[str] | None = None,
    description: str = "",
) -> SubCommand:
    return SubCommand(
        cmd_group=group,
        summary=summary,
        description=description,
        is_enabled=enabled,
        is_root_required=False,
        parameters=parameters,
    )


COMMAND = SystemCommand(
    executable="systemctl",
    description="Query or send control commands to the system manager",
    needs_root_handling=False,
    default_parameters=["--output=json-pretty", "--full", "--no-pager"],
    subcommands={
        "list-units": _sub(
            _UNIT_COMMANDS,
            "List units currently in memory. DEFAULT action of systemctl, "
            "recommended to use with OPTION='--all'.",
            True,
            [_UNIT_PATTERN],
            "List units currently in memory. DEFAULT action of systemctl. Use "
            "OPTION='--all' to see also those units which are installed, but not "
            "enabled. This is the default of systemctl and should be called first "
            "to get an overview.",
        ),
        "list-automounts": _sub(
            _UNIT_COMMANDS,
            "List automount units currently in memory, ordered by path. Use "
            "PATTERN='--all' to see also those which are installed, but not enabled.",
            True,
            [_UNIT_PATTERN],
        ),
        "list-paths": _sub(
            _UNIT_COMMANDS,
            "List path units currently in memory, ordered by path. Use "
            "PATTERN='--all' to see also those which are installed, but not enabled.",
            True,
            [_UNIT_PATTERN],
        ),
        "list-sockets": _sub(
            _UNIT_COMMANDS,
            "List socket units currently in memory, ordered by address. Use "
            "PATTERN='--all' to see also those which are installed, but not enabled.",
            True,
            [_UNIT_PATTERN],
        ),
        "list-timers": _sub(
            _UNIT_COMMANDS,
            "List timer units currently in memory, ordered by next elapse. Use "
            "PATTERN='--all' to see also those which are installed, but not enabled.",
            True,
            [_UNIT_PATTERN],
        ),
        "is-readonlycmd": _sub(
            _UNIT_COMMANDS, "Check whether units are readonlycmd", False, [_UNIT_PATTERN]
        ),
        "is-failed": _sub(
            _UNIT_COMMANDS,
            "Check whether units are failed or system is in degraded state",
            False,
            [_UNIT_PATTERN],
        ),
        "status": _sub(
            _UNIT_COMMANDS,
            "Show runtime status of one or more units",
            True,
            ["UNIT name or PATTERN / regular expression or PID / ProcessID"],
        ),
        "show": _sub(
            _UNIT_COMMANDS,
            "Show properties of one or more units/jobs or the manager",
            True,
            ["UNIT name or PATTERN / regular expression or jobID"],
        ),
        "cat": _sub(
            _UNIT_COMMANDS, "Show files and drop-ins of specified units", False, [_UNIT_PATTERN]
        ),
        "help": _sub(
            _UNIT_COMMANDS,
            "Show manual for one or more units. This includes extended information "
            "about the respective unit/service, which most often cannot be directly "
            "accessed by systemctl, but can be useful for either a human "
            "administrator or another MCP server to deal with.",
            True,
            ["UNIT name or PATTERN / regular expression or PID / ProcessID"],
        ),
        "list-dependencies": _sub(
            _UNIT_COMMANDS,
            "Recursively show units which are required or wanted by the units or by "
            "which those units are required or wanted",
            False,
            [_UNIT],
        ),
        "start": _sub(_UNIT_COMMANDS, "Start (activate) one or more units", True, [_UNIT]),
        "stop": _sub(_UNIT_COMMANDS, "Stop (deactivate) one or more units", True, [_UNIT]),
        "reload": _sub(_UNIT_COMMANDS, "Reload one or more units", True, [_UNIT]),
        "restart": _sub(_UNIT_COMMANDS, "Start or restart one or more units", True, [_UNIT]),
        "try-restart": _sub(
            _UNIT_COMMANDS, "Restart one or more units if readonlycmd", True, [_UNIT]
        ),
        "reload-or-restart": _sub(
            _UNIT_COMMANDS,
            "Reload one or more units if possible, otherwise start or restart",
            True,
            [_UNIT],
        ),
        "try-reload-or-restart": _sub(
            _UNIT_COMMANDS,
            "If readonlycmd, reload one or more units, if supported, otherwise restart",
            True,
            [_UNIT],
        ),
        "isolate": _sub(_UNIT_COMMANDS, "Start one unit and stop all others", False, [_UNIT]),
        "kill": _sub(_UNIT_COMMANDS, "Send signal to processes of a unit", False, [_UNIT]),
        "clean": _sub(
            _UNIT_COMMANDS,
            "Clean runtime, cache, state, logs or configuration of unit",
            False,
            [_UNIT],
        ),
        "freeze": _sub(
            _UNIT_COMMANDS, "Freeze execution of unit processes", False, [_UNIT_PATTERN]
        ),
        "thaw": _sub(
            _UNIT_COMMANDS, "Resume execution of a frozen unit", False, [_UNIT_PATTERN]
        ),
        "set-property": _sub(
            _UNIT_COMMANDS,
            "set-property UNIT PROPERTY=VALUE... Sets one or more properties of a unit",
            False,
            [_UNIT, "PROPERTY name", "VALUE"],
        ),
        "bind": _sub(
            _UNIT_COMMANDS,
            "Bind-mount a path from the host into a unit's namespace",
            False,
            [_UNIT, "PATH"],
        ),
        "mount-image": _sub(
            _UNIT_COMMANDS,
            "Mount an image from the host into a unit's namespace",
            False,
            [_UNIT, "PATH", "OPTIONS"],
        ),
        "service-log-level": _sub(
            _UNIT_COMMANDS,
            "Get/set logging threshold for service.",
            False,
            ["SERVICE name", "LEVEL"],
            "Get/set logging threshold for service. If the optional argument LEVEL "
            "is provided, then change the current log level of the service to LEVEL. "
            "The log level should be a typical syslog log level, i.e. a value in the "
            "range 0...7 or one of the strings emerg, alert, crit, err, warning, "
            "notice, info, debug; see syslog(3) for details.",
        ),
        "service-log-target": _sub(
            _UNIT_COMMANDS,
            "Get/set logging target for service",
            False,
            ["SERVICE name", "TARGET"],
            "If the optional argument TARGET is provided, then change the current "
            "log target of the service to TARGET. The log target should be one of "
            "the strings console (for log output to the service's standard error "
            "stream), kmsg (for log output to the kernel log buffer), journal (for "
            "log output to systemd-journald.service(8) using the native journal "
            "protocol), syslog (for log output to the classic syslog socket "
            "/dev/log), null (for no log output whatsoever) or auto (for an "
            "automatically determined choice, typically equivalent to console if "
            "the service is invoked interactively, and journal or syslog otherwise).",
        ),
        "reset-failed": _sub(
            _UNIT_COMMANDS,
            "Reset failed state for all, one, or more units",
            False,
            [_UNIT_PATTERN],
        ),
        "whoami": _sub(
            _UNIT_COMMANDS, "Return unit caller or specified PIDs are part of", False, ["PID"]
        ),
        "list-unit-files": _sub(
            _UNIT_FILE_COMMANDS,
            "list-unit-files [PATTERN...]        List installed unit files",
            False,
            [_PATTERN],
        ),
        "enable": _sub(
            _UNIT_FILE_COMMANDS,
            "Enable one or more unit files",
            True,
            ["UNIT or PATH: what to enable"],
        ),
        "disable": _sub(
            _UNIT_FILE_COMMANDS,
            "Disable one or more unit files",
            True,
            ["UNIT or PATH: what to disable"],
        ),
        "reenable": _sub(_UNIT_FILE_COMMANDS, "Reenable one or more unit files"),
        "preset": _sub(
            _UNIT_FILE_COMMANDS,
            "Enable/disable one or more unit files based on preset configuration",
        ),
        "preset-all": _sub(
            _UNIT_FILE_COMMANDS,
            "Enable/disable all unit files based on preset configuration",
        ),
        "is-enabled": _sub(
            _UNIT_FILE_COMMANDS,
            "Check whether unit files are enabled",
            False,
            ["UNIT to check whether it is enabled"],
        ),
        "mask": _sub(_UNIT_FILE_COMMANDS, "Mask one or more units", False, [_UNIT]),
        "unmask": _sub(_UNIT_FILE_COMMANDS, "Unmask one or more units", False, [_UNIT]),
        "link": _sub(
            _UNIT_FILE_COMMANDS,
            "Link one or more units files into the search path",
            False,
            ["PATH"],
        ),
        "revert": _sub(
            _UNIT_FILE_COMMANDS,
            "Revert one or more unit files to vendor version",
            False,
            [_UNIT],
        ),
        "add-wants": _sub(
            _UNIT_FILE_COMMANDS,
            "Add 'Wants' dependency for the target on specified one or more units",
            False,
            ["TARGET", _UNIT],
        ),
        "add-requires": _sub(
            _UNIT_FILE_COMMANDS,
            "Add 'Requires' dependency for the target on specified one or more units",
            False,
            ["TARGET", _UNIT],
        ),
        "edit": _sub(_UNIT_FILE_COMMANDS, "Edit one or more unit files", False, [_UNIT]),
        "get-default": _sub(_UNIT_FILE_COMMANDS, "Get the name of the default target"),
        "set-default": _sub(
            _UNIT_FILE_COMMANDS, "Set the default target", False, ["TARGET name"]
        ),
        "list-machines": _sub(
            _MACHINE_COMMANDS,
            "list-machines [PATTERN...]          List local containers and host",
            True,
            [_PATTERN],
        ),
        "list-jobs": _sub(
            _JOB_COMMANDS,
            "list-jobs [PATTERN...]              List jobs",
            True,
            [_PATTERN],
        ),
        "cancel": _sub(
            _JOB_COMMANDS,
            "cancel [JOB...]                     Cancel all, one, or more jobs",
        ),
        "show-environment": _sub(
            _ENVIRONMENT_COMMANDS,
            "show-environment                    Dump environment",
        ),
        "set-environment": _sub(
            _ENVIRONMENT_COMMANDS,
            "set-environment VARIABLE=VALUE...   Set one or more environment variables",
        ),
        "unset-environment": _sub(
            _ENVIRONMENT_COMMANDS,
            "unset-environment VARIABLE...       Unset one or more environment variables",
        ),
        "import-environment": _sub(
            _ENVIRONMENT_COMMANDS,
            "import-environment VARIABLE...      Import all or some environment variables",
        ),
        "daemon-reload": _sub(
            _MANAGER_COMMANDS,
            "daemon-reload                       Reload systemd manager configuration",
        ),
        "daemon-reexec": _sub(
            _MANAGER_COMMANDS,
            "daemon-reexec                       Reexecute systemd manager",
        ),
        "log-level": _sub(
            _MANAGER_COMMANDS,
            "log-level [LEVEL]                   Get/set logging threshold for manager",
        ),
        "log-target": _sub(
            _MANAGER_COMMANDS,
            "log-target [TARGET]                 Get/set logging target for manager",
        ),
        "service-watchdogs": _sub(
            _MANAGER_COMMANDS,
            "service-watchdogs [BOOL]            Get/set service watchdog state",
        ),
        "is-system-running": _sub(
            _SYSTEM_COMMANDS,
            "is-system-running                   Check whether system is fully running",
        ),
        "default": _sub(
            _SYSTEM_COMMANDS,
            "default                             Enter system default mode",
        ),
        "rescue": _sub(
            _SYSTEM_COMMANDS,
            "rescue                              Enter system rescue mode",
        ),
        "emergency": _sub(
            _SYSTEM_COMMANDS,
            "emergency                           Enter system emergency mode",
        ),
        "halt": _sub(
            _SYSTEM_COMMANDS,
            "halt                                Shut down and halt the system",
        ),
        "poweroff": _sub(
            _SYSTEM_COMMANDS,
            "poweroff                            Shut down and power-off the system",
        ),
        "reboot": _sub(
            _SYSTEM_COMMANDS,
            "reboot                              Shut down and reboot the system",
        ),
        "kexec": _sub(
            _SYSTEM_COMMANDS,
            "kexec                               Shut down and reboot the system with kexec",
        ),
        "soft-reboot": _sub(
            _SYSTEM_COMMANDS,
            "soft-reboot                         Shut down and reboot userspace",
        ),
        "exit": _sub(
            _SYSTEM_COMMANDS,
            "exit [EXIT_CODE]                    Request user instance or container exit",
        ),
        "switch-root": _sub(
            _SYSTEM_COMMANDS,
            "switch-root [ROOT [INIT]]           Change to a different root file system",
        ),
        "sleep": _sub(
            _SYSTEM_COMMANDS,
            "Put the system to sleep (through one of the operations below)",
        ),
        "suspend": _sub(_SYSTEM_COMMANDS, "Suspend the system"),
        "hibernate": _sub(_SYSTEM_COMMANDS, "Hibernate the system"),
        "hybrid-sleep": _sub(_SYSTEM_COMMANDS, "Hibernate and suspend the system"),
        "suspend-then-hibernate": _sub(
            _SYSTEM_COMMANDS,
            "Suspend the system, wake after a period of time, and hibernate",
        ),
    },
)


def write_definition(path: str | Path = DEFINITION_FILE) -> Path:
    """Write the systemctl command definition as JSON to ``path``."""
    target = Path(path)
    target.write_text(COMMAND.to_json(), encoding="utf-8")
    return target


def register(
    server: McpServer | None,
    running_mode: RunningMode,
    init_mode: ToolsInitMode,
) -> list[Tool]:
    """Set up the systemctl tools according to the running and init modes.

    In test mode the definition is written to ``systemctl.json`` in the
    current directory instead and no tools are registered.
    """
    help_text = COMMAND.subcommands_json()
    if running_mode == RunningMode.TEST:
        write_definition(DEFINITION_FILE)
        return []
    if init_mode != ToolsInitMode.TYPED:
        return []
    if server is None:
        raise ValueError("a server is required to register tools")
    tools: list[Tool] = []
    for name in sorted(COMMAND.subcommands):
        tool = add_command_tool(server, COMMAND, help_text, name, COMMAND.subcommands[name])
        if tool is not None:
            tools.append(tool)
    logger.debug("registered %d systemctl tools", len(tools))
    return tools