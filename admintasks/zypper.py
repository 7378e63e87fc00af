"""Tools for package management through zypper."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from admintasks.commands import (
    RunningMode,
    SubCommand,
    SystemCommand,
    ToolsInitMode,
    execute_system_call,
)
from admintasks.mcpserver import McpServer, Tool, ToolCallError, add_command_tool

logger = logging.getLogger(__name__)

DEFINITION_FILE = "zypper.json"
GENERIC_TOOL_NAME = "tool_zypper"
MAX_TOOL_PARAMETERS = 3

_PACKAGE_PATTERN = "PATTERN or PACKAGE name"
_ARGUMENT_HINT = "PACKAGES, PATTERNS, ... or the like for zypper. Do not use zyppercmd here!"

_GENERAL = "General Commands"
_REPOSITORIES = "RepositoryManagement Commands"
_SERVICES = "ServiceManagement Commands"
_SOFTWARE = "SoftwareManagement Commands"
_UPDATES = "UpdateManagement Commands"
_QUERYING = "Querying Commands"
_LOCKS = "PackageLocks Commands"
_LOCALES = "LocaleManagement Commands"
_OTHER = "Other Commands"
_SUBCOMMANDS = "Subcommands Commands"


def _sub(
    group: str,
    summary: str,
    enabled: bool = False,
    root: bool = False,
    parameters: list[str] | None = None,
    description: str = "",
) -> SubCommand:
    return SubCommand(
        cmd_group=group,
        summary=summary,
        description=description,
        is_enabled=enabled,
        is_root_required=root,
        parameters=list(parameters) if parameters is not None else [],
    )


COMMAND = SystemCommand(
    executable="zypper",
    description="Command-line interface to ZYpp system management library (libzypp)",
    needs_root_handling=True,
    default_parameters=["--xmlout", "--terse", "--non-interactive"],
    subcommands={
        "search": _sub(
            _QUERYING,
            "DEFAULT action of zypper. Search for packages matching a PATTERN.",
            True,
            False,
            [_PACKAGE_PATTERN, "SEARCHOPTION"],
            "PATTERN can be a regular expression. Recommended when searching for "
            "unknown packages or patterns or when the name of a package might be "
            "vague/unclear. For a more extensive search try to add the SEARCHOPTION "
            "'--search-description'.",
        ),
        "help": _sub(_GENERAL, "Print zypper help", True),
        "repos": _sub(_REPOSITORIES, "List all defined repositories."),
        "addrepo": _sub(_REPOSITORIES, "Add a new repository."),
        "removerepo": _sub(_REPOSITORIES, "Remove specified repository."),
        "renamerepo": _sub(_REPOSITORIES, "Rename specified repository."),
        "modifyrepo": _sub(_REPOSITORIES, "Modify specified repository."),
        "refresh": _sub(_REPOSITORIES, "Refresh all repositories.", True, True),
        "clean": _sub(_REPOSITORIES, "Clean local caches."),
        "services": _sub(_SERVICES, "List all defined services."),
        "addservice": _sub(_SERVICES, "Add a new service."),
        "modifyservice": _sub(_SERVICES, "Modify specified service."),
        "removeservice": _sub(_SERVICES, "Remove specified service."),
        "refresh-services": _sub(_SERVICES, "Refresh all services."),
        "install": _sub(
            _SOFTWARE,
            "Install packages.",
            True,
            True,
            [_PACKAGE_PATTERN, "INSTALLOPTION"],
            "If installation fails adding the INSTALLOPTION '--no-confirm' might help",
        ),
        "remove": _sub(
            _SOFTWARE,
            "Remove packages.",
            True,
            True,
            [_PACKAGE_PATTERN, "REMOVEOPTION"],
            "If installation fails adding the INSTALLOPTION '--no-confirm' might help",
        ),
        "removeptf": _sub(_SOFTWARE, "Remove (not only) PTFs."),
        "verify": _sub(_SOFTWARE, "Verify integrity of package dependencies."),
        "source-install": _sub(
            _SOFTWARE, "Install source packages and their build dependencies."
        ),
        "install-new-recommends": _sub(
            _SOFTWARE, "Install newly added packages recommended by installed packages."
        ),
        "update": _sub(
            _UPDATES, "Update installed packages with newer versions.", True, True
        ),
        "list-updates": _sub(_UPDATES, "List available updates."),
        "patch": _sub(_UPDATES, "Install needed patches."),
        "list-patches": _sub(_UPDATES, "List available patches."),
        "dist-upgrade": _sub(_UPDATES, "Perform a distribution upgrade."),
        "patch-check": _sub(_UPDATES, "Check for patches."),
        "info": _sub(
            _QUERYING,
            "Show full information for specified packages.",
            True,
            False,
            ["PACKAGE name"],
            "Ask for full/detailed information about a single package with a known "
            "name (version, size, status, description, installation status).--  Do "
            "not use, if the name is not fully clear (use zypper search for that). ",
        ),
        "patch-info": _sub(_QUERYING, "Show full information for specified patches."),
        "pattern-info": _sub(_QUERYING, "Show full information for specified patterns."),
        "product-info": _sub(_QUERYING, "Show full information for specified products."),
        "patches": _sub(_QUERYING, "List all available patches.", True),
        "packages": _sub(
            _QUERYING,
            "List all available packages.",
            True,
            False,
            [],
            "If the package name is known, better use zypper search ",
        ),
        "patterns": _sub(_QUERYING, "List all available patterns.", True),
        "products": _sub(_QUERYING, "List all available products.", True),
        "what-provides": _sub(_QUERYING, "List packages providing specified capability."),
        "addlock": _sub(_LOCKS, "Add a package lock."),
        "removelock": _sub(_LOCKS, "Remove a package lock."),
        "locks": _sub(_LOCKS, "List current package locks."),
        "cleanlocks": _sub(_LOCKS, "Remove useless locks."),
        "locales": _sub(_LOCALES, "List requested locales (languages codes)."),
        "addlocale": _sub(_LOCALES, "Add locale(s) to requested locales."),
        "removelocale": _sub(_LOCALES, "Remove locale(s) from requested locales."),
        "versioncmp": _sub(_OTHER, "Compare two version strings."),
        "targetos": _sub(_OTHER, "Print the target operating system ID string."),
        "licenses": _sub(
            _OTHER, "Print report about licenses and EULAs of installed packages."
        ),
        "download": _sub(
            _OTHER, "Download rpms specified on the commandline to a local directory."
        ),
        "source-download": _sub(
            _OTHER, "Download source rpms for all installed packages to a local directory."
        ),
        "needs-rebooting": _sub(_OTHER, "Check if the reboot-needed flag was set."),
        "ps": _sub(
            _OTHER,
            "List running processes which might still use files and libraries deleted",
        ),
        "purge-kernels": _sub(_OTHER, "Remove old kernels."),
        "system-architecture": _sub(_OTHER, "Print the detected system architecture."),
        "subcommand": _sub(_SUBCOMMANDS, "Lists available subcommands."),
    },
)

HELP_TEXT = COMMAND.subcommands_json()


def _parameter_names(count: int) -> list[str]:
    return [f"zypperp{index:02d}" for index in range(count)]


def add_parameterized_tool(
    server: McpServer, name: str, subcommand: SubCommand
) -> Tool | None:
    """Register ``zypper_<name>`` with one required string per declared parameter.

    Subcommands with no parameters, or more than three, get a tool without
    arguments. Disabled subcommands are not registered.
    """
    if not subcommand.is_enabled:
        return None
    tool_name = f"zypper_{name}"
    declared = subcommand.parameters or []
    count = len(declared) if 1 <= len(declared) <= MAX_TOOL_PARAMETERS else 0
    keys = _parameter_names(count)
    logger.debug("adding tool %s with %d parameters", tool_name, count)

    def handler(arguments: dict[str, Any]) -> str:
        values = [arguments.get(key) for key in keys]
        if not all(isinstance(value, str) for value in values):
            plural = "parameter" if count == 1 else "parameters"
            raise ToolCallError(f"{tool_name}: expected {count} string {plural}")
        return execute_system_call(
            COMMAND, HELP_TEXT, subcommand.is_root_required, name, *values
        )

    tool = Tool(
        name=tool_name,
        handler=handler,
        description=subcommand.summary,
        properties={
            key: {"type": "string", "description": text}
            for key, text in zip(keys, declared)
        },
        required=list(keys),
    )
    server.add_tool(tool)
    return tool


def add_generic_tool(server: McpServer) -> Tool:
    """Register one tool that runs any zypper subcommand with two arguments."""
    keys = ("zyppercmd", "zypperp01", "zypperp02")

    def handler(arguments: dict[str, Any]) -> str:
        values = [arguments.get(key) for key in keys]
        if not all(isinstance(value, str) for value in values):
            raise ToolCallError(
                f"{GENERIC_TOOL_NAME}: zyppercmd, zypperp01 and zypperp02 must be strings"
            )
        subcommand, first, second = values
        return execute_system_call(COMMAND, HELP_TEXT, False, subcommand, first, second)

    tool = Tool(
        name=GENERIC_TOOL_NAME,
        handler=handler,
        description="Send a single cmd to zypper and get output back in XML (or JSON)",
        properties={
            "zyppercmd": {"type": "string", "description": HELP_TEXT},
            "zypperp01": {"type": "string", "description": _ARGUMENT_HINT},
            "zypperp02": {"type": "string", "description": _ARGUMENT_HINT},
        },
        required=list(keys),
    )
    server.add_tool(tool)
    return tool


def write_definition(path: str | Path = DEFINITION_FILE) -> Path:
    """Write the zypper command definition as JSON to ``path``."""
    target = Path(path)
    target.write_text(COMMAND.to_json(), encoding="utf-8")
    return target


def register(
    server: McpServer | None,
    running_mode: RunningMode,
    init_mode: ToolsInitMode,
) -> list[Tool]:
    """Set up the zypper tools according to the running and init modes.

    In test mode the definition is written to ``zypper.json`` in the current
    directory instead and no tools are registered.
    """
    if running_mode == RunningMode.TEST:
        write_definition(DEFINITION_FILE)
        return []
    if init_mode not in (ToolsInitMode.SINGLE, ToolsInitMode.TYPED):
        return []
    if server is None:
        raise ValueError("a server is required to register tools")
    if init_mode == ToolsInitMode.SINGLE:
        return [add_generic_tool(server)]
    tools: list[Tool] = []
    for name in sorted(COMMAND.subcommands):
        tool = add_command_tool(server, COMMAND, HELP_TEXT, name, COMMAND.subcommands[name])
        if tool is not None:
            tools.append(tool)
    logger.debug("registered %d zypper tools", len(tools))
    return tools