"""Command-line entry point that starts the administrative MCP server."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from admintasks import systemctl, zypper
from admintasks.commands import RunningMode, ToolsInitMode, load_system_commands
from admintasks.mcpserver import create_server

logger = logging.getLogger(__name__)

DEFAULT_DEFINITIONS_DIR = "/tmp/json/"

_RUNNING_MODES = {mode.name.lower(): mode for mode in RunningMode}
_INIT_MODES = {mode.name.lower(): mode for mode in ToolsInitMode}


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-server-admintasks",
        description="Serve systemctl and zypper as MCP tools over standard input and output.",
    )
    parser.add_argument(
        "--server-mode",
        choices=sorted(_RUNNING_MODES),
        default="debug",
        help="running mode of the server itself (default: debug)",
    )
    parser.add_argument(
        "--tools-mode",
        choices=sorted(_RUNNING_MODES),
        default="test",
        help="running mode of the command tools; 'test' writes their definitions "
        "to the current directory instead of registering them (default: test)",
    )
    parser.add_argument(
        "--init-mode",
        choices=sorted(_INIT_MODES),
        default="typed",
        help="how the command tools are exposed (default: typed)",
    )
    parser.add_argument(
        "--definitions",
        default=DEFAULT_DEFINITIONS_DIR,
        help=f"directory of JSON command definitions (default: {DEFAULT_DEFINITIONS_DIR})",
    )
    return parser


def _configure_logging(mode: RunningMode) -> None:
    level = logging.WARNING if mode == RunningMode.PRODUCTION else logging.DEBUG
    logging.basicConfig(stream=sys.stderr, level=level)


def _load_definitions(directory: str) -> None:
    try:
        commands = load_system_commands(Path(directory))
    except OSError as exc:
        logger.debug("cannot read command definitions from %s: %s", directory, exc)
        return
    logger.debug("found command definitions for %s", ", ".join(sorted(commands)) or "nothing")


def main(argv: Sequence[str] | None = None) -> int:
    """Set up the tools and answer MCP requests until standard input ends."""
    parser = _parser()
    args = parser.parse_args(argv)
    server_mode = _RUNNING_MODES[args.server_mode]
    tools_mode = _RUNNING_MODES[args.tools_mode]
    init_mode = _INIT_MODES[args.init_mode]

    if server_mode == RunningMode.TEST and tools_mode != RunningMode.TEST:
        parser.error("tools can only be registered when the server is not in test mode")

    _configure_logging(server_mode)
    server = None if server_mode == RunningMode.TEST else create_server()

    systemctl.register(server, tools_mode, init_mode)
    zypper.register(server, tools_mode, init_mode)
    _load_definitions(args.definitions)

    if server is None:
        return 0
    server.serve()
    return 0


if __name__ == "__main__":
    sys.exit(main())