"""Descriptions of administrative system commands and how to run them."""

from __future__ import annotations

import enum
import json
import logging
import shlex
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = '{"message": "success"}'

_JSON_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


class RunningMode(enum.IntEnum):
    """How the server components are started."""

    TEST = 0
    DEBUG = 1
    PRODUCTION = 2


class ToolsInitMode(enum.IntEnum):
    """How the tools of a command are exposed."""

    SINGLE = 0
    ALL = 1
    TYPED = 2


def _dumps(obj: Any) -> str:
    """Serialise to indented JSON with HTML-sensitive characters escaped."""
    text = json.dumps(obj, indent=2, ensure_ascii=False)
    for char, escaped in _JSON_ESCAPES.items():
        text = text.replace(char, escaped)
    return text


def _field(data: Mapping[str, Any], key: str, kind: type, default: Any) -> Any:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, kind):
        raise ValueError(f"field {key!r} must be of type {kind.__name__}")
    return value


def _string_list(data: Mapping[str, Any], key: str) -> list[str] | None:
    value = _field(data, key, list, None)
    if value is None:
        return None
    if not all(isinstance(item, str) for item in value):
        raise ValueError(f"field {key!r} must hold only strings")
    return list(value)


@dataclass
class SubCommand:
    """One subcommand of a system command, as offered to clients."""

    cmd_group: str = ""
    summary: str = ""
    description: str = ""
    is_enabled: bool = False
    is_root_required: bool = False
    parameters: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "cmd_group": self.cmd_group,
            "summary": self.summary,
            "description": self.description,
            "is_enabled": self.is_enabled,
            "is_root_required": self.is_root_required,
            "parameters": None if self.parameters is None else list(self.parameters),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SubCommand":
        if not isinstance(data, Mapping):
            raise ValueError("subcommand definition must be an object")
        return cls(
            cmd_group=_field(data, "cmd_group", str, ""),
            summary=_field(data, "summary", str, ""),
            description=_field(data, "description", str, ""),
            is_enabled=_field(data, "is_enabled", bool, False),
            is_root_required=_field(data, "is_root_required", bool, False),
            parameters=_string_list(data, "parameters"),
        )


@dataclass
class SystemCommand:
    """An executable together with its default options and subcommands."""

    executable: str
    description: str = ""
    needs_root_handling: bool = False
    default_parameters: list[str] = field(default_factory=list)
    subcommands: dict[str, SubCommand] = field(default_factory=dict)

    def _subcommands_dict(self) -> dict[str, Any]:
        return {name: self.subcommands[name].to_dict() for name in sorted(self.subcommands)}

    def to_dict(self) -> dict[str, Any]:
        return {
            "executable": self.executable,
            "description": self.description,
            "needs_root_handling": self.needs_root_handling,
            "default_parameters": list(self.default_parameters),
            "subcommands": self._subcommands_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SystemCommand":
        if not isinstance(data, Mapping):
            raise ValueError("command definition must be an object")
        raw_subcommands = _field(data, "subcommands", dict, {})
        return cls(
            executable=_field(data, "executable", str, ""),
            description=_field(data, "description", str, ""),
            needs_root_handling=_field(data, "needs_root_handling", bool, False),
            default_parameters=_string_list(data, "default_parameters") or [],
            subcommands={
                name: SubCommand.from_dict(definition)
                for name, definition in raw_subcommands.items()
            },
        )

    def to_json(self) -> str:
        """The whole definition as indented JSON."""
        return _dumps(self.to_dict())

    def subcommands_json(self) -> str:
        """The subcommand table as indented JSON, keys sorted."""
        return _dumps(self._subcommands_dict())

    def build_argv(self, subcommand: str, params: Iterable[str], as_root: bool) -> list[str]:
        """The full command line for running ``subcommand`` with ``params``."""
        argv = [self.executable, *self.default_parameters, subcommand, *map(str, params)]
        if as_root:
            return ["sudo", "-b", *argv]
        return argv


def load_system_commands(directory: str | Path) -> dict[str, SystemCommand]:
    """Read every ``*.json`` command definition in ``directory``.

    Unreadable or malformed files are skipped. The result is keyed by
    executable; a later file overrides an earlier one with the same key.
    """
    commands: dict[str, SystemCommand] = {}
    for path in sorted(Path(directory).iterdir()):
        if path.is_dir() or path.suffix != ".json":
            continue
        try:
            with path.open(encoding="utf-8") as handle:
                command = SystemCommand.from_dict(json.load(handle))
        except (OSError, ValueError):
            continue
        commands[command.executable] = command
    return commands


def execute_system_call(
    command: SystemCommand,
    help_text: str,
    root_required: bool,
    subcommand: str,
    *args: str,
) -> str:
    """Run a subcommand and return its standard output as text.

    The ``help`` subcommand returns ``help_text`` without running anything.
    Empty output yields a JSON success message; a failure yields an error text.
    """
    if subcommand == "help":
        logger.debug("%s", help_text)
        return help_text
    argv = command.build_argv(subcommand, args, root_required)
    logger.debug("running %s", shlex.join(argv))
    try:
        completed = subprocess.run(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        return f"Error running {command.executable} command: {exc}"
    output = completed.stdout.decode("utf-8", errors="replace")
    return output or SUCCESS_MESSAGE