"""A small Model Context Protocol server speaking JSON-RPC over stdio."""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, TextIO

from admintasks.commands import SubCommand, SystemCommand, execute_system_call

logger = logging.getLogger(__name__)

SERVER_NAME = "mcp_server_admintasks"
SERVER_VERSION = "0.0.2"
SUPPORTED_PROTOCOL_VERSIONS = ("2025-03-26", "2024-11-05")

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class ToolCallError(Exception):
    """Raised by a tool handler when a call cannot be carried out."""


@dataclass
class Tool:
    """A callable tool with its JSON input schema."""

    name: str
    handler: Callable[[dict[str, Any]], str]
    description: str = ""
    properties: dict[str, Any] = field(default_factory=dict)
    required: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": "object", "properties": dict(self.properties)}
        if self.required:
            schema["required"] = list(self.required)
        return {"name": self.name, "description": self.description, "inputSchema": schema}


def _error(msg_id: Any, code: int, message: str) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": msg_id, "error": {"code": code, "message": message}}


def _result(msg_id: Any, result: dict[str, Any]) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": msg_id, "result": result}


class McpServer:
    """Registry of tools answering MCP requests."""

    def __init__(self, name: str, version: str) -> None:
        self.name = name
        self.version = version
        self.tools: dict[str, Tool] = {}

    def add_tool(self, tool: Tool) -> None:
        """Register a tool, replacing any tool of the same name."""
        self.tools[tool.name] = tool

    def handle(self, message: Any) -> dict[str, Any] | None:
        """Answer one JSON-RPC message; notifications get no answer."""
        if not isinstance(message, dict) or not isinstance(message.get("method"), str):
            msg_id = message.get("id") if isinstance(message, dict) else None
            return _error(msg_id, INVALID_REQUEST, "Invalid Request")
        if "id" not in message:
            logger.debug("notification %s", message["method"])
            return None
        msg_id = message["id"]
        params = message.get("params") or {}
        if not isinstance(params, dict):
            return _error(msg_id, INVALID_PARAMS, "params must be an object")

        method = message["method"]
        if method == "initialize":
            return _result(msg_id, self._initialize(params))
        if method == "ping":
            return _result(msg_id, {})
        if method == "tools/list":
            return _result(msg_id, {"tools": [tool.to_dict() for tool in self.tools.values()]})
        if method == "tools/call":
            return self._call_tool(msg_id, params)
        return _error(msg_id, METHOD_NOT_FOUND, f"Method {method} not found")

    def _initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        requested = params.get("protocolVersion")
        version = (
            requested if requested in SUPPORTED_PROTOCOL_VERSIONS else SUPPORTED_PROTOCOL_VERSIONS[0]
        )
        return {
            "protocolVersion": version,
            "capabilities": {"tools": {"listChanged": False}},
            "serverInfo": {"name": self.name, "version": self.version},
        }

    def _call_tool(self, msg_id: Any, params: dict[str, Any]) -> dict[str, Any]:
        name = params.get("name")
        tool = self.tools.get(name) if isinstance(name, str) else None
        if tool is None:
            return _error(msg_id, INVALID_PARAMS, f"tool '{name}' not found")
        arguments = params.get("arguments") or {}
        if not isinstance(arguments, dict):
            return _error(msg_id, INVALID_PARAMS, "arguments must be an object")
        try:
            text = tool.handler(arguments)
        except ToolCallError as exc:
            return _error(msg_id, INTERNAL_ERROR, str(exc))
        return _result(msg_id, {"content": [{"type": "text", "text": text}], "isError": False})

    def serve(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        """Answer newline-delimited JSON-RPC messages until input ends."""
        stdin = sys.stdin if stdin is None else stdin
        stdout = sys.stdout if stdout is None else stdout
        for line in stdin:
            if not line.strip():
                continue
            try:
                message = json.loads(line)
            except ValueError:
                response = _error(None, PARSE_ERROR, "Parse error")
            else:
                response = self.handle(message)
            if response is not None:
                stdout.write(json.dumps(response) + "\n")
                stdout.flush()


def create_server() -> McpServer:
    """The server that carries the administrative tools."""
    return McpServer(SERVER_NAME, SERVER_VERSION)


def add_command_tool(
    server: McpServer,
    command: SystemCommand,
    help_text: str,
    name: str,
    subcommand: SubCommand,
) -> Tool | None:
    """Register ``<executable>_<name>`` if the subcommand is enabled."""
    if not subcommand.is_enabled:
        return None
    tool_name = f"{command.executable}_{name}"
    logger.debug("adding tool %s", tool_name)

    def handler(arguments: dict[str, Any]) -> str:
        raw = arguments.get("Parameters")
        params: list[str] = []
        if isinstance(raw, list):
            for item in raw:
                if not isinstance(item, str):
                    raise ToolCallError(f"{tool_name}: parameters must be strings")
                params.append(item)
        return execute_system_call(
            command, help_text, subcommand.is_root_required, name, *params
        )

    tool = Tool(
        name=tool_name,
        handler=handler,
        description=subcommand.summary,
        properties={"Parameters": {"type": "array", "items": {"type": "string"}}},
    )
    server.add_tool(tool)
    return tool