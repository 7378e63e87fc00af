# admintasks

An MCP (Model Context Protocol) server that lets an assistant run common
system administration tasks through `systemctl` and `zypper`. Each enabled
subcommand can be offered as a tool, such as `systemctl_status`,
`systemctl_list-units` or `zypper_search`. The server speaks
newline-delimited JSON-RPC over standard input and output and answers
`initialize`, `ping`, `tools/list` and `tools/call`. Notifications get no
reply.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Running the server

```
admintasks --tools-mode debug
```

The command reads JSON-RPC requests from stdin and writes replies to stdout
until stdin ends. An MCP client normally starts it as a subprocess. Log
messages go to stderr.

Options:

- `--server-mode {debug,production,test}` (default `debug`): `production`
  logs warnings only, `debug` logs debug messages. In `test` no server is
  started and the command returns after setting up the tools; this needs
  `--tools-mode test`.
- `--tools-mode {debug,production,test}` (default `test`): in `debug` and
  `production` the tools are registered on the server. In `test` no tools are
  registered. Instead, the full definitions are written to `systemctl.json`
  and `zypper.json` in the current directory.
- `--init-mode {all,single,typed}` (default `typed`): `typed` registers one
  tool per enabled subcommand of both commands. `single` registers only the
  generic `tool_zypper` tool and no systemctl tools. `all` registers nothing.
- `--definitions DIR` (default `/tmp/json/`): directory of JSON command
  definitions to read at start-up.

With the defaults, `admintasks` writes the two definition files and then
serves no tools. Pass `--tools-mode debug` or `--tools-mode production` to
get the tools.

## Tools

Each tool runs its executable with fixed default options:

- `systemctl`: `--output=json-pretty --full --no-pager`
- `zypper`: `--xmlout --terse --non-interactive`

In `typed` mode, every tool takes an optional `Parameters` array of strings.
These strings are passed to the command after the subcommand. A non-string
entry makes the call fail with a JSON-RPC error. The zypper subcommands
`install`, `remove`, `update` and `refresh` need root, so they run through
`sudo -b`.

A tool returns what the command wrote to stdout. If the command wrote
nothing, the result is `{"message": "success"}`. If the command cannot be
started or exits with a non-zero status, the result is an
`Error running <executable> command: ...` text. The `systemctl_help` and
`zypper_help` tools do not run the executable. They return the JSON
description of every known subcommand of their command.

In `single` mode, the `tool_zypper` tool takes three required strings:
`zyppercmd` (the subcommand), `zypperp01` and `zypperp02`. It runs
`zypper` with them, without `sudo`.

## Using the library

```python
from admintasks.mcpserver import create_server
from admintasks.commands import RunningMode, ToolsInitMode
from admintasks import systemctl, zypper

server = create_server()
systemctl.register(server, RunningMode.DEBUG, ToolsInitMode.TYPED)
zypper.register(server, RunningMode.DEBUG, ToolsInitMode.TYPED)
server.serve()
```

- `admintasks.commands` holds `SubCommand` and `SystemCommand`, which
  convert to and from dicts and JSON. It also holds `execute_system_call`,
  which runs a subcommand and returns its output text.
  `SystemCommand.build_argv` returns the command line that would be run.
- `admintasks.mcpserver` holds `McpServer`, `Tool`, `ToolCallError` and
  `add_command_tool`, which registers `<executable>_<subcommand>` for an
  enabled subcommand. `McpServer.handle` answers one already-decoded
  message. `McpServer.serve` answers a stream.
- `systemctl.COMMAND` and `zypper.COMMAND` are the built-in definitions.
  `systemctl.write_definition(path)` and `zypper.write_definition(path)`
  write them as JSON. `admintasks.commands.load_system_commands(directory)`
  reads every `*.json` file in a directory back, keyed by executable name,
  and skips unreadable or malformed files.
- `zypper.add_parameterized_tool(server, name, subcommand)` registers
  `zypper_<name>` with one required string argument per declared parameter:
  `zypperp00`, `zypperp01` and so on, up to three. `zypper.add_generic_tool`
  registers `tool_zypper`.

## What it does not do

- The definitions read from `--definitions` are only listed in the debug
  log. They do not add or change any tools. Only the built-in systemctl and
  zypper definitions become tools.
- The only transport is stdio. There is no HTTP or socket transport.
- The server offers tools only. It has no resources or prompts.