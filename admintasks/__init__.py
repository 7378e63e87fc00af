"""MCP server offering systemctl and zypper subcommands as tools over stdio."""

__version__ = "0.0.2"