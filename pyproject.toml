[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "admintasks"
version = "0.0.2"
description = "MCP server exposing systemctl and zypper administration commands as tools over stdio"
requires-python = ">=3.10"
dependencies = []
keywords = ["mcp", "systemctl", "zypper", "administration", "json-rpc"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
admintasks = "admintasks.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["admintasks"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
