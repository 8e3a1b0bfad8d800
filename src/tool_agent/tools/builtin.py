"""Built-in tools for the demo agents.

Each tool is a plain function plus a ToolDescriptor. Functions raise on
failure; the registry turns the exception into a FAILED tool response.
"""

import ast
import os
import re
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from tool_agent.client.base import ToolDescriptor
from tool_agent.core.errors import ConfigurationError, ToolError
from tool_agent.tools.registry import ToolHandler, ToolRegistry

# Directory names never descended into by tool_search_files
SKIPPED_DIRS = frozenset({".git", ".venv", "venv", ".idea", ".vscode", "node_modules", "__pycache__", "vendor"})


def get_weather(location: str) -> dict[str, Any]:
    """Get the current weather for a location (mock implementation).

    Args:
        location: City and state, e.g., "New York, NY"

    Returns:
        Weather information dictionary.
    """
    weather_data = {
        "new york": {"temperature": 45, "condition": "cloudy", "wind": "10 mph"},
        "nyc": {"temperature": 45, "condition": "cloudy", "wind": "10 mph"},
        "san francisco": {"temperature": 62, "condition": "foggy", "wind": "15 mph"},
        "miami": {"temperature": 78, "condition": "sunny", "wind": "5 mph"},
        "boston": {"temperature": 38, "condition": "snowy", "wind": "20 mph"},
    }

    key = location.split(",")[0].strip().lower()
    data = weather_data.get(key, {"temperature": 70, "condition": "unknown", "wind": "calm"})

    return {"location": location, "unit": "fahrenheit", **data}


def read_file(path: str) -> dict[str, Any]:
    """Read the contents of a file."""
    return {"file_contents": Path(path or ".").read_text(encoding="utf-8")}


def search_files(path: str = ".", filter: str = "", contains: str = "") -> dict[str, Any]:
    """List files under a directory.

    Args:
        path: Directory to search from.
        filter: Regex matched against each relative path.
        contains: Regex that a file's contents must match.

    Returns:
        Relative paths; directories carry a trailing slash.
    """
    root = Path(path or ".")
    if not root.is_dir():
        raise ToolError(f"not a directory: {root}", "tool_search_files")

    name_pattern = re.compile(filter) if filter else None
    content_pattern = re.compile(contains) if contains else None

    files: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in SKIPPED_DIRS)
        current = Path(dirpath)

        entries = [(d, True) for d in dirnames] + [(f, False) for f in sorted(filenames)]
        for name, is_dir in entries:
            full_path = current / name
            rel_path = full_path.relative_to(root).as_posix()

            if name_pattern and not name_pattern.search(rel_path):
                continue

            if content_pattern:
                if is_dir:
                    continue
                try:
                    text = full_path.read_text(encoding="utf-8")
                except (OSError, UnicodeDecodeError):
                    continue
                if not content_pattern.search(text):
                    continue

            files.append(f"{rel_path}/" if is_dir else rel_path)

    return {"files": files}


def create_file(path: str) -> dict[str, Any]:
    """Create a new, empty file. Parent directories are created as needed."""
    target = Path(path)
    if target.exists():
        raise ToolError("file already exists", "tool_create_file")

    target.parent.mkdir(parents=True, exist_ok=True)
    target.touch()
    return {"path": str(target)}


def edit_code(path: str, line_number: int, type_change: str, line_change: str) -> dict[str, Any]:
    """Add, replace or delete one line of a source file.

    Python files must still parse after the edit, otherwise nothing is written.

    Args:
        path: File to edit.
        line_number: 1-based line to change.
        type_change: One of "add", "replace", "delete".
        line_change: Text to add or to replace with.

    Returns:
        A description of the change made.
    """
    target = Path(path)
    line_number = int(line_number)
    type_change = type_change.strip()

    lines = target.read_text(encoding="utf-8").split("\n")
    if line_number < 1 or line_number > len(lines):
        raise ToolError(f"line number {line_number} is out of range (1-{len(lines)})", "tool_code_editor")

    if type_change == "add":
        lines.insert(line_number - 1, line_change.rstrip("\n"))
        action = f"Added line at position {line_number}"
    elif type_change == "replace":
        lines[line_number - 1] = line_change.rstrip("\n")
        action = f"Replaced line {line_number}"
    elif type_change == "delete":
        del lines[line_number - 1]
        lines = lines or [""]
        action = f"Deleted line {line_number}"
    else:
        raise ToolError(f"unsupported change type: {type_change}, please inform the user", "tool_code_editor")

    modified = "\n".join(lines)

    if target.suffix == ".py":
        try:
            ast.parse(modified, filename=str(target))
        except SyntaxError as e:
            raise ToolError(f"syntax error after modification: {e}, please inform the user", "tool_code_editor") from e

    target.write_text(modified, encoding="utf-8")
    return {"message": action}


# Tool definitions
WEATHER_TOOL = ToolDescriptor(
    name="tool_get_weather",
    description="Get the current weather for a location",
    parameters={
        "type": "object",
        "properties": {
            "location": {
                "type": "string",
                "description": "The location to get the weather for, e.g. San Francisco, CA",
            },
        },
    },
    required=frozenset({"location"}),
)

READ_FILE_TOOL = ToolDescriptor(
    name="tool_read_file",
    description="Read the contents of a given file path.",
    parameters={
        "type": "object",
        "properties": {
            "path": {
                "type": "string",
                "description": "The relative path of a file in the working directory.",
            },
        },
    },
    required=frozenset({"path"}),
)

SEARCH_FILES_TOOL = ToolDescriptor(
    name="tool_search_files",
    description=(
        "Search a directory at a given path for files that match a given file name or contain "
        "a given string. If no path is provided, search files will look in the current directory."
    ),
    parameters={
        "type": "object",
        "properties": {
            "path": {
                "type": "string",
                "description": "Relative path to search files from. Defaults to current directory if not provided.",
            },
            "filter": {
                "type": "string",
                "description": "Regular expression applied to file names. Only matching files are returned.",
            },
            "contains": {
                "type": "string",
                "description": "Regular expression searched for inside files. Only files containing it are returned.",
            },
        },
    },
    required=frozenset({"path"}),
)

CREATE_FILE_TOOL = ToolDescriptor(
    name="tool_create_file",
    description="Creates a new file",
    parameters={
        "type": "object",
        "properties": {
            "path": {
                "type": "string",
                "description": "Relative path and name of the file to create.",
            },
        },
    },
    required=frozenset({"path"}),
)

CODE_EDITOR_TOOL = ToolDescriptor(
    name="tool_code_editor",
    description="Edit source code files including adding, replacing, and deleting lines.",
    parameters={
        "type": "object",
        "properties": {
            "path": {
                "type": "string",
                "description": "Relative path and name of the file",
            },
            "line_number": {
                "type": "integer",
                "description": "The line number for the code change",
            },
            "type_change": {
                "type": "string",
                "description": "The type of change to make: add, replace, delete",
            },
            "line_change": {
                "type": "string",
                "description": "The text to add, replace, delete",
            },
        },
    },
    required=frozenset({"path", "line_number", "type_change", "line_change"}),
)

# Map tool names to descriptors and functions
BUILTIN_TOOLS: dict[str, tuple[ToolDescriptor, ToolHandler]] = {
    WEATHER_TOOL.name: (WEATHER_TOOL, get_weather),
    READ_FILE_TOOL.name: (READ_FILE_TOOL, read_file),
    SEARCH_FILES_TOOL.name: (SEARCH_FILES_TOOL, search_files),
    CREATE_FILE_TOOL.name: (CREATE_FILE_TOOL, create_file),
    CODE_EDITOR_TOOL.name: (CODE_EDITOR_TOOL, edit_code),
}


def register_builtin_tools(registry: ToolRegistry, tools: Iterable[str] | None = None) -> ToolRegistry:
    """Register built-in tools.

    Args:
        registry: Registry to add the tools to.
        tools: Names to register. Defaults to all built-in tools.

    Returns:
        The same registry, for chaining.

    Raises:
        ConfigurationError: If a name is not a built-in tool.
    """
    names = list(tools) if tools is not None else list(BUILTIN_TOOLS)
    for name in names:
        if name not in BUILTIN_TOOLS:
            raise ConfigurationError(f"unknown built-in tool: {name}. Available: {list(BUILTIN_TOOLS)}")
        descriptor, handler = BUILTIN_TOOLS[name]
        registry.register(name, descriptor, handler)
    return registry
