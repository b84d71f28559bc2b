"""
Agent-facing tool surface for the working-directory filesystem.

Provides OpenAI function-calling schemas for every tool and a dispatcher
that turns a tool name plus string-typed arguments into a status string.
Nothing raised by an operation ever crosses ``execute_tool``.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from kog_shell.filesystem.config import ShellToolsConfig
from kog_shell.filesystem.directories import DirectoryOperations
from kog_shell.filesystem.exceptions import ErrorKind, InvalidArgumentError, ShellToolError
from kog_shell.filesystem.files import FileOperations
from kog_shell.filesystem.navigation import DirectoryNavigator
from kog_shell.filesystem.paths import PathResolver
from kog_shell.filesystem.results import ToolResult
from kog_shell.filesystem.state import WorkingDirectoryState
from kog_shell.filesystem.transfer import TransferOperations

logger = logging.getLogger(__name__)


def format_local_timestamp(now: datetime, fmt: Optional[str] = None) -> str:
    """Render e.g. ``Monday, October 19, 2026 09:05:03.120 AM``."""
    if fmt:
        return now.strftime(fmt)
    return (
        f"{now:%A}, {now:%B} {now.day}, {now:%Y} "
        f"{now:%I:%M:%S}.{now.microsecond // 1000:03d} {now:%p}"
    )


def _string_param(description: str) -> dict[str, str]:
    return {"type": "string", "description": description}


# name -> (description, properties, required)
TOOL_DEFINITIONS: dict[str, tuple[str, dict[str, dict[str, str]], list[str]]] = {
    "getCurrentDateTimeLocal": (
        "Get current system date time",
        {},
        [],
    ),
    "setCurrentDirectory": (
        "Change the current working directory (validated like 'cd'). "
        "Supports relative paths, '~' and $VAR / ${VAR}.",
        {"newDirectory": _string_param("Directory to change into")},
        ["newDirectory"],
    ),
    "getCurrentDirectory": (
        "Get the current working directory",
        {},
        [],
    ),
    "listCurrentDirectory": (
        "List files and directories in the current working directory",
        {},
        [],
    ),
    "readFile": (
        "Read the contents of a file. Relative paths resolve against the "
        "current working directory.",
        {"fileName": _string_param("File to read")},
        ["fileName"],
    ),
    "removePath": (
        "Remove a file or directory (recursive). Only paths under the "
        "current working directory are allowed.",
        {"target": _string_param("File or directory to remove")},
        ["target"],
    ),
    "renamePath": (
        "Rename or move a file/directory within the current working directory",
        {
            "oldName": _string_param("Existing path"),
            "newName": _string_param("New path (must not exist)"),
        },
        ["oldName", "newName"],
    ),
    "makeDirectory": (
        "Create a new directory. Absolute paths are honored; relative paths "
        "are resolved against the current working directory (mkdir -p).",
        {"dirName": _string_param("Directory to create")},
        ["dirName"],
    ),
    "createFile": (
        "Create a new empty file under the current working directory",
        {"fileName": _string_param("File to create")},
        ["fileName"],
    ),
    "writeFile": (
        "Write text content into a file under the current working directory "
        "(overwrites existing content)",
        {
            "fileName": _string_param("File to write"),
            "content": _string_param("Full new content of the file"),
        },
        ["fileName", "content"],
    ),
    "appendFile": (
        "Append a line of text to a file under the current working directory "
        "(creates file if missing)",
        {
            "fileName": _string_param("File to append to"),
            "content": _string_param("Text to append; a line break is added"),
        },
        ["fileName", "content"],
    ),
    "movePath": (
        "Move or rename a file/directory. Absolute paths are honored; relatives "
        "resolve against the current working directory. Set overwrite=true to "
        "replace an existing target.",
        {
            "source": _string_param("Path to move"),
            "target": _string_param("Destination path"),
            "overwrite": {
                "type": "boolean",
                "description": "Replace an existing target (default: false)",
            },
        },
        ["source", "target"],
    ),
}


class ShellTools:
    """
    Stateful filesystem tools for an autonomous agent.

    Keeps one current directory for the whole session. Every tool returns a
    ``ToolResult``; ``execute_tool`` formats it to the string the agent sees.

    Usage:
        tools = ShellTools(ShellToolsConfig(initial_directory=Path("/tmp/work")))

        # Schemas for the LLM
        schemas = tools.get_tool_schemas()

        # Dispatch a call the model made
        text = tools.execute_tool("writeFile", {"fileName": "a.txt", "content": "hi"})
    """

    def __init__(self, config: Optional[ShellToolsConfig] = None):
        """
        Initialize the tool surface.

        Args:
            config: Tool configuration (defaults seed the state from the
                launch directory)
        """
        self.config = config or ShellToolsConfig()
        self.state = WorkingDirectoryState(self.config.initial_directory)
        self.resolver = PathResolver(
            home=self.config.home_directory, env=self.config.get_environment
        )
        self.navigator = DirectoryNavigator(self.state, self.resolver)
        self.files = FileOperations(self.state, self.resolver, self.config)
        self.directories = DirectoryOperations(self.state, self.resolver)
        self.transfer = TransferOperations(self.state, self.resolver)

        self._handlers: dict[str, Callable[..., ToolResult]] = {
            "getCurrentDateTimeLocal": self.get_current_date_time_local,
            "setCurrentDirectory": self.set_current_directory,
            "getCurrentDirectory": self.get_current_directory,
            "listCurrentDirectory": self.list_current_directory,
            "readFile": self.read_file,
            "removePath": self.remove_path,
            "renamePath": self.rename_path,
            "makeDirectory": self.make_directory,
            "createFile": self.create_file,
            "writeFile": self.write_file,
            "appendFile": self.append_file,
            "movePath": self.move_path,
        }

    @property
    def tool_names(self) -> list[str]:
        return list(TOOL_DEFINITIONS)

    def get_tool_schemas(self) -> list[dict[str, Any]]:
        """
        Get OpenAI function calling schemas for all tools.

        Returns:
            List of tool schemas in OpenAI format
        """
        return [
            {
                "type": "function",
                "function": {
                    "name": name,
                    "description": description,
                    "parameters": {
                        "type": "object",
                        "properties": properties,
                        "required": required,
                    },
                },
            }
            for name, (description, properties, required) in TOOL_DEFINITIONS.items()
        ]

    def execute_tool(self, tool_name: str, arguments: Optional[dict[str, Any]] = None) -> str:
        """
        Execute a tool call from an LLM.

        Args:
            tool_name: Name of the tool to execute
            arguments: Tool arguments keyed by the schema's parameter names

        Returns:
            Human readable status string (never raises)
        """
        return str(self.dispatch(tool_name, arguments))

    def dispatch(self, tool_name: str, arguments: Optional[dict[str, Any]] = None) -> ToolResult:
        """Like ``execute_tool`` but returns the structured result."""
        handler = self._handlers.get(tool_name)
        if handler is None:
            logger.warning(f"Unknown tool requested: {tool_name!r}")
            return ToolResult.fail(f"Unknown tool: {tool_name}", ErrorKind.INVALID_ARGUMENT)

        try:
            kwargs = self._bind_arguments(tool_name, arguments)
        except ShellToolError as e:
            logger.warning(f"Rejected call to {tool_name}: {e}")
            return ToolResult.from_error(e)

        logger.debug(f"Executing {tool_name} with {kwargs}")
        with self.state.lock:
            return handler(**kwargs)

    def _bind_arguments(
        self, tool_name: str, arguments: Optional[dict[str, Any]]
    ) -> dict[str, Any]:
        """Map schema argument names onto handler keyword arguments."""
        arguments = arguments or {}
        if not isinstance(arguments, dict):
            raise InvalidArgumentError(f"Arguments for {tool_name} must be an object")

        _, properties, required = TOOL_DEFINITIONS[tool_name]
        unexpected = sorted(set(arguments) - set(properties))
        if unexpected:
            raise InvalidArgumentError(
                f"Unexpected argument(s) for {tool_name}: {', '.join(unexpected)}"
            )
        missing = [name for name in required if name not in arguments]
        if missing:
            raise InvalidArgumentError(
                f"Missing argument(s) for {tool_name}: {', '.join(missing)}"
            )

        kwargs: dict[str, Any] = {}
        for name, value in arguments.items():
            if properties[name]["type"] == "boolean":
                kwargs[_snake(name)] = _coerce_bool(name, value)
            elif value is None or isinstance(value, str):
                kwargs[_snake(name)] = value
            else:
                raise InvalidArgumentError(f"Argument {name} must be a string")
        return kwargs

    def _guard(self, failure_prefix: str, operation: Callable[[], ToolResult]) -> ToolResult:
        """Run an operation and turn every failure into a result."""
        try:
            return operation()
        except ShellToolError as e:
            logger.warning(f"{failure_prefix}: {e}")
            return ToolResult.from_error(e)
        except PermissionError as e:
            logger.warning(f"{failure_prefix}: {e}")
            return ToolResult.fail(
                f"{failure_prefix}: {e}", ErrorKind.PERMISSION_DENIED, e.filename
            )
        except Exception as e:
            logger.error(f"{failure_prefix}: unexpected error: {e}")
            return ToolResult.fail(f"{failure_prefix}: {e}", ErrorKind.UNEXPECTED)

    # Navigation

    def get_current_date_time_local(self) -> ToolResult:
        return self._guard(
            "Failed to read clock",
            lambda: ToolResult.ok(
                format_local_timestamp(datetime.now(), self.config.datetime_format)
            ),
        )

    def set_current_directory(self, new_directory: Optional[str] = None) -> ToolResult:
        def operation() -> ToolResult:
            resolved = self.navigator.change_directory(new_directory)
            return ToolResult.ok(f"Changed directory to {resolved}", str(resolved))

        return self._guard("Failed to change directory", operation)

    def get_current_directory(self) -> ToolResult:
        base = self.navigator.current_directory()
        return ToolResult.ok(base, base)

    def list_current_directory(self) -> ToolResult:
        return self._guard(
            "Error reading directory",
            lambda: ToolResult.ok(self.navigator.format_listing(), self.state.base),
        )

    # Files

    def read_file(self, file_name: Optional[str] = None) -> ToolResult:
        def operation() -> ToolResult:
            path, content = self.files.read_file(file_name)
            return ToolResult.ok(content, str(path))

        return self._guard("Error reading file", operation)

    def create_file(self, file_name: Optional[str] = None) -> ToolResult:
        def operation() -> ToolResult:
            path = self.files.create_file(file_name)
            return ToolResult.ok(f"Created file: {path}", str(path))

        return self._guard("Failed to create file", operation)

    def write_file(
        self, file_name: Optional[str] = None, content: Optional[str] = None
    ) -> ToolResult:
        def operation() -> ToolResult:
            path = self.files.write_file(file_name, content)
            return ToolResult.ok(f"Wrote file: {path}", str(path))

        return self._guard("Failed to write file", operation)

    def append_file(
        self, file_name: Optional[str] = None, content: Optional[str] = None
    ) -> ToolResult:
        def operation() -> ToolResult:
            path = self.files.append_file(file_name, content)
            return ToolResult.ok(f"Appended to file: {path}", str(path))

        return self._guard("Failed to append to file", operation)

    # Directories

    def make_directory(self, dir_name: Optional[str] = None) -> ToolResult:
        def operation() -> ToolResult:
            path = self.directories.make_directory(dir_name)
            return ToolResult.ok(
                f"The directory `{path.name}` has been created successfully.", str(path)
            )

        return self._guard("Failed to create directory", operation)

    def remove_path(self, target: Optional[str] = None) -> ToolResult:
        def operation() -> ToolResult:
            path, count = self.directories.remove_path(target)
            if count is None:
                return ToolResult.ok(f"Removed: {path}", str(path))
            return ToolResult.ok(
                f"Removed directory tree: {path} ({count} entries deleted)", str(path)
            )

        return self._guard("Failed to remove path", operation)

    def rename_path(
        self, old_name: Optional[str] = None, new_name: Optional[str] = None
    ) -> ToolResult:
        def operation() -> ToolResult:
            old_path, new_path = self.directories.rename_path(old_name, new_name)
            return ToolResult.ok(f"Renamed {old_path} → {new_path}", str(new_path))

        return self._guard("Failed to rename", operation)

    def move_path(
        self,
        source: Optional[str] = None,
        target: Optional[str] = None,
        overwrite: bool = False,
    ) -> ToolResult:
        def operation() -> ToolResult:
            src, dst = self.transfer.move_path(source, target, overwrite)
            return ToolResult.ok(f"Moved: {src} → {dst}", str(dst))

        return self._guard("Failed to move", operation)


def _snake(name: str) -> str:
    """newDirectory -> new_directory"""
    return "".join(f"_{c.lower()}" if c.isupper() else c for c in name)


def _coerce_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise InvalidArgumentError(f"Argument {name} must be true or false")
