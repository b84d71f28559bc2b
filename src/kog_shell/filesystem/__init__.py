"""
Sandboxed working-directory filesystem tools for LLM agents.

This module keeps one mutable current directory, expands shell-like path
syntax (``~``, ``$VAR``, ``${VAR}``) without a shell, and confines every
mutating operation that needs it to the current directory's subtree.
"""

from kog_shell.filesystem.config import ShellToolsConfig
from kog_shell.filesystem.directories import DirectoryOperations, delete_tree
from kog_shell.filesystem.exceptions import (
    AccessDeniedError,
    ErrorKind,
    InvalidArgumentError,
    PathCollisionError,
    PathNotFoundError,
    SandboxViolationError,
    ShellToolError,
    WrongPathTypeError,
)
from kog_shell.filesystem.files import FileOperations
from kog_shell.filesystem.navigation import DirectoryNavigator
from kog_shell.filesystem.paths import (
    PathResolver,
    ResolutionMode,
    expand_path,
    is_within_directory,
    resolve_path,
)
from kog_shell.filesystem.results import ToolResult
from kog_shell.filesystem.state import WorkingDirectoryState
from kog_shell.filesystem.tools import ShellTools
from kog_shell.filesystem.transfer import TransferOperations, copy_tree

__all__ = [
    # Config
    "ShellToolsConfig",
    # Paths
    "PathResolver",
    "ResolutionMode",
    "expand_path",
    "is_within_directory",
    "resolve_path",
    # State and operations
    "WorkingDirectoryState",
    "DirectoryNavigator",
    "FileOperations",
    "DirectoryOperations",
    "TransferOperations",
    "copy_tree",
    "delete_tree",
    # Tool surface
    "ShellTools",
    "ToolResult",
    # Exceptions
    "ErrorKind",
    "ShellToolError",
    "PathNotFoundError",
    "WrongPathTypeError",
    "AccessDeniedError",
    "PathCollisionError",
    "SandboxViolationError",
    "InvalidArgumentError",
]
