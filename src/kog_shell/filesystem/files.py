"""
File reading and writing relative to the working directory.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from kog_shell.filesystem.config import ShellToolsConfig
from kog_shell.filesystem.exceptions import (
    AccessDeniedError,
    InvalidArgumentError,
    PathCollisionError,
    PathNotFoundError,
    WrongPathTypeError,
)
from kog_shell.filesystem.paths import PathResolver, ResolutionMode
from kog_shell.filesystem.state import WorkingDirectoryState

logger = logging.getLogger(__name__)


def _require_name(name: Optional[str]) -> None:
    if name is None or not name.strip():
        raise InvalidArgumentError("File name must be provided.")


class FileOperations:
    """
    Read, create, write and append files under the working directory.

    Reading honors absolute paths anywhere on the filesystem. Creating,
    writing and appending are confined to the base directory's subtree.

    Usage:
        files = FileOperations(state, resolver, config)
        path = files.write_file("notes/todo.txt", "buy milk")
        _, content = files.read_file("notes/todo.txt")
    """

    def __init__(
        self,
        state: WorkingDirectoryState,
        resolver: PathResolver,
        config: ShellToolsConfig,
    ):
        self.state = state
        self.resolver = resolver
        self.config = config

    def read_file(self, file_name: str) -> tuple[Path, str]:
        """
        Read a whole text file.

        Args:
            file_name: File to read (relative to base or absolute)

        Returns:
            Tuple of (resolved path, decoded content)

        Raises:
            PathNotFoundError: If the file doesn't exist
            WrongPathTypeError: If the path is a directory
            AccessDeniedError: If the file is not readable
            UnicodeDecodeError: If the file can't be decoded
        """
        _require_name(file_name)
        resolved = self.resolver.resolve(
            file_name, self.state.snapshot(), ResolutionMode.UNSANDBOXED
        )

        if not resolved.exists():
            raise PathNotFoundError("File does not exist", str(resolved))
        if resolved.is_dir():
            raise WrongPathTypeError("Path is a directory, not a file", str(resolved))
        if not os.access(resolved, os.R_OK):
            raise AccessDeniedError("File is not readable", str(resolved))

        with open(resolved, "r", encoding=self.config.encoding, newline="") as f:
            content = f.read()
        logger.debug(f"Read file: {resolved} ({len(content)} chars)")
        return resolved, content

    def create_file(self, file_name: str) -> Path:
        """
        Create a new empty file, creating parent directories as needed.

        Raises:
            SandboxViolationError: If the path escapes the base directory
            PathCollisionError: If the path already exists
        """
        _require_name(file_name)
        resolved = self.resolver.resolve(
            file_name,
            self.state.snapshot(),
            ResolutionMode.SANDBOXED,
            action="create file",
        )

        if resolved.exists():
            raise PathCollisionError("File already exists", str(resolved))

        resolved.parent.mkdir(parents=True, exist_ok=True)
        # "x" fails if something appeared since the existence check
        with open(resolved, "x", encoding=self.config.encoding):
            pass
        logger.info(f"Created file: {resolved}")
        return resolved

    def write_file(self, file_name: str, content: Optional[str]) -> Path:
        """
        Overwrite or create a file with the given content.

        Raises:
            SandboxViolationError: If the path escapes the base directory
        """
        _require_name(file_name)
        resolved = self.resolver.resolve(
            file_name,
            self.state.snapshot(),
            ResolutionMode.SANDBOXED,
            action="write file",
        )

        resolved.parent.mkdir(parents=True, exist_ok=True)
        text = content or ""
        with open(resolved, "w", encoding=self.config.encoding, newline="") as f:
            f.write(text)
        logger.info(f"Wrote file: {resolved} ({len(text)} chars)")
        return resolved

    def append_file(self, file_name: str, content: Optional[str]) -> Path:
        """
        Append content plus one line separator, creating the file if missing.

        Raises:
            SandboxViolationError: If the path escapes the base directory
        """
        _require_name(file_name)
        resolved = self.resolver.resolve(
            file_name,
            self.state.snapshot(),
            ResolutionMode.SANDBOXED,
            action="append to file",
        )

        resolved.parent.mkdir(parents=True, exist_ok=True)
        with open(resolved, "a", encoding=self.config.encoding, newline="") as f:
            f.write((content or "") + self.config.line_separator)
        logger.info(f"Appended to file: {resolved}")
        return resolved
