"""
Navigation and listing of the working directory.
"""

import logging
import os
from pathlib import Path

from kog_shell.filesystem.exceptions import (
    AccessDeniedError,
    PathNotFoundError,
    WrongPathTypeError,
)
from kog_shell.filesystem.paths import PathResolver, ResolutionMode
from kog_shell.filesystem.state import WorkingDirectoryState

logger = logging.getLogger(__name__)

DIRECTORY_PREFIX = "[DIR]  "
FILE_PREFIX = "       "


class DirectoryNavigator:
    """
    ``cd``/``pwd``/``ls`` over a WorkingDirectoryState.

    Usage:
        navigator = DirectoryNavigator(state, PathResolver())
        navigator.change_directory("~/projects")
        print(navigator.format_listing())
    """

    def __init__(self, state: WorkingDirectoryState, resolver: PathResolver):
        self.state = state
        self.resolver = resolver

    def current_directory(self) -> str:
        return self.state.base

    def change_directory(self, new_path: str) -> Path:
        """
        Validate a target like ``cd`` would and make it the new base.

        The base is left untouched when any check fails.

        Args:
            new_path: Relative, absolute, ``~`` or ``$VAR`` path

        Returns:
            The new base directory

        Raises:
            PathNotFoundError: If the target does not exist
            WrongPathTypeError: If the target is not a directory
            AccessDeniedError: If the target is not readable or traversable
        """
        base = self.state.snapshot()
        resolved = self.resolver.resolve(new_path, base, ResolutionMode.UNSANDBOXED)

        if not resolved.exists():
            raise PathNotFoundError("Path does not exist", str(resolved))
        if not resolved.is_dir():
            raise WrongPathTypeError("Not a directory", str(resolved))
        if not os.access(resolved, os.R_OK):
            raise AccessDeniedError("Directory is not readable", str(resolved))
        if not os.access(resolved, os.X_OK):
            raise AccessDeniedError(
                "Directory is not traversable (no execute permission)", str(resolved)
            )

        self.state.change_to(resolved)
        return resolved

    def list_entries(self) -> list[tuple[str, bool]]:
        """
        List immediate children of the base directory.

        Returns:
            Sorted (name, is_directory) pairs

        Raises:
            OSError: If the directory cannot be read
        """
        base = self.state.snapshot()
        with os.scandir(base) as it:
            entries = [(entry.name, entry.is_dir()) for entry in it]
        entries.sort(key=lambda item: item[0])
        logger.debug(f"Listed {len(entries)} entries in {base}")
        return entries

    def format_listing(self) -> str:
        """Render the listing with directories marked, one entry per line."""
        entries = self.list_entries()
        if not entries:
            return "Directory is empty"
        return "".join(
            f"{DIRECTORY_PREFIX if is_dir else FILE_PREFIX}{name}\n"
            for name, is_dir in entries
        )
