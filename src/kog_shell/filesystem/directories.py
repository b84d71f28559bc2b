"""
Directory creation, recursive removal and in-sandbox renaming.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Optional

from kog_shell.filesystem.exceptions import (
    InvalidArgumentError,
    PathCollisionError,
    PathNotFoundError,
    SandboxViolationError,
)
from kog_shell.filesystem.paths import PathLike, PathResolver, ResolutionMode
from kog_shell.filesystem.state import WorkingDirectoryState

logger = logging.getLogger(__name__)


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def delete_tree(root: PathLike) -> int:
    """
    Delete a directory tree bottom-up without following directory symlinks.

    Files (and symlinks) are unlinked as they are found; each directory is
    removed only after everything beneath it is gone.

    Args:
        root: Directory to delete (must not itself be a symlink)

    Returns:
        Number of entries deleted, the root included

    Raises:
        OSError: If any entry cannot be deleted; entries already removed
            stay removed
    """
    count = 0
    stack: list[tuple[str, bool]] = [(os.fspath(root), False)]

    while stack:
        directory, children_done = stack.pop()
        if children_done:
            os.rmdir(directory)
            count += 1
            continue

        stack.append((directory, True))
        with os.scandir(directory) as it:
            for entry in it:
                if entry.is_dir(follow_symlinks=False):
                    stack.append((entry.path, False))
                else:
                    os.unlink(entry.path)
                    count += 1

    return count


class DirectoryOperations:
    """
    mkdir, rm -r and rename relative to the working directory.

    ``make_directory`` honors absolute paths anywhere on the filesystem,
    while ``remove_path`` and ``rename_path`` are confined to the base
    directory's subtree.

    Usage:
        dirs = DirectoryOperations(state, resolver)
        dirs.make_directory("build/output")
        path, removed = dirs.remove_path("build")
    """

    def __init__(self, state: WorkingDirectoryState, resolver: PathResolver):
        self.state = state
        self.resolver = resolver

    def make_directory(self, dir_name: str) -> Path:
        """
        Create a directory and any missing parents (``mkdir -p``).

        Raises:
            PathCollisionError: If the directory, or a file with its name,
                already exists
        """
        if _blank(dir_name):
            raise InvalidArgumentError("Directory name must be provided.")

        resolved = self.resolver.resolve(
            dir_name, self.state.snapshot(), ResolutionMode.UNSANDBOXED
        )

        if resolved.exists():
            if resolved.is_dir():
                raise PathCollisionError("Directory already exists", str(resolved))
            raise PathCollisionError(
                "A file with the same name already exists", str(resolved)
            )

        resolved.mkdir(parents=True, exist_ok=True)
        logger.info(f"Created directory: {resolved}")
        return resolved

    def remove_path(self, target: str) -> tuple[Path, Optional[int]]:
        """
        Remove a file, a symlink, or a whole directory tree.

        Args:
            target: Path inside the base directory's subtree

        Returns:
            Tuple of (removed path, deleted entry count). The count is None
            when a single file or symlink was removed.

        Raises:
            SandboxViolationError: If the path escapes the base directory
            PathNotFoundError: If nothing exists at the path
        """
        if _blank(target):
            raise InvalidArgumentError("No path provided.")

        resolved = self.resolver.resolve(
            target, self.state.snapshot(), ResolutionMode.SANDBOXED, action="delete"
        )

        if not os.path.lexists(resolved):
            raise PathNotFoundError("Path does not exist", str(resolved))

        if resolved.is_dir() and not resolved.is_symlink():
            count = delete_tree(resolved)
            logger.info(f"Removed directory tree: {resolved} ({count} entries)")
            return resolved, count

        resolved.unlink()
        logger.info(f"Removed: {resolved}")
        return resolved, None

    def rename_path(self, old_name: str, new_name: str) -> tuple[Path, Path]:
        """
        Rename or move an entry without leaving the base directory.

        Missing parents of the destination are created. Existing
        destinations are never overwritten.

        Returns:
            Tuple of (old path, new path)

        Raises:
            SandboxViolationError: If either path escapes the base directory
            PathNotFoundError: If the source doesn't exist
            PathCollisionError: If the destination already exists
        """
        if _blank(old_name) or _blank(new_name):
            raise InvalidArgumentError(
                "Both source and destination names must be provided."
            )

        base = self.state.snapshot()
        try:
            old_path = self.resolver.resolve(
                old_name, base, ResolutionMode.SANDBOXED, action="rename"
            )
            new_path = self.resolver.resolve(
                new_name, base, ResolutionMode.SANDBOXED, action="rename"
            )
        except SandboxViolationError as e:
            raise SandboxViolationError(
                "Refusing to rename outside current working directory."
            ) from e

        if not os.path.lexists(old_path):
            raise PathNotFoundError("Source does not exist", str(old_path))
        if os.path.lexists(new_path):
            raise PathCollisionError("Destination already exists", str(new_path))

        new_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(old_path), str(new_path))
        logger.info(f"Renamed {old_path} -> {new_path}")
        return old_path, new_path
