"""
Move with an atomic rename first and a copy-then-delete fallback.

The fallback is two separate steps. If the process dies between them both
the source and the destination are left on disk.
"""

import errno
import logging
import os
import shutil
from pathlib import Path

from kog_shell.filesystem.directories import delete_tree
from kog_shell.filesystem.exceptions import (
    InvalidArgumentError,
    PathCollisionError,
    PathNotFoundError,
)
from kog_shell.filesystem.paths import (
    PathLike,
    PathResolver,
    ResolutionMode,
    is_within_directory,
)
from kog_shell.filesystem.state import WorkingDirectoryState

logger = logging.getLogger(__name__)


def _atomic_move(source: Path, destination: Path, overwrite: bool) -> None:
    """Single rename(2); raises OSError across filesystems."""
    if overwrite:
        os.replace(source, destination)
    else:
        os.rename(source, destination)


def _copy_entry(source: str, destination: str, overwrite: bool) -> None:
    """Copy one non-directory entry, recreating symlinks as links."""
    if os.path.lexists(destination):
        if not overwrite:
            raise PathCollisionError("Target already exists", destination)
        if os.path.isdir(destination) and not os.path.islink(destination):
            os.rmdir(destination)
        else:
            os.unlink(destination)

    if os.path.islink(source):
        os.symlink(os.readlink(source), destination)
    else:
        shutil.copy2(source, destination, follow_symlinks=False)


def copy_tree(source: PathLike, destination: PathLike, overwrite: bool = False) -> int:
    """
    Copy a file or a directory tree to destination.

    Directories are created before their contents, mirroring the relative
    layout of source. Symlinks are copied as links and never descended.

    Args:
        source: File, symlink or directory to copy
        destination: Path the copy should appear at
        overwrite: Replace existing non-directory entries at the destination

    Returns:
        Number of entries copied

    Raises:
        PathCollisionError: If an entry exists and overwrite is False
        OSError: On any other copy failure
    """
    source = os.fspath(source)
    destination = os.fspath(destination)

    if not os.path.isdir(source) or os.path.islink(source):
        os.makedirs(os.path.dirname(destination) or ".", exist_ok=True)
        _copy_entry(source, destination, overwrite)
        return 1

    count = 0
    for current, dirnames, filenames in os.walk(source):
        relative = os.path.relpath(current, source)
        target_dir = os.path.normpath(os.path.join(destination, relative))
        os.makedirs(target_dir, exist_ok=True)
        count += 1

        # os.walk lists symlinked directories in dirnames without descending
        linked_dirs = [d for d in dirnames if os.path.islink(os.path.join(current, d))]
        for name in sorted(filenames + linked_dirs):
            _copy_entry(
                os.path.join(current, name), os.path.join(target_dir, name), overwrite
            )
            count += 1

    return count


class TransferOperations:
    """
    ``mv`` with optional overwrite, allowed anywhere on the filesystem.

    Usage:
        transfer = TransferOperations(state, resolver)
        src, dst = transfer.move_path("report.txt", "/mnt/archive/report.txt")
    """

    def __init__(self, state: WorkingDirectoryState, resolver: PathResolver):
        self.state = state
        self.resolver = resolver

    def move_path(
        self, source: str, target: str, overwrite: bool = False
    ) -> tuple[Path, Path]:
        """
        Move source to target.

        A plain rename is tried first. Only when that fails because the paths
        are on different filesystems is the source copied to the target and
        then deleted.

        Returns:
            Tuple of (source path, target path)

        Raises:
            PathNotFoundError: If the source doesn't exist
            InvalidArgumentError: If a directory would be moved into itself
            PathCollisionError: If the target exists and overwrite is False
            OSError: If the rename fails for any reason other than EXDEV
        """
        if source is None or not source.strip() or target is None or not target.strip():
            raise InvalidArgumentError("Source and target must be provided.")

        base = self.state.snapshot()
        src = self.resolver.resolve(source, base, ResolutionMode.UNSANDBOXED)
        dst = self.resolver.resolve(target, base, ResolutionMode.UNSANDBOXED)

        if not os.path.lexists(src):
            raise PathNotFoundError("Source does not exist", str(src))
        if src.is_dir() and not src.is_symlink() and is_within_directory(dst, src):
            raise InvalidArgumentError("Cannot move a directory into itself", str(dst))
        if os.path.lexists(dst) and not overwrite:
            raise PathCollisionError("Target already exists", str(dst))

        dst.parent.mkdir(parents=True, exist_ok=True)

        try:
            _atomic_move(src, dst, overwrite)
        except OSError as move_error:
            if move_error.errno != errno.EXDEV:
                raise
            logger.info(
                f"Atomic move {src} -> {dst} failed ({move_error}); copying instead"
            )
            copied = copy_tree(src, dst, overwrite)
            if src.is_dir() and not src.is_symlink():
                deleted = delete_tree(src)
            else:
                src.unlink()
                deleted = 1
            logger.info(f"Copied {copied} and deleted {deleted} entries for {src}")

        logger.info(f"Moved {src} -> {dst}")
        return src, dst
