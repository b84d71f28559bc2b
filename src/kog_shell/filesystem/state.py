"""
Process-wide working-directory state.
"""

import logging
import os
import threading
from pathlib import Path

from kog_shell.filesystem.paths import PathLike, normalize

logger = logging.getLogger(__name__)


class WorkingDirectoryState:
    """
    The single mutable notion of "current directory" for a tool session.

    The initial value is taken as given (made absolute, not validated).
    Only ``DirectoryNavigator.change_directory`` replaces it, and only after
    the target passed its checks.

    ``lock`` guards "snapshot base, then operate" spans for hosts that
    dispatch tool calls from more than one thread.
    """

    def __init__(self, initial_directory: PathLike):
        self._base = normalize(os.path.abspath(os.fspath(initial_directory)))
        self.lock = threading.RLock()

    @property
    def base(self) -> str:
        """Current base directory, verbatim."""
        return self._base

    def snapshot(self) -> Path:
        """Base directory as a Path, taken once per operation."""
        with self.lock:
            return Path(self._base)

    def change_to(self, directory: PathLike) -> None:
        """Replace the base directory with an already validated path."""
        with self.lock:
            previous = self._base
            self._base = normalize(directory)
        logger.info(f"Working directory changed: {previous} -> {self._base}")

    def __repr__(self) -> str:
        return f"WorkingDirectoryState(base={self._base!r})"
