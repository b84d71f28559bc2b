"""
Shell-like path expansion and resolution against a base directory.

Nothing in this module touches the filesystem: expansion is a pure string
transform and containment is a lexical comparison of normalized paths.
"""

import logging
import os
import re
from enum import Enum
from pathlib import Path, PurePath
from typing import Callable, Mapping, Optional, Union

from kog_shell.filesystem.exceptions import InvalidArgumentError, SandboxViolationError

logger = logging.getLogger(__name__)

_BRACE_VAR = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")
_BARE_VAR = re.compile(r"\$([A-Za-z_][A-Za-z0-9_]*)")

PathLike = Union[str, os.PathLike]


class ResolutionMode(str, Enum):
    """How a resolved path relates to the base directory."""

    # Absolute inputs honored as-is, relative inputs resolve under base
    UNSANDBOXED = "unsandboxed"
    # Additionally required to be base or a descendant of it
    SANDBOXED = "sandboxed"


def expand_path(
    raw: Optional[str],
    home: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """
    Expand ``~``, ``${NAME}`` and ``$NAME`` without invoking a shell.

    Brace references are substituted before bare ones, and the bare pass
    scans the brace pass's output: with ``NESTED=$PROJECT``, ``${NESTED}``
    gives the value of ``PROJECT``. Neither pass rescans its own output,
    so ``$NESTED`` gives ``$PROJECT``. Unknown variables expand to an empty string and a ``$``
    not followed by an identifier is left alone.

    Args:
        raw: Input path string
        home: Home directory for ``~`` (default: the user's home)
        env: Variables for expansion (default: the process environment)

    Returns:
        The expanded string (blank input is returned unchanged)
    """
    if raw is None or not raw.strip():
        return raw

    if home is None:
        home = str(Path.home())
    if env is None:
        env = os.environ

    s = raw
    if s == "~" or s.startswith("~/"):
        s = home + s[1:]

    s = _BRACE_VAR.sub(lambda m: env.get(m.group(1), ""), s)
    s = _BARE_VAR.sub(lambda m: env.get(m.group(1), ""), s)
    return s


def normalize(path: PathLike) -> str:
    """Collapse separators and resolve ``.``/``..`` lexically."""
    return os.path.normpath(os.fspath(path))


def is_within_directory(path: PathLike, directory: PathLike) -> bool:
    """Check if path is directory itself or lies beneath it (component-wise)."""
    try:
        PurePath(normalize(path)).relative_to(normalize(directory))
        return True
    except ValueError:
        return False


def resolve_path(
    raw: Optional[str],
    base: PathLike,
    mode: ResolutionMode = ResolutionMode.UNSANDBOXED,
    *,
    home: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    action: str = "access",
) -> Path:
    """
    Turn a user supplied path into an absolute, normalized path.

    Args:
        raw: Possibly relative, possibly ``~``/``$VAR`` bearing path
        base: Absolute base directory for relative inputs
        mode: Resolution policy
        home: Home directory for ``~`` expansion
        env: Variables for ``$VAR`` expansion
        action: Verb phrase used in the refusal message

    Returns:
        The resolved absolute path

    Raises:
        InvalidArgumentError: If no path was given
        SandboxViolationError: If mode is SANDBOXED and the result escapes base
    """
    expanded = expand_path(raw, home=home, env=env)
    if expanded is None:
        raise InvalidArgumentError("No path provided")

    base_norm = normalize(base)
    if os.path.isabs(expanded):
        resolved = normalize(expanded)
    else:
        resolved = normalize(os.path.join(base_norm, expanded))

    logger.debug(f"Resolved {raw!r} against {base_norm} -> {resolved} ({mode.value})")

    if mode == ResolutionMode.SANDBOXED and not is_within_directory(resolved, base_norm):
        logger.warning(f"Refusing to {action} outside {base_norm}: {resolved}")
        raise SandboxViolationError(
            f"Refusing to {action} outside current working directory", resolved
        )

    return Path(resolved)


class PathResolver:
    """
    Resolver bound to a home directory and an environment source.

    The environment is read through a callable on every resolution so a
    changed process environment is picked up without rebuilding the
    resolver.

    Usage:
        resolver = PathResolver(home="/home/u", env=lambda: {"WORK": "/w"})
        resolver.resolve("$WORK/notes.txt", "/tmp")  # Path("/w/notes.txt")
    """

    def __init__(
        self,
        home: Optional[PathLike] = None,
        env: Optional[Callable[[], Mapping[str, str]]] = None,
    ):
        self.home = os.fspath(home) if home is not None else str(Path.home())
        self._env = env or (lambda: os.environ)

    def expand(self, raw: Optional[str]) -> Optional[str]:
        return expand_path(raw, home=self.home, env=self._env())

    def resolve(
        self,
        raw: Optional[str],
        base: PathLike,
        mode: ResolutionMode = ResolutionMode.UNSANDBOXED,
        action: str = "access",
    ) -> Path:
        return resolve_path(
            raw, base, mode, home=self.home, env=self._env(), action=action
        )
