"""
Exceptions for working-directory filesystem operations.

Every exception carries the offending path, a human readable reason and an
``ErrorKind`` tag so the tool surface can report it without inspecting the
exception type.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Failure categories reported by the tool surface."""

    NOT_FOUND = "not_found"
    WRONG_TYPE = "wrong_type"
    PERMISSION_DENIED = "permission_denied"
    COLLISION = "collision"
    SANDBOX_VIOLATION = "sandbox_violation"
    INVALID_ARGUMENT = "invalid_argument"
    UNEXPECTED = "unexpected"


class ShellToolError(Exception):
    """Base exception for working-directory filesystem operations."""

    kind: ErrorKind = ErrorKind.UNEXPECTED

    def __init__(self, reason: str, path: Optional[str] = None):
        self.reason = reason
        self.path = path
        super().__init__(f"{reason}: {path}" if path is not None else reason)


class PathNotFoundError(ShellToolError):
    """Raised when a path that must exist is missing."""

    kind = ErrorKind.NOT_FOUND


class WrongPathTypeError(ShellToolError):
    """Raised when a file was expected and a directory was found, or vice versa."""

    kind = ErrorKind.WRONG_TYPE


class AccessDeniedError(ShellToolError):
    """Raised when a path is not readable, writable or traversable."""

    kind = ErrorKind.PERMISSION_DENIED


class PathCollisionError(ShellToolError):
    """Raised when a target already exists and exclusivity is required."""

    kind = ErrorKind.COLLISION


class SandboxViolationError(ShellToolError):
    """Raised when a resolved path escapes the current working directory."""

    kind = ErrorKind.SANDBOX_VIOLATION


class InvalidArgumentError(ShellToolError):
    """Raised when a tool argument is missing or blank."""

    kind = ErrorKind.INVALID_ARGUMENT
