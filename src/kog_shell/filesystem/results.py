"""
Tagged results returned by the tool surface.
"""

from dataclasses import dataclass
from typing import Optional

from kog_shell.filesystem.exceptions import ErrorKind, ShellToolError


@dataclass(frozen=True)
class ToolResult:
    """
    Outcome of a single tool invocation.

    The structured form is what the operations are tested against; the
    dispatcher only ever sees ``str(result)``.

    Attributes:
        success: Whether the operation completed
        message: Human readable status (the string handed to the agent)
        kind: Failure category, None on success
        path: Absolute path the operation acted on, if any
    """

    success: bool
    message: str
    kind: Optional[ErrorKind] = None
    path: Optional[str] = None

    @classmethod
    def ok(cls, message: str, path: Optional[str] = None) -> "ToolResult":
        """Create a successful result."""
        return cls(success=True, message=message, path=path)

    @classmethod
    def fail(
        cls, message: str, kind: ErrorKind, path: Optional[str] = None
    ) -> "ToolResult":
        """Create a failed result."""
        return cls(success=False, message=message, kind=kind, path=path)

    @classmethod
    def from_error(cls, error: ShellToolError) -> "ToolResult":
        """Create a failed result from a typed filesystem error."""
        return cls.fail(str(error), error.kind, error.path)

    def __str__(self) -> str:
        return self.message
