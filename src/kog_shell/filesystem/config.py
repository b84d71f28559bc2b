"""
Configuration for the working-directory tool surface.
"""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ShellToolsConfig(BaseModel):
    """
    Configuration for the agent-facing filesystem tools.

    The initial directory seeds the working-directory state without being
    validated; only ``setCurrentDirectory`` checks its targets.

    Usage:
        config = ShellToolsConfig(initial_directory=Path("/tmp/work"))
        tools = ShellTools(config)
    """

    initial_directory: Path = Field(
        default_factory=lambda: Path(os.getcwd()),
        description="Starting working directory (defaults to the launch directory)",
    )

    home_directory: Path = Field(
        default_factory=Path.home,
        description="Directory substituted for a leading '~'",
    )

    environment: Optional[dict[str, str]] = Field(
        default=None,
        description="Variables used for $VAR expansion (None = live process environment)",
    )

    datetime_format: Optional[str] = Field(
        default=None,
        description="strftime pattern for getCurrentDateTimeLocal (None = long locale style)",
    )

    line_separator: str = Field(
        default=os.linesep,
        description="Terminator written after each appendFile call",
    )

    encoding: str = Field(
        default="utf-8",
        description="Text encoding for reading and writing files",
    )

    @field_validator("initial_directory", "home_directory", mode="before")
    @classmethod
    def absolutize(cls, v):
        """Make directories absolute and lexically normalized."""
        return Path(os.path.normpath(os.path.abspath(os.fspath(v))))

    def get_environment(self) -> dict[str, str]:
        """Return the mapping used for variable expansion."""
        if self.environment is None:
            return dict(os.environ)
        return self.environment
