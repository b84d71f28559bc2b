"""
CLI module for kog-shell.
"""

from kog_shell.cli.main import cli

__all__ = ["cli"]
