"""CLI command implementations for the stocknest application.

This package contains subcommands for the stocknest CLI, including:
- validate: Validate a nesting job file
"""

from stocknest.cli.commands.validate import display_load_error, validate_command

__all__ = ["display_load_error", "validate_command"]
