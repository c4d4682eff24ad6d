"""
Unified CLI Error Handling
==========================

Provides consistent error handling and exit codes for the z80lint tool.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Standard exit codes for the CLI."""
    SUCCESS = 0
    LINT_ERRORS = 1      # Diagnostics were found in the analyzed sources
    INVALID_ARGS = 2     # Invalid arguments, configuration or unreadable files
    INTERNAL_ERROR = 3   # Unexpected internal error


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Unified exception handler for the CLI.

    Formats the error message appropriately, optionally prints traceback
    in verbose mode, and exits with the correct exit code.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors
        error_type: Optional prefix for the error message (e.g., "Config")

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    from z80_lint.errors import LintError

    if isinstance(error, LintError):
        # Library errors already carry "error:" and an optional hint line
        prefix = f"{error_type} " if error_type else ""
        click.echo(f"{prefix}{error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, click.BadParameter):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, (FileNotFoundError, PermissionError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
