"""
z80-lint Error Hierarchy
========================

This module defines the exception hierarchy for z80-lint. All exceptions
inherit from LintError, allowing callers to catch every library error with
a single except clause if desired.

Findings about the analyzed source (duplicate labels, undefined symbols,
invalid operands, unbalanced blocks) are NOT exceptions: they are reported
as Diagnostic objects (see z80_lint.diagnostics). The exceptions below are
reserved for misuse of the API, unreadable input files and faults in the
grammar tables themselves.

Exception Hierarchy
-------------------
LintError (base)
├── GrammarError - a usage rule string cannot be compiled
├── UnknownDialectError - no dialect registered under the requested name
├── ConfigError - invalid configuration value
└── SourceReadError - a source file cannot be read or decoded

Error messages follow this format:
    filename:line:column: error: description
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class LintError(Exception):
    """
    Base exception for all z80-lint errors.

    Attributes:
        message: The error description
        location: Where the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional["SourceLocation"] = None,
        hint: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with location prefix and hint."""
        if self.location:
            parts = [f"{self.location}: error: {self.message}"]
        else:
            parts = [f"error: {self.message}"]

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Diagnostics store zero-based positions; SourceLocation is the
    human-facing form and is one-based.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Specific Exceptions
# =============================================================================

class GrammarError(LintError):
    """
    A usage rule string could not be compiled into placeholders.

    The usage validator catches this per rule: a faulting rule is skipped
    and the remaining variants are still tried.
    """

    def __init__(self, rule: str, reason: str):
        self.rule = rule
        self.reason = reason
        super().__init__(f"cannot compile usage rule '{rule}': {reason}")


class UnknownDialectError(LintError):
    """No dialect is registered under the requested name."""

    def __init__(self, name: str, available: Optional[list[str]] = None):
        self.name = name
        self.available = available or []

        hint = None
        if self.available:
            hint = "available dialects: " + ", ".join(self.available)

        super().__init__(f"unknown dialect '{name}'", hint=hint)


class ConfigError(LintError):
    """
    Invalid configuration value.

    Raised when an environment variable or option holds a value that
    cannot be used, e.g. an empty extension list.
    """
    pass


class SourceReadError(LintError):
    """A source file could not be read or decoded."""

    def __init__(self, filename: str, reason: str):
        self.filename = filename
        self.reason = reason
        super().__init__(f"cannot read '{filename}': {reason}")
