"""
Diagnostics
===========

This module defines the diagnostic records produced by an analysis run and
the ordered collection that holds them.

A Diagnostic is the only way the analyzer reports a problem in the source
text. Positions are zero-based and the end column is exclusive, so a host
editor can map them onto its own range type directly:

    Diagnostic(line=3, start=7, end=14, ...)   # covers columns 7..13 of line 3

Every analysis run produces a fresh DiagnosticSet. A host must replace the
previous set for a document with the new one; sets are never merged.

Example
-------
>>> from z80_lint import Analyzer
>>> result = Analyzer().analyze_string("JP NOWHERE")
>>> print(result.report())
<input>:1:4: error: Reference to an undefined symbol: 'NOWHERE'
    JP NOWHERE
       ^^^^^^^
<BLANKLINE>
1 error
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator, Optional

from z80_lint.errors import SourceLocation


# Default value for the diagnostic source tag
DEFAULT_SOURCE_TAG = "Z80 Assembly"


# =============================================================================
# Enumerations
# =============================================================================

class Severity(Enum):
    """Diagnostic severity. Only ERROR is produced by the analyzer."""
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


class DiagnosticKind(Enum):
    """Category of a finding."""
    DUPLICATE_DEFINITION = auto()
    UNDEFINED_SYMBOL = auto()
    INVALID_USAGE = auto()
    UNBALANCED_BLOCK = auto()
    UNTERMINATED_MACRO = auto()

    def __str__(self) -> str:
        return self.name.lower().replace("_", "-")


# =============================================================================
# Diagnostic Record
# =============================================================================

@dataclass(frozen=True)
class Diagnostic:
    """
    One finding about the analyzed document.

    Attributes:
        line: Line number (0-indexed)
        start: Start column (0-indexed, inclusive)
        end: End column (0-indexed, exclusive)
        message: Human-readable description
        kind: Finding category
        severity: Always Severity.ERROR
        source: Tag identifying the engine (e.g. "Z80 Assembly")
    """
    line: int
    start: int
    end: int
    message: str
    kind: DiagnosticKind
    severity: Severity = Severity.ERROR
    source: str = DEFAULT_SOURCE_TAG

    def location(self, filename: str = "<input>") -> SourceLocation:
        """Return the one-based SourceLocation of the diagnostic start."""
        return SourceLocation(filename, self.line + 1, self.start + 1)

    def to_dict(self) -> dict:
        """Return a JSON-serializable representation."""
        return {
            "line": self.line,
            "start": self.start,
            "end": self.end,
            "severity": str(self.severity),
            "kind": str(self.kind),
            "message": self.message,
            "source": self.source,
        }


# =============================================================================
# Diagnostic Collection
# =============================================================================

@dataclass
class DiagnosticSet:
    """
    Ordered collection of diagnostics for one document.

    Diagnostics keep the order in which the analysis passes produced them.
    The set also remembers the document lines so report() can print the
    offending source text under each message.

    Attributes:
        filename: Name used in formatted reports
        lines: The analyzed document lines (for source context)
        diagnostics: The collected diagnostics, in production order
    """
    filename: str = "<input>"
    lines: list[str] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def add(self, diagnostic: Diagnostic) -> None:
        """Append one diagnostic."""
        self.diagnostics.append(diagnostic)

    def extend(self, diagnostics: list[Diagnostic]) -> None:
        """Append several diagnostics, preserving their order."""
        self.diagnostics.extend(diagnostics)

    def has_errors(self) -> bool:
        """Return True if any diagnostics have been collected."""
        return len(self.diagnostics) > 0

    def error_count(self) -> int:
        """Return the number of collected diagnostics."""
        return len(self.diagnostics)

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        """Return the diagnostics of one category, in order."""
        return [d for d in self.diagnostics if d.kind == kind]

    def count_by_kind(self) -> dict[DiagnosticKind, int]:
        """Return a count of diagnostics per category."""
        return dict(Counter(d.kind for d in self.diagnostics))

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.diagnostics)

    def __len__(self) -> int:
        return len(self.diagnostics)

    def format_diagnostic(self, diagnostic: Diagnostic) -> str:
        """
        Format a single diagnostic with source context.

        Example output:
            hello.asm:15:9: error: Reference to an undefined symbol: 'prnt'
                CALL prnt
                     ^^^^
        """
        location = diagnostic.location(self.filename)
        parts = [f"{location}: {diagnostic.severity}: {diagnostic.message}"]

        source_line = self._source_line(diagnostic.line)
        if source_line is not None:
            parts.append(f"    {source_line}")
            width = max(1, diagnostic.end - diagnostic.start)
            parts.append(" " * (4 + diagnostic.start) + "^" * width)

        return "\n".join(parts)

    def report(self) -> str:
        """
        Format all diagnostics for display.

        Returns:
            Formatted string with every diagnostic and a summary line
        """
        lines = []

        for diagnostic in self.diagnostics:
            lines.append(self.format_diagnostic(diagnostic))
            lines.append("")

        count = len(self.diagnostics)
        error_word = "error" if count == 1 else "errors"
        lines.append(f"{count} {error_word}")

        return "\n".join(lines)

    def to_dict(self) -> dict:
        """Return a JSON-serializable representation."""
        return {
            "file": self.filename,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }

    def _source_line(self, line: int) -> Optional[str]:
        if 0 <= line < len(self.lines):
            return self.lines[line]
        return None
