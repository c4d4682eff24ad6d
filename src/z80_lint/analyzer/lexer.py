"""
Z80 Assembly Line Classifier
============================

This module provides the line-level lexical helpers shared by every
analysis pass. Z80 source is line oriented, so instead of a token stream
the classifier answers three questions about a single line:

1. **Where does the code end?** ``code_part()`` returns the text before the
   first comment marker (``;`` or ``#``, whichever comes first).

2. **Where are the string literals?** ``string_spans()`` locates single-,
   double- and back-quoted runs (backslash escapes supported).

3. **Which identifiers does the line contain?** ``iter_identifiers()`` yields
   every maximal identifier-shaped token outside string literals.

Identifiers
-----------
An identifier starts with a letter, ``_`` or ``.`` and continues with
letters, digits, ``_`` or ``.``. A token directly preceded by an identifier
character is part of a larger token and is not reported on its own; this
keeps the ``FFh`` of ``0FFh`` and the ``x1F`` of ``0x1F`` from looking like
symbols. A token preceded by ``$`` is a hexadecimal literal (``$FF``).

Example
-------
>>> from z80_lint.analyzer.lexer import code_part, iter_identifiers
>>> code = code_part('loop: LD A, "x" ; load')
>>> code
'loop: LD A, "x" '
>>> [(m.name, m.column) for m in iter_identifiers(code)]
[('loop', 0), ('LD', 6), ('A', 9)]
"""

from dataclasses import dataclass
from typing import Iterator, Sequence
import re


# =============================================================================
# Patterns
# =============================================================================

# Comment markers, in no particular order: the earliest one wins
COMMENT_MARKERS = (";", "#")

# Identifier body used by all definition patterns
IDENT = r"[A-Za-z_.][A-Za-z0-9_.]*"

# A standalone identifier token (not part of a number or a longer name)
IDENTIFIER_PATTERN = re.compile(
    r"(?<![A-Za-z0-9_.$])(" + IDENT + r")(?![A-Za-z0-9_.])"
)

# Quoted runs: "...", '...', `...` with backslash escapes
STRING_PATTERN = re.compile(
    r'"(?:[^"\\]|\\.)*"'
    r"|'(?:[^'\\]|\\.)*'"
    r"|`(?:[^`\\]|\\.)*`"
)


# =============================================================================
# Data Types
# =============================================================================

@dataclass(frozen=True)
class StringSpan:
    """A quoted run within a code string. ``end`` is exclusive."""
    start: int
    end: int

    def contains(self, start: int, length: int) -> bool:
        """Return True if [start, start+length) lies fully inside the span."""
        return start >= self.start and start + length <= self.end


@dataclass(frozen=True)
class IdentifierMatch:
    """An identifier token and its zero-based column."""
    name: str
    column: int

    @property
    def end(self) -> int:
        return self.column + len(self.name)


# =============================================================================
# Line Helpers
# =============================================================================

def split_lines(text: str) -> list[str]:
    """
    Split document text into lines.

    Splits on ``\\n`` only and drops a trailing ``\\r`` from each line, so
    CRLF and LF files yield identical columns. A trailing newline produces
    a final empty line, matching how editors number lines.
    """
    return [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]


def code_part(line: str, markers: Sequence[str] = COMMENT_MARKERS) -> str:
    """
    Return the part of a line before its first comment marker.

    Markers are not string-aware: a ``;`` inside a quoted string still
    starts the comment.

    Args:
        line: Raw source line
        markers: Comment markers for the active dialect

    Returns:
        The line prefix before the earliest marker, or the whole line
    """
    positions = [pos for pos in (line.find(m) for m in markers) if pos >= 0]
    if not positions:
        return line
    return line[:min(positions)]


def string_spans(code: str) -> list[StringSpan]:
    """Locate every quoted-string span in a code string."""
    return [StringSpan(m.start(), m.end()) for m in STRING_PATTERN.finditer(code)]


def is_inside_string(start: int, length: int, spans: Sequence[StringSpan]) -> bool:
    """
    Test whether a candidate match lies fully inside a quoted string.

    Every pass routes identifier matches through this test: text inside a
    string literal is never a definition or a reference.

    Args:
        start: Zero-based column of the candidate match
        length: Length of the candidate match
        spans: Spans from string_spans() for the same code string
    """
    return any(span.contains(start, length) for span in spans)


def iter_identifiers(
    code: str,
    spans: Sequence[StringSpan] | None = None,
) -> Iterator[IdentifierMatch]:
    """
    Yield identifier-shaped tokens of a code string, skipping strings.

    Args:
        code: Code part of a line (comments already stripped)
        spans: Precomputed string spans (computed when omitted)

    Yields:
        IdentifierMatch for each token outside a quoted string, in order
    """
    if spans is None:
        spans = string_spans(code)

    for match in IDENTIFIER_PATTERN.finditer(code):
        name = match.group(1)
        if is_inside_string(match.start(1), len(name), spans):
            continue
        yield IdentifierMatch(name, match.start(1))
