"""
Symbol Table Builder
====================

This module implements the definition pass of the analyzer. It scans the
document once, top to bottom, and records:

- **Labels**: ``name:`` at the start of a line
- **Variables**: ``name = value``, ``name EQU value``, ``name DS.B count``,
  and bare ``name`` lines inside a brace-delimited block
- **Declarations**: names introduced by ``EXTERN``, ``SECTION``, ``DEFB``,
  ``DEFW``, ``DEFC`` and ``MACRO``

Labels and variables keep every line they are defined on so duplicates can
be reported later. Declarations only extend the identifier universe.

The pass also tracks two running counters: the brace depth (``{`` minus
``}``) and the macro depth (``MACRO`` minus ``ENDM``, never below zero).
Both must be zero at the end of a well-formed document.

Example
-------
>>> from z80_lint.analyzer.symbols import build_symbol_table
>>> table = build_symbol_table(["start: NOP", "COUNT EQU 5", "JP start"])
>>> table.labels["start"].lines
[0]
>>> sorted(table.identifiers)
['COUNT', 'start']
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence
import logging
import re

from z80_lint.analyzer.lexer import IDENT, code_part, is_inside_string, string_spans
from z80_lint.dialects import Dialect, get_dialect

logger = logging.getLogger(__name__)


# =============================================================================
# Definition Patterns
# =============================================================================

LABEL_PATTERN = re.compile(r"^\s*(" + IDENT + r")\s*:")

EQU_PATTERN = re.compile(r"^\s*(" + IDENT + r")\s+EQU\b", re.IGNORECASE)
ASSIGN_PATTERN = re.compile(r"^\s*(" + IDENT + r")\s*=")
STORAGE_PATTERN = re.compile(r"^\s*(" + IDENT + r")\s+DS\.[BWLD]", re.IGNORECASE)
BLOCK_MEMBER_PATTERN = re.compile(r"^\s*(" + IDENT + r")\s*$")

MACRO_START_PATTERN = re.compile(r"^\s*MACRO\b", re.IGNORECASE)
MACRO_END_PATTERN = re.compile(r"^\s*ENDM\b", re.IGNORECASE)


def declaration_pattern(keyword: str) -> re.Pattern:
    """Pattern capturing the name declared by ``keyword name``."""
    return re.compile(
        r"^\s*" + re.escape(keyword) + r"\s+(" + IDENT + r")\b", re.IGNORECASE
    )


# =============================================================================
# Data Types
# =============================================================================

class SymbolKind(Enum):
    """Kind of a tracked definition."""
    LABEL = "label"
    VARIABLE = "variable"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Definition:
    """Where a symbol is defined: zero-based line and column."""
    line: int
    column: int


@dataclass
class SymbolRecord:
    """
    A label or variable and every place it is defined.

    A well-formed document defines each name exactly once; every
    definition after the first is a duplicate.

    Attributes:
        name: Identifier as written (case-sensitive)
        kind: Label or variable
        definitions: Definitions in document order
    """
    name: str
    kind: SymbolKind
    definitions: list[Definition] = field(default_factory=list)

    @property
    def lines(self) -> list[int]:
        """Zero-based lines of every definition, in document order."""
        return [d.line for d in self.definitions]

    @property
    def is_duplicate(self) -> bool:
        return len(self.definitions) > 1

    def duplicates(self) -> list[Definition]:
        """Definitions after the first one."""
        return self.definitions[1:]


@dataclass
class SymbolTable:
    """
    Result of the definition pass over one document.

    Attributes:
        labels: Label name -> record (insertion ordered)
        variables: Variable name -> record (insertion ordered)
        declarations: Names introduced by declaration keywords
        brace_depth: Net ``{``/``}`` balance at end of document
        macro_depth: Open MACRO bodies at end of document
    """
    labels: dict[str, SymbolRecord] = field(default_factory=dict)
    variables: dict[str, SymbolRecord] = field(default_factory=dict)
    declarations: set[str] = field(default_factory=set)
    brace_depth: int = 0
    macro_depth: int = 0

    @property
    def identifiers(self) -> set[str]:
        """The identifier universe: labels, variables and declarations."""
        return set(self.labels) | set(self.variables) | self.declarations

    def is_defined(self, name: str) -> bool:
        return name in self.labels or name in self.variables or name in self.declarations

    def records(self) -> list[SymbolRecord]:
        """All label records followed by all variable records."""
        return list(self.labels.values()) + list(self.variables.values())

    def define(self, kind: SymbolKind, name: str, line: int, column: int) -> None:
        """Record one definition of a label or variable."""
        table = self.labels if kind is SymbolKind.LABEL else self.variables
        record = table.get(name)
        if record is None:
            record = table[name] = SymbolRecord(name, kind)
        record.definitions.append(Definition(line, column))


# =============================================================================
# Builder
# =============================================================================

class SymbolTableBuilder:
    """
    Single forward pass collecting definitions and block depths.

    The builder holds no state between documents: build() allocates a new
    SymbolTable on every call.

    Usage:
        builder = SymbolTableBuilder(get_dialect("z80"))
        table = builder.build(lines)
    """

    def __init__(self, dialect: Optional[Dialect] = None):
        self.dialect = dialect or get_dialect()
        self._declaration_patterns = [
            declaration_pattern(keyword)
            for keyword in self.dialect.declaration_keywords
        ]

    def build(self, lines: Sequence[str]) -> SymbolTable:
        """
        Scan all lines and return the populated SymbolTable.

        Args:
            lines: Document lines (without line terminators)
        """
        table = SymbolTable()

        for index, raw_line in enumerate(lines):
            try:
                self._scan_line(table, index, raw_line)
            except Exception as e:
                logger.warning(f"Symbol scan skipped line {index + 1}: {e}")

        logger.debug(
            f"Symbol table: {len(table.labels)} labels, "
            f"{len(table.variables)} variables, "
            f"{len(table.declarations)} declarations"
        )
        return table

    def _scan_line(self, table: SymbolTable, index: int, raw_line: str) -> None:
        code = code_part(raw_line, self.dialect.comment_markers)
        spans = string_spans(code)

        table.brace_depth += code.count("{") - code.count("}")

        if MACRO_START_PATTERN.match(code):
            table.macro_depth += 1
        if MACRO_END_PATTERN.match(code):
            table.macro_depth = max(0, table.macro_depth - 1)

        label = LABEL_PATTERN.match(code)
        if label and not self._in_string(label, spans):
            table.define(SymbolKind.LABEL, label.group(1), index, label.start(1))

        variable = self._match_variable(code, table.brace_depth)
        if variable and not self._in_string(variable, spans):
            table.define(SymbolKind.VARIABLE, variable.group(1), index, variable.start(1))

        for pattern in self._declaration_patterns:
            declaration = pattern.match(code)
            if declaration:
                if not self._in_string(declaration, spans):
                    table.declarations.add(declaration.group(1))
                break

    @staticmethod
    def _match_variable(code: str, brace_depth: int) -> Optional[re.Match]:
        match = (
            EQU_PATTERN.match(code)
            or ASSIGN_PATTERN.match(code)
            or STORAGE_PATTERN.match(code)
        )
        if match is None and brace_depth > 0:
            match = BLOCK_MEMBER_PATTERN.match(code)
        return match

    @staticmethod
    def _in_string(match: re.Match, spans) -> bool:
        name = match.group(1)
        return is_inside_string(match.start(1), len(name), spans)


def build_symbol_table(
    lines: Sequence[str],
    dialect: Optional[Dialect] = None,
) -> SymbolTable:
    """Convenience wrapper: build the symbol table for a list of lines."""
    return SymbolTableBuilder(dialect).build(lines)
