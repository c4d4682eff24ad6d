"""
Duplicate & Undefined Reference Checker
=======================================

Three checks run on top of a finished SymbolTable:

- **Duplicates**: a label or variable defined on more than one line gets
  one diagnostic per definition after the first.
- **Undefined references**: every identifier token that is not a known
  mnemonic, register or keyword and is not defined anywhere in the
  document. There is no scoping: forward references are legal.
- **Block balance**: a non-zero brace depth or macro depth at the end of
  the document yields one diagnostic each, at a fixed location.
"""

from typing import Optional
import logging

from z80_lint.analyzer.lexer import code_part, iter_identifiers
from z80_lint.analyzer.symbols import SymbolTable
from z80_lint.diagnostics import DEFAULT_SOURCE_TAG, Diagnostic, DiagnosticKind
from z80_lint.dialects import Dialect, get_dialect

logger = logging.getLogger(__name__)


# Block-balance diagnostics are not tied to a line; they sit at the top
BLOCK_DIAGNOSTIC_LINE = 0
BLOCK_DIAGNOSTIC_START = 0
BLOCK_DIAGNOSTIC_END = 1


class ReferenceChecker:
    """
    Checks a document against its symbol table.

    Attributes:
        dialect: Supplies the known mnemonic and keyword tables
        table: The symbol table built for the same document
        source: Source tag stamped on produced diagnostics
    """

    def __init__(
        self,
        table: SymbolTable,
        dialect: Optional[Dialect] = None,
        source: str = DEFAULT_SOURCE_TAG,
    ):
        self.table = table
        self.dialect = dialect or get_dialect()
        self.source = source
        self._universe = table.identifiers

    # =========================================================================
    # Undefined References
    # =========================================================================

    def check_line(self, raw_line: str, line_index: int) -> list[Diagnostic]:
        """Return the undefined-reference diagnostics of one line, in column order."""
        code = code_part(raw_line, self.dialect.comment_markers)
        diagnostics = []

        for ident in iter_identifiers(code):
            if self.dialect.is_known_token(ident.name):
                continue
            if ident.name in self._universe:
                continue
            diagnostics.append(self._make(
                line_index, ident.column, ident.end,
                f"Reference to an undefined symbol: '{ident.name}'",
                DiagnosticKind.UNDEFINED_SYMBOL,
            ))

        return diagnostics

    # =========================================================================
    # Duplicates
    # =========================================================================

    def duplicate_diagnostics(self) -> list[Diagnostic]:
        """One diagnostic per repeated definition: labels first, then variables."""
        diagnostics = []

        for record in self.table.records():
            for definition in record.duplicates():
                diagnostics.append(self._make(
                    definition.line,
                    definition.column,
                    definition.column + len(record.name),
                    f"Duplicate definition: {record.kind} '{record.name}'",
                    DiagnosticKind.DUPLICATE_DEFINITION,
                ))

        if diagnostics:
            logger.debug(f"{len(diagnostics)} duplicate definition(s)")
        return diagnostics

    # =========================================================================
    # Block Balance
    # =========================================================================

    def balance_diagnostics(self) -> list[Diagnostic]:
        """Diagnostics for an open brace block and an open MACRO body."""
        diagnostics = []

        if self.table.brace_depth != 0:
            diagnostics.append(self._make(
                BLOCK_DIAGNOSTIC_LINE, BLOCK_DIAGNOSTIC_START, BLOCK_DIAGNOSTIC_END,
                "DEFVARS block has unbalanced braces",
                DiagnosticKind.UNBALANCED_BLOCK,
            ))

        if self.table.macro_depth != 0:
            diagnostics.append(self._make(
                BLOCK_DIAGNOSTIC_LINE, BLOCK_DIAGNOSTIC_START, BLOCK_DIAGNOSTIC_END,
                "MACRO block not closed (need ENDM)",
                DiagnosticKind.UNTERMINATED_MACRO,
            ))

        return diagnostics

    def _make(
        self,
        line: int,
        start: int,
        end: int,
        message: str,
        kind: DiagnosticKind,
    ) -> Diagnostic:
        return Diagnostic(
            line=line,
            start=start,
            end=end,
            message=message,
            kind=kind,
            source=self.source,
        )
