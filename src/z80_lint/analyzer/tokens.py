"""
Semantic Token Classification
=============================

Classifies label and variable occurrences for definition/reference
highlighting in an editor. The classification reuses the definition pass:
the same comment stripping, string-span exclusion and definition patterns
decide what counts as a definition.

Token types:
    labelDefinition      ``loop:`` at the start of a line
    labelReference       any other occurrence of a label name
    variableDefinition   ``COUNT EQU 5``, ``x = 1``, ``buf DS.B 4``, block members
    variableReference    any other occurrence of a variable name

A definition occurrence is never also reported as a reference. A name
defined both as a label and as a variable is classified as a label.
"""

from dataclasses import dataclass
from typing import Optional, Union
import logging

from z80_lint.analyzer.lexer import code_part, iter_identifiers, split_lines
from z80_lint.analyzer.symbols import SymbolKind, SymbolTable, SymbolTableBuilder
from z80_lint.dialects import Dialect, get_dialect

logger = logging.getLogger(__name__)


LABEL_DEFINITION = "labelDefinition"
LABEL_REFERENCE = "labelReference"
VARIABLE_DEFINITION = "variableDefinition"
VARIABLE_REFERENCE = "variableReference"

TOKEN_TYPES = (LABEL_DEFINITION, LABEL_REFERENCE, VARIABLE_DEFINITION, VARIABLE_REFERENCE)


@dataclass(frozen=True, order=True)
class SemanticToken:
    """One classified occurrence: zero-based line and start, length, type."""
    line: int
    start: int
    length: int
    token_type: str


def classify_tokens(
    text: str,
    dialect: Union[str, Dialect, None] = None,
) -> list[SemanticToken]:
    """
    Classify every label and variable occurrence in a document.

    Args:
        text: Full document text
        dialect: Dialect name or instance (default: "z80")

    Returns:
        Tokens sorted by line, then column
    """
    if not isinstance(dialect, Dialect):
        dialect = get_dialect(dialect or "z80")

    lines = split_lines(text)
    table = SymbolTableBuilder(dialect).build(lines)

    tokens = _definition_tokens(table)
    defined_at = {(t.line, t.start) for t in tokens}

    for index, raw_line in enumerate(lines):
        try:
            code = code_part(raw_line, dialect.comment_markers)
            for ident in iter_identifiers(code):
                if (index, ident.column) in defined_at:
                    continue
                token_type = _reference_type(table, ident.name)
                if token_type:
                    tokens.append(SemanticToken(index, ident.column, len(ident.name), token_type))
        except Exception as e:
            logger.warning(f"Token scan skipped line {index + 1}: {e}")

    return sorted(tokens)


def _definition_tokens(table: SymbolTable) -> list[SemanticToken]:
    tokens = []
    for record in table.records():
        token_type = LABEL_DEFINITION if record.kind is SymbolKind.LABEL else VARIABLE_DEFINITION
        for definition in record.definitions:
            tokens.append(SemanticToken(
                definition.line, definition.column, len(record.name), token_type
            ))
    return tokens


def _reference_type(table: SymbolTable, name: str) -> Optional[str]:
    if name in table.labels:
        return LABEL_REFERENCE
    if name in table.variables:
        return VARIABLE_REFERENCE
    return None
