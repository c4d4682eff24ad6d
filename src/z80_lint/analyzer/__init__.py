"""
Z80 Assembly Analysis Engine
============================

This package contains the passes of the static analyzer.

Main Components
---------------
- **lexer**: Comment stripping, string spans and identifier scanning
- **grammar**: Usage rule compiler and operand matching
- **symbols**: Definition pass (labels, variables, declarations, depths)
- **usage**: Instruction and directive usage validation
- **checker**: Duplicate, undefined-reference and block-balance checks
- **tokens**: Definition/reference classification for highlighting
- **analyzer**: The Analyzer class that runs all passes

Example Usage
-------------
>>> from z80_lint.analyzer import Analyzer
>>> result = Analyzer().analyze_string("COUNT EQU 5\\nCOUNT EQU 6")
>>> [d.message for d in result]
["Duplicate definition: variable 'COUNT'"]
"""

# The grammar and lexer must load before anything that pulls in the
# dialect registry, which compiles its tables with them.
from z80_lint.analyzer.lexer import (
    COMMENT_MARKERS,
    IdentifierMatch,
    StringSpan,
    code_part,
    is_inside_string,
    iter_identifiers,
    split_lines,
    string_spans,
)
from z80_lint.analyzer.grammar import (
    AnyOperand,
    CompiledRule,
    LegendEntry,
    Literal,
    Options,
    Pattern,
    RegisterSet,
    UsageCategory,
    compile_rule,
    describe_failure,
    operand_matches,
)
from z80_lint.analyzer.symbols import (
    Definition,
    SymbolKind,
    SymbolRecord,
    SymbolTable,
    SymbolTableBuilder,
    build_symbol_table,
)
from z80_lint.analyzer.usage import InstructionLine, UsageValidator
from z80_lint.analyzer.checker import ReferenceChecker
from z80_lint.analyzer.tokens import TOKEN_TYPES, SemanticToken, classify_tokens
from z80_lint.analyzer.analyzer import Analyzer, analyze, read_source

__all__ = [
    # Line classifier
    "COMMENT_MARKERS",
    "IdentifierMatch",
    "StringSpan",
    "code_part",
    "is_inside_string",
    "iter_identifiers",
    "split_lines",
    "string_spans",
    # Rule grammar
    "AnyOperand",
    "CompiledRule",
    "LegendEntry",
    "Literal",
    "Options",
    "Pattern",
    "RegisterSet",
    "UsageCategory",
    "compile_rule",
    "describe_failure",
    "operand_matches",
    # Symbol table
    "Definition",
    "SymbolKind",
    "SymbolRecord",
    "SymbolTable",
    "SymbolTableBuilder",
    "build_symbol_table",
    # Checks
    "InstructionLine",
    "UsageValidator",
    "ReferenceChecker",
    # Semantic tokens
    "TOKEN_TYPES",
    "SemanticToken",
    "classify_tokens",
    # Analyzer
    "Analyzer",
    "analyze",
    "read_source",
]
