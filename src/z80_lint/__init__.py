"""
z80-lint - Static Analysis for Z80 Assembly
===========================================

This package provides a static-analysis engine for Z80 assembly source
with z88dk-style assembler directives. Given the text of a source file it:

- builds a symbol table of labels and variables
- flags duplicate definitions and references to undefined symbols
- validates every instruction and directive line against a declarative
  grammar of legal operand forms
- verifies that brace-delimited variable blocks and MACRO/ENDM pairs
  are balanced

It is not an assembler: it never computes addresses, sizes or binary
output. It only classifies text and checks the surface syntax of operand
lists.

Main Components
---------------
- **analyzer**: The analysis passes and the Analyzer entry point
- **dialects**: Placeholder legends and usage rule tables per flavor
- **diagnostics**: Diagnostic records and the per-document DiagnosticSet
- **config**: Run configuration (defaults and environment variables)
- **cli**: The ``z80lint`` command-line tool

Quick Start
-----------
Analyze a string:
    >>> from z80_lint import Analyzer
    >>> result = Analyzer().analyze_string("JP NOWHERE")
    >>> [d.message for d in result]
    ["Reference to an undefined symbol: 'NOWHERE'"]

Analyze a file:
    >>> result = Analyzer(dialect="z80").analyze_file("game.asm")
    >>> print(result.report())

Or use the command-line tool:
    $ z80lint check src/
    $ z80lint check --format json game.asm
    $ z80lint tokens game.asm

Version History
---------------
1.0.0 - Initial release with the z80 and z80-basic dialects
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================
# The analyzer package must be imported before the dialect registry: the
# dialects compile their rule tables with the analyzer's grammar module.
# =============================================================================

from z80_lint.analyzer import (
    Analyzer,
    SemanticToken,
    analyze,
    classify_tokens,
)
from z80_lint.dialects import (
    Dialect,
    available_dialects,
    get_dialect,
    register_dialect,
)
from z80_lint.diagnostics import (
    Diagnostic,
    DiagnosticKind,
    DiagnosticSet,
    Severity,
)
from z80_lint.config import LintConfig
from z80_lint.errors import (
    LintError,
    SourceLocation,
    GrammarError,
    UnknownDialectError,
    ConfigError,
    SourceReadError,
)

__all__ = [
    "__version__",
    # Analysis
    "Analyzer",
    "analyze",
    "classify_tokens",
    "SemanticToken",
    # Dialects
    "Dialect",
    "available_dialects",
    "get_dialect",
    "register_dialect",
    # Diagnostics
    "Diagnostic",
    "DiagnosticKind",
    "DiagnosticSet",
    "Severity",
    # Configuration
    "LintConfig",
    # Errors
    "LintError",
    "SourceLocation",
    "GrammarError",
    "UnknownDialectError",
    "ConfigError",
    "SourceReadError",
]
