"""
z80-lint Command-Line Interface
===============================

This package provides the ``z80lint`` command-line tool:

- **check**: analyze files and directories, print diagnostics
- **tokens**: print label/variable definition and reference tokens
- **dialects**: list the registered dialects

The tool is a Click-based CLI application with comprehensive help and
error reporting.
"""

__all__ = ["z80lint"]
