"""
Assembly Dialects
=================

Registry of the assembly flavors the analyzer understands. Each dialect is
a read-only bundle of a placeholder legend, instruction and directive
usage rules, and the operand splitting policies of that flavor.

Registered dialects:
- **z80**: Z80 instructions and z88dk directives, ``%any`` rules take the
  whole operand text, composite templates such as ``(IX+%s)`` supported
- **z80-basic**: the same tables, operands always comma-split, composite
  templates compared as plain text

Example Usage
-------------
>>> from z80_lint.dialects import get_dialect, available_dialects
>>> available_dialects()
['z80', 'z80-basic']
>>> get_dialect("z80").rules_for("jp")[0].text
'JP (HL)'
"""

from z80_lint.dialects.dialect import (
    Dialect,
    available_dialects,
    get_dialect,
    register_dialect,
)

# Registers the built-in dialects
from z80_lint.dialects import z80  # noqa: F401

__all__ = [
    "Dialect",
    "available_dialects",
    "get_dialect",
    "register_dialect",
]
