"""
Z80 Instruction Set and Assembler Directives
============================================

This module defines the usage grammar of Z80 assembly as accepted by
z88dk-style assemblers: the placeholder legend, the instruction usage
rules and the assembler directive usage rules.

Legend
------
| Key     | Meaning                                   |
|---------|-------------------------------------------|
| r       | 8-bit register: A B C D E H L             |
| dd, ss  | register pair: BC DE HL SP                |
| qq      | push/pop pair: BC DE HL AF                |
| pp      | IX arithmetic pair: BC DE IX SP           |
| rr      | IY arithmetic pair: BC DE IY SP           |
| xx      | pointer register: HL IX IY                |
| cc      | condition: NZ Z NC C PO PE P M            |
| b       | bit number 0-7                            |
| v       | restart vector 00h-38h                    |
| d       | any register pair                         |
| nn      | 8-bit number                              |
| nnnn    | 16-bit number                             |
| addr    | number, label or variable                 |
| ee      | signed offset or label (relative jumps)   |
| s       | 8-bit displacement / value                |
| str     | string literal                            |
| var     | variable name                             |
| func    | label name                                |
| any     | free-form operand text                    |

Two dialects are registered from these tables:

- **z80**: ``%any`` rules take the whole operand text as one operand and
  composite templates such as ``(IX+%s)`` are matched structurally.
- **z80-basic**: operands are always split on commas and composite
  templates are compared as plain text.
"""

from z80_lint.analyzer.grammar import UsageCategory, category, fixed
from z80_lint.dialects.dialect import Dialect, register_dialect


# =============================================================================
# Placeholder Legend
# =============================================================================

Z80_LEGEND = {
    "r": fixed("A", "B", "C", "D", "E", "H", "L"),
    "dd": fixed("BC", "DE", "HL", "SP"),
    "qq": fixed("BC", "DE", "HL", "AF"),
    "ss": fixed("BC", "DE", "HL", "SP"),
    "pp": fixed("BC", "DE", "IX", "SP"),
    "rr": fixed("BC", "DE", "IY", "SP"),
    "xx": fixed("HL", "IX", "IY"),

    "nn": category(UsageCategory.ANY_8BIT_NUMBER),
    "nnnn": category(UsageCategory.ANY_16BIT_NUMBER),
    "addr": category(
        UsageCategory.ANY_8BIT_NUMBER,
        UsageCategory.ANY_16BIT_NUMBER,
        UsageCategory.ANY_LABEL,
        UsageCategory.ANY_VARIABLE,
    ),
    "ee": category(UsageCategory.ANY_SIGNED_16BIT_NUMBER, UsageCategory.ANY_LABEL),

    "cc": fixed("NZ", "Z", "NC", "C", "PO", "PE", "P", "M"),

    "b": fixed("0", "1", "2", "3", "4", "5", "6", "7"),
    "s": category(UsageCategory.ANY_8BIT_NUMBER),
    "v": fixed("00h", "08h", "10h", "18h", "20h", "28h", "30h", "38h"),

    "d": fixed("IX", "IY", "BC", "DE", "HL", "AF"),
    "str": category(UsageCategory.ANY_STRING),
    "var": category(UsageCategory.ANY_VARIABLE),
    "func": category(UsageCategory.ANY_LABEL),
    "any": category(UsageCategory.ANY),
}


# =============================================================================
# Assembler Directives
# =============================================================================

DIRECTIVE_RULES = {
    "ALIGN": ["ALIGN %addr"],
    "BITS": ["BITS 16", "BITS 32", "BITS 64"],
    "DB": ["DB %any"],
    "DEFB": ["DEFB %var", "DEFB %str, %s"],
    "DEFC": ["DEFC %any"],
    "DEFGROUP": ["DEFGROUP %any"],
    "DEFINE": ["DEFINE %any"],
    "DEFM": ["DEFM %str", "DEFM %str, %s", "DEFM %s"],
    "DEFS": ["DEFS %any"],
    "DEFVARS": ["DEFVARS %any"],
    "DEFW": ["DEFW %var", "DEFW %func", "DEFW %s"],
    "DM": ["DM %any"],
    "DS": [
        "DS.B %[%var %s]",
        "DS.W %[%var %s]",
        "DS.L %[%var %s]",
        "DS.D %[%var %s]",
    ],
    "DW": ["DW %any"],
    "ELSE": ["ELSE"],
    "END": ["END"],
    "ENDIF": ["ENDIF"],
    "ENDM": ["ENDM"],
    "ENDR": ["ENDR"],
    "EQU": ["%var EQU %any"],
    "EXTERN": ["EXTERN %var"],
    "IF": ["IF %any"],
    "IFNDEF": ["IFNDEF %var", "IFNDEF %func"],
    "INCBIN": ["INCBIN %str"],
    "INCLUDE": ["INCLUDE %str"],
    "MACRO": ["MACRO %var", "MACRO %any"],
    "ORG": ["ORG %nn", "ORG %nnnn", "ORG %var"],
    "PUBLIC": ["PUBLIC %func", "PUBLIC %var"],
    "REPT": ["REPT %var", "REPT %s"],
    "REPTI": ["REPTI %any"],
    "SECTION": ["SECTION %var"],
    "SEEK": ["SEEK %any"],
    "TIMES": ["TIMES %any"],
}

# Keywords whose first argument introduces a name into the symbol universe
DECLARATION_KEYWORDS = ("EXTERN", "SECTION", "DEFB", "DEFW", "DEFC", "MACRO")


# =============================================================================
# Z80 Instructions
# =============================================================================

INSTRUCTION_RULES = {
    "ADC": ["ADC HL, %ss", "ADC A, %r", "ADC A, %nn", "ADC %r", "ADC %nn"],
    "ADD": [
        "ADD A, %r", "ADD A, (HL)", "ADD A, (IX+%s)", "ADD A, (IY+%s)",
        "ADD A, %nn", "ADD HL, %ss", "ADD IX, %pp", "ADD IY, %rr",
    ],
    "AND": ["AND %r", "AND %nn"],
    "BIT": ["BIT %b, (HL)", "BIT %b, (IX+%s)", "BIT %b, (IY+%s)", "BIT %b, %r"],
    "CALL": ["CALL %cc, %addr", "CALL %addr"],
    "CCF": ["CCF"],
    "CP": ["CP %nn", "CP %r", "CP (%xx)"],
    "CPD": ["CPD"],
    "CPDR": ["CPDR"],
    "CPI": ["CPI"],
    "CPIR": ["CPIR"],
    "CPL": ["CPL"],
    "DAA": ["DAA"],
    "DEC": ["DEC %r", "DEC %ss", "DEC IX", "DEC IY"],
    "DI": ["DI"],
    "DJNZ": ["DJNZ %ee"],
    "EI": ["EI"],
    "EX": ["EX (SP), HL", "EX (SP), IX", "EX (SP), IY", "EX AF, AF'", "EX DE, HL"],
    "EXX": ["EXX"],
    "HALT": ["HALT"],
    "IM": ["IM %[0 1 2]"],
    "IN": ["IN A, (%nn)", "IN %r, (C)"],
    "INC": [
        "INC %r", "INC (HL)", "INC IX", "INC IY",
        "INC (IX+%s)", "INC (IY+%s)", "INC %ss",
    ],
    "IND": ["IND"],
    "INDR": ["INDR"],
    "INI": ["INI"],
    "INIR": ["INIR"],
    "JP": ["JP (HL)", "JP (IX)", "JP (IY)", "JP %cc, %addr", "JP %addr"],
    "JR": ["JR C, %ee", "JR %ee", "JR NC, %ee", "JR NZ, %ee", "JR Z, %ee"],
    "LD": [
        "LD A, (BC)", "LD A, (DE)", "LD A, I", "LD A, (%addr)", "LD A, R",
        "LD (BC), A", "LD (DE), A", "LD (HL), %nn", "LD %dd, %addr",
        "LD %dd, (%addr)", "LD HL, (%addr)", "LD (HL), %r", "LD I, A",
        "LD IX, %addr", "LD IX, (%addr)", "LD (IX+%s), %nn", "LD (IX+%s), %r",
        "LD IY, %addr", "LD IY, (%addr)", "LD (IY+%s), %nn", "LD (IY+%s), %r",
        "LD (%addr), A", "LD (%addr), %dd", "LD (%addr), HL", "LD (%addr), IX",
        "LD (%addr), IY", "LD R, A", "LD %r, (HL)", "LD %r, (IX+%s)",
        "LD %r, (IY+%s)", "LD %r, %r", "LD %r, %nn", "LD SP, HL", "LD SP, IX",
        "LD SP, IY",
    ],
    "LDD": ["LDD"],
    "LDDR": ["LDDR"],
    "LDI": ["LDI"],
    "LDIR": ["LDIR"],
    "NEG": ["NEG"],
    "NOP": ["NOP"],
    "OR": ["OR %r", "OR %nn"],
    "OTDR": ["OTDR"],
    "OTIR": ["OTIR"],
    "OUT": ["OUT (C), %r", "OUT (%nn), A"],
    "OUTD": ["OUTD"],
    "OUTI": ["OUTI"],
    "POP": ["POP IX", "POP IY", "POP %qq"],
    "PUSH": ["PUSH IX", "PUSH IY", "PUSH %qq"],
    "RES": ["RES %b, %r", "RES %b, (HL)", "RES %b, (IX+%s)", "RES %b, (IY+%s)"],
    "RET": ["RET", "RET %cc"],
    "RETI": ["RETI"],
    "RETN": ["RETN"],
    "RL": ["RL %r", "RL (HL)"],
    "RLA": ["RLA"],
    "RLC": ["RLC (HL)", "RLC (IX+%s)", "RLC (IY+%s)", "RLC %r"],
    "RLCA": ["RLCA"],
    "RLD": ["RLD"],
    "RR": ["RR %r", "RR (HL)"],
    "RRA": ["RRA"],
    "RRC": ["RRC %r", "RRC (HL)"],
    "RRCA": ["RRCA"],
    "RRD": ["RRD"],
    "RST": ["RST %v"],
    "SBC": ["SBC A, %r", "SBC A, %nn", "SBC HL, %ss"],
    "SCF": ["SCF"],
    "SET": ["SET %b, (HL)", "SET %b, (IX+%s)", "SET %b, (IY+%s)", "SET %b, %r"],
    "SLA": ["SLA %r"],
    "SRA": ["SRA %r"],
    "SRL": ["SRL %r"],
    "SUB": ["SUB %r", "SUB %nn", "SUB (%xx)"],
    "XOR": ["XOR %r", "XOR %nn", "XOR %r, %r", "XOR %r, %addr", "XOR %d, %addr"],
}


# =============================================================================
# Dialect Factories
# =============================================================================

def build_z80() -> Dialect:
    """Z80 with single-operand ``%any`` rules and composite templates."""
    return Dialect(
        name="z80",
        description="Z80 instructions and z88dk directives",
        legend=Z80_LEGEND,
        instruction_rules=INSTRUCTION_RULES,
        directive_rules=DIRECTIVE_RULES,
        any_single_operand=True,
        composite_patterns=True,
        declaration_keywords=DECLARATION_KEYWORDS,
    )


def build_z80_basic() -> Dialect:
    """Z80 with comma-split operands everywhere and literal templates."""
    return Dialect(
        name="z80-basic",
        description="Z80 tables, comma-split operands, no composite templates",
        legend=Z80_LEGEND,
        instruction_rules=INSTRUCTION_RULES,
        directive_rules=DIRECTIVE_RULES,
        any_single_operand=False,
        composite_patterns=False,
        declaration_keywords=DECLARATION_KEYWORDS,
    )


register_dialect("z80", build_z80)
register_dialect("z80-basic", build_z80_basic)
