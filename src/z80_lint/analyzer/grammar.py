"""
Usage Rule Grammar
==================

This module compiles the declarative usage rules of a dialect into ordered
lists of typed placeholders and matches operand text against them.

A usage rule is one legal textual form of a mnemonic:

    "LD %r, (IX+%s)"

The first unit is the rule head (normally the mnemonic itself); every
following unit describes one operand. Units are separated by whitespace,
commas and parentheses that stand alone are dropped, and trailing commas
are trimmed.

Placeholder Kinds
-----------------
| Unit          | Placeholder   | Matches                                   |
|---------------|---------------|-------------------------------------------|
| ``%r``        | RegisterSet   | operand in the legend's fixed token set   |
| ``%nn``       | AnyOperand    | anything (legend entry is an open class)  |
| ``%[0 1 2]``  | Options       | operand in the inline list                |
| ``(IX+%s)``   | Pattern       | template structure, capture checked again |
| ``HL``        | Literal       | exact token, case-insensitive             |
| ``%foo``      | Literal       | ``foo`` (key missing from the legend)     |

Placeholders are frozen dataclasses forming a closed set of variants;
``operand_matches()`` is the single dispatch point over them.

Example
-------
>>> from z80_lint.dialects import get_dialect
>>> from z80_lint.analyzer.grammar import compile_rule, operand_matches
>>> legend = get_dialect("z80").legend
>>> rule = compile_rule("ADD HL, %ss", legend)
>>> rule.placeholders
(Literal(text='HL'), RegisterSet(key='ss', members=frozenset({...})))
>>> operand_matches(rule.placeholders[1], "de")
True
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Mapping, Optional, Union
import re

from z80_lint.errors import GrammarError


# =============================================================================
# Legend Types
# =============================================================================

class UsageCategory(Enum):
    """
    Open operand categories.

    A legend key mapped to one of these accepts any operand text: the
    analyzer does not evaluate numbers or resolve labels while checking
    operand forms.
    """
    ANY_STRING = auto()
    ANY_VARIABLE = auto()
    ANY_LABEL = auto()
    ANY_8BIT_NUMBER = auto()
    ANY_16BIT_NUMBER = auto()
    ANY_SIGNED_16BIT_NUMBER = auto()
    ANY = auto()


@dataclass(frozen=True)
class LegendEntry:
    """
    Meaning of one placeholder key.

    Exactly one of the two fields is populated: ``tokens`` for a closed set
    of literal tokens (registers, condition codes), ``categories`` for an
    open operand class.
    """
    tokens: tuple[str, ...] = ()
    categories: tuple[UsageCategory, ...] = ()

    @property
    def is_fixed_set(self) -> bool:
        return bool(self.tokens) and not self.categories

    @property
    def members(self) -> frozenset[str]:
        """Case-folded fixed tokens."""
        return frozenset(token.upper() for token in self.tokens)


def fixed(*tokens: str) -> LegendEntry:
    """Build a legend entry for a closed token set."""
    return LegendEntry(tokens=tokens)


def category(*categories: UsageCategory) -> LegendEntry:
    """Build a legend entry for an open operand class."""
    return LegendEntry(categories=categories)


PlaceholderLegend = Mapping[str, LegendEntry]


# =============================================================================
# Placeholder Variants
# =============================================================================

@dataclass(frozen=True)
class RegisterSet:
    """Operand must be one of a fixed set of tokens."""
    key: str
    members: frozenset[str]


@dataclass(frozen=True)
class Options:
    """
    Operand must be one of an inline list, e.g. ``%[0 1 2]``.

    A list entry written as ``%key`` pulls in the legend entry for ``key``;
    an open-category entry makes the list accept any operand.
    """
    members: frozenset[str]
    accepts_any: bool = False


@dataclass(frozen=True)
class Literal:
    """Operand must equal ``text`` case-insensitively."""
    text: str


@dataclass(frozen=True)
class AnyOperand:
    """Operand text is accepted as is."""
    key: str


InnerPlaceholder = Union[RegisterSet, Options, Literal, AnyOperand]


@dataclass(frozen=True)
class Pattern:
    """
    Composite template such as ``(IX+%s)``.

    The operand must match the template's literal characters exactly; the
    text captured in place of the embedded placeholder is then checked
    against ``inner``.
    """
    template: str
    regex: re.Pattern
    inner: InnerPlaceholder


Placeholder = Union[RegisterSet, Options, Literal, AnyOperand, Pattern]


@dataclass(frozen=True)
class CompiledRule:
    """
    A usage rule compiled to placeholders.

    Attributes:
        text: The rule string as written in the dialect table
        head: First unit of the rule (normally the mnemonic)
        placeholders: One placeholder per expected operand, in order
        has_any: True if the rule contains a ``%any`` placeholder
    """
    text: str
    head: str
    placeholders: tuple[Placeholder, ...]
    has_any: bool

    def applies_to(self, mnemonic_token: str) -> bool:
        """
        Return True if this variant is a candidate for a mnemonic token.

        A placeholder head (``%var EQU %any``) always applies; a literal
        head must equal the token written in the source, which lets
        ``DS.B`` and ``DS.W`` variants select on the width suffix.
        """
        if self.head.startswith("%"):
            return True
        return self.head.upper() == mnemonic_token.upper()


# =============================================================================
# Rule Compilation
# =============================================================================

# A unit is an inline option list or any whitespace-free run
UNIT_PATTERN = re.compile(r"%\[[^\]]*\]|\S+")

# Standalone placeholder unit
KEY_PATTERN = re.compile(r"%(\w+)")

# Placeholder embedded in a composite unit (key or inline options)
EMBEDDED_PATTERN = re.compile(r"%(\[[^\]]*\]|\w+)")

# Units consisting only of separator punctuation
SEPARATOR_PATTERN = re.compile(r"[,()]+")

# Tokens of the literal part of a composite template
TEMPLATE_TOKEN = re.compile(r"\w+|\S")

ANY_KEY = "any"


def compile_rule(
    rule: str,
    legend: PlaceholderLegend,
    composite_patterns: bool = True,
) -> CompiledRule:
    """
    Compile a usage rule string.

    Compilation is pure: the same rule and legend always yield an equal
    CompiledRule, so dialects compile their tables once and share them.

    Args:
        rule: Rule text, e.g. ``"JP %cc, %addr"``
        legend: Placeholder legend of the dialect
        composite_patterns: When False, units such as ``(IX+%s)`` are
            compared literally instead of becoming Pattern placeholders

    Returns:
        The compiled rule

    Raises:
        GrammarError: If the rule is empty or a template cannot be built
    """
    units = UNIT_PATTERN.findall(rule.strip())
    if not units:
        raise GrammarError(rule, "empty rule")

    head, operand_units = units[0], units[1:]
    placeholders: list[Placeholder] = []
    has_any = False

    for unit in operand_units:
        if SEPARATOR_PATTERN.fullmatch(unit):
            continue

        unit = unit.rstrip(",")

        if unit.startswith("%[") and unit.endswith("]"):
            placeholders.append(_compile_options(unit[2:-1], legend))
            continue

        key_match = KEY_PATTERN.fullmatch(unit)
        if key_match:
            key = key_match.group(1)
            has_any = has_any or key == ANY_KEY
            placeholders.append(_resolve_key(key, legend))
            continue

        if "%" in unit and composite_patterns and EMBEDDED_PATTERN.search(unit):
            placeholders.append(_compile_pattern(rule, unit, legend))
            continue

        placeholders.append(Literal(unit))

    return CompiledRule(
        text=rule,
        head=head,
        placeholders=tuple(placeholders),
        has_any=has_any,
    )


def _resolve_key(key: str, legend: PlaceholderLegend) -> InnerPlaceholder:
    """Turn a ``%key`` reference into a placeholder using the legend."""
    entry = legend.get(key)
    if entry is None:
        return Literal(key)
    if entry.is_fixed_set:
        return RegisterSet(key, entry.members)
    return AnyOperand(key)


def _compile_options(content: str, legend: PlaceholderLegend) -> Options:
    """Compile the body of an inline option list ``%[...]``."""
    members: set[str] = set()
    accepts_any = False

    for option in content.split():
        key_match = KEY_PATTERN.fullmatch(option)
        entry = legend.get(key_match.group(1)) if key_match else None

        if entry is None:
            members.add(option.upper())
        elif entry.is_fixed_set:
            members.update(entry.members)
        else:
            accepts_any = True

    return Options(frozenset(members), accepts_any)


def _compile_pattern(rule: str, unit: str, legend: PlaceholderLegend) -> Pattern:
    """Compile a composite unit such as ``(IX+%s)`` into a Pattern."""
    embedded = EMBEDDED_PATTERN.search(unit)
    reference = embedded.group(1)

    if reference.startswith("["):
        inner: InnerPlaceholder = _compile_options(reference[1:-1], legend)
    else:
        inner = _resolve_key(reference, legend)

    source = (
        _literal_regex(unit[:embedded.start()])
        + r"\s*(.+?)\s*"
        + _literal_regex(unit[embedded.end():])
    )
    try:
        regex = re.compile(source, re.IGNORECASE)
    except re.error as e:
        raise GrammarError(rule, f"bad template '{unit}': {e}") from e

    return Pattern(unit, regex, inner)


def _literal_regex(text: str) -> str:
    """Regex for the literal part of a template; blanks allowed between tokens."""
    return r"\s*".join(re.escape(token) for token in TEMPLATE_TOKEN.findall(text))


# =============================================================================
# Operand Matching
# =============================================================================

def operand_matches(placeholder: Placeholder, operand: str) -> bool:
    """
    Check one operand against one placeholder.

    Args:
        placeholder: Any placeholder variant
        operand: Trimmed operand text as written in the source

    Returns:
        True if the operand satisfies the placeholder
    """
    folded = operand.upper()

    if isinstance(placeholder, AnyOperand):
        return True
    if isinstance(placeholder, RegisterSet):
        return folded in placeholder.members
    if isinstance(placeholder, Options):
        return placeholder.accepts_any or folded in placeholder.members
    if isinstance(placeholder, Literal):
        return folded == placeholder.text.upper()
    if isinstance(placeholder, Pattern):
        match = placeholder.regex.fullmatch(operand.strip())
        if match is None:
            return False
        return operand_matches(placeholder.inner, match.group(1).strip())

    raise TypeError(f"unknown placeholder {placeholder!r}")


def describe_failure(
    rule: CompiledRule,
    operands: list[str],
    operand_text: str = "",
) -> Optional[str]:
    """
    Explain why operands fail a rule, or return None if they match.

    The first failing condition is reported: operand count first, then the
    first operand that does not satisfy its placeholder.
    """
    if not rule.placeholders:
        if operands or operand_text.strip():
            return f"Expected no operands ({rule.text})"
        return None

    if len(operands) != len(rule.placeholders):
        return (
            f"Expected {len(rule.placeholders)} operand(s), "
            f"got {len(operands)} ({rule.text})"
        )

    for placeholder, operand in zip(rule.placeholders, operands):
        if not operand_matches(placeholder, operand):
            return f"Invalid operand '{operand}' for pattern: {rule.text}"

    return None
