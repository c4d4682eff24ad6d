"""
Assembly Dialect Definition
===========================

A Dialect bundles everything the analyzer needs to know about one assembly
flavor: the placeholder legend, the instruction and directive usage rules,
and the policies that differ between flavors.

Dialects are built once per process and never mutated afterwards. All rule
strings are compiled at construction time and exposed through read-only
mappings, so one Dialect instance can be shared by any number of analysis
runs.

Policies
--------
- ``any_single_operand``: a rule containing ``%any`` receives the whole
  operand text as a single operand instead of a comma-split list. Rules
  without ``%any`` are unaffected.
- ``composite_patterns``: units such as ``(IX+%s)`` become Pattern
  placeholders. When disabled they are compared as literal text.
"""

from functools import lru_cache
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Sequence
import logging
import re

from z80_lint.analyzer.grammar import (
    EMBEDDED_PATTERN,
    CompiledRule,
    LegendEntry,
    Literal,
    Options,
    Pattern,
    PlaceholderLegend,
    compile_rule,
)
from z80_lint.analyzer.lexer import COMMENT_MARKERS, IDENT
from z80_lint.errors import GrammarError, UnknownDialectError

logger = logging.getLogger(__name__)

# Identifier-shaped runs inside literal rule text (IX in "(IX+%s)", I, R, ...)
_KEYWORD_PATTERN = re.compile(IDENT)


class Dialect:
    """
    One assembly flavor: legend, rule tables and matching policies.

    Attributes:
        name: Registry name (e.g. "z80")
        description: One-line summary for listings
        legend: Read-only placeholder legend
        instruction_rules: Read-only mnemonic -> compiled instruction rules
        directive_rules: Read-only mnemonic -> compiled directive rules
        any_single_operand: Whether ``%any`` rules take the operand text whole
        composite_patterns: Whether composite templates are supported
        comment_markers: Characters that start a comment
        declaration_keywords: Keywords whose first argument declares a name
        known_mnemonics: Case-folded mnemonics (table keys and rule heads)
        known_keywords: Case-folded register, condition and keyword tokens
    """

    def __init__(
        self,
        name: str,
        legend: Mapping[str, LegendEntry],
        instruction_rules: Mapping[str, Sequence[str]],
        directive_rules: Mapping[str, Sequence[str]],
        description: str = "",
        any_single_operand: bool = True,
        composite_patterns: bool = True,
        comment_markers: Sequence[str] = COMMENT_MARKERS,
        declaration_keywords: Sequence[str] = (),
    ):
        self.name = name
        self.description = description
        self.legend: PlaceholderLegend = MappingProxyType(dict(legend))
        self.any_single_operand = any_single_operand
        self.composite_patterns = composite_patterns
        self.comment_markers = tuple(comment_markers)
        self.declaration_keywords = tuple(k.upper() for k in declaration_keywords)

        self.instruction_rules = self._compile_table(instruction_rules)
        self.directive_rules = self._compile_table(directive_rules)

        self.known_mnemonics = self._collect_mnemonics()
        self.known_keywords = self._collect_keywords()

        logger.debug(
            f"Dialect '{name}': {len(self.instruction_rules)} instructions, "
            f"{len(self.directive_rules)} directives"
        )

    def __repr__(self) -> str:
        return f"Dialect({self.name!r})"

    # =========================================================================
    # Lookup
    # =========================================================================

    def rules_for(self, mnemonic: str) -> Optional[tuple[CompiledRule, ...]]:
        """
        Return the usage rules for a mnemonic, or None if it is unknown.

        The instruction table is consulted first, then the directive table.
        """
        key = mnemonic.upper()
        rules = self.instruction_rules.get(key)
        if rules is None:
            rules = self.directive_rules.get(key)
        return rules

    def is_known_token(self, name: str) -> bool:
        """Return True for mnemonics, registers, conditions and keywords."""
        folded = name.upper()
        return folded in self.known_mnemonics or folded in self.known_keywords

    # =========================================================================
    # Construction Helpers
    # =========================================================================

    def _compile_table(
        self,
        table: Mapping[str, Sequence[str]],
    ) -> Mapping[str, tuple[CompiledRule, ...]]:
        """Compile every rule of a table, skipping rules that fail."""
        compiled: dict[str, tuple[CompiledRule, ...]] = {}

        for mnemonic, rules in table.items():
            variants = []
            for rule in rules:
                try:
                    variants.append(
                        compile_rule(rule, self.legend, self.composite_patterns)
                    )
                except GrammarError as e:
                    logger.warning(f"Dialect '{self.name}': skipping rule: {e}")
            compiled[mnemonic.upper()] = tuple(variants)

        return MappingProxyType(compiled)

    def _all_rules(self):
        for table in (self.instruction_rules, self.directive_rules):
            for variants in table.values():
                yield from variants

    def _collect_mnemonics(self) -> frozenset[str]:
        mnemonics = set(self.instruction_rules) | set(self.directive_rules)
        for rule in self._all_rules():
            if not rule.head.startswith("%"):
                mnemonics.add(rule.head.upper())
        return frozenset(mnemonics)

    def _collect_keywords(self) -> frozenset[str]:
        keywords = set()

        for entry in self.legend.values():
            keywords.update(entry.members)

        for rule in self._all_rules():
            for placeholder in rule.placeholders:
                if isinstance(placeholder, Literal):
                    text = placeholder.text
                elif isinstance(placeholder, Pattern):
                    text = placeholder.template
                elif isinstance(placeholder, Options):
                    text = " ".join(placeholder.members)
                else:
                    continue
                text = EMBEDDED_PATTERN.sub(" ", text)
                keywords.update(k.upper() for k in _KEYWORD_PATTERN.findall(text))

        return frozenset(keywords)


# =============================================================================
# Registry
# =============================================================================

_FACTORIES: dict[str, Callable[[], Dialect]] = {}


def register_dialect(name: str, factory: Callable[[], Dialect]) -> None:
    """Register a dialect factory under a name."""
    _FACTORIES[name.lower()] = factory
    _load_dialect.cache_clear()


def available_dialects() -> list[str]:
    """Return the registered dialect names, sorted."""
    return sorted(_FACTORIES)


def get_dialect(name: str = "z80") -> Dialect:
    """
    Return the shared Dialect registered under ``name``.

    Raises:
        UnknownDialectError: If no dialect has that name
    """
    if name.lower() not in _FACTORIES:
        raise UnknownDialectError(name, available_dialects())
    return _load_dialect(name.lower())


@lru_cache(maxsize=None)
def _load_dialect(name: str) -> Dialect:
    return _FACTORIES[name]()
