"""
Instruction Usage Validator
===========================

This module checks that each instruction or directive line uses its
mnemonic in one of the forms declared by the dialect's usage rules.

Algorithm
---------
For one line (comment already stripped):

1. Skip a leading ``label:``.
2. Take the mnemonic token (``LD``, ``DS.B``) and the operand text after it.
3. Look the mnemonic up in the instruction table, then the directive
   table. Lines whose first word is neither (macro calls, bare labels,
   variable definitions) are not checked.
4. Try each rule variant in declared order. Rules containing ``%any``
   receive the whole operand text as one operand when the dialect says
   so; all other rules receive the comma-split operand list.
5. The first variant whose arity and per-operand placeholders all match
   accepts the line. If none does, one diagnostic covers the operand text
   to the end of the line.

Example
-------
>>> from z80_lint.analyzer.usage import UsageValidator
>>> validator = UsageValidator()
>>> validator.check_line("    ADD HL, DE", 0) is None
True
>>> validator.check_line("    ADD HL, A", 0).message
'Invalid usage. Allowed variant(s): ADD A, %r | ADD A, (HL) | ...'
"""

from dataclasses import dataclass
from typing import Optional
import logging
import re

from z80_lint.analyzer.grammar import CompiledRule, describe_failure
from z80_lint.diagnostics import DEFAULT_SOURCE_TAG, Diagnostic, DiagnosticKind
from z80_lint.dialects import Dialect, get_dialect

logger = logging.getLogger(__name__)


# Optional leading label, then the mnemonic (with optional .width suffix)
INSTRUCTION_PATTERN = re.compile(
    r"^(?:\s*[A-Za-z_.][A-Za-z0-9_.]*\s*:)?"
    r"\s*(?P<mnemonic>[A-Za-z][A-Za-z0-9_]*)(?P<suffix>\.[A-Za-z]+)?\b"
    r"(?P<operands>.*)$"
)


# =============================================================================
# Parsed Line
# =============================================================================

@dataclass(frozen=True)
class InstructionLine:
    """
    The mnemonic and operand text of one line, with positions.

    Attributes:
        mnemonic: Base mnemonic as written (``DS`` for ``DS.B``)
        token: Full mnemonic token as written (``DS.B``)
        operand_text: Everything after the token, verbatim
        mnemonic_end: Column just after the mnemonic token
        operand_start: Column of the first non-blank operand character,
            or mnemonic_end when there is no operand text
    """
    mnemonic: str
    token: str
    operand_text: str
    mnemonic_end: int
    operand_start: int

    @classmethod
    def parse(cls, code: str) -> Optional["InstructionLine"]:
        """Split a code string into mnemonic and operands, or return None."""
        match = INSTRUCTION_PATTERN.match(code)
        if match is None:
            return None

        mnemonic = match.group("mnemonic")
        suffix = match.group("suffix") or ""
        operand_text = match.group("operands")
        mnemonic_end = match.end("suffix") if suffix else match.end("mnemonic")

        stripped = operand_text.lstrip()
        if stripped:
            operand_start = match.start("operands") + len(operand_text) - len(stripped)
        else:
            operand_start = mnemonic_end

        return cls(mnemonic, mnemonic + suffix, operand_text, mnemonic_end, operand_start)

    def split_operands(self) -> list[str]:
        """Comma-split, trimmed, non-empty operand list."""
        return [op.strip() for op in self.operand_text.split(",") if op.strip()]

    def whole_operand(self) -> list[str]:
        """The operand text as a single operand (empty list when blank)."""
        text = self.operand_text.strip()
        return [text] if text else []


# =============================================================================
# Validator
# =============================================================================

class UsageValidator:
    """
    Validates mnemonic usage against a dialect's rule tables.

    The validator is stateless between lines; it can be shared by
    concurrent analysis runs of the same dialect.

    Attributes:
        dialect: The dialect whose tables are consulted
        source: Source tag stamped on produced diagnostics
    """

    def __init__(self, dialect: Optional[Dialect] = None, source: str = DEFAULT_SOURCE_TAG):
        self.dialect = dialect or get_dialect()
        self.source = source

    def check_line(self, code: str, line_index: int) -> Optional[Diagnostic]:
        """
        Validate one code string.

        Args:
            code: Code part of the line (comment stripped)
            line_index: Zero-based line number for the diagnostic

        Returns:
            A Diagnostic if no rule variant accepts the line, else None
        """
        line = InstructionLine.parse(code)
        if line is None:
            return None

        rules = self.dialect.rules_for(line.mnemonic)
        if not rules:
            return None

        candidates = [rule for rule in rules if rule.applies_to(line.token)]
        failures: list[str] = []

        for rule in candidates:
            try:
                failure = describe_failure(rule, self._operands_for(rule, line), line.operand_text)
            except Exception as e:
                logger.warning(
                    f"Line {line_index + 1}: rule '{rule.text}' skipped: {e}"
                )
                continue

            if failure is None:
                return None
            failures.append(failure)

        if not failures and candidates:
            # Every candidate faulted; nothing reliable to report
            return None

        return self._diagnostic(code, line_index, line, rules, failures)

    def _operands_for(self, rule: CompiledRule, line: InstructionLine) -> list[str]:
        if rule.has_any and self.dialect.any_single_operand:
            return line.whole_operand()
        return line.split_operands()

    def _diagnostic(
        self,
        code: str,
        line_index: int,
        line: InstructionLine,
        rules: tuple[CompiledRule, ...],
        failures: list[str],
    ) -> Diagnostic:
        if len(rules) == 1 and failures:
            message = f"Invalid usage: {failures[0]}"
        else:
            variants = " | ".join(rule.text for rule in rules)
            message = f"Invalid usage. Allowed variant(s): {variants}"

        if line.operand_text.strip():
            start, end = line.operand_start, len(code)
        else:
            # No operand text to point at: cover the mnemonic instead
            start, end = line.mnemonic_end - len(line.token), line.mnemonic_end

        return Diagnostic(
            line=line_index,
            start=start,
            end=end,
            message=message,
            kind=DiagnosticKind.INVALID_USAGE,
            source=self.source,
        )
