# =============================================================================
# test_usage.py - Instruction Usage Validator Tests
# =============================================================================
# Tests for mnemonic/operand validation against the dialect rule tables.
#
# Test coverage includes:
#   - Line parsing: labels, width suffixes, operand positions
#   - Accepted forms for instructions and directives
#   - Rejected forms, their messages and spans
#   - %any single-operand policy and composite templates per dialect
#   - Per-rule fault isolation
# =============================================================================

import logging

import pytest
from z80_lint.analyzer import usage
from z80_lint.analyzer.usage import InstructionLine, UsageValidator
from z80_lint.diagnostics import DiagnosticKind
from z80_lint.dialects import get_dialect


@pytest.fixture
def validator():
    return UsageValidator(get_dialect("z80"))


@pytest.fixture
def basic_validator():
    return UsageValidator(get_dialect("z80-basic"))


# =============================================================================
# Line Parsing Tests
# =============================================================================

class TestInstructionLine:
    """Test splitting a code string into mnemonic and operands."""

    def test_simple(self):
        line = InstructionLine.parse("  LD A, B")
        assert line.mnemonic == "LD"
        assert line.token == "LD"
        assert line.operand_text == " A, B"
        assert line.mnemonic_end == 4
        assert line.operand_start == 5

    def test_width_suffix(self):
        line = InstructionLine.parse("DS.B 10")
        assert line.mnemonic == "DS"
        assert line.token == "DS.B"
        assert line.mnemonic_end == 4
        assert line.operand_start == 5

    def test_label_is_skipped(self):
        line = InstructionLine.parse("loop: DJNZ loop")
        assert line.mnemonic == "DJNZ"
        assert line.operand_start == 11

    def test_no_operands(self):
        line = InstructionLine.parse("NOP")
        assert line.operand_text == ""
        assert line.operand_start == 3

    def test_blank_line(self):
        assert InstructionLine.parse("   ") is None
        assert InstructionLine.parse("") is None

    def test_operand_splitting(self):
        line = InstructionLine.parse("DB 1, , 2 ")
        assert line.split_operands() == ["1", "2"]
        assert line.whole_operand() == ["1, , 2"]


# =============================================================================
# Accepted Forms
# =============================================================================

class TestValidUsage:
    """Lines matching some rule variant produce no diagnostic."""

    @pytest.mark.parametrize("code", [
        "LD A, (HL)",
        "ld a,b",
        "LD HL, 0x1234",
        "LD (IX+5), A",
        "LD A, (IX + offset)",
        "ADD HL, DE",
        "ADD A, 10",
        "JP NZ, loop",
        "JP loop",
        "JP (HL)",
        "IM 2",
        "NOP",
        "RET",
        "RET Z",
        "EX AF, AF'",
        "CP (HL)",
        "RST 38h",
        "BIT 7, (IY+2)",
        "loop: DJNZ loop",
        "DB 1, 2, 3",
        "DEFM \"a, b\"",
        "DS.B 10",
        "MACRO foo",
        "DEFVARS 0",
    ])
    def test_accepted(self, validator, code):
        assert validator.check_line(code, 0) is None

    @pytest.mark.parametrize("code", [
        "COUNT EQU 5",
        "buf DS.B 10",
        "mymacro 1, 2",
        "label:",
        "",
        "{",
    ])
    def test_lines_without_known_mnemonic_are_skipped(self, validator, code):
        assert validator.check_line(code, 0) is None


# =============================================================================
# Rejected Forms
# =============================================================================

class TestInvalidUsage:
    """Lines violating every variant produce exactly one diagnostic."""

    def test_register_not_in_set(self, validator):
        diagnostic = validator.check_line("ADD HL, A", 3)
        assert diagnostic.kind is DiagnosticKind.INVALID_USAGE
        assert diagnostic.line == 3
        assert (diagnostic.start, diagnostic.end) == (4, 9)
        assert diagnostic.message.startswith(
            "Invalid usage. Allowed variant(s): ADD A, %r | ADD A, (HL) | "
        )
        assert diagnostic.message.endswith("ADD IY, %rr")

    def test_single_variant_reports_reason(self, validator):
        diagnostic = validator.check_line("IM 3", 0)
        assert diagnostic.message == (
            "Invalid usage: Invalid operand '3' for pattern: IM %[0 1 2]"
        )
        assert (diagnostic.start, diagnostic.end) == (3, 4)

    def test_unexpected_operand(self, validator):
        diagnostic = validator.check_line("NOP A", 0)
        assert diagnostic.message == "Invalid usage: Expected no operands (NOP)"
        assert (diagnostic.start, diagnostic.end) == (4, 5)

    def test_missing_operand_spans_mnemonic(self, validator):
        diagnostic = validator.check_line("  DJNZ", 0)
        assert diagnostic.message == (
            "Invalid usage: Expected 1 operand(s), got 0 (DJNZ %ee)"
        )
        assert (diagnostic.start, diagnostic.end) == (2, 6)

    def test_span_after_label(self, validator):
        diagnostic = validator.check_line("loop: ADD HL, A", 0)
        assert (diagnostic.start, diagnostic.end) == (10, 15)

    def test_span_runs_to_end_of_line(self, validator):
        diagnostic = validator.check_line("IM 3   ", 0)
        assert (diagnostic.start, diagnostic.end) == (3, 7)

    def test_blank_operand_text_spans_mnemonic(self, validator):
        diagnostic = validator.check_line("  DJNZ   ", 0)
        assert (diagnostic.start, diagnostic.end) == (2, 6)

    def test_unknown_width_suffix(self, validator):
        diagnostic = validator.check_line("DS.Q 4", 0)
        assert diagnostic.message == (
            "Invalid usage. Allowed variant(s): "
            "DS.B %[%var %s] | DS.W %[%var %s] | DS.L %[%var %s] | DS.D %[%var %s]"
        )

    @pytest.mark.parametrize("line", ["DS.L 4", "DS.D 2", "ds.l COUNT"])
    def test_long_storage_widths(self, validator, line):
        assert validator.check_line(line, 0) is None

    def test_wrong_index_register(self, validator):
        assert validator.check_line("ADD IX, IY", 0) is not None

    def test_source_tag(self):
        tagged = UsageValidator(get_dialect("z80"), source="Test")
        assert tagged.check_line("IM 3", 0).source == "Test"


# =============================================================================
# Dialect Policy Tests
# =============================================================================

class TestDialectPolicies:
    """The same line can be legal in one dialect and not in the other."""

    def test_any_takes_whole_operand(self, validator):
        assert validator.check_line("DB 1, 2, 3", 0) is None

    def test_basic_splits_any_operands(self, basic_validator):
        diagnostic = basic_validator.check_line("DB 1, 2, 3", 0)
        assert diagnostic.message == (
            "Invalid usage: Expected 1 operand(s), got 3 (DB %any)"
        )

    def test_basic_compares_templates_literally(self, validator, basic_validator):
        assert validator.check_line("LD (IX+5), A", 0) is None
        assert basic_validator.check_line("LD (IX+5), A", 0) is not None

    def test_basic_accepts_plain_forms(self, basic_validator):
        assert basic_validator.check_line("LD A, B", 0) is None
        assert basic_validator.check_line("JP (HL)", 0) is None


# =============================================================================
# Fault Isolation Tests
# =============================================================================

class TestFaults:
    """A rule that raises while matching is skipped."""

    def test_faulting_rules_are_skipped(self, validator, monkeypatch, caplog):
        def broken(rule, operands, operand_text=""):
            raise RuntimeError("bad capture")

        monkeypatch.setattr(usage, "describe_failure", broken)

        with caplog.at_level(logging.WARNING):
            assert validator.check_line("IM 3", 4) is None

        assert "Line 5: rule 'IM %[0 1 2]' skipped: bad capture" in caplog.text
