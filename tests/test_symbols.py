# =============================================================================
# test_symbols.py - Symbol Table Builder Tests
# =============================================================================
# Tests for the definition pass.
#
# Test coverage includes:
#   - Label definitions and their columns
#   - Variable definitions: assignment, EQU, storage, block members
#   - Declaration-only symbols (EXTERN, SECTION, DEFB, DEFW, DEFC, MACRO)
#   - Brace and macro depth tracking
#   - Comment and string exclusion
#   - Per-line fault isolation
# =============================================================================

import logging

import pytest
from z80_lint.analyzer.symbols import (
    Definition,
    SymbolKind,
    SymbolTableBuilder,
    build_symbol_table,
)


# =============================================================================
# Label Tests
# =============================================================================

class TestLabels:
    """Test label extraction."""

    def test_label_with_instruction(self):
        table = build_symbol_table(["start: NOP"])
        assert table.labels["start"].definitions == [Definition(0, 0)]
        assert table.labels["start"].kind is SymbolKind.LABEL

    def test_indented_label_column(self):
        table = build_symbol_table(["", "  loop:"])
        assert table.labels["loop"].definitions == [Definition(1, 2)]

    def test_reference_is_not_a_definition(self):
        table = build_symbol_table(["JP start"])
        assert table.labels == {}

    def test_commented_label_is_ignored(self):
        table = build_symbol_table(["; old: NOP"])
        assert table.labels == {}


# =============================================================================
# Variable Tests
# =============================================================================

class TestVariables:
    """Test variable extraction."""

    def test_equ(self):
        table = build_symbol_table(["COUNT EQU 5"])
        assert table.variables["COUNT"].definitions == [Definition(0, 0)]

    def test_equ_is_case_insensitive(self):
        table = build_symbol_table(["  count equ 5"])
        assert table.variables["count"].definitions == [Definition(0, 2)]

    def test_assignment(self):
        table = build_symbol_table(["x = 1", "y=2"])
        assert set(table.variables) == {"x", "y"}

    def test_storage(self):
        table = build_symbol_table(["buf DS.B 10", "words ds.w 4"])
        assert set(table.variables) == {"buf", "words"}

    def test_block_members(self):
        lines = [
            "DEFVARS 0",
            "{",
            "  speed",
            "  dir DS.B 1",
            "}",
            "after",
        ]
        table = build_symbol_table(lines)
        assert set(table.variables) == {"speed", "dir"}
        assert table.brace_depth == 0

    def test_bare_identifier_outside_block_is_not_a_variable(self):
        table = build_symbol_table(["lonely"])
        assert table.variables == {}

    def test_trailing_comment_is_ignored(self):
        table = build_symbol_table(["x EQU 1 ; y EQU 2"])
        assert set(table.variables) == {"x"}


# =============================================================================
# Declaration Tests
# =============================================================================

class TestDeclarations:
    """Test declaration-only symbols."""

    def test_declaration_keywords(self):
        lines = [
            "EXTERN printf",
            "SECTION code",
            "DEFB table",
            "DEFW vectors",
            "DEFC limit = 10",
            "MACRO mymac",
        ]
        table = build_symbol_table(lines)
        assert table.declarations == {
            "printf", "code", "table", "vectors", "limit", "mymac",
        }
        assert table.labels == {}
        assert table.variables == {}

    def test_keyword_is_case_insensitive(self):
        assert build_symbol_table(["extern puts"]).declarations == {"puts"}

    def test_numbers_are_not_declared(self):
        assert build_symbol_table(["DEFB 1, 2, 3"]).declarations == set()

    def test_public_does_not_declare(self):
        assert build_symbol_table(["PUBLIC main"]).declarations == set()

    def test_identifier_universe(self):
        table = build_symbol_table(["start: NOP", "COUNT EQU 5", "EXTERN puts"])
        assert table.identifiers == {"start", "COUNT", "puts"}
        assert table.is_defined("puts")
        assert not table.is_defined("START")

    def test_strings_are_not_symbols(self):
        table = build_symbol_table(['msg: DEFM "hello world"'])
        assert table.identifiers == {"msg"}


# =============================================================================
# Duplicate Recording Tests
# =============================================================================

class TestDuplicates:
    """Test that every definition line is kept in order."""

    def test_duplicate_lines(self):
        table = build_symbol_table(["COUNT EQU 5", "COUNT EQU 6"])
        record = table.variables["COUNT"]
        assert record.lines == [0, 1]
        assert record.is_duplicate
        assert record.duplicates() == [Definition(1, 0)]

    def test_single_definition(self):
        record = build_symbol_table(["a: NOP"]).labels["a"]
        assert not record.is_duplicate
        assert record.duplicates() == []

    def test_records_order(self):
        table = build_symbol_table(["v EQU 1", "b: NOP", "a: NOP"])
        assert [r.name for r in table.records()] == ["b", "a", "v"]


# =============================================================================
# Depth Tracking Tests
# =============================================================================

class TestDepths:
    """Test brace and macro depth counters."""

    def test_balanced_macro(self):
        table = build_symbol_table(["MACRO foo", "NOP", "ENDM"])
        assert table.macro_depth == 0

    def test_open_macro(self):
        assert build_symbol_table(["MACRO foo", "NOP"]).macro_depth == 1

    def test_macro_depth_clamped_at_zero(self):
        assert build_symbol_table(["ENDM", "ENDM"]).macro_depth == 0
        assert build_symbol_table(["ENDM", "MACRO a"]).macro_depth == 1

    def test_open_brace(self):
        assert build_symbol_table(["{", "{", "}"]).brace_depth == 1

    def test_extra_closing_brace(self):
        assert build_symbol_table(["}"]).brace_depth == -1

    def test_braces_in_comments_are_ignored(self):
        assert build_symbol_table(["NOP ; {"]).brace_depth == 0


# =============================================================================
# Builder Behavior Tests
# =============================================================================

class TestBuilder:
    """Test builder state and fault isolation."""

    def test_each_build_returns_a_fresh_table(self):
        builder = SymbolTableBuilder()
        first = builder.build(["a: NOP"])
        second = builder.build(["a: NOP"])
        assert first is not second
        assert second.labels["a"].lines == [0]

    def test_faulting_line_is_skipped(self, monkeypatch, caplog):
        builder = SymbolTableBuilder()
        original = builder._scan_line

        def flaky(table, index, raw_line):
            if index == 1:
                raise RuntimeError("boom")
            original(table, index, raw_line)

        monkeypatch.setattr(builder, "_scan_line", flaky)

        with caplog.at_level(logging.WARNING):
            table = builder.build(["a: NOP", "b: NOP", "c: NOP"])

        assert set(table.labels) == {"a", "c"}
        assert "skipped line 2" in caplog.text
