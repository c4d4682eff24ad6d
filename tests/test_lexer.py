# =============================================================================
# test_lexer.py - Line Classifier Unit Tests
# =============================================================================
# Tests for the line-level lexical helpers shared by every analysis pass.
#
# Test coverage includes:
#   - Comment stripping (semicolon and hash, earliest marker wins)
#   - Quoted-string spans (double, single, back quotes, escapes)
#   - The string-span containment test
#   - Identifier scanning (numbers, hex forms, dotted names, strings)
#   - Line splitting (LF and CRLF)
# =============================================================================

import pytest
from z80_lint.analyzer.lexer import (
    StringSpan,
    code_part,
    is_inside_string,
    iter_identifiers,
    split_lines,
    string_spans,
)


def names(code: str) -> list:
    """Helper returning (name, column) pairs for a code string."""
    return [(m.name, m.column) for m in iter_identifiers(code)]


# =============================================================================
# Comment Stripping Tests
# =============================================================================

class TestCodePart:
    """Test comment stripping."""

    def test_semicolon_comment(self):
        assert code_part("LD A, 5 ; load five") == "LD A, 5 "

    def test_hash_comment(self):
        assert code_part("NOP # nothing") == "NOP "

    def test_earliest_marker_wins(self):
        """Whichever marker occurs first starts the comment."""
        assert code_part("x # a ; b") == "x "
        assert code_part("x ; a # b") == "x "

    def test_no_marker_returns_line_unchanged(self):
        assert code_part("  JP loop  ") == "  JP loop  "

    def test_comment_only_line(self):
        assert code_part("; header") == ""

    def test_custom_markers(self):
        assert code_part("NOP // trailing", markers=("//",)) == "NOP "


# =============================================================================
# String Span Tests
# =============================================================================

class TestStringSpans:
    """Test quoted-string span detection."""

    def test_double_and_single_quotes(self):
        spans = string_spans('DEFM "hi", \'x\'')
        assert spans == [StringSpan(5, 9), StringSpan(11, 14)]

    def test_back_quotes(self):
        assert string_spans("DEFM `abc`") == [StringSpan(5, 10)]

    def test_escaped_quote_stays_inside(self):
        """A backslash-escaped quote does not close the string."""
        assert string_spans(r'"a\"b"') == [StringSpan(0, 6)]

    def test_unterminated_quote_is_not_a_span(self):
        """The prime in AF' is not the start of a string."""
        assert string_spans("EX AF, AF'") == []

    def test_no_strings(self):
        assert string_spans("LD A, B") == []


class TestIsInsideString:
    """Test the containment check used before recording any match."""

    @pytest.fixture
    def spans(self):
        return [StringSpan(5, 9)]

    def test_fully_inside(self, spans):
        assert is_inside_string(6, 2, spans)

    def test_whole_span(self, spans):
        assert is_inside_string(5, 4, spans)

    def test_starts_before(self, spans):
        assert not is_inside_string(4, 3, spans)

    def test_ends_after(self, spans):
        assert not is_inside_string(8, 2, spans)

    def test_no_spans(self):
        assert not is_inside_string(0, 3, [])


# =============================================================================
# Identifier Scanning Tests
# =============================================================================

class TestIdentifiers:
    """Test identifier extraction from code strings."""

    def test_instruction_with_label(self):
        assert names("loop: LD A, (HL)") == [
            ("loop", 0), ("LD", 6), ("A", 9), ("HL", 13),
        ]

    def test_identifiers_in_strings_are_skipped(self):
        assert names('msg: DEFM "hello world"') == [("msg", 0), ("DEFM", 5)]

    def test_decimal_numbers_are_not_identifiers(self):
        assert names("LD A, 42") == [("LD", 0), ("A", 3)]

    def test_suffixed_hex_is_not_an_identifier(self):
        """The FFh part of 0FFh belongs to the number."""
        assert names("LD A, 0FFh") == [("LD", 0), ("A", 3)]

    def test_prefixed_hex_is_not_an_identifier(self):
        assert names("LD A, $FF") == [("LD", 0), ("A", 3)]
        assert names("LD HL, 0x1F") == [("LD", 0), ("HL", 3)]

    def test_dotted_names(self):
        assert names("buf DS.B 10") == [("buf", 0), ("DS.B", 4)]

    def test_underscore_and_digits(self):
        assert names("CALL _print_2") == [("CALL", 0), ("_print_2", 5)]

    def test_identifier_match_end(self):
        match = next(iter_identifiers("  JP target"))
        assert match.name == "JP"
        assert match.end == 4

    def test_precomputed_spans(self):
        """Passed spans are used instead of being recomputed."""
        code = "JP away"
        assert names(code) == [("JP", 0), ("away", 3)]
        result = [m.name for m in iter_identifiers(code, [StringSpan(3, 7)])]
        assert result == ["JP"]


# =============================================================================
# Line Splitting Tests
# =============================================================================

class TestSplitLines:
    """Test document splitting."""

    def test_lf(self):
        assert split_lines("a\nb") == ["a", "b"]

    def test_crlf_matches_lf(self):
        assert split_lines("a\r\nb\r\n") == split_lines("a\nb\n")

    def test_trailing_newline_gives_empty_last_line(self):
        assert split_lines("NOP\n") == ["NOP", ""]

    def test_empty_text(self):
        assert split_lines("") == [""]
