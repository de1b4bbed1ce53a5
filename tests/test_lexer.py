#!/usr/bin/env python3
"""
Tests for the line-based lexer.
"""

import pytest
import sys
from pathlib import Path

# Add parent directory for imports
sys.path.append(str(Path(__file__).parent.parent))

from neurodsl.dsl.errors import LexError
from neurodsl.dsl.lexer import strip_comment, tokenize


def types(source):
    return [tok.type for tok in tokenize(source)]


def values(source):
    return [tok.value for tok in tokenize(source)]


class TestTokens:
    """Test single-line token shapes."""

    def test_output_statement(self):
        """A quoted literal keeps its quote markers."""
        assert types('neuro "hi"') == ["NEURO", "STRING", "NEWLINE"]
        assert values('neuro "hi"')[1] == '"hi"'

    def test_keywords_case_insensitive(self):
        """Keywords match regardless of case and keep their spelling."""
        assert types("NEURO x") == ["NEURO", "STRING", "NEWLINE"]
        assert types("Macro From ai: hello") == ["MACRO", "FROM", "AI", "COLON", "STRING", "NEWLINE"]
        assert values("Else:")[0] == "Else"

    def test_identifiers_become_strings(self):
        """Non-keyword names are bare STRING tokens without quotes."""
        toks = tokenize("set total_2 = score")
        assert [t.type for t in toks] == ["SET", "STRING", "ASSIGN", "STRING", "NEWLINE"]
        assert toks[1].value == "total_2"
        assert toks[3].value == "score"

    def test_numbers(self):
        """Numbers allow one decimal point and no sign."""
        assert types("set x = 3.14") == ["SET", "STRING", "ASSIGN", "NUMBER", "NEWLINE"]
        assert types("set x = -2") == ["SET", "STRING", "ASSIGN", "MINUS", "NUMBER", "NEWLINE"]

    def test_operators(self):
        """Two-character comparators win over their one-character prefixes."""
        assert types("if a >= b:")[2] == "GE"
        assert types("if a != b:")[2] == "NE"
        assert types("if a == b:")[2] == "EQ"
        assert types("set x = a % b")[-2] == "STRING"
        assert "PERCENT" in types("set x = a % b")

    def test_model_path_is_unwrapped(self):
        """Quoted model paths are kept without quote markers."""
        toks = tokenize('AI: "models/distilbert-sst2/model.onnx"')
        assert [t.type for t in toks] == ["AI", "COLON", "STRING", "NEWLINE"]
        assert toks[2].value == "models/distilbert-sst2/model.onnx"

    def test_line_numbers(self):
        """Tokens carry 1-based line numbers."""
        toks = tokenize('neuro "a"\n\nneuro "b"')
        assert toks[0].line == 1
        assert toks[-2].line == 3


class TestComments:
    """Test comment handling."""

    def test_comment_markers_inside_quotes(self):
        """# and // inside a quoted span are ordinary characters."""
        assert values('neuro "a # b // c"')[1] == '"a # b // c"'

    def test_trailing_comment_stripped(self):
        """A comment after code is dropped."""
        assert types('neuro "x" // trailing') == ["NEURO", "STRING", "NEWLINE"]
        assert types('neuro "x" # trailing') == ["NEURO", "STRING", "NEWLINE"]

    def test_comment_only_line(self):
        """A comment-only line yields COMMENT NEWLINE."""
        assert types("# note") == ["COMMENT", "NEWLINE"]
        assert types("    // indented note") == ["COMMENT", "NEWLINE"]

    def test_blank_lines_yield_nothing(self):
        """Blank lines produce no tokens at all."""
        assert tokenize("\n\n   \n") == []

    def test_strip_comment(self):
        """strip_comment cuts at the first marker outside quotes."""
        assert strip_comment('neuro "a#b" # c') == 'neuro "a#b" '
        assert strip_comment("set x = 1 // note") == "set x = 1 "
        assert strip_comment("set x = 1") == "set x = 1"


class TestIndentation:
    """Test INDENT/DEDENT bookkeeping."""

    def test_single_block(self):
        """One level opens and closes around the body."""
        source = "if a == b:\n    neuro a\nneuro b"
        assert types(source) == [
            "IF", "STRING", "EQ", "STRING", "COLON", "NEWLINE",
            "INDENT", "NEURO", "STRING", "NEWLINE",
            "DEDENT", "NEURO", "STRING", "NEWLINE",
        ]

    def test_open_blocks_closed_at_end(self):
        """Open levels are closed after the last line."""
        assert types("if a == b:\n    neuro a")[-2:] == ["NEWLINE", "DEDENT"]

    @pytest.mark.parametrize("depth", [1, 2, 3, 5])
    def test_nested_depth_balanced(self, depth):
        """A block nested to depth d yields exactly d INDENT and d DEDENT tokens."""
        lines = []
        for level in range(depth):
            lines.append("    " * level + f"if x{level} == y:")
        lines.append("    " * depth + 'neuro "deep"')
        toks = types("\n".join(lines))
        assert toks.count("INDENT") == depth
        assert toks.count("DEDENT") == depth

    def test_multi_level_dedent(self):
        """Dropping two levels at once emits two DEDENT tokens."""
        source = "if a == b:\n    if c == d:\n        neuro a\nneuro b"
        toks = types(source)
        idx = toks.index("DEDENT")
        assert toks[idx:idx + 2] == ["DEDENT", "DEDENT"]

    def test_inconsistent_dedent_raises(self):
        """Dedenting to a width that was never pushed is an error."""
        source = "if a == b:\n        neuro a\n    neuro b"
        with pytest.raises(LexError) as excinfo:
            tokenize(source)
        assert excinfo.value.line == 3


class TestLexErrors:
    """Test fatal lexing errors."""

    def test_unterminated_quote(self):
        """An unterminated string reports line number and raw line."""
        with pytest.raises(LexError) as excinfo:
            tokenize('neuro "ok"\nneuro "oops')
        assert excinfo.value.line == 2
        assert excinfo.value.text == 'neuro "oops'
        assert "Missing quote" in str(excinfo.value)
        assert "line 2" in str(excinfo.value)

    def test_unexpected_character(self):
        """Characters outside the vocabulary abort tokenization."""
        with pytest.raises(LexError) as excinfo:
            tokenize("set x = 1 & 2")
        assert "&" in str(excinfo.value)
