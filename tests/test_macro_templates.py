#!/usr/bin/env python3
"""
Tests for the DSL template builders and synthesis fast paths.
"""

import sys
from pathlib import Path

import pytest

# Add parent directory for imports
sys.path.append(str(Path(__file__).parent.parent))

from neurodsl.macro.labels import MacroLabel
from neurodsl.macro.templates import (
    MAX_REPEAT,
    build_ai_bridge_dsl,
    build_arith_dsl,
    build_branch_dsl,
    build_concat_dsl,
    build_doc_print_dsl,
    build_loop_dsl,
    build_macro_dsl,
    build_print_concat_dsl,
    build_roleflag_dsl,
    build_setvar_dsl,
    split_three_way,
)
from neurodsl.macro.text import loop_count, neuro_line, normalize_condition, parse_rhs


class TestLoopBuilder:
    """Test repeat extraction and clamping."""

    def test_show_ping_two_times(self):
        assert build_loop_dsl("Show Ping 2 times") == 'neuro "Ping"\nneuro "Ping"'

    def test_quoted_message(self):
        assert build_loop_dsl("Repeat 'Hello there' 3 times") == "\n".join(['neuro "Hello there"'] * 3)

    def test_adverb_and_word_counts(self):
        assert build_loop_dsl("Print Yo twice") == 'neuro "Yo"\nneuro "Yo"'
        assert loop_count("Say hi ten times") == 10
        assert loop_count("echo it 4x") == 4
        assert loop_count("say it once") == 1

    @pytest.mark.parametrize("requested,expected", [(0, 1), (1, 1), (12, 12), (13, 12), (500, 12)])
    def test_repeat_count_clamped(self, requested, expected):
        dsl = build_loop_dsl(f"Say Hi {requested} times")
        assert len(dsl.splitlines()) == expected
        assert expected <= MAX_REPEAT


class TestBranchBuilder:
    """Test conditional synthesis."""

    def test_numeric_rhs_unquoted(self):
        assert build_branch_dsl("If score equals 10 say Congrats else say Nope") == (
            'if score == 10:\n    neuro "Congrats"\nelse:\n    neuro "Nope"'
        )

    def test_textual_rhs_quoted(self):
        assert build_branch_dsl("If mood is happy say Yay else say Hmm") == (
            'if mood == "happy":\n    neuro "Yay"\nelse:\n    neuro "Hmm"'
        )

    def test_elif_chain(self):
        assert build_branch_dsl("If battery < 20 print Low elif battery < 50 print Medium else print Full") == (
            "if battery < 20:\n"
            '    neuro "Low"\n'
            "elif battery < 50:\n"
            '    neuro "Medium"\n'
            "else:\n"
            '    neuro "Full"'
        )

    def test_three_way_split(self):
        assert split_three_way("Then if a > 1 say big, elif a > 0 say small, else say none") == (
            "if a > 1:\n"
            '    neuro "big"\n'
            "elif a > 0:\n"
            '    neuro "small"\n'
            "else:\n"
            '    neuro "none"'
        )
        assert split_three_way("no branches here") is None

    def test_normalize_condition(self):
        assert normalize_condition("score greater than 10") == "score > 10"
        assert normalize_condition("status is not ready") == 'status != "ready"'
        assert normalize_condition("flag equals true") == "flag == true"

    @pytest.mark.parametrize("raw,expected", [
        ("x is greater than 10", "x > 10"),
        ("x is less than or equal to 3", "x <= 3"),
        ("x is not equal to 5", "x != 5"),
        ("x is equal to 5", "x == 5"),
    ])
    def test_is_before_comparator(self, raw, expected):
        assert normalize_condition(raw) == expected

    def test_is_greater_than_branch(self):
        assert build_branch_dsl("If x is greater than 10 say big") == 'if x > 10:\n    neuro "big"'


class TestAssignmentBuilders:
    """Test SetVar, Arith, Concat and RoleFlag builders."""

    def test_setvar(self):
        assert build_setvar_dsl("Set x to 5") == "set x = 5"

    def test_setvar_quoted_text(self):
        assert build_setvar_dsl("Set name to 'Ada Lovelace'") == 'set name = "Ada Lovelace"'

    def test_arith_with_print_it(self):
        assert build_arith_dsl("Create variable total = 3 + 4 and print it") == (
            'set total = 3 + 4\nset tmpPrint = "total=" + total\nneuro tmpPrint'
        )

    def test_arith_subtract_divide(self):
        assert build_arith_dsl("Subtract b from a, divide by 2, store in half") == "set half = (a - b) / 2"

    def test_arith_power(self):
        assert build_arith_dsl("Set cube = n ** 3") == "set cube = (n) * (n) * (n)"

    def test_concat_quoted_pair(self):
        assert build_concat_dsl('Combine "Hello" and "World" into greeting and print it') == (
            'set greeting = "Hello" + "World"\nneuro greeting'
        )

    def test_concat_variables(self):
        assert build_concat_dsl("Concatenate first and last, store in full") == "set full = first + last"

    def test_roleflag(self):
        assert build_roleflag_dsl("Promote user to admin") == "set flag = true"
        assert build_roleflag_dsl("Set role is moderator and show it") == "set role = moderator\nneuro role"


class TestPrintBuilders:
    """Test DocPrint, AIBridge and the print-concat fast path."""

    def test_say_the_number(self):
        assert build_doc_print_dsl("Say the number 42") == 'neuro "42"'

    def test_print_free_text(self):
        assert build_doc_print_dsl("Print final score") == 'neuro "final score"'

    def test_print_identifier(self):
        assert build_doc_print_dsl("Display total") == "neuro total"

    def test_comment_then_print(self):
        assert build_doc_print_dsl("Add comment # init block and print Starting") == (
            "// init block and print Starting\nneuro Starting"
        )

    def test_format_with_comma(self):
        assert build_doc_print_dsl("Format Hello and World with a comma") == 'neuro "Hello, World"'

    def test_ai_bridge_echoes(self):
        assert build_ai_bridge_dsl("Bridge assistant output to UI") == 'neuro "Bridge assistant output to UI"'

    def test_print_literal_plus_variable(self):
        assert build_print_concat_dsl("Print 'Hello ' + name") == 'set tmpPrint = "Hello " + name\nneuro tmpPrint'

    def test_print_variable_space_variable(self):
        assert build_print_concat_dsl("Print greeting + ' ' + target") == (
            'set tmpPrint = greeting + " " + target\nneuro tmpPrint'
        )

    def test_print_concat_no_match(self):
        assert build_print_concat_dsl("Print a + b + c") is None


class TestBuildMacroDsl:
    """Test dispatch and the builder-independent fast paths."""

    def test_if_prefix_routes_to_branch(self):
        """A leading `if` wins over whatever label was chosen."""
        assert build_macro_dsl(MacroLabel.LOOP, "If x equals 1 say One") == 'if x == 1:\n    neuro "One"'

    def test_print_concat_runs_first(self):
        assert build_macro_dsl(MacroLabel.DOC_PRINT, "Print 'Hello ' + name").startswith("set tmpPrint")

    def test_print_concat_skipped_for_assignments(self):
        assert build_macro_dsl(MacroLabel.SET_VAR, "Set msg to 'Hi ' + name").startswith("set msg =")

    def test_show_when(self):
        assert build_macro_dsl(MacroLabel.UNKNOWN, "show status when mode is ready") == (
            'if mode == "ready":\n    neuro status'
        )

    def test_canned_rewrite(self):
        assert build_macro_dsl(MacroLabel.ARITH, "Subtract y from x, divide by 4, store in q") == "set q = (x - y) / 4"

    def test_unknown_echoes_instruction(self):
        assert build_macro_dsl(MacroLabel.UNKNOWN, "Tell me a joke") == 'neuro "Tell me a joke"'

    def test_neuro_line_drops_quotes(self):
        assert neuro_line('He said "hi" and \'bye\'') == 'neuro "He said hi and bye"'

    def test_parse_rhs(self):
        assert parse_rhs("42") == "42"
        assert parse_rhs("true") == "true"
        assert parse_rhs("'ready'") == '"ready"'
        assert parse_rhs("two words") == '"two words"'
        assert parse_rhs("") == '""'
