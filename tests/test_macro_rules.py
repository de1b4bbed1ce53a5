#!/usr/bin/env python3
"""
Tests for macro label inference and the ordered override rules.
"""

import sys
from pathlib import Path

import pytest

# Add parent directory for imports
sys.path.append(str(Path(__file__).parent.parent))

from neurodsl.macro.labels import (
    OVERRIDE_RULES,
    MacroLabel,
    OverrideRule,
    PromptCues,
    apply_overrides,
    infer_label_from_prompt,
)


class TestInferLabel:
    """Test lexical label inference used below the confidence threshold."""

    @pytest.mark.parametrize("prompt,expected", [
        ("Show Ping 2 times", MacroLabel.LOOP),
        ("Say hello twice", MacroLabel.LOOP),
        ("If x is 1 say hi", MacroLabel.BRANCH),
        ('Combine "Hello" and "World"', MacroLabel.CONCAT),
        ("Write a comment that says setup done", MacroLabel.DOC_PRINT),
        ("Set total = 3 + 4", MacroLabel.ARITH),
        ("Set name to Alice", MacroLabel.SET_VAR),
        ("Print final score", MacroLabel.DOC_PRINT),
        ("Tell me a joke", MacroLabel.UNKNOWN),
    ])
    def test_inference(self, prompt, expected):
        assert infer_label_from_prompt(prompt) == expected

    def test_concat_needs_two_quoted_spans(self):
        assert infer_label_from_prompt("Join 'a' with b") != MacroLabel.CONCAT


class TestPromptCues:
    """Test the lexical facts computed for each instruction."""

    def test_cues(self):
        cues = PromptCues.of("Print 'a' + b")
        assert cues.quoted_count == 1
        assert cues.starts_print_like
        assert not cues.starts_assignment
        assert not cues.loopish

    def test_has_math_uses_assigned_expression(self):
        assert PromptCues.of("Set total to 3 + 4").has_math
        assert not PromptCues.of("Set name to Alice").has_math
        assert not PromptCues.of("Write a comment using // then stop").has_math


class TestOverrideRules:
    """Test each override rule and their order."""

    def test_rule_order(self):
        assert [rule.name for rule in OVERRIDE_RULES] == [
            "loop_guard",
            "assignment",
            "concat",
            "comment",
            "print_opener",
        ]

    def test_loop_starting_with_if_becomes_branch(self):
        assert apply_overrides(MacroLabel.LOOP, "If x is 1 say hi 2 times") == MacroLabel.BRANCH

    def test_loop_without_loop_cues_is_reinferred(self):
        assert apply_overrides(MacroLabel.LOOP, "Print final score") == MacroLabel.DOC_PRINT

    def test_loop_with_loop_cues_kept(self):
        assert apply_overrides(MacroLabel.LOOP, "Show Ping 2 times") == MacroLabel.LOOP
        assert apply_overrides(MacroLabel.LOOP, "Say Hello 3 times") == MacroLabel.LOOP

    def test_assignment_forces_setvar(self):
        assert apply_overrides(MacroLabel.UNKNOWN, "Set x to 5") == MacroLabel.SET_VAR

    def test_assignment_with_math_forces_arith(self):
        assert apply_overrides(MacroLabel.DOC_PRINT, "Set total to 3 + 4") == MacroLabel.ARITH

    def test_embedded_set_forces_assignment(self):
        """An embedded `and set ... =` wins over a print opener."""
        assert apply_overrides(MacroLabel.UNKNOWN, "print hi and set y = 2 + 3") == MacroLabel.ARITH

    def test_concat_vocabulary(self):
        assert apply_overrides(MacroLabel.SET_VAR, 'Join "a" and "b"') == MacroLabel.CONCAT

    def test_comment_without_assignment(self):
        assert apply_overrides(MacroLabel.UNKNOWN, "Add comment # init block and print Starting") == MacroLabel.DOC_PRINT

    def test_comment_with_assignment_stays_assignment(self):
        assert apply_overrides(MacroLabel.SET_VAR, "Write a comment and set x = 1") == MacroLabel.SET_VAR

    def test_print_opener(self):
        assert apply_overrides(MacroLabel.AI_BRIDGE, "Echo the status") == MacroLabel.DOC_PRINT

    def test_no_rule_keeps_label(self):
        assert apply_overrides(MacroLabel.ROLE_FLAG, "Promote user to admin") == MacroLabel.ROLE_FLAG

    def test_later_rules_see_earlier_results(self):
        rules = [
            OverrideRule("first", lambda label, cues: True, lambda label, cues: "B"),
            OverrideRule("second", lambda label, cues: label == "B", lambda label, cues: "C"),
        ]
        assert apply_overrides("A", "anything", rules=rules) == "C"

    def test_empty_rule_list(self):
        assert apply_overrides(MacroLabel.LOOP, "Print final score", rules=[]) == MacroLabel.LOOP
