#!/usr/bin/env python3
"""
Tests for the macro synthesizer pipeline.
"""

import sys
from pathlib import Path

import pytest

# Add parent directory for imports
sys.path.append(str(Path(__file__).parent.parent))

from conftest import FakeClassifier
from neurodsl.classifier.base import ModelKind
from neurodsl.config import Config
from neurodsl.dsl.engine import analyze
from neurodsl.dsl.lexer import tokenize
from neurodsl.macro.baseline import MAIN_MARKER_DSL, MacroSynthesizer, batch_predict, predict_dsl
from neurodsl.macro.labels import MacroLabel

GOLDEN_INSTRUCTIONS = [
    "Show Ping 2 times",
    "Say Hello 3 times",
    "If score equals 10 say Congrats else say Nope",
    "If battery < 20 print Low elif battery < 50 print Medium else print Full",
    "Create variable total = 3 + 4 and print it",
    "Set remainder = 17 % 5 and print remainder",
    "Set x to 5",
    "Store 'hello' in greeting and echo it",
    "Print 'Hello ' + name",
    "Print greeting + ' ' + target",
    "Join title + ': ' + body",
    "Say the number 42",
    "Print final score",
    "Add comment # init block and print Starting",
    "Set role moderator",
    "Promote user to admin",
    "Bridge assistant output to UI",
    "Forward model output to client",
    "Tell me a joke",
    "How are you doing?",
]


@pytest.fixture
def synthesizer(config):
    return MacroSynthesizer(config)


class TestSynthesizer:
    """Test classification, thresholding and DSL generation."""

    def test_rules_only(self, synthesizer):
        result = synthesizer.synthesize("Show Ping 2 times")
        assert result.label == MacroLabel.UNKNOWN
        assert result.score == 0.0
        assert result.resolved_label == MacroLabel.LOOP
        assert result.dsl == 'neuro "Ping"\nneuro "Ping"'

    def test_instruction_quotes_stripped(self, synthesizer):
        result = synthesizer.synthesize('"Show Ping 2 times"')
        assert result.prompt == "Show Ping 2 times"
        assert result.dsl == 'neuro "Ping"\nneuro "Ping"'

    def test_main_marker(self, synthesizer):
        result = synthesizer.synthesize("Main starts here using //")
        assert result.dsl == MAIN_MARKER_DSL

    def test_confident_label_used(self, synthesizer):
        classifier = FakeClassifier(ModelKind.MACRO_INTENT, {"Promote user to admin": "RoleFlag"}, score=0.9)
        result = synthesizer.synthesize("Promote user to admin", classifier)
        assert result.label == MacroLabel.ROLE_FLAG
        assert result.resolved_label == MacroLabel.ROLE_FLAG
        assert result.dsl == "set flag = true"

    def test_low_score_falls_back_to_rules(self, synthesizer):
        classifier = FakeClassifier(ModelKind.MACRO_INTENT, {"Set x to 5": "Loop"}, score=0.2)
        result = synthesizer.synthesize("Set x to 5", classifier)
        assert result.label == MacroLabel.LOOP
        assert result.score == pytest.approx(0.2)
        assert result.resolved_label == MacroLabel.SET_VAR
        assert result.dsl == "set x = 5"

    def test_threshold_from_config(self, tmp_path):
        config = Config(models_dir=str(tmp_path / "models"), log_dir=str(tmp_path / "logs"), intent_threshold=0.1)
        classifier = FakeClassifier(ModelKind.MACRO_INTENT, {"Promote user to admin": "RoleFlag"}, score=0.2)
        result = MacroSynthesizer(config).synthesize("Promote user to admin", classifier)
        assert result.resolved_label == MacroLabel.ROLE_FLAG

    def test_overrides_run_after_classifier(self, synthesizer):
        classifier = FakeClassifier(ModelKind.MACRO_INTENT, {"Print final score": "Loop"}, score=0.99)
        result = synthesizer.synthesize("Print final score", classifier)
        assert result.resolved_label == MacroLabel.DOC_PRINT

    def test_classifier_failure_falls_back(self, synthesizer):
        classifier = FakeClassifier(ModelKind.MACRO_INTENT, {})
        result = synthesizer.synthesize("Show Ping 2 times", classifier)
        assert result.label == MacroLabel.UNKNOWN
        assert result.dsl == 'neuro "Ping"\nneuro "Ping"'

    def test_single_quotes_become_double(self, synthesizer):
        assert "'" not in synthesizer.synthesize("Print 'Hello ' + name").dsl

    @pytest.mark.parametrize("instruction", GOLDEN_INSTRUCTIONS + ["", "   ", "if", "???", 'He said "hi'])
    def test_output_always_lexes(self, synthesizer, instruction):
        """Synthesis is total: every instruction yields DSL that tokenizes."""
        dsl = synthesizer.synthesize(instruction).dsl
        assert dsl.strip()
        tokenize(dsl)

    def test_comparison_phrase_branch_runs(self, interpreter):
        source = "set x = 3\nmacro from AI: If x is greater than 10 say big\nneuro \"end\""
        assert analyze(source, interpreter).output == "end"

    def test_raw_log(self, tmp_path):
        config = Config(models_dir=str(tmp_path / "models"), log_dir=str(tmp_path / "logs"), raw_log=True)
        MacroSynthesizer(config).synthesize("Show Ping 2 times")
        log_text = (tmp_path / "logs" / "macro_raw_latest.log").read_text(encoding="utf-8")
        assert ">>> INTENT" in log_text
        assert "label=Unknown score=0.000 | Show Ping 2 times" in log_text
        assert ">>> DSL" in log_text


class TestModuleHelpers:
    """Test the rule-only convenience functions."""

    def test_predict_dsl(self):
        assert predict_dsl("Set x to 5") == "set x = 5"

    def test_batch_predict(self):
        assert batch_predict(["Set x to 5", "Say the number 42"]) == ["set x = 5", 'neuro "42"']
