"""
Macro synthesizer: natural-language instruction -> DSL source.

Pipeline for one instruction:
    1. hard trigger ("main starts here") -> fixed comment output
    2. classify with the macro-intent classifier, if any
    3. below threshold -> label from lexical cues
    4. override rules
    5. template builders
    6. single quotes -> double quotes; empty result -> echo the instruction

Synthesis is total: every instruction yields lexable DSL.
"""

import logging
from typing import Iterable, List, NamedTuple, Optional

from neurodsl.classifier.base import Classifier, ClassifierError
from neurodsl.config import Config
from neurodsl.logging_config import get_macro_logger, log_macro_raw
from neurodsl.macro.labels import MacroLabel, apply_overrides, infer_label_from_prompt
from neurodsl.macro.templates import build_macro_dsl
from neurodsl.macro.text import neuro_line, strip_wrapping_quotes

logger = logging.getLogger(__name__)

MAIN_MARKER = "main starts here"
MAIN_MARKER_DSL = 'neuro "// main starts here"'


class Synthesis(NamedTuple):
    instruction: str
    prompt: str
    label: str
    score: float
    resolved_label: str
    dsl: str


class MacroSynthesizer:
    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.raw_log = get_macro_logger(self.config)

    def classify(self, prompt: str, classifier: Optional[Classifier]):
        """Return (label, score); ("Unknown", 0.0) without a usable classifier."""
        if classifier is None:
            logger.debug("Macro model is not loaded; running fallback")
            return MacroLabel.UNKNOWN, 0.0
        try:
            return classifier.predict_with_score(prompt)
        except ClassifierError as e:
            logger.warning("⚠️ Macro model classification failed: %s", e)
            return MacroLabel.UNKNOWN, 0.0

    def synthesize(self, instruction: str, classifier: Optional[Classifier] = None) -> Synthesis:
        if MAIN_MARKER in instruction.lower():
            log_macro_raw(self.raw_log, "DSL", MAIN_MARKER_DSL)
            return Synthesis(instruction, instruction, MacroLabel.DOC_PRINT, 1.0, MacroLabel.DOC_PRINT, MAIN_MARKER_DSL)

        prompt = strip_wrapping_quotes(instruction.strip())
        label, score = self.classify(prompt, classifier)
        log_macro_raw(self.raw_log, "INTENT", f"label={label} score={score:.3f} | {prompt}")

        chosen = label if score >= self.config.intent_threshold else infer_label_from_prompt(prompt)
        resolved = apply_overrides(chosen, prompt)

        dsl = build_macro_dsl(resolved, prompt).replace("'", '"')
        if not dsl.strip():
            dsl = neuro_line(prompt)
        log_macro_raw(self.raw_log, "DSL", dsl)

        return Synthesis(instruction, prompt, label, score, resolved, dsl)


_default_synthesizer: Optional[MacroSynthesizer] = None


def predict_dsl(instruction: str) -> str:
    """
    Rule-only synthesis of a single instruction.

    Args:
        instruction: Natural-language instruction

    Returns:
        DSL source text
    """
    global _default_synthesizer
    if _default_synthesizer is None:
        _default_synthesizer = MacroSynthesizer()
    return _default_synthesizer.synthesize(instruction).dsl


def batch_predict(instructions: Iterable[str]) -> List[str]:
    """
    Batch prediction for multiple instructions.

    Args:
        instructions: Natural-language instructions

    Returns:
        List of DSL source texts
    """
    return [predict_dsl(instruction) for instruction in instructions]
