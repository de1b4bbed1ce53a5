from neurodsl.macro.baseline import MacroSynthesizer, Synthesis, batch_predict, predict_dsl
from neurodsl.macro.labels import OVERRIDE_RULES, MacroLabel, infer_label_from_prompt
from neurodsl.macro.templates import build_macro_dsl

__all__ = [
    "MacroSynthesizer",
    "Synthesis",
    "batch_predict",
    "predict_dsl",
    "OVERRIDE_RULES",
    "MacroLabel",
    "infer_label_from_prompt",
    "build_macro_dsl",
]
