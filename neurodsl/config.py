"""
Runtime configuration.

One ``Config`` is built per host (CLI, playground, harness) and handed to the
interpreter and the macro synthesizer. ``Config.from_env`` reads the process
environment after loading a ``.env`` file from the working directory.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv

DEFAULT_MODELS_DIR = "models"
DEFAULT_INTENT_THRESHOLD = 0.35
DEFAULT_MAX_MACRO_DEPTH = 16
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"

_TRUTHY = ("1", "true", "yes", "on")

# Web model id -> file under the models directory.
MODEL_IDS: Dict[str, str] = {
    "sst2": "distilbert-sst2/model.onnx",
    "factcheck": "factcheck/model.onnx",
    "intent": "intent/model.onnx",
    "toxic": "toxic_quantized/model.onnx",
    "macro": "intent_macro/model.onnx",
    "intent_macro": "intent_macro/model.onnx",
    "macro_intent": "intent_macro/model.onnx",
    "gpt2": "intent_macro/model.onnx",
    "generator": "intent_macro/model.onnx",
    "policy": "policy/model.onnx",
}


def _flag(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in _TRUTHY


@dataclass
class Config:
    models_dir: str = DEFAULT_MODELS_DIR
    macro_model_path: str = ""
    intent_threshold: float = DEFAULT_INTENT_THRESHOLD
    output_log: bool = False
    raw_log: bool = False
    log_dir: str = "logs"
    max_macro_depth: int = DEFAULT_MAX_MACRO_DEPTH
    openai_model: str = DEFAULT_OPENAI_MODEL

    def __post_init__(self):
        if not self.macro_model_path:
            self.macro_model_path = f"{self.models_dir}/intent_macro/model.onnx"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, dotenv_path: Optional[Path] = None) -> "Config":
        """Build a config from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``. When given,
                no ``.env`` file is loaded.
            dotenv_path: Explicit ``.env`` file; defaults to searching from
                the working directory.

        Returns:
            Config with every unset or malformed value at its default.
        """
        if environ is None:
            load_dotenv(dotenv_path)
            environ = os.environ

        models_dir = environ.get("NC_MODELS_DIR") or DEFAULT_MODELS_DIR
        macro_path = environ.get("NC_MACRO_MODEL") or environ.get("NC_MACRO_MODEL_PATH") or ""

        try:
            threshold = float(environ.get("NC_INTENT_THRESHOLD", DEFAULT_INTENT_THRESHOLD))
        except ValueError:
            threshold = DEFAULT_INTENT_THRESHOLD

        try:
            depth = int(environ.get("NC_MAX_MACRO_DEPTH", DEFAULT_MAX_MACRO_DEPTH))
        except ValueError:
            depth = DEFAULT_MAX_MACRO_DEPTH

        return cls(
            models_dir=models_dir,
            macro_model_path=macro_path,
            intent_threshold=threshold,
            output_log=_flag(environ.get("NEUROCHAIN_OUTPUT_LOG")),
            raw_log=_flag(environ.get("NEUROCHAIN_RAW_LOG")),
            log_dir=environ.get("NC_LOG_DIR") or "logs",
            max_macro_depth=max(depth, 1),
            openai_model=environ.get("NC_OPENAI_MODEL") or DEFAULT_OPENAI_MODEL,
        )

    def resolve_model_id(self, model_id: str) -> Optional[str]:
        """Map a short model id (``sst2``, ``macro``...) to its file path."""
        relative = MODEL_IDS.get(model_id.strip().lower())
        if relative is None:
            return None
        return f"{self.models_dir}/{relative}"
