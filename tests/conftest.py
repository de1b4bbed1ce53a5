#!/usr/bin/env python3
"""
Shared fixtures: an isolated config and in-memory classifiers.
"""

import sys
from pathlib import Path
from typing import Dict, Optional, Tuple

import pytest

# Add parent directory for imports
sys.path.append(str(Path(__file__).parent.parent))

from neurodsl.classifier.base import ClassifierError, ModelKind
from neurodsl.config import Config
from neurodsl.dsl.errors import ModelLoadError
from neurodsl.runtime.interpreter import Interpreter


class FakeClassifier:
    """Looks labels up in a dict; unknown texts raise ClassifierError unless a default is set."""

    def __init__(self, kind: ModelKind, mapping: Dict[str, str], score: float = 0.9, default: Optional[str] = None):
        self.kind = kind
        self.mapping = mapping
        self.score = score
        self.default = default
        self.calls = []

    def predict(self, text: str) -> str:
        label, _ = self.predict_with_score(text)
        return label

    def predict_with_score(self, text: str) -> Tuple[str, float]:
        self.calls.append(text)
        if text in self.mapping:
            return self.mapping[text], self.score
        if self.default is not None:
            return self.default, self.score
        raise ClassifierError(f"no label for {text!r}")


class FakeFactory:
    """Classifier factory serving registered paths; anything else is a missing model."""

    def __init__(self, classifiers: Optional[Dict[str, FakeClassifier]] = None):
        self.classifiers = dict(classifiers or {})
        self.requests = []

    def __call__(self, path: str, config: Config):
        self.requests.append(path)
        if path not in self.classifiers:
            raise ModelLoadError(path, "Model file not found")
        return self.classifiers[path]


SENTIMENT_PATH = "models/distilbert-sst2/model.onnx"


@pytest.fixture
def config(tmp_path):
    """Config that points models and logs at a temporary directory."""
    return Config(models_dir=str(tmp_path / "models"), log_dir=str(tmp_path / "logs"))


@pytest.fixture
def sentiment():
    return FakeClassifier(
        ModelKind.SST2,
        {
            "I love this": "Positive",
            "This is great": "Positive",
            "I hate waiting": "Negative",
        },
    )


@pytest.fixture
def factory(sentiment):
    return FakeFactory({SENTIMENT_PATH: sentiment})


@pytest.fixture
def interpreter(config, factory):
    return Interpreter(config, classifier_factory=factory)
