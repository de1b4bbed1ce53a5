"""
Classifier interface shared by the local and OpenAI backends.

A classifier maps a text to one label from a fixed label set. Which label
set applies is the classifier's ``kind``, guessed from the model path.
"""

import math
from enum import Enum
from typing import Dict, Iterable, Protocol, Tuple, runtime_checkable


class ClassifierError(Exception):
    """Inference failed. Always recoverable: callers fall back to rules or literals."""


class ModelKind(str, Enum):
    SST2 = "sst2"
    TOXIC = "toxic"
    FACT_CHECK = "factcheck"
    INTENT = "intent"
    MACRO_INTENT = "intent_macro"
    UNKNOWN = "unknown"


LABELS: Dict[ModelKind, Tuple[str, ...]] = {
    ModelKind.SST2: ("Negative", "Positive"),
    ModelKind.TOXIC: ("Toxic", "Not toxic"),
    ModelKind.FACT_CHECK: ("entailment", "neutral", "contradiction"),
    ModelKind.INTENT: (
        "RightCommand",
        "LeftCommand",
        "UpCommand",
        "DownCommand",
        "GoCommand",
        "StopCommand",
        "OtherCommand",
    ),
    ModelKind.MACRO_INTENT: (
        "Loop",
        "Branch",
        "Arith",
        "Concat",
        "RoleFlag",
        "AIBridge",
        "DocPrint",
        "SetVar",
        "Unknown",
    ),
    ModelKind.UNKNOWN: ("unknown",),
}

# Checked in order; "intent_macro" must win over "intent".
_PATH_MARKERS = (
    ("intent_macro", ModelKind.MACRO_INTENT),
    ("sst2", ModelKind.SST2),
    ("toxic", ModelKind.TOXIC),
    ("factcheck", ModelKind.FACT_CHECK),
    ("intent", ModelKind.INTENT),
)


def kind_from_path(path: str) -> ModelKind:
    for marker, kind in _PATH_MARKERS:
        if marker in path:
            return kind
    return ModelKind.UNKNOWN


def label_for_index(kind: ModelKind, index: int) -> str:
    labels = LABELS[kind]
    return labels[index] if 0 <= index < len(labels) else "unknown"


def argmax_with_prob(logits: Iterable[float]) -> Tuple[int, float]:
    """
    Index of the largest logit and its softmax probability.

    The probability is ``1 / sum(exp(l - max))``, which equals the softmax
    value of the arg-max class without materialising the whole distribution.

    Returns:
        (index, probability); (0, 0.0) for an empty input
    """
    values = list(logits)
    if not values:
        return 0, 0.0
    best_idx = max(range(len(values)), key=lambda i: (values[i], -i))
    best = values[best_idx]
    total = sum(math.exp(v - best) for v in values)
    return best_idx, (1.0 / total if total > 0 else 0.0)


@runtime_checkable
class Classifier(Protocol):
    kind: ModelKind

    def predict(self, text: str) -> str:
        ...

    def predict_with_score(self, text: str) -> Tuple[str, float]:
        ...
