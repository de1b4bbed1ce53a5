from neurodsl.classifier.base import (
    LABELS,
    Classifier,
    ClassifierError,
    ModelKind,
    argmax_with_prob,
    kind_from_path,
)
from neurodsl.classifier.factory import load_classifier

__all__ = [
    "LABELS",
    "Classifier",
    "ClassifierError",
    "ModelKind",
    "argmax_with_prob",
    "kind_from_path",
    "load_classifier",
]
