"""
Local sequence-classification backend (Hugging Face transformers + torch).

The model path points at a file inside a checkpoint directory
(``models/distilbert-sst2/model.onnx``); tokenizer and weights are loaded
from that directory. Inputs are left-padded and truncated to 128 tokens.
"""

from pathlib import Path
from typing import Tuple

import torch
from transformers import AutoModelForSequenceClassification, AutoTokenizer

from neurodsl.classifier.base import ClassifierError, argmax_with_prob, kind_from_path, label_for_index

MAX_LENGTH = 128


class TransformersClassifier:
    def __init__(self, path: str, max_length: int = MAX_LENGTH):
        model_path = Path(path)
        model_dir = model_path if model_path.is_dir() else model_path.parent

        self.path = path
        self.kind = kind_from_path(path)
        self.max_length = max_length

        self.tokenizer = AutoTokenizer.from_pretrained(model_dir)
        self.tokenizer.padding_side = "left"
        if self.tokenizer.pad_token is None:
            self.tokenizer.pad_token = self.tokenizer.eos_token

        self.model = AutoModelForSequenceClassification.from_pretrained(model_dir)
        self.model.eval()

    def predict(self, text: str) -> str:
        label, _ = self.predict_with_score(text)
        return label

    def predict_with_score(self, text: str) -> Tuple[str, float]:
        """Return (label, softmax probability of that label)."""
        try:
            inputs = self.tokenizer(
                text,
                padding="max_length",
                truncation=True,
                max_length=self.max_length,
                return_tensors="pt",
            )
            with torch.no_grad():
                logits = self.model(**inputs).logits[0]
        except (RuntimeError, ValueError) as e:
            raise ClassifierError(f"inference failed for {self.path}: {e}") from e

        idx, prob = argmax_with_prob(logits.tolist())
        return label_for_index(self.kind, idx), prob
