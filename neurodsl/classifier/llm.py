"""
OpenAI-backed classifier.

Few-shot prompts restrict the answer to the label set of the requested
kind. The score is a softmax over the label candidates found in the first
answer token's top logprobs.
"""

import logging
import math
import os
import time
from typing import Dict, Optional, Tuple

import openai

from neurodsl.classifier.base import LABELS, ClassifierError, ModelKind, argmax_with_prob

logger = logging.getLogger(__name__)

# Short examples per kind; kinds without examples get the label list only.
FEW_SHOT: Dict[ModelKind, Tuple[Tuple[str, str], ...]] = {
    ModelKind.SST2: (
        ("This is wonderful!", "Positive"),
        ("I hate waiting in line.", "Negative"),
    ),
    ModelKind.TOXIC: (
        ("You are an idiot", "Toxic"),
        ("Have a nice day", "Not toxic"),
    ),
    ModelKind.INTENT: (
        ("Turn right", "RightCommand"),
        ("Stop now", "StopCommand"),
        ("What time is it?", "OtherCommand"),
    ),
    ModelKind.MACRO_INTENT: (
        ("Show Ping 3 times", "Loop"),
        ("If score is 10 say Congrats else say Nope", "Branch"),
        ("Set total to a + b and print it", "Arith"),
        ("Combine 'Hello' and 'World' into greeting", "Concat"),
        ("Set role to 'admin'", "RoleFlag"),
        ("Ask the assistant to summarise the text", "AIBridge"),
        ("Write a comment that says setup done", "DocPrint"),
        ("Set name to Alice", "SetVar"),
    ),
}


def get_api_key() -> Optional[str]:
    """Get OpenAI API key from environment or .env file."""
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        # Fallback: try common alternative names
        api_key = os.getenv("OPENAI_KEY") or os.getenv("OPENAI_API_TOKEN")
    return api_key


def create_few_shot_prompt(kind: ModelKind) -> str:
    """Create the system prompt listing the allowed labels and examples for ``kind``."""
    labels = LABELS[kind]
    lines = [
        "You are a text classifier.",
        f"Answer with exactly one label from this list: {', '.join(labels)}.",
        "Do not explain. Do not add punctuation.",
    ]
    examples = FEW_SHOT.get(kind, ())
    if examples:
        lines.append("")
        lines.append("EXAMPLES:")
        for text, label in examples:
            lines.append(f'TEXT: "{text}"')
            lines.append(f"LABEL: {label}")
    return "\n".join(lines)


def _match_label(answer: str, kind: ModelKind) -> Optional[str]:
    cleaned = answer.strip().strip('."\'').lower()
    for label in LABELS[kind]:
        if cleaned == label.lower():
            return label
    for label in LABELS[kind]:
        if cleaned and label.lower().startswith(cleaned):
            return label
    return None


class OpenAIClassifier:
    def __init__(
        self,
        kind: ModelKind,
        model: str = "gpt-4o-mini",
        api_key: Optional[str] = None,
        max_retries: int = 2,
        client=None,
    ):
        self.kind = kind
        self.model = model
        self.max_retries = max_retries
        self.system_prompt = create_few_shot_prompt(kind)
        self.client = client or openai.OpenAI(api_key=api_key or get_api_key())

    def predict(self, text: str) -> str:
        label, _ = self.predict_with_score(text)
        return label

    def predict_with_score(self, text: str) -> Tuple[str, float]:
        """
        Classify ``text`` with the chat completions API.

        Args:
            text: Text to classify

        Returns:
            (label, probability). Without logprobs in the response the
            answered label is returned with probability 1.0.

        Raises:
            ClassifierError: API failures after retries, or an answer outside
                the label set
        """
        choice = self._complete(text)
        answer = (choice.message.content or "").strip()

        scored = self._score_candidates(choice)
        if scored:
            names = list(scored)
            idx, prob = argmax_with_prob(scored[name] for name in names)
            return names[idx], prob

        label = _match_label(answer, self.kind)
        if label is None:
            raise ClassifierError(f"answer outside label set: {answer!r}")
        return label, 1.0

    def _complete(self, text: str):
        user_prompt = f'TEXT: "{text}"\nLABEL:'
        for attempt in range(self.max_retries + 1):
            try:
                response = self.client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": self.system_prompt},
                        {"role": "user", "content": user_prompt},
                    ],
                    max_tokens=8,
                    temperature=0.0,
                    logprobs=True,
                    top_logprobs=min(20, max(len(LABELS[self.kind]), 5)),
                    timeout=10.0,
                )
                return response.choices[0]

            except openai.RateLimitError as e:
                logger.warning("Rate limit exceeded (attempt %d/%d)", attempt + 1, self.max_retries + 1)
                if attempt < self.max_retries:
                    time.sleep(2 ** attempt)  # Exponential backoff
                else:
                    raise ClassifierError(f"rate limited: {e}") from e

            except openai.APIError as e:
                logger.warning("OpenAI API error (attempt %d/%d): %s", attempt + 1, self.max_retries + 1, e)
                if attempt < self.max_retries:
                    time.sleep(1)
                else:
                    raise ClassifierError(f"OpenAI API error: {e}") from e

        raise ClassifierError("no response")

    def _score_candidates(self, choice) -> Dict[str, float]:
        """Best first-token logprob for each label the top tokens could start."""
        logprobs = getattr(choice, "logprobs", None)
        content = getattr(logprobs, "content", None) if logprobs else None
        if not content:
            return {}

        scores: Dict[str, float] = {}
        for top in content[0].top_logprobs or []:
            piece = top.token.strip().lower()
            if not piece:
                continue
            for label in LABELS[self.kind]:
                if label.lower().startswith(piece):
                    scores[label] = max(scores.get(label, -math.inf), top.logprob)
        return scores
