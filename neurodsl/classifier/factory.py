"""Classifier loading for ``AI: "<path>"`` statements."""

import logging
from pathlib import Path

from neurodsl.classifier.base import Classifier, ModelKind, kind_from_path
from neurodsl.config import Config
from neurodsl.dsl.errors import ModelLoadError

logger = logging.getLogger(__name__)

OPENAI_PREFIX = "openai:"


def load_classifier(path: str, config: Config) -> Classifier:
    """
    Load the classifier named by ``path``.

    ``openai:<kind>`` (``openai:sst2``, ``openai:intent_macro``...) selects the
    OpenAI backend; anything else must be an existing model file or
    checkpoint directory for the local transformers backend.

    Raises:
        ModelLoadError: missing file, missing API key or backend failure
    """
    if path.startswith(OPENAI_PREFIX):
        return _load_openai(path, config)

    if not Path(path).exists():
        raise ModelLoadError(path, "Model file not found")

    # Heavy imports only when a local model is actually requested.
    try:
        from neurodsl.classifier.local import TransformersClassifier
    except ImportError as e:
        raise ModelLoadError(path, "local models need the 'models' extra (torch, transformers)") from e

    try:
        classifier = TransformersClassifier(path)
    except (OSError, ValueError) as e:
        raise ModelLoadError(path, str(e)) from e
    logger.info("Loaded %s classifier from %s", classifier.kind.value, path)
    return classifier


def _load_openai(path: str, config: Config) -> Classifier:
    from neurodsl.classifier.llm import OpenAIClassifier, get_api_key

    spec = path[len(OPENAI_PREFIX):].strip()
    kind = kind_from_path(spec) if spec else ModelKind.UNKNOWN
    api_key = get_api_key()
    if not api_key:
        raise ModelLoadError(path, "no OpenAI API key found (set OPENAI_API_KEY)")
    return OpenAIClassifier(kind, model=config.openai_model, api_key=api_key)
