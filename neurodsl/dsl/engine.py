"""
Host-facing entry point: source text in, output text out.

``analyze`` runs a whole script as one unit through
preprocess -> normalize_legacy -> tokenize -> parse -> run.
"""

import logging
import re
from typing import NamedTuple, Optional

from neurodsl.config import Config
from neurodsl.dsl.errors import DSLError
from neurodsl.dsl.lexer import tokenize
from neurodsl.dsl.parser import parse

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "✅ Execution succeeded."
RUNTIME_ERROR_MESSAGE = "❌ Runtime error: script nested too deeply."

_LEGACY_VERBS = ("say", "print")
_CONTROL_OPENERS = ("if ", "elif ", "else")
_COLON_VERB_RES = (
    (re.compile(re.escape(": say"), re.I), ": neuro"),
    (re.compile(re.escape(": print"), re.I), ": neuro"),
)


class Analysis(NamedTuple):
    ok: bool
    output: str


def preprocess(source: str) -> str:
    """Strip a BOM, normalise line endings to LF and expand tabs to 4 spaces."""
    if source.startswith("\ufeff"):
        source = source[1:]
    source = source.replace("\r\n", "\n").replace("\r", "\n")
    return source.replace("\t", "    ")


def _legacy_to_neuro(text: str) -> Optional[str]:
    """``say "x"``/``print "x"`` -> ``neuro "x"``; None when ``text`` has no such opener."""
    lower = text.lower()
    for verb in _LEGACY_VERBS:
        if lower.startswith(verb):
            rest = text[len(verb):]
            if not rest or rest[0] in " \"'(":
                return "neuro" + rest
    return None


def _find_colon(line: str) -> int:
    in_quote = False
    for i, ch in enumerate(line):
        if ch == '"':
            in_quote = not in_quote
        elif ch == ":" and not in_quote:
            return i
    return -1


def normalize_legacy(source: str) -> str:
    """
    Rewrite legacy syntax before tokenizing.

    - a line-start ``say``/``print`` becomes ``neuro``
    - ``if/elif/else ...: <command>`` on one line becomes a two-line block
    - remaining ``: say`` / ``: print`` become ``: neuro``
    """
    out = []
    for line in source.splitlines():
        trimmed = line.lstrip()
        indent = line[: len(line) - len(trimmed)]

        converted = _legacy_to_neuro(trimmed)
        converted = indent + converted if converted is not None else line

        colon = _find_colon(converted)
        if colon >= 0:
            head, tail = converted[: colon + 1], converted[colon + 1:].lstrip()
            if tail and head.lstrip().lower().startswith(_CONTROL_OPENERS):
                command = _legacy_to_neuro(tail) or tail
                converted = f"{head}\n{indent}    {command}"

        for pattern, replacement in _COLON_VERB_RES:
            converted = pattern.sub(replacement, converted)

        out.append(converted + "\n")
    return "".join(out)


def inject_model(source: str, model_id: str, config: Config) -> str:
    """Prepend ``AI: "<path>"`` for a known model id unless the script already selects one."""
    path = config.resolve_model_id(model_id)
    if path is None:
        return source
    if any(line.lstrip().lower().startswith("ai:") for line in source.splitlines()):
        return source
    logger.info("auto: injected AI model path %s", path)
    return f'AI: "{path}"\n{source}'


def analyze(source: str, interpreter) -> Analysis:
    """
    Run ``source`` as one unit on ``interpreter``.

    Args:
        source: Script text
        interpreter: A ``neurodsl.runtime.interpreter.Interpreter``; its
            environment carries over between calls

    Returns:
        Analysis(ok=True, joined output or the success message) on success,
        Analysis(ok=False, error message) on a lex, model-load or macro-depth error,
        or when nesting exhausts the recursion limit
    """
    normalized = normalize_legacy(preprocess(source))
    logger.debug("normalized script:\n%s", normalized)

    try:
        interpreter.run(parse(tokenize(normalized)))
    except DSLError as e:
        interpreter.clear_output()
        return Analysis(False, str(e))
    except RecursionError:
        logger.error("❌ Recursion limit hit while running script")
        interpreter.clear_output()
        return Analysis(False, RUNTIME_ERROR_MESSAGE)

    lines = interpreter.take_output()
    output = "\n".join(lines)
    return Analysis(True, output if output.strip() else SUCCESS_MESSAGE)
