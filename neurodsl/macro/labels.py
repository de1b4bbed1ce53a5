"""
Macro intent labels, lexical cues and label override rules.

A classifier (or ``infer_label_from_prompt`` when the classifier is absent
or unsure) proposes a label; ``OVERRIDE_RULES`` then runs in order and may
replace it. Later rules see, and can replace, the result of earlier ones.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, NamedTuple, Optional

from neurodsl.macro.text import all_quoted, looks_like_loop, parse_var_expr


class MacroLabel:
    LOOP = "Loop"
    BRANCH = "Branch"
    ARITH = "Arith"
    CONCAT = "Concat"
    ROLE_FLAG = "RoleFlag"
    AI_BRIDGE = "AIBridge"
    DOC_PRINT = "DocPrint"
    SET_VAR = "SetVar"
    UNKNOWN = "Unknown"

    ALL = (LOOP, BRANCH, ARITH, CONCAT, ROLE_FLAG, AI_BRIDGE, DOC_PRINT, SET_VAR, UNKNOWN)


CONCAT_WORDS = ("combine", "join", "concat", "concatenate")
COMMENT_PHRASES = (
    "write a comment",
    "add comment",
    "insert comment",
    "comment that says",
    "comment says",
    "using //",
    "using #",
)
ASSIGNMENT_WORDS = ("set ", "create ", "store ")
PRINT_OPENERS = ("print ", "output ", "echo ", "say ", "display ", "format ")

EMBEDDED_SET_RE = re.compile(r"\b(?:then|and)\s+set\s+[A-Za-z_]\w*\s*(?:=|to)\s+", re.I)


def _has_math(expr: str) -> bool:
    e = expr.lower()
    return any(op in e for op in ("+", "-", "*", "/", "%", " plus ", " minus "))


@dataclass(frozen=True)
class PromptCues:
    """Lexical facts about one instruction, computed once."""

    prompt: str
    lower: str
    starts_if: bool
    loopish: bool
    has_concat_word: bool
    quoted_count: int
    is_comment: bool
    has_assignment: bool
    starts_assignment: bool
    has_embedded_set: bool
    starts_print_like: bool

    @classmethod
    def of(cls, prompt: str) -> "PromptCues":
        lower = prompt.lower()
        head = lower.lstrip()
        return cls(
            prompt=prompt,
            lower=lower,
            starts_if=head.startswith("if "),
            loopish=looks_like_loop(prompt),
            has_concat_word=any(word in lower for word in CONCAT_WORDS),
            quoted_count=len(all_quoted(prompt)),
            is_comment=any(phrase in lower for phrase in COMMENT_PHRASES),
            has_assignment=any(word in lower for word in ASSIGNMENT_WORDS),
            starts_assignment=head.startswith(ASSIGNMENT_WORDS),
            has_embedded_set=bool(EMBEDDED_SET_RE.search(prompt)),
            starts_print_like=head.startswith(PRINT_OPENERS),
        )

    @property
    def has_math(self) -> bool:
        """Arithmetic in the assigned expression, or anywhere when no assignment parses."""
        parsed = parse_var_expr(self.prompt)
        if parsed is not None:
            return _has_math(parsed[1])
        p = self.lower
        return (
            any(op in p for op in ("+", "-", "*", "%", " plus ", " minus "))
            or ("/" in p and "//" not in p)
        )


def infer_label_from_prompt(prompt: str) -> str:
    """Label from lexical cues alone; used when the classifier score is below threshold."""
    cues = PromptCues.of(prompt)
    if cues.loopish:
        return MacroLabel.LOOP
    if cues.starts_if:
        return MacroLabel.BRANCH
    if cues.has_concat_word and cues.quoted_count >= 2:
        return MacroLabel.CONCAT
    if cues.is_comment:
        return MacroLabel.DOC_PRINT
    if cues.has_assignment:
        if any(op in cues.lower for op in ("+", "-", "*", "%", "/")):
            return MacroLabel.ARITH
        return MacroLabel.SET_VAR
    if cues.starts_print_like:
        return MacroLabel.DOC_PRINT
    return MacroLabel.UNKNOWN


class OverrideRule(NamedTuple):
    """Replace ``label`` with ``relabel(label, cues)`` when ``applies(label, cues)``."""

    name: str
    applies: Callable[[str, PromptCues], bool]
    relabel: Callable[[str, PromptCues], str]


def _loop_guard(label: str, cues: PromptCues) -> str:
    if cues.starts_if:
        return MacroLabel.BRANCH
    return infer_label_from_prompt(cues.prompt)


OVERRIDE_RULES: List[OverrideRule] = [
    OverrideRule(
        "loop_guard",
        lambda label, cues: label == MacroLabel.LOOP and (cues.starts_if or not cues.loopish),
        _loop_guard,
    ),
    OverrideRule(
        "assignment",
        lambda label, cues: cues.starts_assignment or cues.has_embedded_set,
        lambda label, cues: MacroLabel.ARITH if cues.has_math else MacroLabel.SET_VAR,
    ),
    OverrideRule(
        "concat",
        lambda label, cues: cues.has_concat_word and cues.quoted_count >= 2,
        lambda label, cues: MacroLabel.CONCAT,
    ),
    OverrideRule(
        "comment",
        lambda label, cues: cues.is_comment and not cues.has_assignment,
        lambda label, cues: MacroLabel.DOC_PRINT,
    ),
    OverrideRule(
        "print_opener",
        lambda label, cues: cues.starts_print_like and not cues.has_assignment and not cues.loopish,
        lambda label, cues: MacroLabel.DOC_PRINT,
    ),
]


def apply_overrides(label: str, prompt: str, rules: Optional[List[OverrideRule]] = None) -> str:
    cues = PromptCues.of(prompt)
    for rule in OVERRIDE_RULES if rules is None else rules:
        if rule.applies(label, cues):
            label = rule.relabel(label, cues)
    return label
