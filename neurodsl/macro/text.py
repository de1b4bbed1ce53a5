"""
Text helpers for macro synthesis.

Everything here is a pure ``str -> str`` (or ``str -> Optional[...]``)
function over the natural-language instruction. The template builders in
``templates.py`` are composed from these.
"""

import re
from typing import List, Optional, Tuple

from neurodsl.runtime.values import parse_number

IDENT = r"[A-Za-z_]\w*"

QUOTED_RE = re.compile(r"'([^']+)'|\"([^\"]+)\"")

PRINT_SEPARATORS = (
    " and print",
    " then print",
    " and output",
    " then output",
    " and echo",
    " then echo",
)

PRINT_HINTS = (" print", " output", " show", " echo")

ARITH_OPERATORS = ("+", "-", "*", "/", "%")

WORD_NUMBERS = {
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
    "eleven": 11,
    "twelve": 12,
}

_WORD_NUMBER_ALT = "|".join(WORD_NUMBERS)

_COUNT_DIGITS_RE = re.compile(r"\b(\d+)\s*(?:times?|time)\b", re.I)
_COUNT_X_RE = re.compile(r"\b(\d+)\s*x\b", re.I)
_COUNT_ADVERB_RE = re.compile(r"\b(once|twice|thrice)\b", re.I)
_COUNT_WORD_RE = re.compile(rf"\b({_WORD_NUMBER_ALT})\s+times?\b", re.I)
_COUNT_ANY_RE = re.compile(
    rf"\b(?:\d+\s*(?:times?|time)\b|\d+\s*x\b|\d+x\b|once\b|twice\b|thrice\b|({_WORD_NUMBER_ALT})\s+times?\b)",
    re.I,
)
_ADVERB_COUNTS = {"once": 1, "twice": 2, "thrice": 3}

_RUN_TIMES_RE = re.compile(r"^run\s+\d+\s+times:\s*(.+)$", re.I)
_RUN_VERB_RE = re.compile(r"^(?:reveal|present|show|say|print|output|echo|display|announce)\s+", re.I)
_LOOP_HEAD_STRIPS = (
    re.compile(r"^(?:please|kindly)\s+", re.I),
    re.compile(r"^loop\s*:?\s*", re.I),
    re.compile(r"^(?:repeat|run)\s+", re.I),
    re.compile(r"^(?:show|say|print|output|echo|display|announce|present|reveal)\s+", re.I),
    re.compile(r"^the\s+phrase\s+", re.I),
)

_CONDITION_WORDS = (
    ("is greater than or equal to", ">="),
    ("is less than or equal to", "<="),
    ("greater than or equal to", ">="),
    ("less than or equal to", "<="),
    ("is greater than", ">"),
    ("is less than", "<"),
    ("greater than", ">"),
    ("less than", "<"),
    ("is not equal to", "!="),
    ("not equal to", "!="),
    ("is not", "!="),
    ("is equal to", "=="),
    ("equals", "=="),
    ("equal to", "=="),
    ("is", "=="),
)
_CONDITION_RHS_RE = re.compile(rf"(==|!=|>=|<=|>|<)\s*({IDENT})")

_CUT_SECOND_ASSIGN_RE = re.compile(rf"\s+and\s+{IDENT}\s*=", re.I)
_POWER_RE = re.compile(r"^(?P<base>.+?)\s*\*\*\s*(?P<exp>\d+)\s*$", re.I)

_SET_TO_RE = re.compile(rf"set\s+({IDENT})\s+(?:to|=)\s+(.+)", re.I)
_CREATE_VARIABLE_RE = re.compile(rf"create\s+variable\s+({IDENT})\s*(?:=)?\s*(.+)", re.I)
_STORE_IN_RE = re.compile(rf"store\s+(.+?)\s+in\s+({IDENT})", re.I)
_ASSIGN_ANY_RE = re.compile(rf"(?:set|create|store)\s+({IDENT})\s*(?:=|to)?\s*(.+)", re.I)

_TAIL_LIT_VAR_RE = re.compile(rf"^['\"](.+?)['\"]\s*\+\s*({IDENT})", re.I)


# Quotes and sanitising


def strip_wrapping_quotes(s: str) -> str:
    """Peel matching outer ``'...'``/``"..."`` pairs, trimming after each."""
    t = s.strip()
    while (t.startswith('"') and t.endswith('"')) or (t.startswith("'") and t.endswith("'")):
        if len(t) <= 1:
            break
        t = t[1:-1].strip()
    return t


def sanitize_text(s: str) -> str:
    return strip_wrapping_quotes(s).strip("\"' .,!?…").strip()


def first_quoted(prompt: str) -> Optional[str]:
    match = QUOTED_RE.search(prompt)
    if match is None:
        return None
    return match.group(1) or match.group(2)


def all_quoted(prompt: str) -> List[str]:
    return [single or double for single, double in QUOTED_RE.findall(prompt)]


def mentions_print(prompt: str) -> bool:
    p = prompt.lower()
    return any(word in p for word in ("print", "show", "output", "echo", "say"))


def is_identifier(s: str) -> bool:
    return bool(s) and all(ch.isalnum() or ch == "_" for ch in s)


def neuro_line(msg: str) -> str:
    """Last-resort output statement; quotes are removed so the line always lexes."""
    safe = strip_wrapping_quotes(msg).replace('"', "").replace("'", "")
    return f'neuro "{safe.strip()}"'


# Loops


def loop_count(prompt: str) -> Optional[int]:
    """Requested repeat count: ``7 times``, ``4x``, ``twice``, ``ten times``."""
    p = strip_wrapping_quotes(prompt)

    match = _COUNT_DIGITS_RE.search(p)
    if match:
        return int(match.group(1))

    match = _COUNT_X_RE.search(p)
    if match:
        return int(match.group(1))

    match = _COUNT_ADVERB_RE.search(p)
    if match:
        return _ADVERB_COUNTS[match.group(1).lower()]

    match = _COUNT_WORD_RE.search(p)
    if match:
        return WORD_NUMBERS[match.group(1).lower()]

    return None


def looks_like_loop(prompt: str) -> bool:
    p = prompt.lower()
    if any(cue in p for cue in (" times", " time", " once", " twice", " thrice")):
        return True
    if _COUNT_X_RE.search(prompt):
        return True
    return loop_count(prompt) is not None


def loop_message(prompt: str) -> str:
    """The text a loop should repeat."""
    p = strip_wrapping_quotes(prompt)

    quoted = first_quoted(p)
    if quoted is not None:
        msg = sanitize_text(quoted)
        if msg:
            return msg

    match = _RUN_TIMES_RE.match(p.strip())
    if match:
        msg = sanitize_text(_RUN_VERB_RE.sub("", match.group(1).strip(), count=1))
        if msg:
            return msg

    match = _COUNT_ANY_RE.search(p)
    head = p[: match.start()].strip() if match else p.strip()
    for pattern in _LOOP_HEAD_STRIPS:
        head = pattern.sub("", head, count=1)

    head = sanitize_text(head.strip().rstrip(":,").strip())
    return head or sanitize_text(p)


# Conditions and right-hand sides


def normalize_condition(raw: str) -> str:
    """``score is greater than 10`` -> ``score > 10``; bare-word right sides get quoted."""
    c = raw.strip()
    for words, op in _CONDITION_WORDS:
        c = re.sub(rf"\b{re.escape(words)}\b", op, c, flags=re.I)

    def quote_rhs(match: "re.Match[str]") -> str:
        op, rhs = match.group(1), match.group(2)
        if parse_number(rhs) is not None or rhs.lower() in ("true", "false", "none"):
            return f"{op} {rhs}"
        return f'{op} "{rhs}"'

    c = _CONDITION_RHS_RE.sub(quote_rhs, c)
    return c.rstrip(",").strip()


def parse_rhs(raw: str) -> str:
    """Render a single value as DSL: numbers and identifiers bare, text quoted."""
    had_quote = "'" in raw or '"' in raw
    val = strip_wrapping_quotes(sanitize_text(raw)).replace("'", "")
    if not val:
        return '""'
    if parse_number(val) is not None:
        return val
    if val.lower() in ("true", "false", "none"):
        return val
    if is_identifier(val):
        return f'"{val}"' if had_quote else val
    return f'"{val}"'


def clean_expr(expr: str) -> str:
    e = expr.strip().rstrip(",")
    match = _CUT_SECOND_ASSIGN_RE.search(e)
    if match:
        e = e[: match.start()].strip()
    idx = e.lower().find(", then")
    if idx >= 0:
        e = e[:idx].strip()
    return e.replace("'", '"')


def normalize_expr(expr: str) -> str:
    """Turn a natural-language right-hand side into a DSL expression."""
    e = clean_expr(expr)

    if "**" in e:
        match = _POWER_RE.match(e)
        if match:
            base = match.group("base").strip()
            exp = min(int(match.group("exp")), 8)
            if exp == 0:
                return "1"
            if exp == 1:
                return base
            return " * ".join([f"({base})"] * exp)

    if e.count('"') > 1:
        return '"{}"'.format(e.replace('"', "").strip())

    if any(op in e for op in ARITH_OPERATORS):
        return e
    return parse_rhs(e)


def _cut_print_separator(expr: str) -> Tuple[str, bool]:
    lower = expr.lower()
    for sep in PRINT_SEPARATORS:
        idx = lower.find(sep)
        if idx >= 0:
            return expr[:idx].strip(), True
    return expr, False


def parse_var_expr(prompt: str) -> Optional[Tuple[str, str, bool]]:
    """
    Extract ``(variable, expression, wants_print)`` from an assignment instruction.

    Recognised shapes, tried in order:
        set X to Y / set X = Y
        create variable X = Y
        store Y in X          (always prints)
        set|create|store X [=|to] Y

    Returns:
        None when the instruction holds no assignment
    """
    p = prompt.strip()
    lp = p.lower()
    hinted = any(hint in lp for hint in PRINT_HINTS)

    for pattern in (_SET_TO_RE, _CREATE_VARIABLE_RE):
        match = pattern.search(p)
        if match:
            expr, do_print = _cut_print_separator(match.group(2).strip())
            expr = clean_expr(expr) or "0"
            return match.group(1), expr, do_print or hinted

    match = _STORE_IN_RE.search(p)
    if match:
        expr = clean_expr(strip_wrapping_quotes(match.group(1).strip()))
        return match.group(2), expr, True

    match = _ASSIGN_ANY_RE.search(p)
    if match:
        expr, do_print = _cut_print_separator(match.group(2).strip())
        expr = clean_expr(expr or "0")
        idx = expr.lower().find(" into ")
        if idx >= 0 and expr[idx + len(" into "):].strip():
            expr = expr[:idx].strip()
        return match.group(1), expr, do_print or hinted

    return None


def find_print_tail(prompt: str, var: str) -> Optional[str]:
    """Expression for the trailing ``print ...`` of an assignment instruction."""
    low = prompt.lower()
    start = None
    for key in ("print ", "echo ", "output "):
        idx = low.rfind(key)
        if idx >= 0:
            start = idx + len(key)
            break
    if start is None:
        return None
    raw = prompt[start:].strip()

    if "+" in raw:
        match = _TAIL_LIT_VAR_RE.match(raw)
        if match:
            lit, name = match.group(1), match.group(2)
            spacer = "" if lit.endswith(" ") else " "
            return f'"{lit}" + "{spacer}" + {name}'
        return raw.replace("'", '"')

    if raw.lower() == "it":
        return f'"{var}=" + {var}'

    if var in raw:
        pre, post = raw.split(var, 1)
        pre = pre.rstrip(",")
        segments = []
        if pre.strip():
            head = strip_wrapping_quotes(pre.strip())
            if not head.endswith(" "):
                head += " "
            segments.append(f'"{head}"')
        segments.append(var)
        if post.strip():
            tail = strip_wrapping_quotes(post.strip())
            if not tail.startswith(" "):
                tail = " " + tail
            segments.append(f'"{tail}"')
        return " + ".join(segments)

    return normalize_expr(raw)
