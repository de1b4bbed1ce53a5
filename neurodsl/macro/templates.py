"""
Template builders: resolved label + instruction -> DSL source.

Each builder tries a few extraction patterns and falls back to a simpler
builder, ending at ``neuro_line``. Output always lexes: builders balance
their quotes and emit only ``neuro``, ``set``, ``if``/``elif``/``else`` and
``//`` lines.
"""

import re
from typing import Callable, Dict, List, Optional

from neurodsl.macro.labels import ASSIGNMENT_WORDS, COMMENT_PHRASES, MacroLabel
from neurodsl.macro.text import (
    IDENT,
    all_quoted,
    find_print_tail,
    first_quoted,
    is_identifier,
    loop_count,
    loop_message,
    mentions_print,
    neuro_line,
    normalize_condition,
    normalize_expr,
    parse_rhs,
    parse_var_expr,
    sanitize_text,
    strip_wrapping_quotes,
)
from neurodsl.runtime.values import parse_number

MIN_REPEAT = 1
MAX_REPEAT = 12

TMP_PRINT = "tmpPrint"

_PRINT_LIT_VAR_RE = re.compile(rf"^print\s+['\"](.+?)['\"]\s*\+\s*({IDENT})", re.I)
_PRINT_VAR_SPACE_VAR_RE = re.compile(rf"^print\s+({IDENT})\s*\+\s*['\"]\s*['\"]\s*\+\s*({IDENT})", re.I)

_SHOW_WHEN_RE = re.compile(rf"^(?:show|print|output|echo)\s+({IDENT})\s+when\s+({IDENT})\s+is\s+({IDENT})\s*$", re.I)

# Fixed rewrites for instructions the patterns below would misread.
CANNED = (
    ("subtract y from x, divide by 4, store in q", "set q = (x - y) / 4"),
    ("concatenate name and score with '+' and store in result", "set result = name + score"),
)

_OTHERWISE_RE = re.compile(r"\botherwise\b", re.I)
_ELSE_TAIL_RE = re.compile(r"^(?P<head>.+?)(?:,?\s*else\s*(?:say|print|output)?\s+(?P<otherwise>.+))?$", re.I | re.S)
_ELIF_SPLIT_RE = re.compile(r",?\s*elif\s+", re.I)
_BRANCH_PART_RE = re.compile(r"^(?P<cond>.+?)\s*(?:,|:)?\s*(?:say|print|output)\s+(?P<msg>.+?)\s*$", re.I | re.S)
_BRANCH_RE = re.compile(
    r"^if\s+(?P<c1>.+?)\s*(?:,|:)?\s*(?:say|print|output)\s+(?P<m1>.+?)"
    r"\s*(?:,?\s*elif\s+(?P<c2>.+?)\s*(?:say|print|output)\s+(?P<m2>.+?))?"
    r"\s*(?:,?\s*else\s*(?:say|print|output)?\s*(?P<e>.+))?$",
    re.I,
)
_BRANCH_SIMPLE_RE = re.compile(r"^if\s+(.+?)\s*(?:,|:)?\s+(.+?)\s*(?:else\s+(.+))?$", re.I)
_THREE_WAY_RE = re.compile(
    r"if\s+([^,]+?)\s+(?:say|print|output)\s+(.+?)[,;]\s*"
    r"elif\s+([^,]+?)\s+(?:say|print|output)\s+(.+?)[,;]\s*"
    r"else\s+(?:say|print|output)\s+(.+)$",
    re.I,
)

_FORMAT_COMMA_RE = re.compile(r"^format\s+(.+?)\s+and\s+(.+?)\s+with\s+a\s+comma\s*[.!?…]*\s*$", re.I)
_SAY_NUMBER_RE = re.compile(r"^say\s+the\s+number\s+(\d+)\b", re.I)
_VARIABLE_MENTIONS = (
    re.compile(rf"\bvalue\s+of\s+({IDENT})\b", re.I),
    re.compile(rf"\bthe\s+({IDENT})\s+value\b", re.I),
    re.compile(rf"^(?:display|show)\s+({IDENT})\s*$", re.I),
)
_COMMENT_BODY_RES = (
    re.compile(r"\bcomment\b\s+(?:that\s+says\s+|says\s+)?(.+)", re.I),
    re.compile(r"\bwrite a comment\b\s+(?:that\s+says\s+|says\s+)?(.+)", re.I),
)
_COMMENT_MARKER_RE = re.compile(r"(?:using\s+//|using\s+#).*$", re.I)
_PRINT_MSG_RE = re.compile(r"\b(?:and\s+)?(?:print|say|output|echo)\s+(.+)$", re.I)

_SECOND_ASSIGN_RE = re.compile(
    rf"\band\s+({IDENT})\s*=\s*(.+?)(?:,?\s*(?:then|and)\s+(?:print|output|echo|say)\b|$)",
    re.I,
)

_INTO_VAR_RE = re.compile(rf"(?:into|to)\s+({IDENT})", re.I)
_CONCAT_VARS_RE = re.compile(rf"^\s*concatenate\s+({IDENT})\s+(?:and\s+)?({IDENT}).*store\s+in\s+({IDENT})", re.I | re.S)

_CALCULATE_RE = re.compile(rf"calculate\s*\(+\s*([^)]+?)\s*\)+\s*\*\s*(\d+)\s*and\s*store\s*in\s+({IDENT})", re.I)
_SUBTRACT_RE = re.compile(rf"subtract\s+({IDENT})\s+from\s+({IDENT})", re.I)
_DIVIDE_BY_RE = re.compile(r"divide\s+by\s+(\d+)", re.I)
_STORE_IN_RE = re.compile(rf"store\s+in\s+({IDENT})", re.I)
_SUBTRACT_DIVIDE_RE = re.compile(r"subtract\s+(\w+)\s+from\s+(\w+).+divide\s+by\s+(\d+)", re.I)

_ROLE_VALUE_RE = re.compile(rf"\b(is|=)\s+({IDENT})", re.I)


def _is_comment_instruction(lower: str) -> bool:
    return any(phrase in lower for phrase in COMMENT_PHRASES)


def _has_assignment(lower: str) -> bool:
    return any(word in lower for word in ASSIGNMENT_WORDS)


def _print_lines(expr: str) -> List[str]:
    return [f"set {TMP_PRINT} = {expr}", f"neuro {TMP_PRINT}"]


# Fast paths


def build_print_concat_dsl(prompt: str) -> Optional[str]:
    """``print 'X' + var`` or ``print a + ' ' + b`` -> assign to tmpPrint, then print it."""
    p = strip_wrapping_quotes(prompt)

    match = _PRINT_LIT_VAR_RE.match(p)
    if match:
        lit = match.group(1).replace("'", '"')
        return "\n".join(_print_lines(f'"{lit}" + {match.group(2)}'))

    match = _PRINT_VAR_SPACE_VAR_RE.match(p)
    if match:
        return "\n".join(_print_lines(f'{match.group(1)} + " " + {match.group(2)}'))

    return None


def split_three_way(prompt: str) -> Optional[str]:
    """``if A say X, elif B say Y, else say Z`` anywhere in the text."""
    match = _THREE_WAY_RE.search(prompt.strip())
    if match is None:
        return None
    c1, m1, c2, m2, m3 = (group.strip() for group in match.groups())
    return "\n".join(
        [
            f"if {normalize_condition(c1)}:",
            f'    neuro "{sanitize_text(m1)}"',
            f"elif {normalize_condition(c2)}:",
            f'    neuro "{sanitize_text(m2)}"',
            "else:",
            f'    neuro "{sanitize_text(m3)}"',
        ]
    )


# Builders


def build_loop_dsl(prompt: str) -> str:
    prompt = strip_wrapping_quotes(prompt)
    msg = loop_message(prompt)
    count = min(max(loop_count(prompt) or 1, MIN_REPEAT), MAX_REPEAT)
    return "\n".join(f'neuro "{msg}"' for _ in range(count))


def _branch_lines(branches, else_msg: Optional[str]) -> str:
    lines = []
    for idx, (cond, msg) in enumerate(branches):
        lines.append(f"{'if' if idx == 0 else 'elif'} {cond}:")
        lines.append(f'    neuro "{msg}"')
    if else_msg is not None:
        lines.append("else:")
        lines.append(f'    neuro "{sanitize_text(else_msg)}"')
    return "\n".join(lines)


def build_branch_dsl(prompt: str) -> str:
    """
    Build an if/elif/else chain from an instruction such as
    ``If score equals 10 say Congrats else say Nope``.

    Conditions go through ``normalize_condition``; messages are sanitised
    and always quoted.
    """
    prompt = _OTHERWISE_RE.sub("else", strip_wrapping_quotes(prompt))

    match = _ELSE_TAIL_RE.match(prompt.strip())
    if match:
        head = (match.group("head") or "").strip()
        otherwise = match.group("otherwise")
        else_msg = sanitize_text(otherwise) if otherwise is not None else None

        if head.lower().lstrip().startswith("if "):
            head = re.sub(r"^if\s+", "", head, count=1, flags=re.I)
            branches = []
            ok = True
            for part in _ELIF_SPLIT_RE.split(head.strip()):
                part = part.strip().rstrip(",")
                if not part:
                    continue
                part_match = _BRANCH_PART_RE.match(part)
                if part_match is None:
                    ok = False
                    break
                branches.append(
                    (normalize_condition(part_match.group("cond")), sanitize_text(part_match.group("msg")))
                )
            if ok and branches:
                return _branch_lines(branches, else_msg)

    match = _BRANCH_RE.match(prompt)
    if match:
        branches = [(normalize_condition(match.group("c1")), sanitize_text(match.group("m1")))]
        if match.group("c2") is not None:
            branches.append((normalize_condition(match.group("c2")), sanitize_text(match.group("m2") or "")))
        return _branch_lines(branches, match.group("e"))

    match = _BRANCH_SIMPLE_RE.match(prompt)
    if match:
        branches = [(normalize_condition(match.group(1)), sanitize_text(match.group(2)))]
        return _branch_lines(branches, match.group(3))

    three_way = split_three_way(prompt)
    if three_way is not None:
        return three_way

    return neuro_line(prompt)


def _comment_line(prompt: str) -> Optional[str]:
    comment = first_quoted(prompt)
    if comment is None:
        for pattern in _COMMENT_BODY_RES:
            match = pattern.search(prompt)
            if match:
                comment = match.group(1)
                break
    if comment is None:
        return None

    msg = _COMMENT_MARKER_RE.sub("", strip_wrapping_quotes(comment), count=1).strip()
    if msg.startswith("//"):
        msg = msg[2:].strip()
    if msg.startswith("#"):
        msg = msg[1:].strip()
    return f"// {msg}" if msg else None


def build_doc_print_dsl(prompt: str) -> str:
    prompt = strip_wrapping_quotes(prompt)
    lower = prompt.lower()

    if lower.lstrip().startswith("format ") and "comma" in lower:
        match = _FORMAT_COMMA_RE.match(prompt)
        if match:
            a, b = sanitize_text(match.group(1)), sanitize_text(match.group(2))
            if a and b:
                return f'neuro "{a}, {b}"'

    match = _SAY_NUMBER_RE.match(prompt)
    if match:
        return f'neuro "{match.group(1)}"'

    for pattern in _VARIABLE_MENTIONS:
        match = pattern.search(prompt)
        if match:
            return f"neuro {match.group(1)}"

    lines = []
    comment = _comment_line(prompt) if _is_comment_instruction(lower) else None
    if comment is not None:
        lines.append(comment)
    elif "main starts here" in lower:
        lines.append("// main starts here")

    match = _PRINT_MSG_RE.search(prompt)
    msg = sanitize_text(match.group(1)) if match else ""
    if msg:
        lines.append(f"neuro {msg}" if is_identifier(msg) else neuro_line(msg))

    if lines:
        return "\n".join(lines)
    return neuro_line(prompt)


def build_setvar_dsl(prompt: str) -> str:
    prompt = strip_wrapping_quotes(prompt)
    lower = prompt.lower()
    if "main starts here using //" in lower:
        return 'neuro "// main starts here"'

    if _is_comment_instruction(lower) and not _has_assignment(lower):
        if "main starts here" in lower:
            return "// main starts here"
        return build_doc_print_dsl(prompt)

    parsed = parse_var_expr(prompt)
    if parsed is None:
        return neuro_line(prompt.strip())

    var, expr, do_print = parsed
    lines = [f"set {var} = {normalize_expr(expr)}"]

    # "set a = 'Hi' and b = 'Team', then print a + ' ' + b"
    match = _SECOND_ASSIGN_RE.search(prompt)
    if match:
        var2, expr2 = match.group(1), match.group(2).strip()
        if var2 != var and expr2:
            lines.append(f"set {var2} = {normalize_expr(expr2)}")

    if do_print:
        lines.extend(_print_lines(find_print_tail(prompt, var) or var))
    return "\n".join(lines).replace("'", '"')


def build_concat_dsl(prompt: str) -> str:
    prompt = strip_wrapping_quotes(prompt)
    quoted = all_quoted(prompt)
    match = _INTO_VAR_RE.search(prompt)
    var = match.group(1) if match else "result"
    wants_print = mentions_print(prompt)

    match = _CONCAT_VARS_RE.match(prompt)
    if match:
        a, b, target = match.groups()
        lines = [f"set {target} = {a} + {b}"]
        if wants_print:
            lines.append(f"neuro {target}")
        return "\n".join(lines)

    if len(quoted) >= 2:
        lines = [f'set {var} = "{quoted[0]}" + "{quoted[1]}"']
    elif quoted:
        lines = [f'set {var} = "{quoted[0]}"']
    else:
        return build_setvar_dsl(prompt)

    if wants_print:
        lines.append(f"neuro {var}")
    return "\n".join(lines)


def build_arith_dsl(prompt: str) -> str:
    prompt = strip_wrapping_quotes(prompt)

    match = _CALCULATE_RE.search(prompt)
    if match:
        expr, factor, var = match.groups()
        return f"set {var} = ({expr}) * {factor}"

    lower = prompt.lower()
    if "subtract" in lower and "store in" in lower:
        match = _SUBTRACT_RE.search(prompt)
        if match:
            subtrahend, minuend = match.groups()
            div_match = _DIVIDE_BY_RE.search(prompt)
            divisor = div_match.group(1) if div_match else "1"
            store_match = _STORE_IN_RE.search(prompt)
            target = store_match.group(1) if store_match else "result"
            if divisor == "1":
                return f"set {target} = {minuend} - {subtrahend}"
            return f"set {target} = ({minuend} - {subtrahend}) / {divisor}"

    parsed = parse_var_expr(prompt)
    if parsed is not None:
        var, expr, do_print = parsed
        lines = [f"set {var} = {normalize_expr(expr)}"]
        if do_print:
            lines.extend(_print_lines(find_print_tail(prompt, var) or var))
        return "\n".join(lines)

    match = _SUBTRACT_DIVIDE_RE.search(prompt)
    if match:
        subtrahend, minuend, divisor = match.groups()
        lines = [f"set result = ({minuend} - {subtrahend}) / {divisor}"]
        if mentions_print(prompt):
            lines.append("neuro result")
        return "\n".join(lines)

    return build_setvar_dsl(prompt)


def build_roleflag_dsl(prompt: str) -> str:
    prompt = strip_wrapping_quotes(prompt)
    var = "role" if "role" in prompt.lower() else "flag"

    value = first_quoted(prompt)
    if value is None:
        match = _ROLE_VALUE_RE.search(prompt)
        value = match.group(2) if match else "true"

    lines = [f"set {var} = {parse_rhs(value)}"]
    if mentions_print(prompt):
        lines.append(f"neuro {var}")
    return "\n".join(lines)


def build_ai_bridge_dsl(prompt: str) -> str:
    return neuro_line(prompt)


BUILDERS: Dict[str, Callable[[str], str]] = {
    MacroLabel.LOOP: build_loop_dsl,
    MacroLabel.BRANCH: build_branch_dsl,
    MacroLabel.ARITH: build_arith_dsl,
    MacroLabel.CONCAT: build_concat_dsl,
    MacroLabel.ROLE_FLAG: build_roleflag_dsl,
    MacroLabel.AI_BRIDGE: build_ai_bridge_dsl,
    MacroLabel.DOC_PRINT: build_doc_print_dsl,
    MacroLabel.SET_VAR: build_setvar_dsl,
}


def _show_when_dsl(prompt: str) -> Optional[str]:
    match = _SHOW_WHEN_RE.match(prompt.strip())
    if match is None:
        return None
    shown, cond_var, cond_raw = match.groups()
    if parse_number(cond_raw) is not None or cond_raw.lower() in ("true", "false", "none"):
        rhs = cond_raw
    else:
        rhs = f'"{cond_raw}"'
    return f"if {cond_var} == {rhs}:\n    neuro {shown}"


def build_macro_dsl(label: str, prompt: str) -> str:
    """
    Synthesize DSL for ``prompt`` under the resolved ``label``.

    Fast paths run first, in order: print-concatenation, ``if``-prefixed
    branches, ``show X when Y is Z``, canned rewrites and any ``if ... else``
    instruction. Otherwise the label's builder runs; unknown labels echo the
    instruction.
    """
    lower = prompt.lower()
    trimmed = prompt.lstrip()
    trimmed_is_print = trimmed.lower().startswith("print ")
    allow_print_concat = label not in (MacroLabel.SET_VAR, MacroLabel.ARITH)

    if allow_print_concat and "+" in prompt:
        if trimmed_is_print:
            dsl = build_print_concat_dsl(trimmed)
            if dsl is not None:
                return dsl
        else:
            idx = lower.rfind("print ")
            if idx >= 0:
                dsl = build_print_concat_dsl(prompt[idx:])
                if dsl is not None:
                    return dsl

    if lower.lstrip().startswith("if "):
        return build_branch_dsl(prompt)

    dsl = _show_when_dsl(prompt)
    if dsl is not None:
        return dsl

    for phrase, canned in CANNED:
        if phrase in lower:
            return canned

    if " else " in lower and "if " in lower:
        return build_branch_dsl(prompt)

    builder = BUILDERS.get(label)
    if builder is None:
        return neuro_line(prompt)
    return builder(prompt)
