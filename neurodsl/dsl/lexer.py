"""Lexer for neurodsl source.

Tokenizes normalized source text line by line:
- strips inline comments (``#`` and ``//``) outside double quotes
- tracks indentation as explicit ``INDENT``/``DEDENT`` tokens
- recognises keywords case-insensitively, including ``macro from AI:``

Per-line token shapes are declared in ``tokens.lark`` and scanned with
Lark's basic lexer; everything line-structural happens here.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, List

from lark import Lark, Token
from lark.exceptions import UnexpectedCharacters

from neurodsl.dsl.errors import LexError

logger = logging.getLogger(__name__)

_GRAMMAR_PATH = Path(__file__).parent / "tokens.lark"
_GRAMMAR = _GRAMMAR_PATH.read_text()

_LEXER = Lark(_GRAMMAR, start="start", parser="lalr", lexer="basic")

# Quoted strings ending in one of these stay unwrapped (model paths).
MODEL_SUFFIXES = (".onnx", ".safetensors", ".bin", ".pt")

KEYWORDS = {
    "ai": "AI",
    "neuro": "NEURO",
    "set": "SET",
    "from": "FROM",
    "macro": "MACRO",
    "if": "IF",
    "elif": "ELIF",
    "else": "ELSE",
    "and": "AND",
    "or": "OR",
}

NEWLINE = "NEWLINE"
INDENT = "INDENT"
DEDENT = "DEDENT"
COMMENT = "COMMENT"


def is_quoted(value: str) -> bool:
    """True when a STRING token value carries its quote markers."""
    return len(value) >= 2 and value.startswith('"') and value.endswith('"')


def strip_comment(raw_line: str) -> str:
    """Cut the line at the first ``#`` or ``//`` outside a quoted span."""
    in_quote = False
    for i, ch in enumerate(raw_line):
        if ch == '"':
            in_quote = not in_quote
        elif not in_quote and (ch == "#" or raw_line.startswith("//", i)):
            return raw_line[:i]
    return raw_line


def _structural(type_: str, line_no: int, value: str = "") -> Token:
    return Token(type_, value, None, line_no, 1)


def _lex_line(code: str, line_no: int, raw_line: str, offset: int) -> Iterator[Token]:
    try:
        for tok in _LEXER.lex(code):
            column = (tok.column or 1) + offset
            if tok.type == "NAME":
                type_ = KEYWORDS.get(tok.value.lower(), "STRING")
                yield Token(type_, tok.value, tok.start_pos, line_no, column)
            elif tok.type == "STRING":
                content = tok.value[1:-1]
                value = content if content.endswith(MODEL_SUFFIXES) else f'"{content}"'
                yield Token("STRING", value, tok.start_pos, line_no, column)
            else:
                yield Token(tok.type, tok.value, tok.start_pos, line_no, column)
    except UnexpectedCharacters as e:
        if e.char == '"':
            raise LexError("Missing quote", line_no, raw_line) from e
        raise LexError(f"Unexpected character '{e.char}'", line_no, raw_line) from e


def tokenize(source: str) -> List[Token]:
    """Turn normalized source into a flat token stream.

    Raises:
        LexError: on an unterminated string, an unexpected character or a
            dedent that matches no enclosing indentation level.
    """
    tokens: List[Token] = []
    indent_stack = [0]

    for line_no, raw_line in enumerate(source.splitlines(), start=1):
        code = strip_comment(raw_line)
        stripped = code.strip()

        if not stripped:
            comment = raw_line[len(code):].strip()
            if comment:
                tokens.append(_structural(COMMENT, line_no, comment))
                tokens.append(_structural(NEWLINE, line_no, "\n"))
            continue

        indent = len(raw_line) - len(raw_line.lstrip(" "))
        if indent > indent_stack[-1]:
            indent_stack.append(indent)
            tokens.append(_structural(INDENT, line_no))
        elif indent < indent_stack[-1]:
            while indent < indent_stack[-1]:
                indent_stack.pop()
                tokens.append(_structural(DEDENT, line_no))
            if indent != indent_stack[-1]:
                raise LexError("Unindent does not match any outer indentation level", line_no, raw_line)

        tokens.extend(_lex_line(stripped, line_no, raw_line, indent))
        tokens.append(_structural(NEWLINE, line_no, "\n"))

    last_line = tokens[-1].line if tokens else 0
    while len(indent_stack) > 1:
        indent_stack.pop()
        tokens.append(_structural(DEDENT, last_line))

    logger.debug("tokens: %s", [(t.type, t.value) for t in tokens])
    return tokens
