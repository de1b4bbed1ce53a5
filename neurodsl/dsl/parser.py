"""Recursive-descent parser for neurodsl.

Converts the lexer's token stream into a list of statements. Supports model
selection (``AI: "path"``), output (``neuro``), variables (``set``),
classifier-backed assignment (``set x from AI: "..."``), control flow
(``if``/``elif``/``else`` over indented blocks) and macro calls
(``macro from AI: ...``).

The parser never raises. A token that does not start a recognised statement
is dropped, so a garbled line costs that line and not the whole run.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from lark import Token

from neurodsl.dsl import ast
from neurodsl.dsl.ast import BinaryOperator
from neurodsl.dsl.lexer import COMMENT, DEDENT, INDENT, NEWLINE, is_quoted

ADDITIVE_OPS: Dict[str, BinaryOperator] = {
    "PLUS": BinaryOperator.ADD,
    "MINUS": BinaryOperator.SUB,
    "GT": BinaryOperator.GT,
    "LT": BinaryOperator.LT,
    "GE": BinaryOperator.GE,
    "LE": BinaryOperator.LE,
    "EQ": BinaryOperator.EQ,
    "NE": BinaryOperator.NE,
}

MULTIPLICATIVE_OPS: Dict[str, BinaryOperator] = {
    "STAR": BinaryOperator.MUL,
    "SLASH": BinaryOperator.DIV,
    "PERCENT": BinaryOperator.MOD,
}

RELATIONAL_NODES: Dict[str, Callable[[str, str], ast.BoolExpr]] = {
    "GT": ast.Greater,
    "GE": ast.GreaterEqual,
    "LT": ast.Less,
    "LE": ast.LessEqual,
}


class TokenStream:
    """Cursor over a token list with single-token lookahead."""

    def __init__(self, tokens: Sequence[Token]):
        self.tokens = list(tokens)
        self.pos = 0

    def peek(self) -> Optional[Token]:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def peek_type(self) -> Optional[str]:
        tok = self.peek()
        return tok.type if tok is not None else None

    def next(self) -> Optional[Token]:
        tok = self.peek()
        if tok is not None:
            self.pos += 1
        return tok

    def expect(self, type_: str) -> bool:
        """Consume the next token only if it has the given type."""
        if self.peek_type() != type_:
            return False
        self.pos += 1
        return True

    def skip_trivia(self) -> None:
        """Skip newlines and comment-only lines."""
        while self.peek_type() in (NEWLINE, COMMENT):
            self.pos += 1


def parse(tokens: Iterable[Token]) -> List[ast.Statement]:
    stream = TokenStream(list(tokens))
    statements: List[ast.Statement] = []
    while stream.peek() is not None:
        start = stream.pos
        node = parse_statement(stream)
        if node is None:
            if stream.pos == start:
                stream.next()  # drop unknown token
        else:
            statements.append(node)
    return statements


# Statements


def parse_statement(stream: TokenStream) -> Optional[ast.Statement]:
    kind = stream.peek_type()

    if kind == "AI":
        stream.next()
        if not stream.expect("COLON"):
            return None
        path = stream.next()
        if path is not None and path.type == "STRING":
            return ast.ModelSelect(path.value.strip('"'))
        return None

    if kind == "NEURO":
        stream.next()
        arg = stream.next()
        if arg is not None and arg.type == "STRING":
            return ast.Output(arg.value)
        return None

    if kind == "SET":
        return _parse_set(stream)

    if kind == "MACRO":
        return _parse_macro(stream)

    if kind == "IF":
        return _parse_conditional(stream)

    if kind == COMMENT:
        stream.next()
        return None

    return None


def _parse_set(stream: TokenStream) -> Optional[ast.Statement]:
    stream.next()
    name = stream.next()
    if name is None or name.type != "STRING":
        return None

    follow = stream.peek()
    if follow is None:
        return None
    if follow.type == "ASSIGN" or (follow.type == "STRING" and follow.value.lower() == "to"):
        stream.next()
        expr = parse_expr(stream)
        if expr is None:
            return None
        return ast.Assign(name.value, expr)
    if follow.type == "FROM":
        stream.next()
        if not stream.expect("AI") or not stream.expect("COLON"):
            return None
        prompt = stream.next()
        if prompt is not None and prompt.type == "STRING":
            return ast.AssignFromClassifier(name.value, prompt.value)
    return None


def _parse_macro(stream: TokenStream) -> Optional[ast.MacroInvoke]:
    stream.next()
    if not (stream.expect("FROM") and stream.expect("AI") and stream.expect("COLON")):
        return None

    # The instruction is the rest of the line, rejoined with single spaces.
    parts: List[str] = []
    while stream.peek_type() not in (NEWLINE, DEDENT, None):
        parts.append(str(stream.next().value))
    if not parts:
        return None
    return ast.MacroInvoke(" ".join(parts))


def _parse_branch_body(stream: TokenStream) -> Optional[Tuple[ast.Statement, ...]]:
    if not stream.expect("COLON"):
        return None
    stream.skip_trivia()
    if not stream.expect(INDENT):
        return None
    return tuple(parse_block(stream))


def _parse_conditional(stream: TokenStream) -> Optional[ast.Conditional]:
    stream.next()
    condition = parse_bool_expr(stream)
    if condition is None:
        return None
    body = _parse_branch_body(stream)
    if body is None:
        return None

    elifs = []
    while stream.peek_type() == "ELIF":
        stream.next()
        elif_condition = parse_bool_expr(stream)
        if elif_condition is None:
            return None
        elif_body = _parse_branch_body(stream)
        if elif_body is None:
            return None
        elifs.append((elif_condition, elif_body))

    else_body = None
    if stream.peek_type() == "ELSE":
        stream.next()
        else_body = _parse_branch_body(stream)
        if else_body is None:
            return None

    return ast.Conditional(condition, body, tuple(elifs), else_body)


def parse_block(stream: TokenStream) -> List[ast.Statement]:
    """Parse statements up to and including the closing DEDENT."""
    block: List[ast.Statement] = []
    while True:
        kind = stream.peek_type()
        if kind is None:
            break
        if kind == DEDENT:
            stream.next()
            break
        if kind == NEWLINE:
            stream.next()
            continue
        start = stream.pos
        node = parse_statement(stream)
        if node is None:
            if stream.pos == start:
                stream.next()
        else:
            block.append(node)
    return block


# Boolean expressions


def parse_bool_expr(stream: TokenStream) -> Optional[ast.BoolExpr]:
    """Flat left-associative chain; ``and`` and ``or`` share one precedence level."""
    expr = parse_bool_atom(stream)
    if expr is None:
        return None
    while stream.peek_type() in ("AND", "OR"):
        combinator = ast.And if stream.next().type == "AND" else ast.Or
        rhs = parse_bool_atom(stream)
        if rhs is None:
            return None
        expr = combinator(expr, rhs)
    return expr


def _take_value(stream: TokenStream) -> Optional[str]:
    tok = stream.next()
    if tok is None:
        return None
    if tok.type == "MINUS":
        number = stream.next()
        if number is not None and number.type == "NUMBER":
            return f"-{number.value}"
        return None
    if tok.type in ("STRING", "NUMBER"):
        return tok.value
    return None


def parse_bool_atom(stream: TokenStream) -> Optional[ast.BoolExpr]:
    left = _take_value(stream)
    if left is None:
        return None
    op = stream.next()
    if op is None:
        return None
    right = _take_value(stream)
    if right is None:
        return None

    if op.type in ("EQ", "NE"):
        equal = op.type == "EQ"
        left_lit, right_lit = is_quoted(left), is_quoted(right)
        if not left_lit and not right_lit:
            return ast.VarEqualsVar(left, right) if equal else ast.VarNotEqualsVar(left, right)
        if not left_lit:
            name, literal = left, right.strip('"')
        elif not right_lit:
            name, literal = right, left.strip('"')
        else:
            # Two literals: the left one is a prompt for the active classifier.
            prompt, expected = left.strip('"'), right.strip('"')
            if equal:
                return ast.ClassifierEquals(prompt, expected)
            return ast.ClassifierNotEquals(prompt, expected)
        return ast.VarEquals(name, literal) if equal else ast.VarNotEquals(name, literal)

    node = RELATIONAL_NODES.get(op.type)
    if node is None:
        return None
    return node(_strip_if_literal(left), _strip_if_literal(right))


def _strip_if_literal(value: str) -> str:
    return value.strip('"') if is_quoted(value) else value


# Arithmetic expressions
#
#   expr   := term   (("+"|"-"|"=="|"!="|">"|"<"|">="|"<=") term)*
#   term   := factor (("*"|"/"|"%") factor)*
#   factor := NUMBER | STRING | IDENT | "(" expr ")" | "-" factor


def parse_expr(stream: TokenStream) -> Optional[ast.Expr]:
    lhs = parse_term(stream)
    if lhs is None:
        return None
    while stream.peek_type() in ADDITIVE_OPS:
        op = ADDITIVE_OPS[stream.next().type]
        rhs = parse_term(stream)
        if rhs is None:
            return None
        lhs = ast.BinaryOp(lhs, op, rhs)
    return lhs


def parse_term(stream: TokenStream) -> Optional[ast.Expr]:
    lhs = parse_factor(stream)
    if lhs is None:
        return None
    while stream.peek_type() in MULTIPLICATIVE_OPS:
        op = MULTIPLICATIVE_OPS[stream.next().type]
        rhs = parse_factor(stream)
        if rhs is None:
            return None
        lhs = ast.BinaryOp(lhs, op, rhs)
    return lhs


def parse_factor(stream: TokenStream) -> Optional[ast.Expr]:
    tok = stream.next()
    if tok is None:
        return None
    if tok.type == "MINUS":
        inner = parse_factor(stream)
        if inner is None:
            return None
        return ast.BinaryOp(ast.ValueRef("0"), BinaryOperator.SUB, inner)
    if tok.type == "NUMBER":
        return ast.ValueRef(tok.value)
    if tok.type == "STRING":
        if is_quoted(tok.value):
            return ast.StringLiteral(tok.value.strip('"'))
        return ast.ValueRef(tok.value)
    if tok.type == "LPAREN":
        inner = parse_expr(stream)
        if inner is None or not stream.expect("RPAREN"):
            return None
        return inner
    return None
