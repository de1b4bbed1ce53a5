"""AST node definitions for neurodsl.

Statements own their nested blocks; the tree never shares nodes. Every node
is a frozen dataclass, so two parses of the same source compare equal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union


class BinaryOperator(str, Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    GT = ">"
    LT = "<"
    GE = ">="
    LE = "<="
    EQ = "=="
    NE = "!="


# Expressions


@dataclass(frozen=True)
class StringLiteral:
    """A quoted literal, stored without its quotes."""

    value: str


@dataclass(frozen=True)
class ValueRef:
    """A bare identifier or number; resolved against the environment at run time."""

    name: str


@dataclass(frozen=True)
class BinaryOp:
    left: "Expr"
    op: BinaryOperator
    right: "Expr"


Expr = Union[StringLiteral, ValueRef, BinaryOp]


# Boolean expressions


@dataclass(frozen=True)
class ClassifierEquals:
    """``"prompt" == "Label"``: classify ``prompt`` and compare with ``expected``."""

    prompt: str
    expected: str


@dataclass(frozen=True)
class ClassifierNotEquals:
    prompt: str
    expected: str


@dataclass(frozen=True)
class VarEquals:
    name: str
    literal: str


@dataclass(frozen=True)
class VarNotEquals:
    name: str
    literal: str


@dataclass(frozen=True)
class VarEqualsVar:
    left: str
    right: str


@dataclass(frozen=True)
class VarNotEqualsVar:
    left: str
    right: str


@dataclass(frozen=True)
class Greater:
    left: str
    right: str


@dataclass(frozen=True)
class GreaterEqual:
    left: str
    right: str


@dataclass(frozen=True)
class Less:
    left: str
    right: str


@dataclass(frozen=True)
class LessEqual:
    left: str
    right: str


@dataclass(frozen=True)
class And:
    left: "BoolExpr"
    right: "BoolExpr"


@dataclass(frozen=True)
class Or:
    left: "BoolExpr"
    right: "BoolExpr"


BoolExpr = Union[
    ClassifierEquals,
    ClassifierNotEquals,
    VarEquals,
    VarNotEquals,
    VarEqualsVar,
    VarNotEqualsVar,
    Greater,
    GreaterEqual,
    Less,
    LessEqual,
    And,
    Or,
]


# Statements


@dataclass(frozen=True)
class ModelSelect:
    path: str


@dataclass(frozen=True)
class Output:
    """``neuro <argument>``; ``argument`` keeps its quotes when it was a literal."""

    argument: str


@dataclass(frozen=True)
class Assign:
    name: str
    expr: Expr


@dataclass(frozen=True)
class AssignFromClassifier:
    name: str
    prompt: str


@dataclass(frozen=True)
class MacroInvoke:
    instruction: str


@dataclass(frozen=True)
class Conditional:
    condition: BoolExpr
    body: Tuple["Statement", ...]
    elif_branches: Tuple[Tuple[BoolExpr, Tuple["Statement", ...]], ...] = field(default=())
    else_body: Optional[Tuple["Statement", ...]] = None


Statement = Union[ModelSelect, Output, Assign, AssignFromClassifier, MacroInvoke, Conditional]
