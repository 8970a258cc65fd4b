from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias


INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

DIVIDE_BY_ZERO_TRACE = "ERROR: DIVIDE BY ZERO"

TokenKind: TypeAlias = Literal["constant", "die", "term_op", "factor_op", "group"]
Operator: TypeAlias = Literal["+", "-", "*", "/"]


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Constant:
    value: int


@dataclass(frozen=True)
class DieRoll:
    count: int
    sides: int


@dataclass(frozen=True)
class BinaryOp:
    left: Expression
    right: Expression
    operator: Operator


Expression: TypeAlias = Constant | DieRoll | BinaryOp


@dataclass(frozen=True)
class Evaluation:
    value: int
    trace: str
    # Set on the dividing node and carried up through every ancestor.
    divide_by_zero: bool = False


@dataclass(frozen=True)
class RollSuccess:
    value: int
    trace: str
    divide_by_zero: bool = False


@dataclass(frozen=True)
class LexFailure:
    message: str


@dataclass(frozen=True)
class ParseFailure:
    messages: tuple[str, ...]

    @property
    def first(self) -> str:
        return self.messages[0]


EvaluationOutcome: TypeAlias = RollSuccess | LexFailure | ParseFailure
