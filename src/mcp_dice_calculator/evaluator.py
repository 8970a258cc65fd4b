from __future__ import annotations

import random

from .models import (
    DIVIDE_BY_ZERO_TRACE,
    INT64_MAX,
    INT64_MIN,
    BinaryOp,
    Constant,
    DieRoll,
    Evaluation,
    Expression,
)


def saturate(value: int) -> int:
    return max(INT64_MIN, min(INT64_MAX, value))


def truncating_div(left: int, right: int) -> int:
    """Integer division rounding toward zero; ``right`` must be non-zero."""
    quotient = abs(left) // abs(right)
    if (left < 0) != (right < 0):
        quotient = -quotient
    return saturate(quotient)


_ARITHMETIC = {
    "+": lambda a, b: saturate(a + b),
    "-": lambda a, b: saturate(a - b),
    "*": lambda a, b: saturate(a * b),
    "/": truncating_div,
}


def _roll(node: DieRoll, rng: random.Random) -> Evaluation:
    if node.sides < 1:
        rolls = [0] * node.count
    else:
        rolls = [rng.randint(1, node.sides) for _ in range(node.count)]
    trace = "[" + ", ".join(str(r) for r in rolls) + "]"
    return Evaluation(value=saturate(sum(rolls)), trace=trace)


def _combine(node: BinaryOp, left: Evaluation, right: Evaluation) -> Evaluation:
    if node.operator == "/" and right.value == 0:
        return Evaluation(value=0, trace=DIVIDE_BY_ZERO_TRACE, divide_by_zero=True)

    value = _ARITHMETIC[node.operator](left.value, right.value)
    trace = f"{left.trace} {node.operator} {right.trace}"
    return Evaluation(
        value=value, trace=trace, divide_by_zero=left.divide_by_zero or right.divide_by_zero
    )


def evaluate_tree(node: Expression, rng: random.Random) -> Evaluation:
    """Evaluate a parsed tree bottom-up, rolling every die node afresh.

    Walks the tree with an explicit stack so long operator chains don't hit
    the recursion limit. Left subtrees finish before right ones, so rolls
    happen in the order they appear in the trace.
    """

    results: list[Evaluation] = []
    stack: list[tuple[Expression, bool]] = [(node, False)]

    while stack:
        current, children_done = stack.pop()

        if isinstance(current, Constant):
            results.append(Evaluation(value=current.value, trace=str(current.value)))
        elif isinstance(current, DieRoll):
            results.append(_roll(current, rng))
        elif isinstance(current, BinaryOp):
            if children_done:
                right = results.pop()
                left = results.pop()
                results.append(_combine(current, left, right))
            else:
                stack.append((current, True))
                stack.append((current.right, False))
                stack.append((current.left, False))
        else:
            raise TypeError(f"Unknown expression node: {current!r}")

    return results.pop()


def count_dice(node: Expression) -> int:
    """Total number of dice evaluating ``node`` would roll."""

    total = 0
    stack = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, DieRoll):
            total = saturate(total + current.count)
        elif isinstance(current, BinaryOp):
            stack.extend((current.left, current.right))
    return total
