import random

import pytest

from mcp_dice_calculator.evaluator import count_dice, evaluate_tree, saturate, truncating_div
from mcp_dice_calculator.models import (
    DIVIDE_BY_ZERO_TRACE,
    INT64_MAX,
    INT64_MIN,
    BinaryOp,
    Constant,
    DieRoll,
    Evaluation,
)


@pytest.fixture
def rng():
    return random.Random(1234)


def test_constant(rng):
    assert evaluate_tree(Constant(17), rng) == Evaluation(value=17, trace="17")


def test_die_roll_trace_lists_each_roll(rng):
    expected = random.Random(1234)
    rolls = [expected.randint(1, 6) for _ in range(3)]

    result = evaluate_tree(DieRoll(count=3, sides=6), rng)

    assert result.value == sum(rolls)
    assert result.trace == "[" + ", ".join(str(r) for r in rolls) + "]"


def test_zero_dice(rng):
    assert evaluate_tree(DieRoll(count=0, sides=6), rng) == Evaluation(value=0, trace="[]")


def test_zero_sided_die_rolls_zero(rng):
    assert evaluate_tree(DieRoll(count=2, sides=0), rng) == Evaluation(value=0, trace="[0, 0]")


def test_die_node_is_not_memoized():
    node = DieRoll(count=5, sides=100)
    rng = random.Random(7)
    traces = {evaluate_tree(node, rng).trace for _ in range(10)}
    assert len(traces) > 1


def test_binary_op_evaluates_left_then_right():
    node = BinaryOp(left=DieRoll(count=1, sides=20), right=DieRoll(count=1, sides=20), operator="+")
    expected = random.Random(99)
    first, second = expected.randint(1, 20), expected.randint(1, 20)

    result = evaluate_tree(node, random.Random(99))

    assert result.trace == f"[{first}] + [{second}]"
    assert result.value == first + second


@pytest.mark.parametrize(
    ("operator", "left", "right", "value"),
    [
        ("+", 2, 3, 5),
        ("-", 2, 3, -1),
        ("*", 4, 5, 20),
        ("/", 7, 2, 3),
        ("/", -7, 2, -3),
        ("/", 7, -2, -3),
        ("/", -7, -2, 3),
    ],
)
def test_arithmetic(rng, operator, left, right, value):
    # Negative operands only arise from subtraction, so build them that way.
    def operand(n):
        return Constant(n) if n >= 0 else BinaryOp(left=Constant(0), right=Constant(-n), operator="-")

    node = BinaryOp(left=operand(left), right=operand(right), operator=operator)
    assert evaluate_tree(node, rng).value == value


def test_divide_by_zero_replaces_whole_trace(rng):
    node = BinaryOp(left=Constant(4), right=Constant(0), operator="/")
    assert evaluate_tree(node, rng) == Evaluation(
        value=0, trace=DIVIDE_BY_ZERO_TRACE, divide_by_zero=True
    )


def test_divide_by_zero_flag_propagates(rng):
    inner = BinaryOp(left=Constant(4), right=Constant(0), operator="/")
    node = BinaryOp(left=Constant(1), right=inner, operator="+")

    result = evaluate_tree(node, rng)

    assert result.value == 1
    assert result.trace == f"1 + {DIVIDE_BY_ZERO_TRACE}"
    assert result.divide_by_zero


def test_saturating_arithmetic(rng):
    big = Constant(INT64_MAX)
    assert evaluate_tree(BinaryOp(left=big, right=Constant(1), operator="+"), rng).value == INT64_MAX
    assert evaluate_tree(BinaryOp(left=big, right=big, operator="*"), rng).value == INT64_MAX

    low = BinaryOp(left=Constant(0), right=big, operator="-")
    assert evaluate_tree(BinaryOp(left=low, right=Constant(5), operator="-"), rng).value == INT64_MIN
    assert evaluate_tree(BinaryOp(left=low, right=big, operator="*"), rng).value == INT64_MIN


def test_helpers():
    assert saturate(INT64_MAX + 10) == INT64_MAX
    assert saturate(INT64_MIN - 10) == INT64_MIN
    assert truncating_div(INT64_MIN, -1) == INT64_MAX
    assert truncating_div(-1, 3) == 0


def test_count_dice():
    node = BinaryOp(
        left=DieRoll(count=3, sides=6),
        right=BinaryOp(left=DieRoll(count=2, sides=4), right=Constant(9), operator="*"),
        operator="+",
    )
    assert count_dice(node) == 5
    assert count_dice(Constant(3)) == 0


def test_deep_trees_do_not_recurse(rng):
    node = Constant(0)
    for _ in range(5000):
        node = BinaryOp(left=node, right=DieRoll(count=1, sides=1), operator="+")

    assert count_dice(node) == 5000
    assert evaluate_tree(node, rng).value == 5000

    node = Constant(1)
    for _ in range(5000):
        node = BinaryOp(left=Constant(1), right=node, operator="*")

    assert evaluate_tree(node, rng).value == 1
