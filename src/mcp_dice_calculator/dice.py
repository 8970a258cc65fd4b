from __future__ import annotations

import logging
import random
import secrets
import uuid
from datetime import datetime, timezone
from typing import Any

from .config import Settings, get_settings
from .errors import DiceError, LexError
from .evaluator import count_dice, evaluate_tree
from .lexer import tokenize
from .models import EvaluationOutcome, Expression, LexFailure, ParseFailure, RollSuccess
from .parser import parse


logger = logging.getLogger(__name__)


def _now_utc_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def make_rng(settings: Settings) -> random.Random:
    if settings.rng_seed is not None:
        return random.Random(settings.rng_seed)
    return secrets.SystemRandom()


def _parse_text(text: str) -> Expression | LexFailure | ParseFailure:
    try:
        tokens = tokenize(text)
    except LexError as e:
        return LexFailure(message=str(e))

    root, errors = parse(tokens)
    if errors:
        return ParseFailure(messages=tuple(errors))
    return root


def evaluate(text: str, rng: random.Random | None = None) -> EvaluationOutcome:
    """Lex, parse and evaluate ``text``. Never raises for malformed input."""

    parsed = _parse_text(text)
    if isinstance(parsed, (LexFailure, ParseFailure)):
        return parsed

    result = evaluate_tree(parsed, rng or secrets.SystemRandom())
    return RollSuccess(value=result.value, trace=result.trace, divide_by_zero=result.divide_by_zero)


def roll_from_text(
    text: str,
    *,
    settings: Settings | None = None,
    rng: random.Random | None = None,
) -> dict[str, Any]:
    """Parse, validate, then roll. Raises DiceError for invalid input."""

    settings = settings or get_settings()
    rng = rng or make_rng(settings)
    request_id = uuid.uuid4().hex

    parsed = _parse_text(text)
    if isinstance(parsed, LexFailure):
        logger.info("Rejected roll %s: %s", request_id, parsed.message)
        raise LexError(parsed.message)

    if isinstance(parsed, ParseFailure):
        # Only the first message reaches the user; keep the rest for diagnostics.
        logger.warning(
            "Parse errors for roll %s (input=%r): %s", request_id, text, list(parsed.messages)
        )
        raise DiceError(parsed.first)

    dice = count_dice(parsed)
    if dice > settings.max_dice:
        raise DiceError(
            f"[TOO_MANY_DICE] Expression rolls {dice} dice; at most {settings.max_dice} are allowed. Example: '4d6 + 2'."
        )

    result = evaluate_tree(parsed, rng)
    if result.divide_by_zero:
        logger.debug("Roll %s divided by zero (input=%r)", request_id, text)

    return {
        "request_id": request_id,
        "timestamp": _now_utc_iso(),
        "input": text,
        "rng": {
            "source": type(rng).__name__,
        },
        "title": f"Rolled {result.value}",
        "rolls": result.trace,
        "result": result.value,
        "divide_by_zero": result.divide_by_zero,
    }
