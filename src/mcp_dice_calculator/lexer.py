from __future__ import annotations

import re

from .errors import LexError
from .models import Token


_WHITESPACE = frozenset(" \t\r\n\u0085\u00a0")

_OPERATOR_KINDS = {
    "(": "group",
    ")": "group",
    "*": "factor_op",
    "/": "factor_op",
    "+": "term_op",
    "-": "term_op",
}

_CONSTANT_RE = re.compile(r"[0-9]+")
_DIE_RE = re.compile(r"[0-9]*d[0-9]+")

# Distinguishes a chunk cut short by an operator from the trailing chunk.
_MID_EXPRESSION = 1
_TRAILING = 2


def lex_token(chunk: str) -> Token | None:
    """Classify one buffered chunk, or return None if it is neither a number nor a die."""
    if _CONSTANT_RE.fullmatch(chunk):
        return Token("constant", chunk)

    if _DIE_RE.fullmatch(chunk):
        # "d20" carries an implied leading 1.
        if chunk.startswith("d"):
            chunk = "1" + chunk
        return Token("die", chunk)

    return None


def _flush(chunk: str, code: int) -> Token:
    token = lex_token(chunk)
    if token is None:
        raise LexError(
            f'"{chunk}" was not recognized as a valid number or dice expression (Code: {code})'
        )
    return token


def tokenize(raw: str) -> list[Token]:
    tokens: list[Token] = []
    pending: list[str] = []

    for ch in raw:
        if ch in _WHITESPACE:
            continue

        kind = _OPERATOR_KINDS.get(ch)
        if kind is None:
            pending.append(ch)
            continue

        if pending:
            tokens.append(_flush("".join(pending), _MID_EXPRESSION))
            pending.clear()
        tokens.append(Token(kind, ch))

    if pending:
        tokens.append(_flush("".join(pending), _TRAILING))

    if not tokens:
        raise LexError("Expected a dice or calculation expression")

    return tokens
