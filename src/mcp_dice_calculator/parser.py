from __future__ import annotations

from collections.abc import Sequence

from .models import INT64_MAX, BinaryOp, Constant, DieRoll, Expression, Token, TokenKind


# Expr    := Term
# Term    := Factor (('+' | '-') Factor)*
# Factor  := Primary (('*' | '/') Primary)*
# Primary := '(' Expr ')' | Die | Constant


# Each group costs several Python frames; this keeps parsing under the recursion limit.
MAX_NESTING = 100


def _is_number(text: str) -> bool:
    return text.isascii() and text.isdigit()


def _to_int(text: str) -> int:
    return min(int(text), INT64_MAX)


class ExpressionParser:
    """Recursive-descent parser that records syntax errors instead of raising.

    Every error site substitutes ``Constant(0)`` so a tree is always built;
    callers must check ``errors`` before trusting the result. Tokens left over
    after a complete expression (``"2)"``, ``"(1)(2)"``) are reported too, and
    groups nested deeper than ``MAX_NESTING`` are cut off with an error.
    """

    def __init__(self, tokens: Sequence[Token]) -> None:
        if not tokens:
            raise ValueError("ExpressionParser requires at least one token")
        self._tokens = tuple(tokens)
        self._current = 0
        self._exhausted = False
        self._depth = 0
        self.errors: list[str] = []

    def parse(self) -> Expression:
        root = self.expr()
        if not self._exhausted:
            self.errors.append(f'Unexpected "{self.peek()}" after end of expression')
        return root

    def expr(self) -> Expression:
        return self.term()

    def term(self) -> Expression:
        expr = self.factor()
        while self.check("term_op"):
            op = self.consume()
            right = self.factor()
            expr = BinaryOp(left=expr, right=right, operator=op.text)
        return expr

    def factor(self) -> Expression:
        expr = self.primary()
        while self.check("factor_op"):
            op = self.consume()
            right = self.primary()
            expr = BinaryOp(left=expr, right=right, operator=op.text)
        return expr

    def primary(self) -> Expression:
        if self.check("constant"):
            # The lexer only emits digit-only text for constants.
            return Constant(_to_int(self.consume().text))

        if self.check("die"):
            return self._die(self.consume())

        if self.check("group") and self.peek().text == "(":
            self.consume()
            if self._depth >= MAX_NESTING:
                self.errors.append("Expression nested too deeply")
                return Constant(0)

            self._depth += 1
            inner = self.expr()
            self._depth -= 1
            if self.check("group") and self.peek().text == ")":
                self.consume()
                return inner
            # The inner subtree is dropped along with the missing paren.
            self.errors.append("Unmatched parenthesis")
            return Constant(0)

        self.errors.append("Could not parse input")
        return Constant(0)

    def _die(self, token: Token) -> Expression:
        parts = token.text.split("d")
        if len(parts) != 2 or not _is_number(parts[1]):
            self.errors.append(
                f'"{token.text}" was not recognized as a valid number or dice expression (Code: 3)'
            )
            return Constant(0)

        count_text, sides_text = parts
        if not count_text:
            count_text = "1"

        numbers: list[int] = []
        for part in (count_text, sides_text):
            if _is_number(part):
                numbers.append(_to_int(part))
            else:
                self.errors.append(
                    f'"{token.text}" NUMBER in dice expression was not purely numeric'
                )
                numbers.append(0)

        count, sides = numbers
        return DieRoll(count=count, sides=sides)

    def peek(self) -> Token:
        return self._tokens[self._current]

    def check(self, kind: TokenKind) -> bool:
        return not self._exhausted and self.peek().kind == kind

    def consume(self) -> Token:
        token = self._tokens[self._current]
        if self._current < len(self._tokens) - 1:
            self._current += 1
        else:
            # The final token stays under the cursor; it just can't be matched again.
            self._exhausted = True
        return token


def parse(tokens: Sequence[Token]) -> tuple[Expression, list[str]]:
    parser = ExpressionParser(tokens)
    root = parser.parse()
    return root, parser.errors
