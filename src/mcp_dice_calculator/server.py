from __future__ import annotations

import logging
import sys

from mcp.server.fastmcp import FastMCP

from .config import get_settings
from .dice import DiceError, roll_from_text


mcp = FastMCP(get_settings().server_name)


def _roll(expression: str):
    try:
        return roll_from_text(expression)
    except DiceError as e:
        # Fail-fast: the message is shown to the user as-is.
        raise ValueError(str(e)) from None


@mcp.tool()
def roll(expression: str):
    """Roll a die or calculate a value.

    Input: expression (string), e.g. "2d6+3*(1d4-1)" or "d20 + 5"
    Output: structured JSON with the result and every individual roll

    Raises a hard error (exception) on invalid input.
    """

    return _roll(expression)


@mcp.tool()
def r(expression: str):
    """Roll a die or calculate a value (short alias of roll)."""

    return _roll(expression)


def run() -> None:
    settings = get_settings()
    # stdout is reserved for the stdio transport.
    logging.basicConfig(
        level=settings.log_level.upper(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    mcp.run()


if __name__ == "__main__":
    run()
