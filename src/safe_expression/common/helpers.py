"""Convenience wrapper returning None instead of raising on bad expressions."""
from functools import lru_cache
import os
from typing import Optional

from safe_expression.common.errors import ExpressionError
from safe_expression.common.logger import logger
from safe_expression.common.parser import ExpressionParser, Number


DEBUG_ENV_VAR = "SAFE_EXPRESSION_DEBUG"


def debug_enabled() -> bool:
    """Tell whether failure logging is switched on through the environment."""
    return os.environ.get(DEBUG_ENV_VAR, "").strip().lower() in {"1", "true", "yes", "on"}


# One parser per recently used precision
@lru_cache(maxsize=8)
def get_parser(precision: int = 2) -> ExpressionParser:
    """Return a shared parser for the given precision."""
    return ExpressionParser(precision)


def evaluate_expression(expression: str, precision: int = 2, debug: bool = False) -> Optional[Number]:
    """
    Safely evaluate a mathematical expression.

    :param str expression: Mathematical expression to evaluate
    :param int precision: Number of decimal places (default: 2)
    :param bool debug: Log the failure message when evaluation fails

    :return: Result, or None on error
    :rtype: Optional[Number]
    """
    try:
        return get_parser(precision).evaluate(expression)
    except ExpressionError as exc:
        if debug or debug_enabled():
            logger.error(f"Expression evaluation error: {exc}")
        return None
