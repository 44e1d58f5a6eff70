"""Parse and evaluate arithmetic expressions safely."""
from collections.abc import Callable as ABCCallable
from decimal import ROUND_HALF_UP, Decimal, localcontext
from enum import Enum
import math
import operator
import re
from typing import Any, Callable, List, NamedTuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from safe_expression.common.errors import (
    DivisionByZeroError,
    EmptyExpressionError,
    InsufficientOperandsError,
    InvalidCharactersError,
    InvalidExpressionError,
    MismatchedParenthesesError,
)
from safe_expression.common.logger import logger


# Type alias for operator functions (taking two floats, returning a float)
OperatorFn: ABCCallable[[float, float], float] = Callable[[float, float], float]

# Public result type of an evaluation
Number = Union[int, float]

WHITESPACE_PATTERN = re.compile(r"\s+")
ALLOWED_PATTERN = re.compile(r"[0-9+\-*/^().]+")
# A number literal ("12", "3.5", "3.") or a single operator / parenthesis
TOKEN_PATTERN = re.compile(r"[0-9]+\.?[0-9]*|[+\-*/^()]")

# Integer digits of sys.float_info.max, plus one for a rounding carry
FLOAT_MAX_DIGITS = 310


class Associativity(str, Enum):
    """Grouping direction for operators of equal precedence."""

    LEFT = "L"
    RIGHT = "R"


class Operator(NamedTuple):
    """Static description of a binary operator."""

    precedence: int
    associativity: Associativity
    function: OperatorFn


def _divide(a: float, b: float) -> float:
    if b == 0:
        raise DivisionByZeroError()
    return a / b


def _power(a: float, b: float) -> float:
    # math.pow raises where IEEE arithmetic gives inf or nan
    try:
        return math.pow(a, b)
    except OverflowError:
        return math.inf
    except ValueError:
        # 0 ^ negative is a pole, negative ^ fractional has no real value
        return math.inf if a == 0 else math.nan


# Mapping of operator symbols to (precedence, associativity, function)
OPERATORS: dict[str, Operator] = {
    "+": Operator(1, Associativity.LEFT, operator.add),
    "-": Operator(1, Associativity.LEFT, operator.sub),
    "*": Operator(2, Associativity.LEFT, operator.mul),
    "/": Operator(2, Associativity.LEFT, _divide),
    "^": Operator(3, Associativity.RIGHT, _power),
}


class ExpressionParser(BaseModel):
    """
    Parse and evaluate arithmetic expressions safely.

    Design constraints:
        - No eval(), no dynamic code execution
        - Safe, deterministic computation
        - Only literal decimal numbers, ``+ - * / ^`` and parentheses

    Algorithm:
        1. Sanitize: strip all whitespace
        2. Validate: character whitelist and parenthesis count
        3. Tokenize with a regular expression
        4. Convert to Reverse Polish Notation (RPN) using Shunting-yard
        5. Evaluate RPN using a stack
        6. Round to ``precision`` and report whole numbers as ``int``

    Some malformed inputs such as ``")("`` pass validation and are only
    rejected while evaluating the RPN tokens.

    Examples:
        - Infix expression (standard notation): 3 + 4 * 2
        - Corresponding Reverse Polish Notation (RPN): 3 4 2 * +
        - ``2 ^ 3 ^ 2`` groups to the right: 2 3 2 ^ ^ (= 512)
    """

    # Make the Pydantic instance immutable (read-only) so one parser can be shared
    model_config = ConfigDict(frozen=True)

    precision: int = Field(default=2, description="Number of decimal places kept in results")

    def __init__(self, precision: int = 2, **data: Any) -> None:
        super().__init__(precision=precision, **data)

    @field_validator("precision")
    def precision_must_not_be_negative(cls, v: int) -> int:
        """Clamp negative precision to zero."""
        return max(0, v)

    @staticmethod
    def sanitize_expression(expr: str) -> str:
        """
        Remove every whitespace character from the expression.

        :param str expr: Raw arithmetic expression

        :return: Expression without whitespace
        :rtype: str
        :raises EmptyExpressionError: If nothing is left
        """
        compact = WHITESPACE_PATTERN.sub("", expr)
        if not compact:
            raise EmptyExpressionError()
        return compact

    @staticmethod
    def validate_expression(expr: str) -> None:
        """
        Check the character whitelist and that parentheses counts match.

        Only the counts are compared, nesting order is left to later stages.

        :param str expr: Sanitized expression

        :raises InvalidCharactersError: If a character is not allowed
        :raises MismatchedParenthesesError: If '(' and ')' counts differ
        """
        if not ALLOWED_PATTERN.fullmatch(expr):
            raise InvalidCharactersError(expr)

        opened = expr.count("(")
        closed = expr.count(")")
        if opened != closed:
            raise MismatchedParenthesesError(opened, closed)

    @staticmethod
    def tokenize(expr: str) -> List[str]:
        """
        Split a sanitized expression into number and operator tokens.

        :param str expr: Sanitized arithmetic expression

        :return: List of tokens in source order
        :rtype: List[str]
        """
        return TOKEN_PATTERN.findall(expr)

    @staticmethod
    def _is_number(token: str) -> bool:
        """
        Determine if a token represents a numeric value.

        :param str token: Token string

        :return: True if token can be converted to float, else False
        :rtype: bool
        """
        try:
            float(token)
            return True
        except ValueError:
            return False

    @staticmethod
    def _should_pop(current: str, top: str) -> bool:
        """
        Tell whether the operator on top of the stack goes to the output before ``current``.

        :param str current: Operator being read
        :param str top: Operator on top of the stack

        :return: True if ``top`` must be popped
        :rtype: bool
        """
        cur, stacked = OPERATORS[current], OPERATORS[top]
        if cur.associativity is Associativity.LEFT:
            return cur.precedence <= stacked.precedence
        return cur.precedence < stacked.precedence

    @staticmethod
    def to_postfix(tokens: List[str]) -> List[str]:
        """
        Convert a list of tokens into Reverse Polish Notation (RPN) using the Shunting-yard algorithm.

        A ')' without a matching '(' is not reported here: the leftovers make
        :meth:`evaluate_postfix` fail instead.

        :param List[str] tokens: List of arithmetic tokens

        :return: List of tokens in RPN order
        :rtype: List[str]
        """
        output: List[str] = []
        stack: List[str] = []

        for token in tokens:
            if ExpressionParser._is_number(token):
                output.append(token)
            elif token == "(":
                stack.append(token)
            elif token == ")":
                while stack and stack[-1] != "(":
                    output.append(stack.pop())
                if stack:
                    stack.pop()  # Discard "("
            else:
                while (
                    stack
                    and stack[-1] in OPERATORS
                    and ExpressionParser._should_pop(token, stack[-1])
                ):
                    output.append(stack.pop())
                stack.append(token)

        # Append remaining entries in reverse order (stack top first)
        output.extend(stack[::-1])
        return output

    @staticmethod
    def evaluate_postfix(postfix: List[str]) -> float:
        """
        Reduce RPN tokens to a single value using a stack.

        :param List[str] postfix: Tokens in RPN order

        :return: Computed value
        :rtype: float
        :raises InsufficientOperandsError: If an operator lacks operands
        :raises DivisionByZeroError: On division by zero
        :raises InvalidExpressionError: If the tokens do not reduce to exactly one value
        """
        stack: List[float] = []
        for token in postfix:
            if ExpressionParser._is_number(token):
                stack.append(float(token))
            elif token in OPERATORS:
                # Operator requires two operands
                if len(stack) < 2:
                    raise InsufficientOperandsError(token)
                b: float = stack.pop()
                a: float = stack.pop()
                stack.append(OPERATORS[token].function(a, b))
            else:
                # A "(" left over from an unmatched ")"
                raise InvalidExpressionError(f"Invalid expression (misplaced parenthesis {token!r})")

        if len(stack) != 1:
            raise InvalidExpressionError(f"Invalid expression ({len(stack)} values left on the stack)")

        return stack[0]

    def format_result(self, value: float) -> Number:
        """
        Round the value half away from zero and report whole numbers as integers.

        Rounding works on the shortest decimal form of the float, so ``1.005``
        rounds to ``1.01`` and ``2.5`` to ``3``. Infinity and NaN are returned as is.

        :param float value: Raw computed value

        :return: Rounded value, as int when it has no fractional part
        :rtype: Number
        """
        if not math.isfinite(value):
            return value

        with localcontext() as ctx:
            # Enough digits for the largest float plus the requested decimals
            ctx.prec = FLOAT_MAX_DIGITS + self.precision
            quantum = Decimal(1).scaleb(-self.precision)
            rounded = float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))

        if rounded.is_integer():
            return int(rounded)
        return rounded

    def evaluate(self, expr: str) -> Number:
        """
        Evaluate an arithmetic expression safely.

        :param str expr: Arithmetic expression string

        :return: Computed result, rounded to ``precision``
        :rtype: Number
        :raises ExpressionError: If expression is invalid or cannot be evaluated
        """
        compact = self.sanitize_expression(expr)
        self.validate_expression(compact)

        postfix = self.to_postfix(self.tokenize(compact))
        logger.debug("RPN for %r: %s", expr, " ".join(postfix))

        return self.format_result(self.evaluate_postfix(postfix))
