"""Errors raised while evaluating arithmetic expressions."""


class ExpressionError(ValueError):
    """Base class for every expression validation or evaluation failure."""


class EmptyExpressionError(ExpressionError):
    """The expression is empty once whitespace is removed."""

    def __init__(self) -> None:
        super().__init__("Expression cannot be empty")


class InvalidCharactersError(ExpressionError):
    """The expression contains characters outside the arithmetic whitelist."""

    def __init__(self, expression: str) -> None:
        super().__init__(f"Expression contains invalid characters: {expression!r}")
        self.expression = expression


class MismatchedParenthesesError(ExpressionError):
    """The numbers of opening and closing parentheses differ."""

    def __init__(self, opened: int, closed: int) -> None:
        super().__init__(f"Mismatched parentheses: {opened} '(' for {closed} ')'")
        self.opened = opened
        self.closed = closed


class InsufficientOperandsError(ExpressionError):
    """An operator was reached with fewer than two values on the stack."""

    def __init__(self, operator: str) -> None:
        super().__init__(f"Insufficient operands for operator: {operator}")
        self.operator = operator


class DivisionByZeroError(ExpressionError):
    """Division with a zero right operand."""

    def __init__(self) -> None:
        super().__init__("Division by zero")


class InvalidExpressionError(ExpressionError):
    """The expression is structurally malformed."""
