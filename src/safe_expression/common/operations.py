"""Pydantic models for arithmetic operation requests and results."""
from typing import Optional, Union

from pydantic import BaseModel, Field, model_validator


class OperationRequest(BaseModel):
    """Represents a single arithmetic expression to evaluate."""

    expression: str = Field(..., description="Arithmetic expression as a string")
    precision: int = Field(default=2, ge=0, description="Number of decimal places kept in the result")


class OperationResult(BaseModel):
    """Represents the outcome of an evaluated arithmetic expression."""

    expression: str = Field(..., description="Original arithmetic expression")
    result: Optional[Union[int, float]] = Field(default=None, description="Evaluated numeric result")
    error: Optional[str] = Field(default=None, description="Error message when evaluation failed")

    @model_validator(mode="after")
    def result_xor_error(self) -> "OperationResult":
        """Ensure exactly one of result and error is set."""
        if (self.result is None) == (self.error is None):
            raise ValueError("Exactly one of 'result' or 'error' must be set")
        return self

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def to_line(self) -> str:
        """
        Render the result as one line of a results file.

        :return: ``"<expr> = <result>"`` or ``"<expr> -> ERROR: <error>"``
        :rtype: str
        """
        if self.succeeded:
            return f"{self.expression} = {self.result}"
        return f"{self.expression} -> ERROR: {self.error}"
