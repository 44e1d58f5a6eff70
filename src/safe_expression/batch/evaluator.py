"""Evaluate batches of arithmetic expressions and write the results to disk."""
from pathlib import Path
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from safe_expression.common.errors import ExpressionError
from safe_expression.common.helpers import get_parser
from safe_expression.common.logger import logger
from safe_expression.common.operations import OperationRequest, OperationResult
from safe_expression.common.reader import load_expressions


class BatchEvaluator(BaseModel):
    """
    Evaluate many arithmetic expressions, one after the other.

    Features:
        - One bad expression never stops the batch: it becomes an error record.
        - Results keep the order of the input lines.
        - Writes results to disk line by line as soon as each one is computed.
    """

    model_config = ConfigDict(frozen=True)

    precision: int = Field(default=2, ge=0, description="Number of decimal places kept in results")
    output_file: Optional[Path] = Field(default=None, description="Path to write computation results")

    def evaluate(self, request: OperationRequest, line_number: int = 1) -> OperationResult:
        """
        Evaluate a single request, turning expression errors into an error record.

        :param OperationRequest request: Expression and precision to use
        :param int line_number: Line number of expression in input

        :return: Result or error for the expression
        :rtype: OperationResult
        """
        logger.debug(f"🧮🏁 Evaluating line {line_number}: {request.expression}")
        try:
            value = get_parser(request.precision).evaluate(request.expression)
        except ExpressionError as exc:
            logger.error(
                f"🧮❌ Line {line_number} failed: {exc}\n"
                f"Invalid arithmetic expression, could not evaluate: {request.expression!r}"
            )
            return OperationResult(expression=request.expression, error=str(exc))

        logger.debug(f"🧮✅ Line {line_number} = {value}")
        return OperationResult(expression=request.expression, result=value)

    def evaluate_lines(self, lines: Iterable[str]) -> List[OperationResult]:
        """
        Evaluate expressions in order, writing each result when ``output_file`` is set.

        :param Iterable[str] lines: Expressions to evaluate

        :return: One result per expression, in input order
        :rtype: List[OperationResult]
        """
        results: List[OperationResult] = []
        f_out = self.output_file.open("w", encoding="utf-8") if self.output_file else None
        try:
            for line_number, expr in enumerate(lines, start=1):
                result = self.evaluate(
                    OperationRequest(expression=expr, precision=self.precision), line_number
                )
                results.append(result)
                if f_out is not None:
                    f_out.write(result.to_line() + "\n")
                    f_out.flush()
        finally:
            if f_out is not None:
                f_out.close()

        failed = sum(1 for result in results if not result.succeeded)
        logger.info(f"Evaluated {len(results)} expressions ({failed} failed)")
        return results

    def run(self, input_file: Path) -> List[OperationResult]:
        """
        Load expressions from a text file or archive and evaluate them.

        :param Path input_file: Path to the input file or archive

        :return: One result per non-empty input line
        :rtype: List[OperationResult]
        """
        logger.info(f"Reading expressions from {input_file}")
        results = self.evaluate_lines(load_expressions(input_file))
        if self.output_file is not None:
            logger.info(f"Results written to {self.output_file}")
        return results
