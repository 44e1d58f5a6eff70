"""Test class BatchEvaluator."""
import logging
from pathlib import Path

from pydantic import ValidationError
import pytest

from safe_expression.batch.evaluator import BatchEvaluator
from safe_expression.common.operations import OperationRequest


@pytest.fixture
def tmp_output_file(tmp_path: Path) -> Path:
    """Create a temporary output file path."""
    return tmp_path / "results.txt"


@pytest.mark.parametrize(
    "expr,expected",
    [
        ("2 + 3", 5),
        ("10 - 4", 6),
        ("3 * 4", 12),
        ("1 / 4", 0.25),
        ("2 ^ 10", 1024),
    ],
)
def test_evaluate_returns_result(expr: str, expected) -> None:
    """A valid expression produces a result record."""
    result = BatchEvaluator().evaluate(OperationRequest(expression=expr))
    assert result.expression == expr
    assert result.result == expected
    assert result.error is None


@pytest.mark.parametrize("expr", ["2 +", "(3) (4) + 5", "5 / 0", "x"])
def test_evaluate_returns_error(expr: str, caplog) -> None:
    """A malformed expression produces an error record instead of raising."""
    with caplog.at_level(logging.ERROR, logger="safe_expression"):
        result = BatchEvaluator().evaluate(OperationRequest(expression=expr), line_number=7)
    assert not result.succeeded
    assert isinstance(result.error, str)
    assert "Line 7 failed" in caplog.text


def test_evaluate_uses_request_precision() -> None:
    result = BatchEvaluator().evaluate(OperationRequest(expression="10 / 3", precision=4))
    assert result.result == 3.3333


def test_evaluate_lines_keeps_order_and_writes_file(tmp_output_file: Path) -> None:
    """Every expression gets one output line, in input order."""
    evaluator = BatchEvaluator(output_file=tmp_output_file)
    results = evaluator.evaluate_lines(["2 + 3", "5 / 0", "10 / 4"])

    assert [r.result for r in results] == [5, None, 2.5]
    assert tmp_output_file.read_text().splitlines() == [
        "2 + 3 = 5",
        "5 / 0 -> ERROR: Division by zero",
        "10 / 4 = 2.5",
    ]


def test_evaluate_lines_without_output_file() -> None:
    results = BatchEvaluator(precision=0).evaluate_lines(["10 / 3"])
    assert results[0].result == 3


def test_run_reads_input_file(tmp_path: Path, tmp_output_file: Path) -> None:
    input_file = tmp_path / "ops.txt"
    input_file.write_text("2 ^ 3 ^ 2\n\n(10 + 5) / 3\n")

    results = BatchEvaluator(output_file=tmp_output_file).run(input_file)

    assert [r.result for r in results] == [512, 5]
    assert "2 ^ 3 ^ 2 = 512" in tmp_output_file.read_text()


def test_negative_precision_is_rejected() -> None:
    with pytest.raises(ValidationError):
        BatchEvaluator(precision=-1)
