"""
Command-line entrypoint.

This script either:
- evaluates a single expression given with ``-e`` and prints the result, or
- evaluates every line of an operations file (plain text or archive)
  and writes the results next to it.

Exit status is 0 when every expression was evaluated, 1 otherwise.
"""

import argparse
from pathlib import Path
import sys
from typing import List, Optional

from pydantic import BaseModel, Field, FilePath, ValidationError, model_validator

from safe_expression.batch.evaluator import BatchEvaluator
from safe_expression.common.errors import ExpressionError
from safe_expression.common.logger import logger
from safe_expression.common.parser import ExpressionParser


class CliArgs(BaseModel):
    """
    Pydantic model used to validate CLI arguments.

    Attributes
    ----------
    file_path : FilePath, optional
        Path to the file containing arithmetic operations.
    expression : str, optional
        Single expression to evaluate instead of a file.
    precision : int
        Number of decimal places kept in results.
    output : Path, optional
        Where to write results of a file run.
    """

    file_path: Optional[FilePath] = None
    expression: Optional[str] = None
    precision: int = Field(default=2, ge=0)
    output: Optional[Path] = None

    @model_validator(mode="after")
    def file_xor_expression(self) -> "CliArgs":
        if (self.file_path is None) == (self.expression is None):
            raise ValueError("Provide either an operations file or --expression, not both")
        return self


def parse_args(argv: Optional[List[str]] = None) -> CliArgs:
    """
    Parse and validate command-line arguments.

    :param argv: Arguments to parse, defaults to ``sys.argv[1:]``
    :return: Validated CLI arguments
    :rtype: CliArgs
    """
    parser = argparse.ArgumentParser(
        prog="safe-expression",
        description="Evaluate arithmetic expressions without eval()",
    )
    parser.add_argument(
        "file_path",
        nargs="?",
        help="Path to the file containing arithmetic operations (.txt, .zip, .tar.xz, .7z)",
    )
    parser.add_argument("-e", "--expression", help="Evaluate a single expression and print the result")
    parser.add_argument("-p", "--precision", type=int, default=2, help="Number of decimal places (default: 2)")
    parser.add_argument("-o", "--output", help="Results file (default: <input>_results.txt)")

    args = parser.parse_args(argv)

    try:
        return CliArgs(
            file_path=args.file_path,
            expression=args.expression,
            precision=args.precision,
            output=args.output,
        )
    except ValidationError as exc:
        parser.error(str(exc))


def build_output_path(input_path: Path) -> Path:
    """
    Construct the results file path based on the input file.

    - Preserves the original folder
    - Replaces dots in extensions with underscores
    - Appends '_results.txt' at the end

    Examples
    --------
    input: resources/operations.7z
    output: resources/operations_7z_results.txt

    input: resources/operations.tar.xz
    output: resources/operations_tar_xz_results.txt

    :param input_path: Path to the input file
    :return: Path to the output file
    """
    stem = input_path.name
    for suffix in input_path.suffixes:
        stem = stem[: -len(suffix)]
    suffix_safe = "".join(input_path.suffixes).replace(".", "_")
    return input_path.with_name(f"{stem}{suffix_safe}_results.txt")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the CLI and return the process exit status.
    """
    cli_args = parse_args(argv)

    if cli_args.expression is not None:
        try:
            print(ExpressionParser(cli_args.precision).evaluate(cli_args.expression))
        except ExpressionError as exc:
            print(f"ERROR: {exc}")
            return 1
        return 0

    input_path = Path(cli_args.file_path)
    output_path = cli_args.output or build_output_path(input_path)

    try:
        results = BatchEvaluator(precision=cli_args.precision, output_file=output_path).run(input_path)
    except ValueError as exc:
        logger.error(f"Could not read {input_path}: {exc}")
        return 1

    return 0 if all(result.succeeded for result in results) else 1


if __name__ == "__main__":
    sys.exit(main())
