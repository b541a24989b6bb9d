"""
Command-line interface for validating a data file against a rules file.

Usage:
    python -m ruleval.cli.validate_cli --rules <rules_file> --data <data_file> --grammar <reference_file> [options]

Exit status:
    0  no Error findings
    1  the report contains Error findings
    2  the rules, data or reference file could not be read or parsed
"""

import argparse
import sys

from pydantic import ValidationError as ConfigValidationError

from ruleval.batch.pipeline import ValidationPipeline
from ruleval.core.config import load_config
from ruleval.core.errors import AccessFailure, ParseError
from ruleval.observability.logger import get_logger, setup_logger
from ruleval.observability.metrics import write_metrics
from ruleval.utils.validation import (
    InvalidInputError,
    validate_delimiter,
    validate_file_path,
    validate_sheet,
    validate_worker_count,
)

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_REPORT_ERRORS = 1
EXIT_FAILURE = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="ruleval",
        description="Validate a tabular data file against a declarative rules file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Validate a CSV file
  ruleval --rules rules/customers.rules --data data/customers.csv --grammar config/date_formats.yaml

  # Validate the second sheet of a workbook with 4 worker threads
  ruleval --rules rules/orders.rules --data data/orders.xlsx --grammar config/date_formats.yaml \\
      --sheet 1 --workers 4

  # Semicolon-separated file, report logs in ./reports, metrics dump
  ruleval --rules r.rules --data d.csv --grammar g.yaml --delimiter ';' \\
      --log-dir reports --metrics-file metrics.prom
        """
    )

    parser.add_argument(
        "--rules",
        required=True,
        help="Path to the rules file"
    )
    parser.add_argument(
        "--data",
        required=True,
        help="Path to the data file (.csv, .tsv, .txt, .xlsx, .xlsm)"
    )
    parser.add_argument(
        "--grammar",
        required=True,
        help="Path to the date-format reference YAML file"
    )
    parser.add_argument(
        "--log-dir",
        help="Directory for the validation report log (default: RULEVAL_LOG_DIR or ./logs)"
    )
    parser.add_argument(
        "--workers",
        type=int,
        help="Worker threads for evaluation (default: RULEVAL_MAX_WORKERS or 1)"
    )
    parser.add_argument(
        "--sheet",
        default="0",
        help="Spreadsheet sheet name or 0-based index (default: 0)"
    )
    parser.add_argument(
        "--delimiter",
        help="Field delimiter for delimited files (default: by file suffix; use \\t for tab)"
    )
    parser.add_argument(
        "--metrics-file",
        help="Write Prometheus metrics in text format to this file"
    )
    parser.add_argument(
        "--env-file",
        help="Load environment variables from this .env file"
    )

    return parser


def run(args: argparse.Namespace) -> int:
    """
    Execute a validation run.

    Args:
        args: Parsed command-line arguments

    Returns:
        Process exit status
    """
    try:
        rules_path = validate_file_path(args.rules, "--rules")
        data_path = validate_file_path(args.data, "--data")
        grammar_path = validate_file_path(args.grammar, "--grammar")
        sheet = validate_sheet(args.sheet, "--sheet")
        delimiter = validate_delimiter(args.delimiter, "--delimiter") if args.delimiter else None
        workers = validate_worker_count(args.workers, "--workers") if args.workers is not None else None
        config = load_config(args.env_file).with_overrides(max_workers=workers, log_dir=args.log_dir)
    except (InvalidInputError, ConfigValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    setup_logger(level=config.log_level, format_type=config.log_format)

    pipeline = None
    try:
        pipeline = ValidationPipeline(
            rules_path=rules_path,
            grammar_path=grammar_path,
            log_dir=config.log_dir,
            max_workers=config.max_workers,
            sheet=sheet,
        )
        report = pipeline.validate_file(data_path, delimiter=delimiter)
        summary = pipeline.summary(report)
    except ParseError as e:
        logger.error(f"Rules file is invalid: {e}", exc_info=True)
        print(f"Error: {rules_path}: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except AccessFailure as e:
        logger.error(f"Input file access failed: {e}", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    finally:
        if pipeline is not None:
            pipeline.close()
        if args.metrics_file:
            write_metrics(args.metrics_file)

    print(
        f"{summary['rows']} rows, {summary['columns']} columns: "
        f"{summary['errors']} errors, {summary['warnings']} warnings"
    )
    if summary["failed_columns"]:
        print(f"Failed columns: {', '.join(summary['failed_columns'])}")
    if summary["failed_conditionals"]:
        print(f"Failed conditional rules: {', '.join(summary['failed_conditionals'])}")
    if summary["log_file"]:
        print(f"Report written to {summary['log_file']}")

    return EXIT_REPORT_ERRORS if report.has_errors else EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
