"""
Validation pipeline orchestration.

Coordinates the flow: load rules → read data → evaluate → write report log
"""

from pathlib import Path
from typing import Any

from pyspark.sql import SparkSession

from ruleval.batch.readers import FileReader
from ruleval.core.models import Dataset, ValidationReport
from ruleval.core.rules import RuleEngine, RulesFileLoader
from ruleval.core.schema import DateFormatCatalog, default_catalog
from ruleval.observability.logger import get_logger, log_operation
from ruleval.observability.metrics import phase_duration_seconds, track_duration
from ruleval.observability.report_log import ReportLogWriter

logger = get_logger(__name__)


class ValidationPipeline:
    """
    Orchestrates a complete validation run.

    Flow:
    1. Load the date-format reference and the rules file (fatal on failure)
    2. Read the data file into a Dataset (fatal on failure)
    3. Evaluate the ruleset
    4. Write the report log, if a log directory is configured
    """

    def __init__(
        self,
        rules_path: str | Path,
        grammar_path: str | Path | None = None,
        spark: SparkSession | None = None,
        log_dir: str | Path | None = None,
        max_workers: int = 1,
        sheet: str | int = 0,
    ):
        """
        Initialize the validation pipeline.

        Args:
            rules_path: Path to the rules file
            grammar_path: Date-format reference YAML (packaged catalog if None)
            spark: Active Spark session for delimited files (created on demand)
            log_dir: Directory for report logs (no log file if None)
            max_workers: Worker threads for evaluation
            sheet: Sheet to read from spreadsheets

        Raises:
            ReferenceFileAccessError: If the reference file cannot be read
            RulesFileAccessError: If the rules file cannot be read
            ParseError: If the rules are malformed
        """
        self.catalog: DateFormatCatalog = (
            DateFormatCatalog.from_yaml(grammar_path) if grammar_path else default_catalog()
        )

        with track_duration(phase_duration_seconds, phase="parse"):
            self.ruleset = RulesFileLoader(rules_path, catalog=self.catalog).load()

        self.rule_engine = RuleEngine(self.ruleset, catalog=self.catalog, max_workers=max_workers)
        self.file_reader = FileReader(spark, sheet=sheet)
        self.report_writer = ReportLogWriter(log_dir) if log_dir else None
        self.last_log_path: Path | None = None

    def validate_dataset(self, dataset: Dataset) -> ValidationReport:
        """
        Evaluate an in-memory dataset and write the report log.

        Args:
            dataset: Data to validate

        Returns:
            ValidationReport
        """
        with log_operation("Evaluating ruleset", logger=logger, source=dataset.source):
            report = self.rule_engine.evaluate(dataset)

        if self.report_writer is not None:
            self.last_log_path = self.report_writer.write(report)
        return report

    def validate_file(self, data_path: str | Path, delimiter: str | None = None) -> ValidationReport:
        """
        Read and validate a data file.

        Args:
            data_path: Path to a delimited or spreadsheet file
            delimiter: Field delimiter for delimited files

        Returns:
            ValidationReport

        Raises:
            DataFileAccessError: If the data file cannot be read
        """
        logger.info(f"Reading data file: {data_path}")
        dataset = self.file_reader.read(data_path, delimiter=delimiter)
        return self.validate_dataset(dataset)

    def summary(self, report: ValidationReport) -> dict[str, Any]:
        """
        Summarize a report for display.

        Returns:
            Dictionary with row/column counts, finding counts and failing
            columns and conditional rules
        """
        return {
            "rows": report.row_count,
            "columns": report.column_count,
            "errors": len(report.errors),
            "warnings": len(report.warnings),
            "failed_columns": [outcome.column for outcome in report.columns if not outcome.all_ok],
            "failed_conditionals": [
                outcome.name for outcome in report.conditionals if outcome.status == "failed"
            ],
            "log_file": str(self.last_log_path) if self.last_log_path else None,
        }

    def close(self) -> None:
        """Release the Spark session if the pipeline started one."""
        self.file_reader.close()
