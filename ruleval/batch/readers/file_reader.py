"""
Generic file reader for multiple formats (delimited text, spreadsheets).
"""

from pathlib import Path

from pyspark.sql import SparkSession

from ruleval.core.errors import DataFileAccessError
from ruleval.core.models import Dataset
from ruleval.observability.logger import get_logger

from .csv_reader import CSVReader, create_spark_session
from .spreadsheet_reader import SpreadsheetReader

logger = get_logger(__name__)

DELIMITED_SUFFIXES = {".csv": ",", ".tsv": "\t", ".txt": ","}
SPREADSHEET_SUFFIXES = {".xlsx", ".xlsm"}


class FileReader:
    """
    Generic file reader choosing a reader by file suffix.

    A Spark session is only started when a delimited file is read. A session
    created here is stopped by close().
    """

    def __init__(self, spark: SparkSession | None = None, sheet: str | int = 0):
        """
        Initialize file reader.

        Args:
            spark: Active Spark session (created on demand if None)
            sheet: Sheet to read from spreadsheets
        """
        self.spark = spark
        self.sheet = sheet
        self._owns_spark = False

    @staticmethod
    def file_format(file_path: str | Path) -> str:
        """
        Determine the format of a file from its suffix.

        Raises:
            DataFileAccessError: If the suffix is not supported
        """
        suffix = Path(file_path).suffix.lower()
        if suffix in DELIMITED_SUFFIXES:
            return "delimited"
        if suffix in SPREADSHEET_SUFFIXES:
            return "spreadsheet"
        supported = ", ".join(sorted(set(DELIMITED_SUFFIXES) | SPREADSHEET_SUFFIXES))
        raise DataFileAccessError(str(file_path), f"unsupported file type '{suffix}' (expected one of: {supported})")

    def read(self, file_path: str | Path, delimiter: str | None = None) -> Dataset:
        """
        Read a data file into a Dataset.

        Args:
            file_path: Path to the file
            delimiter: Field delimiter for delimited files (default by suffix)

        Returns:
            Dataset

        Raises:
            DataFileAccessError: If the file is missing, unsupported or unreadable
        """
        path = Path(file_path)
        if not path.is_file():
            raise DataFileAccessError(str(file_path), "file not found")

        file_format = self.file_format(path)
        try:
            if file_format == "spreadsheet":
                return SpreadsheetReader(self.sheet).read(str(path))

            if self.spark is None:
                logger.info("Creating Spark session...")
                self.spark = create_spark_session()
                self._owns_spark = True
            separator = delimiter or DELIMITED_SUFFIXES[path.suffix.lower()]
            return CSVReader(self.spark).read(str(path), delimiter=separator)
        except DataFileAccessError:
            raise
        except Exception as e:
            logger.error(f"Failed to read data file {path}: {e}", exc_info=True)
            raise DataFileAccessError(str(file_path), str(e)) from e

    def close(self) -> None:
        """Stop the Spark session if this reader created it."""
        if self._owns_spark and self.spark is not None:
            self.spark.stop()
            self.spark = None
            self._owns_spark = False
