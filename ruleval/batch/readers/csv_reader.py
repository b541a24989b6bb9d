"""
CSV reader using Spark for batch processing.
"""

from pyspark.sql import DataFrame, SparkSession

from ruleval.core.models import Dataset
from ruleval.observability.logger import get_logger

logger = get_logger(__name__)


def create_spark_session(app_name: str = "ruleval") -> SparkSession:
    """
    Create Spark session for reading delimited files.

    Args:
        app_name: Application name

    Returns:
        SparkSession
    """
    spark = SparkSession.builder \
        .appName(app_name) \
        .master("local[*]") \
        .config("spark.sql.adaptive.enabled", "true") \
        .config("spark.ui.enabled", "false") \
        .getOrCreate()

    return spark


class CSVReader:
    """
    Reads delimited text files using Spark.

    Every column is read as a string: typing is the rule engine's job, so no
    schema is inferred. Empty cells become None.
    """

    def __init__(self, spark: SparkSession):
        """
        Initialize CSV reader.

        Args:
            spark: Active Spark session
        """
        self.spark = spark

    def read_frame(
        self,
        file_path: str,
        header: bool = True,
        delimiter: str = ",",
        encoding: str = "UTF-8",
    ) -> DataFrame:
        """
        Read a delimited file into a Spark DataFrame of strings.

        Args:
            file_path: Path to the file
            header: Whether the first line is a header row
            delimiter: Field delimiter
            encoding: File encoding

        Returns:
            Spark DataFrame
        """
        df = self.spark.read \
            .option("header", str(header).lower()) \
            .option("inferSchema", "false") \
            .option("delimiter", delimiter) \
            .option("encoding", encoding) \
            .option("mode", "PERMISSIVE") \
            .csv(file_path)

        return df

    def read(self, file_path: str, delimiter: str = ",", **options) -> Dataset:
        """
        Read a delimited file into a Dataset.

        Args:
            file_path: Path to the file
            delimiter: Field delimiter
            **options: Passed to read_frame()

        Returns:
            Dataset with the file's header and rows in file order
        """
        df = self.read_frame(file_path, delimiter=delimiter, **options)
        header = tuple(df.columns)
        rows = [row.asDict() for row in df.collect()]
        logger.info(f"Read {len(rows)} rows from {file_path}", extra={"columns": len(header)})

        return Dataset(header=header, rows=rows, source=file_path)
