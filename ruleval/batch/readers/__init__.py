"""
Data file readers.
"""

from .csv_reader import CSVReader, create_spark_session
from .file_reader import FileReader
from .spreadsheet_reader import SpreadsheetReader

__all__ = [
    "CSVReader",
    "FileReader",
    "SpreadsheetReader",
    "create_spark_session",
]
