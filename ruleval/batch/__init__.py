"""
File-based validation runs.
"""

from .pipeline import ValidationPipeline
from .readers import CSVReader, FileReader, SpreadsheetReader

__all__ = [
    "ValidationPipeline",
    "CSVReader",
    "FileReader",
    "SpreadsheetReader",
]
