"""
Spreadsheet reader using pandas.
"""

import pandas as pd

from ruleval.core.models import Dataset
from ruleval.observability.logger import get_logger

logger = get_logger(__name__)


class SpreadsheetReader:
    """
    Reads one sheet of an Excel workbook.

    Cells are read as strings and pandas' default NA spellings are disabled,
    so "NA" or "null" reach the engine verbatim; only empty cells become None.
    """

    def __init__(self, sheet: str | int = 0):
        """
        Initialize spreadsheet reader.

        Args:
            sheet: Sheet name or 0-based index
        """
        self.sheet = sheet

    def read_frame(self, file_path: str) -> pd.DataFrame:
        return pd.read_excel(
            file_path,
            sheet_name=self.sheet,
            dtype=str,
            keep_default_na=False,
            na_values=[""],
        )

    def read(self, file_path: str) -> Dataset:
        """
        Read the configured sheet into a Dataset.

        Args:
            file_path: Path to the workbook

        Returns:
            Dataset with the sheet's header and rows
        """
        df = self.read_frame(file_path)
        header = tuple(str(column) for column in df.columns)
        rows = [
            {column: (None if pd.isna(value) else str(value)) for column, value in zip(header, values)}
            for values in df.itertuples(index=False, name=None)
        ]
        logger.info(f"Read {len(rows)} rows from {file_path}", extra={"sheet": str(self.sheet)})

        return Dataset(header=header, rows=rows, source=file_path)
