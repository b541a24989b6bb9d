"""
Dataset model: the tabular input handed to the rule engine.

Readers (delimited text, spreadsheets) convert physical files into a Dataset;
the engine never sees the file format.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Dataset(BaseModel):
    """
    An ordered header plus rows of raw cell values.

    ``None`` is the native null marker. Rows may omit columns; a missing key
    reads as ``None``.

    Attributes:
        header: Actual column names, in physical order
        rows: One mapping of column name to raw string (or None) per row
        source: Where the data came from (file path or description)
    """

    model_config = ConfigDict(frozen=True)

    header: tuple[str, ...]
    rows: tuple[dict[str, str | None], ...] = ()
    source: str | None = None

    @model_validator(mode="before")
    @classmethod
    def stringify_cells(cls, data: Any) -> Any:
        """Non-string cells (numbers, booleans from readers) become strings."""
        if isinstance(data, dict) and "rows" in data:
            data = dict(data)
            data["rows"] = tuple(
                {
                    str(key): (None if value is None else str(value))
                    for key, value in row.items()
                }
                for row in data["rows"]
            )
        return data

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.header)

    def has_column(self, column: str) -> bool:
        return column in self.header

    def column_values(self, column: str) -> list[str | None]:
        """Raw values of one column, in row order."""
        return [row.get(column) for row in self.rows]

    @classmethod
    def from_records(cls, records: list[dict[str, Any]], header: list[str] | None = None) -> "Dataset":
        """
        Build a Dataset from a list of dicts.

        Args:
            records: Row mappings
            header: Explicit header; defaults to keys in first-seen order

        Returns:
            Dataset
        """
        if header is None:
            header = []
            for record in records:
                for key in record:
                    if key not in header:
                        header.append(key)
        return cls(header=tuple(header), rows=tuple(records))
