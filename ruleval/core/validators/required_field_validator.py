"""
Null-related validators: required / not null, null, and uniqueness.
"""

from collections import Counter
from typing import Any

from ruleval.core.schema import TypedValue

from .base_validator import BaseValidator, Cell


class RequiredFieldValidator(BaseValidator):
    """
    Validates that a cell holds a value (``is required`` and ``is not null``).

    Fails if the cell is None, empty after trimming, or a declared null literal.
    """

    def validate(self, cell: Cell) -> None:
        if cell.is_null:
            if cell.raw is None or not cell.text:
                self.fail("value is missing")
            self.fail(f"value '{cell.text}' is a null literal")

    @property
    def rule_type(self) -> str:
        return "required_field"


class NullValidator(BaseValidator):
    """Validates that a cell is null (``is null``)."""

    def validate(self, cell: Cell) -> None:
        if not cell.is_null:
            self.fail(f"expected null, got '{cell.text}'")

    @property
    def rule_type(self) -> str:
        return "null"


class UniqueValidator(BaseValidator):
    """
    Validates that no non-null value occurs twice in the column.

    Every occurrence of a duplicated value fails. Cells that coerced to the
    declared type are compared by typed value ("1.0" equals "1" for floating
    point); date-times also by the format they were written in, so "2001" and
    "2001-01-01" are distinct. Other cells compare by trimmed text. Nulls are
    ignored.
    """

    def __init__(self, column, rule, settings, catalog=None):
        super().__init__(column, rule, settings, catalog)
        self.counts: Counter = Counter()

    @staticmethod
    def _key(cell: Cell) -> Any:
        if isinstance(cell.typed, TypedValue) and not cell.typed.is_null:
            return ("typed", cell.typed.value, cell.typed.format_name)
        return ("text", cell.text)

    def prepare(self, cells: list[Cell]) -> None:
        self.counts = Counter(self._key(cell) for cell in cells if not cell.is_null)

    def validate(self, cell: Cell) -> None:
        if cell.is_null:
            return

        count = self.counts.get(self._key(cell), 0)
        if count > 1:
            self.fail(f"duplicate value '{cell.text}' ({count} occurrences)")

    @property
    def rule_type(self) -> str:
        return "unique"
