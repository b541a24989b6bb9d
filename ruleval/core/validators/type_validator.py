"""
TypeValidator and FormatValidator - declared value type and date-time format.
"""

from ruleval.core.schema import CoercionFailure, coerce

from .base_validator import BaseValidator, Cell


class TypeValidator(BaseValidator):
    """
    Validates that a cell coerces to the declared value type.

    Null cells are skipped (use ``is required`` / ``is not null`` for those).
    """

    def validate(self, cell: Cell) -> None:
        if cell.is_null:
            return

        result = coerce(cell.raw, self.rule.value_type, self.settings, self.catalog)
        if isinstance(result, CoercionFailure):
            self.fail(f"'{cell.text}': {result.reason} ({self.rule.value_type.value})")

    @property
    def rule_type(self) -> str:
        return "type_check"


class FormatValidator(BaseValidator):
    """
    Validates that a cell matches one specific date-time format.

    A type check alone accepts any catalog format; this rule narrows it to one.
    """

    def __init__(self, column, rule, settings, catalog=None):
        super().__init__(column, rule, settings, catalog)

        if rule.argument not in self.catalog:
            raise ValueError(f"Unsupported date format: {rule.argument}")
        self.date_format = self.catalog.get(rule.argument)

    def validate(self, cell: Cell) -> None:
        if cell.is_null:
            return

        if self.date_format.parse(cell.text) is None:
            self.fail(f"'{cell.text}' does not match format '{self.date_format.name}'")

    @property
    def rule_type(self) -> str:
        return "format"
