"""
DigitsValidator - significant digits and decimal places of numeric cells.
"""

from decimal import Decimal, InvalidOperation

from ruleval.core.models import RuleKind

from .base_validator import BaseValidator, Cell


def count_digits(text: str) -> tuple[int, int]:
    """
    Count significant digits and decimal places of a normalized number.

    Leading zeros are not significant; trailing zeros are ("1.50" has three
    significant digits and two decimal places).

    Returns:
        Tuple of (significant_digits, decimal_places)
    """
    number = Decimal(text)
    _, digits, exponent = number.as_tuple()
    return len(digits), max(0, -exponent)


class DigitsValidator(BaseValidator):
    """
    Validates ``has significant digits n`` and ``has decimal places n``.

    Counts are taken from the cell as written (after separator normalization),
    so "2.50" has two decimal places even though it equals 2.5.
    """

    requires_type = True

    def validate(self, cell: Cell) -> None:
        self.require_value(cell)
        typed = self.typed_value(cell)

        if not typed.is_real_number:
            self.fail(f"value '{cell.text}' is not a real number ({typed.value_type.value})")

        try:
            significant, places = count_digits(typed.text)
        except InvalidOperation:
            self.fail(f"value '{cell.text}' is not a decimal number")

        expected = self.rule.argument
        if self.rule.kind is RuleKind.SIGNIFICANT_DIGITS and significant != expected:
            self.fail(f"value '{cell.text}' has {significant} significant digits, expected {expected}")
        if self.rule.kind is RuleKind.DECIMAL_PLACES and places != expected:
            self.fail(f"value '{cell.text}' has {places} decimal places, expected {expected}")

    @property
    def rule_type(self) -> str:
        return "digits"
