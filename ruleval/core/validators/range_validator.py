"""
ComparisonValidator - numeric comparisons with precision tolerance.
"""

from ruleval.core.models import RuleKind
from ruleval.core.models.value_rule import format_number

from .base_validator import BaseValidator, Cell


class ComparisonValidator(BaseValidator):
    """
    Validates a numeric cell against ``== != > < >= <=``.

    Equality uses the configured precision: a and b are equal when
    ``abs(a - b) < precision``. ``>`` and ``<`` are exact; ``>=`` and ``<=``
    also accept a difference below precision.
    """

    requires_type = True

    OPERATORS = {
        RuleKind.EQUALS_NUMBER: "==",
        RuleKind.NOT_EQUALS_NUMBER: "!=",
        RuleKind.GREATER_THAN: ">",
        RuleKind.LESS_THAN: "<",
        RuleKind.GREATER_OR_EQUAL: ">=",
        RuleKind.LESS_OR_EQUAL: "<=",
    }

    def __init__(self, column, rule, settings, catalog=None):
        super().__init__(column, rule, settings, catalog)
        self.bound = float(rule.argument)
        self.operator = self.OPERATORS[rule.kind]

    def compare(self, value: float) -> bool:
        """Apply the rule's operator to ``value``."""
        close = abs(value - self.bound) < self.settings.precision
        kind = self.rule.kind

        if kind is RuleKind.EQUALS_NUMBER:
            return close
        if kind is RuleKind.NOT_EQUALS_NUMBER:
            return not close
        if kind is RuleKind.GREATER_THAN:
            return value > self.bound
        if kind is RuleKind.LESS_THAN:
            return value < self.bound
        if kind is RuleKind.GREATER_OR_EQUAL:
            return value > self.bound or close
        return value < self.bound or close

    def validate(self, cell: Cell) -> None:
        self.require_value(cell)
        typed = self.typed_value(cell)

        if not typed.is_real_number:
            self.fail(f"value '{cell.text}' is not a real number ({typed.value_type.value})")

        if not self.compare(float(typed.value)):
            self.fail(f"value {cell.text} is not {self.operator} {format_number(self.bound)}")

    @property
    def rule_type(self) -> str:
        return "comparison"
