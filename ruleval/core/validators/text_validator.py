"""
Text validators: equality, set membership, length and substrings.

All of them work on the trimmed raw text of the cell and fail null cells.
"""

from ruleval.core.models import RuleKind
from ruleval.core.schema import TypedValue, parse_number

from .base_validator import BaseValidator, Cell


class TextEqualityValidator(BaseValidator):
    """Validates ``is "s"`` and ``is not "s"`` (exact, case-sensitive)."""

    def validate(self, cell: Cell) -> None:
        self.require_value(cell)

        expected = self.rule.argument
        if self.rule.kind is RuleKind.EQUALS_TEXT:
            if cell.text != expected:
                self.fail(f"value '{cell.text}' is not '{expected}'")
        elif cell.text == expected:
            self.fail(f"value must not be '{expected}'")

    @property
    def rule_type(self) -> str:
        return "text_equality"


class MembershipValidator(BaseValidator):
    """
    Validates ``is in [..]`` and ``is not in [..]``.

    String items match the cell text exactly. Numeric items match a cell whose
    number (the typed value, or the text read as floating point when the
    column has no numeric type) lies within precision of the item.
    """

    def __init__(self, column, rule, settings, catalog=None):
        super().__init__(column, rule, settings, catalog)
        self.texts = {item for item in rule.argument if isinstance(item, str)}
        self.numbers = [float(item) for item in rule.argument if not isinstance(item, str)]

    def _number(self, cell: Cell) -> float | None:
        if isinstance(cell.typed, TypedValue) and cell.typed.is_real_number:
            return float(cell.typed.value)
        parsed = parse_number(cell.text, self.settings)
        return parsed[0] if parsed else None

    def contains(self, cell: Cell) -> bool:
        if cell.text in self.texts:
            return True
        if not self.numbers:
            return False

        value = self._number(cell)
        if value is None:
            return False
        return any(abs(value - number) < self.settings.precision for number in self.numbers)

    def validate(self, cell: Cell) -> None:
        self.require_value(cell)

        found = self.contains(cell)
        if self.rule.kind is RuleKind.IN_SET and not found:
            self.fail(f"value '{cell.text}' is not one of the allowed values")
        if self.rule.kind is RuleKind.NOT_IN_SET and found:
            self.fail(f"value '{cell.text}' is one of the excluded values")

    @property
    def rule_type(self) -> str:
        return "membership"


class LengthValidator(BaseValidator):
    """Validates ``has length n``, ``has min length n`` and ``has max length n``."""

    def validate(self, cell: Cell) -> None:
        self.require_value(cell)

        length = len(cell.text)
        limit = self.rule.argument
        kind = self.rule.kind

        if kind is RuleKind.HAS_LENGTH and length != limit:
            self.fail(f"length {length} is not {limit}")
        if kind is RuleKind.MIN_LENGTH and length < limit:
            self.fail(f"length {length} is less than minimum {limit}")
        if kind is RuleKind.MAX_LENGTH and length > limit:
            self.fail(f"length {length} exceeds maximum {limit}")

    @property
    def rule_type(self) -> str:
        return "length"


class SubstringValidator(BaseValidator):
    """Validates ``starts with``, ``ends with``, ``includes`` and ``excludes``."""

    def validate(self, cell: Cell) -> None:
        self.require_value(cell)

        text = cell.text
        part = self.rule.argument
        kind = self.rule.kind

        if kind is RuleKind.STARTS_WITH and not text.startswith(part):
            self.fail(f"value '{text}' does not start with '{part}'")
        if kind is RuleKind.ENDS_WITH and not text.endswith(part):
            self.fail(f"value '{text}' does not end with '{part}'")
        if kind is RuleKind.INCLUDES and part not in text:
            self.fail(f"value '{text}' does not include '{part}'")
        if kind is RuleKind.EXCLUDES_SUBSTRING and part in text:
            self.fail(f"value '{text}' includes excluded text '{part}'")

    @property
    def rule_type(self) -> str:
        return "substring"
