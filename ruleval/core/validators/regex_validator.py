"""
RegexValidator - validates cell text against a regular expression pattern.
"""

from .base_validator import BaseValidator, Cell


class RegexValidator(BaseValidator):
    """
    Validates that the whole trimmed cell text matches a pattern.

    The pattern is compiled when the rules file is parsed.
    """

    def __init__(self, column, rule, settings, catalog=None):
        super().__init__(column, rule, settings, catalog)
        self.pattern = rule.argument

    def validate(self, cell: Cell) -> None:
        self.require_value(cell)

        if not self.pattern.fullmatch(cell.text):
            self.fail(f"value '{cell.text}' does not match pattern /{self.pattern.pattern}/")

    @property
    def rule_type(self) -> str:
        return "regex"
