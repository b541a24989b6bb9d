"""
Base validator interface for all value rules.

All validators must inherit from BaseValidator and implement the validate() method.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ruleval.core.models import GlobalSettings, ValueRule
from ruleval.core.schema import CoercionFailure, DateFormatCatalog, TypedValue, default_catalog

NO_TYPE_DECLARED = "no type declared"


class ValidationError(Exception):
    """Raised when a cell fails a value rule."""

    def __init__(self, rule_name: str, field_name: str, message: str):
        self.rule_name = rule_name
        self.field_name = field_name
        self.message = message
        super().__init__(f"[{rule_name}] {field_name}: {message}")


@dataclass(frozen=True)
class Cell:
    """
    One cell as seen by a validator.

    Attributes:
        row: 1-based data row number
        raw: Raw cell value (None is the native null marker)
        text: Trimmed raw value ("" for None)
        is_null: Whether the cell is null under the active settings
        typed: Coercion result for the declared type, or None when no type is declared
    """

    row: int
    raw: str | None
    text: str
    is_null: bool
    typed: TypedValue | CoercionFailure | None = None


class BaseValidator(ABC):
    """
    Abstract base class for all validators.

    Each validator implements one family of value-rule kinds. Validators are
    created per evaluation and may keep state gathered in prepare().
    """

    # Rules that need a typed value fail every row when the column declares no type
    requires_type = False

    def __init__(
        self,
        column: str,
        rule: ValueRule,
        settings: GlobalSettings,
        catalog: DateFormatCatalog | None = None,
    ):
        """
        Initialize validator.

        Args:
            column: Name of the column being validated
            rule: The value rule to apply
            settings: Active global settings (null literals, separator, precision)
            catalog: Date-format catalog
        """
        self.column = column
        self.rule = rule
        self.settings = settings
        self.catalog = catalog or default_catalog()

    def prepare(self, cells: list[Cell]) -> None:
        """Inspect the whole column before per-cell validation (no-op by default)."""

    @abstractmethod
    def validate(self, cell: Cell) -> None:
        """
        Validate one cell against this rule.

        Args:
            cell: The cell to validate

        Raises:
            ValidationError: If the cell fails the rule
        """
        pass

    @property
    @abstractmethod
    def rule_type(self) -> str:
        """Return the rule family identifier."""
        pass

    def fail(self, message: str) -> None:
        raise ValidationError(rule_name=self.rule.describe(), field_name=self.column, message=message)

    def require_value(self, cell: Cell) -> None:
        """Fail null cells."""
        if cell.is_null:
            self.fail("value is null")

    def typed_value(self, cell: Cell) -> TypedValue:
        """Return the coerced value, failing when there is none."""
        if cell.typed is None:
            self.fail(NO_TYPE_DECLARED)
        if isinstance(cell.typed, CoercionFailure):
            self.fail(f"'{cell.text}': {cell.typed.reason}")
        return cell.typed

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(column={self.column}, rule={self.rule.describe()!r})"
