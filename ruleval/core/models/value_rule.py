"""
ValueRule model: a single atomic constraint applied to one column.

A ValueRule is a closed tagged variant. The ``kind`` selects the predicate and
fixes the Python type of the single ``argument``:

- no argument: required, unique, is null, is not null
- text: format, equals/not equals text, starts/ends with, includes, excludes
- number: ``== != > < >= <=`` comparisons
- count: length, min/max length, significant digits, decimal places
- items: in set / not in set
- pattern: compiled regular expression
- value type: the declared type of the column
"""

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class ValueType(str, Enum):
    """Value types a column can declare with ``has value type``."""

    INTEGER = "integer"
    FLOATING_POINT = "floating point"
    SCIENTIFIC = "scientific"
    COMPLEX = "complex"
    BOOLEAN = "boolean"
    DATE_TIME = "date-time"
    STRING = "string"


# Alternate spellings accepted in rules files
VALUE_TYPE_ALIASES = {
    "float": ValueType.FLOATING_POINT,
    "datetime": ValueType.DATE_TIME,
}

NUMERIC_TYPES = frozenset({
    ValueType.INTEGER,
    ValueType.FLOATING_POINT,
    ValueType.SCIENTIFIC,
    ValueType.COMPLEX,
})


class RuleKind(str, Enum):
    """Every supported value-rule variant."""

    TYPE_IS = "type_is"
    FORMAT_IS = "format_is"
    REQUIRED = "required"
    UNIQUE = "unique"
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"
    MATCHES_PATTERN = "matches_pattern"
    IN_SET = "in_set"
    NOT_IN_SET = "not_in_set"
    EQUALS_TEXT = "equals_text"
    NOT_EQUALS_TEXT = "not_equals_text"
    EQUALS_NUMBER = "equals_number"
    NOT_EQUALS_NUMBER = "not_equals_number"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_OR_EQUAL = "greater_or_equal"
    LESS_OR_EQUAL = "less_or_equal"
    HAS_LENGTH = "has_length"
    MIN_LENGTH = "min_length"
    MAX_LENGTH = "max_length"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    INCLUDES = "includes"
    EXCLUDES_SUBSTRING = "excludes_substring"
    SIGNIFICANT_DIGITS = "significant_digits"
    DECIMAL_PLACES = "decimal_places"


_NO_ARGUMENT = frozenset({
    RuleKind.REQUIRED,
    RuleKind.UNIQUE,
    RuleKind.IS_NULL,
    RuleKind.IS_NOT_NULL,
})
_TEXT_ARGUMENT = frozenset({
    RuleKind.FORMAT_IS,
    RuleKind.EQUALS_TEXT,
    RuleKind.NOT_EQUALS_TEXT,
    RuleKind.STARTS_WITH,
    RuleKind.ENDS_WITH,
    RuleKind.INCLUDES,
    RuleKind.EXCLUDES_SUBSTRING,
})
_NUMBER_ARGUMENT = frozenset({
    RuleKind.EQUALS_NUMBER,
    RuleKind.NOT_EQUALS_NUMBER,
    RuleKind.GREATER_THAN,
    RuleKind.LESS_THAN,
    RuleKind.GREATER_OR_EQUAL,
    RuleKind.LESS_OR_EQUAL,
})
_COUNT_ARGUMENT = frozenset({
    RuleKind.HAS_LENGTH,
    RuleKind.MIN_LENGTH,
    RuleKind.MAX_LENGTH,
    RuleKind.SIGNIFICANT_DIGITS,
    RuleKind.DECIMAL_PLACES,
})
_ITEMS_ARGUMENT = frozenset({RuleKind.IN_SET, RuleKind.NOT_IN_SET})

# Source-form templates, used to identify rules in reports
RULE_SYNTAX = {
    RuleKind.TYPE_IS: "has value type {}",
    RuleKind.FORMAT_IS: 'has format "{}"',
    RuleKind.REQUIRED: "is required",
    RuleKind.UNIQUE: "is unique",
    RuleKind.IS_NULL: "is null",
    RuleKind.IS_NOT_NULL: "is not null",
    RuleKind.MATCHES_PATTERN: "matches /{}/",
    RuleKind.IN_SET: "is in [{}]",
    RuleKind.NOT_IN_SET: "is not in [{}]",
    RuleKind.EQUALS_TEXT: 'is "{}"',
    RuleKind.NOT_EQUALS_TEXT: 'is not "{}"',
    RuleKind.EQUALS_NUMBER: "is == {}",
    RuleKind.NOT_EQUALS_NUMBER: "is != {}",
    RuleKind.GREATER_THAN: "is > {}",
    RuleKind.LESS_THAN: "is < {}",
    RuleKind.GREATER_OR_EQUAL: "is >= {}",
    RuleKind.LESS_OR_EQUAL: "is <= {}",
    RuleKind.HAS_LENGTH: "has length {}",
    RuleKind.MIN_LENGTH: "has min length {}",
    RuleKind.MAX_LENGTH: "has max length {}",
    RuleKind.STARTS_WITH: 'starts with "{}"',
    RuleKind.ENDS_WITH: 'ends with "{}"',
    RuleKind.INCLUDES: 'includes "{}"',
    RuleKind.EXCLUDES_SUBSTRING: 'excludes "{}"',
    RuleKind.SIGNIFICANT_DIGITS: "has significant digits {}",
    RuleKind.DECIMAL_PLACES: "has decimal places {}",
}


def format_number(value: float) -> str:
    """Render a rule literal without a spurious trailing ``.0``."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


class ValueRule(BaseModel):
    """
    A single per-column constraint.

    Attributes:
        kind: Which predicate this rule applies
        argument: Kind-specific argument (see module docstring)
        line: Line in the rules file the rule was declared on (reporting only)
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: RuleKind
    argument: Any = None
    line: int | None = None

    @field_validator("argument", mode="before")
    @classmethod
    def freeze_items(cls, v):
        """Lists become tuples so the rule stays hashable."""
        if isinstance(v, list):
            return tuple(v)
        return v

    @model_validator(mode="after")
    def check_argument(self):
        """Validate that the argument matches the rule kind."""
        kind, arg = self.kind, self.argument

        if kind in _NO_ARGUMENT:
            if arg is not None:
                raise ValueError(f"{kind.value} takes no argument")
        elif kind is RuleKind.TYPE_IS:
            if not isinstance(arg, ValueType):
                raise ValueError("type_is requires a ValueType argument")
        elif kind in _TEXT_ARGUMENT:
            if not isinstance(arg, str):
                raise ValueError(f"{kind.value} requires a string argument")
        elif kind in _NUMBER_ARGUMENT:
            if isinstance(arg, bool) or not isinstance(arg, int | float):
                raise ValueError(f"{kind.value} requires a numeric argument")
        elif kind in _COUNT_ARGUMENT:
            if isinstance(arg, bool) or not isinstance(arg, int) or arg < 0:
                raise ValueError(f"{kind.value} requires a non-negative integer argument")
        elif kind in _ITEMS_ARGUMENT:
            if not isinstance(arg, tuple) or not all(
                isinstance(item, str | int | float) and not isinstance(item, bool) for item in arg
            ):
                raise ValueError(f"{kind.value} requires a list of strings or numbers")
        elif kind is RuleKind.MATCHES_PATTERN:
            if not isinstance(arg, re.Pattern):
                raise ValueError("matches_pattern requires a compiled pattern")

        return self

    @property
    def value_type(self) -> ValueType | None:
        """Declared type if this is a TypeIs rule."""
        return self.argument if self.kind is RuleKind.TYPE_IS else None

    def describe(self) -> str:
        """Render the rule back to its rules-file form."""
        template = RULE_SYNTAX[self.kind]
        arg = self.argument

        if self.kind in _NO_ARGUMENT:
            return template
        if self.kind is RuleKind.TYPE_IS:
            return template.format(arg.value)
        if self.kind is RuleKind.MATCHES_PATTERN:
            return template.format(arg.pattern)
        if self.kind in _NUMBER_ARGUMENT:
            return template.format(format_number(arg))
        if self.kind in _ITEMS_ARGUMENT:
            rendered = [
                f'"{item}"' if isinstance(item, str) else format_number(item)
                for item in arg
            ]
            return template.format(", ".join(rendered))
        return template.format(arg)

    def __str__(self) -> str:
        return self.describe()
