"""
Value-rule implementations.

Provides validators for types and formats, nulls and uniqueness, patterns,
numeric comparisons, text rules, and digit counts.
"""

from .base_validator import NO_TYPE_DECLARED, BaseValidator, Cell, ValidationError
from .digits_validator import DigitsValidator
from .range_validator import ComparisonValidator
from .regex_validator import RegexValidator
from .required_field_validator import NullValidator, RequiredFieldValidator, UniqueValidator
from .text_validator import LengthValidator, MembershipValidator, SubstringValidator, TextEqualityValidator
from .type_validator import FormatValidator, TypeValidator

__all__ = [
    "NO_TYPE_DECLARED",
    "BaseValidator",
    "Cell",
    "ValidationError",
    "TypeValidator",
    "FormatValidator",
    "RequiredFieldValidator",
    "NullValidator",
    "UniqueValidator",
    "RegexValidator",
    "ComparisonValidator",
    "TextEqualityValidator",
    "MembershipValidator",
    "LengthValidator",
    "SubstringValidator",
    "DigitsValidator",
]
