"""
Type coercion engine.

Converts a raw cell string into a typed value for a declared ValueType under
the active GlobalSettings (null literals, thousands separator, date-format
catalog). Coercion never raises for bad data: it returns a CoercionFailure
that the evaluator records as a rule failure for that cell.
"""

import cmath
import math
import re
from dataclasses import dataclass, field
from typing import Any

from ruleval.core.models import GlobalSettings, ValueType

from .date_formats import DateFormatCatalog, default_catalog

# Unsigned real literal: 12, 12.5, .5, 12., 1.5e3
_REAL = r"(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?"

NUMBER_PATTERNS = {
    ValueType.INTEGER: re.compile(r"[+-]?\d+"),
    ValueType.FLOATING_POINT: re.compile(rf"[+-]?{_REAL}"),
    ValueType.SCIENTIFIC: re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)[eE][+-]?\d+"),
    ValueType.COMPLEX: re.compile(
        rf"[+-]?{_REAL}(?:[+-](?:{_REAL})?[jJ])?|[+-]?(?:{_REAL})?[jJ]"
    ),
}

BOOLEAN_LITERALS = {"true": True, "false": False}

TYPE_MISMATCH = "value does not match declared type"


@dataclass(frozen=True)
class TypedValue:
    """
    A successfully coerced cell.

    ``value`` is None for nulls. ``text`` is the normalized source text
    (separators stripped, decimal mark mapped to ``.``) and is not part of
    equality.

    Attributes:
        value: int, float, complex, bool, datetime, str or None
        value_type: Type the cell was coerced to
        text: Normalized text the value was parsed from
        format_name: Matching date-time format, for date-time values
    """

    value: Any
    value_type: ValueType
    text: str = field(default="", compare=False)
    format_name: str | None = None

    @property
    def is_null(self) -> bool:
        return self.value is None

    @property
    def is_real_number(self) -> bool:
        return self.value_type in (
            ValueType.INTEGER,
            ValueType.FLOATING_POINT,
            ValueType.SCIENTIFIC,
        ) and self.value is not None


@dataclass(frozen=True)
class CoercionFailure:
    """A cell that does not match its declared type."""

    raw: str
    value_type: ValueType
    reason: str = TYPE_MISMATCH

    def __str__(self) -> str:
        return f"'{self.raw}': {self.reason} ({self.value_type.value})"


def is_null(raw: str | None, settings: GlobalSettings) -> bool:
    """
    Check whether a raw cell is null.

    A cell is null if it is None (the native empty marker), empty after
    trimming, or exactly equal (after trimming) to a declared null literal.
    """
    if raw is None:
        return True
    text = raw.strip()
    return text == "" or text in settings.null_values


def normalize_number(text: str, settings: GlobalSettings) -> str:
    """
    Strip thousands separators and map the decimal mark to ``.``.

    The result is only a candidate; callers still match it against the
    grammar of the declared type.
    """
    separator = settings.thousands_separator
    if separator:
        text = text.replace(separator, "")
    if settings.decimal_mark != ".":
        text = text.replace(settings.decimal_mark, ".")
    return text


def parse_number(text: str, settings: GlobalSettings, value_type: ValueType = ValueType.FLOATING_POINT):
    """
    Parse a numeric literal under the given settings.

    Args:
        text: Literal text ("1.000,5")
        settings: Settings providing separator and decimal mark
        value_type: Numeric grammar to accept

    Returns:
        Tuple of (value, normalized_text), or None if the text is not a valid
        literal of that type
    """
    normalized = normalize_number(text.strip(), settings)
    if not NUMBER_PATTERNS[value_type].fullmatch(normalized):
        return None

    if value_type is ValueType.INTEGER:
        return int(normalized), normalized
    if value_type is ValueType.COMPLEX:
        value = complex(normalized)
        finite = cmath.isfinite(value)
    else:
        value = float(normalized)
        finite = math.isfinite(value)
    # 1e400 overflows to inf
    if not finite:
        return None
    return value, normalized


def coerce(
    raw: str | None,
    value_type: ValueType,
    settings: GlobalSettings,
    catalog: DateFormatCatalog | None = None,
) -> TypedValue | CoercionFailure:
    """
    Convert a raw cell into a typed value.

    Args:
        raw: Raw cell value (None is the native null marker)
        value_type: Declared type of the column
        settings: Active global settings
        catalog: Date-format catalog (defaults to the packaged catalog)

    Returns:
        TypedValue (possibly null) or CoercionFailure
    """
    if is_null(raw, settings):
        return TypedValue(None, value_type)

    text = raw.strip()

    if value_type is ValueType.STRING:
        return TypedValue(text, value_type, text)

    if value_type in NUMBER_PATTERNS:
        parsed = parse_number(text, settings, value_type)
        if parsed is None:
            return CoercionFailure(text, value_type)
        value, normalized = parsed
        return TypedValue(value, value_type, normalized)

    if value_type is ValueType.BOOLEAN:
        lowered = text.lower()
        if lowered not in BOOLEAN_LITERALS:
            return CoercionFailure(text, value_type)
        return TypedValue(BOOLEAN_LITERALS[lowered], value_type, lowered)

    if value_type is ValueType.DATE_TIME:
        matched = (catalog or default_catalog()).match(text)
        if matched is None:
            return CoercionFailure(text, value_type, "value does not match any supported date-time format")
        date_format, value = matched
        return TypedValue(value, value_type, text, date_format.name)

    raise ValueError(f"Unsupported value type: {value_type}")


def _localize(text: str, settings: GlobalSettings) -> str:
    if settings.decimal_mark != ".":
        return text.replace(".", settings.decimal_mark)
    return text


def render_canonical(
    typed: TypedValue,
    settings: GlobalSettings,
    catalog: DateFormatCatalog | None = None,
) -> str:
    """
    Render a typed value as text that coerces back to an equal value.

    Numbers are rendered without separators and with the settings' decimal
    mark; date-times in the format they were matched with.
    """
    value = typed.value
    if value is None:
        return ""

    if typed.value_type is ValueType.INTEGER:
        return str(value)
    if typed.value_type is ValueType.FLOATING_POINT:
        return _localize(repr(value), settings)
    if typed.value_type is ValueType.SCIENTIFIC:
        # 17 significant digits round-trip any double
        return _localize(format(value, ".16e"), settings)
    if typed.value_type is ValueType.COMPLEX:
        return _localize(repr(value).strip("()"), settings)
    if typed.value_type is ValueType.BOOLEAN:
        return "true" if value else "false"
    if typed.value_type is ValueType.DATE_TIME:
        date_format = (catalog or default_catalog()).get(typed.format_name)
        return date_format.render(value)
    return str(value)
