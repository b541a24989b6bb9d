"""
Value typing: type coercion and the date-time format catalog.
"""

from .coercion import CoercionFailure, TypedValue, coerce, is_null, parse_number, render_canonical
from .date_formats import DateFormat, DateFormatCatalog, default_catalog

__all__ = [
    "CoercionFailure",
    "TypedValue",
    "coerce",
    "is_null",
    "parse_number",
    "render_canonical",
    "DateFormat",
    "DateFormatCatalog",
    "default_catalog",
]
