"""
Date-time format catalog.

A format is written with placeholder tokens (``YYYY-MM-DD``). Each format is
compiled to a fixed-width regular expression, so matching is structural:
``2001-1-1`` does not match ``YYYY-MM-DD`` and ``2001-13-01`` fails the
calendar check. The catalog is loaded from YAML (packaged default or a user
reference file).
"""

import re
from datetime import datetime
from functools import lru_cache
from importlib import resources
from pathlib import Path

import yaml

from ruleval.core.errors import ReferenceFileAccessError

# (token, field, pattern), longest tokens first so "YYYY" wins over "YY"
_TOKENS = (
    ("YYYY", "year", r"\d{4}"),
    ("MMM", "month_name", r"[A-Z][a-z]{2}"),
    ("fff", "millis", r"\d{3}"),
    ("YY", "year2", r"\d{2}"),
    ("MM", "month", r"\d{2}"),
    ("DD", "day", r"\d{2}"),
    ("hh", "hour", r"\d{2}"),
    ("mm", "minute", r"\d{2}"),
    ("ss", "second", r"\d{2}"),
)

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

# Fields that fill the same datetime component
_CONFLICTING_FIELDS = ({"year", "year2"}, {"month", "month_name"})


class DateFormat:
    """
    A single compiled date-time format.

    Attributes:
        name: Format as written in the catalog ("YYYY-MM-DD")
        fields: Datetime fields the format captures
    """

    def __init__(self, name: str):
        if not name:
            raise ValueError("Date format cannot be empty")

        self.name = name
        self._parts: list[tuple[str | None, str]] = []
        self.fields: list[str] = []

        pattern = []
        pos = 0
        while pos < len(name):
            for token, field, token_pattern in _TOKENS:
                if name.startswith(token, pos):
                    if field in self.fields:
                        raise ValueError(f"Date format '{name}' repeats token '{token}'")
                    self.fields.append(field)
                    self._parts.append((field, token))
                    pattern.append(f"(?P<{field}>{token_pattern})")
                    pos += len(token)
                    break
            else:
                self._parts.append((None, name[pos]))
                pattern.append(re.escape(name[pos]))
                pos += 1

        if not self.fields:
            raise ValueError(f"Date format '{name}' contains no date or time tokens")
        for group in _CONFLICTING_FIELDS:
            if group <= set(self.fields):
                raise ValueError(f"Date format '{name}' captures the same component twice")

        self.regex = re.compile("".join(pattern))

    def parse(self, text: str) -> datetime | None:
        """
        Parse ``text`` with this format.

        Returns:
            The datetime, or None if the text does not match structurally or
            names an impossible date/time
        """
        match = self.regex.fullmatch(text)
        if not match:
            return None

        values = match.groupdict()
        if "year" in values:
            year = int(values["year"])
        elif "year2" in values:
            short = int(values["year2"])
            year = 2000 + short if short < 69 else 1900 + short
        else:
            year = 1900

        if "month_name" in values:
            if values["month_name"] not in MONTH_ABBREVIATIONS:
                return None
            month = MONTH_ABBREVIATIONS.index(values["month_name"]) + 1
        else:
            month = int(values.get("month", 1))

        try:
            return datetime(
                year,
                month,
                int(values.get("day", 1)),
                int(values.get("hour", 0)),
                int(values.get("minute", 0)),
                int(values.get("second", 0)),
                int(values.get("millis", 0)) * 1000,
            )
        except ValueError:
            return None

    def render(self, value: datetime) -> str:
        """Render ``value`` in this format (inverse of parse)."""
        rendered = {
            "year": f"{value.year:04d}",
            "year2": f"{value.year % 100:02d}",
            "month_name": MONTH_ABBREVIATIONS[value.month - 1],
            "month": f"{value.month:02d}",
            "day": f"{value.day:02d}",
            "hour": f"{value.hour:02d}",
            "minute": f"{value.minute:02d}",
            "second": f"{value.second:02d}",
            "millis": f"{value.microsecond // 1000:03d}",
        }
        return "".join(rendered[field] if field else literal for field, literal in self._parts)

    def __repr__(self) -> str:
        return f"DateFormat({self.name!r})"


class DateFormatCatalog:
    """
    Ordered collection of supported date-time formats.

    A value has type date-time if any format matches it; the first matching
    format (in catalog order) is the one recorded on the typed value.
    """

    def __init__(self, names: list[str]):
        if not names:
            raise ValueError("Date format catalog cannot be empty")

        self._formats: dict[str, DateFormat] = {}
        for name in names:
            if not isinstance(name, str):
                raise ValueError(f"Date format must be a string, got {type(name).__name__}")
            if name in self._formats:
                raise ValueError(f"Duplicate date format '{name}'")
            self._formats[name] = DateFormat(name)

    @property
    def names(self) -> list[str]:
        return list(self._formats)

    def __contains__(self, name: str) -> bool:
        return name in self._formats

    def __len__(self) -> int:
        return len(self._formats)

    def get(self, name: str) -> DateFormat:
        """
        Look up a format by name.

        Raises:
            KeyError: If the format is not in the catalog
        """
        return self._formats[name]

    def match(self, text: str) -> tuple[DateFormat, datetime] | None:
        """Return the first format that parses ``text`` and the parsed value."""
        for date_format in self._formats.values():
            parsed = date_format.parse(text)
            if parsed is not None:
                return date_format, parsed
        return None

    @classmethod
    def from_text(cls, text: str) -> "DateFormatCatalog":
        """
        Build a catalog from YAML text.

        Expected YAML format:
        ```yaml
        date_formats:
          - "YYYY-MM-DD"
          - "DD/MM/YYYY"
        ```

        Raises:
            ValueError: If the YAML is invalid or has no date_formats list
        """
        try:
            config = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid date format catalog: {e}")

        if not isinstance(config, dict) or "date_formats" not in config:
            raise ValueError("Date format catalog must contain a 'date_formats' section")

        formats = config["date_formats"]
        if not isinstance(formats, list):
            raise ValueError("'date_formats' must be a list")

        return cls(formats)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "DateFormatCatalog":
        """
        Load a catalog from a reference YAML file.

        Raises:
            ReferenceFileAccessError: If the file cannot be read or holds no
                                      valid catalog
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ReferenceFileAccessError(str(path), f"not valid UTF-8 ({e.reason})")
        except OSError as e:
            raise ReferenceFileAccessError(str(path), e.strerror or str(e))
        try:
            return cls.from_text(text)
        except ValueError as e:
            raise ReferenceFileAccessError(str(path), str(e))


@lru_cache(maxsize=1)
def default_catalog() -> DateFormatCatalog:
    """The catalog shipped with the package."""
    text = resources.files("ruleval.core.schema").joinpath("date_formats.yaml").read_text(encoding="utf-8")
    return DateFormatCatalog.from_text(text)
