"""
Exceptions raised before evaluation starts.

Everything discoverable while parsing a rules file or opening input files is
fatal; failures found during evaluation are recorded on the report instead.
"""


class RulevalError(Exception):
    """Base class for all ruleval errors."""


class ParseError(RulevalError):
    """Raised when a rules file is malformed."""

    def __init__(self, line: int | None, reason: str, text: str | None = None):
        self.line = line
        self.reason = reason
        self.text = text
        location = f"line {line}: " if line is not None else ""
        detail = f" -> {text.strip()!r}" if text else ""
        super().__init__(f"{location}{reason}{detail}")


class AccessFailure(RulevalError):
    """Raised when an input file cannot be read."""

    kind = "input"

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read {self.kind} file '{path}': {reason}")


class RulesFileAccessError(AccessFailure):
    kind = "rules"


class DataFileAccessError(AccessFailure):
    kind = "data"


class ReferenceFileAccessError(AccessFailure):
    kind = "reference"
