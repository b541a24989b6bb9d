"""
Input validation utilities for command-line arguments.

Provides reusable validation functions for file paths, worker counts,
delimiters and sheet selectors, so bad arguments are rejected with a clear
message before any file is opened.
"""

import re


class InvalidInputError(ValueError):
    """Raised when input validation fails."""
    pass


def validate_file_path(file_path: str, field_name: str = "file_path") -> str:
    """
    Validate a file path argument.

    Only the shape of the path is checked here; whether the file exists and
    can be read is reported by the component that opens it.

    Args:
        file_path: The file path to validate
        field_name: Name of the field (for error messages)

    Returns:
        The validated file path (stripped of whitespace)

    Raises:
        InvalidInputError: If validation fails

    Examples:
        >>> validate_file_path(" data/input.csv ")
        'data/input.csv'
        >>> validate_file_path("")  # doctest: +SKIP
        InvalidInputError: file_path must be a non-empty string
    """
    if not file_path or not isinstance(file_path, str):
        raise InvalidInputError(f"{field_name} must be a non-empty string")

    file_path = file_path.strip()

    if not file_path:
        raise InvalidInputError(f"{field_name} cannot be empty or whitespace-only")

    # Check for null bytes
    if "\x00" in file_path:
        raise InvalidInputError(f"{field_name} contains null bytes")

    # Prevent excessively long paths
    if len(file_path) > 4096:  # Linux PATH_MAX
        raise InvalidInputError(f"{field_name} exceeds maximum length of 4096 characters")

    return file_path


def validate_worker_count(workers: int, field_name: str = "workers", max_workers: int = 64) -> int:
    """
    Validate a worker thread count.

    Args:
        workers: Requested number of workers
        field_name: Name of the field (for error messages)
        max_workers: Upper bound

    Returns:
        The validated count

    Raises:
        InvalidInputError: If the count is not an integer in [1, max_workers]
    """
    if not isinstance(workers, int) or isinstance(workers, bool):
        raise InvalidInputError(f"{field_name} must be an integer")

    if workers < 1:
        raise InvalidInputError(f"{field_name} must be at least 1")

    if workers > max_workers:
        raise InvalidInputError(f"{field_name} cannot exceed {max_workers}")

    return workers


def validate_delimiter(delimiter: str, field_name: str = "delimiter") -> str:
    r"""
    Validate a field delimiter.

    Accepts a single character or the escape ``\t`` for tab.

    Raises:
        InvalidInputError: If the delimiter is not a single character
    """
    if delimiter == "\\t":
        return "\t"

    if not isinstance(delimiter, str) or len(delimiter) != 1:
        raise InvalidInputError(f"{field_name} must be a single character")

    if delimiter in "\r\n\"":
        raise InvalidInputError(f"{field_name} cannot be a newline or quote character")

    return delimiter


def validate_sheet(sheet: str, field_name: str = "sheet") -> str | int:
    """
    Validate a spreadsheet sheet selector.

    Digits select a sheet by 0-based index; anything else is a sheet name.

    Examples:
        >>> validate_sheet("2")
        2
        >>> validate_sheet("Customers")
        'Customers'
    """
    if not sheet or not sheet.strip():
        raise InvalidInputError(f"{field_name} cannot be empty")

    sheet = sheet.strip()
    if re.fullmatch(r"\d+", sheet):
        return int(sheet)
    return sheet
