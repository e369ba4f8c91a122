"""Spreadsheet column-letter arithmetic (A=0, B=1, ..., Z=25, AA=26, ...)."""

import re

_COLUMN_LETTERS = re.compile(r"^[A-Z]+$")


def is_column_letter(value: str) -> bool:
    """Check if a string is a valid (upper-case) spreadsheet column reference."""
    return bool(_COLUMN_LETTERS.match(value))


def column_letter_to_index(letters: str) -> int:
    """
    Convert a spreadsheet column reference to a zero-based index.

    Args:
        letters: Column letters such as "A", "Z" or "AB" (case-insensitive)

    Returns:
        Zero-based column index

    Raises:
        ValueError: If the reference contains anything but letters
    """
    normalized = letters.strip().upper()
    if not is_column_letter(normalized):
        raise ValueError(f"Invalid column reference: {letters!r}")

    result = 0
    for char in normalized:
        result = result * 26 + (ord(char) - ord("A") + 1)
    return result - 1


def index_to_column_letter(index: int) -> str:
    """Convert a zero-based column index back to its column letters."""
    if index < 0:
        raise ValueError(f"Column index must be non-negative, got {index}")

    letters = []
    n = index + 1
    while n:
        n, remainder = divmod(n - 1, 26)
        letters.append(chr(ord("A") + remainder))
    return "".join(reversed(letters))
