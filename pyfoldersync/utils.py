"""Utility functions for pyfoldersync."""

import re
from datetime import datetime
from typing import Optional, Union

from .exceptions import InvalidSizeExpression

# =============================================================================
# Constants
# =============================================================================

# Files larger than this are compared by size/timestamp instead of content hash
DEFAULT_HASH_THRESHOLD: str = "2GB"

# Read size used when hashing files (1 MB)
HASH_CHUNK_SIZE: int = 1024 * 1024

# Number of trailing hex characters of a digest shown in previews
HASH_SUFFIX_LENGTH: int = 5


# =============================================================================
# Size parsing and formatting
# =============================================================================

_SIZE_UNITS = {
    "B": 1,
    "KB": 1024,
    "MB": 1024**2,
    "GB": 1024**3,
    "TB": 1024**4,
}

_SIZE_PATTERN = re.compile(
    r"^\s*(?P<number>\d+(?:\.\d+)?)\s*(?P<unit>[KMGT]?B)?\s*$", re.IGNORECASE
)


def parse_size(expression: Union[str, int]) -> int:
    """Parse a human size expression into a byte count.

    Units are binary multiples and case-insensitive. A bare number is a
    byte count.

    Args:
        expression: Size expression (e.g., "2GB", "500mb", "1024") or an int

    Returns:
        Size in bytes

    Raises:
        InvalidSizeExpression: If the expression does not match the grammar

    Examples:
        >>> parse_size("2GB")
        2147483648
        >>> parse_size("500MB")
        524288000
        >>> parse_size("1024")
        1024
    """
    if isinstance(expression, bool):
        raise InvalidSizeExpression(expression)
    if isinstance(expression, int):
        if expression < 0:
            raise InvalidSizeExpression(expression)
        return expression
    if not isinstance(expression, str):
        raise InvalidSizeExpression(expression)

    match = _SIZE_PATTERN.match(expression)
    if not match:
        raise InvalidSizeExpression(expression)

    number = match.group("number")
    unit = (match.group("unit") or "B").upper()

    # Fractions need a unit
    if "." in number and match.group("unit") is None:
        raise InvalidSizeExpression(expression)

    return int(float(number) * _SIZE_UNITS[unit])


def format_size(size_bytes: Optional[int]) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes (None for a missing file)

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B", "-")
    """
    if size_bytes is None:
        return "-"
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"


# =============================================================================
# Timestamp and hash display
# =============================================================================


def truncate_mtime(mtime: float) -> int:
    """Truncate a modification time to whole seconds for comparison."""
    return int(mtime)


def format_timestamp(mtime: Optional[float]) -> str:
    """Format a Unix timestamp as local time for display.

    Args:
        mtime: Unix timestamp or None

    Returns:
        "YYYY-MM-DD HH:MM:SS" or "-" when missing
    """
    if mtime is None:
        return "-"
    return datetime.fromtimestamp(truncate_mtime(mtime)).strftime("%Y-%m-%d %H:%M:%S")


def hash_suffix(digest: Optional[str], length: int = HASH_SUFFIX_LENGTH) -> str:
    """Return the last characters of a hex digest for display.

    Examples:
        >>> hash_suffix("0123456789abcdef")
        'bcdef'
        >>> hash_suffix(None)
        ''
    """
    if not digest:
        return ""
    return digest[-length:]
