"""
Helper functions for formatting data into human-readable strings, mostly for
log lines: elapsed times, file sizes and size ratios.
"""

from datetime import timedelta
from typing import Optional


def format_timedelta(td_object: timedelta) -> str:
    """
    Formats a timedelta object into a "HH:MM:SS" string.

    Returns "00:00:00" if the input is not a valid timedelta object.
    """
    if not isinstance(td_object, timedelta):
        return "00:00:00"

    total_seconds = int(td_object.total_seconds())
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02}:{minutes:02}:{seconds:02}"


def formatted_size(size_bytes: int) -> str:
    """
    Converts a size in bytes to a human-readable string (B, KB, MB, GB, TB).

    For example, 1536 becomes "1.50 KB", and 2097152 becomes "2 MB".
    """
    if size_bytes < 0:
        size_bytes = 0

    units = ["B", "KB", "MB", "GB", "TB", "PB"]
    factor = 1024.0

    if size_bytes == 0:
        return "0 B"

    for unit in units:
        if size_bytes < factor:
            if unit == "B":
                return f"{size_bytes} {unit}"
            # "2.00 MB" -> "2 MB"
            return f"{size_bytes:.2f} {unit}".replace(".00", "")
        size_bytes /= factor

    return f"{size_bytes:.2f} {units[-1]}".replace(".00", "")


def size_in_mb(size_bytes: int) -> float:
    """Decimal megabytes (10^6 bytes), rounded to two places."""
    return round(size_bytes / 1_000_000, 2)


def size_percentage(encoded_bytes: int, original_bytes: int) -> Optional[float]:
    """Encoded size as a percentage of the original, or None for an empty original."""
    if original_bytes <= 0:
        return None
    return round(encoded_bytes / original_bytes * 100, 2)
