"""Timestamp parsing and formatting.

Accepted inputs are bare seconds (``"90"``, ``"12.5"``), ``MM:SS`` and
``HH:MM:SS`` with an optional fractional seconds part.
"""

import math
import re

_SECONDS_RE = re.compile(r"^\d+(\.\d+)?$")


def parse_timestamp(value: str | float | int) -> float:
    """Convert a timestamp to float seconds.

    Raises:
        ValueError: if the value is negative or not a recognized format.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid timestamp: {value!r}")
    if isinstance(value, (int, float)):
        if value < 0 or not math.isfinite(value):
            raise ValueError(f"Invalid timestamp: {value!r}")
        return float(value)

    text = value.strip()
    if _SECONDS_RE.match(text):
        return float(text)

    parts = text.split(":")
    if len(parts) not in (2, 3) or not all(parts):
        raise ValueError(f"Invalid timestamp: {value!r}")
    try:
        seconds = float(parts[-1])
        minutes = int(parts[-2])
        hours = int(parts[0]) if len(parts) == 3 else 0
    except ValueError:
        raise ValueError(f"Invalid timestamp: {value!r}") from None
    if seconds < 0 or minutes < 0 or hours < 0 or seconds >= 60 or minutes >= 60:
        raise ValueError(f"Invalid timestamp: {value!r}")
    return hours * 3600 + minutes * 60 + seconds


def format_timestamp(seconds: float, millis: bool = False) -> str:
    """Format seconds as ``HH:MM:SS`` (or ``HH:MM:SS.mmm``)."""
    if seconds < 0:
        raise ValueError(f"Cannot format negative time: {seconds}")
    total_ms = int(round(seconds * 1000))
    h, rem = divmod(total_ms, 3_600_000)
    m, rem = divmod(rem, 60_000)
    s, ms = divmod(rem, 1000)
    if millis:
        return f"{h:02d}:{m:02d}:{s:02d}.{ms:03d}"
    return f"{h:02d}:{m:02d}:{s:02d}"


def format_seconds(seconds: float) -> str:
    """Compact decimal seconds for ffmpeg arguments (``5.1``, ``30``)."""
    text = f"{seconds:.6f}".rstrip("0").rstrip(".")
    return text or "0"
