"""
Field normalizers

Pure helpers that turn raw source values into canonical field values.
None stands for absence; none of these raise on bad input.
"""

import math
import re
from typing import Any, Sequence

_STRIP_CHARS = re.compile(r"[$€£¥%,]")
_LEADING_NUMBER = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


def truncate(value: Any, max_length: int) -> str | None:
    """Text of value cut to max_length characters; None for empty input"""
    if value is None:
        return None
    text = str(value)
    if not text:
        return None
    return text[:max_length]


def parse_number(value: Any, allow_negative: bool = True) -> float | None:
    """
    Parse a number after stripping currency, percent and thousands separators

    Reads the leading numeric part ("12.5 oz" -> 12.5).
    Returns None when absent, unparseable or not finite.
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_NUMBER.match(_STRIP_CHARS.sub("", str(value)).strip())
        if not match:
            return None
        number = float(match.group())

    if not math.isfinite(number):
        return None
    if number < 0 and not allow_negative:
        return None
    return number


def format_size(magnitude: Any, unit: str = "ml") -> str | None:
    """Magnitude stamped with its unit, e.g. 750ml; None when absent"""
    if magnitude is None:
        return None
    text = str(magnitude).strip()
    if not text:
        return None
    return f"{text}{unit}"


def join_region(city: str | None, state: str | None) -> str | None:
    """Join city and state as "City, State"; falls back to the city alone"""
    if city and state:
        return f"{city}, {state}"
    return city or None


def field_at(fields: Sequence[str], index: int) -> str | None:
    """Positional field, None when missing or empty"""
    if index >= len(fields):
        return None
    return fields[index] or None
