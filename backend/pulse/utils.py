"""
Shared utility functions for the sentiment pipeline.
"""
from __future__ import annotations

import math
import re
from datetime import datetime, timezone


def now_utc() -> datetime:
    """
    Get current UTC datetime with timezone information.

    Returns:
        Current UTC datetime
    """
    return datetime.now(timezone.utc)


def normalize_text(text: str | None) -> str:
    """
    Normalize whitespace in text content.

    Args:
        text: Input text string (can be None)

    Returns:
        Normalized text with single spaces and trimmed edges
    """
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def clamp_to_signed_unit_range(value: float) -> float:
    """
    Clamp a float value to the range [-1.0, 1.0].

    Args:
        value: Input float value

    Returns:
        Value clamped to [-1.0, 1.0] range
    """
    return max(-1.0, min(1.0, value))


def is_finite_number(value: object) -> bool:
    """True for real, finite ints/floats (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
