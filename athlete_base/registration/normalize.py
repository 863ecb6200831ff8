"""Canonical forms applied before lookups and storage."""

from __future__ import annotations

import math
from typing import Any


def normalize_email(raw: str) -> str:
    """Trim and lowercase an email address. Idempotent."""
    return raw.strip().lower()


def clean_text(value: Any) -> str | None:
    """Strip a text value, mapping blanks and non-strings to None."""
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def to_float(value: Any) -> float | None:
    """Coerce a JSON number or numeric string to float.

    Booleans, NaN/inf and unparseable strings yield None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number
