"""Input coercion and text helpers shared by the catalog, store and filters."""

import math
import unicodedata
from typing import Any, Optional


def to_number(value: Any) -> Optional[float]:
    """Parse a number, returning None when it is missing or not finite.

    Strings are stripped and a single decimal comma is accepted ("39,47").
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().replace(",", ".", 1)
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def clamp_num(value: Any, low: float, high: float, fallback: float) -> float:
    """Clamp value to [low, high]; non-numeric input yields fallback"""
    number = to_number(value)
    if number is None:
        return fallback
    return max(low, min(high, number))


def clamp_int(value: Any, low: int, high: int, fallback: int) -> int:
    """Round half up and clamp to [low, high]; non-numeric input yields fallback"""
    number = to_number(value)
    if number is None:
        return fallback
    return max(low, min(high, math.floor(number + 0.5)))


def normalize_text(value: Any) -> str:
    """Lower-case and strip diacritics so 'Plaça' matches 'placa'"""
    if value is None:
        return ""
    decomposed = unicodedata.normalize("NFD", str(value).lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))
