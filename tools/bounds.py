import logging
import math
from typing import Any, Optional, Tuple

logger = logging.getLogger(__name__)


def clamp(value: float, low: float, high: float) -> float:
    """Constrain value to the closed interval [low, high]."""
    return max(low, min(high, value))


def safe_float(value: Any, default: Optional[float] = None) -> Optional[float]:
    """
    Parse a user-supplied numeric field.

    Accepts ints, floats and numeric strings ("22.5", " 31 ").
    Returns `default` for None, booleans, non-numeric text, NaN and infinities
    so that no NaN ever reaches the scoring arithmetic.
    """
    if value is None or isinstance(value, bool):
        return default

    # Type coercion for safety
    try:
        parsed = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (ValueError, TypeError):
        logger.debug(f"Could not parse numeric value {value!r}, using default {default}")
        return default

    if math.isnan(parsed) or math.isinf(parsed):
        return default
    return parsed


def safe_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    """Like safe_float, truncating toward zero ("45.7" -> 45)."""
    parsed = safe_float(value)
    if parsed is None:
        return default
    return int(parsed)


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer with .5 going up (2.5 -> 3, 28.5 -> 29).

    The built-in round() uses banker's rounding, which would report 28% for
    a raw risk of 28.5.
    """
    return int(math.floor(value + 0.5))


def parse_blood_pressure(reading: Any) -> Tuple[Optional[float], Optional[float]]:
    """
    Split a "SYS/DIA" reading into (systolic, diastolic).

    Either side is None when missing or not numeric:
        "120/80"  -> (120.0, 80.0)
        "135"     -> (135.0, None)
        "abc/xyz" -> (None, None)
    """
    if reading is None:
        return None, None

    parts = str(reading).split("/")
    systolic = safe_float(parts[0])
    diastolic = safe_float(parts[1]) if len(parts) > 1 else None
    return systolic, diastolic
