"""Unit conversion helpers for sheet goods.

Fixed constants:
- 1 ft = 304.8 mm
- 1 sq m = 10.764 sq ft
- 1 m = 1000 mm

Unless a caller says otherwise, derived values are rounded to 3 places.
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

MM_PER_FOOT = 304.8
SQ_FEET_PER_SQ_METER = 10.764
MM_PER_METER = 1000.0
INCHES_PER_FOOT = 12.0

DEFAULT_PLACES = 3


def safe_float(value: Any, default: float = 0.0) -> float:
    """Coerce form input to float. None, blanks, junk and NaN give `default`."""
    if value is None or value == "":
        return default
    try:
        v = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(v) or math.isinf(v):
        return default
    return v


def round_to(value: float, places: int = DEFAULT_PLACES) -> float:
    """Round half up on the exact binary value, like JavaScript toFixed()."""
    exact = Decimal(float(value))
    return float(exact.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


def feet_inch_to_feet(feet: float, inch: float) -> float:
    total_inches = feet * INCHES_PER_FOOT + inch
    return total_inches / INCHES_PER_FOOT


def mm_to_feet(mm: float) -> float:
    return mm / MM_PER_FOOT


def sq_mm_to_sq_feet(sq_mm: float) -> float:
    return sq_mm / (MM_PER_FOOT * MM_PER_FOOT)


def sq_feet_to_sq_mm(sq_feet: float) -> float:
    return sq_feet * (MM_PER_FOOT * MM_PER_FOOT)


def meter_from_sq_feet(sq_feet: float) -> float:
    return round_to(sq_feet / SQ_FEET_PER_SQ_METER, 3)


def meter_from_mm(mm: float) -> float:
    return round_to(mm / MM_PER_METER, 3)
