"""Feet + inch row calculation.

Inputs: feet (>= 0), inch (>= 0), count (>= 1). At least one of feet / inch
must be non-zero.

1. running_feet = (feet * 12 + inch) / 12 * count
2. sq_feet: REGULAR -> running_feet * area multiplier (2 places)
            other   -> running_feet * weight multiplier (3 places laminated,
                       2 places otherwise)
3. weight (not for laminated): REGULAR -> running_feet * product.weight,
   other -> running_feet * weight multiplier. 3 places.
4. meter from the unrounded sq_feet.

Invalid rows compute to zero instead of raising.
"""

from dataclasses import replace
from typing import List

from ..models import FeetInchRow, Product, RowIssue
from .multipliers import resolve_area_multiplier, resolve_weight_multiplier
from .units import feet_inch_to_feet, meter_from_sq_feet, round_to, safe_float


def feet_inch_row_issues(row: FeetInchRow) -> List[RowIssue]:
    issues: List[RowIssue] = []
    feet = safe_float(row.feet)
    inch = safe_float(row.inch)
    if feet < 0:
        issues.append(RowIssue(row.row_id, "feet", "Feet cannot be negative"))
    if inch < 0:
        issues.append(RowIssue(row.row_id, "inch", "Inch cannot be negative"))
    if feet == 0 and inch == 0:
        issues.append(RowIssue(row.row_id, "feet", "Enter feet or inch"))
    if safe_float(row.count) < 1:
        issues.append(RowIssue(row.row_id, "count", "NOS must be at least 1"))
    return issues


def calculate_feet_inch_row(row: FeetInchRow, product: Product) -> FeetInchRow:
    if feet_inch_row_issues(row):
        return replace(
            row,
            running_feet=0.0,
            sq_feet=0.0,
            weight=None if product.is_laminated else 0.0,
            meter=0.0,
        )

    feet = safe_float(row.feet)
    inch = safe_float(row.inch)
    count = safe_float(row.count) or 1
    weight_multiplier = resolve_weight_multiplier(product)

    running_feet = feet_inch_to_feet(feet, inch) * count

    if product.is_regular:
        sq_feet = running_feet * resolve_area_multiplier(product)
    else:
        sq_feet = running_feet * weight_multiplier
    sq_places = 3 if product.is_laminated else 2

    weight = None
    if not product.is_laminated:
        if product.is_regular:
            weight = round_to(running_feet * (product.weight or 0), 3)
        else:
            weight = round_to(running_feet * weight_multiplier, 3)

    return replace(
        row,
        running_feet=running_feet,
        sq_feet=round_to(sq_feet, sq_places),
        weight=weight,
        meter=meter_from_sq_feet(sq_feet),
    )
