"""Millimeter row calculation.

Inputs: mm (> 0), count (>= 1).

1. size_in_running_feet = mm / 304.8
2. running_feet = size_in_running_feet * count
3. laminated: sq_feet = running_feet * weight multiplier (3 places)
4. others: weight = running_feet * product.weight (3 places)
5. meter = mm / 1000 (3 places)
"""

from dataclasses import replace
from typing import List

from ..models import MillimeterRow, Product, RowIssue
from .multipliers import resolve_weight_multiplier
from .units import meter_from_mm, mm_to_feet, round_to, safe_float


def millimeter_row_issues(row: MillimeterRow) -> List[RowIssue]:
    issues: List[RowIssue] = []
    mm = safe_float(row.mm)
    if mm < 0:
        issues.append(RowIssue(row.row_id, "mm", "MM cannot be negative"))
    elif mm == 0:
        issues.append(RowIssue(row.row_id, "mm", "Enter size in MM"))
    if safe_float(row.count) < 1:
        issues.append(RowIssue(row.row_id, "count", "NOS must be at least 1"))
    return issues


def calculate_millimeter_row(row: MillimeterRow, product: Product) -> MillimeterRow:
    if millimeter_row_issues(row):
        return replace(
            row,
            size_in_running_feet=0.0,
            running_feet=0.0,
            sq_feet=0.0,
            weight=None if product.is_laminated else 0.0,
            meter=0.0,
        )

    mm = safe_float(row.mm)
    count = safe_float(row.count) or 1

    size_in_running_feet = mm_to_feet(mm)
    running_feet = size_in_running_feet * count

    if product.is_laminated:
        sq_feet = round_to(running_feet * resolve_weight_multiplier(product), 3)
        weight = None
    else:
        sq_feet = 0.0
        weight = round_to(running_feet * (product.weight or 0), 3)

    return replace(
        row,
        size_in_running_feet=round_to(size_in_running_feet, 3),
        running_feet=running_feet,
        sq_feet=sq_feet,
        weight=weight,
        meter=meter_from_mm(mm),
    )
