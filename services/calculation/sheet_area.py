"""Sheet area rows: length x width in millimeters, times count."""

from dataclasses import replace
from typing import List

from ..models import Product, RowIssue, SheetAreaRow
from .multipliers import resolve_area_multiplier, resolve_weight_multiplier
from .units import round_to, safe_float, sq_mm_to_sq_feet


def sheet_area_row_issues(row: SheetAreaRow) -> List[RowIssue]:
    issues: List[RowIssue] = []
    for name in ("length", "width"):
        v = safe_float(getattr(row, name))
        if v < 0:
            issues.append(RowIssue(row.row_id, name, f"{name.title()} cannot be negative"))
        elif v == 0:
            issues.append(RowIssue(row.row_id, name, f"Enter {name} in MM"))
    if safe_float(row.count) < 1:
        issues.append(RowIssue(row.row_id, "count", "NOS must be at least 1"))
    return issues


def calculate_sheet_area_row(row: SheetAreaRow, product: Product) -> SheetAreaRow:
    if sheet_area_row_issues(row):
        return replace(
            row,
            sq_mm=0.0,
            sq_feet=0.0,
            weight=None if product.is_laminated else 0.0,
        )

    length = safe_float(row.length)
    width = safe_float(row.width)
    count = safe_float(row.count) or 1

    sq_mm = length * width * count
    sq_feet = sq_mm_to_sq_feet(sq_mm)
    if product.is_regular:
        sq_feet *= resolve_area_multiplier(product)
    elif product.is_laminated:
        # area proxy, same as the other laminated modes
        sq_feet *= resolve_weight_multiplier(product)

    weight = None
    if not product.is_laminated:
        per_unit = (product.weight or 0) if product.is_regular else 1.0
        weight = round_to(sq_feet * per_unit, 2)

    return replace(
        row,
        sq_mm=round_to(sq_mm, 2),
        sq_feet=round_to(sq_feet, 2),
        weight=weight,
    )
