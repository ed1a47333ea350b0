"""Totals aggregation.

Totals are always rebuilt from all rows, never patched. The totals type is
chosen from the product: laminated products get RollAreaTotals (no weight
field), every other product StandardTotals.
"""

from typing import Iterable, List, Sequence

from ..models import (
    CalculationMode,
    CalculationRow,
    FeetInchRow,
    LengthWidthTotals,
    MillimeterRow,
    Product,
    RollAreaRow,
    RollAreaTotals,
    SheetAreaRow,
    StandardTotals,
    Totals,
)
from .units import round_to, safe_float


def _sum(rows: Iterable, attr: str) -> float:
    return sum(safe_float(getattr(r, attr, 0)) for r in rows)


def empty_totals(mode: CalculationMode, product: Product) -> Totals:
    if mode == CalculationMode.ROLL_AREA:
        return LengthWidthTotals()
    if product.is_laminated:
        return RollAreaTotals()
    return StandardTotals()


def aggregate_feet_inch(rows: Sequence[FeetInchRow], product: Product) -> Totals:
    totals = empty_totals(CalculationMode.FEET_INCH, product)
    totals.total_feet = _sum(rows, "feet")
    totals.total_inch = _sum(rows, "inch")
    totals.total_nos = _sum(rows, "count")
    totals.total_running_feet = _sum(rows, "running_feet")
    totals.total_sq_feet = _sum(rows, "sq_feet")
    totals.total_meter = _sum(rows, "meter")
    if isinstance(totals, StandardTotals):
        totals.total_weight = _sum(rows, "weight")
    return totals


def aggregate_millimeter(rows: Sequence[MillimeterRow], product: Product) -> Totals:
    totals = empty_totals(CalculationMode.MILLIMETER, product)
    totals.total_size_in_mm = _sum(rows, "mm")
    totals.total_nos = _sum(rows, "count")
    totals.total_size_in_running_feet = _sum(rows, "size_in_running_feet")
    totals.total_running_feet = _sum(rows, "running_feet")
    totals.total_sq_feet = _sum(rows, "sq_feet")
    totals.total_meter = _sum(rows, "meter")
    if isinstance(totals, StandardTotals):
        totals.total_weight = _sum(rows, "weight")
    return totals


def aggregate_sheet_area(rows: Sequence[SheetAreaRow], product: Product) -> Totals:
    totals = empty_totals(CalculationMode.SHEET_AREA, product)
    totals.total_length = _sum(rows, "length")
    totals.total_width = _sum(rows, "width")
    totals.total_nos = _sum(rows, "count")
    totals.total_sq_mm = _sum(rows, "sq_mm")
    totals.total_sq_feet = _sum(rows, "sq_feet")
    if isinstance(totals, StandardTotals):
        totals.total_weight = _sum(rows, "weight")
    return totals


def aggregate_roll_area(rows: Sequence[RollAreaRow]) -> LengthWidthTotals:
    return LengthWidthTotals(
        total_length=_sum(rows, "length"),
        total_width=_sum(rows, "width"),
        total_area=round_to(_sum(rows, "total"), 4),
    )


def aggregate(mode: CalculationMode, rows: List[CalculationRow], product: Product) -> Totals:
    if mode == CalculationMode.FEET_INCH:
        return aggregate_feet_inch(rows, product)
    if mode == CalculationMode.MILLIMETER:
        return aggregate_millimeter(rows, product)
    if mode == CalculationMode.SHEET_AREA:
        return aggregate_sheet_area(rows, product)
    return aggregate_roll_area(rows)
