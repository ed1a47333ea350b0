"""Final value selection: which aggregate feeds the order line quantity."""

from typing import Optional, Tuple

from ..models import (
    CalculationBasis,
    CalculationMode,
    LengthWidthTotals,
    Product,
    StandardTotals,
    Totals,
)
from .units import safe_float


def available_bases(product: Product, mode: CalculationMode, row_count: int = 1) -> Tuple[CalculationBasis, ...]:
    """Bases a user may pick. Count only makes sense for a single row."""
    if mode == CalculationMode.ROLL_AREA:
        return (CalculationBasis.SQUARE_FEET, CalculationBasis.MANUAL)
    if product.is_laminated:
        return (CalculationBasis.SQUARE_FEET,)
    bases = [
        CalculationBasis.WEIGHT,
        CalculationBasis.RUNNING_FEET,
        CalculationBasis.SQUARE_FEET,
    ]
    if row_count == 1:
        bases.append(CalculationBasis.COUNT)
    return tuple(bases)


def default_basis(product: Product, mode: CalculationMode) -> CalculationBasis:
    if mode == CalculationMode.ROLL_AREA or product.is_laminated:
        return CalculationBasis.SQUARE_FEET
    return CalculationBasis.WEIGHT


def select_final_value(
    totals: Totals,
    basis: CalculationBasis,
    product: Product,
    manual_quantity: Optional[float] = None,
) -> float:
    if isinstance(totals, LengthWidthTotals):
        if basis == CalculationBasis.MANUAL:
            return safe_float(manual_quantity)
        return totals.total_area

    if product.is_laminated:
        return totals.total_sq_feet

    if basis == CalculationBasis.COUNT:
        return totals.total_nos
    if basis == CalculationBasis.RUNNING_FEET:
        return totals.total_running_feet
    if basis == CalculationBasis.SQUARE_FEET:
        return totals.total_sq_feet
    if isinstance(totals, StandardTotals):
        return totals.total_weight
    return 0.0
