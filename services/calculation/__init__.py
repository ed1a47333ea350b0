"""Calculation engine for sheet goods.

Split by concern:
- units: unit conversion constants and helpers
- multipliers: per-product area / weight multipliers
- feet_inch, millimeter, sheet_area, roll_area: row calculators
- totals: whole-form aggregation
- final_value: basis selection

Everything here is pure; services/session.py drives it for a form.
"""

from .units import (
    MM_PER_FOOT,
    SQ_FEET_PER_SQ_METER,
    safe_float,
    round_to,
    feet_inch_to_feet,
    mm_to_feet,
    sq_mm_to_sq_feet,
    sq_feet_to_sq_mm,
    meter_from_sq_feet,
    meter_from_mm,
)
from .multipliers import (
    DEFAULT_SQ_FEET_MULTIPLIER,
    POLY_CARBONATE_MULTIPLIERS,
    resolve_area_multiplier,
    resolve_weight_multiplier,
    resolve_multiplier,
)
from .feet_inch import (
    calculate_feet_inch_row,
    feet_inch_row_issues,
)
from .millimeter import (
    calculate_millimeter_row,
    millimeter_row_issues,
)
from .sheet_area import (
    calculate_sheet_area_row,
    sheet_area_row_issues,
)
from .roll_area import (
    calculate_roll_area_row,
    roll_area_row_issues,
)
from .totals import (
    aggregate,
    empty_totals,
)
from .final_value import (
    available_bases,
    default_basis,
    select_final_value,
)

__all__ = [
    # Units
    'MM_PER_FOOT',
    'SQ_FEET_PER_SQ_METER',
    'safe_float',
    'round_to',
    'feet_inch_to_feet',
    'mm_to_feet',
    'sq_mm_to_sq_feet',
    'sq_feet_to_sq_mm',
    'meter_from_sq_feet',
    'meter_from_mm',
    # Multipliers
    'DEFAULT_SQ_FEET_MULTIPLIER',
    'POLY_CARBONATE_MULTIPLIERS',
    'resolve_area_multiplier',
    'resolve_weight_multiplier',
    'resolve_multiplier',
    # Row calculators
    'calculate_feet_inch_row',
    'feet_inch_row_issues',
    'calculate_millimeter_row',
    'millimeter_row_issues',
    'calculate_sheet_area_row',
    'sheet_area_row_issues',
    'calculate_roll_area_row',
    'roll_area_row_issues',
    # Totals
    'aggregate',
    'empty_totals',
    # Final value
    'available_bases',
    'default_basis',
    'select_final_value',
]
