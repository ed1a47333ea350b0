"""Area / weight multiplier resolution per product.

- REGULAR: configured sq_feet_multiplier when > 0, else 3.5. Converts running
  feet to square feet.
- POLY_CARBONATE (laminated): fixed multiplier by sub-type, applied to running
  feet to get the area figure. These products have no real weight.
- Anything else: 1 (pass-through).
"""

from typing import Dict

from ..models import PolyCarbonateType, Product

DEFAULT_SQ_FEET_MULTIPLIER = 3.5

POLY_CARBONATE_MULTIPLIERS: Dict[PolyCarbonateType, float] = {
    PolyCarbonateType.SINGLE: 1.16,
    PolyCarbonateType.DOUBLE: 2.0,
    PolyCarbonateType.FULL_SHEET: 4.0,
}


def resolve_area_multiplier(product: Product) -> float:
    """Running feet -> square feet factor for REGULAR products, 1 otherwise."""
    if not product.is_regular:
        return 1.0
    m = product.sq_feet_multiplier
    if m is not None and m > 0:
        return float(m)
    return DEFAULT_SQ_FEET_MULTIPLIER


def resolve_weight_multiplier(product: Product) -> float:
    """Sub-type factor for laminated products, 1 otherwise."""
    if not product.is_laminated:
        return 1.0
    return POLY_CARBONATE_MULTIPLIERS.get(product.poly_carbonate_type, 1.0)


def resolve_multiplier(product: Product) -> float:
    if product.is_regular:
        return resolve_area_multiplier(product)
    return resolve_weight_multiplier(product)
