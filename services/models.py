from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union


class ProductType(str, Enum):
    NOS = "NOS"
    REGULAR = "REGULAR"
    POLY_CARBONATE = "POLY_CARBONATE"  # laminated sheet, sold by area, never by weight
    POLY_CARBONATE_ROLL = "POLY_CARBONATE_ROLL"  # measured as length x width
    ACCESSORIES = "ACCESSORIES"


class PolyCarbonateType(str, Enum):
    SINGLE = "SINGLE"
    DOUBLE = "DOUBLE"
    FULL_SHEET = "FULL_SHEET"


class CalculationType(str, Enum):
    """Preferred entry style stored on a product."""
    SQ_FEET = "SQ_FEET"  # feet + inch
    MM = "MM"


class CalculationMode(str, Enum):
    FEET_INCH = "FEET_INCH"
    MILLIMETER = "MILLIMETER"
    SHEET_AREA = "SHEET_AREA"  # length x width in mm
    ROLL_AREA = "ROLL_AREA"    # length x width, free units


class CalculationBasis(str, Enum):
    WEIGHT = "W"
    RUNNING_FEET = "RF"
    SQUARE_FEET = "SF"
    COUNT = "N"
    MANUAL = "M"


BASIS_LABELS = {
    CalculationBasis.WEIGHT: "Weight",
    CalculationBasis.RUNNING_FEET: "Running Feet",
    CalculationBasis.SQUARE_FEET: "Sq.Feet",
    CalculationBasis.COUNT: "NOS",
    CalculationBasis.MANUAL: "Manual",
}


@dataclass
class Product:
    id: int
    name: str
    type: ProductType = ProductType.NOS
    poly_carbonate_type: Optional[PolyCarbonateType] = None
    sq_feet_multiplier: Optional[float] = None
    weight: float = 0.0          # weight per running foot
    unit_price: float = 0.0      # purchase amount
    tax_percentage: float = 0.0
    calculation_type: CalculationType = CalculationType.SQ_FEET

    @property
    def is_regular(self) -> bool:
        return self.type == ProductType.REGULAR

    @property
    def is_laminated(self) -> bool:
        return self.type == ProductType.POLY_CARBONATE

    @property
    def is_roll(self) -> bool:
        return self.type == ProductType.POLY_CARBONATE_ROLL


# --- Calculation rows -------------------------------------------------------
# Inputs first, derived values after. Derived values are written only by the
# calculators in services/calculation.

@dataclass
class FeetInchRow:
    row_id: int
    feet: float = 0.0
    inch: float = 0.0
    count: float = 1
    running_feet: float = 0.0
    sq_feet: float = 0.0
    weight: Optional[float] = None  # None for laminated products
    meter: float = 0.0


@dataclass
class MillimeterRow:
    row_id: int
    mm: float = 0.0
    count: float = 1
    size_in_running_feet: float = 0.0
    running_feet: float = 0.0
    sq_feet: float = 0.0
    weight: Optional[float] = None
    meter: float = 0.0


@dataclass
class SheetAreaRow:
    row_id: int
    length: float = 0.0  # mm
    width: float = 0.0   # mm
    count: float = 1
    sq_mm: float = 0.0
    sq_feet: float = 0.0
    weight: Optional[float] = None


@dataclass
class RollAreaRow:
    row_id: int
    length: Optional[float] = None
    width: Optional[float] = None
    total: float = 0.0


CalculationRow = Union[FeetInchRow, MillimeterRow, SheetAreaRow, RollAreaRow]


# --- Totals -----------------------------------------------------------------
# Laminated products get RollAreaTotals, which has no weight field at all.
# Everything else gets StandardTotals. Length x width sessions use
# LengthWidthTotals. Mode specific sums that do not apply stay at 0.

@dataclass
class _DimensionTotals:
    total_nos: float = 0.0
    total_running_feet: float = 0.0
    total_sq_feet: float = 0.0
    total_meter: float = 0.0
    total_feet: float = 0.0
    total_inch: float = 0.0
    total_size_in_mm: float = 0.0
    total_size_in_running_feet: float = 0.0
    total_length: float = 0.0
    total_width: float = 0.0
    total_sq_mm: float = 0.0


@dataclass
class RollAreaTotals(_DimensionTotals):
    """Totals for laminated products: area is the only quantity."""


@dataclass
class StandardTotals(_DimensionTotals):
    total_weight: float = 0.0


@dataclass
class LengthWidthTotals:
    total_length: float = 0.0
    total_width: float = 0.0
    total_area: float = 0.0


Totals = Union[StandardTotals, RollAreaTotals, LengthWidthTotals]


@dataclass
class RowIssue:
    row_id: Optional[int]  # None for form level problems
    field: str
    message: str


@dataclass
class CalculationResult:
    """What a calculation session hands back to the order entry form."""
    mode: CalculationMode
    basis: CalculationBasis
    rows: List[dict]
    totals: Totals
    final_value: float
    quantity: Optional[float] = None  # roll area sessions only


# --- Purchase documents -----------------------------------------------------

@dataclass
class ChallanLine:
    product_id: Optional[int] = None
    quantity: float = 0.0
    unit_price: float = 0.0
    tax_percentage: float = 0.0
    batch_number: str = ""
    remarks: Optional[str] = None
    price: float = 0.0
    tax_amount: float = 0.0
    qc_pass: Optional[float] = None  # None = not checked yet
    calculation: Optional[CalculationResult] = None
    id: Optional[int] = None


@dataclass
class ChallanTotals:
    price: float
    tax_amount: float
    packaging_charges: float
    grand_total: float


@dataclass
class ReturnLine:
    purchase_item_id: int
    product_id: int
    quantity: float
    qc_pass: float = 0.0
    unit_price: float = 0.0
    return_quantity: Optional[float] = None
    remarks: Optional[str] = None
    batch_number: Optional[str] = None


@dataclass
class ChallanDocument:
    invoice_number: str = ""
    customer_id: Optional[int] = None
    packaging_charges: float = 0.0
    lines: List[ChallanLine] = field(default_factory=list)


"""Data models only. Calculation logic lives in services/calculation."""

__all__ = [
    "ProductType",
    "PolyCarbonateType",
    "CalculationType",
    "CalculationMode",
    "CalculationBasis",
    "BASIS_LABELS",
    "Product",
    "FeetInchRow",
    "MillimeterRow",
    "SheetAreaRow",
    "RollAreaRow",
    "CalculationRow",
    "RollAreaTotals",
    "StandardTotals",
    "LengthWidthTotals",
    "Totals",
    "RowIssue",
    "CalculationResult",
    "ChallanLine",
    "ChallanTotals",
    "ReturnLine",
    "ChallanDocument",
]
