"""Calculation session.

A session is the state behind one calculation form: the product being
measured, the entry mode, the chosen basis and the rows. The form layer calls
`update_row(row_id, ...)` from its change handler; that recalculates the row
and then rebuilds the totals from every row. Nothing is subscribed or cached
between calls.

`save()` either returns a complete CalculationResult or raises
CalculationRejected; there is no partial result.
"""

import logging
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional

from .calculation import (
    aggregate,
    available_bases,
    calculate_feet_inch_row,
    calculate_millimeter_row,
    calculate_roll_area_row,
    calculate_sheet_area_row,
    default_basis,
    empty_totals,
    feet_inch_row_issues,
    millimeter_row_issues,
    roll_area_row_issues,
    round_to,
    safe_float,
    select_final_value,
    sheet_area_row_issues,
)
from .errors import CalculationRejected
from .models import (
    CalculationBasis,
    CalculationMode,
    CalculationResult,
    CalculationRow,
    CalculationType,
    FeetInchRow,
    MillimeterRow,
    Product,
    RollAreaRow,
    RowIssue,
    SheetAreaRow,
)

logger = logging.getLogger(__name__)

ROW_TYPES = {
    CalculationMode.FEET_INCH: FeetInchRow,
    CalculationMode.MILLIMETER: MillimeterRow,
    CalculationMode.SHEET_AREA: SheetAreaRow,
    CalculationMode.ROLL_AREA: RollAreaRow,
}

# Fields the user types in; everything else on a row is derived.
INPUT_FIELDS = {
    CalculationMode.FEET_INCH: ("feet", "inch", "count"),
    CalculationMode.MILLIMETER: ("mm", "count"),
    CalculationMode.SHEET_AREA: ("length", "width", "count"),
    CalculationMode.ROLL_AREA: ("length", "width"),
}


def default_mode_for(product: Product) -> CalculationMode:
    if product.is_roll:
        return CalculationMode.ROLL_AREA
    if product.calculation_type == CalculationType.MM:
        return CalculationMode.MILLIMETER
    return CalculationMode.FEET_INCH


def parse_basis(value: Any, product: Product, mode: CalculationMode) -> CalculationBasis:
    """Stored basis code -> basis. Empty, unknown or unavailable codes fall back."""
    try:
        basis = CalculationBasis(value)
    except ValueError:
        return default_basis(product, mode)
    if basis not in available_bases(product, mode, row_count=1):
        return default_basis(product, mode)
    return basis


# --- saved row format (camelCase, as the order API stores it) --------------

def row_to_saved(row: CalculationRow, product: Product) -> Dict[str, float]:
    if isinstance(row, RollAreaRow):
        return {
            "length": safe_float(row.length),
            "width": safe_float(row.width),
            "total": safe_float(row.total),
        }
    if isinstance(row, SheetAreaRow):
        return {
            "length": safe_float(row.length),
            "width": safe_float(row.width),
            "nos": safe_float(row.count),
            "sqMM": row.sq_mm,
            "sqFeet": row.sq_feet,
            "weight": safe_float(row.weight),
        }

    sq_feet = round_to(row.sq_feet, 3) if product.is_laminated else 0.0
    weight = 0.0 if product.is_laminated else round_to(safe_float(row.weight), 3)
    if isinstance(row, MillimeterRow):
        return {
            "mm": safe_float(row.mm),
            "size_in_rfeet": round_to(row.size_in_running_feet, 3),
            "nos": safe_float(row.count),
            "runningFeet": round_to(row.running_feet, 3),
            "sqFeet": sq_feet,
            "weight": weight,
        }
    return {
        "feet": safe_float(row.feet),
        "inch": safe_float(row.inch),
        "nos": safe_float(row.count),
        "runningFeet": round_to(row.running_feet, 3),
        "sqFeet": sq_feet,
        "weight": weight,
    }


def row_from_saved(mode: CalculationMode, row_id: int, data: Dict[str, Any]) -> CalculationRow:
    """Rebuild a row's inputs from a saved dict; derived values are recalculated."""
    if mode == CalculationMode.ROLL_AREA:
        return RollAreaRow(
            row_id=row_id,
            length=safe_float(data.get("length")),
            width=safe_float(data.get("width")),
        )
    count = safe_float(data.get("nos")) or 1
    if mode == CalculationMode.MILLIMETER:
        return MillimeterRow(row_id=row_id, mm=safe_float(data.get("mm")), count=count)
    if mode == CalculationMode.SHEET_AREA:
        return SheetAreaRow(
            row_id=row_id,
            length=safe_float(data.get("length")),
            width=safe_float(data.get("width")),
            count=count,
        )
    return FeetInchRow(
        row_id=row_id,
        feet=safe_float(data.get("feet")),
        inch=safe_float(data.get("inch")),
        count=count,
    )


class CalculationSession:
    def __init__(
        self,
        product: Product,
        mode: Optional[CalculationMode] = None,
        basis: Any = None,
        manual_quantity: Any = 0.0,
        saved_rows: Optional[Iterable[Dict[str, Any]]] = None,
    ):
        self.product = product
        self.mode = CalculationMode(mode) if mode else default_mode_for(product)
        self.basis = parse_basis(basis, product, self.mode)
        self.manual_quantity = safe_float(manual_quantity)
        self._rows: Dict[int, CalculationRow] = {}
        self._next_id = 1
        self.totals = empty_totals(self.mode, product)

        saved = list(saved_rows or [])
        if saved:
            self.load_saved(saved)
        else:
            self.add_row()

    # --- rows ---------------------------------------------------------------

    @property
    def rows(self) -> List[CalculationRow]:
        return list(self._rows.values())

    @property
    def row_ids(self) -> List[int]:
        return list(self._rows.keys())

    def row(self, row_id: int) -> CalculationRow:
        return self._rows[row_id]

    def _clean_inputs(self, values: Dict[str, Any]) -> Dict[str, Any]:
        allowed = INPUT_FIELDS[self.mode]
        unknown = sorted(set(values) - set(allowed))
        if unknown:
            raise ValueError(f"Not an input field in {self.mode.value} mode: {', '.join(unknown)}")
        cleaned = {}
        for name, value in values.items():
            if self.mode == CalculationMode.ROLL_AREA and value in (None, ""):
                cleaned[name] = None
            else:
                cleaned[name] = safe_float(value)
        return cleaned

    def add_row(self, **values) -> int:
        row_id = self._next_id
        self._next_id += 1
        row_cls = ROW_TYPES[self.mode]
        self._rows[row_id] = row_cls(row_id=row_id, **self._clean_inputs(values))

        if self.basis == CalculationBasis.COUNT and len(self._rows) > 1:
            # NOS only applies to a single row
            self.basis = CalculationBasis.WEIGHT

        self.recompute_row(row_id)
        return row_id

    def remove_row(self, row_id: int) -> bool:
        """Remove a row. The last remaining row is never removed."""
        if len(self._rows) <= 1 or row_id not in self._rows:
            return False
        del self._rows[row_id]
        self.recompute_totals()
        return True

    def update_row(self, row_id: int, **values) -> CalculationRow:
        current = self._rows[row_id]
        self._rows[row_id] = replace(current, **self._clean_inputs(values))
        return self.recompute_row(row_id)

    def _calculate(self, row: CalculationRow) -> CalculationRow:
        if self.mode == CalculationMode.FEET_INCH:
            return calculate_feet_inch_row(row, self.product)
        if self.mode == CalculationMode.MILLIMETER:
            return calculate_millimeter_row(row, self.product)
        if self.mode == CalculationMode.SHEET_AREA:
            return calculate_sheet_area_row(row, self.product)
        return calculate_roll_area_row(row)

    def recompute_row(self, row_id: int) -> CalculationRow:
        row = self._calculate(self._rows[row_id])
        self._rows[row_id] = row
        self.recompute_totals()
        return row

    def recompute_totals(self) -> None:
        self.totals = aggregate(self.mode, self.rows, self.product)

    def recompute_all(self) -> None:
        for row_id, row in list(self._rows.items()):
            self._rows[row_id] = self._calculate(row)
        self.recompute_totals()

    # --- basis --------------------------------------------------------------

    def available_bases(self):
        return available_bases(self.product, self.mode, len(self._rows))

    @property
    def can_select_count(self) -> bool:
        return CalculationBasis.COUNT in self.available_bases()

    @property
    def is_manual(self) -> bool:
        return self.basis == CalculationBasis.MANUAL

    def set_basis(self, basis: Any) -> CalculationBasis:
        basis = CalculationBasis(basis)
        if basis not in self.available_bases():
            raise ValueError(f"Basis {basis.value} is not available for this calculation")
        self.basis = basis
        return basis

    def set_manual_quantity(self, value: Any) -> None:
        self.manual_quantity = safe_float(value)

    @property
    def final_value(self) -> float:
        return select_final_value(self.totals, self.basis, self.product, self.manual_quantity)

    # --- validation / save --------------------------------------------------

    def issues(self) -> List[RowIssue]:
        issues: List[RowIssue] = []
        for row in self._rows.values():
            if self.mode == CalculationMode.FEET_INCH:
                issues.extend(feet_inch_row_issues(row))
            elif self.mode == CalculationMode.MILLIMETER:
                issues.extend(millimeter_row_issues(row))
            elif self.mode == CalculationMode.SHEET_AREA:
                issues.extend(sheet_area_row_issues(row))
            else:
                issues.extend(roll_area_row_issues(row, self.basis))
        if self.is_manual and self.manual_quantity <= 0:
            issues.append(RowIssue(None, "quantity", "Quantity is required"))
        return issues

    @property
    def is_valid(self) -> bool:
        return not self.issues()

    def saved_rows(self) -> List[Dict[str, float]]:
        return [row_to_saved(row, self.product) for row in self._rows.values()]

    def save(self) -> CalculationResult:
        issues = self.issues()
        if issues:
            logger.warning(
                "Rejected %s calculation for product %s: %d issue(s)",
                self.mode.value, self.product.id, len(issues),
            )
            raise CalculationRejected(issues)

        self.recompute_totals()
        final_value = self.final_value
        return CalculationResult(
            mode=self.mode,
            basis=self.basis,
            rows=self.saved_rows(),
            totals=self.totals,
            final_value=final_value,
            quantity=final_value if self.mode == CalculationMode.ROLL_AREA else None,
        )

    def load_saved(self, saved_rows: Iterable[Dict[str, Any]]) -> None:
        """Replace all rows with previously saved ones and recalculate."""
        self._rows.clear()
        for data in saved_rows:
            row_id = self._next_id
            self._next_id += 1
            self._rows[row_id] = row_from_saved(self.mode, row_id, data or {})
        if not self._rows:
            self.add_row()
            return
        if self.basis == CalculationBasis.COUNT and len(self._rows) > 1:
            self.basis = CalculationBasis.WEIGHT
        self.recompute_all()
