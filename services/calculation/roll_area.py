"""Roll area rows: plain length x width.

With the manual basis every row is optional; the separately entered quantity
is used instead of the summed area.
"""

from dataclasses import replace
from typing import List

from ..models import CalculationBasis, RollAreaRow, RowIssue
from .units import round_to, safe_float


def roll_area_row_issues(row: RollAreaRow, basis: CalculationBasis) -> List[RowIssue]:
    if basis == CalculationBasis.MANUAL:
        return []
    issues: List[RowIssue] = []
    for name in ("length", "width"):
        if safe_float(getattr(row, name)) <= 0:
            issues.append(RowIssue(row.row_id, name, f"{name.title()} is required"))
    return issues


def calculate_roll_area_row(row: RollAreaRow) -> RollAreaRow:
    if row.length is None or row.width is None:
        return replace(row, total=0.0)
    total = round_to(safe_float(row.length) * safe_float(row.width), 4)
    return replace(row, total=total)
