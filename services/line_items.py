"""Purchase challan line pricing, QC pass and purchase return rules.

Pricing per line:
- price      = round2(quantity * unit_price)
- tax_amount = round2(price * tax_percentage / 100)
Challan grand total = sum(price) + sum(tax_amount) + packaging charges.

QC pass is bounded by the received quantity; whatever did not pass QC is the
most that can be returned to the supplier.
"""

import logging
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .calculation import round_to, safe_float
from .errors import LineItemError
from .models import (
    CalculationResult,
    ChallanLine,
    ChallanTotals,
    Product,
    ReturnLine,
)

logger = logging.getLogger(__name__)


# --- challan lines ----------------------------------------------------------

def price_line(line: ChallanLine) -> ChallanLine:
    quantity = safe_float(line.quantity)
    unit_price = safe_float(line.unit_price)
    tax_percentage = safe_float(line.tax_percentage)
    price = round_to(quantity * unit_price, 2)
    tax_amount = round_to(price * tax_percentage / 100, 2)
    return replace(line, price=price, tax_amount=tax_amount)


def apply_product(line: ChallanLine, product: Product) -> ChallanLine:
    """Selecting a product takes over its tax percentage and purchase price."""
    line = replace(
        line,
        product_id=product.id,
        tax_percentage=product.tax_percentage or 0.0,
        unit_price=product.unit_price or 0.0,
    )
    return price_line(line)


def apply_calculation(line: ChallanLine, result: CalculationResult) -> ChallanLine:
    """Feed a saved calculation's final value into the line quantity."""
    return price_line(replace(line, quantity=result.final_value, calculation=result))


def challan_totals(lines: Iterable[ChallanLine], packaging_charges: Any = 0.0) -> ChallanTotals:
    lines = list(lines)
    price = sum(safe_float(l.price) for l in lines)
    tax_amount = sum(safe_float(l.tax_amount) for l in lines)
    packaging = max(0.0, safe_float(packaging_charges))
    return ChallanTotals(
        price=price,
        tax_amount=tax_amount,
        packaging_charges=packaging,
        grand_total=price + tax_amount + packaging,
    )


def challan_line_issues(line: ChallanLine) -> List[str]:
    issues: List[str] = []
    if line.product_id is None:
        issues.append("Product is required")
    if safe_float(line.quantity) < 1:
        issues.append("Quantity must be at least 1")
    if safe_float(line.unit_price) < 0.01:
        issues.append("Unit price must be at least 0.01")
    if line.batch_number and '"' in line.batch_number:
        issues.append("Batch number cannot contain double quotes")
    return issues


def validate_challan(lines: Sequence[ChallanLine], packaging_charges: Any = 0.0) -> None:
    """Raise LineItemError listing every problem; return quietly when valid."""
    problems: List[str] = []
    if not lines:
        problems.append("Add at least one product")
    for idx, line in enumerate(lines, start=1):
        problems.extend(f"Line {idx}: {msg}" for msg in challan_line_issues(line))
    if safe_float(packaging_charges) < 0:
        problems.append("Packaging charges cannot be negative")
    if problems:
        raise LineItemError("; ".join(problems))


# --- QC pass ----------------------------------------------------------------

def clamp_qc_pass(quantity: Any, qc_pass: Any) -> Tuple[Optional[float], Optional[str]]:
    """Bound a QC pass entry to [0, quantity]. Returns (value, warning).

    A blank entry means the line has not been checked yet: (None, None).
    """
    if qc_pass is None or (isinstance(qc_pass, str) and not qc_pass.strip()):
        return None, None
    quantity = safe_float(quantity)
    value = safe_float(qc_pass, default=float("nan"))
    if value != value or value < 0:  # NaN or negative
        logger.warning("QC pass %r rejected, reset to 0", qc_pass)
        return 0.0, "QC pass quantity cannot be negative"
    if value > quantity:
        logger.warning("QC pass %s above quantity %s, clamped", value, quantity)
        return quantity, "QC pass quantity cannot exceed ordered quantity"
    return value, None


def is_qc_passed(line: ChallanLine) -> bool:
    """Any QC number within the quantity counts as checked, including 0."""
    if line.qc_pass is None or line.qc_pass == "":
        return False
    qc = safe_float(line.qc_pass, default=float("nan"))
    return qc == qc and 0 <= qc <= safe_float(line.quantity)


def all_qc_passed(lines: Iterable[ChallanLine]) -> bool:
    lines = list(lines)
    return bool(lines) and all(is_qc_passed(l) for l in lines)


# --- purchase returns -------------------------------------------------------

def max_return_quantity(quantity: Any, qc_pass: Any) -> float:
    return max(0.0, safe_float(quantity) - safe_float(qc_pass))


def return_line_issues(line: ReturnLine) -> List[str]:
    if line.return_quantity is None or line.return_quantity == "":
        return []
    qty = safe_float(line.return_quantity, default=float("nan"))
    if qty != qty:
        return ["Return quantity must be a number"]
    limit = max_return_quantity(line.quantity, line.qc_pass)
    if qty < 0:
        return ["Return quantity cannot be negative"]
    if qty > limit:
        return [f"Return quantity cannot exceed {limit:g}"]
    return []


def return_invoice_number(purchase_invoice: Optional[str]) -> str:
    return f"PR-{purchase_invoice}" if purchase_invoice else ""


def build_return_payload(
    purchase_id: int,
    customer_id: Optional[int],
    return_date: str,
    invoice_number: str,
    lines: Sequence[ReturnLine],
    packaging_charges: Any = 0.0,
    return_id: Optional[int] = None,
) -> Dict[str, Any]:
    """Assemble a purchase return submission.

    Only lines with a positive return quantity are sent. Raises LineItemError
    if any line is out of bounds or nothing is being returned.
    """
    problems: List[str] = []
    for line in lines:
        problems.extend(f"Item {line.purchase_item_id}: {msg}" for msg in return_line_issues(line))
    if problems:
        raise LineItemError("; ".join(problems))

    products = [
        {
            "purchaseItemId": line.purchase_item_id,
            "productId": line.product_id,
            "quantity": safe_float(line.return_quantity),
            "unitPrice": line.unit_price,
            "remarks": line.remarks,
        }
        for line in lines
        if safe_float(line.return_quantity) > 0
    ]
    if not products:
        raise LineItemError("Please enter at least one return quantity greater than 0")

    return {
        "id": return_id,
        "purchaseId": purchase_id,
        "customerId": customer_id,
        "purchaseReturnDate": return_date,
        "invoiceNumber": invoice_number,
        "packagingAndForwadingCharges": max(0.0, safe_float(packaging_charges)),
        "products": products,
    }
