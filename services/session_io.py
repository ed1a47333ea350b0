"""JSON persistence for challans and their saved calculations.

A challan file (extension CHALLAN_EXT) keeps every line together with the
calculation that produced its quantity, so a line can be reopened and edited
later. Totals are stored for reference only; on load they are rebuilt from the
saved rows.
"""

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Optional

from .calculation import safe_float
from .errors import SessionFileError
from .models import (
    CalculationResult,
    ChallanDocument,
    ChallanLine,
    Product,
)
from .product_catalog import ProductCatalog
from .session import CalculationSession

CHALLAN_EXT = ".shc"
FORMAT_VERSION = 1


def result_to_dict(result: CalculationResult) -> Dict[str, Any]:
    return {
        "mode": result.mode.value,
        "calculationBase": result.basis.value,
        "calculations": list(result.rows),
        "totals": asdict(result.totals),
        "finalValue": result.final_value,
        "quantity": result.quantity,
    }


def session_from_dict(data: Dict[str, Any], product: Product) -> CalculationSession:
    """Reopen a saved calculation for editing."""
    # no stored mode: the product decides
    return CalculationSession(
        product,
        mode=data.get("mode") or None,
        basis=data.get("calculationBase"),
        manual_quantity=data.get("quantity") or 0.0,
        saved_rows=data.get("calculations") or [],
    )


def result_from_dict(data: Dict[str, Any], product: Product) -> CalculationResult:
    """Rebuild a result by recalculating the saved rows.

    Invalid saved rows do not make the file unreadable; the stored final value
    is kept in that case.
    """
    session = session_from_dict(data, product)
    if session.is_valid:
        return session.save()
    session.recompute_totals()
    return CalculationResult(
        mode=session.mode,
        basis=session.basis,
        rows=session.saved_rows(),
        totals=session.totals,
        final_value=safe_float(data.get("finalValue")),
        quantity=data.get("quantity"),
    )


def line_to_dict(line: ChallanLine) -> Dict[str, Any]:
    return {
        "id": line.id,
        "productId": line.product_id,
        "quantity": line.quantity,
        "batchNumber": line.batch_number,
        "unitPrice": line.unit_price,
        "price": line.price,
        "taxPercentage": line.tax_percentage,
        "taxAmount": line.tax_amount,
        "qcPass": line.qc_pass,
        "remarks": line.remarks,
        "calculation": result_to_dict(line.calculation) if line.calculation else None,
    }


def line_from_dict(data: Dict[str, Any], catalog: ProductCatalog) -> ChallanLine:
    product_id = data.get("productId")
    calculation = None
    product = catalog.get(product_id)
    if data.get("calculation") and product is not None:
        calculation = result_from_dict(data["calculation"], product)
    qc_pass = data.get("qcPass")
    return ChallanLine(
        id=data.get("id"),
        product_id=product_id,
        quantity=safe_float(data.get("quantity")),
        batch_number=data.get("batchNumber") or "",
        unit_price=safe_float(data.get("unitPrice")),
        price=safe_float(data.get("price")),
        tax_percentage=safe_float(data.get("taxPercentage")),
        tax_amount=safe_float(data.get("taxAmount")),
        qc_pass=None if qc_pass is None else safe_float(qc_pass),
        remarks=data.get("remarks"),
        calculation=calculation,
    )


def document_to_dict(doc: ChallanDocument) -> Dict[str, Any]:
    return {
        "version": FORMAT_VERSION,
        "invoiceNumber": doc.invoice_number,
        "customerId": doc.customer_id,
        "packagingAndForwadingCharges": doc.packaging_charges,
        "products": [line_to_dict(l) for l in doc.lines],
    }


def document_from_dict(data: Dict[str, Any], catalog: ProductCatalog) -> ChallanDocument:
    return ChallanDocument(
        invoice_number=data.get("invoiceNumber") or "",
        customer_id=data.get("customerId"),
        packaging_charges=safe_float(data.get("packagingAndForwadingCharges")),
        lines=[line_from_dict(d, catalog) for d in data.get("products") or []],
    )


def save_document(path: Path, doc: ChallanDocument) -> Path:
    path = Path(path)
    if path.suffix.lower() != CHALLAN_EXT:
        path = path.with_suffix(CHALLAN_EXT)
    try:
        path.write_text(json.dumps(document_to_dict(doc), ensure_ascii=False, indent=2), encoding="utf-8")
    except OSError as e:
        raise SessionFileError(f"Cannot write {path.name}: {e}") from e
    return path


def load_document(path: Path, catalog: Optional[ProductCatalog] = None) -> ChallanDocument:
    path = Path(path)
    catalog = catalog or ProductCatalog()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise SessionFileError(f"Cannot read {path.name}: {e}") from e
    if not isinstance(data, dict):
        raise SessionFileError(f"{path.name} is not a challan file")
    try:
        return document_from_dict(data, catalog)
    except (TypeError, ValueError, AttributeError) as e:
        raise SessionFileError(f"{path.name} is damaged: {e}") from e
