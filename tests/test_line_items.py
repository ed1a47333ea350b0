import pytest

from services.errors import LineItemError
from services.line_items import (
    all_qc_passed,
    apply_calculation,
    apply_product,
    build_return_payload,
    challan_totals,
    clamp_qc_pass,
    is_qc_passed,
    max_return_quantity,
    price_line,
    return_invoice_number,
    validate_challan,
)
from services.models import ChallanLine, Product, ProductType, ReturnLine
from services.session import CalculationSession


def test_price_line():
    line = price_line(ChallanLine(product_id=1, quantity=12.5, unit_price=92, tax_percentage=18))
    assert line.price == 1150.0
    assert line.tax_amount == 207.0


def test_apply_product_takes_price_and_tax():
    product = Product(id=3, name="x", type=ProductType.NOS, unit_price=10, tax_percentage=5)
    line = apply_product(ChallanLine(quantity=3), product)
    assert line.product_id == 3
    assert line.price == 30.0
    assert line.tax_amount == 1.5


def test_apply_calculation_sets_quantity(regular_product):
    session = CalculationSession(regular_product)
    session.update_row(session.row_ids[0], feet=10)
    result = session.save()
    line = apply_calculation(ChallanLine(product_id=1, unit_price=2, tax_percentage=10), result)
    assert line.quantity == 15.0
    assert line.price == 30.0
    assert line.tax_amount == 3.0
    assert line.calculation is result


def test_challan_totals():
    lines = [
        ChallanLine(price=100, tax_amount=18),
        ChallanLine(price=50.5, tax_amount=9.09),
    ]
    totals = challan_totals(lines, 25)
    assert totals.price == 150.5
    assert totals.tax_amount == pytest.approx(27.09)
    assert totals.grand_total == pytest.approx(202.59)
    assert challan_totals([], -5).packaging_charges == 0.0


def test_validate_challan():
    good = ChallanLine(product_id=1, quantity=2, unit_price=1)
    validate_challan([good])
    with pytest.raises(LineItemError) as exc:
        validate_challan([ChallanLine(quantity=0, batch_number='A"1')])
    message = str(exc.value)
    assert "Product is required" in message
    assert "Quantity must be at least 1" in message
    assert "double quotes" in message
    with pytest.raises(LineItemError):
        validate_challan([])


@pytest.mark.parametrize("qc, expected", [
    ("", (None, None)),
    (None, (None, None)),
    ("4", (4.0, None)),
    ("0", (0.0, None)),
    ("-1", (0.0, "QC pass quantity cannot be negative")),
    ("abc", (0.0, "QC pass quantity cannot be negative")),
    ("12", (10.0, "QC pass quantity cannot exceed ordered quantity")),
])
def test_clamp_qc_pass(qc, expected):
    assert clamp_qc_pass(10, qc) == expected


def test_qc_status():
    assert not is_qc_passed(ChallanLine(quantity=5))
    assert is_qc_passed(ChallanLine(quantity=5, qc_pass=0))
    assert not is_qc_passed(ChallanLine(quantity=5, qc_pass=6))
    assert all_qc_passed([ChallanLine(quantity=5, qc_pass=5), ChallanLine(quantity=2, qc_pass=1)])
    assert not all_qc_passed([ChallanLine(quantity=5, qc_pass=5), ChallanLine(quantity=2)])
    assert not all_qc_passed([])


def test_max_return_quantity():
    assert max_return_quantity(10, 7) == 3
    assert max_return_quantity(10, 12) == 0
    assert max_return_quantity(10, None) == 10


def test_return_invoice_number():
    assert return_invoice_number("INV-9") == "PR-INV-9"
    assert return_invoice_number(None) == ""


def _return_lines():
    return [
        ReturnLine(purchase_item_id=1, product_id=10, quantity=10, qc_pass=7, unit_price=5, return_quantity=3),
        ReturnLine(purchase_item_id=2, product_id=11, quantity=4, qc_pass=4, unit_price=2, return_quantity=0),
    ]


def test_build_return_payload_keeps_positive_lines():
    payload = build_return_payload(
        purchase_id=42, customer_id=7, return_date="2024-05-01",
        invoice_number=return_invoice_number("INV-1"), lines=_return_lines(),
        packaging_charges=12,
    )
    assert payload["invoiceNumber"] == "PR-INV-1"
    assert payload["packagingAndForwadingCharges"] == 12.0
    assert [p["purchaseItemId"] for p in payload["products"]] == [1]
    assert payload["products"][0]["quantity"] == 3.0


def test_return_over_limit_rejected():
    lines = _return_lines()
    lines[0].return_quantity = 4
    with pytest.raises(LineItemError, match="cannot exceed 3"):
        build_return_payload(1, None, "2024-05-01", "PR-1", lines)


def test_return_nothing_selected():
    lines = _return_lines()
    lines[0].return_quantity = None
    with pytest.raises(LineItemError, match="at least one return quantity"):
        build_return_payload(1, None, "2024-05-01", "PR-1", lines)
