import pytest

from services.calculation import (
    calculate_feet_inch_row,
    calculate_millimeter_row,
    calculate_roll_area_row,
    calculate_sheet_area_row,
    feet_inch_row_issues,
    millimeter_row_issues,
    roll_area_row_issues,
    sheet_area_row_issues,
)
from services.models import (
    CalculationBasis,
    FeetInchRow,
    Product,
    ProductType,
    MillimeterRow,
    RollAreaRow,
    SheetAreaRow,
)


# --- feet / inch ------------------------------------------------------------

@pytest.mark.parametrize("feet, inch, count", [
    (10, 0, 1),
    (5, 6, 2),
    (0, 7, 3),
    (12.5, 11, 4),
])
def test_running_feet_formula(regular_product, feet, inch, count):
    row = calculate_feet_inch_row(FeetInchRow(1, feet=feet, inch=inch, count=count), regular_product)
    assert row.running_feet == pytest.approx(((feet * 12 + inch) / 12) * count)


def test_regular_feet_inch_row(regular_product):
    row = calculate_feet_inch_row(FeetInchRow(1, feet=10, inch=0, count=1), regular_product)
    assert row.running_feet == 10
    assert row.sq_feet == 35.0
    assert row.weight == 15.0
    assert row.meter == 3.252


def test_regular_with_configured_multiplier(sized_regular_product):
    row = calculate_feet_inch_row(FeetInchRow(1, feet=5, inch=6, count=2), sized_regular_product)
    assert row.running_feet == pytest.approx(11.0)
    assert row.sq_feet == 44.0
    assert row.weight == 22.0


def test_laminated_double_has_no_weight(double_wall):
    row = calculate_feet_inch_row(FeetInchRow(1, feet=10, inch=0, count=1), double_wall)
    assert row.sq_feet == 20.0
    assert row.weight is None


def test_laminated_single(single_wall):
    row = calculate_feet_inch_row(FeetInchRow(1, feet=1, inch=0, count=3), single_wall)
    assert row.sq_feet == 3.48
    assert row.weight is None


def test_other_product_weight_uses_multiplier_of_one(nos_product):
    row = calculate_feet_inch_row(FeetInchRow(1, feet=2, inch=0, count=1), nos_product)
    assert row.sq_feet == 2.0
    assert row.weight == 2.0


def test_empty_feet_inch_row_computes_to_zero(regular_product, double_wall):
    row = calculate_feet_inch_row(FeetInchRow(1, feet=0, inch=0, count=1), regular_product)
    assert (row.running_feet, row.sq_feet, row.weight, row.meter) == (0.0, 0.0, 0.0, 0.0)
    row = calculate_feet_inch_row(FeetInchRow(1), double_wall)
    assert row.weight is None


def test_feet_inch_issues():
    issues = feet_inch_row_issues(FeetInchRow(3, feet=2, inch=-1, count=0))
    assert {i.field for i in issues} == {"inch", "count"}
    assert all(i.row_id == 3 for i in issues)
    assert feet_inch_row_issues(FeetInchRow(1, feet=0, inch=0))[0].field == "feet"
    assert feet_inch_row_issues(FeetInchRow(1, feet=0, inch=4)) == []


# --- millimeter ---------------------------------------------------------------

def test_laminated_single_millimeter(single_wall):
    row = calculate_millimeter_row(MillimeterRow(1, mm=304.8, count=2), single_wall)
    assert row.size_in_running_feet == 1.0
    assert row.running_feet == 2.0
    assert row.sq_feet == 2.32
    assert row.weight is None
    assert row.meter == 0.305


def test_regular_millimeter_weight(mm_product):
    row = calculate_millimeter_row(MillimeterRow(1, mm=609.6, count=3), mm_product)
    assert row.size_in_running_feet == 2.0
    assert row.running_feet == pytest.approx(6.0)
    assert row.weight == 3.0
    assert row.sq_feet == 0.0


def test_millimeter_issues():
    assert millimeter_row_issues(MillimeterRow(1, mm=0))[0].field == "mm"
    assert millimeter_row_issues(MillimeterRow(1, mm=-5))[0].message == "MM cannot be negative"
    assert millimeter_row_issues(MillimeterRow(1, mm=100, count=1)) == []


# --- sheet area ---------------------------------------------------------------

def test_regular_sheet_area(regular_product):
    row = calculate_sheet_area_row(SheetAreaRow(1, length=304.8, width=304.8, count=2), regular_product)
    assert row.sq_mm == 185806.08
    assert row.sq_feet == 7.0
    assert row.weight == 10.5


def test_laminated_sheet_area(double_wall):
    row = calculate_sheet_area_row(SheetAreaRow(1, length=304.8, width=304.8, count=1), double_wall)
    assert row.sq_feet == 2.0
    assert row.weight is None


def test_sheet_area_issues():
    issues = sheet_area_row_issues(SheetAreaRow(1, length=0, width=-1, count=1))
    assert [i.field for i in issues] == ["length", "width"]


# --- roll area ----------------------------------------------------------------

def test_roll_area_total():
    row = calculate_roll_area_row(RollAreaRow(1, length=2, width=3))
    assert row.total == 6.0
    row = calculate_roll_area_row(RollAreaRow(1, length=1.23456, width=1))
    assert row.total == 1.2346


def test_roll_area_missing_input_is_zero():
    assert calculate_roll_area_row(RollAreaRow(1, length=2)).total == 0.0


def test_roll_area_issues_depend_on_basis():
    row = RollAreaRow(1, length=0, width=3)
    assert [i.field for i in roll_area_row_issues(row, CalculationBasis.SQUARE_FEET)] == ["length"]
    assert roll_area_row_issues(row, CalculationBasis.MANUAL) == []


def test_tie_values_round_up():
    product = Product(id=1, name="GI", type=ProductType.REGULAR, sq_feet_multiplier=2.5, weight=0.25)
    row = calculate_feet_inch_row(FeetInchRow(1, feet=0, inch=3, count=1), product)
    assert (row.weight, row.sq_feet) == (0.063, 0.63)


def test_nine_inches_default_multiplier(regular_product):
    row = calculate_feet_inch_row(FeetInchRow(1, feet=0, inch=9, count=1), regular_product)
    assert row.sq_feet == 2.63


def test_roll_total_tie_rounds_up():
    assert calculate_roll_area_row(RollAreaRow(1, length=0.125, width=0.25)).total == 0.0313
