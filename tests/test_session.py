import pytest

from services.errors import CalculationRejected
from services.models import (
    CalculationBasis as B,
    CalculationMode,
    CalculationType,
    FeetInchRow,
    Product,
    ProductType,
    RollAreaTotals,
    StandardTotals,
)
from services.session import CalculationSession, default_mode_for, parse_basis, row_from_saved


def test_default_modes(regular_product, mm_product, roll_product):
    assert default_mode_for(regular_product) == CalculationMode.FEET_INCH
    assert default_mode_for(mm_product) == CalculationMode.MILLIMETER
    assert default_mode_for(roll_product) == CalculationMode.ROLL_AREA


def test_new_session_has_one_empty_row(regular_product):
    session = CalculationSession(regular_product)
    assert len(session.rows) == 1
    assert session.basis == B.WEIGHT
    assert not session.is_valid


def test_update_row_recalculates_row_and_totals(regular_product):
    session = CalculationSession(regular_product)
    row_id = session.row_ids[0]
    row = session.update_row(row_id, feet="10", inch="")
    assert row.running_feet == 10
    assert row.sq_feet == 35.0
    assert session.totals.total_weight == 15.0
    assert session.final_value == 15.0


def test_update_row_rejects_derived_fields(regular_product):
    session = CalculationSession(regular_product)
    with pytest.raises(ValueError):
        session.update_row(session.row_ids[0], running_feet=4)


def test_unknown_basis_falls_back(regular_product, double_wall):
    assert parse_basis("X", regular_product, CalculationMode.FEET_INCH) == B.WEIGHT
    assert parse_basis("W", double_wall, CalculationMode.FEET_INCH) == B.SQUARE_FEET
    assert parse_basis(None, regular_product, CalculationMode.FEET_INCH) == B.WEIGHT


def test_count_basis_only_for_single_row(regular_product):
    session = CalculationSession(regular_product)
    session.update_row(session.row_ids[0], feet=10, count=4)
    session.set_basis("N")
    assert session.can_select_count
    assert session.final_value == 4

    session.add_row(feet=2)
    assert session.basis == B.WEIGHT
    assert not session.can_select_count
    with pytest.raises(ValueError):
        session.set_basis(B.COUNT)


def test_remove_row_keeps_last(regular_product):
    session = CalculationSession(regular_product)
    only = session.row_ids[0]
    assert session.remove_row(only) is False
    second = session.add_row(feet=3)
    session.update_row(only, feet=1)
    assert session.remove_row(only) is True
    assert session.row_ids == [second]
    assert session.totals.total_running_feet == 3


def test_save_regular(regular_product):
    session = CalculationSession(regular_product)
    session.update_row(session.row_ids[0], feet=10)
    session.set_basis(B.SQUARE_FEET)
    result = session.save()
    assert result.final_value == 35.0
    assert result.basis == B.SQUARE_FEET
    assert result.quantity is None
    assert isinstance(result.totals, StandardTotals)
    assert result.rows == [{
        "feet": 10.0, "inch": 0.0, "nos": 1.0,
        "runningFeet": 10.0, "sqFeet": 0.0, "weight": 15.0,
    }]


def test_save_invalid_raises(regular_product):
    session = CalculationSession(regular_product)
    with pytest.raises(CalculationRejected) as exc:
        session.save()
    assert exc.value.issues
    assert "Enter feet or inch" in str(exc.value)


def test_laminated_double_session(double_wall):
    session = CalculationSession(double_wall)
    session.update_row(session.row_ids[0], feet=10)
    result = session.save()
    assert isinstance(result.totals, RollAreaTotals)
    assert result.final_value == 20.0
    assert result.rows[0]["sqFeet"] == 20.0
    assert result.rows[0]["weight"] == 0.0


def test_laminated_single_millimeter_session(single_wall):
    session = CalculationSession(single_wall, mode=CalculationMode.MILLIMETER)
    row = session.update_row(session.row_ids[0], mm=304.8, count=2)
    assert row.running_feet == 2.0
    assert row.sq_feet == 2.32
    assert session.save().final_value == 2.32


def test_regular_without_multiplier():
    product = Product(id=9, name="plain", type=ProductType.REGULAR, calculation_type=CalculationType.SQ_FEET)
    session = CalculationSession(product, basis="SF")
    session.update_row(session.row_ids[0], feet=10)
    assert session.row(session.row_ids[0]).sq_feet == 35.00
    assert session.final_value == 35.00


def test_roll_manual_without_rows(roll_product):
    session = CalculationSession(roll_product, basis="M")
    session.set_manual_quantity(7.5)
    result = session.save()
    assert result.final_value == 7.5
    assert result.quantity == 7.5


def test_roll_manual_needs_quantity(roll_product):
    session = CalculationSession(roll_product, basis="M")
    with pytest.raises(CalculationRejected) as exc:
        session.save()
    assert exc.value.issues[0].field == "quantity"
    assert exc.value.issues[0].row_id is None


def test_roll_square_feet(roll_product):
    session = CalculationSession(roll_product)
    row = session.update_row(session.row_ids[0], length=2, width=3)
    assert row.total == 6.0
    assert session.final_value == 6.0

    second = session.add_row(length=0, width=3)
    with pytest.raises(CalculationRejected) as exc:
        session.save()
    assert {i.row_id for i in exc.value.issues} == {second}

    session.remove_row(second)
    assert session.save().final_value == 6.0


def test_roll_blank_input_is_none(roll_product):
    session = CalculationSession(roll_product)
    row = session.update_row(session.row_ids[0], length="", width=3)
    assert row.length is None
    assert row.total == 0.0


def test_running_feet_kept_exact_but_saved_rounded(regular_product):
    session = CalculationSession(regular_product)
    row = session.update_row(session.row_ids[0], feet=0, inch=1)
    assert row.running_feet == pytest.approx(1 / 12)
    assert session.saved_rows()[0]["runningFeet"] == 0.083


def test_reload_saved_rows(regular_product):
    session = CalculationSession(regular_product)
    session.update_row(session.row_ids[0], feet=10)
    session.add_row(feet=5, inch=6, count=2)
    saved = session.save().rows

    reopened = CalculationSession(regular_product, basis="RF", saved_rows=saved)
    assert len(reopened.rows) == 2
    assert reopened.totals.total_running_feet == pytest.approx(21.0)
    assert reopened.final_value == pytest.approx(21.0)


def test_reload_drops_count_basis_for_many_rows(regular_product):
    saved = [{"feet": 1, "nos": 1}, {"feet": 2, "nos": 1}]
    session = CalculationSession(regular_product, basis="N", saved_rows=saved)
    assert session.basis == B.WEIGHT


def test_row_from_saved_defaults_count():
    row = row_from_saved(CalculationMode.FEET_INCH, 4, {"feet": "3"})
    assert row == FeetInchRow(4, feet=3.0, inch=0.0, count=1)


@pytest.mark.parametrize("basis, expected", [("W", 10.5), ("SF", 7.0)])
def test_sheet_area_session(regular_product, basis, expected):
    session = CalculationSession(regular_product, mode=CalculationMode.SHEET_AREA, basis=basis)
    session.update_row(session.row_ids[0], length=304.8, width=304.8, count=2)
    result = session.save()
    assert result.mode == CalculationMode.SHEET_AREA
    assert result.final_value == expected
    assert result.rows[0]["sqMM"] == 185806.08


def test_sheet_area_laminated_session(double_wall):
    session = CalculationSession(double_wall, mode=CalculationMode.SHEET_AREA)
    session.update_row(session.row_ids[0], length=304.8, width=304.8)
    assert session.save().final_value == 2.0
    assert not hasattr(session.totals, "total_weight")
