import math

import pytest

from services.calculation import (
    feet_inch_to_feet,
    meter_from_mm,
    meter_from_sq_feet,
    mm_to_feet,
    round_to,
    safe_float,
    sq_feet_to_sq_mm,
    sq_mm_to_sq_feet,
)


def test_meter_conversions():
    assert meter_from_mm(1000) == 1.0
    assert meter_from_sq_feet(10.764) == 1.0
    assert meter_from_mm(1234.5678) == 1.235


def test_feet_inch_to_feet():
    assert feet_inch_to_feet(10, 6) == pytest.approx(10.5)
    assert feet_inch_to_feet(0, 18) == pytest.approx(1.5)


def test_mm_to_feet_uses_304_8():
    assert mm_to_feet(304.8) == 1.0
    assert mm_to_feet(609.6) == pytest.approx(2.0)


def test_square_conversions_are_inverse():
    assert sq_mm_to_sq_feet(304.8 * 304.8) == pytest.approx(1.0)
    assert sq_feet_to_sq_mm(2.0) == pytest.approx(2 * 304.8 * 304.8)


@pytest.mark.parametrize("raw, expected", [
    (None, 0.0),
    ("", 0.0),
    ("abc", 0.0),
    ("2.5", 2.5),
    (3, 3.0),
    (float("nan"), 0.0),
    (math.inf, 0.0),
])
def test_safe_float(raw, expected):
    assert safe_float(raw) == expected


def test_safe_float_default():
    assert safe_float("x", default=-1.0) == -1.0


def test_round_to():
    assert round_to(1.23456) == 1.235
    assert round_to(1.23456, 2) == 1.23


@pytest.mark.parametrize("value, places, expected", [
    (0.0625, 3, 0.063),
    (2.625, 2, 2.63),
    (0.03125, 4, 0.0313),
    (6.125, 2, 6.13),
])
def test_round_to_rounds_ties_up(value, places, expected):
    assert round_to(value, places) == expected
