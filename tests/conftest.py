import os
import sys
import tempfile
from pathlib import Path

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
# keep QSettings written by the window out of the real user config
os.environ["XDG_CONFIG_HOME"] = tempfile.mkdtemp(prefix="sheetcalc-config-")

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from services.models import (  # noqa: E402
    CalculationType,
    PolyCarbonateType,
    Product,
    ProductType,
)


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def regular_product():
    return Product(id=1, name="GI Sheet", type=ProductType.REGULAR, sq_feet_multiplier=None, weight=1.5)


@pytest.fixture
def sized_regular_product():
    return Product(id=2, name="GI Plain", type=ProductType.REGULAR, sq_feet_multiplier=4.0, weight=2.0)


@pytest.fixture
def mm_product():
    return Product(
        id=3, name="MS Flat", type=ProductType.REGULAR, weight=0.5,
        calculation_type=CalculationType.MM,
    )


@pytest.fixture
def single_wall():
    return Product(
        id=4, name="PC Single", type=ProductType.POLY_CARBONATE,
        poly_carbonate_type=PolyCarbonateType.SINGLE,
    )


@pytest.fixture
def double_wall():
    return Product(
        id=5, name="PC Double", type=ProductType.POLY_CARBONATE,
        poly_carbonate_type=PolyCarbonateType.DOUBLE,
    )


@pytest.fixture
def roll_product():
    return Product(id=7, name="PC Roll", type=ProductType.POLY_CARBONATE_ROLL)


@pytest.fixture
def nos_product():
    return Product(id=8, name="Screw", type=ProductType.NOS)
