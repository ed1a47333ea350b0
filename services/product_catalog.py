"""Product catalog.

Modify PRODUCT_DEFAULTS to add/update built-in products. A JSON file exported
from the order system can be imported at runtime to replace them; `refresh()`
reloads from the configured loader and drops anything cached.
"""

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

from .calculation import DEFAULT_SQ_FEET_MULTIPLIER, safe_float
from .errors import SessionFileError
from .models import CalculationType, PolyCarbonateType, Product, ProductType

logger = logging.getLogger(__name__)

# (id, name, type, sub-type, sq_feet_multiplier, weight/rft, unit_price, tax %, calculation type)
PRODUCT_DEFAULTS = [
    (1, "GI Profile Sheet 0.47mm", "REGULAR", None, 3.5, 1.45, 92.0, 18.0, "SQ_FEET"),
    (2, "GI Plain Sheet 0.50mm", "REGULAR", None, 4.0, 1.62, 98.0, 18.0, "SQ_FEET"),
    (3, "MS Flat 40x5", "REGULAR", None, None, 0.48, 64.0, 18.0, "MM"),
    (4, "Polycarbonate Single Wall", "POLY_CARBONATE", "SINGLE", None, 0.0, 38.0, 18.0, "SQ_FEET"),
    (5, "Polycarbonate Double Wall", "POLY_CARBONATE", "DOUBLE", None, 0.0, 55.0, 18.0, "SQ_FEET"),
    (6, "Polycarbonate Full Sheet", "POLY_CARBONATE", "FULL_SHEET", None, 0.0, 120.0, 18.0, "MM"),
    (7, "Polycarbonate Roll", "POLY_CARBONATE_ROLL", None, None, 0.0, 42.0, 18.0, "SQ_FEET"),
    (8, "Self Drilling Screw", "NOS", None, None, 0.0, 1.2, 18.0, "SQ_FEET"),
    (9, "Ridge Cap", "ACCESSORIES", None, None, 0.0, 75.0, 18.0, "SQ_FEET"),
]


def _enum_or(enum_cls, value, default):
    if value is None or value == "":
        return default
    try:
        return enum_cls(str(value).upper())
    except ValueError:
        return default


def normalize_product(product: Product) -> Product:
    """Apply the save rules: REGULAR keeps a positive multiplier (default 3.5),
    other types drop it; only POLY_CARBONATE keeps a sub-type."""
    multiplier = None
    if product.is_regular:
        m = product.sq_feet_multiplier
        multiplier = m if (m is not None and m > 0) else DEFAULT_SQ_FEET_MULTIPLIER
    sub_type = product.poly_carbonate_type if product.is_laminated else None
    return replace(product, sq_feet_multiplier=multiplier, poly_carbonate_type=sub_type)


def product_from_dict(data: Dict[str, Any]) -> Product:
    """Build a Product from the API / JSON shape (camelCase keys)."""
    multiplier = data.get("sqFeetMultiplier")
    return Product(
        id=int(data["id"]),
        name=str(data.get("name") or ""),
        type=_enum_or(ProductType, data.get("type"), ProductType.NOS),
        poly_carbonate_type=_enum_or(PolyCarbonateType, data.get("polyCarbonateType"), None),
        sq_feet_multiplier=None if multiplier is None else safe_float(multiplier),
        weight=safe_float(data.get("weight")),
        unit_price=safe_float(data.get("purchaseAmount", data.get("unitPrice"))),
        tax_percentage=safe_float(data.get("taxPercentage")),
        calculation_type=_enum_or(CalculationType, data.get("calculationType"), CalculationType.SQ_FEET),
    )


def product_to_dict(product: Product) -> Dict[str, Any]:
    return {
        "id": product.id,
        "name": product.name,
        "type": product.type.value,
        "polyCarbonateType": product.poly_carbonate_type.value if product.poly_carbonate_type else None,
        "sqFeetMultiplier": product.sq_feet_multiplier,
        "weight": product.weight,
        "purchaseAmount": product.unit_price,
        "taxPercentage": product.tax_percentage,
        "calculationType": product.calculation_type.value,
    }


def default_products() -> List[Product]:
    return [
        normalize_product(Product(
            id=pid,
            name=name,
            type=ProductType(ptype),
            poly_carbonate_type=PolyCarbonateType(sub) if sub else None,
            sq_feet_multiplier=multiplier,
            weight=weight,
            unit_price=price,
            tax_percentage=tax,
            calculation_type=CalculationType(calc),
        ))
        for pid, name, ptype, sub, multiplier, weight, price, tax, calc in PRODUCT_DEFAULTS
    ]


class ProductCatalog:
    """In-memory product list cache.

    `loader` is any callable returning products; it is called once on first
    access and again on `refresh()`. Defaults to the built-in list.
    """

    def __init__(self, loader: Optional[Callable[[], Iterable[Product]]] = None):
        self._loader = loader or default_products
        self._products: Optional[Dict[int, Product]] = None

    def _ensure_loaded(self) -> Dict[int, Product]:
        if self._products is None:
            self._products = {p.id: p for p in self._loader()}
        return self._products

    def refresh(self) -> List[Product]:
        self._products = None
        return self.products()

    def products(self) -> List[Product]:
        return sorted(self._ensure_loaded().values(), key=lambda p: p.name.lower())

    def get(self, product_id: Optional[int]) -> Optional[Product]:
        if product_id is None:
            return None
        return self._ensure_loaded().get(product_id)

    def upsert(self, product: Product) -> Product:
        product = normalize_product(product)
        self._ensure_loaded()[product.id] = product
        return product

    def import_json(self, path: Path) -> int:
        """Replace the cached list with products from a JSON array file."""
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            products = [normalize_product(product_from_dict(d)) for d in data]
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise SessionFileError(f"Cannot import products from {path.name}: {e}") from e
        self._products = {p.id: p for p in products}
        logger.info("Imported %d products from %s", len(products), path)
        return len(products)

    def export_json(self, path: Path) -> None:
        data = [product_to_dict(p) for p in self.products()]
        Path(path).write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
