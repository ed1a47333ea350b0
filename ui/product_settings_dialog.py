"""Product settings dialog for editing the calculation fields of a product."""

from dataclasses import replace

from PySide6.QtWidgets import (
    QDialog,
    QVBoxLayout,
    QFormLayout,
    QGroupBox,
    QDoubleSpinBox,
    QComboBox,
    QLabel,
    QDialogButtonBox,
)
from PySide6.QtCore import Signal

from services.calculation import DEFAULT_SQ_FEET_MULTIPLIER, resolve_multiplier
from services.models import CalculationType, PolyCarbonateType, Product, ProductType
from services.product_catalog import normalize_product

TYPE_LABELS = {
    ProductType.NOS: "NOS",
    ProductType.REGULAR: "Regular",
    ProductType.POLY_CARBONATE: "Poly Carbonate",
    ProductType.POLY_CARBONATE_ROLL: "Poly Carbonate Roll",
    ProductType.ACCESSORIES: "Accessories",
}

SUB_TYPE_LABELS = {
    PolyCarbonateType.SINGLE: "Single",
    PolyCarbonateType.DOUBLE: "Double",
    PolyCarbonateType.FULL_SHEET: "Full Sheet",
}


class ProductSettingsDialog(QDialog):
    """Dialog for customizing a product's type, multipliers and prices."""

    settings_changed = Signal(object)

    def __init__(self, product: Product, parent=None):
        super().__init__(parent)
        self.setWindowTitle(f"Product Settings - {product.name}")
        self.setMinimumWidth(420)

        self.product = product
        self._init_ui()
        self._load_settings()

    def _init_ui(self):
        layout = QVBoxLayout(self)

        # === Type ===
        type_group = QGroupBox("Type")
        type_layout = QFormLayout()

        self.type_combo = QComboBox()
        for ptype, label in TYPE_LABELS.items():
            self.type_combo.addItem(label, ptype.value)
        type_layout.addRow("Product Type:", self.type_combo)

        self.sub_type_combo = QComboBox()
        for sub, label in SUB_TYPE_LABELS.items():
            self.sub_type_combo.addItem(label, sub.value)
        type_layout.addRow("Poly Carbonate Type:", self.sub_type_combo)

        self.calc_type_combo = QComboBox()
        self.calc_type_combo.addItem("Feet / Inch", CalculationType.SQ_FEET.value)
        self.calc_type_combo.addItem("MM", CalculationType.MM.value)
        type_layout.addRow("Calculation Type:", self.calc_type_combo)

        type_group.setLayout(type_layout)
        layout.addWidget(type_group)

        # === Calculation ===
        calc_group = QGroupBox("Calculation")
        calc_layout = QFormLayout()

        self.multiplier = QDoubleSpinBox()
        self.multiplier.setRange(0.0, 100.0)
        self.multiplier.setDecimals(3)
        self.multiplier.setValue(DEFAULT_SQ_FEET_MULTIPLIER)
        calc_layout.addRow("Sq.Feet Multiplier:", self.multiplier)

        self.weight = QDoubleSpinBox()
        self.weight.setRange(0.0, 10000.0)
        self.weight.setDecimals(3)
        self.weight.setSuffix(" kg/rft")
        calc_layout.addRow("Weight:", self.weight)

        self.effective_multiplier = QLabel("")
        calc_layout.addRow("Effective Multiplier:", self.effective_multiplier)

        calc_group.setLayout(calc_layout)
        layout.addWidget(calc_group)

        # === Price ===
        price_group = QGroupBox("Price")
        price_layout = QFormLayout()

        self.unit_price = QDoubleSpinBox()
        self.unit_price.setRange(0.0, 1e9)
        self.unit_price.setDecimals(2)
        price_layout.addRow("Purchase Amount:", self.unit_price)

        self.tax_percentage = QDoubleSpinBox()
        self.tax_percentage.setRange(0.0, 100.0)
        self.tax_percentage.setDecimals(2)
        self.tax_percentage.setSuffix(" %")
        price_layout.addRow("Tax:", self.tax_percentage)

        price_group.setLayout(price_layout)
        layout.addWidget(price_group)

        self.type_combo.currentIndexChanged.connect(self._on_type_changed)
        for spin in (self.multiplier, self.weight):
            spin.valueChanged.connect(self._update_effective_multiplier)
        self.sub_type_combo.currentIndexChanged.connect(self._update_effective_multiplier)

        # Buttons
        button_box = QDialogButtonBox(
            QDialogButtonBox.Ok | QDialogButtonBox.Cancel | QDialogButtonBox.Apply | QDialogButtonBox.RestoreDefaults
        )
        button_box.accepted.connect(self.accept)
        button_box.rejected.connect(self.reject)
        button_box.button(QDialogButtonBox.Apply).clicked.connect(self._apply_settings)
        button_box.button(QDialogButtonBox.RestoreDefaults).clicked.connect(self._restore_defaults)
        layout.addWidget(button_box)

    def _load_settings(self):
        """Load the fields from self.product."""
        p = self.product
        self.type_combo.setCurrentIndex(max(self.type_combo.findData(p.type.value), 0))
        if p.poly_carbonate_type is not None:
            self.sub_type_combo.setCurrentIndex(max(self.sub_type_combo.findData(p.poly_carbonate_type.value), 0))
        self.calc_type_combo.setCurrentIndex(max(self.calc_type_combo.findData(p.calculation_type.value), 0))
        if p.sq_feet_multiplier:
            self.multiplier.setValue(p.sq_feet_multiplier)
        self.weight.setValue(p.weight or 0.0)
        self.unit_price.setValue(p.unit_price or 0.0)
        self.tax_percentage.setValue(p.tax_percentage or 0.0)
        self._on_type_changed()

    def _on_type_changed(self, *_):
        ptype = ProductType(self.type_combo.currentData())
        # multiplier only for REGULAR, sub-type only for POLY_CARBONATE
        self.multiplier.setEnabled(ptype == ProductType.REGULAR)
        if ptype != ProductType.REGULAR:
            self.multiplier.setValue(DEFAULT_SQ_FEET_MULTIPLIER)
        self.sub_type_combo.setEnabled(ptype == ProductType.POLY_CARBONATE)
        self.weight.setEnabled(ptype not in (ProductType.POLY_CARBONATE, ProductType.POLY_CARBONATE_ROLL))
        self._update_effective_multiplier()

    def _update_effective_multiplier(self, *_):
        self.effective_multiplier.setText(f"{resolve_multiplier(self.get_product()):g}")

    def _apply_settings(self):
        """Emit the edited product without closing the dialog."""
        self.settings_changed.emit(self.get_product())

    def _restore_defaults(self):
        self.multiplier.setValue(DEFAULT_SQ_FEET_MULTIPLIER)
        self.sub_type_combo.setCurrentIndex(0)
        self.calc_type_combo.setCurrentIndex(0)

    def get_product(self) -> Product:
        """Return the edited product, normalised the way it is saved."""
        ptype = ProductType(self.type_combo.currentData())
        return normalize_product(replace(
            self.product,
            type=ptype,
            poly_carbonate_type=PolyCarbonateType(self.sub_type_combo.currentData()),
            sq_feet_multiplier=self.multiplier.value(),
            weight=self.weight.value(),
            unit_price=self.unit_price.value(),
            tax_percentage=self.tax_percentage.value(),
            calculation_type=CalculationType(self.calc_type_combo.currentData()),
        ))
