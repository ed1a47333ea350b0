"""Roll calculation dialog: length x width rows with Sq.Feet or manual basis.

In manual mode the rows become optional and the quantity typed below the
basis selector is what gets saved.
"""

from PySide6.QtWidgets import QDoubleSpinBox

from services.models import CalculationMode
from ui.calculation_dialog import CalculationDialog


class RollCalculationDialog(CalculationDialog):
    def __init__(self, session, parent=None):
        if session.mode != CalculationMode.ROLL_AREA:
            raise ValueError("RollCalculationDialog needs a roll area session")
        super().__init__(session, parent)

    def _build_extra_controls(self, form):
        self.manual_quantity = QDoubleSpinBox()
        self.manual_quantity.setRange(0.0, 1e9)
        self.manual_quantity.setDecimals(2)
        self.manual_quantity.setValue(self.session.manual_quantity)
        self.manual_quantity.valueChanged.connect(self._on_manual_quantity_changed)
        form.addRow("Quantity:", self.manual_quantity)

    def _on_basis_applied(self):
        self.manual_quantity.setEnabled(self.session.is_manual)

    def _on_manual_quantity_changed(self, value):
        self.session.set_manual_quantity(value)
        self._refresh_totals()
