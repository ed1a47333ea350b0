from PySide6.QtWidgets import QDialog, QVBoxLayout, QLabel, QLineEdit, QPushButton

from services.line_items import clamp_qc_pass, max_return_quantity


class QcPassDialog(QDialog):
    """Ask for the QC pass quantity of one received challan line."""

    def __init__(self, quantity: float, qc_pass=None, parent=None):
        super().__init__(parent)
        self.setWindowTitle("QC Pass")
        self.quantity = float(quantity or 0)

        layout = QVBoxLayout()

        self.quantity_label = QLabel(f"Received quantity: {self.quantity:g}")
        layout.addWidget(self.quantity_label)

        self.qc_pass_label = QLabel("QC pass quantity:")
        self.qc_pass_input = QLineEdit()
        if qc_pass is not None:
            self.qc_pass_input.setText(f"{qc_pass:g}")
        self.qc_pass_input.textChanged.connect(self._update_return_hint)
        layout.addWidget(self.qc_pass_label)
        layout.addWidget(self.qc_pass_input)

        self.return_hint = QLabel("")
        layout.addWidget(self.return_hint)

        self.ok_button = QPushButton("OK")
        self.ok_button.clicked.connect(self.accept)
        layout.addWidget(self.ok_button)

        self.setLayout(layout)
        self._update_return_hint()

    def _update_return_hint(self):
        value, _ = clamp_qc_pass(self.quantity, self.qc_pass_input.text())
        if value is None:
            self.return_hint.setText("Not checked yet")
        else:
            self.return_hint.setText(f"Returnable: {max_return_quantity(self.quantity, value):g}")

    def get_values(self):
        """Return (qc_pass, warning). qc_pass is None when left blank."""
        return clamp_qc_pass(self.quantity, self.qc_pass_input.text())
