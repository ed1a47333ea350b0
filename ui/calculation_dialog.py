"""Calculation dialog for feet/inch, millimeter and sheet-area entry.

The table is a view over a CalculationSession. Every edited input cell calls
session.update_row() for that row only, then the derived cells of the row and
the totals are redrawn.
"""

from PySide6.QtWidgets import (
    QDialog,
    QVBoxLayout,
    QHBoxLayout,
    QFormLayout,
    QGroupBox,
    QComboBox,
    QLabel,
    QPushButton,
    QDialogButtonBox,
    QTableWidget,
    QTableWidgetItem,
    QHeaderView,
    QMessageBox,
)
from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QColor, QKeySequence, QShortcut

from services.errors import CalculationRejected
from services.models import BASIS_LABELS, CalculationMode
from ui.delegates import NumericColumnDelegate

INVALID_COLOR = QColor(255, 214, 214)

# (field, header, editable)
COLUMNS = {
    CalculationMode.FEET_INCH: [
        ("feet", "Feet", True),
        ("inch", "Inch", True),
        ("count", "NOS", True),
        ("running_feet", "R.Feet", False),
        ("sq_feet", "Sq.Feet", False),
        ("weight", "Weight", False),
        ("meter", "Meter", False),
    ],
    CalculationMode.MILLIMETER: [
        ("mm", "MM", True),
        ("size_in_running_feet", "Size (R.Feet)", False),
        ("count", "NOS", True),
        ("running_feet", "R.Feet", False),
        ("sq_feet", "Sq.Feet", False),
        ("weight", "Weight", False),
        ("meter", "Meter", False),
    ],
    CalculationMode.SHEET_AREA: [
        ("length", "Length (mm)", True),
        ("width", "Width (mm)", True),
        ("count", "NOS", True),
        ("sq_mm", "Sq.MM", False),
        ("sq_feet", "Sq.Feet", False),
        ("weight", "Weight", False),
    ],
    CalculationMode.ROLL_AREA: [
        ("length", "Length", True),
        ("width", "Width", True),
        ("total", "Total", False),
    ],
}

TOTAL_FIELDS = {
    CalculationMode.FEET_INCH: [
        ("total_nos", "Total NOS"),
        ("total_running_feet", "Total R.Feet"),
        ("total_sq_feet", "Total Sq.Feet"),
        ("total_weight", "Total Weight"),
        ("total_meter", "Total Meter"),
    ],
    CalculationMode.MILLIMETER: [
        ("total_size_in_mm", "Total MM"),
        ("total_nos", "Total NOS"),
        ("total_running_feet", "Total R.Feet"),
        ("total_sq_feet", "Total Sq.Feet"),
        ("total_weight", "Total Weight"),
        ("total_meter", "Total Meter"),
    ],
    CalculationMode.SHEET_AREA: [
        ("total_nos", "Total NOS"),
        ("total_sq_mm", "Total Sq.MM"),
        ("total_sq_feet", "Total Sq.Feet"),
        ("total_weight", "Total Weight"),
    ],
    CalculationMode.ROLL_AREA: [
        ("total_length", "Total Length"),
        ("total_width", "Total Width"),
        ("total_area", "Total"),
    ],
}

MODE_TITLES = {
    CalculationMode.FEET_INCH: "Feet / Inch Calculation",
    CalculationMode.MILLIMETER: "MM Calculation",
    CalculationMode.SHEET_AREA: "Sheet Area Calculation",
    CalculationMode.ROLL_AREA: "Roll Calculation",
}


def columns_for(session):
    """Visible columns: laminated products never show weight, and in MM mode
    only laminated products show square feet."""
    cols = []
    for name, header, editable in COLUMNS[session.mode]:
        if name == "weight" and session.product.is_laminated:
            continue
        if (name == "sq_feet" and session.mode == CalculationMode.MILLIMETER
                and not session.product.is_laminated):
            continue
        cols.append((name, header, editable))
    return cols


def _fmt(value, places=3):
    if value is None:
        return ""
    return f"{float(value):.{places}f}"


def _fmt_input(value):
    if value is None:
        return ""
    return f"{float(value):g}"


class CalculationDialog(QDialog):
    """Row based calculation dialog driven by a CalculationSession."""

    calculation_saved = Signal(object)

    def __init__(self, session, parent=None):
        super().__init__(parent)
        self.session = session
        self.calculation_result = None
        self._columns = columns_for(session)
        self._total_labels = {}
        self._updating = False

        self.setWindowTitle(f"{MODE_TITLES[session.mode]} - {session.product.name}")
        self.setMinimumWidth(720)
        self.setMinimumHeight(420)

        self._init_ui()
        self._load_rows()
        self._refresh_basis_combo()
        self._refresh_totals()

    def _init_ui(self):
        layout = QVBoxLayout(self)

        self.table = QTableWidget(0, len(self._columns), self)
        self.table.setHorizontalHeaderLabels([header for _, header, _ in self._columns])
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        editable = [i for i, (_, _, ed) in enumerate(self._columns) if ed]
        self.table.setItemDelegate(NumericColumnDelegate(editable, parent=self.table))
        self.table.itemChanged.connect(self._on_item_changed)
        layout.addWidget(self.table)

        row_buttons = QHBoxLayout()
        self.add_button = QPushButton("Add Row (Alt+R)")
        self.add_button.clicked.connect(self.add_row)
        self.remove_button = QPushButton("Remove Row")
        self.remove_button.clicked.connect(self.remove_selected_row)
        row_buttons.addWidget(self.add_button)
        row_buttons.addWidget(self.remove_button)
        row_buttons.addStretch()
        layout.addLayout(row_buttons)

        self.add_shortcut = QShortcut(QKeySequence("Alt+R"), self)
        self.add_shortcut.activated.connect(self.add_row)

        totals_group = QGroupBox("Totals")
        self.totals_layout = QFormLayout()
        for name, label in TOTAL_FIELDS[self.session.mode]:
            if not hasattr(self.session.totals, name):
                continue
            value_label = QLabel("0")
            self._total_labels[name] = value_label
            self.totals_layout.addRow(f"{label}:", value_label)

        self.basis_combo = QComboBox()
        self.basis_combo.currentIndexChanged.connect(self._on_basis_changed)
        self.totals_layout.addRow("Calculation Base:", self.basis_combo)
        self._build_extra_controls(self.totals_layout)

        self.final_value_label = QLabel("0")
        self.totals_layout.addRow("Final Value:", self.final_value_label)
        totals_group.setLayout(self.totals_layout)
        layout.addWidget(totals_group)

        button_box = QDialogButtonBox(QDialogButtonBox.Save | QDialogButtonBox.Cancel)
        button_box.accepted.connect(self._on_save)
        button_box.rejected.connect(self.reject)
        layout.addWidget(button_box)

    def _build_extra_controls(self, form):
        """Hook for subclasses to add controls under the basis selector."""

    # --- table <-> session ------------------------------------------------

    def _load_rows(self):
        self._updating = True
        try:
            self.table.setRowCount(0)
            for row_id in self.session.row_ids:
                self._append_table_row(row_id)
        finally:
            self._updating = False

    def _append_table_row(self, row_id):
        was_updating = self._updating
        self._updating = True
        try:
            r = self.table.rowCount()
            self.table.insertRow(r)
            row = self.session.row(row_id)
            for c, (name, _, editable) in enumerate(self._columns):
                value = getattr(row, name)
                item = QTableWidgetItem(_fmt_input(value) if editable else _fmt(value))
                if c == 0:
                    item.setData(Qt.UserRole, row_id)
                if not editable:
                    item.setFlags(item.flags() & ~Qt.ItemIsEditable)
                self.table.setItem(r, c, item)
        finally:
            self._updating = was_updating

    def _row_id_at(self, r):
        item = self.table.item(r, 0)
        return item.data(Qt.UserRole) if item is not None else None

    def _on_item_changed(self, item):
        if self._updating:
            return
        name, _, editable = self._columns[item.column()]
        if not editable:
            return
        row_id = self._row_id_at(item.row())
        if row_id is None:
            return
        self.session.update_row(row_id, **{name: item.text().strip()})
        self._refresh_row(item.row())
        self._refresh_totals()

    def _refresh_row(self, r):
        row = self.session.row(self._row_id_at(r))
        self._updating = True
        try:
            for c, (name, _, editable) in enumerate(self._columns):
                item = self.table.item(r, c)
                if item is None:
                    continue
                if not editable:
                    item.setText(_fmt(getattr(row, name)))
                item.setData(Qt.BackgroundRole, None)
        finally:
            self._updating = False

    def _refresh_totals(self):
        totals = self.session.totals
        for name, label in self._total_labels.items():
            label.setText(_fmt(getattr(totals, name, 0), 4 if self.session.mode == CalculationMode.ROLL_AREA else 3))
        self.final_value_label.setText(_fmt(self.session.final_value, 4))

    def _mark_issues(self, issues):
        columns = {name: c for c, (name, _, _) in enumerate(self._columns)}
        rows = {self._row_id_at(r): r for r in range(self.table.rowCount())}
        self._updating = True
        try:
            for issue in issues:
                r = rows.get(issue.row_id)
                c = columns.get(issue.field)
                if r is None or c is None:
                    continue
                item = self.table.item(r, c)
                if item is not None:
                    item.setBackground(INVALID_COLOR)
        finally:
            self._updating = False

    # --- basis ----------------------------------------------------------------

    def _refresh_basis_combo(self):
        self.basis_combo.blockSignals(True)
        try:
            self.basis_combo.clear()
            for basis in self.session.available_bases():
                self.basis_combo.addItem(BASIS_LABELS[basis], basis.value)
            idx = self.basis_combo.findData(self.session.basis.value)
            self.basis_combo.setCurrentIndex(max(idx, 0))
        finally:
            self.basis_combo.blockSignals(False)
        self._on_basis_applied()

    def _on_basis_changed(self, index):
        basis = self.basis_combo.itemData(index)
        if basis is None:
            return
        self.session.set_basis(basis)
        self._on_basis_applied()
        self._refresh_totals()

    def _on_basis_applied(self):
        """Hook for subclasses reacting to a basis change."""

    # --- actions --------------------------------------------------------------

    def add_row(self):
        row_id = self.session.add_row()
        self._append_table_row(row_id)
        self._refresh_basis_combo()
        self._refresh_totals()
        self.table.setCurrentCell(self.table.rowCount() - 1, 0)

    def remove_selected_row(self):
        r = self.table.currentRow()
        if r < 0:
            r = self.table.rowCount() - 1
        row_id = self._row_id_at(r)
        if row_id is None or not self.session.remove_row(row_id):
            return
        self.table.removeRow(r)
        self._refresh_basis_combo()
        self._refresh_totals()

    def _on_save(self):
        try:
            result = self.session.save()
        except CalculationRejected as e:
            self._mark_issues(e.issues)
            QMessageBox.warning(self, "Invalid calculation", str(e))
            return
        self.calculation_result = result
        self.calculation_saved.emit(result)
        self.accept()
