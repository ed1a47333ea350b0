"""Purchase challan window.

Each table row is a ChallanLine. Quantities can be typed in directly or come
from a calculation dialog; the saved calculation stays attached to the line so
it can be reopened and edited.
"""

import logging
from dataclasses import replace
from pathlib import Path

from PySide6.QtWidgets import (
    QMainWindow,
    QMessageBox,
    QToolBar,
    QComboBox,
    QLabel,
    QLineEdit,
    QWidget,
    QVBoxLayout,
    QFormLayout,
    QFileDialog,
    QDialog,
    QDoubleSpinBox,
    QTableWidget,
    QTableWidgetItem,
    QHeaderView,
)
from PySide6.QtCore import Qt, QSettings
from PySide6.QtGui import QAction

from services.errors import LineItemError, SessionFileError
from services.line_items import (
    all_qc_passed,
    apply_calculation,
    apply_product,
    challan_totals,
    max_return_quantity,
    price_line,
    validate_challan,
)
from services.models import CalculationBasis, CalculationMode, ChallanDocument, ChallanLine
from services.product_catalog import ProductCatalog
from services.calculation import safe_float
from services.session import CalculationSession
from services.session_io import (
    CHALLAN_EXT,
    load_document,
    result_from_dict,
    result_to_dict,
    save_document,
    session_from_dict,
)
from ui.calculation_dialog import CalculationDialog
from ui.delegates import NumericColumnDelegate
from ui.product_settings_dialog import ProductSettingsDialog
from ui.qc_pass_dialog import QcPassDialog
from ui.roll_calculation_dialog import RollCalculationDialog

logger = logging.getLogger(__name__)

# (header, line attribute, editable)
LINE_COLUMNS = [
    ("Product", "product_id", False),
    ("Quantity", "quantity", True),
    ("Unit Price", "unit_price", True),
    ("Tax %", "tax_percentage", True),
    ("Price", "price", False),
    ("Tax Amount", "tax_amount", False),
    ("QC Pass", "qc_pass", False),
    ("Max Return", None, False),
    ("Batch", "batch_number", True),
]
NUMERIC_COLUMNS = [1, 2, 3]
BATCH_COLUMN = 8


def _fmt(value, places=2):
    if value is None or value == "":
        return ""
    return f"{safe_float(value):.{places}f}"


class MainWindow(QMainWindow):
    def __init__(self, catalog=None):
        super().__init__()
        self.setWindowTitle("Sheet Goods Challan")
        self.resize(1000, 600)

        self.catalog = catalog or ProductCatalog()
        self.lines = []
        self._document_path = None
        self._last_directory = None
        self._default_basis = None
        self._updating = False

        self.settings = QSettings("SheetCalc", "SheetCalcApp")
        self._load_user_settings()

        self._create_menubar()
        self._create_toolbar()
        self._create_central()
        self.add_line()

    # ---------------------------
    # Settings
    # ---------------------------
    def _load_user_settings(self):
        """Load user preferences from QSettings."""
        try:
            basis = self.settings.value("calculation/default_basis", "", type=str)
            self._default_basis = CalculationBasis(basis) if basis else None
            last_dir = self.settings.value("paths/last_directory", "", type=str)
            if last_dir:
                self._last_directory = Path(last_dir)
            geometry = self.settings.value("window/geometry")
            if geometry is not None:
                self.restoreGeometry(geometry)
        except (TypeError, ValueError) as e:
            logger.warning("Failed to load user settings: %s", e)

    def _save_user_settings(self):
        """Save user preferences to QSettings."""
        if self._default_basis is not None:
            self.settings.setValue("calculation/default_basis", self._default_basis.value)
        if self._last_directory:
            self.settings.setValue("paths/last_directory", str(self._last_directory))
        self.settings.setValue("window/geometry", self.saveGeometry())
        self.settings.sync()
        if self.settings.status() != QSettings.NoError:
            logger.warning("Failed to save user settings: %s", self.settings.status())

    # ---------------------------
    # Layout
    # ---------------------------
    def _create_menubar(self):
        mb = self.menuBar()
        file_menu = mb.addMenu("File")

        act_new = QAction("New Challan", self)
        act_new.setShortcut("Ctrl+N")
        act_new.triggered.connect(self.new_document)
        file_menu.addAction(act_new)

        act_open = QAction("Open Challan…", self)
        act_open.setShortcut("Ctrl+O")
        act_open.triggered.connect(self._document_open)
        file_menu.addAction(act_open)

        file_menu.addSeparator()
        act_save = QAction("Save Challan", self)
        act_save.setShortcut("Ctrl+S")
        act_save.triggered.connect(self._document_save)
        file_menu.addAction(act_save)

        act_save_as = QAction("Save Challan as…", self)
        act_save_as.setShortcut("Ctrl+Shift+S")
        act_save_as.triggered.connect(self._document_save_as)
        file_menu.addAction(act_save_as)

        products = mb.addMenu("Products")
        act_import = QAction("Import Products…", self)
        act_import.triggered.connect(self._import_products)
        products.addAction(act_import)
        act_refresh = QAction("Reload Products", self)
        act_refresh.triggered.connect(self._reload_products)
        products.addAction(act_refresh)

    def _create_toolbar(self):
        toolbar = QToolBar("Lines", self)
        self.addToolBar(toolbar)

        actions = [
            ("Add Line", self.add_line),
            ("Remove Line", self.remove_selected_line),
            ("Calculate…", self.open_calculation),
            ("Sheet Area (mm)…", self.open_sheet_area_calculation),
            ("QC Pass…", self.open_qc_pass),
            ("Product Settings…", self.open_product_settings),
        ]
        for label, slot in actions:
            action = QAction(label, self)
            action.triggered.connect(slot)
            toolbar.addAction(action)

    def _create_central(self):
        central = QWidget(self)
        layout = QVBoxLayout(central)

        header = QFormLayout()
        self.invoice_input = QLineEdit()
        header.addRow("Invoice Number:", self.invoice_input)
        layout.addLayout(header)

        self.table = QTableWidget(0, len(LINE_COLUMNS), self)
        self.table.setHorizontalHeaderLabels([h for h, _, _ in LINE_COLUMNS])
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        self.numeric_delegate = NumericColumnDelegate(NUMERIC_COLUMNS, decimals=3, parent=self.table)
        for c in NUMERIC_COLUMNS:
            self.table.setItemDelegateForColumn(c, self.numeric_delegate)
        self.table.itemChanged.connect(self._on_item_changed)
        layout.addWidget(self.table)

        footer = QFormLayout()
        self.packaging = QDoubleSpinBox()
        self.packaging.setRange(0.0, 1e9)
        self.packaging.setDecimals(2)
        self.packaging.valueChanged.connect(self._refresh_totals)
        footer.addRow("Packaging & Forwarding:", self.packaging)
        self.total_price_label = QLabel("0.00")
        self.total_tax_label = QLabel("0.00")
        self.grand_total_label = QLabel("0.00")
        footer.addRow("Price:", self.total_price_label)
        footer.addRow("Tax:", self.total_tax_label)
        footer.addRow("Grand Total:", self.grand_total_label)
        layout.addLayout(footer)

        self.setCentralWidget(central)

    # ---------------------------
    # Lines
    # ---------------------------
    def _product_combo(self, line_index):
        combo = QComboBox()
        combo.addItem("Select product", None)
        for product in self.catalog.products():
            combo.addItem(product.name, product.id)
        line = self.lines[line_index]
        if line.product_id is not None:
            combo.setCurrentIndex(max(combo.findData(line.product_id), 0))
        combo.currentIndexChanged.connect(lambda _, c=combo: self._on_product_selected(c))
        return combo

    def _line_index_of_combo(self, combo):
        for r in range(self.table.rowCount()):
            if self.table.cellWidget(r, 0) is combo:
                return r
        return -1

    def _on_product_selected(self, combo):
        r = self._line_index_of_combo(combo)
        if r < 0:
            return
        product = self.catalog.get(combo.currentData())
        if product is None:
            self.lines[r] = replace(self.lines[r], product_id=None, calculation=None)
        else:
            # a calculation belongs to the product it was made for
            self.lines[r] = apply_product(replace(self.lines[r], calculation=None), product)
        self._refresh_line(r)
        self._refresh_totals()

    def _refresh_table(self):
        self._updating = True
        try:
            self.table.setRowCount(0)
            for r in range(len(self.lines)):
                self.table.insertRow(r)
                self.table.setCellWidget(r, 0, self._product_combo(r))
                for c in range(1, len(LINE_COLUMNS)):
                    item = QTableWidgetItem("")
                    if not LINE_COLUMNS[c][2]:
                        item.setFlags(item.flags() & ~Qt.ItemIsEditable)
                    self.table.setItem(r, c, item)
        finally:
            self._updating = False
        for r in range(len(self.lines)):
            self._refresh_line(r)
        self._refresh_totals()

    def _refresh_line(self, r):
        line = self.lines[r]
        values = {
            1: _fmt(line.quantity, 3),
            2: _fmt(line.unit_price),
            3: _fmt(line.tax_percentage),
            4: _fmt(line.price),
            5: _fmt(line.tax_amount),
            6: _fmt(line.qc_pass, 3),
            7: _fmt(max_return_quantity(line.quantity, line.qc_pass), 3) if line.qc_pass is not None else "",
            BATCH_COLUMN: line.batch_number or "",
        }
        self._updating = True
        try:
            for c, text in values.items():
                item = self.table.item(r, c)
                if item is not None:
                    item.setText(text)
        finally:
            self._updating = False

    def _on_item_changed(self, item):
        if self._updating:
            return
        r, c = item.row(), item.column()
        if r >= len(self.lines):
            return
        attr = LINE_COLUMNS[c][1]
        if c == BATCH_COLUMN:
            self.lines[r] = replace(self.lines[r], batch_number=item.text().strip())
        elif c in NUMERIC_COLUMNS:
            line = replace(self.lines[r], **{attr: safe_float(item.text())})
            if c == 1 and line.calculation is not None:
                # typed quantity overrides the calculated one
                line = replace(line, calculation=None)
            self.lines[r] = price_line(line)
        else:
            return
        self._refresh_line(r)
        self._refresh_totals()

    def _refresh_totals(self, *_):
        totals = challan_totals(self.lines, self.packaging.value())
        self.total_price_label.setText(_fmt(totals.price))
        self.total_tax_label.setText(_fmt(totals.tax_amount))
        self.grand_total_label.setText(_fmt(totals.grand_total))
        if self.lines and all_qc_passed(self.lines):
            self.statusBar().showMessage("All lines passed QC")
        else:
            self.statusBar().clearMessage()

    def _current_line_index(self):
        r = self.table.currentRow()
        if r < 0 and len(self.lines) == 1:
            r = 0
        return r if 0 <= r < len(self.lines) else -1

    def add_line(self):
        self.lines.append(ChallanLine())
        self._refresh_table()
        self.table.setCurrentCell(len(self.lines) - 1, 1)

    def remove_selected_line(self):
        r = self._current_line_index()
        if r < 0:
            return
        del self.lines[r]
        self._refresh_table()

    # ---------------------------
    # Dialogs
    # ---------------------------
    def _selected_product(self):
        r = self._current_line_index()
        if r < 0:
            return r, None
        product = self.catalog.get(self.lines[r].product_id)
        if product is None:
            QMessageBox.information(self, "Product", "Select a product for this line first.")
        return r, product

    def _session_for_line(self, line, product, mode=None):
        """Reopen the line's calculation, or start one in `mode`.

        Roll products are always measured as length x width. A saved
        calculation made in a different mode is not reused.
        """
        if product.is_roll:
            mode = None
        calc = line.calculation
        if calc is not None and (mode is None or calc.mode == mode):
            return session_from_dict(result_to_dict(calc), product)
        return CalculationSession(product, mode=mode, basis=self._default_basis)

    def _calculation_dialog(self, session):
        if session.mode == CalculationMode.ROLL_AREA:
            return RollCalculationDialog(session, self)
        return CalculationDialog(session, self)

    def open_sheet_area_calculation(self):
        self.open_calculation(CalculationMode.SHEET_AREA)

    def open_calculation(self, mode=None):
        r, product = self._selected_product()
        if product is None:
            return
        session = self._session_for_line(self.lines[r], product, mode or None)
        dialog = self._calculation_dialog(session)
        if dialog.exec() != QDialog.Accepted or dialog.calculation_result is None:
            return
        result = dialog.calculation_result
        self.lines[r] = apply_calculation(self.lines[r], result)
        if result.basis != CalculationBasis.MANUAL:
            self._default_basis = result.basis
            self._save_user_settings()
        logger.info("Line %d quantity set to %s from %s calculation", r + 1, result.final_value, result.mode.value)
        self._refresh_line(r)
        self._refresh_totals()

    def open_qc_pass(self):
        r = self._current_line_index()
        if r < 0:
            return
        line = self.lines[r]
        dialog = QcPassDialog(line.quantity, line.qc_pass, self)
        if dialog.exec() != QDialog.Accepted:
            return
        value, warning = dialog.get_values()
        if warning:
            QMessageBox.warning(self, "QC Pass", warning)
        self.lines[r] = replace(line, qc_pass=value)
        self._refresh_line(r)
        self._refresh_totals()

    def open_product_settings(self):
        r, product = self._selected_product()
        if product is None:
            return
        dialog = ProductSettingsDialog(product, self)
        dialog.settings_changed.connect(self._on_product_changed)
        if dialog.exec() == QDialog.Accepted:
            self._on_product_changed(dialog.get_product())

    def _on_product_changed(self, product):
        """Store an edited product and recalculate the lines measured with it."""
        product = self.catalog.upsert(product)
        for r, line in enumerate(self.lines):
            if line.product_id != product.id or line.calculation is None:
                continue
            result = result_from_dict(result_to_dict(line.calculation), product)
            self.lines[r] = apply_calculation(line, result)
            logger.info("Line %d recalculated after %s changed", r + 1, product.name)
        self._refresh_table()

    # ---------------------------
    # Products
    # ---------------------------
    def _import_products(self):
        start_dir = str(self._last_directory) if self._last_directory else str(Path.cwd())
        fname, _ = QFileDialog.getOpenFileName(self, "Import Products", start_dir, "Products (*.json);;All files (*)")
        if not fname:
            return
        try:
            count = self.catalog.import_json(Path(fname))
        except SessionFileError as e:
            QMessageBox.warning(self, "Error", str(e))
            return
        self._refresh_table()
        self.statusBar().showMessage(f"Imported {count} products", 4000)

    def _reload_products(self):
        self.catalog.refresh()
        self._refresh_table()

    # ---------------------------
    # Challan files
    # ---------------------------
    def to_document(self) -> ChallanDocument:
        return ChallanDocument(
            invoice_number=self.invoice_input.text().strip(),
            packaging_charges=self.packaging.value(),
            lines=list(self.lines),
        )

    def apply_document(self, doc: ChallanDocument):
        self.invoice_input.setText(doc.invoice_number)
        self.packaging.setValue(doc.packaging_charges)
        self.lines = list(doc.lines) or [ChallanLine()]
        self._refresh_table()

    def new_document(self):
        self._document_path = None
        self.apply_document(ChallanDocument())

    def _document_open(self) -> bool:
        start_dir = str(self._last_directory) if self._last_directory else str(Path.cwd())
        fname, _ = QFileDialog.getOpenFileName(
            self, "Open Challan", start_dir, f"Challan (*{CHALLAN_EXT});;All files (*)"
        )
        if not fname:
            return False
        path = Path(fname)
        self._last_directory = path.parent
        self._save_user_settings()
        try:
            doc = load_document(path, self.catalog)
        except SessionFileError as e:
            QMessageBox.warning(self, "Error", f"Failed to open challan: {e}")
            return False
        self._document_path = path
        self.apply_document(doc)
        self.statusBar().showMessage(f"Loaded: {path.name}", 5000)
        return True

    def _document_save(self) -> bool:
        if not self._document_path:
            return self._document_save_as()
        return self._write_document(self._document_path)

    def _document_save_as(self) -> bool:
        suggested = (self.invoice_input.text().strip() or "challan") + CHALLAN_EXT
        start_dir = self._last_directory if self._last_directory else Path.cwd()
        fname, _ = QFileDialog.getSaveFileName(
            self, "Save Challan as…", str(start_dir / suggested), f"Challan (*{CHALLAN_EXT});;All files (*)"
        )
        if not fname:
            return False
        path = Path(fname)
        self._last_directory = path.parent
        self._save_user_settings()
        return self._write_document(path)

    def _write_document(self, path) -> bool:
        doc = self.to_document()
        try:
            validate_challan(doc.lines, doc.packaging_charges)
        except LineItemError as e:
            QMessageBox.warning(self, "Invalid challan", str(e))
            return False
        try:
            self._document_path = save_document(path, doc)
        except SessionFileError as e:
            QMessageBox.warning(self, "Error", f"Failed to save: {e}")
            return False
        self.statusBar().showMessage(f"Saved: {self._document_path.name}", 4000)
        return True

    def closeEvent(self, event):
        self._save_user_settings()
        return super().closeEvent(event)
