"""UI delegates for custom cell editing behavior."""

from PySide6.QtWidgets import QStyledItemDelegate, QLineEdit
from PySide6.QtGui import QDoubleValidator


class NumericColumnDelegate(QStyledItemDelegate):
    """Delegate that allows numeric editing only for the given input columns.

    Derived columns (running feet, weight, totals...) get no editor.
    """

    def __init__(self, editable_columns, decimals: int = 4, parent=None):
        super().__init__(parent)
        self.editable_columns = set(editable_columns)
        self.decimals = decimals

    def createEditor(self, parent, option, index):
        if index.column() in self.editable_columns:
            editor = QLineEdit(parent)
            validator = QDoubleValidator(0.0, 1e12, self.decimals, editor)
            validator.setNotation(QDoubleValidator.StandardNotation)
            editor.setValidator(validator)
            return editor
        return None
