"""Exceptions raised at the save / validation seams of the services layer.

The arithmetic itself never raises; these are only used when a caller asks
for something that cannot be completed (saving an invalid session, submitting
an empty return, reading a broken file).
"""

from typing import List, Optional


class CalculationRejected(ValueError):
    """A calculation session could not be saved because of invalid rows."""

    def __init__(self, issues: List, message: Optional[str] = None):
        self.issues = list(issues)
        if message is None:
            message = "; ".join(i.message for i in self.issues) or "Invalid calculation"
        super().__init__(message)


class LineItemError(ValueError):
    """Invalid purchase challan / purchase return line data."""


class SessionFileError(ValueError):
    """A saved challan file could not be read or written."""
