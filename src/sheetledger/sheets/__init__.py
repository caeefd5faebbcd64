"""Google Sheets API integration."""

from .client import SheetsClient
from .models import (
    CellFormat,
    FormattedValues,
    GridRange,
    SheetProperties,
    SpreadsheetInfo,
    UpdateResult,
    ValueRange,
)

__all__ = [
    "SheetsClient",
    "CellFormat",
    "FormattedValues",
    "GridRange",
    "SheetProperties",
    "SpreadsheetInfo",
    "UpdateResult",
    "ValueRange",
]
