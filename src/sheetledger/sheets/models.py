"""Data models for Google Sheets operations."""

from typing import Optional

from pydantic import BaseModel, Field, model_validator


class GridRange(BaseModel):
    """Zero-based rectangle on a sheet. End bounds are exclusive."""

    sheet_id: int = 0
    start_row: int
    end_row: int
    start_col: int
    end_col: int

    @model_validator(mode="after")
    def _check_bounds(self) -> "GridRange":
        if self.start_row >= self.end_row or self.start_col >= self.end_col:
            raise ValueError(
                f"Empty grid range: rows {self.start_row}-{self.end_row}, "
                f"cols {self.start_col}-{self.end_col}"
            )
        return self

    @property
    def row_count(self) -> int:
        return self.end_row - self.start_row

    @property
    def column_count(self) -> int:
        return self.end_col - self.start_col

    def to_api(self) -> dict:
        """Serialize in the shape the batchUpdate API expects."""
        return {
            "sheetId": self.sheet_id,
            "startRowIndex": self.start_row,
            "endRowIndex": self.end_row,
            "startColumnIndex": self.start_col,
            "endColumnIndex": self.end_col,
        }


class CellFormat(BaseModel):
    """Colors of a single cell. ``None`` means no explicit color."""

    text_color: Optional[str] = None
    background_color: Optional[str] = None


class ValueRange(BaseModel):
    """Values returned by a range read."""

    range: str = ""
    values: list[list[str]] = Field(default_factory=list)


class FormattedValues(BaseModel):
    """Values of a range plus the per-cell formatting of the same range."""

    values: list[list[str]] = Field(default_factory=list)
    formats: list[list[CellFormat]] = Field(default_factory=list)


class UpdateResult(BaseModel):
    """Result of a values write."""

    updated_range: Optional[str] = None
    updated_cells: int = 0
    updated_rows: int = 0
    updated_columns: int = 0


class SheetProperties(BaseModel):
    """One tab of a spreadsheet."""

    sheet_id: int
    title: str
    index: int = 0
    sheet_type: Optional[str] = None
    row_count: int = 0
    column_count: int = 0


class SpreadsheetInfo(BaseModel):
    """Spreadsheet title and its sheets."""

    spreadsheet_id: str
    title: str = ""
    sheets: list[SheetProperties] = Field(default_factory=list)

    def find_sheet(self, title: str) -> Optional[SheetProperties]:
        """Return the sheet with an exact title match, if any."""
        for sheet in self.sheets:
            if sheet.title == title:
                return sheet
        return None
