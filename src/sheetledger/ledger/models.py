"""Data models for ledger operations."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..config import DEFAULT_DATA_RANGE, DEFAULT_HEADER_RANGE, DEFAULT_KEY_COLUMN
from ..errors import InvalidAddress
from ..sheets.addressing import (
    column_letter_to_index,
    parse_cell,
    parse_range,
    row_range,
    split_range,
)
from ..sheets.models import CellFormat, GridRange


class AppendWindow(BaseModel):
    """
    Fixed rectangle of a sheet inside which rows are appended and sorted.

    The bounds are configuration. ``key_column`` decides both which rows are
    free and the sort order.
    """

    data_range: str = DEFAULT_DATA_RANGE
    header_range: str = DEFAULT_HEADER_RANGE
    key_column: str = DEFAULT_KEY_COLUMN

    def grid_range(self, sheet_id: int = 0) -> GridRange:
        return parse_range(self.data_range, sheet_id)

    @property
    def start_column(self) -> str:
        return parse_cell(split_range(self.data_range)[0])[0]

    @property
    def end_column(self) -> str:
        return parse_cell(split_range(self.data_range)[1])[0]

    @property
    def start_row(self) -> int:
        """1-based first row of the window."""
        return parse_cell(split_range(self.data_range)[0])[1]

    @property
    def size(self) -> int:
        return self.grid_range().row_count

    @property
    def width(self) -> int:
        return self.grid_range().column_count

    @property
    def key_index(self) -> int:
        """Absolute 0-based index of the key column."""
        return column_letter_to_index(self.key_column)

    @property
    def key_offset(self) -> int:
        """Position of the key column inside a window row."""
        grid = self.grid_range()
        index = self.key_index
        if not grid.start_col <= index < grid.end_col:
            raise InvalidAddress(
                f"Key column {self.key_column} is outside window {self.data_range}"
            )
        return index - grid.start_col

    def row_notation(self, row: int) -> str:
        """A1 range covering one full window row."""
        return row_range(self.start_column, self.end_column, row)


DEFAULT_WINDOW = AppendWindow()


class AppendStage(str, Enum):
    """Stages of an append-and-sort run."""

    CHECKING_EXISTENCE = "checking_existence"
    SCANNING = "scanning"
    WRITING = "writing"
    SORTING = "sorting"
    DONE = "done"


class AppendRequest(BaseModel):
    """
    Request to append one row to a sheet's ledger window.

    Fields are checked by the coordinator so a missing field answers 400 with
    the same message as any other invalid append.
    """

    sheet_name: str = Field("", alias="sheetName")
    values: Optional[Any] = None

    model_config = {"populate_by_name": True}


class AppendResult(BaseModel):
    """Outcome of a successful append. ``sorted`` reports the best-effort sort."""

    success: bool = True
    updated_row: int
    updated_range: str
    sorted: bool
    sort_error: Optional[str] = None


class RangeMetadata(BaseModel):
    """Bookkeeping returned alongside a formatted read."""

    spreadsheet_id: str
    sheet_name: str
    requested_data_range: str
    requested_header_range: str
    actual_range: str
    has_data: bool
    has_headers: bool


class RangeReadResult(BaseModel):
    """Header, non-empty data rows and their aligned formats."""

    range: str
    headers: list[str] = Field(default_factory=list)
    values: list[list[str]] = Field(default_factory=list)
    cell_formats: list[list[CellFormat]] = Field(default_factory=list)
    header_formats: list[CellFormat] = Field(default_factory=list)
    metadata: RangeMetadata


class LookupResult(BaseModel):
    """A named lookup list and whether it came from the cache."""

    name: str
    values: list[str] = Field(default_factory=list)
    cached: bool
    range: str


class SettlementAmount(BaseModel):
    label: str
    amount: float
    formatted_amount: str


class SettlementSummary(BaseModel):
    """Parsed settlement cells and their total."""

    range: str
    entries: list[SettlementAmount] = Field(default_factory=list)
    total: SettlementAmount
    actual_range: str
    has_data: bool
