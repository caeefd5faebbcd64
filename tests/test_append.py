"""Tests for the append-and-sort coordinator."""

import asyncio
import gc

import pytest

from sheetledger.errors import (
    InternalError,
    InvalidAddress,
    InvalidRequest,
    SheetNotFound,
    UpstreamError,
    UpstreamUnavailable,
    WindowFull,
    WriteFailed,
)
from sheetledger.ledger import AppendCoordinator, AppendWindow, WindowLocks
from sheetledger.sheets import UpdateResult, ValueRange
from sheetledger.sheets.addressing import parse_cell, split_range
from sheetledger.sheets.models import GridRange

from conftest import SPREADSHEET_ID

ROW = ["2024-01-06", "dinner", "34000", "card", "", "memo"]


class FakeLedgerSheet:
    """Stateful stand-in for the store that yields between calls."""

    spreadsheet_id = SPREADSHEET_ID

    def __init__(self, filled: int, window: AppendWindow):
        self.window = window
        self.rows = [[f"2024-01-{i + 1:02d}", "x"] for i in range(filled)]
        self.writes = []
        self.sorts = 0

    async def read_values(self, sheet_name, range_notation):
        await asyncio.sleep(0)
        return ValueRange(range=range_notation, values=[list(r) for r in self.rows])

    async def write_values(self, sheet_name, range_notation, rows, value_input_option="RAW"):
        await asyncio.sleep(0)
        row_number = parse_cell(split_range(range_notation)[0])[1]
        index = row_number - self.window.start_row
        while len(self.rows) <= index:
            self.rows.append([])
        self.rows[index] = list(rows[0])
        self.writes.append(range_notation)
        return UpdateResult(updated_range=range_notation)

    async def get_sheet_metadata(self):
        raise UpstreamUnavailable("metadata unavailable")

    async def sort_range(self, grid_range, sort_column_index, ascending=True):
        self.sorts += 1


class TestAppendSuccess:
    """Test the happy path and its store calls."""

    async def test_appends_after_last_filled_row(self, mock_sheets_client):
        coordinator = AppendCoordinator()

        result = await coordinator.append(mock_sheets_client, "Ledger", ROW)

        assert result.success is True
        assert result.updated_row == 32
        assert result.updated_range == "Y32:AD32"
        assert result.sorted is True
        assert result.sort_error is None
        mock_sheets_client.write_values.assert_awaited_once_with(
            "Ledger", "Y32:AD32", [ROW], value_input_option="USER_ENTERED"
        )

    async def test_existence_probe_before_scan(self, mock_sheets_client):
        await AppendCoordinator().append(mock_sheets_client, "Ledger", ROW)

        ranges = [call.args[1] for call in mock_sheets_client.read_values.await_args_list]
        assert ranges == ["A1:A1", "Y27:AD126"]

    async def test_sort_uses_resolved_sheet_id_and_key_column(self, mock_sheets_client):
        await AppendCoordinator().append(mock_sheets_client, "Ledger", ROW)

        mock_sheets_client.sort_range.assert_awaited_once_with(
            GridRange(sheet_id=7, start_row=26, end_row=126, start_col=24, end_col=30),
            24,
            ascending=True,
        )

    async def test_empty_window_writes_first_row(self, mock_sheets_client):
        mock_sheets_client.read_values.side_effect = None
        mock_sheets_client.read_values.return_value = ValueRange(range="Ledger!Y27:AD126")

        result = await AppendCoordinator().append(mock_sheets_client, "Ledger", ROW)

        assert result.updated_row == 27

    async def test_short_row_is_allowed(self, mock_sheets_client):
        result = await AppendCoordinator().append(mock_sheets_client, "Ledger", ["2024-01-06"])

        assert result.success is True

    async def test_custom_window(self, mock_sheets_client):
        window = AppendWindow(data_range="B3:D12", header_range="B2:D2", key_column="C")
        mock_sheets_client.read_values.side_effect = None
        mock_sheets_client.read_values.return_value = ValueRange(values=[["a", "1"], ["b", ""]])

        result = await AppendCoordinator(window=window).append(mock_sheets_client, "Ledger", ["x"])

        assert result.updated_row == 4
        assert result.updated_range == "B4:D4"
        grid, key_index = mock_sheets_client.sort_range.await_args.args
        assert key_index == 2
        assert grid.sheet_id == 7


class TestSortIsBestEffort:
    """Test that sort problems never undo a successful write."""

    async def test_sort_failure_keeps_the_row(self, mock_sheets_client):
        mock_sheets_client.sort_range.side_effect = UpstreamError(
            "Google Sheets API error: Bad Request", status_code=400
        )

        result = await AppendCoordinator().append(mock_sheets_client, "Ledger", ROW)

        assert result.success is True
        assert result.updated_row == 32
        assert result.sorted is False
        assert "Bad Request" in result.sort_error

    async def test_unknown_sheet_title_skips_sort(self, mock_sheets_client):
        result = await AppendCoordinator().append(mock_sheets_client, "Renamed", ROW)

        assert result.success is True
        assert result.sorted is False
        mock_sheets_client.sort_range.assert_not_awaited()

    async def test_metadata_failure_skips_sort(self, mock_sheets_client):
        mock_sheets_client.get_sheet_metadata.side_effect = UpstreamUnavailable("timed out")

        result = await AppendCoordinator().append(mock_sheets_client, "Ledger", ROW)

        assert result.sorted is False
        assert "timed out" in result.sort_error
        mock_sheets_client.sort_range.assert_not_awaited()


class TestAppendFailures:
    """Test the failures that abort an append."""

    async def test_missing_sheet(self, mock_sheets_client):
        mock_sheets_client.read_values.side_effect = UpstreamError(
            "Google Sheets API error: Bad Request", status_code=400
        )

        with pytest.raises(SheetNotFound) as exc_info:
            await AppendCoordinator().append(mock_sheets_client, "Nope", ROW)

        assert exc_info.value.status_code == 400
        assert "Nope" in exc_info.value.message
        mock_sheets_client.write_values.assert_not_awaited()

    async def test_missing_sheet_on_server_error_is_404(self, mock_sheets_client):
        mock_sheets_client.read_values.side_effect = UpstreamUnavailable("down")

        with pytest.raises(SheetNotFound) as exc_info:
            await AppendCoordinator().append(mock_sheets_client, "Ledger", ROW)

        assert exc_info.value.status_code == 404

    async def test_full_window(self, mock_sheets_client):
        full = [["2024-01-01", "x"] for _ in range(100)]

        async def read_values(sheet_name, range_notation):
            return ValueRange(values=full)

        mock_sheets_client.read_values.side_effect = read_values

        with pytest.raises(WindowFull) as exc_info:
            await AppendCoordinator().append(mock_sheets_client, "Ledger", ROW)

        assert exc_info.value.status_code == 400
        assert "Y27:AD126" in exc_info.value.message
        mock_sheets_client.write_values.assert_not_awaited()

    async def test_write_failure_aborts_before_sort(self, mock_sheets_client):
        mock_sheets_client.write_values.side_effect = UpstreamError(
            "Google Sheets API error: Forbidden", status_code=403
        )

        with pytest.raises(WriteFailed) as exc_info:
            await AppendCoordinator().append(mock_sheets_client, "Ledger", ROW)

        assert exc_info.value.status_code == 403
        mock_sheets_client.get_sheet_metadata.assert_not_awaited()
        mock_sheets_client.sort_range.assert_not_awaited()

    async def test_unexpected_error_becomes_internal_error(self, mock_sheets_client):
        mock_sheets_client.write_values.side_effect = RuntimeError("boom")

        with pytest.raises(InternalError) as exc_info:
            await AppendCoordinator().append(mock_sheets_client, "Ledger", ROW)

        assert exc_info.value.status_code == 500
        assert exc_info.value.details == "boom"

    async def test_too_many_values(self, mock_sheets_client):
        with pytest.raises(InvalidRequest):
            await AppendCoordinator().append(mock_sheets_client, "Ledger", ROW + ["extra"])
        mock_sheets_client.read_values.assert_not_awaited()

    @pytest.mark.parametrize("sheet_name,values", [("", ROW), ("Ledger", "not a list")])
    async def test_missing_fields(self, mock_sheets_client, sheet_name, values):
        with pytest.raises(InvalidRequest) as exc_info:
            await AppendCoordinator().append(mock_sheets_client, sheet_name, values)

        assert exc_info.value.message == "Missing required fields: sheetName and values array"


class TestConcurrentAppends:
    """Test that concurrent appends in one process get distinct rows."""

    async def test_two_appends_get_distinct_rows(self):
        coordinator = AppendCoordinator()
        sheet = FakeLedgerSheet(filled=0, window=coordinator.window)

        first, second = await asyncio.gather(
            coordinator.append(sheet, "Ledger", ["2024-02-01", "a"]),
            coordinator.append(sheet, "Ledger", ["2024-02-02", "b"]),
        )

        assert sorted([first.updated_row, second.updated_row]) == [27, 28]
        assert sorted(sheet.writes) == ["Y27:AD27", "Y28:AD28"]
        assert not first.sorted and not second.sorted

    async def test_locks_are_per_window(self):
        locks = WindowLocks()
        window = AppendWindow()
        other = AppendWindow(data_range="A2:C50", header_range="A1:C1", key_column="A")

        ledger_lock = locks.get("s", "Ledger", window)
        other_sheet_lock = locks.get("s", "Other", window)
        other_window_lock = locks.get("s", "Ledger", other)

        assert locks.get("s", "Ledger", window) is ledger_lock
        assert other_sheet_lock is not ledger_lock
        assert other_window_lock is not ledger_lock
        assert len(locks) == 3

    async def test_unused_locks_are_dropped(self):
        locks = WindowLocks()
        lock = locks.get("s", "Ledger", AppendWindow())
        assert len(locks) == 1

        del lock
        gc.collect()

        assert len(locks) == 0

    async def test_registry_is_empty_after_appends(self, mock_sheets_client):
        coordinator = AppendCoordinator()

        for sheet_name in ("Ledger", "Ledger", "Renamed"):
            await coordinator.append(mock_sheets_client, sheet_name, ROW)
        gc.collect()

        assert len(coordinator.locks) == 0


class TestAppendWindow:
    """Test the window geometry."""

    def test_default_window(self):
        window = AppendWindow()

        assert window.start_row == 27
        assert window.size == 100
        assert window.width == 6
        assert window.key_index == 24
        assert window.key_offset == 0
        assert window.start_column == "Y"
        assert window.end_column == "AD"
        assert window.row_notation(32) == "Y32:AD32"

    def test_key_column_outside_window(self):
        window = AppendWindow(key_column="B")

        with pytest.raises(InvalidAddress):
            window.key_offset
