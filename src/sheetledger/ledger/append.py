"""Append a row into a bounded window, then re-sort the window."""

import asyncio
import logging
import weakref
from typing import Any, Optional

from ..errors import (
    InternalError,
    InvalidRequest,
    SheetLedgerError,
    SheetNotFound,
    SortFailed,
    WindowFull,
    WriteFailed,
)
from ..sheets import SheetsClient
from .models import DEFAULT_WINDOW, AppendResult, AppendStage, AppendWindow
from .scanner import NOT_FOUND, find_first_empty_row

logger = logging.getLogger(__name__)

EXISTENCE_PROBE_RANGE = "A1:A1"


class WindowLocks:
    """
    Registry of per-window asyncio locks.

    Held across scan and write so two appends in this process cannot pick the
    same free row. Instances of the service running side by side still race.
    Entries are weak: a lock nobody holds or waits on drops out of the registry.
    """

    def __init__(self):
        self._locks: weakref.WeakValueDictionary[tuple[str, str, str], asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def get(self, spreadsheet_id: str, sheet_name: str, window: AppendWindow) -> asyncio.Lock:
        key = (spreadsheet_id, sheet_name, window.data_range)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)


class AppendCoordinator:
    """
    Orchestrates existence check, scan, write and sort for one append.

    Only the write can lose user data, so only failures up to and including
    the write abort the run. Sorting degrades to ``sorted=False``.
    """

    def __init__(
        self,
        window: AppendWindow = DEFAULT_WINDOW,
        locks: Optional[WindowLocks] = None,
    ):
        self.window = window
        self.locks = locks or WindowLocks()

    async def append(
        self, client: SheetsClient, sheet_name: str, values: list[Any]
    ) -> AppendResult:
        """Write ``values`` into the first free window row and sort the window."""
        if not sheet_name:
            raise InvalidRequest("Missing required fields: sheetName and values array")
        if not isinstance(values, list):
            raise InvalidRequest("Missing required fields: sheetName and values array")
        if len(values) > self.window.width:
            raise InvalidRequest(
                f"Row has {len(values)} values but window {self.window.data_range} "
                f"is {self.window.width} columns wide"
            )

        stage = AppendStage.CHECKING_EXISTENCE
        try:
            await self._check_existence(client, sheet_name)

            lock = self.locks.get(client.spreadsheet_id, sheet_name, self.window)
            async with lock:
                stage = AppendStage.SCANNING
                empty_index = await self._scan(client, sheet_name)

                stage = AppendStage.WRITING
                target_row = self.window.start_row + empty_index
                updated_range = self.window.row_notation(target_row)
                await self._write(client, sheet_name, updated_range, values)

            logger.info(f"Row {target_row} written to '{sheet_name}', sorting window")

            stage = AppendStage.SORTING
            sort_error = await self._sort(client, sheet_name)

            stage = AppendStage.DONE
            return AppendResult(
                success=True,
                updated_row=target_row,
                updated_range=updated_range,
                sorted=sort_error is None,
                sort_error=sort_error,
            )
        except SheetLedgerError:
            raise
        except Exception as e:
            logger.exception(f"Unexpected error while appending row (stage={stage.value})")
            raise InternalError("Internal server error while appending row", details=str(e)) from e

    async def _check_existence(self, client: SheetsClient, sheet_name: str) -> None:
        try:
            await client.read_values(sheet_name, EXISTENCE_PROBE_RANGE)
        except SheetLedgerError as e:
            logger.error(f"Sheet existence check failed for '{sheet_name}': {e.message}")
            raise SheetNotFound(
                f"Sheet '{sheet_name}' does not exist or cannot be accessed",
                details=e.details,
                status_code=e.status_code if e.status_code < 500 else 404,
            ) from e

    async def _scan(self, client: SheetsClient, sheet_name: str) -> int:
        current = await client.read_values(sheet_name, self.window.data_range)
        index = find_first_empty_row(
            current.values, self.window.size, key_offset=self.window.key_offset
        )
        if index == NOT_FOUND:
            raise WindowFull(f"No empty rows available in {self.window.data_range} range")
        return index

    async def _write(
        self, client: SheetsClient, sheet_name: str, updated_range: str, values: list[Any]
    ) -> None:
        try:
            await client.write_values(
                sheet_name, updated_range, [values], value_input_option="USER_ENTERED"
            )
        except SheetLedgerError as e:
            logger.error(f"Writing {sheet_name}!{updated_range} failed: {e.message}")
            raise WriteFailed(
                f"Failed to update row: {e.message}",
                details=e.details,
                status_code=e.status_code,
            ) from e

    async def _resolve_sheet_id(self, client: SheetsClient, sheet_name: str) -> int:
        try:
            info = await client.get_sheet_metadata()
        except SheetLedgerError as e:
            raise SortFailed(f"Could not load sheet metadata: {e.message}") from e

        sheet = info.find_sheet(sheet_name)
        if sheet is None:
            raise SortFailed(f"Sheet '{sheet_name}' not found in spreadsheet metadata")
        return sheet.sheet_id

    async def _sort(self, client: SheetsClient, sheet_name: str) -> Optional[str]:
        """Sort the window by its key column. Returns the failure message, if any."""
        try:
            sheet_id = await self._resolve_sheet_id(client, sheet_name)
            try:
                await client.sort_range(
                    self.window.grid_range(sheet_id), self.window.key_index, ascending=True
                )
            except SheetLedgerError as e:
                raise SortFailed(f"Sort failed: {e.message}", details=e.details) from e
        except SortFailed as e:
            logger.warning(f"Row kept but window not sorted: {e.message}")
            return e.message

        logger.info(f"Sorted {sheet_name}!{self.window.data_range} by {self.window.key_column}")
        return None
