"""Pytest configuration and shared fixtures."""

import json
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from sheetledger.sheets import SheetsClient, SpreadsheetInfo, SheetProperties, UpdateResult, ValueRange

API_BASE = "https://sheets.test/v4/spreadsheets"
SPREADSHEET_ID = "test-sheet-123"


class FakeClock:
    """Manually advanced clock for cache expiry tests."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FakeSheetsAPI:
    """
    Records requests and answers them from a handler.

    The handler receives the ``httpx.Request`` and returns an ``httpx.Response``.
    """

    def __init__(self, handler: Optional[Callable[[httpx.Request], httpx.Response]] = None):
        self.requests: list[httpx.Request] = []
        self.handler = handler or (lambda request: httpx.Response(200, json={}))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> dict:
        return json.loads(self.last.content)

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sheets_api() -> FakeSheetsAPI:
    return FakeSheetsAPI()


@pytest.fixture
async def sheets_client(sheets_api):
    """A real SheetsClient talking to the fake API."""
    http_client = sheets_api.http_client()
    client = SheetsClient(
        SPREADSHEET_ID, "test-token", http_client=http_client, base_url=API_BASE, timeout=5
    )
    yield client
    await http_client.aclose()


@pytest.fixture
def mock_sheets_client() -> Mock:
    """Create a mocked SheetsClient for a ledger sheet with five filled rows."""
    client = Mock(spec=SheetsClient)
    client.spreadsheet_id = SPREADSHEET_ID

    def read_values(sheet_name, range_notation):
        if range_notation == "A1:A1":
            return ValueRange(range=f"{sheet_name}!A1:A1", values=[["Title"]])
        rows = [[f"2024-01-0{i + 1}", "lunch", "12000"] for i in range(5)]
        return ValueRange(range=f"{sheet_name}!{range_notation}", values=rows)

    client.read_values = AsyncMock(side_effect=read_values)
    client.write_values = AsyncMock(
        return_value=UpdateResult(updated_range="Ledger!Y32:AD32", updated_cells=6)
    )
    client.get_sheet_metadata = AsyncMock(
        return_value=SpreadsheetInfo(
            spreadsheet_id=SPREADSHEET_ID,
            title="Household",
            sheets=[
                SheetProperties(sheet_id=0, title="Summary"),
                SheetProperties(sheet_id=7, title="Ledger"),
            ],
        )
    )
    client.sort_range = AsyncMock(return_value=None)
    client.read_formats = AsyncMock(return_value=[])
    return client
