"""Async Google Sheets REST client bound to a caller's bearer token."""

import logging
import urllib.parse
from typing import Any, Optional

import httpx

from ..config import settings
from ..errors import UpstreamError, UpstreamUnavailable
from .addressing import qualify
from .formats import formats_from_grid_data
from .models import (
    CellFormat,
    FormattedValues,
    GridRange,
    SheetProperties,
    SpreadsheetInfo,
    UpdateResult,
    ValueRange,
)

logger = logging.getLogger(__name__)

VALUE_INPUT_OPTIONS = ("RAW", "USER_ENTERED")

_FORMAT_FIELDS = (
    "sheets.data.rowData.values.effectiveFormat"
    "(textFormat.foregroundColor,backgroundColor)"
)


class SheetsClient:
    """
    Thin client for the Sheets API v4 values, metadata and batchUpdate calls.

    The client never acquires or refreshes credentials: it is constructed per
    request with the token the caller presented. A shared ``httpx.AsyncClient``
    may be passed in so connections are pooled across requests.
    """

    def __init__(
        self,
        spreadsheet_id: str,
        access_token: str,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.spreadsheet_id = spreadsheet_id
        self._access_token = access_token
        self._base_url = (base_url or settings.sheets_api_base).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.request_timeout_seconds
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=self._timeout)

    async def __aenter__(self) -> "SheetsClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._http.aclose()

    @property
    def _spreadsheet_url(self) -> str:
        return f"{self._base_url}/{self.spreadsheet_id}"

    def _values_url(self, range_notation: str) -> str:
        encoded = urllib.parse.quote(range_notation, safe="")
        return f"{self._spreadsheet_url}/values/{encoded}"

    async def _request(
        self,
        method: str,
        url: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Make an authenticated request and return the decoded JSON body."""
        headers = {
            "Authorization": f"Bearer {self._access_token}",
            "Content-Type": "application/json",
        }
        try:
            response = await self._http.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers,
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            raise UpstreamUnavailable("Google Sheets request timed out", details=str(e)) from e
        except httpx.RequestError as e:
            raise UpstreamUnavailable("Google Sheets is unreachable", details=str(e)) from e

        if response.is_error:
            logger.error(
                f"Google Sheets API error: {method} {url} -> "
                f"{response.status_code} {response.reason_phrase}"
            )
            raise UpstreamError(
                f"Google Sheets API error: {response.reason_phrase}",
                details=response.text,
                status_code=response.status_code,
            )

        if not response.content:
            return {}
        try:
            body = response.json()
        except ValueError as e:
            logger.error(f"Google Sheets API returned a non-JSON body: {method} {url}")
            raise UpstreamError(
                "Google Sheets API returned an unreadable response",
                details=response.text,
                status_code=502,
            ) from e
        if not isinstance(body, dict):
            logger.error(f"Google Sheets API returned a non-object body: {method} {url}")
            raise UpstreamError(
                "Google Sheets API returned an unreadable response",
                details=response.text,
                status_code=502,
            )
        return body

    async def read_values(self, sheet_name: str, range_notation: str) -> ValueRange:
        """Read the values of ``sheet_name!range_notation``."""
        full_range = qualify(sheet_name, range_notation)
        data = await self._request("GET", self._values_url(full_range))
        values = [[str(cell) for cell in row] for row in data.get("values", [])]
        return ValueRange(range=data.get("range", full_range), values=values)

    async def read_raw_range(self, range_notation: str) -> ValueRange:
        """Read a range that already carries its sheet qualifier."""
        data = await self._request("GET", self._values_url(range_notation))
        values = [[str(cell) for cell in row] for row in data.get("values", [])]
        return ValueRange(range=data.get("range", range_notation), values=values)

    async def write_values(
        self,
        sheet_name: Optional[str],
        range_notation: str,
        rows: list[list[Any]],
        value_input_option: str = "USER_ENTERED",
    ) -> UpdateResult:
        """
        Write rows into a range.

        ``USER_ENTERED`` lets the store coerce numbers and dates as if typed;
        ``RAW`` stores the strings literally. Pass ``sheet_name=None`` when
        ``range_notation`` is already sheet-qualified.
        """
        if value_input_option not in VALUE_INPUT_OPTIONS:
            raise ValueError(f"Unsupported valueInputOption: {value_input_option}")

        full_range = qualify(sheet_name, range_notation) if sheet_name else range_notation
        data = await self._request(
            "PUT",
            self._values_url(full_range),
            params={"valueInputOption": value_input_option},
            json={"values": rows, "majorDimension": "ROWS"},
        )
        return UpdateResult(
            updated_range=data.get("updatedRange"),
            updated_cells=data.get("updatedCells", 0),
            updated_rows=data.get("updatedRows", 0),
            updated_columns=data.get("updatedColumns", 0),
        )

    async def sort_range(
        self,
        grid_range: GridRange,
        sort_column_index: int,
        ascending: bool = True,
    ) -> None:
        """Sort a grid range by an absolute 0-based column index."""
        body = {
            "requests": [
                {
                    "sortRange": {
                        "range": grid_range.to_api(),
                        "sortSpecs": [
                            {
                                "dimensionIndex": sort_column_index,
                                "sortOrder": "ASCENDING" if ascending else "DESCENDING",
                            }
                        ],
                    }
                }
            ]
        }
        logger.debug(f"Sort request body: {body}")
        await self._request("POST", f"{self._spreadsheet_url}:batchUpdate", json=body)

    async def get_sheet_metadata(self) -> SpreadsheetInfo:
        """Get the spreadsheet title and its sheet list."""
        data = await self._request(
            "GET",
            self._spreadsheet_url,
            params={"fields": "spreadsheetId,properties,sheets.properties"},
        )
        sheets = []
        for sheet in data.get("sheets", []):
            props = sheet.get("properties", {})
            grid = props.get("gridProperties", {})
            sheets.append(
                SheetProperties(
                    sheet_id=props.get("sheetId", 0),
                    title=props.get("title", ""),
                    index=props.get("index", 0),
                    sheet_type=props.get("sheetType"),
                    row_count=grid.get("rowCount", 0),
                    column_count=grid.get("columnCount", 0),
                )
            )
        return SpreadsheetInfo(
            spreadsheet_id=data.get("spreadsheetId", self.spreadsheet_id),
            title=data.get("properties", {}).get("title", ""),
            sheets=sheets,
        )

    async def read_formats(
        self, sheet_name: str, range_notation: str
    ) -> list[list[CellFormat]]:
        """Read text and background colors for every cell of a range."""
        data = await self._request(
            "GET",
            self._spreadsheet_url,
            params={
                "ranges": qualify(sheet_name, range_notation),
                "includeGridData": "true",
                "fields": _FORMAT_FIELDS,
            },
        )
        return formats_from_grid_data(data)

    async def read_values_with_format(
        self, sheet_name: str, range_notation: str
    ) -> FormattedValues:
        """Read values and formats of the same range with two calls."""
        value_range = await self.read_values(sheet_name, range_notation)
        formats = await self.read_formats(sheet_name, range_notation)
        return FormattedValues(values=value_range.values, formats=formats)
