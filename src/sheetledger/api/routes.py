"""API routes for SheetLedger."""

import logging
from typing import Any, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from ..errors import SheetLedgerError
from ..ledger import AppendRequest
from ..sheets import SheetsClient
from .dependencies import LedgerServices, get_services, get_sheets_client

logger = logging.getLogger(__name__)

router = APIRouter()


class ValuesWriteRequest(BaseModel):
    """Request to overwrite a sheet-qualified range."""

    range: str = Field(..., min_length=1)
    values: list[list[Any]]


class UpdateRequest(ValuesWriteRequest):
    """Request to overwrite a range with an explicit input option."""

    value_input_option: str = Field("RAW", alias="valueInputOption")

    model_config = {"populate_by_name": True}


def _fail(e: Exception, message: str) -> NoReturn:
    """Translate an error into an HTTP error response."""
    if isinstance(e, SheetLedgerError):
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())
    logger.exception(message)
    raise HTTPException(status_code=500, detail={"error": message, "details": str(e)})


# Service endpoints


@router.get("/health")
async def health_check(services: LedgerServices = Depends(get_services)):
    """Health check endpoint with non-secret diagnostics."""
    config = services.config
    return {
        "status": "ok",
        "service": "sheetledger",
        "config": {
            "ledger_data_range": config.ledger_data_range,
            "ledger_header_range": config.ledger_header_range,
            "ledger_key_column": config.ledger_key_column,
            "lookup_lists": sorted(config.lookup_ranges),
            "lookup_cache_ttl_seconds": config.lookup_cache_ttl_seconds,
            "google_api_key_present": bool(config.google_api_key),
        },
    }


@router.get("/config")
async def client_config(services: LedgerServices = Depends(get_services)):
    """Public client configuration for the browser."""
    return {
        "googleApiKey": services.config.google_api_key,
        "googleClientId": services.config.google_client_id,
    }


# Plain value endpoints


@router.get("/sheets/{spreadsheet_id}")
async def read_values(
    spreadsheet_id: str,
    range: Optional[str] = None,
    client: SheetsClient = Depends(get_sheets_client),
    services: LedgerServices = Depends(get_services),
):
    """Read raw values of a sheet-qualified range."""
    try:
        result = await client.read_raw_range(range or services.config.default_values_range)
        return {"values": result.values, "spreadsheet_id": spreadsheet_id}
    except Exception as e:
        _fail(e, "Failed to fetch spreadsheet data")


@router.put("/sheets/{spreadsheet_id}")
async def write_values(
    spreadsheet_id: str,
    request: ValuesWriteRequest,
    client: SheetsClient = Depends(get_sheets_client),
):
    """Write values as if typed by a user."""
    try:
        result = await client.write_values(None, request.range, request.values, "USER_ENTERED")
        return {"updated_cells": result.updated_cells, "updated_range": result.updated_range}
    except Exception as e:
        _fail(e, "Failed to update spreadsheet")


@router.post("/sheets/{spreadsheet_id}/update")
async def update_values(
    spreadsheet_id: str,
    request: UpdateRequest,
    client: SheetsClient = Depends(get_sheets_client),
):
    """Write values with the requested input option (RAW by default)."""
    if request.value_input_option not in ("RAW", "USER_ENTERED"):
        raise HTTPException(
            status_code=400,
            detail={"error": f"Unsupported valueInputOption: {request.value_input_option}"},
        )
    try:
        result = await client.write_values(
            None, request.range, request.values, request.value_input_option
        )
        return {
            "success": True,
            "updated_range": result.updated_range,
            "updated_cells": result.updated_cells,
            "updated_columns": result.updated_columns,
            "updated_rows": result.updated_rows,
            "metadata": {
                "spreadsheet_id": spreadsheet_id,
                "requested_range": request.range,
                "actual_range": result.updated_range,
            },
        }
    except Exception as e:
        _fail(e, "Internal server error while updating sheet data")


@router.get("/sheets/{spreadsheet_id}/info")
async def spreadsheet_info(
    spreadsheet_id: str,
    client: SheetsClient = Depends(get_sheets_client),
):
    """Get the spreadsheet title and its sheets."""
    try:
        info = await client.get_sheet_metadata()
        return {
            "spreadsheet_title": info.title,
            "spreadsheet_id": spreadsheet_id,
            "sheets": [sheet.model_dump() for sheet in info.sheets],
        }
    except Exception as e:
        _fail(e, "Failed to fetch spreadsheet information")


# Ledger endpoints


@router.post("/sheets/{spreadsheet_id}/append")
async def append_row(
    spreadsheet_id: str,
    request: AppendRequest,
    client: SheetsClient = Depends(get_sheets_client),
    services: LedgerServices = Depends(get_services),
):
    """Append a row to the ledger window and re-sort it."""
    logger.info(f"Append to '{request.sheet_name}' of spreadsheet {spreadsheet_id}")
    try:
        result = await services.coordinator.append(client, request.sheet_name, request.values)
        return result.model_dump()
    except Exception as e:
        _fail(e, "Internal server error while appending row")


@router.get("/sheets/{spreadsheet_id}/range")
async def read_range(
    spreadsheet_id: str,
    sheet_name: str = Query(..., alias="sheetName", min_length=1),
    range: Optional[str] = None,
    header_range: Optional[str] = Query(None, alias="headerRange"),
    client: SheetsClient = Depends(get_sheets_client),
    services: LedgerServices = Depends(get_services),
):
    """Read headers, non-empty rows and their aligned cell formats."""
    try:
        result = await services.reader.read(client, sheet_name, range, header_range)
        return result.model_dump()
    except Exception as e:
        _fail(e, "Internal server error while fetching sheet data")


@router.get("/sheets/{spreadsheet_id}/settlement")
async def settlement(
    spreadsheet_id: str,
    sheet_name: str = Query(..., alias="sheetName", min_length=1),
    client: SheetsClient = Depends(get_sheets_client),
    services: LedgerServices = Depends(get_services),
):
    """Read the settlement amounts of a sheet."""
    try:
        summary = await services.settlement.read(client, sheet_name)
        return {
            **summary.model_dump(),
            "metadata": {
                "spreadsheet_id": spreadsheet_id,
                "sheet_name": sheet_name,
                "actual_range": summary.actual_range,
                "has_data": summary.has_data,
            },
        }
    except Exception as e:
        _fail(e, "Internal server error while fetching settlement data")


# Lookup endpoints


async def _lookup(name: str, client: SheetsClient, services: LedgerServices, refresh: bool):
    try:
        result = await services.lookups.get_list(client, name, refresh=refresh)
        return {name: result.values, "cached": result.cached, "range": result.range}
    except Exception as e:
        _fail(e, f"Internal server error while fetching {name.replace('_', ' ')} options")


@router.get("/sheets/{spreadsheet_id}/accounts")
async def accounts(
    spreadsheet_id: str,
    refresh: bool = False,
    client: SheetsClient = Depends(get_sheets_client),
    services: LedgerServices = Depends(get_services),
):
    """Account names, cached for five minutes."""
    return await _lookup("accounts", client, services, refresh)


@router.get("/sheets/{spreadsheet_id}/payment-methods")
async def payment_methods(
    spreadsheet_id: str,
    refresh: bool = False,
    client: SheetsClient = Depends(get_sheets_client),
    services: LedgerServices = Depends(get_services),
):
    """Payment method names, cached for five minutes."""
    return await _lookup("payment_methods", client, services, refresh)
