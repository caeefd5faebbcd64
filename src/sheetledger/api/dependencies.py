"""Request dependencies: bearer token, shared services and the store client."""

from dataclasses import dataclass, field
from typing import AsyncIterator, Optional

import httpx
from fastapi import Depends, Header, HTTPException, Request

from ..config import Settings, settings
from ..errors import AuthRequired
from ..ledger import (
    AppendCoordinator,
    AppendWindow,
    FormattedRangeReader,
    LookupCache,
    LookupService,
    SettlementReader,
    WindowLocks,
)
from ..sheets import SheetsClient


@dataclass
class LedgerServices:
    """Process-wide components, built once by the app factory."""

    config: Settings
    cache: LookupCache
    locks: WindowLocks
    coordinator: AppendCoordinator
    reader: FormattedRangeReader
    lookups: LookupService
    settlement: SettlementReader
    http_client: Optional[httpx.AsyncClient] = field(default=None)


def build_services(
    config: Settings = settings,
    http_client: Optional[httpx.AsyncClient] = None,
) -> LedgerServices:
    """Compose the ledger components from settings."""
    window = AppendWindow(
        data_range=config.ledger_data_range,
        header_range=config.ledger_header_range,
        key_column=config.ledger_key_column,
    )
    cache = LookupCache(
        ttl_seconds=config.lookup_cache_ttl_seconds,
        max_entries=config.lookup_cache_max_entries,
    )
    locks = WindowLocks()
    return LedgerServices(
        config=config,
        cache=cache,
        locks=locks,
        coordinator=AppendCoordinator(window=window, locks=locks),
        reader=FormattedRangeReader(window.data_range, window.header_range),
        lookups=LookupService(cache, config.lookup_sheet_name, config.lookup_ranges),
        settlement=SettlementReader(config.settlement_range, config.settlement_labels),
        http_client=http_client,
    )


def get_services(request: Request) -> LedgerServices:
    """Return the services attached to the app, building them on first use."""
    services = getattr(request.app.state, "services", None)
    if services is None:
        config = getattr(request.app.state, "config", settings)
        services = request.app.state.services = build_services(config)
    return services


def parse_bearer_token(authorization: Optional[str]) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthRequired()
    token = authorization[len("Bearer "):].strip()
    if not token:
        raise AuthRequired()
    return token


def get_access_token(authorization: Optional[str] = Header(None)) -> str:
    """Reject the request with 401 before any store call if no token is present."""
    try:
        return parse_bearer_token(authorization)
    except AuthRequired as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())


async def get_sheets_client(
    spreadsheet_id: str,
    token: str = Depends(get_access_token),
    services: LedgerServices = Depends(get_services),
) -> AsyncIterator[SheetsClient]:
    """Yield a store client for this spreadsheet and the caller's token."""
    client = SheetsClient(
        spreadsheet_id,
        token,
        http_client=services.http_client,
        base_url=services.config.sheets_api_base,
        timeout=services.config.request_timeout_seconds,
    )
    try:
        yield client
    finally:
        await client.close()
