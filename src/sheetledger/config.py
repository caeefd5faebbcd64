"""Configuration management for SheetLedger."""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

# Append window of the observed ledger layout: 100 rows under a header on row 26.
DEFAULT_DATA_RANGE = "Y27:AD126"
DEFAULT_HEADER_RANGE = "Y26:AD26"
DEFAULT_KEY_COLUMN = "Y"

DEFAULT_LOOKUP_SHEET = "계정"
DEFAULT_LOOKUP_RANGES = {
    "accounts": "D41:D59",
    "payment_methods": "F4:F21",
}


def _parse_list(name: str, default: list[str]) -> list[str]:
    """Parse a comma-separated environment variable."""
    value = os.getenv(name)
    if value:
        return [item.strip() for item in value.split(",") if item.strip()]
    return default


def _parse_cors_origins() -> list[str]:
    """Parse CORS origins from environment variable."""
    return _parse_list("CORS_ALLOW_ORIGINS", ["*"])


def _parse_lookup_ranges() -> dict[str, str]:
    """Parse LOOKUP_RANGES=name=A1,name=A1 into a mapping."""
    value = os.getenv("LOOKUP_RANGES")
    if not value:
        return dict(DEFAULT_LOOKUP_RANGES)
    ranges = {}
    for item in value.split(","):
        name, sep, a1 = item.partition("=")
        if sep and name.strip() and a1.strip():
            ranges[name.strip()] = a1.strip()
    return ranges


class Settings(BaseModel):
    """Application settings."""

    # Google Sheets REST endpoint
    sheets_api_base: str = os.getenv(
        "SHEETS_API_BASE", "https://sheets.googleapis.com/v4/spreadsheets"
    )
    # Deadline for a single call to the store
    request_timeout_seconds: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30"))

    # Public client configuration handed to the browser
    google_api_key: Optional[str] = os.getenv("GOOGLE_API_KEY")
    google_client_id: Optional[str] = os.getenv("GOOGLE_CLIENT_ID")

    # Ledger window
    ledger_data_range: str = os.getenv("LEDGER_DATA_RANGE", DEFAULT_DATA_RANGE)
    ledger_header_range: str = os.getenv("LEDGER_HEADER_RANGE", DEFAULT_HEADER_RANGE)
    ledger_key_column: str = os.getenv("LEDGER_KEY_COLUMN", DEFAULT_KEY_COLUMN)

    # Plain value reads
    default_values_range: str = os.getenv("DEFAULT_VALUES_RANGE", "Sheet1!A1:Z1000")

    # Lookup lists
    lookup_sheet_name: str = os.getenv("LOOKUP_SHEET_NAME", DEFAULT_LOOKUP_SHEET)
    lookup_ranges: dict[str, str] = _parse_lookup_ranges()
    lookup_cache_ttl_seconds: int = int(os.getenv("LOOKUP_CACHE_TTL_SECONDS", "300"))  # 5 minutes
    lookup_cache_max_entries: int = int(os.getenv("LOOKUP_CACHE_MAX_ENTRIES", "1024"))

    # Settlement cells, one label per row
    settlement_range: str = os.getenv("SETTLEMENT_RANGE", "AA22:AA23")
    settlement_labels: list[str] = _parse_list(
        "SETTLEMENT_LABELS", ["서은 정산 금액", "기순 정산 금액"]
    )

    # Server settings
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8000"))
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # CORS settings (comma-separated list of allowed origins, or * for all)
    cors_allow_origins: list[str] = _parse_cors_origins()


settings = Settings()
