"""Ledger operations: bounded-window append, formatted reads and lookups."""

from .append import AppendCoordinator, WindowLocks
from .cache import LookupCache
from .lookups import LookupService
from .models import (
    DEFAULT_WINDOW,
    AppendRequest,
    AppendResult,
    AppendStage,
    AppendWindow,
    LookupResult,
    RangeReadResult,
    SettlementSummary,
)
from .reader import FormattedRangeReader
from .scanner import NOT_FOUND, find_first_empty_row
from .settlement import SettlementReader

__all__ = [
    "AppendCoordinator",
    "WindowLocks",
    "LookupCache",
    "LookupService",
    "DEFAULT_WINDOW",
    "AppendRequest",
    "AppendResult",
    "AppendStage",
    "AppendWindow",
    "LookupResult",
    "RangeReadResult",
    "SettlementSummary",
    "FormattedRangeReader",
    "NOT_FOUND",
    "find_first_empty_row",
    "SettlementReader",
]
