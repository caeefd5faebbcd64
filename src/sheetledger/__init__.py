"""SheetLedger - append-and-sort ledger on top of Google Sheets."""

__version__ = "0.1.0"
