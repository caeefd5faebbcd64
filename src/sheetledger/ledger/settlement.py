"""Settlement amounts read from a fixed column of cells."""

import re

from ..sheets import SheetsClient
from ..sheets.addressing import qualify
from .models import SettlementAmount, SettlementSummary

_NON_NUMERIC = re.compile(r"[^\d.-]")
_LEADING_NUMBER = re.compile(r"-?\d*\.?\d+")


def parse_amount(value) -> float:
    """
    Parse "₩1,234.5" style cells. Anything unparseable counts as 0.

    After stripping non-numeric characters the longest leading number wins,
    so "1.2.3" reads as 1.2 and "5-3" as 5.
    """
    if not value or not isinstance(value, str):
        return 0.0
    match = _LEADING_NUMBER.match(_NON_NUMERIC.sub("", value))
    if match is None:
        return 0.0
    return float(match.group())


def format_amount(amount: float) -> str:
    """Group thousands and keep at most three decimals: 1234.5 -> "1,234.5"."""
    text = f"{amount:,.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def _entry(label: str, amount: float) -> SettlementAmount:
    return SettlementAmount(label=label, amount=amount, formatted_amount=format_amount(amount))


class SettlementReader:
    """Read one settlement amount per row of a single-column range."""

    def __init__(self, range_notation: str, labels: list[str]):
        self.range_notation = range_notation
        self.labels = list(labels)

    async def read(self, client: SheetsClient, sheet_name: str) -> SettlementSummary:
        value_range = await client.read_values(sheet_name, self.range_notation)
        rows = value_range.values

        entries = []
        for index, label in enumerate(self.labels):
            cell = rows[index][0] if index < len(rows) and rows[index] else "0"
            entries.append(_entry(label, parse_amount(cell)))

        total = sum(entry.amount for entry in entries)
        full_range = qualify(sheet_name, self.range_notation)
        return SettlementSummary(
            range=full_range,
            entries=entries,
            total=_entry("total", total),
            actual_range=value_range.range or full_range,
            has_data=len(rows) > 0,
        )
