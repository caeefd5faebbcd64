"""A1 notation helpers: column letters, cells, and grid ranges."""

import re

from pydantic import ValidationError

from ..errors import InvalidAddress
from .models import GridRange

_CELL_PATTERN = re.compile(r"^([A-Za-z]+)(\d+)$")
_LETTERS_PATTERN = re.compile(r"^[A-Za-z]+$")


def column_letter_to_index(letters: str) -> int:
    """Convert column letter(s) to 0-based index. A=0, B=1, ..., Z=25, AA=26, etc."""
    if not letters or not _LETTERS_PATTERN.match(letters):
        raise InvalidAddress(f"Invalid column letters: {letters!r}")
    result = 0
    for char in letters.upper():
        result = result * 26 + (ord(char) - ord("A") + 1)
    return result - 1


def column_index_to_letter(index: int) -> str:
    """Convert 0-based index to column letter(s)."""
    if index < 0:
        raise InvalidAddress(f"Invalid column index: {index}")
    result = ""
    index += 1
    while index > 0:
        index -= 1
        result = chr(ord("A") + (index % 26)) + result
        index //= 26
    return result


def parse_cell(cell: str) -> tuple[str, int]:
    """Parse A1 notation into column letters and row number."""
    match = _CELL_PATTERN.match(cell.strip())
    if not match:
        raise InvalidAddress(f"Invalid cell notation: {cell!r}")
    return match.group(1).upper(), int(match.group(2))


def strip_sheet_name(a1: str) -> str:
    """Drop a leading ``Sheet!`` qualifier, if any."""
    return a1.rsplit("!", 1)[-1]


def split_range(a1: str) -> tuple[str, str]:
    """Split ``A1:B2`` into its two endpoints."""
    parts = strip_sheet_name(a1).split(":")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise InvalidAddress(f"Invalid range notation: {a1!r}")
    return parts[0], parts[1]


def parse_range(a1: str, sheet_id: int = 0) -> GridRange:
    """
    Convert an A1 range to a zero-based GridRange.

    The start row is shifted to 0-based while the end row is kept as written,
    which turns the inclusive 1-based end into the exclusive 0-based bound.
    """
    start, end = split_range(a1)
    start_col, start_row = parse_cell(start)
    end_col, end_row = parse_cell(end)
    try:
        return GridRange(
            sheet_id=sheet_id,
            start_row=start_row - 1,
            end_row=end_row,
            start_col=column_letter_to_index(start_col),
            end_col=column_letter_to_index(end_col) + 1,
        )
    except ValidationError as e:
        raise InvalidAddress(f"Invalid range notation: {a1!r}", details=str(e)) from e


def row_range(start_col: str, end_col: str, row: int) -> str:
    """Build the single-row range ``Y32:AD32``."""
    return f"{start_col}{row}:{end_col}{row}"


def combine_ranges(header_range: str, data_range: str) -> str:
    """Span from the header range's first cell to the data range's last cell."""
    header_start, _ = split_range(header_range)
    _, data_end = split_range(data_range)
    parse_cell(header_start)
    parse_cell(data_end)
    return f"{header_start}:{data_end}"


def quote_sheet_name(title: str) -> str:
    """
    Escape a sheet title for use in A1 notation ranges.

    Titles with spaces, quotes, ``!``, ``:`` or a leading digit are wrapped in
    single quotes.
    """
    needs_quoting = (
        " " in title
        or "'" in title
        or "!" in title
        or ":" in title
        or (len(title) > 0 and title[0].isdigit())
    )
    if needs_quoting:
        escaped = title.replace("'", "''")
        return f"'{escaped}'"
    return title


def qualify(sheet_name: str, a1: str) -> str:
    """Prefix a range with its sheet, e.g. ``Ledger!Y27:AD126``."""
    return f"{quote_sheet_name(sheet_name)}!{a1}"
