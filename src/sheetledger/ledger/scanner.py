"""Locating the first free row of a bounded window."""

from typing import Any, Optional, Sequence

NOT_FOUND = -1


def is_blank(cell: Any) -> bool:
    """A cell is blank if it is missing, None, or whitespace only."""
    return cell is None or str(cell).strip() == ""


def is_row_empty(row: Optional[Sequence[Any]], key_offset: int = 0) -> bool:
    """A row is empty when its key cell is blank or absent."""
    if not row or key_offset >= len(row):
        return True
    return is_blank(row[key_offset])


def row_has_data(row: Optional[Sequence[Any]]) -> bool:
    """True if any cell of the row is non-blank."""
    return bool(row) and any(not is_blank(cell) for cell in row)


def find_first_empty_row(
    rows: Sequence[Optional[Sequence[Any]]],
    window_size: int,
    key_offset: int = 0,
) -> int:
    """
    Return the window-relative index of the first row with an empty key cell.

    Rows past the end of ``rows`` count as empty, since the values API drops
    trailing blank rows. Only indices ``0..window_size-1`` are inspected;
    ``NOT_FOUND`` means the window is full.
    """
    for i in range(window_size):
        if i >= len(rows) or is_row_empty(rows[i], key_offset):
            return i
    return NOT_FOUND
