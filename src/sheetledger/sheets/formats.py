"""Conversion of Sheets grid data colors into CellFormat rows."""

from typing import Any, Optional

from .models import CellFormat


def _channel(value: Any) -> int:
    # Half-up rounding; round() would use banker's rounding.
    return int(float(value or 0) * 255 + 0.5)


def _dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def rgb_to_hex(color: Optional[dict[str, Any]]) -> Optional[str]:
    """
    Convert {"red": 1, "green": 0, "blue": 0} to "#ff0000".

    The API omits zero channels and reports unset colors as black, so a color
    that rounds to (0, 0, 0) is treated as absent. So is anything that is not
    a color object.
    """
    if not color or not isinstance(color, dict):
        return None
    try:
        r = _channel(color.get("red"))
        g = _channel(color.get("green"))
        b = _channel(color.get("blue"))
    except (TypeError, ValueError):
        return None
    if r == 0 and g == 0 and b == 0:
        return None
    return f"#{r:02x}{g:02x}{b:02x}"


def cell_format_from_api(cell: dict[str, Any]) -> CellFormat:
    """Read text and background colors from a cell's effectiveFormat."""
    effective = _dict(_dict(cell).get("effectiveFormat"))
    text_format = _dict(effective.get("textFormat"))
    return CellFormat(
        text_color=rgb_to_hex(text_format.get("foregroundColor")),
        background_color=rgb_to_hex(effective.get("backgroundColor")),
    )


def formats_from_grid_data(spreadsheet: dict[str, Any]) -> list[list[CellFormat]]:
    """
    Extract one list of CellFormat per row from an includeGridData response.

    Unexpected shapes at any level read as missing data rather than failing.
    """
    sheets = _list(_dict(spreadsheet).get("sheets"))
    if not sheets:
        return []
    data = _list(_dict(sheets[0]).get("data"))
    if not data:
        return []

    rows = []
    for row in _list(_dict(data[0]).get("rowData")):
        rows.append([cell_format_from_api(cell) for cell in _list(_dict(row).get("values"))])
    return rows


def blank_formats(width: int) -> list[CellFormat]:
    """A row of ``width`` cells without explicit formatting."""
    return [CellFormat() for _ in range(width)]
