"""Read a window's values together with their cell formatting."""

import logging
from typing import Optional

from ..errors import SheetLedgerError
from ..sheets import CellFormat, SheetsClient
from ..sheets.addressing import combine_ranges, qualify
from ..sheets.formats import blank_formats
from .models import DEFAULT_WINDOW, RangeMetadata, RangeReadResult
from .scanner import row_has_data

logger = logging.getLogger(__name__)


def align_rows(
    data_rows: list[list[str]],
    data_formats: list[list[CellFormat]],
) -> tuple[list[list[str]], list[list[CellFormat]]]:
    """
    Drop empty data rows from values and formats in lockstep.

    ``data_formats`` is shaped like the unfiltered rows. The keep decision is
    made once per row and applied to both lists, so ``formats[i]`` always
    belongs to ``values[i]``. A kept row without a format row gets blank
    formats of the same width.
    """
    kept = [row_has_data(row) for row in data_rows]

    values = []
    formats = []
    for index, keep in enumerate(kept):
        if not keep:
            continue
        row = data_rows[index]
        values.append(row)
        if index < len(data_formats):
            formats.append(data_formats[index])
        else:
            formats.append(blank_formats(len(row)))
    return values, formats


class FormattedRangeReader:
    """Fetch header plus data rows of a window with aligned formatting."""

    def __init__(
        self,
        data_range: str = DEFAULT_WINDOW.data_range,
        header_range: str = DEFAULT_WINDOW.header_range,
    ):
        self.data_range = data_range
        self.header_range = header_range

    async def read(
        self,
        client: SheetsClient,
        sheet_name: str,
        data_range: Optional[str] = None,
        header_range: Optional[str] = None,
    ) -> RangeReadResult:
        """
        Read ``header_range`` and ``data_range`` as one combined range.

        Values are authoritative and their errors propagate. Formatting is
        best effort: if that call fails every cell is reported unformatted.
        """
        data_range = data_range or self.data_range
        header_range = header_range or self.header_range
        combined = combine_ranges(header_range, data_range)
        batch_range = qualify(sheet_name, combined)

        value_range = await client.read_values(sheet_name, combined)
        all_values = value_range.values
        logger.info(f"Read {len(all_values)} rows from {batch_range}")

        header_row = all_values[0] if all_values else []
        data_rows = all_values[1:]
        headers = [cell.strip() for cell in header_row]

        try:
            all_formats = await client.read_formats(sheet_name, combined)
        except SheetLedgerError as e:
            logger.warning(f"Format fetch failed for {batch_range}, using blank formats: {e.message}")
            all_formats = []

        values, cell_formats = align_rows(data_rows, all_formats[1:])

        header_formats = all_formats[0] if all_formats else []
        if not header_formats:
            header_formats = blank_formats(len(headers))

        return RangeReadResult(
            range=batch_range,
            headers=headers,
            values=values,
            cell_formats=cell_formats,
            header_formats=header_formats,
            metadata=RangeMetadata(
                spreadsheet_id=client.spreadsheet_id,
                sheet_name=sheet_name,
                requested_data_range=data_range,
                requested_header_range=header_range,
                actual_range=value_range.range or batch_range,
                has_data=len(values) > 0,
                has_headers=any(h != "" for h in headers),
            ),
        )
