"""Named lookup lists served through the lookup cache."""

import logging
from typing import Optional

from ..errors import LookupNotFound
from ..sheets import SheetsClient
from ..sheets.addressing import qualify
from .cache import LookupCache
from .models import LookupResult
from .scanner import is_blank

logger = logging.getLogger(__name__)


def flatten_options(rows: list[list[str]]) -> list[str]:
    """Flatten a range into its trimmed, non-empty cells in reading order."""
    return [str(cell).strip() for row in rows for cell in row if not is_blank(cell)]


class LookupService:
    """Reads small enumerated lists (account names, payment methods) from fixed ranges."""

    def __init__(
        self,
        cache: LookupCache,
        sheet_name: str,
        ranges: dict[str, str],
    ):
        self.cache = cache
        self.sheet_name = sheet_name
        self.ranges = dict(ranges)

    def range_for(self, name: str) -> str:
        a1 = self.ranges.get(name)
        if a1 is None:
            raise LookupNotFound(f"Unknown lookup list: {name}")
        return a1

    async def get_list(
        self, client: SheetsClient, name: str, refresh: bool = False
    ) -> LookupResult:
        """Return the list, from cache when it is fresher than the TTL."""
        a1 = self.range_for(name)
        full_range = qualify(self.sheet_name, a1)
        key = LookupCache.make_key(client.spreadsheet_id, name)

        cached: Optional[list[str]] = None if refresh else self.cache.get(key)
        if cached is not None:
            logger.debug(f"Lookup cache hit for {key}")
            return LookupResult(name=name, values=cached, cached=True, range=full_range)

        value_range = await client.read_values(self.sheet_name, a1)
        values = flatten_options(value_range.values)
        self.cache.put(key, values)
        logger.info(f"Fetched {len(values)} '{name}' options from {full_range}")

        return LookupResult(name=name, values=values, cached=False, range=full_range)
