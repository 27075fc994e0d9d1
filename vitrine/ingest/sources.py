"""Remote CSV sources."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import httpx

from vitrine.ingest.csv_text import parse_csv

logger = logging.getLogger(__name__)

USER_AGENT = "VitrineBuild/2.1"


@dataclass(slots=True)
class SourceTables:
    brands: list[dict[str, str]]
    master: list[dict[str, str]]


class CSVSource:
    def __init__(self, *, session: httpx.AsyncClient | None = None) -> None:
        self._session = session or httpx.AsyncClient(
            timeout=60.0, follow_redirects=True, headers={"User-Agent": USER_AGENT}
        )

    async def close(self) -> None:
        await self._session.aclose()

    async def fetch_text(self, url: str) -> str:
        response = await self._session.get(url)
        response.raise_for_status()
        return response.text

    async def fetch_records(self, url: str) -> list[dict[str, str]]:
        return parse_csv(await self.fetch_text(url))

    async def fetch_tables(self, brands_url: str, master_url: str) -> SourceTables:
        """Fetch both tables together; either failing aborts the whole fetch."""
        logger.info("Fetching brand and master CSVs")
        brands, master = await asyncio.gather(
            self.fetch_records(brands_url),
            self.fetch_records(master_url),
        )
        logger.info("Parsed %s brands and %s catalog items", len(brands), len(master))
        return SourceTables(brands=brands, master=master)
