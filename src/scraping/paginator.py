"""Source paginator — walks one portal's listing pages through a PageFetcher."""

import asyncio
import logging

from src.core.schemas import Scholarship, Source
from src.scraping.base import FetchError, PageFetcher
from src.scraping.extractor import FieldExtractor, parse_rows
from src.scraping.urls import build_page_url

logger = logging.getLogger(__name__)


class SourcePaginator:
    """Fetches and extracts every listing page of a source.

    A failing source never raises: network or parse errors resolve to an
    empty list so one outage cannot abort a batch.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        extractor: FieldExtractor,
        *,
        proxy_base_url: str | None = None,
        page_delay_seconds: float = 0.0,
    ) -> None:
        self._fetcher = fetcher
        self._extractor = extractor
        self._proxy_base_url = proxy_base_url
        self._page_delay = page_delay_seconds

    async def fetch_source(self, source: Source, max_pages: int) -> list[Scholarship]:
        """Return all valid scholarships from pages 1..max_pages of ``source``."""
        try:
            return await self._paginate(source, max_pages)
        except Exception:
            logger.warning("Scrape failed for '%s' — returning no results",
                           source.id, exc_info=True)
            return []

    async def _paginate(self, source: Source, max_pages: int) -> list[Scholarship]:
        all_scholarships: list[Scholarship] = []

        for page in range(1, max_pages + 1):
            url = build_page_url(source, page, self._proxy_base_url)
            try:
                html = await self._fetcher.fetch_page(url)
            except FetchError as e:
                if page == 1:
                    raise
                # Portals answer past-the-end pages with 404.
                logger.info("'%s' page %d returned HTTP %d — stopping",
                            source.id, page, e.status)
                break

            rows = parse_rows(html)
            if not rows:
                logger.debug("'%s' page %d has no rows — end of listings", source.id, page)
                break

            scholarships = self._extractor.extract_rows(rows, source, page)
            all_scholarships.extend(scholarships)
            logger.info("'%s' page %d: %d rows, %d valid",
                        source.id, page, len(rows), len(scholarships))

            if self._page_delay > 0 and page < max_pages:
                await asyncio.sleep(self._page_delay)

        return all_scholarships
