"""Retrieval façade: store → local cache → live scrape.

Per call:
  1. Store read. total_count > 0 → return (fast path).
  2. Store failed or empty → non-expired local cache, sliced client-side.
  3. Otherwise a live scrape with a shallow page ceiling; shuffle, cache,
     and sync to the store in the background without blocking the response.
Total failure yields an empty PageResult with an error message, never raises.
"""

import logging
import random
from collections.abc import Sequence

from src.core.config import ScrapeConfig
from src.core.schemas import PageResult, Scholarship, Source
from src.pipeline.cache import LocalPageCache
from src.pipeline.context import PagingContext
from src.pipeline.orchestrator import ProgressCallback, scrape_all
from src.pipeline.store_sync import StoreSync
from src.scraping.paginator import SourcePaginator

logger = logging.getLogger(__name__)

FETCH_FAILED_MESSAGE = "Failed to fetch scholarships"


def slice_page(items: Sequence[Scholarship], page: int, page_size: int) -> list[Scholarship]:
    start = (page - 1) * page_size
    return list(items[start:start + page_size])


class ScholarshipRetriever:
    """Single entry point for "page N of scholarships".

    Collaborators are injected so each layer can be swapped or mocked.
    ``store`` may be None when no persistent store is available.
    """

    def __init__(
        self,
        *,
        store: StoreSync | None,
        cache: LocalPageCache,
        paginator: SourcePaginator,
        sources: Sequence[Source],
        scrape: ScrapeConfig,
        rng: random.Random | None = None,
    ) -> None:
        self._store = store
        self._cache = cache
        self._paginator = paginator
        self._sources = list(sources)
        self._scrape = scrape
        self._rng = rng or random.Random()

    async def get_scholarships(
        self,
        ctx: PagingContext,
        page: int,
        page_size: int,
        on_progress: ProgressCallback | None = None,
    ) -> PageResult:
        if page < 1 or page_size < 1:
            msg = f"page and page_size must be >= 1, got page={page}, page_size={page_size}"
            raise ValueError(msg)

        # Step 1: persistent store
        if self._store is not None:
            try:
                items, total = await self._store.read_page(ctx, page, page_size)
            except Exception:
                logger.warning("Store read failed — falling back to local cache", exc_info=True)
            else:
                if total > 0:
                    return PageResult(items=items, total_count=total, page=page,
                                      page_size=page_size, source="store")
                logger.info("Store is empty — falling back to local cache")

        # Step 2: local cache
        cached = self._cache.load()
        if cached:
            logger.info("Serving page %d from local cache (%d items)", page, len(cached))
            return PageResult(items=slice_page(cached, page, page_size),
                              total_count=len(cached), page=page,
                              page_size=page_size, source="cache")

        # Step 3: live scrape
        return await self._live(ctx, page, page_size, on_progress)

    async def _live(
        self,
        ctx: PagingContext,
        page: int,
        page_size: int,
        on_progress: ProgressCallback | None,
    ) -> PageResult:
        logger.info("No store or cache data — live scraping %d sources", len(self._sources))
        try:
            scholarships = await scrape_all(
                self._paginator,
                self._sources,
                self._scrape.batch_size,
                self._scrape.live_max_pages,
                on_progress,
            )
        except Exception:
            logger.error("Live scrape failed", exc_info=True)
            scholarships = []

        if not scholarships:
            return PageResult(page=page, page_size=page_size, source="none",
                              error=FETCH_FAILED_MESSAGE)

        # No relevance signal: shuffle so no single source dominates the order.
        self._rng.shuffle(scholarships)
        self._cache.save(scholarships)
        if self._store is not None:
            ctx.spawn(self._background_sync(self._store, ctx, scholarships), name="store-sync")

        return PageResult(items=slice_page(scholarships, page, page_size),
                          total_count=len(scholarships), page=page,
                          page_size=page_size, source="live")

    @staticmethod
    async def _background_sync(
        store: StoreSync,
        ctx: PagingContext,
        scholarships: list[Scholarship],
    ) -> None:
        try:
            await store.sync_to_store(scholarships)
        except Exception:
            logger.warning("Background store sync failed", exc_info=True)
            return
        # Page boundaries moved; cursors from before the sync are stale.
        ctx.reset_cursors()
