"""Batch orchestrator: drives the source paginator across all sources.

Data flow:
  1. Partition sources into fixed-size chunks (bounded concurrency)
  2. Run every paginator call in a chunk concurrently; wait for the chunk
  3. Merge results by id (last write wins)
  4. Report the running unique total after each chunk
"""

import asyncio
import inspect
import json
import logging
from collections.abc import Awaitable, Callable, Iterator, Sequence
from datetime import datetime
from typing import TypeVar

from src.core.schemas import Scholarship, ScrapeRunResult, Source
from src.scraping.paginator import SourcePaginator

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Called with the running de-duplicated total after each chunk.
ProgressCallback = Callable[[int], None | Awaitable[None]]


def chunked(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Yield consecutive slices of at most ``size`` items."""
    if size < 1:
        msg = f"chunk size must be >= 1, got {size}"
        raise ValueError(msg)
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


def merge_by_id(
    merged: dict[str, Scholarship],
    scholarships: Sequence[Scholarship],
) -> int:
    """Merge into ``merged`` keyed by id, later entries overwriting earlier ones.

    Returns the number of ids that were already present.
    """
    replaced = 0
    for s in scholarships:
        if s.id in merged:
            replaced += 1
        merged[s.id] = s
    return replaced


async def run_scrape(
    paginator: SourcePaginator,
    sources: Sequence[Source],
    *,
    batch_size: int,
    max_pages_per_source: int,
    on_progress: ProgressCallback | None = None,
) -> ScrapeRunResult:
    """Scrape every source in bounded batches and return a run summary."""
    started_at = datetime.now()
    merged: dict[str, Scholarship] = {}
    raw_count = 0
    sources_with_results = 0

    for batch_num, batch in enumerate(chunked(sources, batch_size), start=1):
        logger.info("Batch %d: scraping %s", batch_num, ", ".join(s.id for s in batch))
        per_source = await asyncio.gather(
            *(paginator.fetch_source(source, max_pages_per_source) for source in batch),
        )
        for source, scholarships in zip(batch, per_source):
            raw_count += len(scholarships)
            if scholarships:
                sources_with_results += 1
            replaced = merge_by_id(merged, scholarships)
            if replaced:
                logger.debug("'%s': %d duplicate ids overwritten", source.id, replaced)

        logger.info("Batch %d done: %d unique scholarships so far", batch_num, len(merged))
        if on_progress is not None:
            outcome = on_progress(len(merged))
            if inspect.isawaitable(outcome):
                await outcome

    finished_at = datetime.now()
    logger.info(
        "Scrape complete: %d sources, %d raw, %d unique in %.1fs",
        len(sources), raw_count, len(merged),
        (finished_at - started_at).total_seconds(),
    )
    return ScrapeRunResult(
        scholarships=list(merged.values()),
        sources_attempted=len(sources),
        sources_with_results=sources_with_results,
        raw_count=raw_count,
        started_at=started_at,
        finished_at=finished_at,
    )


async def scrape_all(
    paginator: SourcePaginator,
    sources: Sequence[Source],
    batch_size: int,
    max_pages_per_source: int,
    on_progress: ProgressCallback | None = None,
) -> list[Scholarship]:
    """Scrape every source and return the de-duplicated scholarships (unordered)."""
    result = await run_scrape(
        paginator,
        sources,
        batch_size=batch_size,
        max_pages_per_source=max_pages_per_source,
        on_progress=on_progress,
    )
    return result.scholarships


def export_results_json(scholarships: Sequence[Scholarship]) -> str:
    """Export scholarships as a JSON string."""
    data = [s.model_dump(mode="json", exclude={"updated_at"}) for s in scholarships]
    return json.dumps(data, indent=2)
