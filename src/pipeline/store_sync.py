"""Persistent store sync: bulk upserts in, cursor-paginated pages out.

Write path: chunk → one transaction per chunk → upsert keyed by id.
Read path: keyset pagination ordered by (name, id). Cursors for visited
pages live on the caller's PagingContext; a missing cursor is rebuilt by
walking forward from the nearest known page (or the start).
"""

import asyncio
import json
import logging
import sqlite3
from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Any

from src.core.db import (
    bulk_upsert_scholarships,
    count_scholarships,
    delete_scholarships_older_than,
    fetch_cursor_after,
    fetch_scholarships_after,
    get_scholarship,
    get_scholarships_by_ids,
)
from src.core.deadline import parse_deadline
from src.core.schemas import SEE_WEBSITE, Scholarship, SyncResult
from src.pipeline.context import Cursor, PagingContext
from src.pipeline.orchestrator import chunked

logger = logging.getLogger(__name__)

STORE_BULK_LIMIT = 500


def to_document(scholarship: Scholarship, updated_at: datetime) -> dict[str, Any] | None:
    """Convert to a store document, or None when the deadline is not resolvable.

    The "See Website" sentinel is stored as a NULL deadline.
    """
    deadline = parse_deadline(scholarship.deadline)
    if deadline is None:
        return None
    return {
        "id": scholarship.id,
        "name": scholarship.name,
        "provider": scholarship.provider,
        "amount": scholarship.amount,
        "deadline": None if deadline == SEE_WEBSITE else deadline,
        "link": scholarship.url,
        "description": scholarship.description,
        "requirements": json.dumps(scholarship.requirements),
        "university_id": scholarship.source_id,
        "categories": json.dumps(scholarship.categories),
        "region": scholarship.region,
        "updated_at": updated_at.isoformat(),
    }


def from_row(row: sqlite3.Row) -> Scholarship:
    """Rebuild a Scholarship from a stored document."""
    return Scholarship(
        id=row["id"],
        source_id=row["university_id"],
        name=row["name"],
        provider=row["provider"],
        amount=row["amount"],
        deadline=row["deadline"] or SEE_WEBSITE,
        description=row["description"],
        requirements=json.loads(row["requirements"]),
        url=row["link"],
        categories=json.loads(row["categories"]),
        region=row["region"],
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


class StoreSync:
    """Reads and writes scholarships in the document store."""

    def __init__(self, conn: sqlite3.Connection, bulk_write_size: int = STORE_BULK_LIMIT) -> None:
        if not 1 <= bulk_write_size <= STORE_BULK_LIMIT:
            msg = f"bulk_write_size must be between 1 and {STORE_BULK_LIMIT}"
            raise ValueError(msg)
        self._conn = conn
        self._bulk_write_size = bulk_write_size

    async def sync_to_store(self, scholarships: Sequence[Scholarship]) -> SyncResult:
        """Upsert ``scholarships`` in bulk-write-sized atomic chunks."""
        now = datetime.now()
        written = skipped = chunks = 0

        for chunk in chunked(scholarships, self._bulk_write_size):
            documents = []
            for s in chunk:
                doc = to_document(s, now)
                if doc is None:
                    logger.debug("Skipping '%s': unresolvable deadline '%s'", s.id, s.deadline)
                    skipped += 1
                    continue
                documents.append(doc)
            written += bulk_upsert_scholarships(self._conn, documents)
            chunks += 1
            logger.debug("Committed chunk %d (%d documents)", chunks, len(documents))
            # Chunk boundary is a suspension point for concurrent readers.
            await asyncio.sleep(0)

        logger.info("Store sync: %d written, %d skipped in %d chunks", written, skipped, chunks)
        return SyncResult(written=written, skipped=skipped, chunks=chunks)

    async def read_page(
        self,
        ctx: PagingContext,
        page: int,
        page_size: int,
    ) -> tuple[list[Scholarship], int]:
        """Return (items, total_count) for a one-based page ordered by name.

        ``total_count == 0`` means the store is empty.
        """
        if page < 1 or page_size < 1:
            msg = f"page and page_size must be >= 1, got page={page}, page_size={page_size}"
            raise ValueError(msg)

        total = count_scholarships(self._conn)
        if total == 0:
            return [], 0

        after: Cursor | None = None
        if page > 1:
            after = ctx.cursor_for(page_size, page - 1)
            if after is None:
                after = self._walk_to(ctx, page - 1, page_size)
                if after is None:
                    return [], total

        rows = fetch_scholarships_after(self._conn, after, page_size)
        if rows:
            ctx.remember(page_size, page, (rows[-1]["name"], rows[-1]["id"]))
        return [from_row(r) for r in rows], total

    def get(self, scholarship_id: str) -> Scholarship | None:
        row = get_scholarship(self._conn, scholarship_id)
        return from_row(row) if row is not None else None

    def get_many(self, scholarship_ids: Sequence[str]) -> list[Scholarship]:
        """Load scholarships in the order of ``scholarship_ids``, skipping unknown ids."""
        by_id = {row["id"]: row for row in get_scholarships_by_ids(self._conn, scholarship_ids)}
        missing = len(set(scholarship_ids) - by_id.keys())
        if missing:
            logger.info("%d requested ids not found in the store", missing)
        return [from_row(by_id[sid]) for sid in dict.fromkeys(scholarship_ids) if sid in by_id]

    def purge_stale(self, older_than_days: int, *, now: datetime | None = None) -> int:
        """Delete listings not refreshed by a sync within ``older_than_days``."""
        cutoff = (now or datetime.now()) - timedelta(days=older_than_days)
        deleted = delete_scholarships_older_than(self._conn, cutoff)
        logger.info("Purged %d listings not seen since %s", deleted, cutoff.isoformat())
        return deleted

    def _walk_to(self, ctx: PagingContext, target_page: int, page_size: int) -> Cursor | None:
        """Rebuild the cursor for ``target_page`` by walking forward page by page."""
        start_page, cursor = ctx.nearest_cursor(page_size, target_page)
        logger.debug("No cursor for page %d (size %d) — walking from page %d",
                     target_page, page_size, start_page)
        for p in range(start_page + 1, target_page + 1):
            cursor = fetch_cursor_after(self._conn, cursor, page_size)
            if cursor is None:
                return None
            ctx.remember(page_size, p, cursor)
        return cursor
