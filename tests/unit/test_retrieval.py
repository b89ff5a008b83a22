"""Tests for the retrieval façade: store → cache → live fallback chain."""

import random
import sqlite3
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.core.config import ScrapeConfig
from src.core.db import init_db
from src.core.schemas import Scholarship, Source
from src.pipeline.cache import LocalPageCache
from src.pipeline.context import PagingContext
from src.pipeline.retrieval import FETCH_FAILED_MESSAGE, ScholarshipRetriever, slice_page
from src.pipeline.store_sync import StoreSync

SOURCES = [
    Source(id="umich", display_name="UMich", base_url="https://umich.academicworks.com"),
    Source(id="osu", display_name="Ohio State", base_url="https://osu.academicworks.com"),
]


def _scholarship(sid: str, source_id: str = "umich") -> Scholarship:
    return Scholarship(
        id=sid,
        source_id=source_id,
        name=f"Award {sid}",
        provider=f"{source_id} External Opportunities",
        deadline="2027-03-01",
        url=f"https://{source_id}.academicworks.com/opportunities/{sid}",
    )


def _paginator(per_source: dict[str, list[Scholarship]]) -> MagicMock:
    paginator = MagicMock()

    async def _fetch(source: Source, max_pages: int) -> list[Scholarship]:
        return list(per_source.get(source.id, []))

    paginator.fetch_source = AsyncMock(side_effect=_fetch)
    return paginator


@pytest.fixture()
def conn(tmp_path):  # type: ignore[no-untyped-def]
    c = init_db(tmp_path / "store.db")
    yield c
    c.close()


@pytest.fixture()
def cache(tmp_path):  # type: ignore[no-untyped-def]
    return LocalPageCache(tmp_path / "cache.json", "scholarship_cache_test")


def _retriever(store, cache, paginator) -> ScholarshipRetriever:  # type: ignore[no-untyped-def]
    return ScholarshipRetriever(
        store=store,
        cache=cache,
        paginator=paginator,
        sources=SOURCES,
        scrape=ScrapeConfig(batch_size=5, live_max_pages=2),
        rng=random.Random(0),
    )


class TestSlicePage:
    def test_slices(self) -> None:
        items = [_scholarship(str(i)) for i in range(5)]
        assert [s.id for s in slice_page(items, 2, 2)] == ["2", "3"]
        assert slice_page(items, 4, 2) == []


class TestStorePath:
    async def test_served_from_store(self, conn, cache) -> None:  # type: ignore[no-untyped-def]
        store = StoreSync(conn)
        await store.sync_to_store([_scholarship(f"s{i}") for i in range(5)])
        paginator = _paginator({})

        result = await _retriever(store, cache, paginator).get_scholarships(PagingContext(), 2, 2)

        assert result.source == "store"
        assert result.total_count == 5
        assert [s.id for s in result.items] == ["s2", "s3"]
        assert result.error is None
        paginator.fetch_source.assert_not_called()


class TestCachePath:
    async def test_store_failure_falls_back_to_cache(self, cache) -> None:  # type: ignore[no-untyped-def]
        store = MagicMock()
        store.read_page = AsyncMock(side_effect=sqlite3.OperationalError("database is locked"))
        cache.save([_scholarship(f"c{i}") for i in range(3)])
        paginator = _paginator({})

        result = await _retriever(store, cache, paginator).get_scholarships(PagingContext(), 1, 2)

        assert result.source == "cache"
        assert result.total_count == 3
        assert [s.id for s in result.items] == ["c0", "c1"]
        paginator.fetch_source.assert_not_called()

    async def test_empty_store_falls_back_to_cache(self, conn, cache) -> None:  # type: ignore[no-untyped-def]
        cache.save([_scholarship("c0")])
        result = await _retriever(StoreSync(conn), cache, _paginator({})).get_scholarships(
            PagingContext(), 1, 20,
        )
        assert result.source == "cache"

    async def test_no_store_configured(self, cache) -> None:  # type: ignore[no-untyped-def]
        cache.save([_scholarship("c0")])
        result = await _retriever(None, cache, _paginator({})).get_scholarships(
            PagingContext(), 1, 20,
        )
        assert result.source == "cache"


class TestLivePath:
    async def test_live_scrape_caches_and_syncs_in_background(self, conn, cache) -> None:  # type: ignore[no-untyped-def]
        store = StoreSync(conn)
        paginator = _paginator({
            "umich": [_scholarship(f"u{i}") for i in range(3)],
            "osu": [_scholarship(f"o{i}", "osu") for i in range(2)],
        })
        ctx = PagingContext()

        result = await _retriever(store, cache, paginator).get_scholarships(ctx, 1, 2)

        assert result.source == "live"
        assert result.total_count == 5
        assert len(result.items) == 2
        assert paginator.fetch_source.await_count == 2
        assert all(call.args[1] == 2 for call in paginator.fetch_source.await_args_list)

        cached = cache.load()
        assert cached is not None
        assert {s.id for s in cached} == {"u0", "u1", "u2", "o0", "o1"}
        assert [s.id for s in cached[:2]] == [s.id for s in result.items]

        await ctx.drain()
        _, total = await store.read_page(PagingContext(), 1, 10)
        assert total == 5

    async def test_next_call_served_from_store(self, conn, cache) -> None:  # type: ignore[no-untyped-def]
        store = StoreSync(conn)
        paginator = _paginator({"umich": [_scholarship("u0"), _scholarship("u1")]})
        retriever = _retriever(store, cache, paginator)
        ctx = PagingContext()

        await retriever.get_scholarships(ctx, 1, 10)
        await ctx.drain()
        second = await retriever.get_scholarships(ctx, 1, 10)

        assert second.source == "store"
        assert paginator.fetch_source.await_count == 2

    async def test_background_sync_failure_is_contained(self, cache) -> None:  # type: ignore[no-untyped-def]
        store = MagicMock()
        store.read_page = AsyncMock(return_value=([], 0))
        store.sync_to_store = AsyncMock(side_effect=sqlite3.OperationalError("read-only"))
        ctx = PagingContext()

        retriever = _retriever(store, cache, _paginator({"umich": [_scholarship("u0")]}))
        result = await retriever.get_scholarships(ctx, 1, 10)
        await ctx.drain()

        assert result.source == "live"
        store.sync_to_store.assert_awaited_once()

    async def test_background_sync_resets_cursors(self, conn, cache) -> None:  # type: ignore[no-untyped-def]
        ctx = PagingContext()
        ctx.remember(10, 1, ("Old Award", "old-id"))
        retriever = _retriever(StoreSync(conn), cache, _paginator({"umich": [_scholarship("u0")]}))

        await retriever.get_scholarships(ctx, 1, 10)
        await ctx.drain()

        assert ctx.cursor_for(10, 1) is None

    async def test_progress_forwarded(self, cache) -> None:  # type: ignore[no-untyped-def]
        progress: list[int] = []
        retriever = _retriever(None, cache, _paginator({"umich": [_scholarship("u0")]}))
        await retriever.get_scholarships(PagingContext(), 1, 10, on_progress=progress.append)
        assert progress == [1]


class TestTotalFailure:
    async def test_empty_scrape_reports_error(self, conn, cache) -> None:  # type: ignore[no-untyped-def]
        ctx = PagingContext()
        result = await _retriever(StoreSync(conn), cache, _paginator({})).get_scholarships(ctx, 1, 20)

        assert result.source == "none"
        assert result.items == []
        assert result.total_count == 0
        assert result.error == FETCH_FAILED_MESSAGE
        assert cache.load() is None
        assert ctx.pending == 0

    async def test_orchestrator_exception_reports_error(self, cache) -> None:  # type: ignore[no-untyped-def]
        paginator = MagicMock()
        paginator.fetch_source = AsyncMock(side_effect=RuntimeError("boom"))

        result = await _retriever(None, cache, paginator).get_scholarships(PagingContext(), 1, 20)

        assert result.source == "none"
        assert result.error == FETCH_FAILED_MESSAGE

    async def test_invalid_page_rejected(self, cache) -> None:  # type: ignore[no-untyped-def]
        with pytest.raises(ValueError):
            await _retriever(None, cache, _paginator({})).get_scholarships(PagingContext(), 0, 20)
