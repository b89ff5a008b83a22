"""CLI entry point for the scholarship aggregator."""

import argparse
import asyncio
import logging
import sys
from collections.abc import Mapping

from src.core.config import Settings
from src.core.db import init_db
from src.core.schemas import Scholarship
from src.essay.generator import EssayGenerationError, generate_essay
from src.essay.llm import available_providers, get_provider
from src.essay.schema import StudentProfile
from src.pipeline.cache import LocalPageCache
from src.pipeline.context import PagingContext
from src.pipeline.orchestrator import export_results_json, run_scrape
from src.pipeline.retrieval import ScholarshipRetriever
from src.pipeline.status_store import VALID_STATUSES, UserStatusStore
from src.pipeline.store_sync import StoreSync
from src.pipeline.views import SORT_OPTIONS, VIEWS, filter_scholarships, sort_scholarships
from src.scraping.base import PageFetcher
from src.scraping.extractor import FieldExtractor
from src.scraping.http import HttpSession
from src.scraping.paginator import SourcePaginator


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default="config/settings.yaml",
        help="Path to settings YAML file (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Scholarship aggregator - scrape university portals into one catalog",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- sync subcommand ---
    sync_parser = subparsers.add_parser("sync", help="Scrape all sources and write to the store")
    _add_common(sync_parser)
    sync_parser.add_argument("--batch-size", type=int, help="Sources scraped concurrently")
    sync_parser.add_argument("--max-pages", type=int, help="Page ceiling per source")
    sync_parser.add_argument(
        "--source",
        action="append",
        dest="sources",
        metavar="ID",
        help="Only scrape this source id (repeatable)",
    )
    sync_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be scraped without any network access",
    )
    sync_parser.add_argument(
        "--export",
        choices=["json"],
        help="Export scraped scholarships to format (json)",
    )
    sync_parser.add_argument(
        "--clear-cache",
        action="store_true",
        help="Delete the local page cache once the store has been written",
    )

    # --- list subcommand ---
    list_parser = subparsers.add_parser("list", help="Print one page of scholarships")
    _add_common(list_parser)
    list_parser.add_argument("--page", type=int, default=1, help="One-based page (default: 1)")
    list_parser.add_argument("--page-size", type=int, default=20, help="Items per page (default: 20)")
    list_parser.add_argument("--user", help="Apply this user's applied/hidden marks")
    list_parser.add_argument(
        "--show",
        choices=VIEWS,
        default="available",
        help="available (unmarked), applied or hidden (default: available; others need --user)",
    )
    list_parser.add_argument("--search", help="Case-insensitive name filter")
    list_parser.add_argument("--sort", choices=SORT_OPTIONS, help="Sort order (default: store order)")
    list_parser.add_argument(
        "--profile",
        default="config/student.yaml",
        help="Student profile whose quiz answers drive --sort relevance",
    )

    # --- status subcommand ---
    status_parser = subparsers.add_parser("status", help="Manage per-user applied/hidden marks")
    status_sub = status_parser.add_subparsers(dest="status_command", required=True)

    set_parser = status_sub.add_parser("set", help="Mark a scholarship")
    _add_common(set_parser)
    set_parser.add_argument("--user", required=True)
    set_parser.add_argument("scholarship_id")
    set_parser.add_argument("status", choices=sorted(VALID_STATUSES))

    clear_parser = status_sub.add_parser("clear", help="Remove a mark")
    _add_common(clear_parser)
    clear_parser.add_argument("--user", required=True)
    clear_parser.add_argument("scholarship_id")

    show_parser = status_sub.add_parser("list", help="List a user's marks")
    _add_common(show_parser)
    show_parser.add_argument("--user", required=True)
    show_parser.add_argument("--status", choices=sorted(VALID_STATUSES))

    # --- purge subcommand ---
    purge_parser = subparsers.add_parser("purge", help="Delete listings not refreshed recently")
    _add_common(purge_parser)
    purge_parser.add_argument(
        "--older-than-days",
        type=int,
        help="Age threshold in days (default: store.stale_after_days)",
    )

    # --- essay subcommand ---
    essay_parser = subparsers.add_parser("essay", help="Generate a tailored essay")
    _add_common(essay_parser)
    essay_parser.add_argument("scholarship_id")
    essay_parser.add_argument("--question", required=True, help="Essay question to answer")
    essay_parser.add_argument(
        "--profile",
        default="config/student.yaml",
        help="Path to student profile YAML (default: config/student.yaml)",
    )
    essay_parser.add_argument(
        "--provider",
        choices=available_providers(),
        help="LLM provider (default: essay.provider from settings)",
    )

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def build_paginator(settings: Settings, fetcher: PageFetcher) -> SourcePaginator:
    return SourcePaginator(
        fetcher,
        FieldExtractor(settings.categories),
        proxy_base_url=settings.http.proxy_base_url,
        page_delay_seconds=settings.scrape.page_delay_seconds,
    )


def format_scholarship(s: Scholarship, status: str | None = None) -> str:
    mark = f" [{status}]" if status else ""
    amount = f"${s.amount:,}" if s.amount else "Varies"
    return (f"{s.name}{mark}\n  {s.provider} | {amount} | deadline: {s.deadline}\n"
            f"  {', '.join(s.categories)} | {s.url}\n  id: {s.id}")


def dry_run(settings: Settings, batch_size: int, max_pages: int) -> None:
    """Print what would happen without touching the network."""
    sources = settings.sources
    batches = (len(sources) + batch_size - 1) // batch_size
    print(f"[DRY RUN] {len(sources)} sources in {batches} batches of <= {batch_size}")
    for source in sources:
        print(f"[DRY RUN] '{source.id}' {source.display_name}: {source.base_url}{source.listing_path}")
    print(f"[DRY RUN] Up to {max_pages} pages per source")
    print(f"[DRY RUN] Store: {settings.store.path} (chunks of {settings.store.bulk_write_size})")


async def cmd_sync(settings: Settings, args: argparse.Namespace) -> None:
    """Scrape every configured source and upsert into the store."""
    batch_size = args.batch_size or settings.scrape.batch_size
    max_pages = args.max_pages or settings.scrape.max_pages

    sources = settings.sources
    if args.sources:
        found = {sid: settings.source_by_id(sid) for sid in dict.fromkeys(s.lower() for s in args.sources)}
        missing = sorted(sid for sid, source in found.items() if source is None)
        if missing:
            msg = f"Unknown source id(s): {', '.join(missing)}"
            raise ValueError(msg)
        sources = [source for source in found.values() if source is not None]

    if args.dry_run:
        dry_run(settings.model_copy(update={"sources": sources}), batch_size, max_pages)
        return

    async with HttpSession(settings.http) as http:
        result = await run_scrape(
            build_paginator(settings, http),
            sources,
            batch_size=batch_size,
            max_pages_per_source=max_pages,
            on_progress=lambda n: print(f"  ... {n} unique scholarships so far"),
        )

    conn = init_db(settings.store.path)
    try:
        sync = await StoreSync(conn, settings.store.bulk_write_size).sync_to_store(result.scholarships)
    finally:
        conn.close()

    print(f"\nSync complete: {result.sources_with_results}/{result.sources_attempted} sources "
          f"returned listings, {result.raw_count} raw, {result.unique_count} unique.")
    print(f"  {sync.written} written, {sync.skipped} skipped in {sync.chunks} chunks "
          f"to {settings.store.path}")

    if args.clear_cache:
        cache = LocalPageCache(settings.cache.path, settings.cache.key, settings.cache.ttl_hours)
        cache.clear()
        print(f"  Cleared local cache {cache.path}")

    if args.export == "json" and result.scholarships:
        print(f"\n{export_results_json(result.scholarships)}")


def load_quiz_answers(args: argparse.Namespace) -> dict[str, str]:
    """Quiz answers for --sort relevance; empty (store order) without a profile."""
    if args.sort != "relevance":
        return {}
    try:
        return StudentProfile.from_yaml(args.profile).quiz_answers
    except FileNotFoundError:
        logging.getLogger(__name__).warning(
            "No student profile at %s — relevance sort keeps store order", args.profile,
        )
        return {}


def print_listing(items: list[Scholarship], statuses: Mapping[str, str], args: argparse.Namespace) -> None:
    for s in sort_scholarships(items, args.sort, load_quiz_answers(args)):
        print(format_scholarship(s, statuses.get(s.id)))


def cmd_list_marked(settings: Settings, args: argparse.Namespace) -> None:
    """Print every scholarship the user marked applied or hidden."""
    if not args.user:
        msg = f"--show {args.show} requires --user"
        raise ValueError(msg)

    conn = init_db(settings.store.path)
    try:
        status_store = UserStatusStore(conn)
        ids = status_store.list_by_status(args.user, args.show)
        statuses = status_store.get_all_statuses(args.user)
        items = StoreSync(conn, settings.store.bulk_write_size).get_many(ids)
    finally:
        conn.close()

    items = filter_scholarships(items, statuses, args.show, args.search)
    print(f"{len(items)} {args.show} scholarships for {args.user}\n")
    print_listing(items, statuses, args)


async def cmd_list(settings: Settings, args: argparse.Namespace) -> None:
    """Print one page through the store → cache → live fallback chain.

    Applied and hidden scholarships are left out of the page; --show
    applied|hidden lists them instead, loaded from the store by id.
    """
    if args.show != "available":
        cmd_list_marked(settings, args)
        return

    conn = init_db(settings.store.path)
    ctx = PagingContext()
    try:
        async with HttpSession(settings.http) as http:
            retriever = ScholarshipRetriever(
                store=StoreSync(conn, settings.store.bulk_write_size),
                cache=LocalPageCache(settings.cache.path, settings.cache.key,
                                     settings.cache.ttl_hours),
                paginator=build_paginator(settings, http),
                sources=settings.sources,
                scrape=settings.scrape,
            )
            result = await retriever.get_scholarships(ctx, args.page, args.page_size)
            await ctx.drain()

        statuses = UserStatusStore(conn).get_all_statuses(args.user) if args.user else {}
    finally:
        conn.close()

    if result.error:
        print(f"Error: {result.error}", file=sys.stderr)
        sys.exit(1)

    last_page = max(1, -(-result.total_count // result.page_size))
    items = filter_scholarships(result.items, statuses, "available", args.search)
    print(f"Page {result.page}/{last_page} ({result.total_count} total, from {result.source}; "
          f"{len(items)} shown)\n")
    print_listing(items, statuses, args)


def cmd_status(settings: Settings, args: argparse.Namespace) -> None:
    conn = init_db(settings.store.path)
    try:
        store = UserStatusStore(conn)
        if args.status_command == "set":
            store.set_status(args.user, args.scholarship_id, args.status)
            print(f"Marked {args.scholarship_id} as {args.status}")
        elif args.status_command == "clear":
            if store.clear_status(args.user, args.scholarship_id):
                print(f"Cleared status for {args.scholarship_id}")
            else:
                print(f"No status recorded for {args.scholarship_id}")
        else:
            marks = store.get_all_statuses(args.user)
            if args.status:
                marks = {sid: s for sid, s in marks.items() if s == args.status}
            found = {s.id: s for s in StoreSync(conn, settings.store.bulk_write_size).get_many(list(marks))}
            for sid, status in marks.items():
                s = found.get(sid)
                detail = f"{s.name} | {s.url}" if s is not None else "(no longer listed)"
                print(f"{status}\t{sid}\t{detail}")
    finally:
        conn.close()


def cmd_purge(settings: Settings, args: argparse.Namespace) -> None:
    days = args.older_than_days or settings.store.stale_after_days
    conn = init_db(settings.store.path)
    try:
        deleted = StoreSync(conn, settings.store.bulk_write_size).purge_stale(days)
    finally:
        conn.close()
    print(f"Purged {deleted} listings not refreshed in {days} days")


def cmd_essay(settings: Settings, args: argparse.Namespace) -> None:
    """Generate an essay for one stored scholarship."""
    conn = init_db(settings.store.path)
    try:
        scholarship = StoreSync(conn, settings.store.bulk_write_size).get(args.scholarship_id)
    finally:
        conn.close()
    if scholarship is None:
        msg = f"Scholarship '{args.scholarship_id}' not found in {settings.store.path}"
        raise ValueError(msg)

    profile = StudentProfile.from_yaml(args.profile)
    provider = get_provider(args.provider or settings.essay.provider)
    print(f"Generating essay for '{scholarship.name}' with {provider.provider_id}...\n")
    print(generate_essay(provider, args.question, scholarship, profile, settings.essay.models))


def load_settings(path: str) -> Settings:
    try:
        return Settings.from_yaml(path)
    except FileNotFoundError:
        logging.getLogger(__name__).info("No config at %s — using defaults", path)
        return Settings()


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = load_settings(args.config)
    except ValueError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.command == "sync":
            asyncio.run(cmd_sync(settings, args))
        elif args.command == "list":
            asyncio.run(cmd_list(settings, args))
        elif args.command == "status":
            cmd_status(settings, args)
        elif args.command == "purge":
            cmd_purge(settings, args)
        elif args.command == "essay":
            cmd_essay(settings, args)
    except (FileNotFoundError, ImportError, ValueError, EssayGenerationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
