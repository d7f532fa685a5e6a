from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Optional, Sequence

from domain.watchlist import MediaSummary, StorageError, ValidationError, WatchlistEntry
from infrastructure.config.settings import (
    LOCAL_WATCHLIST_KEY,
    LOCAL_WATCHLIST_PATH,
    TMDB_API_KEY,
    TMDB_API_TOKEN,
)
from infrastructure.enrichment.tmdb_client import TMDBClient
from infrastructure.persistence.local.slot_storage import JsonFileSlotStorage
from infrastructure.persistence.local.watchlist_store import LocalWatchlistStore

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Manage the device-local watchlist (a JSON slot file).")
    p.add_argument("--path", default=str(LOCAL_WATCHLIST_PATH), help="Slot file path.")
    p.add_argument("--key", default=LOCAL_WATCHLIST_KEY, help="Slot key holding the watchlist.")
    sub = p.add_subparsers(dest="command", required=True)

    ls = sub.add_parser("list", help="Print saved entries, oldest first.")
    ls.add_argument("--no-details", action="store_true", help="Skip the TMDb lookup for titles.")

    for name, help_text in (("add", "Save a title."), ("remove", "Forget a title.")):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("id", help="TMDb id.")
        cmd.add_argument("--type", dest="media_type", default="movie", choices=["movie", "tv"])

    sub.add_parser("clear", help="Drop every saved entry.")
    return p


def _format_line(entry: WatchlistEntry, summary: Optional[MediaSummary]) -> str:
    head = f"{entry.media_type.value}:{entry.id}"
    if summary is None:
        return head
    rating = f" ({summary.vote_average:.1f})" if summary.vote_average is not None else ""
    return f"{head}\t{summary.title}{rating}"


async def _fetch_summaries(entries: Sequence[WatchlistEntry]) -> list[Optional[MediaSummary]]:
    """Display data is never stored locally; re-fetch it on every listing."""
    client = TMDBClient(api_token=TMDB_API_TOKEN or None, api_key=TMDB_API_KEY or None)
    try:
        return list(await asyncio.gather(*(client.get_media_summary(e.media_type, e.id) for e in entries)))
    finally:
        await client.close()


def _run_list(store: LocalWatchlistStore, *, with_details: bool) -> int:
    entries = store.list_entries()
    if not entries:
        print("(empty)")
        return 0

    summaries: list[Optional[MediaSummary]] = [None] * len(entries)
    if with_details:
        if TMDB_API_TOKEN or TMDB_API_KEY:
            summaries = asyncio.run(_fetch_summaries(entries))
        else:
            logger.warning("TMDB auth not configured: listing ids only")

    for entry, summary in zip(entries, summaries):
        print(_format_line(entry, summary))
    return 0


def run(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    store = LocalWatchlistStore(JsonFileSlotStorage(args.path), key=args.key)

    try:
        if args.command == "list":
            return _run_list(store, with_details=not args.no_details)
        if args.command == "add":
            if store.add(args.media_type, args.id):
                print(f"added {args.media_type}:{args.id}")
            else:
                print(f"already saved {args.media_type}:{args.id}")
            return 0
        if args.command == "remove":
            if store.remove(args.media_type, args.id):
                print(f"removed {args.media_type}:{args.id}")
            else:
                print(f"not saved {args.media_type}:{args.id}")
            return 0
        if args.command == "clear":
            store.clear()
            print("cleared")
            return 0
    except ValidationError as e:
        logger.error("invalid input: %s", e)
        return 2
    except StorageError as e:
        logger.error("local watchlist write failed: %s", e)
        return 1
    return 2


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    raise SystemExit(run())


if __name__ == "__main__":
    main()
