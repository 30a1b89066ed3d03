"""Drive the page fetcher across a bounded number of pages."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from .clients.games import fetch_page
from .models import Page, RawServerRecord

logger = logging.getLogger(__name__)

MAX_PAGES = 3
PAGE_DELAY_SECONDS = 0.3
OVERFETCH_FACTOR = 2

PageFetcher = Callable[[str, str], Awaitable[Page]]
Sleeper = Callable[[float], Awaitable[None]]


async def aggregate(
    game_id: str,
    limit: int,
    fetch: PageFetcher = fetch_page,
    *,
    max_pages: int = MAX_PAGES,
    page_delay: float = PAGE_DELAY_SECONDS,
    sleep: Sleeper = asyncio.sleep,
) -> list[RawServerRecord]:
    """Collect raw server records across up to ``max_pages`` pages.

    Stops after the last allowed page, when the upstream has no further
    cursor, or once ``2 * limit`` records are in hand, in that order. Waits
    ``page_delay`` seconds between pages only. A repeated job id keeps its
    first occurrence. Fetch errors propagate untouched.
    """
    records: list[RawServerRecord] = []
    seen: set[str] = set()
    cursor = ""
    pages = 0

    while True:
        page = await fetch(game_id, cursor)
        pages += 1

        for record in page.records:
            if record.job_id is not None:
                if record.job_id in seen:
                    continue
                seen.add(record.job_id)
            records.append(record)

        cursor = page.next_cursor or ""
        if pages >= max_pages:
            break
        if not cursor:
            break
        if len(records) >= OVERFETCH_FACTOR * limit:
            break

        await sleep(page_delay)

    logger.debug("Aggregated %d records over %d page(s) for gameId %s", len(records), pages, game_id)
    return records
