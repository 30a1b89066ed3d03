"""Request orchestration: validate, serve from cache, or run the pipeline.

``get_servers`` raises ``ProxyError`` subclasses. ``handle`` is the boundary
used by the HTTP and MCP surfaces and always returns a ``ListingOutcome``.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Optional

from .cache import FreshnessCache
from .clients.games import fetch_page
from .errors import ProxyError, UnexpectedError, ValidationError
from .models import AggregatedResult, ListingFailure, ListingOutcome, ListingSuccess
from .normalize import normalize
from .pagination import MAX_PAGES, PAGE_DELAY_SECONDS, PageFetcher, Sleeper, aggregate
from .scoring import rank, truncate

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 30
MAX_LIMIT = 100
MIN_LIMIT = 1

INVALID_GAME_ID_MESSAGE = "Missing or invalid gameId"

_GAME_ID_RE = re.compile(r"^[0-9]+$")
_LEADING_INT_RE = re.compile(r"^\s*([+-]?[0-9]+)")


def validate_game_id(game_id: Optional[str]) -> str:
    """Return the trimmed game id, or raise ``ValidationError``."""
    if game_id is None:
        raise ValidationError(INVALID_GAME_ID_MESSAGE)
    cleaned = str(game_id).strip()
    if not _GAME_ID_RE.match(cleaned):
        raise ValidationError(INVALID_GAME_ID_MESSAGE)
    return cleaned


def parse_limit(
    raw: Any,
    default: int = DEFAULT_LIMIT,
    maximum: int = MAX_LIMIT,
) -> int:
    """Interpret a requested limit and clamp it to ``[1, maximum]``.

    Integers pass through. Strings are read up to the first non-digit
    (``"12abc"`` is 12). Anything unreadable falls back to ``default``.
    """
    if isinstance(raw, bool) or raw is None:
        value = default
    elif isinstance(raw, int):
        value = raw
    elif isinstance(raw, float):
        value = int(raw) if raw == raw and abs(raw) != float("inf") else default
    else:
        match = _LEADING_INT_RE.match(str(raw))
        value = int(match.group(1)) if match else default
    return max(MIN_LIMIT, min(value, maximum))


class ServerListingService:
    """Ties the fetch, paginate, rank and cache steps together."""

    def __init__(
        self,
        cache: Optional[FreshnessCache] = None,
        fetch: PageFetcher = fetch_page,
        *,
        max_pages: int = MAX_PAGES,
        page_delay: float = PAGE_DELAY_SECONDS,
        sleep: Sleeper = asyncio.sleep,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int = MAX_LIMIT,
        coalesce: bool = False,
    ):
        self.cache = cache if cache is not None else FreshnessCache()
        self._fetch = fetch
        self._max_pages = max_pages
        self._page_delay = page_delay
        self._sleep = sleep
        self.default_limit = default_limit
        self.max_limit = max_limit
        self._coalesce = coalesce
        self._inflight: dict[tuple[str, int], asyncio.Task] = {}

    async def handle(self, game_id: Optional[str], limit: Any = None) -> ListingOutcome:
        """Resolve one listing request into a success or a tagged failure."""
        try:
            result = await self.get_servers(game_id, limit)
        except ProxyError as exc:
            logger.warning("Listing failed for gameId %s: %s", game_id, exc.message)
            return _failure(exc)
        except Exception as exc:
            logger.error("Unexpected failure for gameId %s: %s", game_id, exc, exc_info=True)
            return _failure(UnexpectedError(str(exc) or type(exc).__name__))
        return ListingSuccess(data=result)

    async def get_servers(self, game_id: Optional[str], limit: Any = None) -> AggregatedResult:
        """Return the ranked listing for ``game_id``, raising on failure.

        With coalescing on, concurrent misses share one aggregation only when
        they ask for the same game and the same clamped limit.
        """
        game_id = validate_game_id(game_id)
        limit = parse_limit(limit, self.default_limit, self.max_limit)

        cached = self.cache.get(game_id)
        if cached is not None:
            logger.info("Cache hit for gameId %s", game_id)
            return cached.data

        if not self._coalesce:
            return await self._refresh(game_id, limit)

        key = (game_id, limit)
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._refresh(game_id, limit))
            self._inflight[key] = task
            task.add_done_callback(lambda done: self._forget(key, done))
        else:
            logger.debug("Joining in-flight aggregation for gameId %s (limit %d)", game_id, limit)
        return await asyncio.shield(task)

    def _forget(self, key: tuple[str, int], task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        # Mark the failure as retrieved even if every waiter was cancelled.
        if not task.cancelled():
            task.exception()

    async def _refresh(self, game_id: str, limit: int) -> AggregatedResult:
        raw = await aggregate(
            game_id,
            limit,
            self._fetch,
            max_pages=self._max_pages,
            page_delay=self._page_delay,
            sleep=self._sleep,
        )
        ranked = rank([normalize(record) for record in raw])
        servers = truncate(ranked, limit)

        result = AggregatedResult(
            game_id=game_id,
            total=len(ranked),
            count=len(servers),
            servers=servers,
        )
        self.cache.put(game_id, result)
        logger.info(
            "Fetched %d servers for gameId %s, cached for %gs",
            len(servers), game_id, self.cache.ttl_seconds,
        )
        return result


def _failure(exc: ProxyError) -> ListingFailure:
    return ListingFailure(
        kind=exc.kind,
        message=exc.message,
        upstream_status=exc.upstream_status,
        http_status=exc.http_status,
    )
