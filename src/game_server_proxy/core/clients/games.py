"""Games API client for public server listings.

Endpoint: GET /v1/games/{gameId}/servers/Public
No authentication required. Rate limited aggressively; callers should cache.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from ..errors import UpstreamError
from ..models import Page

logger = logging.getLogger(__name__)

API_BASE = "https://games.roblox.com"
USER_AGENT = "GameServerProxy/1.0"
PAGE_SIZE = 100
SORT_ORDER = "Desc"


def _build_request(
    game_id: str,
    cursor: str,
    base_url: str,
    user_agent: str,
) -> tuple[str, dict, dict]:
    url = f"{base_url.rstrip('/')}/v1/games/{game_id}/servers/Public"
    params: dict = {"sortOrder": SORT_ORDER, "limit": PAGE_SIZE}
    if cursor:
        params["cursor"] = cursor
    headers = {"Accept": "application/json", "User-Agent": user_agent}
    return url, params, headers


async def fetch_page(
    game_id: str,
    cursor: str = "",
    *,
    client: Optional[httpx.AsyncClient] = None,
    base_url: str = API_BASE,
    user_agent: str = USER_AGENT,
    timeout: float = 30.0,
) -> Page:
    """Fetch one page of public servers for a game.

    Args:
        game_id: Numeric game identifier.
        cursor: Continuation token from the previous page. Empty for the first page.
        client: Shared client to reuse. A short-lived client is opened when omitted.

    Raises:
        UpstreamError: The API answered with a non-success status.
    """
    url, params, headers = _build_request(game_id, cursor, base_url, user_agent)

    if client is None:
        async with httpx.AsyncClient(timeout=httpx.Timeout(timeout, connect=10.0)) as owned:
            response = await owned.get(url, params=params, headers=headers)
    else:
        response = await client.get(url, params=params, headers=headers)

    if not response.is_success:
        logger.warning("Games API returned %d for gameId %s", response.status_code, game_id)
        raise UpstreamError(response.status_code, game_id)

    page = Page.model_validate(response.json())
    logger.debug(
        "Fetched %d records for gameId %s (next cursor: %s)",
        len(page.records), game_id, "yes" if page.next_cursor else "no",
    )
    return page
