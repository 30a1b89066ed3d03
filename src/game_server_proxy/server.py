"""Game Server Proxy.

FastMCP server exposing the listing pipeline as plain HTTP routes
(``GET /servers``, ``GET /``) and as an MCP tool.
Run: game-server-proxy
"""

from __future__ import annotations

import functools
import logging

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from starlette.requests import Request
from starlette.responses import JSONResponse

from .config import ProxySettings
from .core.cache import FreshnessCache
from .core.clients.games import fetch_page
from .core.models import ListingOutcome, ListingSuccess
from .core.service import ServerListingService

logger = logging.getLogger(__name__)

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=True)

CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}
HEALTH_MESSAGE = "Game server proxy running"


def build_service(settings: ProxySettings) -> ServerListingService:
    """Create the listing service and its cache from settings."""
    fetch = functools.partial(
        fetch_page,
        base_url=settings.upstream_base_url,
        user_agent=settings.user_agent,
        timeout=settings.request_timeout_seconds,
    )
    cache = FreshnessCache(
        ttl_seconds=settings.cache_ttl_seconds,
        max_entries=settings.cache_max_entries,
    )
    return ServerListingService(
        cache,
        fetch,
        max_pages=settings.max_pages,
        page_delay=settings.page_delay_seconds,
        default_limit=settings.default_limit,
        max_limit=settings.max_limit,
        coalesce=settings.coalesce_requests,
    )


settings = ProxySettings.from_env()
service = build_service(settings)

mcp = FastMCP(
    "Game Server Proxy",
    instructions="List active public servers for a game, ranked by population and frame rate.",
    host=settings.host,
    port=settings.port,
)


def outcome_body(outcome: ListingOutcome) -> dict:
    """JSON body for an outcome: the result itself, or ``{"error": message}``."""
    if isinstance(outcome, ListingSuccess):
        return outcome.data.model_dump(by_alias=True, mode="json")
    return {"error": outcome.message}


def _json(body: dict, status_code: int = 200) -> JSONResponse:
    return JSONResponse(body, status_code=status_code, headers=CORS_HEADERS)


# ─── HTTP routes ─────────────────────────────────────────────────────────────


@mcp.custom_route("/servers", methods=["GET"])
async def servers_endpoint(request: Request) -> JSONResponse:
    """GET /servers?gameId=XXXXX&limit=30 — up to ``limit`` ranked servers."""
    params = request.query_params
    game_id = params.get("gameId") or params.get("placeId")
    outcome = await service.handle(game_id, params.get("limit"))
    status_code = 200 if isinstance(outcome, ListingSuccess) else outcome.http_status
    return _json(outcome_body(outcome), status_code)


@mcp.custom_route("/", methods=["GET"])
async def health_endpoint(request: Request) -> JSONResponse:
    return _json({"status": "ok", "message": HEALTH_MESSAGE})


# ─── MCP tool ────────────────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def list_game_servers(game_id: str, limit: int = 30) -> dict:
    """Active public servers for a game, busiest first.

    Results are cached per game for a short window, so repeated calls may
    return the same snapshot.

    Args:
        game_id: Numeric game (place) id.
        limit: How many servers to return, 1-100. Default 30.
    """
    outcome = await service.handle(game_id, limit)
    return outcome_body(outcome)


def main():
    """Entry point for the CLI command."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    logger.info("Proxy listening on %s:%d (%s)", settings.host, settings.port, settings.transport)
    mcp.run(transport=settings.transport)


if __name__ == "__main__":
    main()
