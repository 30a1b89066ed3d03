"""Runtime settings read from environment variables."""

from __future__ import annotations

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field

from .core.cache import DEFAULT_TTL_SECONDS
from .core.clients.games import API_BASE, USER_AGENT
from .core.pagination import MAX_PAGES, PAGE_DELAY_SECONDS
from .core.service import DEFAULT_LIMIT, MAX_LIMIT

TRUTHY = {"1", "true", "yes", "on"}


class ProxySettings(BaseModel):
    """Server, upstream, and cache configuration."""

    host: str = "0.0.0.0"
    port: int = Field(3000, ge=1, le=65535)
    upstream_base_url: str = API_BASE
    user_agent: str = USER_AGENT
    request_timeout_seconds: float = Field(30.0, gt=0)
    cache_ttl_seconds: float = Field(DEFAULT_TTL_SECONDS, ge=0)
    cache_max_entries: Optional[int] = Field(None, ge=1)
    coalesce_requests: bool = False
    max_pages: int = Field(MAX_PAGES, ge=1)
    page_delay_seconds: float = Field(PAGE_DELAY_SECONDS, ge=0)
    default_limit: int = Field(DEFAULT_LIMIT, ge=1)
    max_limit: int = Field(MAX_LIMIT, ge=1)
    log_level: str = "INFO"
    transport: str = "streamable-http"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ProxySettings":
        """Build settings from ``environ`` (defaults to ``os.environ``).

        Durations are given in milliseconds (``CACHE_TTL_MS``, ``PAGE_DELAY_MS``).
        Raises ``ValueError`` for values that cannot be parsed.
        """
        env = os.environ if environ is None else environ
        values: dict = {}

        for field, name in (
            ("host", "HOST"),
            ("upstream_base_url", "UPSTREAM_BASE_URL"),
            ("user_agent", "USER_AGENT"),
            ("log_level", "LOG_LEVEL"),
            ("transport", "MCP_TRANSPORT"),
        ):
            if env.get(name):
                values[field] = env[name]

        for field, name in (
            ("port", "PORT"),
            ("max_pages", "MAX_PAGES"),
            ("default_limit", "DEFAULT_LIMIT"),
            ("max_limit", "MAX_LIMIT"),
            ("cache_max_entries", "CACHE_MAX_ENTRIES"),
        ):
            if env.get(name):
                values[field] = _parse_int(name, env[name])

        if env.get("CACHE_TTL_MS"):
            values["cache_ttl_seconds"] = _parse_int("CACHE_TTL_MS", env["CACHE_TTL_MS"]) / 1000
        if env.get("PAGE_DELAY_MS"):
            values["page_delay_seconds"] = _parse_int("PAGE_DELAY_MS", env["PAGE_DELAY_MS"]) / 1000
        if env.get("REQUEST_TIMEOUT_SECONDS"):
            try:
                values["request_timeout_seconds"] = float(env["REQUEST_TIMEOUT_SECONDS"])
            except ValueError:
                raise ValueError(f"REQUEST_TIMEOUT_SECONDS must be a number, got {env['REQUEST_TIMEOUT_SECONDS']!r}")
        if env.get("COALESCE_REQUESTS"):
            values["coalesce_requests"] = env["COALESCE_REQUESTS"].strip().lower() in TRUTHY

        return cls(**values)


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
