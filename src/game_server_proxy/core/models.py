"""Pydantic data models — the shared business objects.

Wire names follow the upstream API and the proxy's JSON responses (camelCase);
Python attributes are snake_case. Models accept either form on input.
"""

from __future__ import annotations

import logging
import math
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .errors import ErrorKind

logger = logging.getLogger(__name__)

DEFAULT_MAX_PLAYERS = 20
DEFAULT_FPS = 60
DEFAULT_PING = 0


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _lenient_number(value) -> Optional[float]:
    """Best-effort numeric read; anything unusable becomes ``None``."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


class RawServerRecord(_WireModel):
    """One server entry exactly as the upstream listing reports it.

    Only the shape is checked. Ids of any scalar type are read as strings and
    unusable numeric fields are dropped so that normalization defaults apply.
    """

    job_id: Optional[str] = Field(None, alias="id")
    playing: Optional[float] = None
    max_players: Optional[float] = None
    fps: Optional[float] = None
    ping: Optional[float] = None

    @field_validator("job_id", mode="before")
    @classmethod
    def _stringify_id(cls, value):
        if value is None or isinstance(value, (dict, list)):
            return None
        return str(value)

    @field_validator("playing", "max_players", "fps", "ping", mode="before")
    @classmethod
    def _lenient_numbers(cls, value):
        return _lenient_number(value)


class Page(_WireModel):
    """A single page of the upstream listing."""

    records: list[RawServerRecord] = Field(default_factory=list, alias="data")
    next_cursor: Optional[str] = Field(None, alias="nextPageCursor")

    @field_validator("records", mode="before")
    @classmethod
    def _usable_records(cls, value):
        if not isinstance(value, list):
            if value is not None:
                logger.warning("Ignoring non-list server data of type %s", type(value).__name__)
            return []
        kept = [item for item in value if isinstance(item, (dict, RawServerRecord))]
        if len(kept) != len(value):
            logger.warning("Skipped %d malformed server record(s)", len(value) - len(kept))
        return kept

    @field_validator("next_cursor", mode="before")
    @classmethod
    def _empty_cursor(cls, value):
        if not value:
            return None
        return str(value)


class ServerRecord(_WireModel):
    """Canonical server record returned to callers."""

    job_id: str = ""
    players: int = Field(0, ge=0)
    max_players: int = Field(DEFAULT_MAX_PLAYERS, ge=0)
    fps: int = DEFAULT_FPS
    ping: int = DEFAULT_PING


class AggregatedResult(_WireModel):
    """Ranked, truncated listing for one game."""

    game_id: str
    total: int = Field(description="Records collected before truncation")
    count: int = Field(description="Records returned after truncation")
    servers: list[ServerRecord]


class CacheEntry(BaseModel):
    """A cached result and the monotonic time it was stored."""

    data: AggregatedResult
    created_at: float

    def age(self, now: float) -> float:
        return now - self.created_at


class ListingSuccess(_WireModel):
    ok: Literal[True] = True
    data: AggregatedResult


class ListingFailure(_WireModel):
    ok: Literal[False] = False
    kind: ErrorKind
    message: str
    upstream_status: Optional[int] = None
    http_status: int = 500


ListingOutcome = Union[ListingSuccess, ListingFailure]
