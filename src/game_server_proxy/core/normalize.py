"""Map raw upstream records onto the canonical server shape."""

from __future__ import annotations

import math
from typing import Optional

from .models import DEFAULT_FPS, DEFAULT_MAX_PLAYERS, DEFAULT_PING, RawServerRecord, ServerRecord


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _whole(value: Optional[float], default: int) -> int:
    # Missing and non-finite values both take the default.
    if value is None or not math.isfinite(value):
        return default
    return round_half_away(value)


def normalize(raw: RawServerRecord) -> ServerRecord:
    return ServerRecord(
        job_id=raw.job_id or "",
        players=max(0, _whole(raw.playing, 0)),
        max_players=max(0, _whole(raw.max_players, DEFAULT_MAX_PLAYERS)),
        fps=_whole(raw.fps, DEFAULT_FPS),
        ping=_whole(raw.ping, DEFAULT_PING),
    )
