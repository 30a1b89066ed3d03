"""Server ranking heuristic.

The score favors populated servers and gives a small bonus for a playable
frame rate so the list looks lively. It is an ordering key only and is never
returned to callers. Ping and capacity are deliberately ignored.
"""

from __future__ import annotations

from typing import Sequence

from .models import ServerRecord

PLAYER_WEIGHT = 10
FPS_THRESHOLD = 30
FPS_BONUS = 5


def score_server(server: ServerRecord) -> int:
    """players * 10, plus 5 when fps is above 30."""
    bonus = FPS_BONUS if server.fps > FPS_THRESHOLD else 0
    return server.players * PLAYER_WEIGHT + bonus


def rank(servers: Sequence[ServerRecord]) -> list[ServerRecord]:
    """Sort by score, highest first. Equal scores keep their input order."""
    return sorted(servers, key=score_server, reverse=True)


def truncate(ranked: Sequence[ServerRecord], limit: int) -> list[ServerRecord]:
    return list(ranked[:max(0, limit)])
