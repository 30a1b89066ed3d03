"""Error taxonomy for the listing pipeline.

Every failure aborts the in-flight aggregation. Callers receive either a full
ranked result or one of these, never a partial server list.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Failure categories surfaced to the boundary layer."""

    VALIDATION = "validation"
    UPSTREAM = "upstream"
    UNEXPECTED = "unexpected"


class ProxyError(Exception):
    """Base class for failures raised by the core."""

    kind: ErrorKind = ErrorKind.UNEXPECTED
    http_status: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def upstream_status(self) -> Optional[int]:
        return None


class ValidationError(ProxyError):
    """Caller input (the game id) is missing or malformed."""

    kind = ErrorKind.VALIDATION
    http_status = 400


class UpstreamError(ProxyError):
    """The games API answered with a non-success status."""

    kind = ErrorKind.UPSTREAM

    def __init__(self, status_code: int, game_id: str):
        super().__init__(f"Upstream API returned {status_code} for gameId {game_id}")
        self.status_code = status_code
        self.game_id = game_id

    @property
    def upstream_status(self) -> Optional[int]:
        return self.status_code


class UnexpectedError(ProxyError):
    """Anything else that went wrong while fetching or parsing."""

    kind = ErrorKind.UNEXPECTED
