from __future__ import annotations


class WatchlistError(Exception):
    """Base class for watchlist store failures."""


class ValidationError(WatchlistError, ValueError):
    """A required field is missing or malformed (caller-fixable)."""


class ConflictError(WatchlistError):
    """The entry is already in the watchlist."""

    def __init__(self, media_id: int) -> None:
        super().__init__(f"id={media_id} is already in the watchlist")
        self.media_id = media_id


class NotFoundError(WatchlistError):
    """Declared for completeness; removal is an idempotent no-op instead."""


class StorageError(WatchlistError):
    """Underlying persistence is unavailable or holds malformed data."""
