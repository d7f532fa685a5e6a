from domain.watchlist.entry import MediaSummary, MediaType, WatchlistEntry
from domain.watchlist.errors import (
    ConflictError,
    NotFoundError,
    StorageError,
    ValidationError,
    WatchlistError,
)
from domain.watchlist.normalize import (
    coerce_media_id,
    coerce_media_type,
    entry_from_media,
    entry_from_payload,
    entry_from_summary,
    summarize_media,
)

__all__ = [
    "MediaSummary",
    "MediaType",
    "WatchlistEntry",
    "WatchlistError",
    "ValidationError",
    "ConflictError",
    "NotFoundError",
    "StorageError",
    "coerce_media_id",
    "coerce_media_type",
    "entry_from_media",
    "entry_from_payload",
    "entry_from_summary",
    "summarize_media",
]
