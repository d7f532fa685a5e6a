from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class MediaType(str, Enum):
    MOVIE = "movie"
    TV = "tv"


@dataclass(frozen=True)
class WatchlistEntry:
    """A saved media reference (movie or TV show to watch later).

    `title`, `poster_path` and `rating` are display fields cached at add time
    by the server-side store; the local store keeps only `(media_type, id)`.
    """

    id: int
    media_type: MediaType = MediaType.MOVIE
    title: Optional[str] = None
    poster_path: Optional[str] = None
    rating: Optional[float] = None
    # epoch milliseconds, set by the store on write
    added_at: Optional[int] = None

    @property
    def identity(self) -> tuple[str, int]:
        return (self.media_type.value, int(self.id))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": int(self.id),
            "media_type": self.media_type.value,
            "title": self.title,
            "poster_path": self.poster_path,
            "rating": self.rating,
            "added_at": self.added_at,
        }


@dataclass(frozen=True)
class MediaSummary:
    """Display data for one media item as returned by the metadata gateway."""

    id: int
    media_type: MediaType
    title: str
    poster_path: Optional[str] = None
    vote_average: Optional[float] = None
    overview: str = ""
    genres: List[str] = field(default_factory=list)

    @property
    def has_poster(self) -> bool:
        return bool(self.poster_path)
