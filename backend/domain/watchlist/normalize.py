from __future__ import annotations

import re
from typing import Any, Mapping, Optional, Union

from domain.watchlist.entry import MediaSummary, MediaType, WatchlistEntry
from domain.watchlist.errors import ValidationError

_DIGITS_RE = re.compile(r"\+?[0-9]+")
# CPython's default int-string conversion limit
_MAX_ID_DIGITS = 4300


def coerce_media_id(raw: Any) -> int:
    """Coerce a media id to the canonical int used for every comparison.

    Numeric strings and numbers of the same id compare equal ("42" == 42).
    Applied on both add and remove paths so uniqueness holds across forms.
    """
    if raw is None:
        raise ValidationError("id is required")
    if isinstance(raw, bool):
        raise ValidationError("id must be an integer")
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float):
        if not raw.is_integer():
            raise ValidationError(f"id must be an integer, got {raw!r}")
        value = int(raw)
    elif isinstance(raw, str):
        text = raw.strip()
        if not text:
            raise ValidationError("id is required")
        if not _DIGITS_RE.fullmatch(text):
            raise ValidationError(f"id must be an integer, got {raw[:40]!r}")
        if len(text) > _MAX_ID_DIGITS:
            raise ValidationError(f"id is too long ({len(text)} digits)")
        try:
            value = int(text, 10)
        except ValueError as exc:
            # interpreter configured with a lower digit limit
            raise ValidationError(f"id is too long ({len(text)} digits)") from exc
    else:
        raise ValidationError(f"id must be an integer, got {type(raw).__name__}")
    if value <= 0:
        raise ValidationError(f"id must be a positive integer, got {value}")
    return value


def coerce_media_type(
    raw: Union[str, MediaType, None],
    *,
    default: Optional[MediaType] = MediaType.MOVIE,
) -> MediaType:
    if isinstance(raw, MediaType):
        return raw
    text = str(raw or "").strip().lower()
    if not text:
        if default is None:
            raise ValidationError("media_type is required")
        return default
    try:
        return MediaType(text)
    except ValueError:
        allowed = ", ".join(m.value for m in MediaType)
        raise ValidationError(f"media_type must be one of: {allowed} (got {raw!r})") from None


def _first(payload: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = payload.get(key)
        if value is not None:
            return value
    return None


def _clean_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _coerce_rating(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def entry_from_payload(payload: Any) -> WatchlistEntry:
    """Build an entry from a request body.

    Accepts both the snake_case wire names and the camelCase names the
    browser front-end sends (`mediaType`, `posterPath`).
    """
    if not isinstance(payload, Mapping):
        raise ValidationError("request body must be a JSON object")
    return WatchlistEntry(
        id=coerce_media_id(_first(payload, "id")),
        media_type=coerce_media_type(_first(payload, "media_type", "mediaType", "type")),
        title=_clean_str(_first(payload, "title", "name")),
        poster_path=_clean_str(_first(payload, "poster_path", "posterPath")),
        rating=_coerce_rating(_first(payload, "rating", "vote_average")),
        added_at=None,
    )


def entry_from_media(raw: Mapping[str, Any], media_type: Union[str, MediaType, None] = None) -> WatchlistEntry:
    """Minimal storage fields from a raw metadata-gateway object."""
    kind = coerce_media_type(media_type if media_type is not None else raw.get("media_type"))
    return WatchlistEntry(
        id=coerce_media_id(raw.get("id")),
        media_type=kind,
        title=_clean_str(_first(raw, "title", "name")),
        # empty string and null both mean "no poster"
        poster_path=_clean_str(raw.get("poster_path")),
        rating=_coerce_rating(raw.get("vote_average")),
    )


def summarize_media(raw: Mapping[str, Any], media_type: Union[str, MediaType, None] = None) -> MediaSummary:
    kind = coerce_media_type(media_type if media_type is not None else raw.get("media_type"))
    genres = []
    for g in raw.get("genres") or []:
        if isinstance(g, Mapping):
            name = _clean_str(g.get("name"))
            if name:
                genres.append(name)
    return MediaSummary(
        id=coerce_media_id(raw.get("id")),
        media_type=kind,
        title=_clean_str(_first(raw, "title", "name")) or "",
        poster_path=_clean_str(raw.get("poster_path")),
        vote_average=_coerce_rating(raw.get("vote_average")),
        overview=_clean_str(raw.get("overview")) or "",
        genres=genres,
    )


def entry_from_summary(summary: MediaSummary) -> WatchlistEntry:
    return WatchlistEntry(
        id=summary.id,
        media_type=summary.media_type,
        title=summary.title or None,
        poster_path=summary.poster_path,
        rating=summary.vote_average,
    )
