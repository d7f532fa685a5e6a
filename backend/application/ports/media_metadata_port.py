from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Union

from domain.watchlist import MediaSummary, MediaType


class MediaMetadataPort(Protocol):
    """Read-only media metadata gateway (TMDb).

    Implementations return None when the item is unknown or the upstream
    call fails; they never raise for upstream errors.
    """

    async def get_media_details(
        self,
        media_type: Union[str, MediaType],
        media_id: int,
        *,
        language: str = "en-US",
    ) -> Optional[Dict[str, Any]]:
        ...

    async def get_media_summary(
        self,
        media_type: Union[str, MediaType],
        media_id: int,
        *,
        language: str = "en-US",
    ) -> Optional[MediaSummary]:
        ...

    async def close(self) -> None:
        ...
