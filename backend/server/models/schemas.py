from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class WatchlistAddRequest(BaseModel):
    """Watchlist add body; only `id` is required.

    Accepts the camelCase names the browser front-end sends as well.
    """

    model_config = ConfigDict(extra="ignore")

    # Left untyped so "550" and 550 both reach the shared id coercion.
    id: Any = Field(default=None, description="TMDb media id")
    media_type: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("media_type", "mediaType", "type"),
        description="movie | tv (default movie)",
    )
    title: Optional[str] = Field(default=None, validation_alias=AliasChoices("title", "name"))
    poster_path: Optional[str] = Field(default=None, validation_alias=AliasChoices("poster_path", "posterPath"))
    rating: Optional[float] = Field(default=None, validation_alias=AliasChoices("rating", "vote_average"))

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class WatchlistEntryResponse(BaseModel):
    id: int
    media_type: str
    title: Optional[str] = None
    poster_path: Optional[str] = None
    rating: Optional[float] = None
    added_at: Optional[int] = None


class MessageResponse(BaseModel):
    message: str


class WatchlistDiagnosticResponse(BaseModel):
    step: str
    success: bool
    backend: Optional[str] = None
    data: Optional[List[WatchlistEntryResponse]] = None
    message: Optional[str] = None


class PromptRequest(BaseModel):
    prompt: Optional[str] = None


class SummaryRequest(BaseModel):
    movie_title: Optional[str] = Field(default=None, validation_alias=AliasChoices("movieTitle", "movie_title"))


class VibeResponse(BaseModel):
    vibe_check: str
    smart_tags: List[str]
