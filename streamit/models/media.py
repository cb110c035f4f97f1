"""Media models for catalog data and watch state."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class MediaType(str, Enum):
    """Kinds of media the player can stream."""

    MOVIE = "movie"
    SERIES = "series"


class Rating(BaseModel):
    """A rating from one source (IMDb, Rotten Tomatoes, ...)."""

    source: str
    value: str


class Episode(BaseModel):
    """An episode in a season listing."""

    number: int
    title: str


class MediaMetadata(BaseModel):
    """A movie or series with the catalog fields shown on the watch page."""

    imdb_id: str
    title: str
    media_type: MediaType
    total_seasons: Optional[int] = None
    year: str = ""
    rated: str = ""
    runtime: str = ""
    genre: str = ""
    director: str = ""
    actors: str = ""
    plot: str = ""
    poster_url: Optional[str] = None
    ratings: List[Rating] = []


class SearchResult(BaseModel):
    """A title search hit (lightweight for list display)."""

    imdb_id: str
    title: str
    year: str = ""
    media_type: MediaType


class NavigationState(BaseModel):
    """What is currently selected in a watch session.

    season and episode are only meaningful for series and stay None for movies.
    media_type is None until the catalog has answered.
    """

    media_id: str
    media_type: Optional[MediaType] = None
    season: Optional[int] = None
    episode: Optional[int] = None
    active_provider: str
