"""OMDb catalog client for media details, season listings and title search."""

import logging
from typing import Any, Callable, List, Optional

import niquests
from aiolimiter import AsyncLimiter

from streamit.core.config import Settings, get_settings
from streamit.core.errors import RetryableFetchError
from streamit.models.media import (
    Episode,
    MediaMetadata,
    MediaType,
    Rating,
    SearchResult,
)
from streamit.services.session_cache import SeasonCache

logger = logging.getLogger(__name__)

# OMDb answers HTTP 200 with Response=False for both misses and failures;
# these error messages are the misses.
NOT_FOUND_ERRORS = (
    "not found",
    "incorrect imdb id",
    "too many results",
)

# OMDb Type values we can stream.
CATALOG_TYPES = {
    "movie": MediaType.MOVIE,
    "series": MediaType.SERIES,
}


def _clean(value: Any) -> str:
    """Normalize an OMDb field, mapping the "N/A" placeholder to ""."""
    if value is None:
        return ""
    value = str(value).strip()
    return "" if value == "N/A" else value


def _parse_int(value: Any) -> Optional[int]:
    try:
        return int(_clean(value))
    except ValueError:
        return None


def _is_not_found(data: dict) -> bool:
    error = _clean(data.get("Error")).lower()
    return any(marker in error for marker in NOT_FOUND_ERRORS)


def _parse_metadata(data: dict) -> Optional[MediaMetadata]:
    """Parse an OMDb title record. Returns None for unsupported types."""
    media_type = CATALOG_TYPES.get(_clean(data.get("Type")).lower())
    if media_type is None:
        logger.warning(
            "Unsupported catalog type '%s' for %s", data.get("Type"), data.get("imdbID")
        )
        return None

    total_seasons = None
    if media_type == MediaType.SERIES:
        # Some series come back with totalSeasons "N/A"; they still have a season 1.
        total_seasons = _parse_int(data.get("totalSeasons")) or 1

    poster = _clean(data.get("Poster"))

    return MediaMetadata(
        imdb_id=_clean(data.get("imdbID")),
        title=_clean(data.get("Title")) or "Unknown",
        media_type=media_type,
        total_seasons=total_seasons,
        year=_clean(data.get("Year")),
        rated=_clean(data.get("Rated")),
        runtime=_clean(data.get("Runtime")),
        genre=_clean(data.get("Genre")),
        director=_clean(data.get("Director")),
        actors=_clean(data.get("Actors")),
        plot=_clean(data.get("Plot")),
        poster_url=poster or None,
        ratings=[
            Rating(source=_clean(r.get("Source")), value=_clean(r.get("Value")))
            for r in data.get("Ratings") or []
            if isinstance(r, dict)
        ],
    )


def _parse_episodes(data: dict) -> List[Episode]:
    """Parse the Episodes array of a season listing, ordered by number."""
    episodes = {}
    for ep in data.get("Episodes") or []:
        if not isinstance(ep, dict):
            continue
        number = _parse_int(ep.get("Episode"))
        if number is None or number < 1:
            continue
        episodes.setdefault(
            number,
            Episode(number=number, title=_clean(ep.get("Title")) or f"Episode {number}"),
        )
    return [episodes[n] for n in sorted(episodes)]


def _parse_search(data: dict) -> List[SearchResult]:
    results = []
    for item in data.get("Search") or []:
        if not isinstance(item, dict):
            continue
        media_type = CATALOG_TYPES.get(_clean(item.get("Type")).lower())
        imdb_id = _clean(item.get("imdbID"))
        if media_type is None or not imdb_id:
            # Skip games and episodes
            continue
        results.append(
            SearchResult(
                imdb_id=imdb_id,
                title=_clean(item.get("Title")) or "Unknown",
                year=_clean(item.get("Year")),
                media_type=media_type,
            )
        )
    return results


class CatalogClient:
    """Async client for the OMDb API.

    A miss is a normal outcome and is returned as None (or an empty list);
    every other failure is raised as RetryableFetchError. Nothing is
    retried here, the caller decides.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self._settings = settings
        self.base_url = settings.omdb_base_url
        self.timeout = settings.catalog_timeout
        self.rate_limiter = AsyncLimiter(settings.catalog_requests_per_minute, 60.0)
        self.session = niquests.AsyncSession()
        if settings.proxy:
            self.session.proxies = {"http": settings.proxy, "https": settings.proxy}

    async def aclose(self) -> None:
        """Properly close the internal HTTP session."""
        if hasattr(self, "session") and self.session:
            await self.session.close()

    async def _get(self, params: dict) -> dict:
        """Perform a catalog request and return the decoded JSON object."""
        query = {**params, "apikey": self._settings.omdb_api_key}
        try:
            async with self.rate_limiter:
                response = await self.session.get(
                    self.base_url, params=query, timeout=self.timeout
                )
                response.raise_for_status()
                data = response.json()
        except niquests.exceptions.RequestException as exc:
            logger.error("Catalog request %s failed: %s", params, exc)
            raise RetryableFetchError(f"Catalog request failed: {exc}", exc) from exc
        except ValueError as exc:
            logger.error("Catalog returned invalid JSON for %s: %s", params, exc)
            raise RetryableFetchError("Catalog returned invalid JSON", exc) from exc

        if not isinstance(data, dict):
            raise RetryableFetchError(
                f"Unexpected catalog payload: {type(data).__name__}"
            )
        return data

    def _check_response(self, data: dict, what: str) -> bool:
        """True when the payload holds a record, False for a miss.

        Raises RetryableFetchError for catalog-side errors such as an
        invalid API key or an exhausted request limit.
        """
        if data.get("Response") == "True":
            return True
        if _is_not_found(data):
            logger.warning("%s not found in catalog: %s", what, data.get("Error"))
            return False
        message = _clean(data.get("Error")) or "unknown catalog error"
        logger.error("Catalog error for %s: %s", what, message)
        raise RetryableFetchError(f"Catalog error: {message}")

    async def fetch_media_metadata(self, imdb_id: str) -> Optional[MediaMetadata]:
        """Fetch a title's details. None when the catalog has no such media."""
        data = await self._get({"i": imdb_id})
        if not self._check_response(data, f"Media {imdb_id}"):
            return None
        metadata = _parse_metadata(data)
        if metadata is not None and not metadata.imdb_id:
            metadata.imdb_id = imdb_id
        return metadata

    async def fetch_episode_list(
        self,
        imdb_id: str,
        season: int,
        cache: SeasonCache,
        still_wanted: Optional[Callable[[], bool]] = None,
    ) -> Optional[List[Episode]]:
        """Fetch one season's episodes, consulting the session cache first.

        A successful fetch is stored in ``cache``; later calls for the same
        season are served from it without a request. When ``still_wanted``
        is given it is asked once the response arrives, and a listing the
        caller no longer wants is returned without being stored.
        """
        cached = cache.get(season)
        if cached is not None:
            logger.debug("Season %s of %s served from cache", season, imdb_id)
            return cached

        data = await self._get({"i": imdb_id, "Season": season})
        if not self._check_response(data, f"Season {season} of {imdb_id}"):
            return None

        episodes = _parse_episodes(data)
        if not episodes:
            logger.warning("Season %s of %s has no episodes", season, imdb_id)
            return None
        if still_wanted is not None and not still_wanted():
            logger.debug("Season %s of %s no longer wanted, not cached", season, imdb_id)
            return episodes
        cache.put(season, episodes)
        return episodes

    async def search(self, query: str) -> List[SearchResult]:
        """Search titles by free text. No match yields an empty list."""
        query = query.strip()
        if not query:
            return []
        data = await self._get({"s": query})
        if not self._check_response(data, f"Search '{query}'"):
            return []
        return _parse_search(data)[: self._settings.search_limit]
