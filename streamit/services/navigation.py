"""Watch session controller.

Keeps three views of "what is playing" in step: the NavigationState held
here, the page URL query string (``id``, ``season``, ``episode``,
``server``), and the painted page. Every state change is flushed to both
the URL history and the render gateway.

Phases::

    UNINITIALIZED -> AWAITING_METADATA -> READY
                                       -> ERROR (terminal)

Commands (select_provider, select_season, select_episode, navigate) only
act in READY. Anywhere else they are logged and ignored.
"""

import logging
from enum import Enum
from typing import List, Mapping, Optional
from urllib.parse import parse_qsl, urlencode

from streamit.core.errors import (
    MediaNotFound,
    MissingIdentifier,
    RetryableFetchError,
    StreamItError,
    UnknownProvider,
)
from streamit.models.media import Episode, MediaMetadata, MediaType, NavigationState
from streamit.providers import ProviderRegistry
from streamit.services.catalog import CatalogClient
from streamit.services.render import RenderGateway, UrlHistory
from streamit.services.session_cache import SeasonCache

logger = logging.getLogger(__name__)


class WatchPhase(str, Enum):
    UNINITIALIZED = "uninitialized"
    AWAITING_METADATA = "awaiting_metadata"
    READY = "ready"
    ERROR = "error"


class Direction(str, Enum):
    NEXT = "next"
    PREV = "prev"


def parse_query(query: str | Mapping[str, str]) -> dict[str, str]:
    """Turn a query string (with or without the leading "?") into a dict.

    The first occurrence of a repeated parameter wins.
    """
    if not isinstance(query, str):
        return {k: v for k, v in query.items() if v is not None}
    params: dict[str, str] = {}
    for key, value in parse_qsl(query.lstrip("?")):
        params.setdefault(key, value)
    return params


def _positive_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number >= 1 else None


def serialize_state(state: NavigationState) -> str:
    """Serialize a NavigationState into its URL query string (no "?")."""
    params = [("id", state.media_id)]
    if state.media_type == MediaType.SERIES:
        if state.season is not None:
            params.append(("season", str(state.season)))
        if state.episode is not None:
            params.append(("episode", str(state.episode)))
    params.append(("server", state.active_provider))
    return urlencode(params)


class WatchController:
    """Single authority over the current selection of one watch session."""

    def __init__(
        self,
        catalog: CatalogClient,
        registry: ProviderRegistry,
        gateway: RenderGateway,
        history: UrlHistory,
        cache: SeasonCache | None = None,
    ) -> None:
        self.catalog = catalog
        self.registry = registry
        self.gateway = gateway
        self.history = history
        self.cache = cache if cache is not None else SeasonCache()

        self.phase = WatchPhase.UNINITIALIZED
        self.state: NavigationState | None = None
        self.metadata: MediaMetadata | None = None
        self.episodes: List[Episode] = []
        self.error: StreamItError | None = None

        self._requested_season: int | None = None
        self._requested_episode: int | None = None
        # Season whose listing is being fetched; a fetch that resolves after
        # another season was requested is discarded.
        self._pending_season: int | None = None

    # -- initialization --------------------------------------------------

    def initialize_from_url(self, query: str | Mapping[str, str]) -> NavigationState:
        """Build the initial state from the page URL.

        Raises MissingIdentifier when there is no ``id``. Season and episode
        are only remembered here; they are validated once the catalog has
        told us the media type.
        """
        if self.phase != WatchPhase.UNINITIALIZED:
            raise RuntimeError(f"Controller already initialized ({self.phase.value})")

        params = parse_query(query)
        media_id = (params.get("id") or "").strip()
        if not media_id:
            raise MissingIdentifier()

        server = params.get("server")
        if server not in self.registry:
            if server:
                logger.info("Unknown server '%s' in URL, using default", server)
            server = self.registry.first().key

        self.state = NavigationState(media_id=media_id, active_provider=server)
        self._requested_season = _positive_int(params.get("season"))
        self._requested_episode = _positive_int(params.get("episode"))
        self.phase = WatchPhase.AWAITING_METADATA
        return self.state

    async def start(self, query: str | Mapping[str, str]) -> NavigationState | None:
        """Initialize from the URL, load the catalog data and render.

        Returns the state once READY, or None after painting the error.
        """
        try:
            self.initialize_from_url(query)
            await self._load()
        except (MissingIdentifier, MediaNotFound, RetryableFetchError) as exc:
            self._fail(exc)
            return None

        self.phase = WatchPhase.READY
        self.render()
        return self.state

    async def _load(self) -> None:
        state = self.state
        metadata = await self.catalog.fetch_media_metadata(state.media_id)
        if metadata is None:
            raise MediaNotFound(f"No catalog record for {state.media_id}")

        self.metadata = metadata
        state.media_type = metadata.media_type
        self.gateway.paint_metadata_panel(metadata)

        if metadata.media_type != MediaType.SERIES:
            state.season = None
            state.episode = None
            return

        season = self._requested_season
        if season is None or season > self.total_seasons:
            season = 1
        episodes = await self.catalog.fetch_episode_list(
            state.media_id, season, self.cache
        )
        if episodes is None:
            raise MediaNotFound(
                f"No listing for season {season} of {state.media_id}",
                user_message=f"Season {season} not found.",
            )

        episode = self._requested_episode
        if episode is None or episode > len(episodes):
            episode = 1

        self.episodes = episodes
        state.season = season
        state.episode = episode

    def _fail(self, exc: StreamItError) -> None:
        self.phase = WatchPhase.ERROR
        self.error = exc
        logger.warning("Watch session failed: %s", exc)
        self.gateway.paint_error(exc.user_message)

    # -- queries ---------------------------------------------------------

    @property
    def is_series(self) -> bool:
        return self.state is not None and self.state.media_type == MediaType.SERIES

    @property
    def total_seasons(self) -> int:
        if self.metadata is None or self.metadata.total_seasons is None:
            return 0
        return self.metadata.total_seasons

    @property
    def has_previous(self) -> bool:
        if self.phase != WatchPhase.READY or not self.is_series:
            return False
        return not (self.state.season == 1 and self.state.episode == 1)

    @property
    def has_next(self) -> bool:
        if self.phase != WatchPhase.READY or not self.is_series:
            return False
        return not (
            self.state.season >= self.total_seasons
            and self.state.episode >= len(self.episodes)
        )

    @property
    def current_episode(self) -> Optional[Episode]:
        """The selected entry of the loaded listing.

        ``state.episode`` is a position in the listing; the catalog's own
        number, which can skip values, is what providers are asked for.
        """
        if not self.is_series or not self.episodes or self.state.episode is None:
            return None
        return self.episodes[self.state.episode - 1]

    # -- commands --------------------------------------------------------

    def _ready(self, command: str) -> bool:
        if self.phase != WatchPhase.READY:
            logger.debug("Ignoring %s while %s", command, self.phase.value)
            return False
        return True

    def select_provider(self, key: str) -> None:
        if not self._ready("select_provider"):
            return
        if key not in self.registry:
            logger.warning("Ignoring provider selection: %s", UnknownProvider(key))
            return
        self.state.active_provider = key
        self.render()

    async def select_season(self, season: int) -> None:
        """Switch to episode 1 of another season, loading its listing first."""
        if not self._ready("select_season"):
            return
        if not self.is_series or not 1 <= season <= self.total_seasons:
            logger.debug("Ignoring out of range season %s", season)
            return
        await self._switch_season(season, last_episode=False)

    def select_episode(self, episode: int) -> None:
        if not self._ready("select_episode"):
            return
        if not self.is_series or not 1 <= episode <= len(self.episodes):
            logger.debug("Ignoring out of range episode %s", episode)
            return
        self.state.episode = episode
        self.render()

    async def navigate(self, direction: Direction | str) -> None:
        """Step to the next or previous episode, crossing season boundaries.

        ``next`` on a season's last episode moves to episode 1 of the
        following season; ``prev`` on episode 1 moves to the last episode of
        the previous season. At either end of the series it does nothing.
        """
        if not self._ready("navigate"):
            return
        try:
            direction = Direction(direction)
        except ValueError:
            logger.debug("Ignoring unknown direction %r", direction)
            return
        if not self.is_series:
            return

        season, episode = self.state.season, self.state.episode
        if direction == Direction.NEXT:
            if episode < len(self.episodes):
                self.state.episode = episode + 1
                self.render()
            elif season < self.total_seasons:
                await self._switch_season(season + 1, last_episode=False)
            else:
                logger.debug("Already at the last episode")
        else:
            if episode > 1:
                self.state.episode = episode - 1
                self.render()
            elif season > 1:
                await self._switch_season(season - 1, last_episode=True)
            else:
                logger.debug("Already at the first episode")

    async def _switch_season(self, season: int, last_episode: bool) -> bool:
        self._pending_season = season
        try:
            episodes = await self.catalog.fetch_episode_list(
                self.state.media_id,
                season,
                self.cache,
                still_wanted=lambda: self._pending_season == season,
            )
        except RetryableFetchError as exc:
            if self._pending_season == season:
                self._pending_season = None
                self._paint_series_controls()
                self.gateway.paint_error(exc.user_message)
            return False

        if self._pending_season != season:
            logger.debug("Discarding stale listing for season %s", season)
            return False
        self._pending_season = None

        if episodes is None:
            # Put the selectors back on the season still playing.
            self._paint_series_controls()
            self.gateway.paint_error(f"Season {season} not found.")
            return False

        self.episodes = episodes
        self.state.season = season
        self.state.episode = len(episodes) if last_episode else 1
        self.render()
        return True

    # -- output ----------------------------------------------------------

    def render(self) -> None:
        """Flush the state to the URL and repaint the player."""
        state = self.state
        provider = self.registry.get(state.active_provider)
        current = self.current_episode
        url = self.registry.resolve_embed_url(
            state.active_provider,
            state.media_type,
            state.media_id,
            state.season,
            current.number if current is not None else None,
        )

        self.history.replace_url(serialize_state(state))
        self.gateway.paint_provider_list(self.registry.all(), state.active_provider)
        self._paint_series_controls()
        if url is None:
            self.gateway.paint_error(
                f"{provider.display_name} cannot play this title, try another server."
            )
            return
        self.gateway.paint_stream_frame(url, provider.referrer_policy)

    def _paint_series_controls(self) -> None:
        if not self.is_series:
            return
        self.gateway.paint_series_controls(
            self.total_seasons,
            self.episodes,
            self.state.season,
            self.state.episode,
            has_previous=self.has_previous,
            has_next=self.has_next,
        )
