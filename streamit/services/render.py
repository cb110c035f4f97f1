"""Interfaces the watch controller paints through."""

from typing import List, Optional, Protocol, Sequence

from streamit.models.media import Episode, MediaMetadata
from streamit.providers.base import ProviderDescriptor


class RenderGateway(Protocol):
    """Presentation boundary. The controller only writes to it."""

    def paint_stream_frame(self, url: str, referrer_policy: Optional[str]) -> None: ...

    def paint_metadata_panel(self, metadata: MediaMetadata) -> None: ...

    def paint_provider_list(
        self, providers: Sequence[ProviderDescriptor], active_key: str
    ) -> None: ...

    def paint_series_controls(
        self,
        total_seasons: int,
        episodes: List[Episode],
        current_season: int,
        current_episode: int,
        has_previous: bool,
        has_next: bool,
    ) -> None: ...

    def paint_error(self, message: str) -> None: ...


class UrlHistory(Protocol):
    """Replaces the current location's query string without a reload."""

    def replace_url(self, query: str) -> None: ...
