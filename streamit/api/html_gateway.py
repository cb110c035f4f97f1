"""Render gateway that paints HTML fragments for HTMX."""

from typing import Dict, List, Optional, Sequence

from jinja2 import Environment
from markupsafe import Markup

from streamit.models.media import Episode, MediaMetadata
from streamit.providers.base import ProviderDescriptor


class HtmlRenderGateway:
    """Paints page regions into HTML and records the replaced URL.

    Each region template renders one element with a fixed id and
    ``hx-swap-oob``, so a region can be embedded in the full page or sent
    alone in a command response. ``drain()`` hands out the regions painted
    since the previous call.
    """

    def __init__(self, env: Environment) -> None:
        self._env = env
        self.fragments: Dict[str, Markup] = {}
        self.error_message: Optional[str] = None
        self.url_query: Optional[str] = None
        self._dirty: List[str] = []
        self._url_changed = False

    def _paint(self, region: str, template: str, **context) -> None:
        html = self._env.get_template(template).render(**context)
        self.fragments[region] = Markup(html)
        if region not in self._dirty:
            self._dirty.append(region)

    def paint_stream_frame(self, url: str, referrer_policy: Optional[str]) -> None:
        self._paint(
            "stream",
            "partials/stream_frame.html",
            url=url,
            referrer_policy=referrer_policy,
        )

    def paint_metadata_panel(self, metadata: MediaMetadata) -> None:
        self._paint("metadata", "partials/metadata_panel.html", media=metadata)

    def paint_provider_list(
        self, providers: Sequence[ProviderDescriptor], active_key: str
    ) -> None:
        self._paint(
            "providers",
            "partials/provider_list.html",
            providers=providers,
            active_key=active_key,
        )

    def paint_series_controls(
        self,
        total_seasons: int,
        episodes: List[Episode],
        current_season: int,
        current_episode: int,
        has_previous: bool,
        has_next: bool,
    ) -> None:
        self._paint(
            "series",
            "partials/series_controls.html",
            total_seasons=total_seasons,
            episodes=episodes,
            current_season=current_season,
            current_episode=current_episode,
            has_previous=has_previous,
            has_next=has_next,
        )

    def paint_error(self, message: str) -> None:
        self.error_message = message
        self._paint("notice", "partials/notice.html", message=message)

    def clear_notice(self) -> None:
        """Blank the notice region before a new command runs."""
        if self.error_message is not None:
            self.error_message = None
            self._paint("notice", "partials/notice.html", message=None)

    def replace_url(self, query: str) -> None:
        self.url_query = query
        self._url_changed = True

    def drain(self) -> tuple[List[Markup], Optional[str]]:
        """Return the fragments painted since the last drain and the new URL query.

        The query is None when the URL did not change.
        """
        fragments = [self.fragments[region] for region in self._dirty]
        query = self.url_query if self._url_changed else None
        self._dirty.clear()
        self._url_changed = False
        return fragments, query
