"""Provider descriptors."""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from streamit.models.media import MediaType


class ProviderDescriptor(BaseModel):
    """A third-party embed source.

    Templates are ``str.format`` patterns. Movie templates receive ``{id}``,
    series templates receive ``{id}``, ``{season}`` and ``{episode}``.
    A provider without a template for a media type does not support it.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    display_name: str
    movie_template: Optional[str] = None
    series_template: Optional[str] = None
    referrer_policy: Optional[str] = None

    def supports(self, media_type: MediaType) -> bool:
        return self.template_for(media_type) is not None

    def template_for(self, media_type: MediaType) -> Optional[str]:
        if media_type == MediaType.MOVIE:
            return self.movie_template
        if media_type == MediaType.SERIES:
            return self.series_template
        return None

    def embed_url(
        self,
        media_type: MediaType,
        media_id: str,
        season: int | None = None,
        episode: int | None = None,
    ) -> Optional[str]:
        """Fill in the template for a media type.

        Returns None when the type is unsupported or a series URL is
        requested without season and episode.
        """
        template = self.template_for(media_type)
        if template is None:
            return None
        if media_type == MediaType.SERIES:
            if season is None or episode is None:
                return None
            return template.format(id=media_id, season=season, episode=episode)
        return template.format(id=media_id)
