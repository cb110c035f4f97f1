"""Built-in embed provider table, in display order."""

from streamit.providers.base import ProviderDescriptor

NO_REFERRER = "no-referrer"

EMBED_PROVIDERS: tuple[ProviderDescriptor, ...] = (
    ProviderDescriptor(
        key="vidsrc",
        display_name="S1",
        movie_template="https://vidsrc.net/embed/movie/{id}",
        series_template="https://vidsrc.net/embed/tv/{id}/{season}/{episode}",
        referrer_policy=NO_REFERRER,
    ),
    ProviderDescriptor(
        key="multiembed",
        display_name="S2",
        movie_template="https://multiembed.mov/directstream.php?video_id={id}",
        series_template="https://multiembed.mov/directstream.php?video_id={id}&s={season}&e={episode}",
        referrer_policy=NO_REFERRER,
    ),
    ProviderDescriptor(
        key="embed2",
        display_name="S3",
        movie_template="https://www.2embed.cc/embed/{id}",
        series_template="https://www.2embed.cc/embed/tv/{id}/{season}/{episode}",
        referrer_policy=None,
    ),
    ProviderDescriptor(
        key="embedsu",
        display_name="S4",
        movie_template="https://embed.su/embed/movie/{id}",
        series_template="https://embed.su/embed/tv/{id}/{season}/{episode}",
        referrer_policy=NO_REFERRER,
    ),
    ProviderDescriptor(
        key="autoembed",
        display_name="S5",
        movie_template="https://player.autoembed.cc/embed/movie/{id}",
        series_template="https://player.autoembed.cc/embed/tv/{id}/{season}/{episode}",
        referrer_policy=NO_REFERRER,
    ),
    ProviderDescriptor(
        key="soap2day",
        display_name="S6",
        movie_template="https://soap2dayto.win/embed/movie/{id}",
        series_template="https://soap2dayto.win/embed/tv/{id}/{season}/{episode}",
        referrer_policy=NO_REFERRER,
    ),
    ProviderDescriptor(
        key="vidsrccc",
        display_name="S7",
        movie_template="https://vidsrc.cc/v2/embed/movie/{id}",
        series_template="https://vidsrc.cc/v2/embed/tv/{id}/{season}/{episode}",
        referrer_policy=NO_REFERRER,
    ),
    ProviderDescriptor(
        key="vidlink",
        display_name="S8",
        movie_template="https://vidlink.pro/movie/{id}",
        series_template="https://vidlink.pro/embed/tv/{id}/{season}/{episode}",
        referrer_policy=NO_REFERRER,
    ),
    ProviderDescriptor(
        key="vidfast",
        display_name="S9",
        movie_template="https://vidfast.pro/movie/{id}",
        series_template="https://vidfast.pro/embed/tv/{id}/{season}/{episode}",
        referrer_policy=NO_REFERRER,
    ),
    ProviderDescriptor(
        key="videasy",
        display_name="S10",
        movie_template="https://player.videasy.net/movie/{id}",
        series_template="https://player.videasy.net/tv/{id}/{season}/{episode}",
        referrer_policy=NO_REFERRER,
    ),
)
