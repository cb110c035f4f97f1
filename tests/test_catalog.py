import niquests
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from streamit.core.config import Settings
from streamit.core.errors import RetryableFetchError
from streamit.models.media import MediaType
from streamit.services.catalog import CatalogClient
from streamit.services.session_cache import SeasonCache

SHAWSHANK = {
    "Response": "True",
    "Title": "The Shawshank Redemption",
    "Year": "1994",
    "Rated": "R",
    "Runtime": "142 min",
    "Genre": "Drama",
    "Director": "Frank Darabont",
    "Actors": "Tim Robbins, Morgan Freeman",
    "Plot": "Two imprisoned men bond over a number of years.",
    "Poster": "https://m.media-amazon.com/images/shawshank.jpg",
    "Ratings": [{"Source": "Internet Movie Database", "Value": "9.3/10"}],
    "imdbID": "tt0111161",
    "Type": "movie",
}

BREAKING_BAD = {
    "Response": "True",
    "Title": "Breaking Bad",
    "Year": "2008–2013",
    "Poster": "N/A",
    "imdbID": "tt0903747",
    "Type": "series",
    "totalSeasons": "5",
}


def make_client() -> CatalogClient:
    return CatalogClient(Settings(omdb_api_key="test-key"))


@pytest.mark.asyncio
async def test_fetch_media_metadata_movie():
    client = make_client()
    with patch.object(client, "_get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = SHAWSHANK
        metadata = await client.fetch_media_metadata("tt0111161")

    mock_get.assert_awaited_once_with({"i": "tt0111161"})
    assert metadata.media_type == MediaType.MOVIE
    assert metadata.title == "The Shawshank Redemption"
    assert metadata.total_seasons is None
    assert metadata.ratings[0].value == "9.3/10"
    assert metadata.director == "Frank Darabont"


@pytest.mark.asyncio
async def test_fetch_media_metadata_series_normalizes_placeholders():
    client = make_client()
    with patch.object(client, "_get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = BREAKING_BAD
        metadata = await client.fetch_media_metadata("tt0903747")

    assert metadata.media_type == MediaType.SERIES
    assert metadata.total_seasons == 5
    assert metadata.poster_url is None
    assert metadata.plot == ""


@pytest.mark.asyncio
async def test_series_without_season_count_has_one_season():
    client = make_client()
    with patch.object(client, "_get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = {**BREAKING_BAD, "totalSeasons": "N/A"}
        metadata = await client.fetch_media_metadata("tt0903747")

    assert metadata.total_seasons == 1


@pytest.mark.asyncio
async def test_fetch_media_metadata_not_found_is_none():
    client = make_client()
    with patch.object(client, "_get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = {"Response": "False", "Error": "Incorrect IMDb ID."}
        assert await client.fetch_media_metadata("tt0000000") is None


@pytest.mark.asyncio
async def test_unsupported_catalog_type_is_none():
    client = make_client()
    with patch.object(client, "_get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = {**SHAWSHANK, "Type": "episode"}
        assert await client.fetch_media_metadata("tt0959621") is None


@pytest.mark.asyncio
async def test_catalog_error_is_retryable():
    """An invalid key is not a miss, it surfaces as a fetch error."""
    client = make_client()
    with patch.object(client, "_get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = {"Response": "False", "Error": "Invalid API key!"}
        with pytest.raises(RetryableFetchError):
            await client.fetch_media_metadata("tt0111161")


@pytest.mark.asyncio
async def test_fetch_episode_list_hits_network_once():
    client = make_client()
    cache = SeasonCache()
    season_payload = {
        "Response": "True",
        "Episodes": [
            {"Title": "Seven Thirty-Seven", "Episode": "1"},
            {"Title": "Grilled", "Episode": "2"},
        ],
    }
    with patch.object(client, "_get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = season_payload
        first = await client.fetch_episode_list("tt0903747", 2, cache)
        second = await client.fetch_episode_list("tt0903747", 2, cache)

    mock_get.assert_awaited_once_with({"i": "tt0903747", "Season": 2})
    assert [e.number for e in first] == [1, 2]
    assert first == second
    assert 2 in cache


@pytest.mark.asyncio
async def test_episode_list_is_sorted_and_deduplicated():
    client = make_client()
    payload = {
        "Response": "True",
        "Episodes": [
            {"Title": "Two", "Episode": "2"},
            {"Title": "One", "Episode": "1"},
            {"Title": "One again", "Episode": "1"},
            {"Title": "Broken", "Episode": "N/A"},
        ],
    }
    with patch.object(client, "_get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = payload
        episodes = await client.fetch_episode_list("tt1", 1, SeasonCache())

    assert [(e.number, e.title) for e in episodes] == [(1, "One"), (2, "Two")]


@pytest.mark.asyncio
async def test_missing_season_is_not_cached():
    client = make_client()
    cache = SeasonCache()
    with patch.object(client, "_get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = {
            "Response": "False",
            "Error": "Series or season not found!",
        }
        assert await client.fetch_episode_list("tt0903747", 9, cache) is None
        assert await client.fetch_episode_list("tt0903747", 9, cache) is None

    assert mock_get.await_count == 2
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_unwanted_listing_is_returned_but_not_cached():
    client = make_client()
    cache = SeasonCache()
    payload = {"Response": "True", "Episodes": [{"Title": "Pilot", "Episode": "1"}]}
    with patch.object(client, "_get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = payload
        episodes = await client.fetch_episode_list(
            "tt0903747", 1, cache, still_wanted=lambda: False
        )

    assert [e.title for e in episodes] == ["Pilot"]
    assert 1 not in cache


@pytest.mark.asyncio
async def test_malformed_list_items_are_skipped():
    client = make_client()
    season = {
        "Response": "True",
        "Episodes": ["garbage", None, {"Title": "Pilot", "Episode": "1"}],
    }
    search = {
        "Response": "True",
        "Search": [
            42,
            {"Title": "The Matrix", "Year": "1999", "imdbID": "tt0133093", "Type": "movie"},
        ],
    }
    with patch.object(client, "_get", new_callable=AsyncMock) as mock_get:
        mock_get.side_effect = [season, search]
        episodes = await client.fetch_episode_list("tt1", 1, SeasonCache())
        results = await client.search("matrix")

    assert [(e.number, e.title) for e in episodes] == [(1, "Pilot")]
    assert [r.imdb_id for r in results] == ["tt0133093"]


@pytest.mark.asyncio
async def test_search_skips_unsupported_types():
    client = make_client()
    payload = {
        "Response": "True",
        "Search": [
            {"Title": "The Matrix", "Year": "1999", "imdbID": "tt0133093", "Type": "movie"},
            {"Title": "The Matrix", "Year": "2004", "imdbID": "tt0411538", "Type": "game"},
            {"Title": "Matrix", "Year": "1993", "imdbID": "tt0106062", "Type": "series"},
        ],
    }
    with patch.object(client, "_get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = payload
        results = await client.search("  matrix ")

    mock_get.assert_awaited_once_with({"s": "matrix"})
    assert [r.imdb_id for r in results] == ["tt0133093", "tt0106062"]
    assert results[1].media_type == MediaType.SERIES


@pytest.mark.asyncio
async def test_search_without_match_is_empty():
    client = make_client()
    with patch.object(client, "_get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = {"Response": "False", "Error": "Movie not found!"}
        assert await client.search("qwertyuiop") == []
        assert await client.search("   ") == []

    mock_get.assert_awaited_once()


@pytest.mark.asyncio
async def test_transport_error_becomes_retryable():
    client = make_client()
    original = niquests.exceptions.ConnectionError("connection refused")
    with patch.object(
        client.session, "get", new_callable=AsyncMock, side_effect=original
    ):
        with pytest.raises(RetryableFetchError) as excinfo:
            await client.fetch_media_metadata("tt0111161")

    assert excinfo.value.original_exception is original
    assert excinfo.value.__cause__ is original


@pytest.mark.asyncio
async def test_invalid_json_becomes_retryable():
    client = make_client()
    response = MagicMock()
    response.raise_for_status = MagicMock()
    response.json.side_effect = ValueError("Expecting value")
    with patch.object(client.session, "get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = response
        with pytest.raises(RetryableFetchError):
            await client.fetch_media_metadata("tt0111161")

    _, kwargs = mock_get.call_args
    assert kwargs["params"] == {"i": "tt0111161", "apikey": "test-key"}
