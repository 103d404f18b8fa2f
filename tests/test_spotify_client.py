"""Test the Spotify catalog provider"""

import pytest
from unittest.mock import Mock, patch

import requests
from spotipy.exceptions import SpotifyException

from lyricfinder.exceptions import AuthFailed, NotFound, ProviderUnavailable, RateLimited
from lyricfinder.models import Artist, ProviderHandle, Song
from lyricfinder.spotify.client import SpotifyCatalog, get_spotify_catalog, reset_spotify_catalog


@pytest.fixture
def spotify_client():
    return Mock()


@pytest.fixture
def auth():
    return Mock()


@pytest.fixture
def catalog(spotify_client, auth):
    provider = SpotifyCatalog(auth=auth, client=spotify_client)
    provider.min_request_interval = 0
    return provider


def spotify_error(status, headers=None):
    return SpotifyException(status, -1, f"HTTP {status}", headers=headers)


class TestModels:
    """Test conversion of Spotify payloads"""

    def test_song_from_spotify_data(self, sample_spotify_track):
        song = Song.from_spotify_data(sample_spotify_track)

        assert song.id == 'track_123'
        assert song.title == 'Test Song'
        assert song.artist_name == 'Test Artist, Guest Artist'
        assert song.album_name == 'Test Album'
        assert song.thumbnail == 'https://i.scdn.co/small.jpg'
        assert song.provider_handle == ProviderHandle('spotify', 'track_123')
        assert song.primary_artist.name == 'Test Artist'
        assert song.source == 'spotify'

    def test_artist_from_spotify_data(self):
        artist = Artist.from_spotify_data({
            'id': 'ar1',
            'name': 'Anirudh Ravichander',
            'external_urls': {'spotify': 'https://open.spotify.com/artist/ar1'},
            'followers': {'total': 1200},
            'genres': ['kollywood', 'tamil pop'],
            'popularity': 80,
            'images': [],
        })

        assert artist.identity == 'anirudh ravichander'
        assert artist.followers == 1200
        assert artist.genres == ['kollywood', 'tamil pop']
        assert artist.thumbnail is None
        assert artist.provider_handle == ProviderHandle('spotify', 'ar1')


class TestSearch:
    """Test search operations"""

    def test_search_tracks(self, catalog, spotify_client, sample_spotify_track):
        spotify_client.search.return_value = {'tracks': {'items': [sample_spotify_track, None, {'id': None}]}}

        songs = catalog.search_tracks("test song", 10)

        assert [song.id for song in songs] == ['track_123']
        spotify_client.search.assert_called_once_with(
            q="test song", type='track', limit=10, market=catalog.settings.spotify.market
        )

    def test_search_limit_clamped(self, catalog, spotify_client):
        spotify_client.search.return_value = {'tracks': {'items': []}}

        catalog.search_tracks("x", 500)

        assert spotify_client.search.call_args.kwargs['limit'] == 50

    def test_search_artists(self, catalog, spotify_client):
        spotify_client.search.return_value = {'artists': {'items': [
            {'id': 'a1', 'name': 'Sid Sriram'},
            {'id': 'a2', 'name': 'Shreya Ghoshal'},
        ]}}

        artists = catalog.search_artists("s", 1)

        assert [a.name for a in artists] == ['Sid Sriram']

    def test_top_tracks_ignores_foreign_handle(self, catalog, spotify_client):
        assert catalog.get_top_tracks(ProviderHandle('genius', 1)) == []
        spotify_client.artist_top_tracks.assert_not_called()

    def test_top_tracks(self, catalog, spotify_client, sample_spotify_track):
        spotify_client.artist_top_tracks.return_value = {'tracks': [sample_spotify_track]}

        songs = catalog.get_top_tracks(ProviderHandle('spotify', 'artist_123'))

        assert len(songs) == 1
        spotify_client.artist_top_tracks.assert_called_once_with('artist_123', country=catalog.settings.spotify.market)

    def test_full_catalog_follows_pages(self, catalog, spotify_client):
        first_albums = {'items': [{'id': 'al1', 'name': 'One'}], 'next': 'page-2'}
        second_albums = {'items': [{'id': 'al2', 'name': 'Two'}], 'next': None}
        spotify_client.artist_albums.return_value = first_albums
        spotify_client.next.return_value = second_albums
        spotify_client.album_tracks.side_effect = lambda album_id, limit: {
            'items': [{'id': f'{album_id}-t', 'name': 'Track', 'artists': [{'id': 'x', 'name': 'X'}]}],
            'next': None
        }

        songs = catalog.get_full_catalog(ProviderHandle('spotify', 'x'), 100)

        assert [song.id for song in songs] == ['al1-t', 'al2-t']
        assert [song.album_name for song in songs] == ['One', 'Two']
        spotify_client.next.assert_called_once_with(first_albums)


class TestErrorTranslation:
    """Test _make_request error handling"""

    def test_unauthorized_refreshes_token_once(self, catalog, spotify_client, auth):
        spotify_client.search.side_effect = [spotify_error(401), {'tracks': {'items': []}}]

        assert catalog.search_tracks("x", 5) == []
        auth.invalidate.assert_called_once()
        assert spotify_client.search.call_count == 2

    def test_repeated_unauthorized_is_auth_failure(self, catalog, spotify_client):
        spotify_client.search.side_effect = spotify_error(401)

        with pytest.raises(AuthFailed) as exc_info:
            catalog.search_tracks("x", 5)
        assert "authorization failed" in str(exc_info.value)
        assert spotify_client.search.call_count == 2

    @patch('lyricfinder.spotify.client.time.sleep')
    def test_second_rate_limit_raises(self, mock_sleep, catalog, spotify_client):
        spotify_client.search.side_effect = spotify_error(429, headers={'Retry-After': '1'})

        with pytest.raises(RateLimited):
            catalog.search_tracks("x", 5)
        assert spotify_client.search.call_count == 2
        mock_sleep.assert_any_call(1)

    @patch('lyricfinder.spotify.client.time.sleep')
    def test_short_rate_limit_waited_out(self, mock_sleep, catalog, spotify_client):
        spotify_client.search.side_effect = [
            spotify_error(429, headers={'Retry-After': '2'}),
            {'tracks': {'items': []}},
        ]

        assert catalog.search_tracks("x", 5) == []
        mock_sleep.assert_any_call(2)

    def test_long_rate_limit_raises(self, catalog, spotify_client):
        spotify_client.search.side_effect = spotify_error(429, headers={'Retry-After': '3600'})

        with pytest.raises(RateLimited) as exc_info:
            catalog.search_tracks("x", 5)
        assert exc_info.value.retry_after == 3600

    def test_not_found(self, catalog, spotify_client):
        spotify_client.artist_top_tracks.side_effect = spotify_error(404)

        with pytest.raises(NotFound):
            catalog.get_top_tracks(ProviderHandle('spotify', 'missing'))

    @pytest.mark.parametrize("error", [spotify_error(500), requests.ConnectionError("reset")])
    def test_unavailable(self, catalog, spotify_client, error):
        spotify_client.search.side_effect = error

        with pytest.raises(ProviderUnavailable):
            catalog.search_tracks("x", 5)

    @patch('lyricfinder.spotify.client.spotipy.Spotify')
    def test_client_rebuilt_when_token_changes(self, mock_spotify):
        auth = Mock()
        auth.get_valid_token.side_effect = ["token-1", "token-1", "token-2"]
        catalog = SpotifyCatalog(auth=auth)

        catalog.client
        catalog.client
        catalog.client

        assert mock_spotify.call_count == 2
        assert mock_spotify.call_args.kwargs['auth'] == "token-2"


class TestSingleton:
    """Test the global catalog accessor"""

    def test_get_and_reset(self):
        reset_spotify_catalog()
        first = get_spotify_catalog()

        assert get_spotify_catalog() is first

        reset_spotify_catalog()
        assert get_spotify_catalog() is not first
        reset_spotify_catalog()
