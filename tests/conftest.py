"""Test configuration and fixtures"""

import pytest
from unittest.mock import Mock

from lyricfinder.config.settings import Settings
from lyricfinder.models import Artist, LyricsSource, ProviderHandle, Song
from lyricfinder.providers import CatalogProvider, LyricsProvider, PageFetcher


CREDENTIAL_ENV_VARS = [
    'SPOTIFY_CLIENT_ID', 'SPOTIFY_CLIENT_SECRET', 'SPOTIFY_MARKET',
    'GENIUS_API_KEY', 'LYRIC_FINDER_LOG_LEVEL',
]


@pytest.fixture
def clean_env(monkeypatch):
    """Remove credential environment variables"""
    for var in CREDENTIAL_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


@pytest.fixture
def settings(clean_env, tmp_path):
    """Real settings object with defaults and no credentials"""
    clean_env.setenv("HOME", str(tmp_path))
    clean_env.chdir(tmp_path)
    return Settings()


@pytest.fixture
def make_catalog():
    """Factory for mock catalog providers"""
    def factory(name, tracks=None, artists=None, top_tracks=None, full_catalog=None):
        provider = Mock(spec=CatalogProvider)
        provider.name = name
        provider.owns.side_effect = lambda handle: handle is not None and handle.provider == name
        provider.search_tracks.return_value = tracks if tracks is not None else []
        provider.search_artists.return_value = artists if artists is not None else []
        provider.get_top_tracks.return_value = top_tracks if top_tracks is not None else []
        provider.get_full_catalog.return_value = full_catalog if full_catalog is not None else []
        return provider
    return factory


@pytest.fixture
def make_lyrics_provider():
    """Factory for mock lyrics providers"""
    def factory(name="genius", refs=None, lyrics=None):
        provider = Mock(spec=LyricsProvider)
        provider.name = name
        provider.owns.side_effect = lambda handle: handle is not None and handle.provider == name
        provider.search_songs.return_value = refs if refs is not None else []
        provider.fetch_lyrics.return_value = lyrics
        return provider
    return factory


@pytest.fixture
def mock_fetcher():
    """Page fetcher mock, configure fetch.side_effect per test"""
    return Mock(spec=PageFetcher)


def make_song(song_id, title, artist="Test Artist", provider="spotify", lyrics=None):
    """Build a song the way a provider adapter would"""
    return Song(
        id=song_id,
        title=title,
        artist_name=artist,
        canonical_url=f"https://example.com/{song_id}",
        provider_handle=ProviderHandle(provider, song_id) if provider else None,
        available_lyrics_sources=[LyricsSource(*lyrics) for lyrics in (lyrics or [])],
        primary_artist=Artist(id=artist, name=artist, canonical_url="",
                              provider_handle=ProviderHandle(provider, artist)) if provider else None,
        source=provider
    )


@pytest.fixture
def song_factory():
    return make_song


@pytest.fixture
def sample_spotify_track():
    """Sample Spotify track object"""
    return {
        'id': 'track_123',
        'name': 'Test Song',
        'artists': [
            {'id': 'artist_123', 'name': 'Test Artist', 'external_urls': {'spotify': 'https://open.spotify.com/artist/artist_123'}},
            {'id': 'artist_456', 'name': 'Guest Artist'},
        ],
        'album': {
            'id': 'album_123',
            'name': 'Test Album',
            'images': [
                {'url': 'https://i.scdn.co/large.jpg', 'width': 640},
                {'url': 'https://i.scdn.co/small.jpg', 'width': 64},
            ],
        },
        'external_urls': {'spotify': 'https://open.spotify.com/track/track_123'},
    }


@pytest.fixture
def sample_genius_song():
    """Sample Genius song object as found in a search hit"""
    return {
        'id': 4242,
        'title': 'Vaathi Coming',
        'full_title': 'Vaathi Coming by Anirudh Ravichander',
        'artist_names': 'Anirudh Ravichander',
        'url': 'https://genius.com/Anirudh-ravichander-vaathi-coming-lyrics',
        'song_art_image_thumbnail_url': 'https://images.genius.com/thumb.jpg',
        'primary_artist': {
            'id': 77,
            'name': 'Anirudh Ravichander',
            'url': 'https://genius.com/artists/Anirudh-ravichander',
            'image_url': 'https://images.genius.com/artist.jpg',
        },
    }
