"""Test per-song lyrics resolution"""

import pytest
from unittest.mock import Mock, patch

from lyricfinder.exceptions import NotFound, ProviderUnavailable
from lyricfinder.lyrics.guidance import GENERIC_SUGGESTION_NAME, REGIONAL_HELPER_NAME
from lyricfinder.lyrics.resolver import LyricsResolver
from lyricfinder.models import ProviderHandle, ResolutionState, Song, SongRef


def plain_song(title="Blinding Lights", artist="The Weeknd", handle=None):
    return Song(id="sp1", title=title, artist_name=artist,
                canonical_url="https://open.spotify.com/track/sp1", provider_handle=handle)


def ref(title, artist, ref_id):
    return SongRef(title=title, artist_name=artist, handle=ProviderHandle("genius", ref_id),
                   url=f"https://genius.com/{ref_id}")


class TestPrefetched:
    """Test songs that carry their own lyrics"""

    def test_provider_never_called(self, make_lyrics_provider, song_factory):
        song = song_factory("Tamil2Lyrics.com:vennilave", "Vennilave", provider=None, lyrics=[
            ("Tamil2Lyrics.com", "vennilave vennilave", "https://www.tamil2lyrics.com/lyrics/vennilave/"),
            ("Other Site", "other text", None),
        ])
        provider = make_lyrics_provider(lyrics="should not be used")

        result = LyricsResolver([provider]).resolve(song)

        assert result.ok
        assert result.text == "vennilave vennilave"
        assert result.source_name == "Tamil2Lyrics.com"
        assert [s.source_name for s in result.alternative_sources] == ["Other Site"]
        assert provider.search_songs.call_count == 0
        assert provider.fetch_lyrics.call_count == 0


class TestProviderLookup:
    """Test direct and search based provider lookups"""

    def test_direct_handle(self, make_lyrics_provider):
        provider = make_lyrics_provider(lyrics="I'm going under")
        song = plain_song(handle=ProviderHandle("genius", 55))

        result = LyricsResolver([provider]).resolve(song)

        assert result.text == "I'm going under"
        assert result.source_name == "Genius"
        provider.fetch_lyrics.assert_called_once_with(ProviderHandle("genius", 55))
        provider.search_songs.assert_not_called()

    def test_foreign_handle_goes_to_search(self, make_lyrics_provider):
        exact = ref("Blinding Lights", "The Weeknd", 2)
        provider = make_lyrics_provider(refs=[exact], lyrics="I've been tryna call")
        song = plain_song(handle=ProviderHandle("spotify", "sp1"))

        result = LyricsResolver([provider]).resolve(song)

        assert result.text == "I've been tryna call"
        assert result.origin_url == "https://genius.com/2"
        provider.search_songs.assert_called_once_with("Blinding Lights The Weeknd")
        provider.fetch_lyrics.assert_called_once_with(exact)

    def test_exact_match_preferred_over_first(self, make_lyrics_provider):
        first = ref("Blinding Lights (Remix)", "The Weeknd", 1)
        exact = ref("blinding lights", "THE WEEKND", 2)
        provider = make_lyrics_provider(refs=[first, exact], lyrics="text")

        LyricsResolver([provider]).resolve(plain_song())

        provider.fetch_lyrics.assert_called_once_with(exact)

    def test_first_result_without_exact_match(self, make_lyrics_provider):
        first = ref("Blinding Lights (Remix)", "The Weeknd", 1)
        provider = make_lyrics_provider(refs=[first, ref("Other", "Someone", 3)], lyrics="text")

        LyricsResolver([provider]).resolve(plain_song())

        provider.fetch_lyrics.assert_called_once_with(first)

    def test_direct_failure_falls_through_to_search(self, make_lyrics_provider):
        provider = make_lyrics_provider(refs=[ref("Blinding Lights", "The Weeknd", 2)])
        provider.fetch_lyrics.side_effect = [ProviderUnavailable("down"), "second try text"]
        song = plain_song(handle=ProviderHandle("genius", 55))

        result = LyricsResolver([provider]).resolve(song)

        assert result.text == "second try text"
        assert provider.fetch_lyrics.call_count == 2

    def test_unexpected_direct_error_falls_through_to_search(self, make_lyrics_provider):
        provider = make_lyrics_provider(refs=[ref("Blinding Lights", "The Weeknd", 2)])
        provider.fetch_lyrics.side_effect = [KeyError("lyrics"), "recovered text"]
        song = plain_song(handle=ProviderHandle("genius", 55))

        result = LyricsResolver([provider]).resolve(song)

        assert result.text == "recovered text"
        assert result.step is ResolutionState.PENDING_PROVIDER_SEARCH

    def test_unexpected_search_error_resolves_to_guidance(self, make_lyrics_provider):
        provider = make_lyrics_provider()
        provider.search_songs.side_effect = RuntimeError("library blew up")

        resolver = LyricsResolver([provider])
        resolver.logger = Mock()

        result = resolver.resolve(plain_song())

        assert result.ok
        assert result.source_name == GENERIC_SUGGESTION_NAME
        assert result.from_guidance
        assert resolver.logger.error.call_args[1]['exc_info'] is True


class TestGuidance:
    """Test the alternative content fallback"""

    def test_not_found_resolves_to_guidance(self, make_lyrics_provider):
        provider = make_lyrics_provider(refs=[ref("Blinding Lights", "The Weeknd", 2)])
        provider.fetch_lyrics.side_effect = NotFound("no lyrics", provider="genius")

        result = LyricsResolver([provider]).resolve(plain_song())

        assert result.ok
        assert result.state is ResolutionState.RESOLVED
        assert result.error_kind is None
        assert result.source_name == GENERIC_SUGGESTION_NAME
        assert "Blinding Lights" in result.text
        assert len(result.alternative_sources) == 1
        assert result.alternative_sources[0].text == result.text

    def test_no_providers_resolves_to_guidance(self):
        result = LyricsResolver([]).resolve(plain_song())
        assert result.source_name == GENERIC_SUGGESTION_NAME

    @pytest.mark.parametrize("title, artist", [
        ("Vaathi Coming", "Anirudh Ravichander"),
        ("வெண்ணிலவே", "Hariharan"),
        ("Kanmani", "Tamil Classics"),
    ])
    def test_tamil_song_gets_regional_guidance(self, make_lyrics_provider, title, artist):
        provider = make_lyrics_provider()

        result = LyricsResolver([provider]).resolve(plain_song(title, artist))

        assert result.source_name == REGIONAL_HELPER_NAME
        assert result.origin_url.startswith("https://www.google.com/search?q=")
        assert "tamil+lyrics" in result.origin_url

    def test_failed_only_when_guidance_raises(self, make_lyrics_provider):
        with patch('lyricfinder.lyrics.resolver.guidance_for', side_effect=RuntimeError("broken template")):
            result = LyricsResolver([make_lyrics_provider()]).resolve(plain_song())

        assert not result.ok
        assert result.state is ResolutionState.FAILED
        assert result.error_kind == "LyricsUnavailable"
        assert result.text is None


class TestResolutionStep:
    """Test that each result records the step that produced it"""

    def test_prefetched_step(self, song_factory):
        song = song_factory("Tamil2Lyrics.com:vennilave", "Vennilave", provider=None,
                            lyrics=[("Tamil2Lyrics.com", "vennilave vennilave", None)])

        result = LyricsResolver([]).resolve(song)

        assert result.step is ResolutionState.PENDING_PREFETCHED
        assert not result.from_guidance

    def test_direct_step(self, make_lyrics_provider):
        provider = make_lyrics_provider(lyrics="text")

        result = LyricsResolver([provider]).resolve(plain_song(handle=ProviderHandle("genius", 55)))

        assert result.step is ResolutionState.PENDING_PROVIDER_DIRECT

    def test_search_step(self, make_lyrics_provider):
        provider = make_lyrics_provider(refs=[ref("Blinding Lights", "The Weeknd", 2)], lyrics="text")

        result = LyricsResolver([provider]).resolve(plain_song())

        assert result.step is ResolutionState.PENDING_PROVIDER_SEARCH

    def test_guidance_step(self, make_lyrics_provider):
        result = LyricsResolver([make_lyrics_provider()]).resolve(plain_song())

        assert result.step is ResolutionState.PENDING_ALTERNATIVE
        assert result.from_guidance

    def test_failed_step(self, make_lyrics_provider):
        with patch('lyricfinder.lyrics.resolver.guidance_for', side_effect=RuntimeError("broken template")):
            result = LyricsResolver([make_lyrics_provider()]).resolve(plain_song())

        assert result.state is ResolutionState.FAILED
        assert result.step is ResolutionState.PENDING_ALTERNATIVE
