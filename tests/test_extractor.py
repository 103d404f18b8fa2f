"""Test lyrics extraction from regional lyrics pages"""

import pytest

from lyricfinder.regional.extractor import (
    MUSIC_BY_FIELD,
    SINGERS_FIELD,
    UNKNOWN,
    UnstructuredPageExtractor
)


LYRIC_LINE = "Vennilave vennilave vinnai thaandi varuvaaya"

VENNILAVE_PAGE = f"""
<html><head><title>Vennilave</title></head>
<body>
  <h1>Vennilave Song Lyrics</h1>
  <p><strong>Singers :</strong> A. R. Rahman</p>
  <p><strong>Music by :</strong> Harris Jayaraj</p>
  <h3>தமிழ்</h3>
  <p>{'<br/>'.join([LYRIC_LINE] * 5)}</p>
  <p>© 2024 - www.tamil2lyrics.com</p>
</body></html>
"""


@pytest.fixture
def extractor():
    return UnstructuredPageExtractor()


class TestExtract:
    """Test full page extraction"""

    def test_labelled_page(self, extractor):
        song = extractor.extract(VENNILAVE_PAGE, "vennilave")

        assert song is not None
        assert song.title == "Vennilave"
        assert song.singers == "A. R. Rahman"
        assert song.music_by == "Harris Jayaraj"
        assert song.lyrics.startswith(LYRIC_LINE)
        assert len(song.lyrics.split('\n')) == 5
        assert len(song.lyrics) <= 3000
        assert "tamil2lyrics" not in song.lyrics

    def test_too_short_lyrics_are_absent(self, extractor):
        html = f"""
        <html><body>
          <h1>Short Song Lyrics</h1>
          <h3>தமிழ்</h3>
          <p>{'ல' * 40}</p>
        </body></html>
        """
        assert extractor.extract(html, "short") is None

    def test_empty_and_broken_html(self, extractor):
        assert extractor.extract("", "slug") is None
        assert extractor.extract(None, "slug") is None
        assert extractor.extract("<<<div><p", "slug") is None

    def test_fallback_title_from_slug(self, extractor):
        html = f"<html><body><h3>தமிழ்</h3><p>{LYRIC_LINE * 3}</p></body></html>"
        song = extractor.extract(html, "en-kadhal-song")

        assert song.title == "en kadhal song"

    def test_missing_fields_display_unknown(self, extractor):
        html = f"<html><body><h1>X Song Lyrics</h1><h3>தமிழ்</h3><p>{LYRIC_LINE * 3}</p></body></html>"
        song = extractor.extract(html, "x")

        assert song.singers is None
        assert song.music_by is None
        assert song.singers_display == UNKNOWN
        assert song.music_by_display == UNKNOWN


class TestFields:
    """Test bilingual field resolution"""

    def _soup(self, extractor, html):
        return extractor._parse(html)

    def test_second_language_label_used_when_first_is_unknown(self, extractor):
        soup = self._soup(extractor, """
            <p><strong>Singers :</strong> Unknown</p>
            <p><strong>பாடகர்கள் :</strong> எஸ். ஜானகி</p>
        """)
        assert extractor.resolve_field(soup, SINGERS_FIELD) == "எஸ். ஜானகி"

    def test_second_language_label_used_when_first_is_absent(self, extractor):
        soup = self._soup(extractor, "<p><b>இசையமைப்பாளர் :</b> இளையராஜா</p>")
        assert extractor.resolve_field(soup, MUSIC_BY_FIELD) == "இளையராஜா"

    def test_value_inside_label_element(self, extractor):
        soup = self._soup(extractor, "<p><strong>Singers : Sid Sriram</strong></p>")
        assert extractor.resolve_field(soup, SINGERS_FIELD) == "Sid Sriram"

    def test_absent_field(self, extractor):
        soup = self._soup(extractor, "<p>No labels here</p>")
        assert extractor.resolve_field(soup, SINGERS_FIELD) is None


class TestLyricsBlock:
    """Test the lyrics block heuristics"""

    def test_longest_tamil_block_without_marker(self, extractor):
        short_tamil = "கண்மணி " * 10
        long_tamil = "கண்மணி அன்போடு காதலன் நான் எழுதும் கடிதமே " * 4
        html = f"""
        <html><body>
          <h1>Kanmani Anbodu Song Lyrics</h1>
          <p>Some english introduction text that is long enough to matter here.</p>
          <p>{short_tamil}</p>
          <p>{long_tamil}</p>
        </body></html>
        """
        song = extractor.extract(html, "kanmani-anbodu")

        assert song.lyrics == long_tamil.strip()

    def test_content_container_with_footer(self, extractor):
        lines = '\n'.join(f"<p>{LYRIC_LINE} {i}</p>" for i in range(4))
        html = f"""
        <html><body>
          <div class="entry-content">
            {lines}
            <p>Tamil Chat Room - join the conversation</p>
          </div>
        </body></html>
        """
        song = extractor.extract(html, "vinnai-thaandi")

        assert song is not None
        assert song.lyrics.endswith(f"{LYRIC_LINE} 3")
        assert "chat room" not in song.lyrics.lower()

    def test_lyrics_truncated_to_maximum(self):
        extractor = UnstructuredPageExtractor(max_lyrics_length=100)
        html = f"<html><body><h3>தமிழ்</h3><p>{LYRIC_LINE * 10}</p></body></html>"
        song = extractor.extract(html, "long")

        assert len(song.lyrics) == 100


class TestCleanLyrics:
    """Test lyrics post-processing"""

    def test_strips_copyright_footer(self, extractor):
        text = f"{LYRIC_LINE}\n\n\n\n{LYRIC_LINE}\n\n© 2023 - www.tamil2lyrics.com All rights reserved"
        assert extractor.clean_lyrics(text) == f"{LYRIC_LINE}\n\n{LYRIC_LINE}"

    def test_strips_chat_room_footer(self, extractor):
        text = f"{LYRIC_LINE}\nTamil Chat Room\nJoin now\n© 2023 - www.tamil2lyrics.com"
        assert extractor.clean_lyrics(text) == LYRIC_LINE
