"""Test text helpers and the retry decorator"""

import pytest
from unittest.mock import Mock, patch

from lyricfinder.exceptions import AuthFailed, ProviderUnavailable
from lyricfinder.utils.helpers import (
    collapse_blank_lines,
    normalize_name,
    normalize_query,
    retry_on_failure,
    truncate_string
)


class TestTextHelpers:
    """Test normalization helpers"""

    def test_normalize_query(self):
        assert normalize_query("  Vaathi   COMING ") == "vaathi coming"
        assert normalize_query("") == ""
        assert normalize_query(None) == ""

    def test_normalize_name(self):
        assert normalize_name("A. R.  Rahman") == "a. r. rahman"
        assert normalize_name(None) == ""

    def test_collapse_blank_lines(self):
        text = "line one\n\n\n\nline two  \n\n\nline three\n"
        assert collapse_blank_lines(text) == "line one\n\nline two\n\nline three"

    def test_truncate_string(self):
        assert truncate_string("short", 10) == "short"
        assert truncate_string("a" * 20, 10) == "a" * 7 + "..."
        assert truncate_string("abcdef", 2) == ".."


class TestRetryOnFailure:
    """Test retry decorator"""

    @patch('lyricfinder.utils.helpers.time.sleep')
    def test_retries_until_success(self, mock_sleep):
        func = Mock(side_effect=[ProviderUnavailable("down"), ProviderUnavailable("down"), "ok"])
        wrapped = retry_on_failure(max_attempts=3, delay=1.0, exceptions=(ProviderUnavailable,))(func)

        assert wrapped() == "ok"
        assert func.call_count == 3
        assert [c.args[0] for c in mock_sleep.call_args_list] == [1.0, 2.0]

    @patch('lyricfinder.utils.helpers.time.sleep')
    def test_gives_up_after_max_attempts(self, mock_sleep):
        func = Mock(side_effect=ProviderUnavailable("down"))
        wrapped = retry_on_failure(max_attempts=2, exceptions=(ProviderUnavailable,))(func)

        with pytest.raises(ProviderUnavailable):
            wrapped()
        assert func.call_count == 2

    @patch('lyricfinder.utils.helpers.time.sleep')
    def test_giveup_exception_is_not_retried(self, mock_sleep):
        # AuthFailed is a ProviderUnavailable subclass
        func = Mock(side_effect=AuthFailed("bad credentials"))
        wrapped = retry_on_failure(max_attempts=3, exceptions=(ProviderUnavailable,), giveup=(AuthFailed,))(func)

        with pytest.raises(AuthFailed):
            wrapped()
        assert func.call_count == 1
        mock_sleep.assert_not_called()

    def test_unlisted_exception_propagates(self):
        func = Mock(side_effect=ValueError("boom"))
        wrapped = retry_on_failure(max_attempts=3, exceptions=(ProviderUnavailable,))(func)

        with pytest.raises(ValueError):
            wrapped()
        assert func.call_count == 1
