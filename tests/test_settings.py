"""Test configuration loading"""

import pytest
from pathlib import Path
import yaml

from lyricfinder.config.settings import Settings
from lyricfinder.exceptions import ConfigError


@pytest.fixture
def home(clean_env, tmp_path):
    """Isolate the user config directory and working directory"""
    clean_env.setenv("HOME", str(tmp_path))
    clean_env.chdir(tmp_path)
    return tmp_path


def write_config(path, data):
    path.write_text(yaml.dump(data), encoding='utf-8')
    return path


class TestLoading:
    """Test YAML and environment loading"""

    def test_defaults(self, settings):
        assert settings.loaded_from is None
        assert settings.search.song_limit == 10
        assert settings.search.artist_catalog_cap == 100
        assert settings.regional.min_lyrics_length == 50
        assert settings.regional.max_lyrics_length == 3000
        assert not settings.spotify_configured
        assert not settings.genius_configured

    def test_yaml_file(self, home):
        path = write_config(home / "custom.yaml", {
            'search': {'song_limit': 5, 'unknown_key': 1},
            'regional': {'extra_slug_rewrites': [['pattern', 'replacement']]},
            'not_a_section': {'x': 1},
        })

        settings = Settings(config_path=str(path))

        assert settings.loaded_from == path
        assert settings.search.song_limit == 5
        assert not hasattr(settings.search, 'unknown_key')
        assert settings.regional.extra_slug_rewrites == [['pattern', 'replacement']]

    def test_user_config_directory(self, home):
        config_dir = home / ".lyric-finder"
        config_dir.mkdir()
        write_config(config_dir / "config.yaml", {'spotify': {'market': 'IN'}})

        settings = Settings()

        assert settings.spotify.market == 'IN'
        assert settings.loaded_from == config_dir / "config.yaml"

    def test_environment_overrides_file(self, home, clean_env):
        path = write_config(home / "custom.yaml", {'spotify': {'client_id': 'from-file', 'market': 'GB'}})
        clean_env.setenv('SPOTIFY_CLIENT_ID', 'from-env')
        clean_env.setenv('SPOTIFY_CLIENT_SECRET', 'secret')
        clean_env.setenv('GENIUS_API_KEY', 'genius')
        clean_env.setenv('LYRIC_FINDER_LOG_LEVEL', 'DEBUG')

        settings = Settings(config_path=str(path))

        assert settings.spotify.client_id == 'from-env'
        assert settings.spotify.market == 'GB'
        assert settings.logging.level == 'DEBUG'
        assert settings.spotify_configured
        assert settings.genius_configured


class TestSerialization:
    """Test redaction and saving"""

    def test_to_dict_redacts_credentials(self, settings):
        settings.spotify.client_id = 'id'
        settings.spotify.client_secret = 'secret'

        data = settings.to_dict()

        assert data['spotify']['client_id'] == '***'
        assert data['spotify']['client_secret'] == '***'
        assert data['lyrics']['genius_api_key'] == ''
        assert data['search']['song_limit'] == 10

    def test_to_dict_unredacted(self, settings):
        settings.lyrics.genius_api_key = 'genius'

        assert settings.to_dict(redact=False)['lyrics']['genius_api_key'] == 'genius'

    def test_save_config_omits_credentials(self, settings, tmp_path):
        settings.spotify.client_secret = 'secret'
        settings.lyrics.genius_api_key = 'genius'
        settings.search.song_limit = 7

        target = settings.save_config(str(tmp_path / "out" / "config.yaml"))
        saved = yaml.safe_load(target.read_text(encoding='utf-8'))

        assert saved['spotify']['client_secret'] == ''
        assert saved['lyrics']['genius_api_key'] == ''
        assert saved['search']['song_limit'] == 7
        assert settings.lyrics.genius_api_key == 'genius'


class TestValidation:
    """Test settings validation"""

    def test_missing_credentials_reported(self, settings):
        issues = settings.validate()

        assert len(issues) == 2
        assert any('Spotify' in issue for issue in issues)
        assert any('Genius' in issue for issue in issues)

    def test_valid(self, settings):
        settings.spotify.client_id = 'id'
        settings.spotify.client_secret = 'secret'
        settings.lyrics.genius_api_key = 'genius'

        assert settings.validate() == []

    def test_invalid_values(self, settings):
        settings.spotify.client_id = 'id'
        settings.spotify.client_secret = 'secret'
        settings.lyrics.genius_api_key = 'genius'
        settings.regional.slug_url_template = 'https://example.com/lyrics/'
        settings.regional.max_workers = 0
        settings.regional.extra_slug_rewrites = [['only-one']]

        issues = settings.validate()

        assert len(issues) == 3
        assert 'slug URL template' in issues[0]


class TestConfigErrors:
    """Test explicitly requested config files that cannot be used"""

    def test_missing_file(self, home):
        with pytest.raises(ConfigError) as exc_info:
            Settings(config_path=str(home / "nope.yaml"))

        assert "not found" in str(exc_info.value)
        assert exc_info.value.details['file_path'].endswith("nope.yaml")

    def test_invalid_yaml(self, home):
        path = home / "broken.yaml"
        path.write_text("search: [unclosed", encoding='utf-8')

        with pytest.raises(ConfigError):
            Settings(config_path=str(path))

    def test_non_mapping(self, home):
        path = home / "list.yaml"
        path.write_text("- one\n- two\n", encoding='utf-8')

        with pytest.raises(ConfigError):
            Settings(config_path=str(path))

    def test_broken_default_file_is_skipped(self, home):
        config_dir = home / ".lyric-finder"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("search: [unclosed", encoding='utf-8')
        write_config(home / "config.yaml", {'search': {'song_limit': 3}})

        settings = Settings()

        assert settings.search.song_limit == 3
        assert settings.loaded_from == Path("config.yaml")
