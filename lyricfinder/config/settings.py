"""
Configuration for Lyric-Finder

Settings come from three places, later ones winning:
1. dataclass defaults below
2. the first YAML file found (--config path, ~/.lyric-finder/config.yaml,
   ./config/config.yaml, ./config.yaml)
3. environment variables, also read from a .env file

Credentials (Spotify client secret, Genius token) belong in the
environment. YAML files hold limits, URLs and logging options, and
save_config() never writes credentials back.

Sections:
- spotify: client credentials, market, timeouts
- lyrics: Genius token, timeouts, attempts
- search: result caps and minimum query length
- regional: lyrics site URL templates, slug rewrites, extraction bounds
- logging, network
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field, fields, asdict
from dotenv import load_dotenv

from ..exceptions import ConfigError

load_dotenv()


@dataclass
class SpotifyConfig:
    """
    Spotify Web API settings for the primary catalog provider

    Only the client-credentials grant is used, so no redirect URL or
    user scopes are needed. The access token lives in memory only.
    """
    client_id: str = ""
    client_secret: str = ""
    token_url: str = "https://accounts.spotify.com/api/token"
    market: str = "US"
    timeout: int = 10
    max_rate_limit_wait: int = 10


@dataclass
class LyricsConfig:
    """
    Genius API settings

    Genius acts both as the structured lyrics provider and as the
    secondary catalog used when Spotify is unavailable.
    """
    genius_api_key: str = ""
    timeout: int = 15
    max_attempts: int = 3
    remove_section_headers: bool = False
    search_results: int = 5


@dataclass
class SearchConfig:
    """Caps applied to song lists, artist lists and a selected artist's catalog"""
    song_limit: int = 10
    artist_limit: int = 10
    artist_catalog_cap: int = 100
    min_query_length: int = 2


@dataclass
class RegionalConfig:
    """
    Regional lyrics site settings

    Controls slug guessing against the tamil2lyrics.com page layout,
    the secondary search-page lookup and the bounds applied to
    extracted lyric text.
    """
    site_name: str = "Tamil2Lyrics.com"
    slug_url_template: str = "https://www.tamil2lyrics.com/lyrics/{slug}/"
    home_url: str = "https://www.tamil2lyrics.com"
    search_url_template: str = "https://www.tamil2lyrics.com/?s={query}"
    search_pages_enabled: bool = True
    search_page_results: int = 2
    max_variations: int = 8
    fetch_timeout: int = 10
    max_workers: int = 4
    min_lyrics_length: int = 50
    max_lyrics_length: int = 3000
    # List of [pattern, replacement] pairs appended to the default rewrites
    extra_slug_rewrites: List[List[str]] = field(default_factory=list)


@dataclass
class LoggingConfig:
    """Console and rotating file log settings"""
    level: str = "INFO"
    file: str = ""
    max_size: str = "10MB"
    backup_count: int = 3
    console_output: bool = True
    colored_output: bool = True


@dataclass
class NetworkConfig:
    """
    HTTP settings

    The user agent is sent with every lyrics page request. Retry
    settings apply to the token endpoint.
    """
    user_agent: str = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"
    request_timeout: int = 30
    max_retries: int = 3
    retry_delay: float = 1.0


# (environment variable, section, attribute)
ENVIRONMENT_OVERRIDES = [
    ('SPOTIFY_CLIENT_ID', 'spotify', 'client_id'),
    ('SPOTIFY_CLIENT_SECRET', 'spotify', 'client_secret'),
    ('SPOTIFY_MARKET', 'spotify', 'market'),
    ('GENIUS_API_KEY', 'lyrics', 'genius_api_key'),
    ('LYRIC_FINDER_LOG_LEVEL', 'logging', 'level'),
]

CREDENTIAL_FIELDS = [
    ('spotify', 'client_id'),
    ('spotify', 'client_secret'),
    ('lyrics', 'genius_api_key'),
]


class Settings:
    """
    All Lyric-Finder configuration, one attribute per section

    Usage:
        settings = get_settings()
        settings.search.song_limit
        settings.spotify_configured
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Build settings from defaults, the first config file found and the environment

        Args:
            config_path: Explicit YAML file; it must exist when given

        Raises:
            ConfigError: If config_path is missing or not valid YAML
        """
        self.config_path = config_path
        self.config_dir = Path.home() / ".lyric-finder"
        self.loaded_from: Optional[Path] = None

        self.spotify = SpotifyConfig()
        self.lyrics = LyricsConfig()
        self.search = SearchConfig()
        self.regional = RegionalConfig()
        self.logging = LoggingConfig()
        self.network = NetworkConfig()

        self._apply_config(self._read_config_file())
        self._apply_environment()

    def _sections(self) -> Dict[str, Any]:
        return {
            'spotify': self.spotify,
            'lyrics': self.lyrics,
            'search': self.search,
            'regional': self.regional,
            'logging': self.logging,
            'network': self.network,
        }

    def _candidate_paths(self) -> List[Path]:
        candidates = [Path(self.config_path)] if self.config_path else []
        return candidates + [
            self.config_dir / "config.yaml",
            Path("config") / "config.yaml",
            Path("config.yaml"),
        ]

    def _read_config_file(self) -> Dict[str, Any]:
        """
        Read the first config file that exists

        A broken file in a default location is skipped with a warning, a
        broken file passed explicitly is an error.
        """
        if self.config_path and not Path(self.config_path).exists():
            raise ConfigError(f"Config file not found: {self.config_path}",
                              details={'file_path': str(self.config_path)})

        for path in self._candidate_paths():
            if not path.exists():
                continue
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    data = yaml.safe_load(f) or {}
                if not isinstance(data, dict):
                    raise ValueError("top level must be a mapping")
            except (OSError, ValueError, yaml.YAMLError) as e:
                if self.config_path and path == Path(self.config_path):
                    raise ConfigError(f"Failed to load config from {path}: {e}",
                                      details={'file_path': str(path)}) from e
                print(f"Warning: Skipping unreadable config {path}: {e}")
                continue

            self.loaded_from = path
            return data

        return {}

    def _apply_config(self, config_data: Dict[str, Any]) -> None:
        """
        Copy known keys of known sections onto the section dataclasses

        Unknown sections and keys are ignored.
        """
        sections = self._sections()
        for section_name, values in config_data.items():
            section = sections.get(section_name)
            if section is None or not isinstance(values, dict):
                continue
            known = {f.name for f in fields(section)}
            for key, value in values.items():
                if key in known:
                    setattr(section, key, value)

    def _apply_environment(self) -> None:
        """Non-empty environment variables override file values"""
        sections = self._sections()
        for env_var, section_name, attribute in ENVIRONMENT_OVERRIDES:
            value = os.getenv(env_var)
            if value:
                setattr(sections[section_name], attribute, value)

    def get_config_directory(self) -> Path:
        """User configuration directory, ~ expanded"""
        return self.config_dir.expanduser()

    @property
    def spotify_configured(self) -> bool:
        return bool(self.spotify.client_id and self.spotify.client_secret)

    @property
    def genius_configured(self) -> bool:
        return bool(self.lyrics.genius_api_key)

    def to_dict(self, redact: bool = True) -> Dict[str, Any]:
        """
        Convert settings to a plain dictionary

        Args:
            redact: Replace credentials that are set with "***"

        Returns:
            Nested dictionary keyed by section name
        """
        data = {name: asdict(section) for name, section in self._sections().items()}
        if redact:
            for section_name, key in CREDENTIAL_FIELDS:
                if data[section_name][key]:
                    data[section_name][key] = "***"
        return data

    def save_config(self, path: Optional[str] = None) -> Path:
        """
        Write the current settings as YAML, with credentials left blank

        Args:
            path: Target file, defaults to ~/.lyric-finder/config.yaml

        Returns:
            Path the configuration was written to
        """
        target = Path(path) if path else self.get_config_directory() / "config.yaml"

        data = self.to_dict(redact=False)
        for section_name, key in CREDENTIAL_FIELDS:
            data[section_name][key] = ""

        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, 'w', encoding='utf-8') as f:
            yaml.safe_dump(data, f, default_flow_style=False, indent=2, allow_unicode=True)
        return target

    def validate(self) -> List[str]:
        """
        Check the settings for problems

        Missing credentials are not errors here: the engine degrades to
        whichever providers are configured. They are reported so that
        the doctor command can show them.

        Returns:
            List of human readable problems, empty when valid
        """
        problems = []

        if not self.spotify_configured:
            problems.append("Spotify client_id and client_secret are not set (catalog falls back to Genius)")
        if not self.genius_configured:
            problems.append("Genius API key is not set (no structured lyrics provider)")

        if '{slug}' not in self.regional.slug_url_template:
            problems.append(f"Invalid regional slug URL template: {self.regional.slug_url_template}")
        if self.search.min_query_length < 1:
            problems.append(f"Invalid minimum query length: {self.search.min_query_length}")
        if self.regional.max_workers < 1:
            problems.append(f"Invalid regional worker count: {self.regional.max_workers}")

        problems.extend(
            f"Invalid slug rewrite entry: {entry!r}"
            for entry in self.regional.extra_slug_rewrites
            if not isinstance(entry, (list, tuple)) or len(entry) != 2
        )
        return problems

    def __str__(self) -> str:
        spotify = 'configured' if self.spotify_configured else 'missing'
        genius = 'configured' if self.genius_configured else 'missing'
        return f"Settings(Spotify: {spotify}, Genius: {genius}, Regional: {self.regional.site_name})"


settings = Settings()


def get_settings() -> Settings:
    """
    Get the shared settings instance

    Returns:
        The Settings loaded at import time or by the last reload_settings()
    """
    return settings


def reload_settings(config_path: Optional[str] = None) -> Settings:
    """
    Replace the shared settings instance

    Args:
        config_path: Optional path to a specific config file

    Returns:
        The new Settings instance

    Raises:
        ConfigError: If config_path cannot be used
    """
    global settings
    settings = Settings(config_path)
    return settings
