"""
Configuration management package for Lyric-Finder

Two components live here:

1. Settings Management (settings.py):
   - Application configuration from YAML files and environment variables
   - Settings validation for the doctor command
   - Singleton access through get_settings() and reload_settings()

2. Authentication Management (auth.py):
   - Spotify client-credentials grant
   - In-memory TokenCache with single-flight refresh

auth.py depends on the logging utilities, which in turn read the settings,
so it is imported from its module directly:

    from lyricfinder.config import get_settings
    from lyricfinder.config.auth import get_auth
"""

from .settings import get_settings, reload_settings, Settings

__all__ = [
    'get_settings',      # Factory function for singleton settings access
    'reload_settings',   # Function to reload settings from files
    'Settings',          # Settings class for direct instantiation
]
