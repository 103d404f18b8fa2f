"""
Main CLI interface for Lyric-Finder

Command-line front end over the lyrics engine. Every command builds the
engine from the current settings, so --config changes which providers are
used.

Commands:
- search: song, artist or regional search, printed as a numbered list
- lyrics: search, pick one result and print its lyrics
- config show: current configuration with credentials redacted
- doctor: settings validation and provider configuration check
"""

import sys
import click
import functools
from typing import Optional

from . import __version__
from .config.settings import get_settings, reload_settings
from .engine import LyricsEngine, SearchSession, create_engine
from .exceptions import ConfigError
from .models import Artist, LyricsResult, SearchMode, SearchResult, Song
from .utils.helpers import truncate_string
from .utils.logger import configure_from_settings, get_current_log_file, get_logger


logger = get_logger(__name__)

MODE_CHOICES = [mode.value for mode in SearchMode]


def print_banner():
    """Print application banner to console"""
    title = f"Lyric-Finder v{__version__}"
    tagline = "songs, artists and lyrics from the terminal"
    rule = "~" * (len(tagline) + 4)
    click.echo(click.style(f"\n{rule}\n  {title}\n  {tagline}\n{rule}\n", fg='green', bold=True))


def handle_error(func):
    """
    Decorator to handle common CLI errors gracefully

    Args:
        func: The CLI command function to wrap

    Returns:
        Wrapped function with error handling
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo(click.style("\n\nOperation cancelled by user", fg='yellow'))
            sys.exit(130)
        except (click.ClickException, click.exceptions.Exit):
            raise
        except Exception as e:
            logger.error(f"Command failed: {e}")
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            sys.exit(1)
    return wrapper


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--config', type=click.Path(), help='Path to config file')
@click.pass_context
def cli(ctx, version, verbose, config):
    """
    Lyric-Finder - find songs, artists and lyrics

    Searches Spotify and Genius for songs and artists, guesses pages on
    Tamil lyrics sites for regional songs, and resolves lyrics with a
    fallback to search guidance when nothing is found.
    """
    ctx.ensure_object(dict)

    if version:
        click.echo(f"Lyric-Finder v{__version__}")
        return

    if config:
        try:
            reload_settings(config)
        except ConfigError as e:
            raise click.ClickException(f"Configuration error: {e.message}")

    configure_from_settings(verbose)
    ctx.obj['verbose'] = verbose

    if config:
        logger.console_info(f"Loaded config: {config}")

    if ctx.invoked_subcommand is None:
        print_banner()
        click.echo(ctx.get_help())


def _find_artist(engine: LyricsEngine, name: str) -> Optional[Artist]:
    """Look up an artist by name, preferring an exact case-insensitive match"""
    result = engine.search(name, SearchMode.ARTIST)
    if not result.artists:
        return None
    wanted = name.strip().lower()
    for artist in result.artists:
        if artist.identity == wanted:
            return artist
    return result.artists[0]


def _run_search(engine: LyricsEngine, query: str, mode: str, artist_name: Optional[str]) -> SearchResult:
    """
    Run one search through a session the way an interactive caller would

    With --artist the artist is looked up first and the search lists
    that artist's songs.
    """
    session = SearchSession(engine)
    session.set_mode(SearchMode.from_value(mode))

    if artist_name:
        session.set_mode(SearchMode.ARTIST)
        artist = _find_artist(engine, artist_name)
        if artist is None:
            raise click.ClickException(f'No artist found for "{artist_name}"')
        logger.console_info(f"Artist: {artist.name}")
        session.select_artist(artist)

    result = session.search(query)
    if result is None:
        raise click.ClickException("Search was superseded by a newer request")
    return result


def _print_songs(songs):
    for index, song in enumerate(songs, 1):
        line = f"{index:3d}. {song.title} - {song.artist_name}"
        if song.album_name:
            line += click.style(f"  [{song.album_name}]", fg='cyan')
        if song.available_lyrics_sources:
            line += click.style("  (lyrics)", fg='green')
        click.echo(line)


def _print_artists(artists):
    for index, artist in enumerate(artists, 1):
        extra = []
        if artist.followers is not None:
            extra.append(f"{artist.followers:,} followers")
        if artist.genres:
            extra.append(', '.join(artist.genres[:3]))
        suffix = click.style(f"  ({'; '.join(extra)})", fg='cyan') if extra else ""
        click.echo(f"{index:3d}. {artist.name}{suffix}")


def _print_result(result: SearchResult):
    if result.failed or result.is_empty:
        click.echo(click.style(result.notice or "No results", fg='yellow'))
        return

    source = f" from {result.provider}" if result.provider else ""
    click.echo(f"Results for \"{result.query}\"{source}:\n")
    if result.artists:
        _print_artists(result.artists)
    else:
        _print_songs(result.songs)


def _print_lyrics(song: Song, lyrics: LyricsResult):
    click.echo(click.style(song.display_name, fg='green', bold=True))
    if song.album_name:
        click.echo(f"Album: {song.album_name}")

    if not lyrics.ok:
        click.echo(click.style(lyrics.message or "Lyrics unavailable", fg='red'), err=True)
        return

    click.echo(f"Source: {lyrics.source_name}")
    if lyrics.origin_url:
        click.echo(f"URL: {lyrics.origin_url}")
    click.echo("")
    click.echo(lyrics.text)

    others = [s.source_name for s in lyrics.alternative_sources if s.source_name != lyrics.source_name]
    if others:
        click.echo(click.style(f"\nAlso available from: {', '.join(others)}", fg='cyan'))


@cli.command()
@click.argument('query', default='')
@click.option('--mode', '-m', type=click.Choice(MODE_CHOICES), default=SearchMode.SONG.value,
              help='Search mode')
@click.option('--artist', '-a', 'artist_name', help='List songs of this artist')
@handle_error
def search(query, mode, artist_name):
    """
    Search songs, artists or regional lyrics pages

    QUERY is free text. With --artist NAME the songs of that artist are
    listed and QUERY may be left empty.
    """
    result = _run_search(create_engine(get_settings()), query, mode, artist_name)
    _print_result(result)


@cli.command()
@click.argument('query', default='')
@click.option('--mode', '-m', type=click.Choice(MODE_CHOICES), default=SearchMode.SONG.value,
              help='Search mode')
@click.option('--artist', '-a', 'artist_name', help='Pick from the songs of this artist')
@click.option('--pick', '-p', type=click.IntRange(min=1), default=1, help='Result number to show lyrics for')
@handle_error
def lyrics(query, mode, artist_name, pick):
    """
    Search and print the lyrics of one result

    The first result is used unless --pick selects another one.
    """
    engine = create_engine(get_settings())
    result = _run_search(engine, query, mode, artist_name)

    if not result.songs:
        if result.artists:
            click.echo("Artist search returned artists, not songs. Use --artist NAME to pick one:\n")
            _print_artists(result.artists)
        else:
            click.echo(click.style(result.notice or "No results", fg='yellow'))
        sys.exit(1)

    if pick > len(result.songs):
        raise click.ClickException(f"Only {len(result.songs)} results, cannot pick {pick}")

    song = result.songs[pick - 1]
    lyrics_result = engine.resolve_lyrics(song)
    _print_lyrics(song, lyrics_result)
    if not lyrics_result.ok:
        sys.exit(1)


@cli.group()
def config():
    """Configuration management"""
    pass


@config.command()
@handle_error
def show():
    """
    Show current configuration

    Credentials are shown as *** when set.
    """
    settings = get_settings()
    data = settings.to_dict(redact=True)

    click.echo("Current Configuration:\n")
    if settings.loaded_from:
        click.echo(f"Loaded from: {settings.loaded_from}\n")

    for section, values in data.items():
        click.echo(f"{section.capitalize()}:")
        for key, value in values.items():
            if isinstance(value, str):
                value = truncate_string(value, 70) if value else '(not set)'
            click.echo(f"   {key}: {value}")
        click.echo("")


@cli.command()
@handle_error
def doctor():
    """
    Run configuration diagnostics

    Checks the settings for problems and reports which providers the
    engine will use.
    """
    click.echo("Running diagnostics...\n")
    settings = get_settings()
    issues = settings.validate()

    click.echo(f"Spotify catalog: {'configured' if settings.spotify_configured else 'not configured'}")
    click.echo(f"Genius lyrics: {'configured' if settings.genius_configured else 'not configured'}")
    click.echo(f"Regional site: {settings.regional.site_name}")
    if settings.regional.search_pages_enabled:
        click.echo(f"Regional search page: {settings.regional.search_url_template}")

    if settings.genius_configured:
        from .lyrics.genius import GeniusProvider
        try:
            status = GeniusProvider(api_key=settings.lyrics.genius_api_key).get_api_status()
            click.echo(f"Genius client: timeout {status['timeout']}s, {status['max_attempts']} attempts")
        except Exception as e:
            click.echo(f"Genius API: Error - {e}")
            issues.append("Genius client initialization failed")

    current_log = get_current_log_file()
    click.echo(f"Logging: {current_log if current_log else 'console only'}")

    if issues:
        click.echo(f"\nFound {len(issues)} issues:")
        for issue in issues:
            click.echo(f"   • {issue}")
    else:
        click.echo("\nAll systems operational!")


if __name__ == '__main__':
    cli()
