"""
Defines the command-line interface for the application using Typer.
Every command builds one action and hands it to the dispatcher.
"""

import logging
import os
import platform
from pathlib import Path

import typer
from rich.console import Console

from tagbatch import __version__
from tagbatch.api.auth import SpotifyAuthorizer
from tagbatch.core.actions import (
    Action,
    AudioFeatures,
    AuthorizeSpotify,
    Autotagger,
    QueryUrl,
    Renamer,
    Server,
    SongDownloader,
    TaggerOverrides,
)
from tagbatch.core.dispatcher import ActionDispatcher
from tagbatch.core.engines import EngineRegistry
from tagbatch.storage.config_manager import dump_default
from tagbatch.storage.token_cache import TokenCache
from tagbatch.utils.log_setup import setup_logging

console = Console()
log = logging.getLogger("tagbatch")

app = typer.Typer(
    name="tagbatch",
    help=(
        "Batch audio-metadata tool: tag, analyse, download and rename music."
        " Use 'tagbatch <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "tagbatch"


def build_dispatcher() -> ActionDispatcher:
    authorizer = SpotifyAuthorizer(TokenCache(get_config_dir()), console=console)
    return ActionDispatcher(console, EngineRegistry.from_entry_points(), authorizer)


def _run(action: Action) -> None:
    outcome = build_dispatcher().dispatch(action)
    if outcome.terminate:
        # Authorization is a one-shot process: exit instead of continuing.
        raise typer.Exit(code=outcome.exit_code)
    if outcome.exit_code:
        raise typer.Exit(code=outcome.exit_code)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    autotagger_config: bool = typer.Option(
        False,
        "--autotagger-config",
        help="Print the default Autotagger config and exit.",
    ),
    audiofeatures_config: bool = typer.Option(
        False,
        "--audiofeatures-config",
        help="Print the default Audio Features config and exit.",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
):
    """tagbatch CLI"""
    if version:
        console.print(f"[bold]tagbatch[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    # Config dumps print plain JSON and exit before logging is set up.
    if autotagger_config:
        typer.echo(dump_default("autotagger"))
        raise typer.Exit()
    if audiofeatures_config:
        typer.echo(dump_default("audiofeatures"))
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print("No action. Use [cyan]tagbatch --help[/cyan] to print help.")
        raise typer.Exit()

    setup_logging(console, verbose, get_config_dir())
    log.info(f"Starting tagbatch v{__version__} OS: {platform.system()}")


@app.command()
def autotagger(
    path: Path = typer.Option(
        ..., "-p", "--path", help="Path to music files or a playlist (overrides config)."
    ),
    config: Path | None = typer.Option(
        None, "-c", "--config", help="Path to a JSON config file."
    ),
    platforms: str | None = typer.Option(
        None,
        "-P",
        "--platforms",
        help="Comma separated list of platforms to use.",
    ),
    tags: str | None = typer.Option(
        None, "-t", "--tags", help="Comma separated list of tags to write."
    ),
    id3v24: bool = typer.Option(
        False, "--id3v24", help="Use ID3v2.4 instead of ID3v2.3 for MP3/AIFF files."
    ),
    overwrite: bool = typer.Option(
        False, "--overwrite", help="Overwrite the existing tags in the track."
    ),
    threads: int | None = typer.Option(
        None, "--threads", help="How many threads to use for searching & matching."
    ),
    strictness: int | None = typer.Option(
        None,
        "--strictness",
        help="How strict the matching should be, 0 - 100 (%).",
    ),
    album_art_file: bool = typer.Option(
        False, "--album-art-file", help="Write a cover.jpg into the folder."
    ),
    merge_genres: bool = typer.Option(
        False, "--merge-genres", help="Merge new genres with existing ones."
    ),
    camelot: bool = typer.Option(
        False, "--camelot", help="Write the key tag in Camelot notation."
    ),
    short_title: bool = typer.Option(
        False, "--short-title", help="Write the title without version (ie. remix)."
    ),
    match_duration: bool = typer.Option(
        False, "--match-duration", help="Match the song duration as well (very strict)."
    ),
    max_duration_difference: int | None = typer.Option(
        None,
        "--max-duration-difference",
        help="Allowed duration difference in seconds when matching duration.",
    ),
    match_by_id: bool = typer.Option(
        False, "--match-by-id", help="Use platform ID tags to get exact matches."
    ),
    enable_shazam: bool = typer.Option(
        False,
        "--enable-shazam",
        help="Identify the track on Shazam if title & artist tags are missing.",
    ),
    force_shazam: bool = typer.Option(
        False, "--force-shazam", help="Always try to identify the track on Shazam."
    ),
    skip_tagged: bool = typer.Option(
        False, "--skip-tagged", help="Skip tracks that were already tagged."
    ),
    parse_filename: bool = typer.Option(
        False,
        "--parse-filename",
        help="Get title & artist from the filename if the tags are missing.",
    ),
    filename_template: str | None = typer.Option(
        None,
        "--filename-template",
        help="Template for --parse-filename, e.g. '%track%. %artists% - %title%'.",
    ),
    no_subfolders: bool = typer.Option(
        False, "--no-subfolders", help="Don't include subfolders."
    ),
    only_year: bool = typer.Option(
        False, "--only-year", help="Write only the year instead of the full date."
    ),
    multiplatform: bool = typer.Option(
        False,
        "--multiplatform",
        help="Tag on multiple platforms instead of falling back.",
    ),
):
    """Start the Autotagger."""
    overrides = TaggerOverrides(
        platforms=platforms,
        tags=tags,
        threads=threads,
        strictness=strictness,
        max_duration_difference=max_duration_difference,
        filename_template=filename_template,
        no_subfolders=no_subfolders,
        id3v24=id3v24,
        overwrite=overwrite,
        album_art_file=album_art_file,
        merge_genres=merge_genres,
        camelot=camelot,
        short_title=short_title,
        match_duration=match_duration,
        match_by_id=match_by_id,
        enable_shazam=enable_shazam,
        force_shazam=force_shazam,
        skip_tagged=skip_tagged,
        parse_filename=parse_filename,
        only_year=only_year,
        multiplatform=multiplatform,
    )
    _run(Autotagger(path=path, config=config, overrides=overrides))


@app.command()
def audiofeatures(
    path: Path = typer.Option(
        ..., "-p", "--path", help="Path to music files or a playlist (overrides config)."
    ),
    client_id: str = typer.Option(..., "--client-id", help="Spotify Client ID."),
    client_secret: str = typer.Option(
        ..., "--client-secret", help="Spotify Client Secret."
    ),
    config: Path | None = typer.Option(
        None, "-c", "--config", help="Path to a JSON config file."
    ),
    no_subfolders: bool = typer.Option(
        False, "--no-subfolders", help="Don't include subfolders."
    ),
):
    """Start Audio Features."""
    _run(
        AudioFeatures(
            path=path,
            client_id=client_id,
            client_secret=client_secret,
            config=config,
            no_subfolders=no_subfolders,
        )
    )


@app.command(name="query-url")
def query_url(
    url: str = typer.Option(
        ..., "-u", "--url", help="URL to query (YouTube, Spotify, or SoundCloud)."
    ),
    confidence: float = typer.Option(
        0.75, "--confidence", help="Shazam confidence threshold (0.0-1.0)."
    ),
):
    """Query information about a URL without downloading."""
    _run(QueryUrl(url=url, confidence=confidence))


@app.command(name="song-downloader")
def song_downloader(
    url: str = typer.Option(
        ..., "-u", "--url", help="YouTube URL (channel, playlist, or video)."
    ),
    output: Path = typer.Option(
        ..., "-o", "--output", help="Output directory for downloaded songs."
    ),
    confidence: float = typer.Option(
        0.75, "--confidence", help="Shazam confidence threshold (0.0-1.0)."
    ),
    enable_auto_tag: bool = typer.Option(
        False, "--enable-auto-tag", help="Auto-tag the downloaded songs."
    ),
    auto_tag_config: Path | None = typer.Option(
        None, "--auto-tag-config", help="Path to an auto-tag configuration file."
    ),
    enable_audio_features: bool = typer.Option(
        False, "--enable-audio-features", help="Run audio features analysis."
    ),
    client_id: str | None = typer.Option(
        None, "--client-id", help="Spotify Client ID (required for audio features)."
    ),
    client_secret: str | None = typer.Option(
        None,
        "--client-secret",
        help="Spotify Client Secret (required for audio features).",
    ),
):
    """Download songs from YouTube videos or playlists."""
    _run(
        SongDownloader(
            url=url,
            output=output,
            confidence=confidence,
            enable_auto_tag=enable_auto_tag,
            auto_tag_config=auto_tag_config,
            enable_audio_features=enable_audio_features,
            client_id=client_id,
            client_secret=client_secret,
        )
    )


@app.command(name="authorize-spotify")
def authorize_spotify(
    client_id: str = typer.Option(..., "--client-id", help="Spotify Client ID."),
    client_secret: str = typer.Option(
        ..., "--client-secret", help="Spotify Client Secret."
    ),
    expose: bool = typer.Option(
        False, "--expose", help="Run the callback server on 0.0.0.0."
    ),
    prompt: bool = typer.Option(
        False, "--prompt", help="Don't start a server, prompt for the redirected URL."
    ),
):
    """Authorize Spotify and cache the token."""
    _run(
        AuthorizeSpotify(
            client_id=client_id,
            client_secret=client_secret,
            expose=expose,
            prompt=prompt,
        )
    )


@app.command()
def renamer(
    path: Path = typer.Option(..., "-p", "--path", help="Path to input files."),
    template: str = typer.Option(
        ..., "-t", "--template", help="New filename template, e.g. '{artist} - {title}'."
    ),
    output: Path | None = typer.Option(
        None, "-o", "--output", help="Output directory."
    ),
    copy: bool = typer.Option(False, "--copy", help="Copy files instead of moving."),
    no_subfolders: bool = typer.Option(
        False, "--no-subfolders", help="Exclude subfolders."
    ),
    preview: bool = typer.Option(
        False, "--preview", help="Only print the new names, don't touch any file."
    ),
    overwrite: bool = typer.Option(
        False, "--overwrite", help="Overwrite existing files."
    ),
    separator: str = typer.Option(
        ", ", "--separator", help="Separator for fields with multiple values."
    ),
    keep_subfolders: bool = typer.Option(
        False, "--keep-subfolders", help="Keep the original subfolders."
    ),
):
    """Rename files using a template."""
    _run(
        Renamer(
            path=path,
            template=template,
            output=output,
            copy=copy,
            no_subfolders=no_subfolders,
            preview=preview,
            overwrite=overwrite,
            separator=separator,
            keep_subfolders=keep_subfolders,
        )
    )


@app.command()
def server(
    expose: bool = typer.Option(
        False, "-e", "--expose", help="Expose the internal servers (insecure)."
    ),
    path: str | None = typer.Option(
        None, "-p", "--path", help="Initial path to use in the UI."
    ),
    browser: bool = typer.Option(False, "-b", "--browser", help="Open a web browser."),
):
    """Start the server mode."""
    _run(Server(expose=expose, path=path, browser=browser))
