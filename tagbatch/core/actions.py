"""
The closed set of actions the CLI can request.

Each action is a frozen dataclass carrying exactly the fields its flow needs.
The dispatcher matches on these types exhaustively.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Union


@dataclass(frozen=True)
class TaggerOverrides:
    """Autotagger options given on the command line. `None` means "not given"."""

    platforms: str | None = None
    tags: str | None = None
    threads: int | None = None
    strictness: int | None = None
    max_duration_difference: int | None = None
    filename_template: str | None = None
    no_subfolders: bool = False

    id3v24: bool = False
    overwrite: bool = False
    album_art_file: bool = False
    merge_genres: bool = False
    camelot: bool = False
    short_title: bool = False
    match_duration: bool = False
    match_by_id: bool = False
    enable_shazam: bool = False
    force_shazam: bool = False
    skip_tagged: bool = False
    parse_filename: bool = False
    only_year: bool = False
    multiplatform: bool = False


@dataclass(frozen=True)
class Autotagger:
    path: Path
    config: Path | None = None
    overrides: TaggerOverrides = field(default_factory=TaggerOverrides)


@dataclass(frozen=True)
class AudioFeatures:
    path: Path
    client_id: str
    client_secret: str
    config: Path | None = None
    no_subfolders: bool = False


@dataclass(frozen=True)
class QueryUrl:
    url: str
    confidence: float = 0.75


@dataclass(frozen=True)
class SongDownloader:
    url: str
    output: Path
    confidence: float = 0.75
    enable_auto_tag: bool = False
    auto_tag_config: Path | None = None
    enable_audio_features: bool = False
    client_id: str | None = None
    client_secret: str | None = None


@dataclass(frozen=True)
class AuthorizeSpotify:
    client_id: str
    client_secret: str
    expose: bool = False
    prompt: bool = False


@dataclass(frozen=True)
class Renamer:
    path: Path
    template: str
    output: Path | None = None
    copy: bool = False
    no_subfolders: bool = False
    preview: bool = False
    overwrite: bool = False
    separator: str = ", "
    keep_subfolders: bool = False


@dataclass(frozen=True)
class Server:
    expose: bool = False
    path: str | None = None
    browser: bool = False


Action = Union[
    Autotagger,
    AudioFeatures,
    QueryUrl,
    SongDownloader,
    AuthorizeSpotify,
    Renamer,
    Server,
]
