"""
Discovers the audio files an action works on and loads the metadata the
engines and the renamer need from their tags.
"""

import logging
import os
from collections.abc import Iterator
from pathlib import Path

from mutagen import File as MutagenFile
from mutagen import MutagenError

from tagbatch.exceptions import InputPathError, PlaylistError
from tagbatch.models.files import FileDescriptor

from .playlist import is_playlist, read_playlist

log = logging.getLogger(__name__)

AUDIO_EXTENSIONS = frozenset(
    {".mp3", ".flac", ".aif", ".aiff", ".m4a", ".mp4", ".wav", ".ogg", ".opus"}
)


def is_audio_file(path: Path) -> bool:
    return path.suffix.lower() in AUDIO_EXTENSIONS


def enumerate_files(path: Path, include_subfolders: bool) -> Iterator[FileDescriptor]:
    """
    Produces a descriptor for every audio file to process.

    A single file is read as a playlist. A directory is walked lazily in
    filesystem order, descending into subfolders only if requested.

    Raises:
        InputPathError: If the path does not exist.
        PlaylistError: If the path is a file but not a playlist.
    """
    if not path.exists():
        raise InputPathError(f"Input path does not exist: '{path}'")

    if path.is_file():
        if not is_playlist(path):
            raise PlaylistError(f"Not a valid playlist file: '{path}'")
        return _from_playlist(read_playlist(path))
    return _walk(path, include_subfolders)


def _from_playlist(entries: list[Path]) -> Iterator[FileDescriptor]:
    for entry in entries:
        if not entry.is_file():
            log.warning(f"Playlist entry not found, skipping: {entry}")
            continue
        if not is_audio_file(entry):
            log.warning(f"Playlist entry is not an audio file, skipping: {entry}")
            continue
        yield load_descriptor(entry)


def _walk(root: Path, include_subfolders: bool) -> Iterator[FileDescriptor]:
    for dirpath, _dirnames, filenames in os.walk(root):
        for name in filenames:
            file_path = Path(dirpath) / name
            if is_audio_file(file_path):
                yield load_descriptor(file_path)
        if not include_subfolders:
            break


def load_descriptor(path: Path) -> FileDescriptor:
    """
    Builds a descriptor from the file's tags.

    Files whose tags cannot be read still produce a descriptor carrying only
    the path and format, so the engines can fall back to the filename.
    """
    fmt = path.suffix.lower().lstrip(".")
    try:
        audio = MutagenFile(path, easy=True)
    except (MutagenError, OSError) as e:
        log.warning(f"Could not read tags of '{path}': {e}")
        return FileDescriptor(path=path, format=fmt)

    if audio is None:
        log.debug(f"No tag reader for '{path}'")
        return FileDescriptor(path=path, format=fmt)

    tags = audio.tags or {}
    duration = audio.info.length if getattr(audio, "info", None) else None
    return FileDescriptor(
        path=path,
        format=fmt,
        title=_first(tags, "title"),
        artists=_values(tags, "artist"),
        album=_first(tags, "album"),
        album_artists=_values(tags, "albumartist"),
        track_number=_number(_first(tags, "tracknumber")),
        disc_number=_number(_first(tags, "discnumber")),
        year=(_first(tags, "date") or "")[:4] or None,
        genres=_values(tags, "genre"),
        isrc=_first(tags, "isrc"),
        duration=duration,
    )


def _values(tags, key: str) -> list[str]:
    try:
        values = tags.get(key) or []
    except (KeyError, ValueError):
        return []
    return [str(v) for v in values if str(v).strip()]


def _first(tags, key: str) -> str | None:
    values = _values(tags, key)
    return values[0] if values else None


def _number(value: str | None) -> int | None:
    """Parses '3' or '3/12' into 3."""
    if not value:
        return None
    head = value.split("/", 1)[0].strip()
    return int(head) if head.isdigit() else None
