"""
Utility for reading M3U/M3U8 and PLS playlist files.
"""

import configparser
import logging
from pathlib import Path
from urllib.parse import unquote, urlparse

from tagbatch.exceptions import PlaylistError

log = logging.getLogger(__name__)

PLAYLIST_EXTENSIONS = (".m3u", ".m3u8", ".pls")


def is_playlist(path: Path) -> bool:
    return path.suffix.lower() in PLAYLIST_EXTENSIONS


def read_playlist(playlist_path: Path) -> list[Path]:
    """
    Reads the entries of a playlist file, resolving relative entries against
    the playlist's directory.

    Raises:
        PlaylistError: If the file is not a recognized playlist or unreadable.
    """
    suffix = playlist_path.suffix.lower()
    if suffix not in PLAYLIST_EXTENSIONS:
        raise PlaylistError(f"Not a valid playlist file: '{playlist_path}'")

    try:
        content = playlist_path.read_text(encoding="utf-8-sig", errors="replace")
    except OSError as e:
        raise PlaylistError(f"Could not read playlist '{playlist_path}': {e}") from e

    if suffix == ".pls":
        entries = _parse_pls(content, playlist_path)
    else:
        entries = [
            line.strip()
            for line in content.splitlines()
            if line.strip() and not line.startswith("#")
        ]

    base_dir = playlist_path.parent
    return [_resolve_entry(entry, base_dir) for entry in entries]


def _parse_pls(content: str, playlist_path: Path) -> list[str]:
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    try:
        parser.read_string(content)
    except configparser.Error as e:
        raise PlaylistError(f"Error parsing playlist '{playlist_path}': {e}") from e
    if not parser.has_section("playlist"):
        raise PlaylistError(f"Missing [playlist] section in '{playlist_path}'")

    section = parser["playlist"]
    numbered = []
    for key, value in section.items():
        if key.startswith("file") and key[4:].isdigit():
            numbered.append((int(key[4:]), value.strip()))
    return [value for _, value in sorted(numbered) if value]


def _resolve_entry(entry: str, base_dir: Path) -> Path:
    if entry.startswith("file://"):
        return Path(unquote(urlparse(entry).path))
    path = Path(entry)
    return path if path.is_absolute() else base_dir / path
