"""
Descriptors for the audio files handed to the delegated engines.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class FileDescriptor:
    """One candidate audio file and the metadata needed downstream."""

    path: Path
    format: str
    title: str | None = None
    artists: list[str] = field(default_factory=list)
    album: str | None = None
    album_artists: list[str] = field(default_factory=list)
    track_number: int | None = None
    disc_number: int | None = None
    year: str | None = None
    genres: list[str] = field(default_factory=list)
    isrc: str | None = None
    duration: float | None = None
