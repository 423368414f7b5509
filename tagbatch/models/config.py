"""
Pydantic models for job configuration.
Resolved configurations are frozen: once built they are never mutated.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class SupportedTag(str, Enum):
    """Tags the tagging engine knows how to write, in its camelCase convention."""

    TITLE = "title"
    ARTIST = "artist"
    ALBUM = "album"
    ALBUM_ARTIST = "albumArtist"
    KEY = "key"
    BPM = "bpm"
    GENRE = "genre"
    STYLE = "style"
    LABEL = "label"
    RELEASE_ID = "releaseId"
    TRACK_ID = "trackId"
    RELEASE_DATE = "releaseDate"
    PUBLISH_DATE = "publishDate"
    VERSION = "version"
    ALBUM_ART = "albumArt"
    OTHER_TAGS = "otherTags"
    CATALOG_NUMBER = "catalogNumber"
    URL = "url"
    TRACK_NUMBER = "trackNumber"
    TRACK_TOTAL = "trackTotal"
    DISC_NUMBER = "discNumber"
    DURATION = "duration"
    REMIXER = "remixer"
    ISRC = "isrc"
    MOOD = "mood"
    SYNCED_LYRICS = "syncedLyrics"
    UNSYNCED_LYRICS = "unsyncedLyrics"
    META_TAGS = "metaTags"
    EXPLICIT = "explicit"


DEFAULT_TAGS = [
    SupportedTag.GENRE,
    SupportedTag.STYLE,
    SupportedTag.RELEASE_DATE,
    SupportedTag.LABEL,
    SupportedTag.CATALOG_NUMBER,
    SupportedTag.BPM,
    SupportedTag.KEY,
    SupportedTag.ALBUM_ART,
]


class TaggerConfig(BaseModel):
    """A validated, immutable configuration for one autotagger run."""

    model_config = ConfigDict(frozen=True)

    path: Path | None = None

    # Platforms & tags
    platforms: list[str] = Field(default_factory=lambda: ["beatport"])
    tags: list[SupportedTag] = Field(default_factory=lambda: list(DEFAULT_TAGS))
    separator: str = ", "

    # Matching
    threads: int = 16
    strictness: float = 0.7
    match_duration: bool = False
    max_duration_difference: int = 30
    match_by_id: bool = False
    multiplatform: bool = False
    enable_shazam: bool = False
    force_shazam: bool = False
    skip_tagged: bool = False
    parse_filename: bool = False
    filename_template: str | None = None

    # Writing
    id3v24: bool = False
    overwrite: bool = True
    merge_genres: bool = False
    album_art_file: bool = False
    camelot: bool = False
    short_title: bool = False
    only_year: bool = False

    include_subfolders: bool = True

    @classmethod
    def custom_default(cls) -> "TaggerConfig":
        """The built-in configuration used when no config file is given."""
        return cls()

    @field_validator("threads")
    @classmethod
    def validate_threads(cls, v: int) -> int:
        """Ensures a reasonable number of threads."""
        if v < 1 or v > 64:
            raise ValueError("Threads must be between 1 and 64.")
        return v

    @field_validator("strictness")
    @classmethod
    def validate_strictness(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("Strictness must be between 0.0 and 1.0.")
        return v

    @model_validator(mode="after")
    def validate_option_conflicts(self) -> "TaggerConfig":
        """Checks for conflicting tagging options."""
        if self.force_shazam and not self.enable_shazam:
            raise ValueError("force_shazam requires enable_shazam.")
        return self


class AudioFeatureProperty(BaseModel):
    """How a single Spotify audio feature is written to the file."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    tag: str
    range: tuple[int, int] = (0, 100)

    @field_validator("range")
    @classmethod
    def validate_range(cls, v: tuple[int, int]) -> tuple[int, int]:
        low, high = v
        if not 0 <= low <= high <= 100:
            raise ValueError("Range must satisfy 0 <= min <= max <= 100.")
        return v


def _default_feature_properties() -> dict[str, AudioFeatureProperty]:
    names = (
        "acousticness",
        "danceability",
        "energy",
        "instrumentalness",
        "liveness",
        "speechiness",
        "valence",
        "popularity",
    )
    return {
        name: AudioFeatureProperty(tag=f"AF_{name.upper()}", range=(0, 90))
        for name in names
    }


class AudioFeaturesConfig(BaseModel):
    """A validated, immutable configuration for one audio features run."""

    model_config = ConfigDict(frozen=True)

    path: Path | None = None
    main_tag: str = "AUDIO_FEATURES"
    separator: str = ", "
    properties: dict[str, AudioFeatureProperty] = Field(
        default_factory=_default_feature_properties
    )
    include_subfolders: bool = True


@dataclass(frozen=True)
class RenamerConfig:
    """Settings for one rename run."""

    path: Path
    template: str
    out_dir: Path | None = None
    copy: bool = False
    subfolders: bool = True
    overwrite: bool = False
    separator: str = ", "
    keep_subfolders: bool = False
