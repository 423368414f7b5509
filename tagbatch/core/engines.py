"""
Interfaces of the engines the actions delegate to.

Engines are provided by separately installed packages through the
`tagbatch.engines` entry-point group, under the names `tagger`,
`audiofeatures`, `url_info` and `ui_server`. Each entry point resolves to a
factory that takes no arguments and returns the engine.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from importlib.metadata import entry_points
from typing import Protocol

from tagbatch.exceptions import EngineUnavailable
from tagbatch.models.config import AudioFeaturesConfig, TaggerConfig
from tagbatch.models.events import ProgressChannel
from tagbatch.models.files import FileDescriptor
from tagbatch.models.token import SpotifyToken

log = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "tagbatch.engines"


@dataclass
class UrlInfo:
    platform: str
    content_type: str
    title: str
    description: str | None = None
    # Video title -> extracted tracklist
    video_tracklists: dict[str, list[str]] | None = None


class TaggingEngine(Protocol):
    def tag_files(
        self, config: TaggerConfig, files: Iterable[FileDescriptor]
    ) -> ProgressChannel: ...


class AudioFeaturesEngine(Protocol):
    def start(
        self,
        config: AudioFeaturesConfig,
        token: SpotifyToken,
        files: Iterable[FileDescriptor],
    ) -> ProgressChannel: ...


class UrlInfoService(Protocol):
    def query(self, url: str, confidence: float) -> UrlInfo: ...


class UiServer(Protocol):
    def start(self, expose: bool, start_path: str | None, browser: bool) -> None: ...


@dataclass
class EngineRegistry:
    tagger: TaggingEngine | None = None
    audiofeatures: AudioFeaturesEngine | None = None
    url_info: UrlInfoService | None = None
    ui_server: UiServer | None = None
    _names: tuple[str, ...] = field(
        default=("tagger", "audiofeatures", "url_info", "ui_server"), repr=False
    )

    @classmethod
    def from_entry_points(cls) -> "EngineRegistry":
        """Instantiates every installed engine."""
        registry = cls()
        for ep in entry_points(group=ENTRY_POINT_GROUP):
            if ep.name not in registry._names:
                log.debug(f"Ignoring unknown engine entry point '{ep.name}'")
                continue
            try:
                setattr(registry, ep.name, ep.load()())
            except Exception as e:
                log.warning(f"[yellow]Failed loading engine '{ep.name}':[/yellow] {e}")
        return registry

    def require(self, name: str):
        engine = getattr(self, name, None)
        if engine is None:
            raise EngineUnavailable(
                f"No '{name}' engine is installed. Install a package that "
                f"provides the '{ENTRY_POINT_GROUP}' entry point '{name}'."
            )
        return engine
