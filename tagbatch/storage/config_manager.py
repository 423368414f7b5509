"""
Resolves the job configuration for an action from the built-in defaults, an
optional JSON config file and the command line overrides.
"""

import logging
import re
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from tagbatch.core.actions import AudioFeatures, Autotagger, TaggerOverrides
from tagbatch.exceptions import ConfigError
from tagbatch.models.config import AudioFeaturesConfig, SupportedTag, TaggerConfig

log = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_WORD_RE = re.compile(r"[A-Z]?[a-z]+|[A-Z]+(?![a-z])|\d+")


def to_camel_case(value: str) -> str:
    """Converts 'album-art', 'album_art' or 'Album Art' to 'albumArt'."""
    words = [w.lower() for w in _WORD_RE.findall(value.strip())]
    if not words:
        return ""
    head, *tail = words
    return head + "".join(w.capitalize() for w in tail)


def parse_tag_list(raw: str) -> list[SupportedTag]:
    """
    Parses a comma separated list of tag names.

    Entries that are not known tags are dropped with a warning; the remaining
    entries keep their order.
    """
    tags = []
    for entry in raw.split(","):
        try:
            tags.append(SupportedTag(to_camel_case(entry)))
        except ValueError:
            log.warning(f"Invalid tag: {entry}")
    return tags


def dump_default(kind: str) -> str:
    """Returns the default configuration of an action kind as pretty JSON."""
    defaults = {
        "autotagger": TaggerConfig.custom_default,
        "audiofeatures": AudioFeaturesConfig,
    }
    if kind not in defaults:
        raise ConfigError(f"No default configuration for '{kind}'.")
    return defaults[kind]().model_dump_json(indent=2)


class ConfigManager:
    """Builds the canonical, immutable configuration for a tagging action."""

    def resolve(
        self, action: Autotagger | AudioFeatures
    ) -> TaggerConfig | AudioFeaturesConfig:
        """
        Resolves the configuration for an action.

        Args:
            action: The autotagger or audio features action.

        Returns:
            A validated, frozen configuration.

        Raises:
            ConfigError: If the config file is missing, invalid, or validation
            of the merged configuration fails.
        """
        if isinstance(action, Autotagger):
            return self.resolve_tagger(action)
        if isinstance(action, AudioFeatures):
            return self.resolve_audio_features(action)
        raise ConfigError(f"Action '{type(action).__name__}' has no job configuration.")

    def resolve_tagger(self, action: Autotagger) -> TaggerConfig:
        if action.config:
            base = self.load_file(action.config, TaggerConfig)
        else:
            base = TaggerConfig.custom_default()
        updates = self._tagger_updates(base, action.overrides)
        updates["path"] = action.path
        config = self._merge(base, updates)
        log.debug(f"Resolved autotagger config: {config!r}")
        return config

    def resolve_audio_features(self, action: AudioFeatures) -> AudioFeaturesConfig:
        if action.config:
            base = self.load_file(action.config, AudioFeaturesConfig)
        else:
            base = AudioFeaturesConfig()
        updates: dict[str, Any] = {"path": action.path}
        if action.no_subfolders:
            updates["include_subfolders"] = False
        return self._merge(base, updates)

    @staticmethod
    def load_file(config_path: Path, model: type[ModelT]) -> ModelT:
        """Loads and validates a JSON config file."""
        if not config_path.is_file():
            raise ConfigError(f"Configuration file not found at '{config_path}'.")
        try:
            raw = config_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Failed reading configuration file: {e}") from e
        try:
            return model.model_validate_json(raw)
        except ValidationError as e:
            raise ConfigError(f"Failed parsing configuration file:\n{e}") from e

    @staticmethod
    def _tagger_updates(base: TaggerConfig, overrides: TaggerOverrides) -> dict[str, Any]:
        """Collects only the overrides that were actually given on the command line."""
        updates: dict[str, Any] = {
            key: value
            for key, value in {
                "threads": overrides.threads,
                "max_duration_difference": overrides.max_duration_difference,
                "filename_template": overrides.filename_template,
            }.items()
            if value is not None
        }

        if overrides.platforms is not None:
            updates["platforms"] = [
                p.strip() for p in overrides.platforms.split(",") if p.strip()
            ]
        if overrides.tags is not None:
            updates["tags"] = parse_tag_list(overrides.tags)

        # Feature switches a flag may turn on, but never off.
        switches = {
            "id3v24": overrides.id3v24,
            "overwrite": overrides.overwrite,
            "album_art_file": overrides.album_art_file,
            "merge_genres": overrides.merge_genres,
            "camelot": overrides.camelot,
            "short_title": overrides.short_title,
            "match_duration": overrides.match_duration,
            "match_by_id": overrides.match_by_id,
            "enable_shazam": overrides.enable_shazam,
            "force_shazam": overrides.force_shazam,
            "skip_tagged": overrides.skip_tagged,
            "parse_filename": overrides.parse_filename,
            "only_year": overrides.only_year,
            "multiplatform": overrides.multiplatform,
        }
        updates.update({name: True for name, on in switches.items() if on})

        if overrides.strictness is not None:
            if 0 <= overrides.strictness <= 100:
                updates["strictness"] = overrides.strictness / 100.0
            else:
                log.warning(
                    f"Invalid strictness: {overrides.strictness}, keeping "
                    f"{base.strictness}."
                )

        # The one override allowed to switch a feature off.
        if overrides.no_subfolders:
            updates["include_subfolders"] = False
        return updates

    @staticmethod
    def _merge(base: ModelT, updates: dict[str, Any]) -> ModelT:
        try:
            return type(base).model_validate({**base.model_dump(), **updates})
        except ValidationError as e:
            raise ConfigError(f"Configuration validation failed:\n{e}") from e
