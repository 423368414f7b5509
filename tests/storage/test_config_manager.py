"""Tests for configuration resolution and override precedence."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from tagbatch.core.actions import AudioFeatures, Autotagger, TaggerOverrides
from tagbatch.exceptions import ConfigError
from tagbatch.models.config import (
    DEFAULT_TAGS,
    AudioFeaturesConfig,
    SupportedTag,
    TaggerConfig,
)
from tagbatch.storage.config_manager import (
    ConfigManager,
    dump_default,
    parse_tag_list,
    to_camel_case,
)


def _write_config(tmp_path: Path, data: dict) -> Path:
    path = tmp_path / "config.json"
    _ = path.write_text(json.dumps(data))
    return path


class TestDefaults:
    def test_defaults_alone_reproduce_default_config(self, tmp_path: Path) -> None:
        config = ConfigManager().resolve(Autotagger(path=tmp_path))

        expected = TaggerConfig.custom_default().model_copy(update={"path": tmp_path})
        assert config == expected
        assert config.model_dump_json() == expected.model_dump_json()

    def test_dump_default_is_valid_json_of_default(self) -> None:
        dumped = dump_default("autotagger")

        assert json.loads(dumped)["platforms"] == ["beatport"]
        assert TaggerConfig.model_validate_json(dumped) == TaggerConfig.custom_default()

    def test_dump_default_audiofeatures(self) -> None:
        dumped = dump_default("audiofeatures")

        assert AudioFeaturesConfig.model_validate_json(dumped) == AudioFeaturesConfig()

    def test_dump_default_unknown_kind(self) -> None:
        with pytest.raises(ConfigError):
            _ = dump_default("renamer")

    def test_resolved_config_is_frozen(self, tmp_path: Path) -> None:
        config = ConfigManager().resolve(Autotagger(path=tmp_path))

        with pytest.raises(ValidationError):
            config.threads = 2  # type: ignore[misc]


class TestConfigFile:
    def test_file_replaces_default(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path, {"platforms": ["discogs"], "threads": 4})

        config = ConfigManager().resolve(Autotagger(path=tmp_path, config=path))

        assert config.platforms == ["discogs"]
        assert config.threads == 4

    def test_missing_file(self, tmp_path: Path) -> None:
        action = Autotagger(path=tmp_path, config=tmp_path / "nope.json")

        with pytest.raises(ConfigError, match="not found"):
            _ = ConfigManager().resolve(action)

    def test_malformed_json(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        _ = path.write_text("{not json")

        with pytest.raises(ConfigError):
            _ = ConfigManager().resolve(Autotagger(path=tmp_path, config=path))

    def test_schema_violation(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path, {"threads": "many"})

        with pytest.raises(ConfigError):
            _ = ConfigManager().resolve(Autotagger(path=tmp_path, config=path))


class TestOverrides:
    def test_true_flag_wins_over_file(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path, {"merge_genres": False, "camelot": False})
        action = Autotagger(
            path=tmp_path,
            config=path,
            overrides=TaggerOverrides(merge_genres=True),
        )

        config = ConfigManager().resolve(action)

        assert config.merge_genres is True
        assert config.camelot is False

    def test_absent_flag_keeps_file_value(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path, {"merge_genres": True, "threads": 3})

        config = ConfigManager().resolve(Autotagger(path=tmp_path, config=path))

        assert config.merge_genres is True
        assert config.threads == 3

    def test_cli_path_always_applies(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path, {"path": "/somewhere/else"})
        target = tmp_path / "music"

        config = ConfigManager().resolve(Autotagger(path=target, config=path))

        assert config.path == target

    def test_value_overrides(self, tmp_path: Path) -> None:
        overrides = TaggerOverrides(
            platforms=" beatport , discogs,,spotify",
            threads=4,
            max_duration_difference=10,
            filename_template="%artists% - %title%",
        )

        config = ConfigManager().resolve(Autotagger(path=tmp_path, overrides=overrides))

        assert config.platforms == ["beatport", "discogs", "spotify"]
        assert config.threads == 4
        assert config.max_duration_difference == 10
        assert config.filename_template == "%artists% - %title%"

    def test_strictness_in_range(self, tmp_path: Path) -> None:
        overrides = TaggerOverrides(strictness=80)

        config = ConfigManager().resolve(Autotagger(path=tmp_path, overrides=overrides))

        assert config.strictness == pytest.approx(0.80)

    def test_strictness_out_of_range_keeps_base(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        overrides = TaggerOverrides(strictness=150)

        with caplog.at_level(logging.WARNING):
            config = ConfigManager().resolve(
                Autotagger(path=tmp_path, overrides=overrides)
            )

        assert config.strictness == TaggerConfig.custom_default().strictness
        assert "Invalid strictness" in caplog.text

    def test_strictness_bounds_are_inclusive(self, tmp_path: Path) -> None:
        manager = ConfigManager()

        low = manager.resolve(
            Autotagger(path=tmp_path, overrides=TaggerOverrides(strictness=0))
        )
        high = manager.resolve(
            Autotagger(path=tmp_path, overrides=TaggerOverrides(strictness=100))
        )

        assert low.strictness == 0.0
        assert high.strictness == 1.0

    def test_no_subfolders_forces_off(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path, {"include_subfolders": True})
        action = Autotagger(
            path=tmp_path, config=path, overrides=TaggerOverrides(no_subfolders=True)
        )

        assert ConfigManager().resolve(action).include_subfolders is False

    def test_no_subfolders_never_forces_on(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path, {"include_subfolders": False})

        config = ConfigManager().resolve(Autotagger(path=tmp_path, config=path))

        assert config.include_subfolders is False

    def test_invalid_override_is_config_error(self, tmp_path: Path) -> None:
        overrides = TaggerOverrides(threads=0)

        with pytest.raises(ConfigError):
            _ = ConfigManager().resolve(Autotagger(path=tmp_path, overrides=overrides))

    def test_audio_features_no_subfolders(self, tmp_path: Path) -> None:
        action = AudioFeatures(
            path=tmp_path, client_id="id", client_secret="secret", no_subfolders=True
        )

        config = ConfigManager().resolve(action)

        assert config.include_subfolders is False
        assert config.path == tmp_path


class TestTagParsing:
    def test_case_conversion(self) -> None:
        assert to_camel_case("album-art") == "albumArt"
        assert to_camel_case("album_art") == "albumArt"
        assert to_camel_case("Album Art") == "albumArt"
        assert to_camel_case("releaseDate") == "releaseDate"
        assert to_camel_case("ISRC") == "isrc"
        assert to_camel_case("  ") == ""

    def test_invalid_entry_dropped(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            tags = parse_tag_list("genre,bogus,album-art,release_date")

        assert tags == [
            SupportedTag.GENRE,
            SupportedTag.ALBUM_ART,
            SupportedTag.RELEASE_DATE,
        ]
        assert "Invalid tag: bogus" in caplog.text

    def test_parsing_is_idempotent(self) -> None:
        tags = parse_tag_list("Catalog Number,bpm,key,albumArtist")

        assert parse_tag_list(",".join(t.value for t in tags)) == tags

    def test_tags_override_replaces_list(self, tmp_path: Path) -> None:
        overrides = TaggerOverrides(tags="bpm,nonsense,key")

        config = ConfigManager().resolve(Autotagger(path=tmp_path, overrides=overrides))

        assert config.tags == [SupportedTag.BPM, SupportedTag.KEY]
        assert config.tags != DEFAULT_TAGS
