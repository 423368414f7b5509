"""Tests for playlist reading."""

from __future__ import annotations

from pathlib import Path

import pytest

from tagbatch.exceptions import PlaylistError
from tagbatch.media.playlist import is_playlist, read_playlist


def test_is_playlist() -> None:
    assert is_playlist(Path("a.m3u"))
    assert is_playlist(Path("a.M3U8"))
    assert is_playlist(Path("a.pls"))
    assert not is_playlist(Path("a.mp3"))


def test_m3u_entries_resolve_against_playlist_dir(tmp_path: Path) -> None:
    absolute = tmp_path / "elsewhere" / "abs.mp3"
    playlist = tmp_path / "lists" / "set.m3u"
    playlist.parent.mkdir()
    _ = playlist.write_text(
        "#EXTM3U\n"
        "#EXTINF:123,Artist - Title\n"
        "../music/one.mp3\n"
        "\n"
        f"{absolute}\n"
        "file:///tmp/some%20file.flac\n"
    )

    entries = read_playlist(playlist)

    assert entries == [
        playlist.parent / "../music/one.mp3",
        absolute,
        Path("/tmp/some file.flac"),
    ]


def test_m3u8_with_bom(tmp_path: Path) -> None:
    playlist = tmp_path / "set.m3u8"
    _ = playlist.write_bytes("\ufeffone.mp3\ntwo.mp3\n".encode())

    assert read_playlist(playlist) == [tmp_path / "one.mp3", tmp_path / "two.mp3"]


def test_pls_entries_in_numeric_order(tmp_path: Path) -> None:
    playlist = tmp_path / "set.pls"
    _ = playlist.write_text(
        "[playlist]\n"
        "File10=ten.mp3\n"
        "File2=two.mp3\n"
        "Title2=Two\n"
        "File1=one.mp3\n"
        "NumberOfEntries=3\n"
        "Version=2\n"
    )

    assert read_playlist(playlist) == [
        tmp_path / "one.mp3",
        tmp_path / "two.mp3",
        tmp_path / "ten.mp3",
    ]


def test_pls_without_section(tmp_path: Path) -> None:
    playlist = tmp_path / "set.pls"
    _ = playlist.write_text("[other]\nFile1=one.mp3\n")

    with pytest.raises(PlaylistError, match="Missing"):
        _ = read_playlist(playlist)


def test_not_a_playlist(tmp_path: Path) -> None:
    path = tmp_path / "song.mp3"
    _ = path.write_bytes(b"")

    with pytest.raises(PlaylistError):
        _ = read_playlist(path)
