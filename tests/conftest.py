"""Shared pytest fixtures."""

from __future__ import annotations

import io
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from rich.console import Console


@pytest.fixture(autouse=True)
def reset_tagbatch_logger() -> Iterator[None]:
    """Undo handlers installed by CLI tests so caplog keeps working."""

    yield
    logger = logging.getLogger("tagbatch")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def console() -> Console:
    """A non-interactive console writing into a buffer."""

    return Console(file=io.StringIO(), force_terminal=False, width=400)


@pytest.fixture
def config_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the config directory at a temporary location."""

    home = tmp_path / "config-home"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home))
    monkeypatch.setenv("APPDATA", str(home))
    return home / "tagbatch"


@pytest.fixture
def music_tree(tmp_path: Path) -> Path:
    """A library with audio files at the root and in a subfolder.

    The audio files are empty placeholders; their tags cannot be read.
    """

    root = tmp_path / "music"
    (root / "sub").mkdir(parents=True)
    (root / "one.mp3").write_bytes(b"one")
    (root / "two.flac").write_bytes(b"two")
    (root / "cover.jpg").write_bytes(b"jpg")
    (root / "notes.txt").write_text("not audio")
    (root / "sub" / "three.mp3").write_bytes(b"three")
    return root
