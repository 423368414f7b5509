"""
Media Layer.

This package discovers the audio files an action works on, reads playlists and
loads the tag metadata attached to each file descriptor.
"""

from .files import AUDIO_EXTENSIONS, enumerate_files, load_descriptor
from .playlist import is_playlist, read_playlist

__all__ = [
    "AUDIO_EXTENSIONS",
    "enumerate_files",
    "is_playlist",
    "load_descriptor",
    "read_playlist",
]
