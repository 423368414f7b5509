"""
Data Models Layer.

This package contains the Pydantic models and dataclasses that define the core
data structures used throughout the application: job configurations, file
descriptors and progress events.
"""

from .config import (
    AudioFeatureProperty,
    AudioFeaturesConfig,
    RenamerConfig,
    SupportedTag,
    TaggerConfig,
)
from .events import EventStatus, ProgressChannel, ProgressEvent
from .files import FileDescriptor

__all__ = [
    "AudioFeatureProperty",
    "AudioFeaturesConfig",
    "EventStatus",
    "FileDescriptor",
    "ProgressChannel",
    "ProgressEvent",
    "RenamerConfig",
    "SupportedTag",
    "TaggerConfig",
]
