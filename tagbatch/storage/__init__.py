"""
Storage Layer.

This package handles data persistence: resolving configuration files and
caching Spotify tokens.
"""

from .config_manager import ConfigManager
from .token_cache import TokenCache

__all__ = ["ConfigManager", "TokenCache"]
