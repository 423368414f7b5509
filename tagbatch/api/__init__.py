"""
Spotify API Layer.

This package handles the OAuth authorization flow and the local callback
server used to receive the redirect.
"""

from .auth import AuthMode, AuthSession, SpotifyAuthorizer
from .callback_server import CallbackServer

__all__ = ["AuthMode", "AuthSession", "CallbackServer", "SpotifyAuthorizer"]
