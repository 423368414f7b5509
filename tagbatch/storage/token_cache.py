"""
A file-based JSON cache for Spotify OAuth tokens, one file per client ID.
"""

import hashlib
import json
import logging
from pathlib import Path

from pydantic import ValidationError

from tagbatch.models.token import SpotifyToken

log = logging.getLogger(__name__)


class TokenCache:
    """
    Stores tokens on disk. Only the authorizer reads or writes it; callers hand
    the cache over and never see the stored credentials.
    """

    def __init__(self, cache_dir_path: Path):
        """
        Initializes the token cache.

        Args:
            cache_dir_path: The directory where token files will be stored.
        """
        self.cache_dir = cache_dir_path

    def _get_cache_path(self, client_id: str) -> Path:
        """Generates a safe filename for a given client ID."""
        hashed_key = hashlib.md5(client_id.encode("utf-8")).hexdigest()  # noqa: S324
        return self.cache_dir / f"spotify_token_{hashed_key[:16]}.json"

    def get(self, client_id: str) -> SpotifyToken | None:
        """Returns the cached token for a client, or None if missing or unreadable."""
        cache_path = self._get_cache_path(client_id)
        if not cache_path.is_file():
            return None
        try:
            with open(cache_path, encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                log.warning(f"Ignoring malformed token cache '{cache_path.name}'")
                return None
            return SpotifyToken.model_validate(data.get("token"))
        except (json.JSONDecodeError, OSError, ValidationError) as e:
            log.warning(f"Ignoring unreadable token cache '{cache_path.name}': {e}")
            return None

    def set(self, client_id: str, token: SpotifyToken) -> bool:
        cache_path = self._get_cache_path(client_id)
        payload = {"client_id": client_id, "token": token.model_dump()}
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            with open(cache_path, "w", encoding="utf-8") as f:
                json.dump(payload, f)
            return True
        except OSError as e:
            log.warning(f"Token cache write failed: {e}")
            return False

    def clear(self, client_id: str) -> bool:
        try:
            self._get_cache_path(client_id).unlink(missing_ok=True)
            return True
        except OSError as e:
            log.error(f"Failed to clear token cache: {e}")
            return False
