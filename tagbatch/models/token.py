"""
Pydantic model for a cached Spotify OAuth token.
"""

import time
from typing import Any

from pydantic import BaseModel


class SpotifyToken(BaseModel):
    access_token: str
    token_type: str = "Bearer"
    expires_at: float
    refresh_token: str | None = None
    scope: str = ""

    @classmethod
    def from_response(
        cls, payload: dict[str, Any], previous: "SpotifyToken | None" = None
    ) -> "SpotifyToken":
        """Builds a token from a token endpoint response."""
        refresh_token = payload.get("refresh_token")
        if not refresh_token and previous:
            refresh_token = previous.refresh_token
        return cls(
            access_token=payload["access_token"],
            token_type=payload.get("token_type", "Bearer"),
            expires_at=time.time() + int(payload.get("expires_in", 3600)),
            refresh_token=refresh_token,
            scope=payload.get("scope", ""),
        )

    def is_expired(self, leeway: float = 60.0) -> bool:
        return time.time() + leeway >= self.expires_at
