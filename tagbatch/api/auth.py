"""
Handles the Spotify OAuth authorization code flow, either by prompting for the
redirected URL or by receiving the redirect on a local callback server.
"""

import asyncio
import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any
from urllib.parse import parse_qs, urlencode, urlparse

import aiohttp
from rich.console import Console

from tagbatch.exceptions import AuthError
from tagbatch.models.token import SpotifyToken
from tagbatch.storage.token_cache import TokenCache

from .callback_server import CALLBACK_PATH, DEFAULT_PORT, CallbackServer

log = logging.getLogger(__name__)

AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
TOKEN_URL = "https://accounts.spotify.com/api/token"
REDIRECT_URI = f"http://127.0.0.1:{DEFAULT_PORT}{CALLBACK_PATH}"
SCOPES = "user-read-private playlist-read-private user-library-read"


class AuthMode(str, Enum):
    PROMPT = "prompt"
    SERVER = "server"


@dataclass
class AuthSession:
    """State of one authorization attempt. Never persisted."""

    client_id: str
    client_secret: str
    redirect_uri: str
    state: str
    auth_url: str


def extract_code(query: str, expected_state: str | None = None) -> str:
    """
    Extracts the authorization code from a redirect URL or its query string.

    Raises:
        AuthError: If the redirect carries an error, no code, or a wrong state.
    """
    if "://" in query:
        query = urlparse(query).query
    params = parse_qs(query.lstrip("?"))
    if "error" in params:
        raise AuthError(f"Spotify denied the authorization: {params['error'][0]}")
    if expected_state is not None and params.get("state", [None])[0] != expected_state:
        raise AuthError("State mismatch in the redirect, refusing the code.")
    code = params.get("code", [""])[0]
    if not code:
        raise AuthError("The redirect URL does not contain an authorization code.")
    return code


class SpotifyAuthorizer:
    """
    Drives the authorization flow and owns the token cache.
    """

    def __init__(
        self,
        cache: TokenCache,
        console: Console | None = None,
        redirect_uri: str = REDIRECT_URI,
        timeout: float = 300.0,
    ):
        """
        Initializes the authorizer.

        Args:
            cache: Where exchanged tokens are stored.
            console: Console used to show the authorization URL.
            redirect_uri: Redirect URI registered for the Spotify app.
            timeout: Seconds the callback server waits for the redirect.
        """
        self._cache = cache
        self.console = console or Console()
        self.redirect_uri = redirect_uri
        self.timeout = timeout

    def create_session(self, client_id: str, client_secret: str) -> AuthSession:
        if not client_id or not client_secret:
            raise AuthError("Spotify client ID and secret are required.")
        state = secrets.token_urlsafe(16)
        query = urlencode(
            {
                "client_id": client_id,
                "response_type": "code",
                "redirect_uri": self.redirect_uri,
                "scope": SCOPES,
                "state": state,
            }
        )
        return AuthSession(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=self.redirect_uri,
            state=state,
            auth_url=f"{AUTHORIZE_URL}?{query}",
        )

    def authorize(
        self,
        client_id: str,
        client_secret: str,
        mode: AuthMode,
        expose: bool = False,
        input_fn: Callable[[str], str] | None = None,
        server: CallbackServer | None = None,
    ) -> SpotifyToken:
        """
        Runs the full flow and caches the resulting token.

        Raises:
            AuthError: If any step fails.
        """
        session = self.create_session(client_id, client_secret)
        self.console.print(
            f"\nPlease go to the following URL and authorize the app:\n{session.auth_url}"
        )

        if mode == AuthMode.PROMPT:
            code = self._prompt_for_code(session, input_fn or self.console.input)
        else:
            code = self._wait_for_callback(session, server or CallbackServer(expose))

        token = self.exchange_code(session, code)
        if not self._cache.set(client_id, token):
            raise AuthError("Failed to cache the Spotify token.")
        log.info("[green]Successfully authorized Spotify![/green]")
        return token

    def cached_token(self, client_id: str, client_secret: str) -> SpotifyToken:
        """
        Returns the cached token for a client, refreshing it when expired.

        Raises:
            AuthError: If no token is cached or refreshing fails.
        """
        token = self._cache.get(client_id)
        if token is None:
            raise AuthError(
                "Spotify unauthorized, please run the authorize-spotify action first."
            )
        if not token.is_expired():
            return token
        if not token.refresh_token:
            raise AuthError("Cached Spotify token expired and cannot be refreshed.")

        log.info("Refreshing Spotify token...")
        payload = self._request_token(
            client_id,
            client_secret,
            {"grant_type": "refresh_token", "refresh_token": token.refresh_token},
        )
        refreshed = SpotifyToken.from_response(payload, previous=token)
        self._cache.set(client_id, refreshed)
        return refreshed

    def exchange_code(self, session: AuthSession, code: str) -> SpotifyToken:
        payload = self._request_token(
            session.client_id,
            session.client_secret,
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": session.redirect_uri,
            },
        )
        return SpotifyToken.from_response(payload)

    def _prompt_for_code(
        self, session: AuthSession, input_fn: Callable[[str], str]
    ) -> str:
        try:
            url = input_fn("\nEnter the URL you were redirected to and press enter: ")
        except (EOFError, KeyboardInterrupt) as e:
            raise AuthError("Authorization cancelled.") from e
        if not url or not url.strip():
            raise AuthError("No redirect URL entered.")
        return extract_code(url.strip(), session.state)

    def _wait_for_callback(self, session: AuthSession, server: CallbackServer) -> str:
        server.start()
        log.info(
            f"Waiting for Spotify redirect on {server.host}:{server.port} "
            f"(timeout {self.timeout:.0f}s)..."
        )
        query = server.wait_for_redirect(self.timeout)
        return extract_code(query, session.state)

    def _request_token(
        self, client_id: str, client_secret: str, form: dict[str, str]
    ) -> dict[str, Any]:
        return asyncio.run(self._post_token(client_id, client_secret, form))

    async def _post_token(
        self, client_id: str, client_secret: str, form: dict[str, str]
    ) -> dict[str, Any]:
        timeout = aiohttp.ClientTimeout(total=30, connect=10)
        try:
            async with (
                aiohttp.ClientSession(timeout=timeout) as http,
                http.post(
                    TOKEN_URL,
                    data=form,
                    auth=aiohttp.BasicAuth(client_id, client_secret),
                ) as resp,
            ):
                if resp.status != 200:
                    body = await resp.text()
                    raise AuthError(
                        f"Spotify token request failed ({resp.status}): {body}"
                    )
                payload = await resp.json(content_type=None)
        except aiohttp.ClientError as e:
            raise AuthError(f"Network error while contacting Spotify: {e}") from e
        except asyncio.TimeoutError as e:
            raise AuthError("Timed out while contacting Spotify.") from e

        if not isinstance(payload, dict) or "access_token" not in payload:
            raise AuthError("Spotify token response is missing the access token.")
        return payload
