"""
A one-shot HTTP listener that receives the Spotify OAuth redirect.

The listener runs an aiohttp application on its own event loop in a
background thread. The first redirect it receives is handed to the waiting
caller through a single-slot queue; after that the listener is shut down.
"""

import asyncio
import logging
import queue
import threading

from aiohttp import web

from tagbatch.exceptions import AuthError, AuthTimeoutError

log = logging.getLogger(__name__)

DEFAULT_PORT = 36914
CALLBACK_PATH = "/spotify"

_SUCCESS_PAGE = (
    "<html><body><h2>Authorization received.</h2>"
    "<p>You can close this window and return to the terminal.</p></body></html>"
)


class CallbackServer:
    """Hosts the OAuth callback until one redirect has been received."""

    def __init__(
        self, expose: bool = False, port: int = DEFAULT_PORT, path: str = CALLBACK_PATH
    ):
        self.host = "0.0.0.0" if expose else "127.0.0.1"  # noqa: S104
        self.port = port
        self.path = path
        self._handoff: queue.Queue = queue.Queue(maxsize=1)
        self._ready = threading.Event()
        self._shutdown = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Starts the listener thread."""
        self._thread = threading.Thread(
            target=self._run, name="spotify-callback", daemon=True
        )
        self._thread.start()

    def wait_ready(self, timeout: float | None = None) -> bool:
        return self._ready.wait(timeout)

    def wait_for_redirect(self, timeout: float) -> str:
        """
        Blocks until the redirect query string arrives, then tears the
        listener down.

        Raises:
            AuthTimeoutError: If nothing arrives within `timeout` seconds.
            AuthError: If the listener failed.
        """
        try:
            message = self._handoff.get(timeout=timeout)
        except queue.Empty:
            raise AuthTimeoutError(
                f"No authorization callback received within {timeout:.0f} seconds."
            ) from None
        finally:
            self.stop()

        if isinstance(message, Exception):
            raise message
        return message

    def stop(self) -> None:
        self._shutdown.set()
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join(timeout=5)

    def _deliver(self, message: str | Exception) -> bool:
        try:
            self._handoff.put_nowait(message)
            return True
        except queue.Full:
            return False

    def _run(self) -> None:
        try:
            asyncio.run(self._serve())
        except OSError as e:
            self._deliver(
                AuthError(
                    f"Failed starting callback server on {self.host}:{self.port}: {e}"
                )
            )
        except Exception as e:
            log.error(f"Callback server failed: {e}", exc_info=True)
            self._deliver(AuthError(f"Callback server failed: {e}"))
        finally:
            self._ready.set()

    async def _serve(self) -> None:
        app = web.Application()
        app.router.add_get(self.path, self._handle_redirect)
        runner = web.AppRunner(app, access_log=None)
        await runner.setup()
        try:
            site = web.TCPSite(runner, self.host, self.port)
            await site.start()
            log.debug(f"Callback server listening on http://{self.host}:{self.port}")
            self._ready.set()
            while not self._shutdown.is_set():
                await asyncio.sleep(0.1)
        finally:
            await runner.cleanup()
            log.debug("Callback server stopped.")

    async def _handle_redirect(self, request: web.Request) -> web.Response:
        if not self._deliver(request.query_string):
            return web.Response(status=410, text="Authorization already received.")
        return web.Response(text=_SUCCESS_PAGE, content_type="text/html")
