"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class TagbatchError(Exception):
    """Base exception for all application-specific errors."""


class ConfigError(TagbatchError):
    """Raised when a configuration file is missing or cannot be parsed/validated."""


class PlaylistError(TagbatchError):
    """Raised when a file passed as input is not a recognized playlist."""


class InputPathError(TagbatchError):
    """Raised when the input path does not exist."""


class InvalidInvocation(TagbatchError):
    """
    Raised when an external process would be started with an incomplete group
    of arguments.
    """


class ScriptNotFound(TagbatchError):
    """Raised when the downloader script cannot be found."""


class ExternalProcessFailure(TagbatchError):
    """Raised when an external process exits with a non-zero status."""

    def __init__(self, message: str, returncode: int | None = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class AuthError(TagbatchError):
    """Raised when any step of the Spotify authorization flow fails."""


class AuthTimeoutError(AuthError):
    """Raised when the OAuth callback was not received in time."""


class TemplateError(TagbatchError):
    """Raised for malformed templates or templates referencing unknown fields."""


class DestinationExists(TagbatchError):
    """Raised for a single rename entry whose destination is already taken."""


class QueryError(TagbatchError):
    """Raised when URL information could not be retrieved."""


class EngineUnavailable(TagbatchError):
    """Raised when the engine an action delegates to is not installed."""
