"""Error taxonomy shared by the lease core, the providers and the HTTP layer."""

from __future__ import annotations

__all__ = [
    "BackendAuthError",
    "BackendUnavailableError",
    "BootstrapTokenError",
    "ConfigurationError",
    "FetchError",
    "LookupTimeoutError",
    "SecretNotFoundError",
    "TokendError",
]


class TokendError(Exception):
    """Base error for every failure surfaced by tokend."""

    status_code: int = 500


class ConfigurationError(TokendError):
    """Raised when a provider is constructed with missing or malformed arguments."""

    status_code = 400


class FetchError(TokendError):
    """Raised when a provider cannot fetch or renew its secret."""

    status_code = 500


class BackendAuthError(FetchError):
    """Raised when the remote backend rejects our credentials."""


class SecretNotFoundError(FetchError):
    """Raised when the remote backend has nothing at the requested path."""


class BackendUnavailableError(FetchError):
    """Raised when the remote backend cannot be reached."""


class LookupTimeoutError(TokendError):
    """Raised when a lookup does not observe a ready manager in time."""

    status_code = 504


class BootstrapTokenError(TokendError):
    """Raised when the default token cannot be made ready."""

    status_code = 503

    def __init__(self, message: str, *, code: str = "TOKENERROR") -> None:
        super().__init__(message)
        self.code = code
