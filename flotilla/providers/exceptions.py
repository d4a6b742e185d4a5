"""Provider-agnostic exceptions raised by cloud provider implementations."""

from __future__ import annotations

from flotilla.core.exceptions import FlotillaError


class ProviderError(FlotillaError):
    """Base class for errors coming from a cloud provider."""


class ProviderCredentialsError(ProviderError):
    """Credentials are missing, invalid or expired."""


class ProviderAPIError(ProviderError):
    """The provider API rejected a request.

    Parameters
    ----------
    message : str
        Human-readable description
    error_code : str | None
        Provider error code such as ``UnauthorizedOperation``
    """

    def __init__(self, message: str, error_code: str | None = None) -> None:
        self.error_code = error_code
        super().__init__(message)


class ProviderConnectionError(ProviderError):
    """The provider endpoint could not be reached."""
