"""Provider registry and management.

Each provider registers the classes implementing the ``CloudControl`` and
``RemoteCommandRunner`` protocols together with its default region. The
run context asks the registry for them by provider name.
"""

from __future__ import annotations

from typing import Any

from flotilla.providers.aws import EC2Manager, SSMCommandRunner
from flotilla.providers.aws.constants import DEFAULT_REGION
from flotilla.providers.exceptions import (
    ProviderAPIError,
    ProviderConnectionError,
    ProviderCredentialsError,
    ProviderError,
)

_PROVIDERS: dict[str, dict[str, Any]] = {}


def register_provider(
    name: str,
    cloud_class: type,
    command_class: type,
    default_region: str | None = None,
) -> None:
    """Register a cloud provider implementation.

    Parameters
    ----------
    name : str
        Provider name (e.g., 'aws')
    cloud_class : type
        Class implementing the CloudControl protocol
    command_class : type
        Class implementing the RemoteCommandRunner protocol
    default_region : str | None
        Default region for this provider
    """
    _PROVIDERS[name] = {
        "cloud": cloud_class,
        "commands": command_class,
        "default_region": default_region,
    }


def get_provider(name: str) -> dict[str, Any]:
    """Get a registered provider by name.

    Raises
    ------
    ValueError
        If provider is not registered
    """
    if name not in _PROVIDERS:
        raise ValueError(f"Unknown provider: {name}")
    return _PROVIDERS[name]


def list_providers() -> list[str]:
    return list(_PROVIDERS.keys())


def get_default_region(provider_name: str) -> str:
    """Get the default region for a provider.

    Raises
    ------
    ValueError
        If provider is not registered or has no default region
    """
    default_region = get_provider(provider_name).get("default_region")

    if default_region is None:
        raise ValueError(f"No default region defined for provider: {provider_name}")

    return default_region


__all__ = [
    "register_provider",
    "get_provider",
    "list_providers",
    "get_default_region",
    "ProviderError",
    "ProviderCredentialsError",
    "ProviderAPIError",
    "ProviderConnectionError",
]

register_provider("aws", EC2Manager, SSMCommandRunner, DEFAULT_REGION)
