"""Per-run collaborator wiring."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from flotilla.constants import DEFAULT_COMMAND_MAX_WAIT, DEFAULT_COMMAND_POLL_INTERVAL
from flotilla.core.interfaces import CloudControl, RemoteCommandRunner
from flotilla.providers import get_provider
from flotilla.providers.aws.clients import ClientCache
from flotilla.providers.aws.regions import describe_region


@dataclass(frozen=True)
class RunContext:
    """Collaborators for one invocation, built once and passed explicitly.

    Attributes
    ----------
    cloud : CloudControl
        Discovery, state lookup and power transitions
    commands : RemoteCommandRunner
        Remote shell execution
    describe_region : Callable[[str], str]
        Maps a region name to its display name
    """

    cloud: CloudControl
    commands: RemoteCommandRunner
    describe_region: Callable[[str], str] = str

    @classmethod
    def for_provider(
        cls,
        provider: str = "aws",
        command_settings: dict[str, Any] | None = None,
        boto3_client_factory: Any | None = None,
    ) -> RunContext:
        """Build a context backed by a registered provider.

        Parameters
        ----------
        provider : str
            Registered provider name
        command_settings : dict[str, Any] | None
            ``command`` section of the configuration (``poll_interval``,
            ``max_wait``)
        boto3_client_factory : Callable[..., Any] | None
            Optional factory for creating boto3 clients. If None, uses boto3.client

        Raises
        ------
        ValueError
            If the provider is not registered
        """
        provider_info = get_provider(provider)
        settings = command_settings or {}
        clients = ClientCache(boto3_client_factory)

        return cls(
            cloud=provider_info["cloud"](clients=clients),
            commands=provider_info["commands"](
                clients=clients,
                poll_interval=settings.get("poll_interval", DEFAULT_COMMAND_POLL_INTERVAL),
                max_wait=settings.get("max_wait", DEFAULT_COMMAND_MAX_WAIT),
            ),
            describe_region=describe_region,
        )
