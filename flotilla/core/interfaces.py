"""Collaborator protocols the engine depends on.

The engine talks to the cloud only through these two protocols. Providers
register concrete classes for them in ``flotilla.providers``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

from flotilla.core.models import CommandOutput, PowerTransition, TargetDescriptor


class CloudControl(Protocol):
    """Instance discovery, state lookup and power transitions for one provider."""

    def discover_targets(
        self, region: str, tags: Mapping[str, str]
    ) -> list[TargetDescriptor]:
        """List targets in a region whose tags exactly match ``tags``.

        Parameters
        ----------
        region : str
            Region to search
        tags : Mapping[str, str]
            Tag key to exact value; empty means every instance

        Returns
        -------
        list[TargetDescriptor]
            Matching targets with lifecycle state and agent status filled in
        """
        ...

    def get_target_state(self, region: str, target_id: str) -> TargetDescriptor:
        """Look up the current state of one target.

        Raises
        ------
        ProviderError
            If the target does not exist or the lookup fails
        """
        ...

    def transition_power(
        self, region: str, target_id: str, transition: PowerTransition
    ) -> None:
        """Request a power transition without waiting for it to complete."""
        ...


class RemoteCommandRunner(Protocol):
    """Synchronous remote shell execution on a target."""

    def run_remote_command(
        self, region: str, target_id: str, command: str
    ) -> CommandOutput:
        """Run ``command`` on the target and block until it finishes.

        Raises
        ------
        RemoteCommandError
            If the command could not be delivered or never reported a result
        """
        ...
