"""Error taxonomy for flotilla.

Configuration errors are raised synchronously before any network call.
Discovery errors are region-scoped, eligibility and remote command errors
are target-scoped and end up recorded on a ``TargetResult`` instead of
propagating.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flotilla.core.eligibility import EligibilityRejection


class FlotillaError(Exception):
    """Base class for all flotilla errors."""


class ConfigurationError(FlotillaError, ValueError):
    """Invalid user input or configuration, detected before dispatch."""


class DiscoveryError(FlotillaError):
    """Targets in a region could not be listed or described.

    Parameters
    ----------
    region : str
        Region in which discovery failed
    message : str
        Human-readable failure description
    """

    def __init__(self, region: str, message: str) -> None:
        self.region = region
        super().__init__(message)


class EligibilityError(FlotillaError):
    """A target was rejected by the eligibility gate.

    No call to the cloud or remote execution collaborator was attempted.

    Parameters
    ----------
    rejection : EligibilityRejection
        The gate verdict with reasons and suggested remediation
    """

    def __init__(self, rejection: EligibilityRejection) -> None:
        self.rejection = rejection
        super().__init__(rejection.reason)


class RemoteCommandError(FlotillaError):
    """The remote command could not be delivered or its result never arrived."""
