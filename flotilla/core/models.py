"""Data model shared by the resolver, the gate, the executors and the report.

Every object here is immutable once built. Workers never mutate a target,
request or result after creation, so they can be handed across threads
without locking.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Union

from flotilla.constants import AGENT_UNKNOWN, STATE_UNKNOWN
from flotilla.core.exceptions import ConfigurationError, EligibilityError
from flotilla.core.fanout import validate_parallelism


class PowerTransition(Enum):
    """Power-state transitions a target can be asked to perform."""

    START = "start"
    STOP = "stop"
    REBOOT = "reboot"

    @property
    def progressive(self) -> str:
        """Present participle used in log lines ("Starting", "Rebooting")."""
        return {
            PowerTransition.START: "Starting",
            PowerTransition.STOP: "Stopping",
            PowerTransition.REBOOT: "Rebooting",
        }[self]


@dataclass(frozen=True)
class Command:
    """Shell command to run on each target through the remote agent."""

    text: str

    def __post_init__(self) -> None:
        if not self.text or not self.text.strip():
            raise ConfigurationError("Command must not be empty")


Operation = Union[Command, PowerTransition]


def operation_name(operation: Operation) -> str:
    """Return the short name of an operation for messages and logs.

    Parameters
    ----------
    operation : Operation
        Command or power transition

    Returns
    -------
    str
        ``"execute commands"`` for commands, the transition value otherwise
    """
    if isinstance(operation, Command):
        return "execute commands"
    return operation.value


@dataclass(frozen=True)
class TargetDescriptor:
    """An addressable compute instance and its last-known state."""

    id: str
    display_name: str
    lifecycle_state: str = STATE_UNKNOWN
    agent_status: str = AGENT_UNKNOWN

    @classmethod
    def from_id(cls, instance_id: str) -> TargetDescriptor:
        """Build a placeholder descriptor for an explicitly named target."""
        return cls(id=instance_id, display_name=instance_id)

    @property
    def needs_state_lookup(self) -> bool:
        """Whether the lifecycle state still has to be fetched."""
        return self.lifecycle_state == STATE_UNKNOWN


@dataclass(frozen=True)
class TargetScope:
    """What the user asked to act on: explicit ids or a tag filter.

    Exactly one of ``instance_ids`` and ``tags`` is set. Build it through
    ``flotilla.core.resolver.parse_scope`` so parse errors surface before
    any discovery call.
    """

    instance_ids: tuple[str, ...] | None = None
    tags: Mapping[str, str] | None = None

    @property
    def is_explicit(self) -> bool:
        return self.instance_ids is not None

    def describe(self) -> str:
        if self.instance_ids is not None:
            return "instances " + ",".join(self.instance_ids)
        pairs = ",".join(f"{k}={v}" for k, v in (self.tags or {}).items())
        return f"tags {pairs}"


@dataclass(frozen=True)
class OperationRequest:
    """One operation to apply to the targets of one region.

    When ``targets`` is None the region worker resolves ``scope`` first.
    """

    operation: Operation
    region: str
    scope: TargetScope | None = None
    targets: tuple[TargetDescriptor, ...] | None = None
    parallelism: int = 1

    def __post_init__(self) -> None:
        validate_parallelism(self.parallelism, "parallelism")

        if self.scope is None and self.targets is None:
            raise ConfigurationError(
                "An operation request needs either a target scope or resolved targets"
            )


@dataclass(frozen=True)
class CommandOutput:
    """What the remote execution collaborator returns for one command."""

    stdout: str = ""
    stderr: str = ""
    exit_code: int | None = None


@dataclass(frozen=True)
class TargetResult:
    """Outcome of one operation on one target.

    ``error`` set means the operation never produced a result (eligibility
    rejection, lookup failure, transport failure). ``exit_code`` set with
    no ``error`` means the command ran; a non-zero value is a failure of
    the command itself.
    """

    target: TargetDescriptor
    output: str = ""
    error_output: str = ""
    exit_code: int | None = None
    error: Exception | None = None
    duration: float = 0.0

    @property
    def ran(self) -> bool:
        return self.error is None

    @property
    def succeeded(self) -> bool:
        return self.error is None and (self.exit_code is None or self.exit_code == 0)

    @property
    def rejected(self) -> bool:
        return isinstance(self.error, EligibilityError)


@dataclass(frozen=True)
class RegionResult:
    """All target results for one region, or the reason there are none."""

    region: str
    region_display_name: str
    target_results: tuple[TargetResult, ...] = field(default_factory=tuple)
    region_error: Exception | None = None
    duration: float = 0.0

    @property
    def successful(self) -> int:
        return sum(1 for result in self.target_results if result.succeeded)

    @property
    def failed(self) -> int:
        return len(self.target_results) - self.successful

    @property
    def succeeded(self) -> bool:
        return self.region_error is None and self.failed == 0
