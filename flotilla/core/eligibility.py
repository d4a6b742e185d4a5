"""Pre-flight eligibility gate.

Decides, without any network call, whether a target may receive an
operation. Two independent checks run on every target: the lifecycle state
check and, for remote commands, the agent reachability check. Both are
always evaluated so a rejection can report every problem at once.
"""

from __future__ import annotations

from dataclasses import dataclass

from flotilla.constants import (
    AGENT_ONLINE,
    STATE_PENDING,
    STATE_RUNNING,
    STATE_SHUTTING_DOWN,
    STATE_STOPPED,
    STATE_STOPPING,
    STATE_TERMINATED,
    TRANSITIONAL_AGENT_STATUSES,
)
from flotilla.core.models import (
    Command,
    Operation,
    PowerTransition,
    TargetDescriptor,
    operation_name,
)

AGENT_TROUBLESHOOTING_HINTS = (
    "Agent not installed or not running",
    "Instance lacks the AmazonSSMManagedInstanceCore IAM role",
    "No network path to the SSM endpoints",
    "Instance recently started and the agent is still initializing",
)


@dataclass(frozen=True)
class EligibilityRequirement:
    """What a target must satisfy before an operation is dispatched to it."""

    allowed_states: frozenset[str]
    require_agent_online: bool
    operation_name: str


@dataclass(frozen=True)
class EligibilityRejection:
    """Why a target was refused and what the operator can do about it.

    Attributes
    ----------
    problems : tuple[str, ...]
        One entry per failed check, lifecycle first
    suggestion : str | None
        Follow-up action or command, None when nothing can help
    hints : tuple[str, ...]
        Possible causes, filled in for agent reachability failures
    hard : bool
        True when the target can never become eligible (terminated)
    transitional : bool
        True when the agent was online before and may come back on its own
    """

    problems: tuple[str, ...]
    suggestion: str | None = None
    hints: tuple[str, ...] = ()
    hard: bool = False
    transitional: bool = False

    @property
    def reason(self) -> str:
        return "; ".join(self.problems)


def requirement_for(operation: Operation) -> EligibilityRequirement:
    """Derive the eligibility requirement of an operation.

    Parameters
    ----------
    operation : Operation
        Command or power transition

    Returns
    -------
    EligibilityRequirement
        ``start`` needs a stopped target, ``stop`` and ``reboot`` a running
        one, commands a running target with its agent online
    """
    if isinstance(operation, Command):
        return EligibilityRequirement(
            allowed_states=frozenset((STATE_RUNNING,)),
            require_agent_online=True,
            operation_name=operation_name(operation),
        )

    if operation is PowerTransition.START:
        allowed = frozenset((STATE_STOPPED,))
    else:
        allowed = frozenset((STATE_RUNNING,))

    return EligibilityRequirement(
        allowed_states=allowed,
        require_agent_online=False,
        operation_name=operation_name(operation),
    )


def suggest_for_state(
    state: str,
    requirement: EligibilityRequirement,
    target_id: str,
    region: str | None = None,
) -> str | None:
    """Return a remediation hint for a target in the wrong lifecycle state."""
    region_flag = f" --region {region}" if region else ""

    if state == STATE_STOPPED:
        if requirement.operation_name == PowerTransition.STOP.value:
            return "Instance is already stopped."
        if STATE_RUNNING in requirement.allowed_states:
            return (
                "Start the instance first: "
                f"flotilla start --instances {target_id}{region_flag}"
            )
        return None

    if state == STATE_RUNNING:
        if STATE_STOPPED in requirement.allowed_states:
            return (
                "Instance is already running. Use reboot to restart it: "
                f"flotilla reboot --instances {target_id}{region_flag}"
            )
        return None

    if state == STATE_STOPPING:
        return "Instance is stopping. Wait for it to stop, then try again."
    if state == STATE_PENDING:
        return "Instance is starting. Wait a moment and try again."
    if state == STATE_SHUTTING_DOWN:
        return "Instance is shutting down and will soon be terminated."
    if state == STATE_TERMINATED:
        return None

    return f"Instance is in '{state}' state."


def check(
    target: TargetDescriptor,
    requirement: EligibilityRequirement,
    region: str | None = None,
) -> EligibilityRejection | None:
    """Run the eligibility gate on one target.

    Parameters
    ----------
    target : TargetDescriptor
        Target with its current lifecycle state and agent status
    requirement : EligibilityRequirement
        Requirement derived from the operation
    region : str | None
        Region shown in suggested follow-up commands

    Returns
    -------
    EligibilityRejection | None
        None when the target is eligible
    """
    problems: list[str] = []
    suggestion = None
    hints: tuple[str, ...] = ()
    hard = False
    transitional = False

    if target.lifecycle_state not in requirement.allowed_states:
        expected = ", ".join(sorted(requirement.allowed_states))
        problems.append(
            f"Cannot {requirement.operation_name}: instance is in "
            f"'{target.lifecycle_state}' state, expected one of: {expected}"
        )
        suggestion = suggest_for_state(
            target.lifecycle_state, requirement, target.id, region
        )
        hard = target.lifecycle_state == STATE_TERMINATED

    if requirement.require_agent_online and target.agent_status != AGENT_ONLINE:
        if target.agent_status in TRANSITIONAL_AGENT_STATUSES:
            transitional = True
            problems.append(
                "Agent connection was lost; it was online before and may "
                "recover shortly"
            )
            if suggestion is None and not hard:
                suggestion = "Wait for the agent to reconnect, then try again."
        else:
            problems.append(
                f"Cannot {requirement.operation_name}: agent is "
                f"'{target.agent_status}', expected '{AGENT_ONLINE}'"
            )
            hints = AGENT_TROUBLESHOOTING_HINTS

    if not problems:
        return None

    return EligibilityRejection(
        problems=tuple(problems),
        suggestion=suggestion,
        hints=hints,
        hard=hard,
        transitional=transitional,
    )
