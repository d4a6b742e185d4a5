"""Global constants for flotilla.

Provider-agnostic defaults shared by the engine, the CLI and the
configuration loader. AWS-specific values live in
``flotilla.providers.aws.constants``.
"""

import os

DEFAULT_PARALLELISM = os.cpu_count() or 4
"""Default number of concurrent target operations within one region.

Matches the number of CPU cores, falling back to 4 when it cannot be
determined. Each worker blocks on network I/O, so this is a throttle on
API pressure rather than on CPU.
"""

DEFAULT_REGION_PARALLELISM = 5
"""Default number of regions processed concurrently in multi-region runs."""

DEFAULT_COMMAND_POLL_INTERVAL = 2.0
"""Seconds between remote command status checks."""

DEFAULT_COMMAND_MAX_WAIT = 300.0
"""Seconds the remote command collaborator waits for a result.

The engine itself applies no timeout; this bound belongs to the
collaborator contract.
"""

DEFAULT_CONFIG_FILENAME = ".flotilla.yaml"

DEFAULT_LOG_DIRECTORY = "~/logs"

STATE_PENDING = "pending"
STATE_RUNNING = "running"
STATE_STOPPING = "stopping"
STATE_STOPPED = "stopped"
STATE_SHUTTING_DOWN = "shutting-down"
STATE_TERMINATED = "terminated"

STATE_UNKNOWN = "unknown"
"""Placeholder lifecycle state for targets given by explicit id.

Targets carrying this state have their current state looked up right
before the eligibility check.
"""

AGENT_ONLINE = "Online"
AGENT_CONNECTION_LOST = "ConnectionLost"
AGENT_MISSING = "No Agent"
AGENT_UNKNOWN = "Unknown"

TRANSITIONAL_AGENT_STATUSES = frozenset((AGENT_CONNECTION_LOST,))
"""Agent statuses meaning the agent was online before and may come back."""

DEFAULT_NAME_COLUMN_WIDTH = 30

MAX_OUTPUT_PREVIEW_LENGTH = 100
"""Maximum characters of command output shown in one-line previews."""
