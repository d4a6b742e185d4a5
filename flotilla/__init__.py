"""Flotilla - run commands and power operations across EC2 fleets."""

from flotilla.core.context import RunContext
from flotilla.core.executor import Engine
from flotilla.core.models import (
    Command,
    OperationRequest,
    PowerTransition,
    RegionResult,
    TargetDescriptor,
    TargetResult,
)
from flotilla.core.report import RunReport, summarize

__version__ = "0.1.0"

__all__ = [
    "Command",
    "Engine",
    "OperationRequest",
    "PowerTransition",
    "RegionResult",
    "RunContext",
    "RunReport",
    "TargetDescriptor",
    "TargetResult",
    "summarize",
]
