"""AWS provider: EC2 for discovery and power control, SSM for commands."""

from flotilla.providers.aws.clients import ClientCache
from flotilla.providers.aws.commands import SSMCommandRunner
from flotilla.providers.aws.compute import EC2Manager

__all__ = ["ClientCache", "EC2Manager", "SSMCommandRunner"]
