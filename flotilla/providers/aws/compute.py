"""EC2 instance discovery and power control for flotilla."""

import logging
from collections.abc import Mapping
from typing import Any

from flotilla.constants import AGENT_MISSING
from flotilla.core.models import PowerTransition, TargetDescriptor
from flotilla.providers.aws.clients import ClientCache
from flotilla.providers.aws.constants import NAME_TAG
from flotilla.providers.aws.errors import handle_aws_errors
from flotilla.providers.exceptions import ProviderAPIError, ProviderError

logger = logging.getLogger(__name__)

_POWER_CALLS = {
    PowerTransition.START: "start_instances",
    PowerTransition.STOP: "stop_instances",
    PowerTransition.REBOOT: "reboot_instances",
}


def build_tag_filters(tags: Mapping[str, str]) -> list[dict[str, Any]]:
    """Convert a tag mapping into EC2 ``Filters`` entries.

    Parameters
    ----------
    tags : Mapping[str, str]
        Tag key to exact value

    Returns
    -------
    list[dict[str, Any]]
        One ``tag:<key>`` filter per entry, empty for an empty mapping
    """
    return [{"Name": f"tag:{key}", "Values": [value]} for key, value in tags.items()]


def display_name_for(instance: dict[str, Any]) -> str:
    """Return the Name tag of an instance, or its id when it has none."""
    for tag in instance.get("Tags", []):
        if tag.get("Key") == NAME_TAG and tag.get("Value"):
            return tag["Value"]
    return instance["InstanceId"]


class EC2Manager:
    """Discover EC2 instances and request power transitions.

    Parameters
    ----------
    boto3_client_factory : Callable[..., Any] | None
        Optional factory for creating boto3 clients. If None, uses boto3.client
    clients : ClientCache | None
        Client cache shared with other collaborators of the same run
    """

    def __init__(
        self,
        boto3_client_factory: Any | None = None,
        clients: ClientCache | None = None,
    ) -> None:
        self.clients = clients or ClientCache(boto3_client_factory)

    def client(self, service: str, region: str) -> Any:
        return self.clients.get(service, region)

    def discover_targets(
        self, region: str, tags: Mapping[str, str]
    ) -> list[TargetDescriptor]:
        """List instances in ``region`` whose tags match ``tags`` exactly.

        Parameters
        ----------
        region : str
            AWS region name
        tags : Mapping[str, str]
            Tag filter; empty lists every instance in the region

        Returns
        -------
        list[TargetDescriptor]
            Matching instances joined with their SSM agent status

        Raises
        ------
        ProviderError
            If the EC2 query fails
        """
        logger.debug("Listing instances", extra={"region": region})

        instances = []
        with handle_aws_errors():
            paginator = self.client("ec2", region).get_paginator("describe_instances")
            kwargs: dict[str, Any] = {}
            filters = build_tag_filters(tags)
            if filters:
                kwargs["Filters"] = filters

            for page in paginator.paginate(**kwargs):
                for reservation in page["Reservations"]:
                    instances.extend(reservation["Instances"])

        if not instances:
            return []

        agent_status = self._agent_status_map(region)

        return [
            TargetDescriptor(
                id=instance["InstanceId"],
                display_name=display_name_for(instance),
                lifecycle_state=instance["State"]["Name"],
                agent_status=agent_status.get(instance["InstanceId"], AGENT_MISSING),
            )
            for instance in instances
        ]

    def get_target_state(self, region: str, target_id: str) -> TargetDescriptor:
        """Look up one instance by id.

        Raises
        ------
        ProviderAPIError
            If the instance does not exist
        ProviderError
            If the EC2 query fails
        """
        with handle_aws_errors():
            response = self.client("ec2", region).describe_instances(
                InstanceIds=[target_id]
            )

        instances = [
            instance
            for reservation in response.get("Reservations", [])
            for instance in reservation.get("Instances", [])
        ]

        if not instances:
            raise ProviderAPIError(
                f"Instance {target_id} not found in region {region}",
                error_code="InvalidInstanceID.NotFound",
            )

        instance = instances[0]
        agent_status = self._agent_status_map(region, [target_id])

        return TargetDescriptor(
            id=target_id,
            display_name=display_name_for(instance),
            lifecycle_state=instance["State"]["Name"],
            agent_status=agent_status.get(target_id, AGENT_MISSING),
        )

    def transition_power(
        self, region: str, target_id: str, transition: PowerTransition
    ) -> None:
        """Request a start, stop or reboot without waiting for completion."""
        logger.info(
            "%s instance",
            transition.progressive,
            extra={"region": region, "target": target_id},
        )

        with handle_aws_errors():
            call = getattr(self.client("ec2", region), _POWER_CALLS[transition])
            call(InstanceIds=[target_id])

    def _agent_status_map(
        self, region: str, instance_ids: list[str] | None = None
    ) -> dict[str, str]:
        """Map instance id to SSM ping status.

        Instances missing from the map have no registered agent. When the
        SSM query fails the map is empty, so every instance reads as
        having no agent.
        """
        kwargs: dict[str, Any] = {}
        if instance_ids:
            kwargs["Filters"] = [{"Key": "InstanceIds", "Values": instance_ids}]

        statuses: dict[str, str] = {}
        try:
            with handle_aws_errors():
                paginator = self.client("ssm", region).get_paginator(
                    "describe_instance_information"
                )
                for page in paginator.paginate(**kwargs):
                    for info in page.get("InstanceInformationList", []):
                        if info.get("InstanceId") and info.get("PingStatus"):
                            statuses[info["InstanceId"]] = info["PingStatus"]
        except ProviderError as e:
            logger.warning(
                "Failed to get SSM agent status, marking all as '%s': %s",
                AGENT_MISSING,
                e,
                extra={"region": region},
            )
            return {}

        return statuses
