"""Target resolution: user selectors to target descriptors."""

from __future__ import annotations

import logging

from flotilla.core.exceptions import ConfigurationError, DiscoveryError
from flotilla.core.interfaces import CloudControl
from flotilla.core.models import TargetDescriptor, TargetScope
from flotilla.providers.exceptions import ProviderError

logger = logging.getLogger(__name__)


def parse_instance_ids(value: str | list[str] | tuple[str, ...]) -> tuple[str, ...]:
    """Split a comma-separated id list.

    Ids are trimmed but not deduplicated: naming the same id twice yields
    two results.

    Parameters
    ----------
    value : str | list[str] | tuple[str, ...]
        Comma-separated string, or a list as produced by fire for ``a,b``

    Returns
    -------
    tuple[str, ...]
        Instance ids in the order given

    Raises
    ------
    ConfigurationError
        If no id remains after trimming
    """
    if isinstance(value, (list, tuple)):
        parts = [str(v) for v in value]
    else:
        parts = str(value).split(",")

    ids = tuple(part.strip() for part in parts if part.strip())

    if not ids:
        raise ConfigurationError("No instance ids given")

    return ids


def parse_tag_filter(value: str | list[str] | tuple[str, ...]) -> dict[str, str]:
    """Parse ``key=value`` pairs separated by commas.

    Parameters
    ----------
    value : str | list[str] | tuple[str, ...]
        Tag filter expression such as ``env=prod,role=web``

    Returns
    -------
    dict[str, str]
        Tag key to exact-match value

    Raises
    ------
    ConfigurationError
        If a pair does not contain exactly one ``=``, or has an empty key
        or value, or the expression is empty
    """
    if isinstance(value, (list, tuple)):
        pairs = [str(v) for v in value]
    else:
        pairs = str(value).split(",")

    tags: dict[str, str] = {}

    for pair in pairs:
        pair = pair.strip()
        if not pair:
            continue

        if pair.count("=") != 1:
            raise ConfigurationError(
                f"Invalid tag format '{pair}'. Expected format: key=value"
            )

        key, tag_value = (part.strip() for part in pair.split("="))

        if not key or not tag_value:
            raise ConfigurationError(f"Empty tag key or value in '{pair}'")

        tags[key] = tag_value

    if not tags:
        raise ConfigurationError("Tag filter is empty. Expected format: key=value")

    return tags


def parse_scope(
    instances: str | list[str] | tuple[str, ...] | None = None,
    tags: str | list[str] | tuple[str, ...] | None = None,
) -> TargetScope:
    """Build a target scope from mutually exclusive selectors.

    Raises
    ------
    ConfigurationError
        If both or neither selector is given, or either fails to parse
    """
    if instances is not None and tags is not None:
        raise ConfigurationError(
            "--instances and --tags are mutually exclusive; use only one"
        )

    if instances is not None:
        return TargetScope(instance_ids=parse_instance_ids(instances))

    if tags is not None:
        return TargetScope(tags=parse_tag_filter(tags))

    raise ConfigurationError("Either --instances or --tags must be specified")


class TargetResolver:
    """Resolve a target scope in one region.

    Parameters
    ----------
    cloud : CloudControl
        Collaborator used for tag-based discovery
    """

    def __init__(self, cloud: CloudControl) -> None:
        self.cloud = cloud

    def resolve(self, scope: TargetScope, region: str) -> list[TargetDescriptor]:
        """Turn a scope into target descriptors.

        Explicit ids produce placeholder descriptors without any network
        call. A tag filter triggers one blocking discovery call; an empty
        match is returned as an empty list, not an error.

        Parameters
        ----------
        scope : TargetScope
            Parsed selector
        region : str
            Region to resolve in

        Returns
        -------
        list[TargetDescriptor]
            Targets in discovery order, or in the order the ids were given

        Raises
        ------
        DiscoveryError
            If the discovery call fails
        """
        if scope.instance_ids is not None:
            return [TargetDescriptor.from_id(i) for i in scope.instance_ids]

        try:
            targets = self.cloud.discover_targets(region, dict(scope.tags or {}))
        except ProviderError as e:
            logger.debug("Discovery failed", extra={"region": region})
            raise DiscoveryError(region, f"Failed to discover instances: {e}") from e

        if not targets:
            logger.info(
                "No instances matched %s", scope.describe(), extra={"region": region}
            )

        return list(targets)
