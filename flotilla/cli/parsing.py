"""CLI argument parsing and validation.

Everything here runs before any network call, so bad input fails fast
with a ``ConfigurationError``.
"""

from __future__ import annotations

from typing import Any

from flotilla.core.exceptions import ConfigurationError
from flotilla.core.fanout import validate_parallelism
from flotilla.providers.aws.regions import resolve_region


def split_list(value: str | list[Any] | tuple[Any, ...]) -> list[str]:
    """Split a comma-separated value; fire already splits ``a,b`` into a tuple."""
    if isinstance(value, (list, tuple)):
        parts = [str(v) for v in value]
    else:
        parts = str(value).split(",")
    return [part.strip() for part in parts if part.strip()]


def parse_region(region: str | None, settings: dict[str, Any]) -> str:
    """Resolve the single-region option, falling back to ``default_region``.

    Raises
    ------
    ConfigurationError
        If the region is not a known shortcode or full region name
    """
    return resolve_region(str(region) if region else settings["default_region"])


def parse_regions(
    settings: dict[str, Any],
    regions: str | list[str] | tuple[str, ...] | None = None,
    all_regions: bool = False,
    region_group: str | None = None,
) -> list[str]:
    """Select the regions of a multi-region run.

    Priority is ``regions`` over ``all_regions`` over ``region_group``.
    ``all_regions`` uses ``regions.enabled`` from the configuration, falling
    back to the ``all`` group.

    Parameters
    ----------
    settings : dict[str, Any]
        Merged configuration
    regions : str | list[str] | tuple[str, ...] | None
        Explicit regions or shortcodes
    all_regions : bool
        Use every configured region
    region_group : str | None
        Name of a configured region group

    Returns
    -------
    list[str]
        Full region names in the order given

    Raises
    ------
    ConfigurationError
        If no selector is given, a group is unknown, no regions are
        configured, or a region code is invalid
    """
    region_settings = settings.get("regions", {})
    groups = region_settings.get("groups", {})

    if regions:
        selected = split_list(regions)
    elif all_regions:
        selected = list(region_settings.get("enabled") or groups.get("all") or [])
        if not selected:
            raise ConfigurationError(
                "No regions configured for --all-regions. Set regions.enabled "
                "or regions.groups.all in the configuration file"
            )
    elif region_group:
        if not groups.get(region_group):
            available = ", ".join(sorted(groups)) or "none"
            raise ConfigurationError(
                f"Region group '{region_group}' not found in configuration. "
                f"Available groups: {available}"
            )
        selected = list(groups[region_group])
    else:
        raise ConfigurationError(
            "Must specify regions using one of: --regions cac1,use1, "
            "--all-regions, --region-group NAME"
        )

    if not selected:
        raise ConfigurationError("No regions given")

    return [resolve_region(region) for region in selected]


def parse_parallelism(value: Any, default: int, name: str) -> int:
    """Return the validated option value, or ``default`` when not given.

    Raises
    ------
    ConfigurationError
        If the value is not an integer of at least 1
    """
    if value is None:
        value = default
    return validate_parallelism(value, name)


__all__ = [
    "parse_parallelism",
    "parse_region",
    "parse_regions",
    "split_list",
]
