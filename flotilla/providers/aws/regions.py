"""Region shortcode resolution and descriptions."""

from __future__ import annotations

from flotilla.core.exceptions import ConfigurationError
from flotilla.providers.aws.constants import (
    REGION_DESCRIPTIONS,
    REGION_SHORTCODES,
    UNKNOWN_REGION_DESCRIPTION,
    VALID_REGION_PREFIXES,
)

_DIRECTIONS = frozenset(
    (
        "east",
        "west",
        "north",
        "south",
        "central",
        "northeast",
        "northwest",
        "southeast",
        "southwest",
    )
)


def looks_like_region(name: str) -> bool:
    """Check whether ``name`` has the shape of a full AWS region name.

    Parameters
    ----------
    name : str
        Candidate such as ``us-east-1`` or ``us-gov-west-1``

    Returns
    -------
    bool
        True for ``<prefix>-<direction>-<number>`` names
    """
    if not name:
        return False

    parts = name.split("-")

    if len(parts) == 4 and parts[0] == "us" and parts[1] == "gov":
        parts = ["us-gov", parts[2], parts[3]]

    if len(parts) != 3:
        return False

    prefix, direction, number = parts
    return (
        prefix in VALID_REGION_PREFIXES
        and direction in _DIRECTIONS
        and number.isdigit()
    )


def resolve_region(code: str) -> str:
    """Turn a shortcode or full region name into a full region name.

    Raises
    ------
    ConfigurationError
        If ``code`` is neither a known shortcode nor a full region name
    """
    code = code.strip()

    if looks_like_region(code):
        return code

    region = REGION_SHORTCODES.get(code.lower())
    if region is None:
        raise ConfigurationError(f"Invalid region code: {code}")

    return region


def region_code(region: str) -> str:
    """Return the shortcode for a region, or the region itself when unmapped."""
    for code, name in REGION_SHORTCODES.items():
        if name == region:
            return code
    return region


def describe_region(region: str) -> str:
    """Human-readable name for a region given by shortcode or full name."""
    code = region_code(region).lower()
    return REGION_DESCRIPTIONS.get(code, UNKNOWN_REGION_DESCRIPTION)


def supported_regions() -> list[tuple[str, str, str]]:
    """List ``(shortcode, region, description)`` for every known shortcode."""
    return [
        (code, region, REGION_DESCRIPTIONS.get(code, UNKNOWN_REGION_DESCRIPTION))
        for code, region in REGION_SHORTCODES.items()
    ]
