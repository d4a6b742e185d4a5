"""CLI argument parsing and handling."""

from __future__ import annotations

from flotilla.cli.parsing import (
    parse_parallelism,
    parse_region,
    parse_regions,
    split_list,
)

__all__ = [
    "parse_parallelism",
    "parse_region",
    "parse_regions",
    "split_list",
]
