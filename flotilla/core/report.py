"""Roll-up of region results into a run-wide verdict."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from flotilla.core.models import RegionResult


@dataclass(frozen=True)
class RunReport:
    """Derived summary of one batch invocation.

    Attributes
    ----------
    region_results : tuple[RegionResult, ...]
        Results in completion order
    duration : float
        Wall-clock seconds for the whole run
    requested_regions : tuple[str, ...]
        Regions the caller asked for, in the order given
    """

    region_results: tuple[RegionResult, ...] = ()
    duration: float = 0.0
    requested_regions: tuple[str, ...] = field(default_factory=tuple)

    @property
    def total_regions(self) -> int:
        return len(self.region_results)

    @property
    def failed_regions(self) -> int:
        return sum(1 for result in self.region_results if not result.succeeded)

    @property
    def successful_regions(self) -> int:
        return self.total_regions - self.failed_regions

    @property
    def total_targets(self) -> int:
        return sum(len(result.target_results) for result in self.region_results)

    @property
    def successful_targets(self) -> int:
        return sum(result.successful for result in self.region_results)

    @property
    def failed_targets(self) -> int:
        return sum(result.failed for result in self.region_results)

    @property
    def skipped_regions(self) -> tuple[str, ...]:
        """Requested regions that produced no result because the run stopped early."""
        processed = {result.region for result in self.region_results}
        return tuple(r for r in self.requested_regions if r not in processed)

    @property
    def success(self) -> bool:
        return all(result.succeeded for result in self.region_results)

    @property
    def nothing_matched(self) -> bool:
        """True for a vacuous success: no region failed and no target was found."""
        return self.success and self.total_targets == 0

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1


def summarize(
    region_results: Iterable[RegionResult],
    duration: float = 0.0,
    requested_regions: Sequence[str] = (),
) -> RunReport:
    """Build the run report for a set of region results.

    Parameters
    ----------
    region_results : Iterable[RegionResult]
        Results in any order
    duration : float
        Wall-clock seconds for the whole run
    requested_regions : Sequence[str]
        Regions the caller asked for

    Returns
    -------
    RunReport
        Report whose ``success`` holds iff no region has a region-level
        error and no target failed
    """
    return RunReport(
        region_results=tuple(region_results),
        duration=duration,
        requested_regions=tuple(requested_regions),
    )
