"""Plain-text rendering of target results, region results and run summaries.

Formatting functions return strings so they can be tested without
capturing output. ``print_block`` serializes writes because per-target
callbacks may fire from several region workers at once.
"""

from __future__ import annotations

import sys
import threading
from collections.abc import Sequence

from flotilla.core.exceptions import EligibilityError
from flotilla.core.models import OperationRequest, RegionResult, TargetResult
from flotilla.core.report import RunReport
from flotilla.utils import format_duration, truncate_name

NO_MATCH_WARNING = "No instances found matching criteria"

_print_lock = threading.Lock()


def print_block(text: str, error: bool = False) -> None:
    """Print a multi-line block without interleaving with other threads."""
    with _print_lock:
        print(text, file=sys.stderr if error else sys.stdout, flush=True)


def target_label(region: str, result: TargetResult) -> str:
    target = result.target
    if target.display_name and target.display_name != target.id:
        return f"[{region}] {target.id} ({truncate_name(target.display_name)})"
    return f"[{region}] {target.id}"


def format_target_result(request: OperationRequest, result: TargetResult) -> str:
    """Render one target result as a scoped block.

    Successful results show the command output; failures show the reason,
    possible causes and a suggested follow-up where one is known.
    """
    label = target_label(request.region, result)
    duration = format_duration(result.duration)
    lines: list[str] = []

    if result.error is None:
        if result.exit_code is None:
            status = "OK"
        else:
            status = f"exit code {result.exit_code}"
        marker = "✓" if result.succeeded else "✗"
        lines.append(f"{marker} {label}: {status} ({duration})")

        if result.output:
            lines.extend(f"  {line}" for line in result.output.rstrip().splitlines())
        if result.error_output:
            lines.append("  stderr:")
            lines.extend(f"    {line}" for line in result.error_output.rstrip().splitlines())

        return "\n".join(lines)

    lines.append(f"✗ {label}: failed ({duration})")

    if isinstance(result.error, EligibilityError):
        rejection = result.error.rejection
        for problem in rejection.problems:
            lines.append(f"  Reason: {problem}")
        if rejection.hints:
            lines.append("  Possible causes:")
            lines.extend(f"    - {hint}" for hint in rejection.hints)
        if rejection.suggestion:
            lines.append(f"  Suggestion: {rejection.suggestion}")
    else:
        lines.append(f"  Reason: {result.error}")

    return "\n".join(lines)


def format_region_result(result: RegionResult) -> str:
    """One-line region status, plus the discovery error when there is one."""
    header = f"{result.region} ({result.region_display_name})"

    if result.region_error is not None:
        return f"✗ {header}: discovery failed: {result.region_error}"

    total = len(result.target_results)
    marker = "✓" if result.succeeded else "✗"
    return (
        f"{marker} {header}: {result.successful}/{total} succeeded "
        f"({format_duration(result.duration)})"
    )


def ordered_region_results(report: RunReport) -> list[RegionResult]:
    """Sort region results back into the order the regions were requested."""
    position: dict[str, int] = {}
    for i, region in enumerate(report.requested_regions):
        position.setdefault(region, i)

    return sorted(
        report.region_results,
        key=lambda result: position.get(result.region, len(position)),
    )


def format_summary(report: RunReport) -> str:
    """Render the run-wide summary."""
    lines = ["", "Summary:"]

    for result in ordered_region_results(report):
        lines.append(f"  {format_region_result(result)}")

    for region in report.skipped_regions:
        lines.append(f"  - {region}: skipped after an earlier failure")

    lines.append(
        f"  Regions: {report.total_regions} processed, "
        f"{report.successful_regions} succeeded, {report.failed_regions} failed"
    )
    lines.append(
        f"  Instances: {report.total_targets} total, "
        f"{report.successful_targets} succeeded, {report.failed_targets} failed"
    )
    lines.append(f"  Duration: {format_duration(report.duration)}")

    if report.nothing_matched:
        lines.append(f"  Warning: {NO_MATCH_WARNING}")

    return "\n".join(lines)


def print_target_result(request: OperationRequest, result: TargetResult) -> None:
    print_block(format_target_result(request, result), error=not result.succeeded)


def print_region_result(result: RegionResult) -> None:
    print_block(format_region_result(result), error=not result.succeeded)


def print_summary(report: RunReport) -> None:
    print_block(format_summary(report))


def format_regions_table(rows: Sequence[tuple[str, str, str]]) -> str:
    """Render ``(shortcode, region, description)`` rows as a table."""
    lines = [f"{'CODE':<8}{'REGION':<18}DESCRIPTION"]
    lines.extend(f"{code:<8}{region:<18}{description}" for code, region, description in rows)
    return "\n".join(lines)
