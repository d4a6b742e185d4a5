"""Tests for the run report roll-up."""

from flotilla.core.exceptions import DiscoveryError
from flotilla.core.models import RegionResult, TargetDescriptor, TargetResult
from flotilla.core.report import summarize


def result(instance_id, exit_code=0, error=None):
    return TargetResult(
        target=TargetDescriptor.from_id(instance_id), exit_code=exit_code, error=error
    )


def region(name, *target_results, region_error=None):
    return RegionResult(
        region=name,
        region_display_name=name.upper(),
        target_results=tuple(target_results),
        region_error=region_error,
    )


def test_all_succeeded():
    report = summarize(
        [region("us-east-1", result("i-1"), result("i-2")), region("eu-west-1", result("i-3"))],
        duration=1.5,
    )

    assert report.success
    assert report.exit_code == 0
    assert report.total_regions == 2
    assert report.successful_regions == 2
    assert report.total_targets == 3
    assert report.successful_targets == 3
    assert report.failed_targets == 0
    assert report.duration == 1.5
    assert not report.nothing_matched


def test_non_zero_exit_fails_the_run():
    report = summarize([region("us-east-1", result("i-1"), result("i-2", exit_code=3))])

    assert not report.success
    assert report.exit_code == 1
    assert report.failed_regions == 1
    assert report.failed_targets == 1
    assert report.successful_targets == 1


def test_region_error_fails_the_run_with_no_targets():
    error = DiscoveryError("eu-west-1", "Failed to discover instances: throttled")
    report = summarize([region("us-east-1", result("i-1")), region("eu-west-1", region_error=error)])

    assert not report.success
    assert report.failed_regions == 1
    assert report.successful_regions == 1
    assert report.total_targets == 1
    assert not report.nothing_matched


def test_empty_region_is_vacuous_success():
    report = summarize([region("us-east-1")])

    assert report.success
    assert report.exit_code == 0
    assert report.nothing_matched


def test_no_exit_code_without_error_counts_as_success():
    report = summarize([region("us-east-1", result("i-1", exit_code=None))])

    assert report.success


def test_skipped_regions_are_requested_without_result():
    report = summarize(
        [region("us-east-1")],
        requested_regions=["us-east-1", "eu-west-1", "ap-south-1"],
    )

    assert report.skipped_regions == ("eu-west-1", "ap-south-1")
