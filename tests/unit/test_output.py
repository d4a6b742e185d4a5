"""Tests for result and summary rendering."""

from flotilla.core.eligibility import check, requirement_for
from flotilla.core.exceptions import DiscoveryError, EligibilityError, RemoteCommandError
from flotilla.core.models import (
    Command,
    OperationRequest,
    RegionResult,
    TargetDescriptor,
    TargetResult,
)
from flotilla.core.report import summarize
from flotilla.core.resolver import parse_scope
from flotilla.output import (
    NO_MATCH_WARNING,
    format_region_result,
    format_regions_table,
    format_summary,
    format_target_result,
    ordered_region_results,
    print_target_result,
)

REQUEST = OperationRequest(
    operation=Command("uptime"), region="us-east-1", scope=parse_scope(tags="env=prod")
)
TARGET = TargetDescriptor(
    id="i-1", display_name="web-1", lifecycle_state="running", agent_status="Online"
)


def test_success_block_shows_output():
    text = format_target_result(
        REQUEST, TargetResult(target=TARGET, output="up 3 days\nload 0.1\n", exit_code=0, duration=1.25)
    )

    assert text.splitlines() == [
        "✓ [us-east-1] i-1 (web-1): exit code 0 (1.2s)",
        "  up 3 days",
        "  load 0.1",
    ]


def test_non_zero_exit_block_shows_stderr():
    text = format_target_result(
        REQUEST, TargetResult(target=TARGET, error_output="boom\n", exit_code=3)
    )

    assert text.startswith("✗ [us-east-1] i-1 (web-1): exit code 3")
    assert "  stderr:\n    boom" in text


def test_power_success_has_ok_status():
    text = format_target_result(REQUEST, TargetResult(target=TARGET, duration=0.2))

    assert text == "✓ [us-east-1] i-1 (web-1): OK (200ms)"


def test_rejection_block_lists_reason_causes_and_suggestion():
    stopped = TargetDescriptor(
        id="i-2", display_name="i-2", lifecycle_state="stopped", agent_status="No Agent"
    )
    rejection = check(stopped, requirement_for(Command("ls")), "us-east-1")

    text = format_target_result(
        REQUEST, TargetResult(target=stopped, error=EligibilityError(rejection))
    )
    lines = text.splitlines()

    assert lines[0].startswith("✗ [us-east-1] i-2: failed")
    assert sum(line.startswith("  Reason: ") for line in lines) == 2
    assert "  Possible causes:" in lines
    assert lines[-1] == (
        "  Suggestion: Start the instance first: "
        "flotilla start --instances i-2 --region us-east-1"
    )


def test_transport_error_block():
    text = format_target_result(
        REQUEST, TargetResult(target=TARGET, error=RemoteCommandError("timed out"))
    )

    assert text.splitlines()[1] == "  Reason: timed out"


def test_failed_result_prints_to_stderr(capsys):
    print_target_result(REQUEST, TargetResult(target=TARGET, exit_code=1))

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "exit code 1" in captured.err


def test_region_line_with_discovery_error():
    result = RegionResult(
        region="eu-west-1",
        region_display_name="Europe (Ireland)",
        region_error=DiscoveryError("eu-west-1", "Failed to discover instances: throttled"),
    )

    assert format_region_result(result) == (
        "✗ eu-west-1 (Europe (Ireland)): discovery failed: "
        "Failed to discover instances: throttled"
    )


def test_summary_sorts_regions_into_requested_order():
    report = summarize(
        [
            RegionResult(region="ap-south-1", region_display_name="Mumbai"),
            RegionResult(region="us-east-1", region_display_name="Virginia"),
        ],
        requested_regions=["us-east-1", "eu-west-1", "ap-south-1"],
    )

    assert [r.region for r in ordered_region_results(report)] == ["us-east-1", "ap-south-1"]

    text = format_summary(report)
    assert text.index("us-east-1 (Virginia)") < text.index("ap-south-1 (Mumbai)")
    assert "  - eu-west-1: skipped after an earlier failure" in text
    assert "  Regions: 2 processed, 2 succeeded, 0 failed" in text
    assert "  Instances: 0 total, 0 succeeded, 0 failed" in text
    assert NO_MATCH_WARNING in text


def test_summary_without_warning_when_targets_ran():
    report = summarize(
        [
            RegionResult(
                region="us-east-1",
                region_display_name="Virginia",
                target_results=(TargetResult(target=TARGET, exit_code=0),),
            )
        ],
        requested_regions=["us-east-1"],
    )

    assert NO_MATCH_WARNING not in format_summary(report)


def test_regions_table():
    table = format_regions_table([("cac1", "ca-central-1", "Canada (Central)")])

    assert table.splitlines()[0].split() == ["CODE", "REGION", "DESCRIPTION"]
    assert table.splitlines()[1].split() == ["cac1", "ca-central-1", "Canada", "(Central)"]
