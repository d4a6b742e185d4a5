"""CLI entry point for flotilla."""

from __future__ import annotations

import functools
import os
import sys
from collections.abc import Callable
from typing import Any

import fire

from flotilla.app import Flotilla
from flotilla.core.report import RunReport
from flotilla.logging import setup_logging
from flotilla.providers import ProviderAPIError, ProviderCredentialsError
from flotilla.providers.aws.errors import get_aws_credentials_error_message

DEBUG_ENV_VAR = "FLOTILLA_DEBUG"


def exits_with_report(method: Callable[..., RunReport]) -> Callable[..., None]:
    """Wrap a batch command so the process exits 0 on success and 1 otherwise."""

    @functools.wraps(method)
    def wrapper(self: Flotilla, *args: Any, **kwargs: Any) -> None:
        report = method(self, *args, **kwargs)
        sys.exit(report.exit_code)

    return wrapper


class FlotillaCLI(Flotilla):
    """CLI wrapper that turns run reports into process exit codes."""

    exec = exits_with_report(Flotilla.exec)
    exec_tagged = exits_with_report(Flotilla.exec_tagged)
    exec_multi = exits_with_report(Flotilla.exec_multi)
    start = exits_with_report(Flotilla.start)
    stop = exits_with_report(Flotilla.stop)
    reboot = exits_with_report(Flotilla.reboot)


def handle_credentials_error(debug_mode: bool) -> None:
    """Print credential setup help and exit with 1.

    Parameters
    ----------
    debug_mode : bool
        Whether debug mode is enabled

    Raises
    ------
    ProviderCredentialsError
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise

    print(get_aws_credentials_error_message(), file=sys.stderr)
    sys.exit(1)


def handle_value_error(error: ValueError, debug_mode: bool) -> None:
    """Handle configuration errors.

    Parameters
    ----------
    error : ValueError
        The configuration error that was raised
    debug_mode : bool
        Whether debug mode is enabled

    Raises
    ------
    ValueError
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise

    print(f"Configuration error: {error}", file=sys.stderr)
    sys.exit(2)


def handle_api_error(error: ProviderAPIError, debug_mode: bool) -> None:
    """Explain a rejected AWS API call and exit with 1.

    Parameters
    ----------
    error : ProviderAPIError
        The API error that was raised
    debug_mode : bool
        Whether debug mode is enabled

    Raises
    ------
    ProviderAPIError
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise

    error_code = error.error_code

    if error_code == "UnauthorizedOperation":
        print("The caller lacks IAM permissions for this operation\n", file=sys.stderr)
        print("Ask an AWS administrator to allow:", file=sys.stderr)
        print(
            "  - EC2 permissions (DescribeInstances, StartInstances, "
            "StopInstances, RebootInstances)",
            file=sys.stderr,
        )
        print(
            "  - SSM permissions (SendCommand, ListCommandInvocations, "
            "GetCommandInvocation, DescribeInstanceInformation)",
            file=sys.stderr,
        )
    elif error_code in ["ExpiredToken", "RequestExpired", "ExpiredTokenException"]:
        print("AWS session credentials have expired\n", file=sys.stderr)
        print("Refresh them and run the command again:", file=sys.stderr)
        print("  aws sso login --profile <profile>", file=sys.stderr)
        print("  aws sts get-caller-identity   # confirm the session works", file=sys.stderr)
    else:
        print(f"Cloud API error: {error}", file=sys.stderr)

    sys.exit(1)


def main() -> None:
    """Run the fire CLI and map uncaught errors to exit codes.

    Fire maps the methods of ``FlotillaCLI`` to subcommands. Batch commands
    exit with 0 when every region and instance succeeded and 1 otherwise;
    configuration errors exit with 2. Set ``FLOTILLA_DEBUG=1`` to see the
    original traceback instead.
    """
    setup_logging()

    debug_mode = os.environ.get(DEBUG_ENV_VAR) == "1"

    try:
        fire.Fire(FlotillaCLI())
    except ProviderCredentialsError:
        handle_credentials_error(debug_mode)
    except ValueError as e:
        handle_value_error(e, debug_mode)
    except ProviderAPIError as e:
        handle_api_error(e, debug_mode)
