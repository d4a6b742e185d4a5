"""Remote command execution through SSM Run Command."""

import logging
import time
from collections.abc import Callable
from typing import Any

from flotilla.constants import DEFAULT_COMMAND_MAX_WAIT, DEFAULT_COMMAND_POLL_INTERVAL
from flotilla.core.exceptions import RemoteCommandError
from flotilla.core.models import CommandOutput
from flotilla.providers.aws.clients import ClientCache
from flotilla.providers.aws.constants import (
    SSM_PENDING_STATUSES,
    SSM_SHELL_DOCUMENT,
    SSM_SUCCESS_STATUS,
)
from flotilla.providers.aws.errors import handle_aws_errors
from flotilla.providers.exceptions import ProviderCredentialsError, ProviderError

logger = logging.getLogger(__name__)

COMMAND_COMMENT = "Command executed via flotilla"


class SSMCommandRunner:
    """Run shell commands on instances and wait for their result.

    The wait is bounded by ``max_wait``; this is the only timeout applied
    to a remote command.

    Parameters
    ----------
    boto3_client_factory : Callable[..., Any] | None
        Optional factory for creating boto3 clients. If None, uses boto3.client
    clients : ClientCache | None
        Client cache shared with other collaborators of the same run
    poll_interval : float
        Seconds between status checks
    max_wait : float
        Seconds to wait for a terminal status before giving up
    sleep : Callable[[float], None]
        Sleep function, replaceable in tests
    clock : Callable[[], float]
        Monotonic clock, replaceable in tests
    """

    def __init__(
        self,
        boto3_client_factory: Any | None = None,
        clients: ClientCache | None = None,
        poll_interval: float = DEFAULT_COMMAND_POLL_INTERVAL,
        max_wait: float = DEFAULT_COMMAND_MAX_WAIT,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.clients = clients or ClientCache(boto3_client_factory)
        self.poll_interval = poll_interval
        self.max_wait = max_wait
        self._sleep = sleep
        self._clock = clock

    def run_remote_command(
        self, region: str, target_id: str, command: str
    ) -> CommandOutput:
        """Send ``command`` to the instance and block until it finishes.

        Parameters
        ----------
        region : str
            AWS region name
        target_id : str
            EC2 instance id
        command : str
            Shell command for ``AWS-RunShellScript``

        Returns
        -------
        CommandOutput
            stdout, stderr and exit code; the exit code is None only when a
            successful invocation reports none

        Raises
        ------
        ProviderCredentialsError
            If AWS credentials are missing or rejected
        RemoteCommandError
            If the command cannot be sent or polled, ends in a non-success
            status without an exit code, or does not finish within ``max_wait``
        """
        ssm = self.clients.get("ssm", region)

        try:
            with handle_aws_errors():
                response = ssm.send_command(
                    DocumentName=SSM_SHELL_DOCUMENT,
                    InstanceIds=[target_id],
                    Parameters={"commands": [command]},
                    Comment=COMMAND_COMMENT,
                )
        except ProviderCredentialsError:
            raise
        except ProviderError as e:
            raise RemoteCommandError(f"Failed to send command: {e}") from e

        command_id = response["Command"]["CommandId"]
        logger.debug(
            "Command sent with ID %s",
            command_id,
            extra={"region": region, "target": target_id},
        )

        status = self._wait_for_completion(ssm, command_id, target_id)

        try:
            with handle_aws_errors():
                detail = ssm.get_command_invocation(
                    CommandId=command_id, InstanceId=target_id
                )
        except ProviderError as e:
            raise RemoteCommandError(f"Failed to get command result: {e}") from e

        exit_code = detail.get("ResponseCode")
        if status != SSM_SUCCESS_STATUS and (exit_code is None or exit_code < 0):
            raise RemoteCommandError(f"Command ended with status {status}")

        logger.debug(
            "Command %s finished with status %s",
            command_id,
            status,
            extra={"region": region, "target": target_id},
        )

        return CommandOutput(
            stdout=detail.get("StandardOutputContent", ""),
            stderr=detail.get("StandardErrorContent", ""),
            exit_code=exit_code,
        )

    def _wait_for_completion(self, ssm: Any, command_id: str, target_id: str) -> str:
        deadline = self._clock() + self.max_wait

        while self._clock() < deadline:
            try:
                with handle_aws_errors():
                    response = ssm.list_command_invocations(
                        CommandId=command_id, InstanceId=target_id
                    )
            except ProviderError as e:
                raise RemoteCommandError(f"Failed to check command status: {e}") from e

            invocations = response.get("CommandInvocations", [])
            if invocations and invocations[0].get("Status") not in SSM_PENDING_STATUSES:
                return invocations[0]["Status"]

            self._sleep(self.poll_interval)

        raise RemoteCommandError(
            f"Command execution timed out after {self.max_wait:g} seconds"
        )
