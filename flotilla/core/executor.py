"""Per-target and per-region execution of one operation.

``TargetExecutor`` applies an operation to the targets of one region through
a bounded fan-out. ``RegionExecutor`` resolves a region's targets and runs
the target executor over them. ``Engine`` is what the CLI talks to: it runs
one region in the calling thread, or many regions through a second bounded
fan-out with an optional stop-on-first-failure policy.

Result order is never guaranteed at either level. Callbacks receive results
as they complete; the per-target callback runs in a region worker thread
during multi-region runs.

The engine applies no timeout of its own. A target call lasts as long as
its collaborator takes; the SSM runner bounds commands with its own
``max_wait``.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence

from flotilla.core.context import RunContext
from flotilla.core.eligibility import check, requirement_for
from flotilla.core.exceptions import DiscoveryError, EligibilityError, FlotillaError
from flotilla.core.fanout import BoundedFanOut, CancellationToken, validate_parallelism
from flotilla.core.models import (
    Command,
    OperationRequest,
    RegionResult,
    TargetDescriptor,
    TargetResult,
)
from flotilla.core.report import RunReport, summarize
from flotilla.core.resolver import TargetResolver
from flotilla.utils import preview_output

logger = logging.getLogger(__name__)

TargetCallback = Callable[[OperationRequest, TargetResult], None]
RegionCallback = Callable[[RegionResult], None]


class TargetExecutor:
    """Apply one operation to the targets of a single region.

    Parameters
    ----------
    context : RunContext
        Collaborators for the run
    """

    def __init__(self, context: RunContext) -> None:
        self.context = context

    def perform(self, request: OperationRequest, target: TargetDescriptor) -> TargetResult:
        """Gate and dispatch the operation for one target.

        Targets given by explicit id have their state looked up first. A
        rejected target gets a result without any call to the command or
        power collaborator.

        Parameters
        ----------
        request : OperationRequest
            Operation and region
        target : TargetDescriptor
            Target to act on

        Returns
        -------
        TargetResult
            Exactly one result; errors are recorded, never raised
        """
        started = time.monotonic()
        region = request.region
        operation = request.operation
        log_extra = {"region": region, "target": target.id}

        if target.needs_state_lookup:
            try:
                target = self.context.cloud.get_target_state(region, target.id)
            except FlotillaError as e:
                logger.warning("State lookup failed: %s", e, extra=log_extra)
                return TargetResult(
                    target=target, error=e, duration=time.monotonic() - started
                )

        rejection = check(target, requirement_for(operation), region)
        if rejection is not None:
            logger.debug("Rejected: %s", rejection.reason, extra=log_extra)
            return TargetResult(
                target=target,
                error=EligibilityError(rejection),
                duration=time.monotonic() - started,
            )

        try:
            if isinstance(operation, Command):
                logger.info("Executing command", extra=log_extra)
                output = self.context.commands.run_remote_command(
                    region, target.id, operation.text
                )
            else:
                self.context.cloud.transition_power(region, target.id, operation)
                output = None
        except FlotillaError as e:
            logger.warning("Operation failed: %s", e, extra=log_extra)
            return TargetResult(
                target=target, error=e, duration=time.monotonic() - started
            )

        duration = time.monotonic() - started

        if output is None:
            logger.info("%s requested", operation.progressive, extra=log_extra)
            return TargetResult(target=target, duration=duration)

        logger.info(
            "Command finished with exit code %s", output.exit_code, extra=log_extra
        )
        if output.stdout:
            logger.debug("Output: %s", preview_output(output.stdout), extra=log_extra)
        return TargetResult(
            target=target,
            output=output.stdout,
            error_output=output.stderr,
            exit_code=output.exit_code,
            duration=duration,
        )

    def run(
        self,
        request: OperationRequest,
        targets: Sequence[TargetDescriptor],
        on_result: TargetCallback | None = None,
    ) -> list[TargetResult]:
        """Run the operation over ``targets`` with ``request.parallelism`` workers.

        Returns
        -------
        list[TargetResult]
            One result per target, in completion order
        """
        pool: BoundedFanOut[TargetDescriptor, TargetResult] = BoundedFanOut(
            request.parallelism, name=f"target-{request.region}"
        )

        def unexpected(target: TargetDescriptor, error: Exception) -> TargetResult:
            logger.error(
                "Unexpected error: %s",
                error,
                extra={"region": request.region, "target": target.id},
            )
            return TargetResult(target=target, error=error)

        return pool.run(
            targets,
            lambda target: self.perform(request, target),
            on_result=(lambda result: on_result(request, result)) if on_result else None,
            recover=unexpected,
        )


class RegionExecutor:
    """Resolve a region's targets and run the target executor over them.

    Parameters
    ----------
    context : RunContext
        Collaborators for the run
    """

    def __init__(self, context: RunContext) -> None:
        self.context = context
        self.resolver = TargetResolver(context.cloud)
        self.targets = TargetExecutor(context)

    def process(
        self,
        request: OperationRequest,
        on_target_result: TargetCallback | None = None,
    ) -> RegionResult:
        """Process one region.

        Returns
        -------
        RegionResult
            With ``region_error`` set and no target results when discovery
            failed
        """
        started = time.monotonic()
        region = request.region
        display_name = self.context.describe_region(region)

        logger.debug(
            "Processing on %s", threading.current_thread().name, extra={"region": region}
        )

        if request.targets is not None:
            targets = list(request.targets)
        else:
            try:
                targets = self.resolver.resolve(request.scope, region)
            except DiscoveryError as e:
                logger.error("%s", e, extra={"region": region})
                return RegionResult(
                    region=region,
                    region_display_name=display_name,
                    region_error=e,
                    duration=time.monotonic() - started,
                )

        if targets:
            logger.info("Processing %d instance(s)", len(targets), extra={"region": region})

        results = self.targets.run(request, targets, on_result=on_target_result)

        return RegionResult(
            region=region,
            region_display_name=display_name,
            target_results=tuple(results),
            duration=time.monotonic() - started,
        )


class Engine:
    """Entry point for batch operations.

    Parameters
    ----------
    context : RunContext
        Collaborators for the run
    """

    def __init__(self, context: RunContext) -> None:
        self.context = context
        self.regions = RegionExecutor(context)

    def execute(
        self,
        request: OperationRequest,
        on_target_result: TargetCallback | None = None,
    ) -> RunReport:
        """Run one operation in one region.

        Parameters
        ----------
        request : OperationRequest
            Operation, region, scope and per-target parallelism
        on_target_result : TargetCallback | None
            Called in the calling thread as each target completes

        Returns
        -------
        RunReport
            Report over the single region
        """
        started = time.monotonic()
        result = self.regions.process(request, on_target_result=on_target_result)
        return summarize(
            [result],
            duration=time.monotonic() - started,
            requested_regions=[request.region],
        )

    def execute_multi_region(
        self,
        requests: Sequence[OperationRequest],
        region_parallelism: int,
        continue_on_error: bool = False,
        on_region_result: RegionCallback | None = None,
        on_target_result: TargetCallback | None = None,
    ) -> RunReport:
        """Run one request per region with bounded region concurrency.

        With ``continue_on_error`` False, the first region that completes
        with any failure stops workers from taking further regions. Regions
        already in flight finish and report; regions never started produce
        no result. Which regions run is therefore scheduling dependent when
        ``region_parallelism`` is above 1.

        Parameters
        ----------
        requests : Sequence[OperationRequest]
            One request per region
        region_parallelism : int
            Maximum regions processed concurrently
        continue_on_error : bool
            Process every region regardless of failures
        on_region_result : RegionCallback | None
            Called in the calling thread as each region completes
        on_target_result : TargetCallback | None
            Called in region worker threads as each target completes

        Returns
        -------
        RunReport
            Report over every region that produced a result

        Raises
        ------
        ConfigurationError
            If ``region_parallelism`` is not an integer of at least 1
        """
        validate_parallelism(region_parallelism, "parallel_regions")

        started = time.monotonic()
        cancel = None if continue_on_error else CancellationToken()
        pool: BoundedFanOut[OperationRequest, RegionResult] = BoundedFanOut(
            region_parallelism, name="region"
        )

        def unexpected(request: OperationRequest, error: Exception) -> RegionResult:
            logger.error("Unexpected error: %s", error, extra={"region": request.region})
            return RegionResult(
                region=request.region,
                region_display_name=self.context.describe_region(request.region),
                region_error=error,
            )

        def stop_on_failure(result: RegionResult) -> bool:
            if result.succeeded:
                return False
            logger.warning(
                "Stopping after failure; regions not yet started will be skipped",
                extra={"region": result.region},
            )
            return True

        results = pool.run(
            requests,
            lambda request: self.regions.process(request, on_target_result),
            cancel=cancel,
            on_result=on_region_result,
            stop_when=stop_on_failure,
            recover=unexpected,
        )

        return summarize(
            results,
            duration=time.monotonic() - started,
            requested_regions=[request.region for request in requests],
        )
