"""Flotilla - run commands and power operations across EC2 fleets."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

from flotilla.cli.parsing import parse_parallelism, parse_region, parse_regions
from flotilla.core.config import ConfigLoader, default_config_path
from flotilla.core.context import RunContext
from flotilla.core.exceptions import ConfigurationError
from flotilla.core.executor import Engine
from flotilla.core.models import Command, Operation, OperationRequest, PowerTransition
from flotilla.core.report import RunReport
from flotilla.core.resolver import parse_scope
from flotilla.logging import setup_logging
from flotilla.output import (
    format_regions_table,
    print_region_result,
    print_summary,
    print_target_result,
)
from flotilla.providers.aws.regions import supported_regions
from flotilla.templates import CONFIG_TEMPLATE
from flotilla.utils import log_and_print_error

logger = logging.getLogger(__name__)


class Flotilla:
    """Main CLI interface for flotilla.

    Every batch command returns a ``RunReport``; the CLI wrapper turns it
    into the process exit code.

    Parameters
    ----------
    context_factory : Callable[[dict[str, Any]], RunContext] | None
        Builds the run context from merged settings. If None, uses the
        configured provider
    boto3_client_factory : Callable | None
        Optional factory for creating boto3 clients, used by the default
        context factory
    config_path : str | None
        Configuration file; defaults to FLOTILLA_CONFIG or ~/.flotilla.yaml
    """

    def __init__(
        self,
        context_factory: Callable[[dict[str, Any]], RunContext] | None = None,
        boto3_client_factory: Callable | None = None,
        config_path: str | None = None,
    ) -> None:
        self._config_loader = ConfigLoader()
        self._context_factory = context_factory
        self._boto3_client_factory = boto3_client_factory
        self._config_path = config_path

    def _create_context(self, settings: dict[str, Any]) -> RunContext:
        if self._context_factory is not None:
            return self._context_factory(settings)
        return RunContext.for_provider(
            provider=settings["provider"],
            command_settings=settings["command"],
            boto3_client_factory=self._boto3_client_factory,
        )

    def _load_settings(self, verbose: bool) -> dict[str, Any]:
        settings = self._config_loader.load(self._config_path)
        log_settings = settings["logging"]

        setup_logging(
            level="debug" if verbose else log_settings["level"],
            file_logging=log_settings["file_logging"],
            directory=log_settings["directory"],
        )

        return settings

    def _run_single_region(
        self,
        operation: Operation,
        region: str | None,
        instances: Any,
        tags: Any,
        parallel: int | None,
        verbose: bool,
    ) -> RunReport:
        settings = self._load_settings(verbose)
        scope = parse_scope(instances=instances, tags=tags)
        request = OperationRequest(
            operation=operation,
            region=parse_region(region, settings),
            scope=scope,
            parallelism=parse_parallelism(
                parallel, settings["execution"]["parallel"], "parallel"
            ),
        )

        logger.debug("Running %s on %s", operation, scope.describe())

        engine = Engine(self._create_context(settings))
        report = engine.execute(request, on_target_result=print_target_result)
        print_summary(report)
        return report

    def exec(
        self,
        region: str,
        instance_id: str,
        command: str,
        verbose: bool = False,
    ) -> RunReport:
        """Run a shell command on one instance.

        Parameters
        ----------
        region : str
            Region name or shortcode
        instance_id : str
            EC2 instance id
        command : str
            Shell command
        verbose : bool
            Enable debug logging
        """
        if isinstance(instance_id, (list, tuple)) or "," in str(instance_id):
            raise ConfigurationError(
                "exec takes a single instance id; use exec_tagged --instances for several"
            )

        return self._run_single_region(
            Command(str(command)), region, str(instance_id), None, 1, verbose
        )

    def exec_tagged(
        self,
        region: str,
        command: str,
        tags: str | None = None,
        instances: str | None = None,
        parallel: int | None = None,
        verbose: bool = False,
    ) -> RunReport:
        """Run a shell command on every instance matching a selector in one region.

        Parameters
        ----------
        region : str
            Region name or shortcode
        command : str
            Shell command
        tags : str | None
            Tag filter, ``key=value`` pairs separated by commas
        instances : str | None
            Comma-separated instance ids
        parallel : int | None
            Concurrent instances, defaults to execution.parallel
        verbose : bool
            Enable debug logging
        """
        return self._run_single_region(
            Command(str(command)), region, instances, tags, parallel, verbose
        )

    def exec_multi(
        self,
        command: str,
        regions: str | None = None,
        all_regions: bool = False,
        region_group: str | None = None,
        tags: str | None = None,
        instances: str | None = None,
        parallel: int | None = None,
        parallel_regions: int | None = None,
        continue_on_error: bool | None = None,
        verbose: bool = False,
    ) -> RunReport:
        """Run a shell command across several regions.

        Parameters
        ----------
        command : str
            Shell command
        regions : str | None
            Comma-separated regions or shortcodes
        all_regions : bool
            Use regions.enabled (or regions.groups.all) from the configuration
        region_group : str | None
            Use a region group from the configuration
        tags : str | None
            Tag filter, ``key=value`` pairs separated by commas
        instances : str | None
            Comma-separated instance ids
        parallel : int | None
            Concurrent instances per region, defaults to execution.parallel
        parallel_regions : int | None
            Concurrent regions, defaults to execution.parallel_regions
        continue_on_error : bool | None
            Keep processing regions after a failure, defaults to
            execution.continue_on_error
        verbose : bool
            Enable debug logging
        """
        settings = self._load_settings(verbose)
        execution = settings["execution"]

        operation = Command(str(command))
        scope = parse_scope(instances=instances, tags=tags)
        selected = parse_regions(
            settings,
            regions=regions,
            all_regions=all_regions,
            region_group=region_group,
        )
        per_target = parse_parallelism(parallel, execution["parallel"], "parallel")
        per_region = parse_parallelism(
            parallel_regions, execution["parallel_regions"], "parallel_regions"
        )
        if continue_on_error is None:
            continue_on_error = execution["continue_on_error"]

        requests = [
            OperationRequest(
                operation=operation, region=region, scope=scope, parallelism=per_target
            )
            for region in selected
        ]

        logger.info(
            "Executing across %d region(s) with %d in parallel",
            len(requests),
            per_region,
        )

        engine = Engine(self._create_context(settings))
        report = engine.execute_multi_region(
            requests,
            region_parallelism=per_region,
            continue_on_error=bool(continue_on_error),
            on_region_result=print_region_result,
            on_target_result=print_target_result,
        )
        print_summary(report)
        return report

    def start(
        self,
        instances: str | None = None,
        tags: str | None = None,
        region: str | None = None,
        parallel: int | None = None,
        verbose: bool = False,
    ) -> RunReport:
        """Start stopped instances.

        Parameters
        ----------
        instances : str | None
            Comma-separated instance ids
        tags : str | None
            Tag filter, ``key=value`` pairs separated by commas
        region : str | None
            Region name or shortcode, defaults to default_region
        parallel : int | None
            Concurrent instances, defaults to execution.parallel
        verbose : bool
            Enable debug logging
        """
        return self._run_single_region(
            PowerTransition.START, region, instances, tags, parallel, verbose
        )

    def stop(
        self,
        instances: str | None = None,
        tags: str | None = None,
        region: str | None = None,
        parallel: int | None = None,
        verbose: bool = False,
    ) -> RunReport:
        """Stop running instances. Takes the same options as ``start``."""
        return self._run_single_region(
            PowerTransition.STOP, region, instances, tags, parallel, verbose
        )

    def reboot(
        self,
        instances: str | None = None,
        tags: str | None = None,
        region: str | None = None,
        parallel: int | None = None,
        verbose: bool = False,
    ) -> RunReport:
        """Reboot running instances. Takes the same options as ``start``."""
        return self._run_single_region(
            PowerTransition.REBOOT, region, instances, tags, parallel, verbose
        )

    def regions(self) -> None:
        """List supported region shortcodes."""
        print(format_regions_table(supported_regions()))

    def init(self, force: bool = False) -> None:
        """Create a default configuration file."""
        config_file = Path(self._config_path) if self._config_path else default_config_path()

        if config_file.exists() and not force:
            log_and_print_error(
                "%s already exists. Use --force to overwrite.",
                config_file,
            )
            sys.exit(1)

        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, "w") as f:
            f.write(CONFIG_TEMPLATE)

        print(f"Created {config_file} configuration file.")
