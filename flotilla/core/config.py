import copy
import logging
import os
from pathlib import Path
from typing import Any

import yaml
from omegaconf import OmegaConf
from omegaconf.errors import InterpolationResolutionError

from flotilla.constants import (
    DEFAULT_COMMAND_MAX_WAIT,
    DEFAULT_COMMAND_POLL_INTERVAL,
    DEFAULT_CONFIG_FILENAME,
    DEFAULT_LOG_DIRECTORY,
    DEFAULT_PARALLELISM,
    DEFAULT_REGION_PARALLELISM,
)
from flotilla.core.exceptions import ConfigurationError
from flotilla.core.fanout import validate_parallelism
from flotilla.providers import get_default_region, list_providers

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "FLOTILLA_CONFIG"

VALID_LOG_LEVELS = ("debug", "info", "warning", "error")


def default_config_path() -> Path:
    """Return the config path from ``FLOTILLA_CONFIG`` or ``~/.flotilla.yaml``."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / DEFAULT_CONFIG_FILENAME


class ConfigLoader:
    """Load YAML configuration and merge it over built-in defaults."""

    def __init__(self) -> None:
        """Initialize ConfigLoader with provider-specific defaults."""
        self.BUILT_IN_DEFAULTS = {
            "provider": "aws",
            "default_region": get_default_region("aws"),
            "regions": {
                "enabled": [],
                "groups": {},
            },
            "execution": {
                "parallel": DEFAULT_PARALLELISM,
                "parallel_regions": DEFAULT_REGION_PARALLELISM,
                "continue_on_error": False,
            },
            "command": {
                "poll_interval": DEFAULT_COMMAND_POLL_INTERVAL,
                "max_wait": DEFAULT_COMMAND_MAX_WAIT,
            },
            "logging": {
                "level": "info",
                "file_logging": False,
                "directory": DEFAULT_LOG_DIRECTORY,
            },
        }

    def load_config(self, config_path: str | None = None) -> dict[str, Any]:
        """Load configuration from a YAML file.

        Parameters
        ----------
        config_path : str | None
            Path to YAML config file. If None, checks FLOTILLA_CONFIG env var,
            then falls back to ~/.flotilla.yaml

        Returns
        -------
        dict[str, Any]
            File contents with interpolations resolved, or an empty dict when
            the file does not exist

        Raises
        ------
        ConfigurationError
            If the file is not valid YAML or a variable cannot be resolved
        """
        config_file = Path(config_path) if config_path else default_config_path()

        if not config_file.exists():
            logger.debug("No config file at %s, using defaults", config_file)
            return {}

        try:
            cfg = OmegaConf.load(config_file)
        except yaml.YAMLError as e:
            logger.error("Failed to parse YAML config file %s: %s", config_file, e)
            raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e
        except OSError as e:
            logger.error("Failed to read config file %s: %s", config_file, e)
            raise ConfigurationError(f"Failed to read config file {config_file}: {e}") from e

        if cfg is None:
            return {}

        hoisted = []
        if "vars" in cfg:
            vars_dict = OmegaConf.to_container(cfg.vars, resolve=False)
            for key, value in (vars_dict or {}).items():
                if key not in cfg:
                    cfg[key] = value
                    hoisted.append(key)

        try:
            config = OmegaConf.to_container(cfg, resolve=True, throw_on_missing=True)
        except InterpolationResolutionError as e:
            logger.error("Failed to resolve configuration variables: %s", e)
            raise ConfigurationError(f"Configuration variable resolution error: {e}") from e
        except (ValueError, KeyError, AttributeError) as e:
            logger.error("Failed to resolve configuration variables: %s", e)
            raise ConfigurationError(f"Configuration variable resolution error: {e}") from e

        if not isinstance(config, dict):
            raise ConfigurationError(f"Configuration in {config_file} must be a mapping")

        config.pop("vars", None)
        for key in hoisted:
            config.pop(key, None)
        return config

    def get_settings(self, config: dict[str, Any]) -> dict[str, Any]:
        """Merge loaded configuration over the built-in defaults.

        Sections (``regions``, ``execution``, ``command``, ``logging``) are
        merged key by key; other keys replace the default.

        Parameters
        ----------
        config : dict[str, Any]
            Configuration as returned by ``load_config``

        Returns
        -------
        dict[str, Any]
            Complete settings
        """
        merged = copy.deepcopy(self.BUILT_IN_DEFAULTS)

        for key, value in config.items():
            if isinstance(merged.get(key), dict) and isinstance(value, dict):
                merged[key].update(value)
            else:
                merged[key] = value

        return merged

    def load(self, config_path: str | None = None) -> dict[str, Any]:
        """Load, merge and validate configuration in one step."""
        settings = self.get_settings(self.load_config(config_path))
        self.validate_config(settings)
        return settings

    def validate_config(self, config: dict[str, Any]) -> None:
        """Validate merged settings.

        Parameters
        ----------
        config : dict[str, Any]
            Settings to validate

        Raises
        ------
        ConfigurationError
            If settings are invalid
        """
        provider = config.get("provider", "aws")
        available_providers = list_providers()
        if provider not in available_providers:
            raise ConfigurationError(
                f"Unknown provider: {provider}. Available providers: {available_providers}"
            )

        if not isinstance(config.get("default_region"), str) or not config["default_region"]:
            raise ConfigurationError("default_region must be a non-empty string")

        self._validate_regions(config.get("regions", {}))
        self._validate_execution(config.get("execution", {}))
        self._validate_command(config.get("command", {}))
        self._validate_logging(config.get("logging", {}))

    def _validate_regions(self, regions: dict[str, Any]) -> None:
        if not isinstance(regions, dict):
            raise ConfigurationError("regions must be a dictionary")

        enabled = regions.get("enabled", [])
        if not isinstance(enabled, list) or not all(isinstance(r, str) for r in enabled):
            raise ConfigurationError("regions.enabled must be a list of region names")

        groups = regions.get("groups", {})
        if not isinstance(groups, dict):
            raise ConfigurationError("regions.groups must be a dictionary")

        for name, members in groups.items():
            if not isinstance(members, list) or not all(isinstance(r, str) for r in members):
                raise ConfigurationError(
                    f"regions.groups.{name} must be a list of region names"
                )

    def _validate_execution(self, execution: dict[str, Any]) -> None:
        if not isinstance(execution, dict):
            raise ConfigurationError("execution must be a dictionary")

        validate_parallelism(execution.get("parallel"), "execution.parallel")
        validate_parallelism(
            execution.get("parallel_regions"), "execution.parallel_regions"
        )

        if not isinstance(execution.get("continue_on_error"), bool):
            raise ConfigurationError("execution.continue_on_error must be a boolean")

    def _validate_command(self, command: dict[str, Any]) -> None:
        if not isinstance(command, dict):
            raise ConfigurationError("command must be a dictionary")

        for field in ("poll_interval", "max_wait"):
            value = command.get(field)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise ConfigurationError(f"command.{field} must be a positive number")

    def _validate_logging(self, logging_config: dict[str, Any]) -> None:
        if not isinstance(logging_config, dict):
            raise ConfigurationError("logging must be a dictionary")

        level = logging_config.get("level")
        if not isinstance(level, str) or level.lower() not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"logging.level must be one of {list(VALID_LOG_LEVELS)}, got: {level!r}"
            )

        if not isinstance(logging_config.get("file_logging"), bool):
            raise ConfigurationError("logging.file_logging must be a boolean")

        if not isinstance(logging_config.get("directory"), str):
            raise ConfigurationError("logging.directory must be a string")
