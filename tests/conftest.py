"""Pytest configuration and fixtures for flotilla tests."""

import logging
import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
import yaml

from flotilla.core.context import RunContext
from tests.fakes import FakeCloud, FakeCommandRunner


@pytest.fixture(autouse=True)
def restore_root_logging() -> Generator[None, None, None]:
    """Restore root logger handlers replaced by ``setup_logging``.

    Yields
    ------
    None
        Control back to test
    """
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level

    yield

    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture(autouse=True)
def cleanup_debug_env() -> Generator[None, None, None]:
    """Ensure FLOTILLA_DEBUG is not set so error handlers exit instead of raising."""
    original = os.environ.pop("FLOTILLA_DEBUG", None)

    yield

    if original is not None:
        os.environ["FLOTILLA_DEBUG"] = original
    else:
        os.environ.pop("FLOTILLA_DEBUG", None)


@pytest.fixture
def aws_credentials() -> Generator[None, None, None]:
    """Fixture to set AWS credentials for testing with proper cleanup.

    Sets mock AWS credentials in environment variables for the duration of the test,
    then restores the original environment state.

    Yields
    ------
    None
        Control back to test after setting credentials
    """
    names = ("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY", "AWS_DEFAULT_REGION")
    original = {name: os.environ.get(name) for name in names}

    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"

    yield

    for name, value in original.items():
        if value is not None:
            os.environ[name] = value
        else:
            os.environ.pop(name, None)


@pytest.fixture
def config_file(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a temporary config file path and clean up environment.

    Parameters
    ----------
    tmp_path : Path
        Pytest temporary directory path

    Yields
    ------
    Path
        Path to temporary config file, not yet written
    """
    config_path = tmp_path / "flotilla.yaml"

    original_env = os.environ.get("FLOTILLA_CONFIG")
    os.environ["FLOTILLA_CONFIG"] = str(config_path)

    yield config_path

    if original_env is not None:
        os.environ["FLOTILLA_CONFIG"] = original_env
    elif "FLOTILLA_CONFIG" in os.environ:
        del os.environ["FLOTILLA_CONFIG"]


@pytest.fixture
def write_config(config_file: Path):
    """Helper fixture to write config data to file.

    Parameters
    ----------
    config_file : Path
        Path to config file from config_file fixture

    Returns
    -------
    callable
        Function that takes config_data dict and writes to file
    """

    def _write(config_data: dict[str, Any]) -> None:
        with open(config_file, "w") as f:
            yaml.dump(config_data, f)

    return _write


@pytest.fixture
def fake_cloud() -> FakeCloud:
    return FakeCloud()


@pytest.fixture
def fake_commands() -> FakeCommandRunner:
    return FakeCommandRunner()


@pytest.fixture
def run_context(fake_cloud: FakeCloud, fake_commands: FakeCommandRunner) -> RunContext:
    """Run context wired to the in-memory fakes.

    Parameters
    ----------
    fake_cloud : FakeCloud
        Cloud fake from the fake_cloud fixture
    fake_commands : FakeCommandRunner
        Command fake from the fake_commands fixture

    Returns
    -------
    RunContext
        Context whose region display name is the region upper-cased
    """
    return RunContext(
        cloud=fake_cloud,
        commands=fake_commands,
        describe_region=str.upper,
    )
