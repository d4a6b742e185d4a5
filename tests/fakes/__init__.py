"""Test fake implementations for dependency injection testing."""

from tests.fakes.fake_cloud import FakeCloud
from tests.fakes.fake_commands import ConcurrencyProbe, FakeCommandRunner

__all__ = ["ConcurrencyProbe", "FakeCloud", "FakeCommandRunner"]
