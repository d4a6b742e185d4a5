"""Core flotilla functionality."""

from __future__ import annotations

from flotilla.core.interfaces import CloudControl, RemoteCommandRunner

__all__ = [
    "CloudControl",
    "RemoteCommandRunner",
]
