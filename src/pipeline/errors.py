"""Error taxonomy for the scene splitting pipeline.

Every failure in a run is fatal; nothing here is caught and retried inside the
pipeline except tool invocations when ``tool_retries`` is configured.
"""
from __future__ import annotations


class SceneSplitError(RuntimeError):
    """Base class for all pipeline failures."""


class ConfigError(SceneSplitError, ValueError):
    """Raised for invalid run parameters, e.g. a lookahead below one."""


class SubprocessError(SceneSplitError):
    """Raised when ffmpeg/ffprobe fails, times out or prints unusable output."""


class DecodeError(SceneSplitError):
    """Raised when an extracted frame cannot be read as an image."""


class StorageError(SceneSplitError):
    """Raised when the frame cache or output directory cannot be created or removed."""


__all__ = [
    "SceneSplitError",
    "ConfigError",
    "SubprocessError",
    "DecodeError",
    "StorageError",
]
