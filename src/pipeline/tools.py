"""Thin wrapper around the ffmpeg/ffprobe command line tools."""
from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time
from dataclasses import dataclass
from typing import Optional, Sequence

from .errors import SubprocessError

FFMPEG_PATH = os.environ.get("SCENESPLIT_FFMPEG") or shutil.which("ffmpeg")
FFPROBE_PATH = os.environ.get("SCENESPLIT_FFPROBE") or shutil.which("ffprobe")


@dataclass
class ToolConfig:
    timeout_sec: Optional[float] = None
    retries: int = 0
    retry_delay_sec: float = 0.5


class ToolRunner:
    """Runs a blocking tool invocation and returns its stdout as text."""

    def __init__(self, config: ToolConfig | None = None, logger: Optional[logging.Logger] = None) -> None:
        self._config = config or ToolConfig()
        self._logger = logger or logging.getLogger(__name__)

    @property
    def ffmpeg(self) -> str:
        if not FFMPEG_PATH:
            raise SubprocessError("ffmpeg executable not found in PATH")
        return FFMPEG_PATH

    @property
    def ffprobe(self) -> str:
        if not FFPROBE_PATH:
            raise SubprocessError("ffprobe executable not found in PATH")
        return FFPROBE_PATH

    def run(self, cmd: Sequence[str]) -> str:
        attempts = max(0, self._config.retries) + 1
        for attempt in range(1, attempts + 1):
            try:
                return self._run_once(cmd)
            except SubprocessError as error:
                if attempt == attempts:
                    raise
                self._logger.warning("Tool attempt %s/%s failed: %s", attempt, attempts, error)
                if self._config.retry_delay_sec > 0:
                    time.sleep(self._config.retry_delay_sec)

    def _run_once(self, cmd: Sequence[str]) -> str:
        args = [str(part) for part in cmd]
        self._logger.debug("Running %s", " ".join(args))
        try:
            completed = subprocess.run(
                args,
                check=True,
                timeout=self._config.timeout_sec,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except FileNotFoundError as error:
            raise SubprocessError(f"{args[0]} could not be started: {error}") from error
        except subprocess.CalledProcessError as error:
            stderr = error.stderr.decode(errors="replace").strip() if error.stderr else ""
            raise SubprocessError(f"{os.path.basename(args[0])} exited with {error.returncode}: {stderr}") from error
        except subprocess.TimeoutExpired as error:
            raise SubprocessError(f"{os.path.basename(args[0])} timed out after {error.timeout}s") from error
        return completed.stdout.decode(errors="replace")


__all__ = ["FFMPEG_PATH", "FFPROBE_PATH", "ToolConfig", "ToolRunner"]
