"""Write one output artifact per detected scene using ffmpeg."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from .errors import StorageError
from .tools import ToolRunner
from .types import OutputFormat, SceneBoundary

OUTPUT_PREFIX = "scenes_"


def output_dir_for(source: Path) -> Path:
    return source.parent / f"{OUTPUT_PREFIX}{source.stem}"


class SceneSlicer:
    def __init__(
        self,
        output_dir: Path,
        output_format: OutputFormat = OutputFormat.MKV,
        slideshow: bool = False,
        runner: ToolRunner | None = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._output_dir = output_dir
        self._format = OutputFormat.PNG if slideshow else OutputFormat(output_format)
        self._runner = runner or ToolRunner()
        self._logger = logger or logging.getLogger(__name__)

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    @property
    def output_format(self) -> OutputFormat:
        return self._format

    def prepare(self) -> None:
        try:
            self._output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as error:
            raise StorageError(f"Could not create output directory {self._output_dir}: {error}") from error

    def output_path(self, number: int) -> Path:
        return self._output_dir / f"scene_{number:04d}.{self._format.value}"

    def slice(self, source: Path, scene: SceneBoundary, number: int, frame_rate: float) -> Path:
        """Write scene ``number`` (1-based) and return the written path."""
        target = self.output_path(number)
        if self._format.is_image:
            # Middle frame of the scene.
            middle = scene.start + (scene.end - scene.start) // 2
            cmd = [
                self._runner.ffmpeg,
                "-y",
                "-hide_banner",
                "-loglevel",
                "error",
                "-ss",
                f"{middle / frame_rate:.3f}",
                "-i",
                str(source),
                "-frames:v",
                "1",
                str(target),
            ]
        else:
            cmd = [
                self._runner.ffmpeg,
                "-y",
                "-hide_banner",
                "-loglevel",
                "error",
                "-ss",
                f"{scene.start_seconds(frame_rate):.3f}",
                "-i",
                str(source),
                "-t",
                f"{scene.duration_seconds(frame_rate):.3f}",
                str(target),
            ]
        self._logger.debug("Slicing scene %s [%s, %s] into %s", number, scene.start, scene.end, target)
        self._runner.run(cmd)
        return target


__all__ = ["OUTPUT_PREFIX", "SceneSlicer", "output_dir_for"]
