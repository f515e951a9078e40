"""On-disk frame cache: extraction through ffmpeg and ordered read-back."""
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import List, Optional

import cv2
import numpy as np

from .errors import DecodeError, StorageError
from .tools import ToolRunner
from .types import Frame

CACHE_PREFIX = "frames_"
FRAME_PATTERN = "%d.png"
FRAME_SUFFIXES = {".png", ".jpg", ".jpeg", ".bmp"}


def cache_dir_for(source: Path) -> Path:
    """Cache directory that sits next to the input, named after its file name."""
    return source.parent / f"{CACHE_PREFIX}{source.name}"


def load_frame(path: Path) -> np.ndarray:
    """Read a cached frame as an RGB uint8 array."""
    frame_bgr = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if frame_bgr is None:
        raise DecodeError(f"Unable to decode frame {path}")
    return cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)


def _frame_sort_key(path: Path):
    try:
        return (0, int(path.stem), path.name)
    except ValueError:
        return (1, 0, path.name)


class FrameStore:
    """Ordered collection of extracted frames inside one cache directory."""

    def __init__(self, directory: Path, runner: ToolRunner | None = None, logger: Optional[logging.Logger] = None) -> None:
        self._directory = directory
        self._runner = runner or ToolRunner()
        self._logger = logger or logging.getLogger(__name__)

    @property
    def directory(self) -> Path:
        return self._directory

    def exists(self) -> bool:
        return self._directory.is_dir()

    def create(self) -> None:
        try:
            self._directory.mkdir(parents=False, exist_ok=False)
        except OSError as error:
            raise StorageError(f"Could not create frame cache {self._directory}: {error}") from error

    def remove(self) -> None:
        if not self._directory.exists():
            return
        try:
            shutil.rmtree(self._directory)
        except OSError as error:
            raise StorageError(f"Could not remove frame cache {self._directory}: {error}") from error

    def extract(self, source: Path, scale: float) -> None:
        """Decode every frame of ``source`` into the cache, scaled by ``scale``."""
        cmd = [
            self._runner.ffmpeg,
            "-y",
            "-hide_banner",
            "-loglevel",
            "error",
            "-i",
            str(source),
            "-vf",
            f"scale=iw*{scale:g}:ih*{scale:g}",
            str(self._directory / FRAME_PATTERN),
        ]
        self._runner.run(cmd)

    def frames(self) -> List[Frame]:
        """List cached frames ordered by their numeric file stem."""
        if not self.exists():
            raise StorageError(f"Frame cache {self._directory} does not exist")
        paths = [
            entry
            for entry in self._directory.iterdir()
            if entry.is_file() and entry.suffix.lower() in FRAME_SUFFIXES
        ]
        paths.sort(key=_frame_sort_key)
        return [Frame(index=index, path=path) for index, path in enumerate(paths)]


__all__ = ["CACHE_PREFIX", "FrameStore", "cache_dir_for", "load_frame"]
