"""Typed primitives for the scene splitting pipeline."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class OutputFormat(str, Enum):
    """Container or image format written for each detected scene."""

    MKV = "mkv"
    MP4 = "mp4"
    PNG = "png"

    @property
    def is_image(self) -> bool:
        return self is OutputFormat.PNG


@dataclass(frozen=True)
class Frame:
    """A single extracted frame image inside the frame cache."""

    index: int
    path: Path


@dataclass(frozen=True)
class ComparisonSample:
    """Best (lowest) dissimilarity between an anchor and its lookahead candidates."""

    anchor_index: int
    score: float


@dataclass(frozen=True)
class SceneBoundary:
    """Inclusive range of frame indices forming one scene."""

    start: int
    end: int

    @property
    def frame_count(self) -> int:
        return self.end - self.start + 1

    def start_seconds(self, frame_rate: float) -> float:
        if frame_rate <= 0:
            raise ValueError("frame_rate must be positive")
        return self.start / frame_rate

    def duration_seconds(self, frame_rate: float) -> float:
        if frame_rate <= 0:
            raise ValueError("frame_rate must be positive")
        return self.frame_count / frame_rate

    def as_tuple(self) -> tuple[int, int]:
        return self.start, self.end

