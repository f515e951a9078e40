"""Shared run state threaded through every pipeline stage.

The state is the only channel between stages and presenters. Discovered
metadata is write-once, logs are append-only and progress moves through two
phases: comparing frames, then splitting scenes. Presenters never read the
live object; they receive an immutable :class:`StateSnapshot` via ``snapshot()``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from .types import ComparisonSample


@dataclass(frozen=True)
class Comparing:
    count: int = 0


@dataclass(frozen=True)
class Splitting:
    count: int = 1


Progress = Union[Comparing, Splitting]

StateObserver = Callable[["PipelineState"], None]


@dataclass(frozen=True)
class StateSnapshot:
    input_path: Path
    phase: str
    counter: int
    total: int
    ratio: float
    frame_rate: Optional[float]
    frame_count: Optional[int]
    scene_count: Optional[int]
    cache: Optional[Path]
    samples: Tuple[ComparisonSample, ...]
    thresholds: Tuple[Tuple[int, float], ...]
    messages: Tuple[str, ...]


class PipelineState:
    """Mutable record of one run. Setters enforce the write-once fields."""

    def __init__(
        self,
        input_path: Path,
        on_change: Optional[StateObserver] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._input = Path(input_path)
        self._on_change = on_change
        self._logger = logger or logging.getLogger(__name__)
        self._progress: Progress = Comparing()
        self._frame_rate: Optional[float] = None
        self._frame_count: Optional[int] = None
        self._scene_count: Optional[int] = None
        self._cache: Optional[Path] = None
        self._samples: List[ComparisonSample] = []
        self._thresholds: List[Tuple[int, float]] = []
        self._messages: List[str] = []

    # ------------------------------------------------------------------
    @property
    def input_path(self) -> Path:
        return self._input

    @property
    def progress(self) -> Progress:
        return self._progress

    @property
    def phase(self) -> str:
        return "comparing" if isinstance(self._progress, Comparing) else "splitting"

    @property
    def counter(self) -> int:
        return self._progress.count

    @property
    def frame_rate(self) -> Optional[float]:
        return self._frame_rate

    @property
    def frame_count(self) -> Optional[int]:
        return self._frame_count

    @property
    def scene_count(self) -> Optional[int]:
        return self._scene_count

    @property
    def cache(self) -> Optional[Path]:
        return self._cache

    @property
    def samples(self) -> Tuple[ComparisonSample, ...]:
        return tuple(self._samples)

    @property
    def thresholds(self) -> Tuple[Tuple[int, float], ...]:
        return tuple(self._thresholds)

    @property
    def messages(self) -> Tuple[str, ...]:
        return tuple(self._messages)

    def messages_since(self, start: int) -> Tuple[str, ...]:
        """Messages appended after the first ``start`` ones."""
        return tuple(self._messages[max(0, start):])

    @property
    def compare_total(self) -> Optional[int]:
        """Number of comparisons a full sweep performs: one per adjacent frame pair."""
        if self._frame_count is None:
            return None
        return max(0, self._frame_count - 1)

    @property
    def total(self) -> int:
        if isinstance(self._progress, Comparing):
            return self.compare_total or 0
        return self._scene_count or 0

    @property
    def ratio(self) -> float:
        total = self.total
        if total <= 0:
            return 0.0
        return min(1.0, self.counter / total)

    # ------------------------------------------------------------------
    def set_frame_rate(self, frame_rate: float) -> None:
        if self._frame_rate is None:
            self._frame_rate = float(frame_rate)
            self._changed()

    def set_frame_count(self, frame_count: int) -> None:
        if self._frame_count is None:
            self._frame_count = int(frame_count)
            self._changed()

    def set_scene_count(self, scene_count: int) -> None:
        if self._scene_count is None:
            self._scene_count = int(scene_count)
            self._changed()

    def set_cache(self, path: Path) -> None:
        if self._cache is None:
            self._cache = Path(path)
            self._changed()

    def info(self, message: str) -> None:
        self._messages.append(str(message))
        self._logger.info("%s", message)
        self._changed()

    def progress_compare(self, threshold: float, score: float) -> None:
        """Record one window comparison. Ignored once splitting has started."""
        if not isinstance(self._progress, Comparing):
            return
        count = self._progress.count + 1
        self._progress = Comparing(count)
        self._samples.append(ComparisonSample(anchor_index=count - 1, score=float(score)))
        self._thresholds.append((count, float(threshold)))
        self._changed()

    def progress_split(self) -> None:
        if isinstance(self._progress, Comparing):
            self._progress = Splitting(1)
        else:
            self._progress = Splitting(self._progress.count + 1)
        self._changed()

    def snapshot(self) -> StateSnapshot:
        return StateSnapshot(
            input_path=self._input,
            phase=self.phase,
            counter=self.counter,
            total=self.total,
            ratio=self.ratio,
            frame_rate=self._frame_rate,
            frame_count=self._frame_count,
            scene_count=self._scene_count,
            cache=self._cache,
            samples=tuple(self._samples),
            thresholds=tuple(self._thresholds),
            messages=tuple(self._messages),
        )

    # ------------------------------------------------------------------
    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self)


__all__ = [
    "Comparing",
    "PipelineState",
    "Progress",
    "Splitting",
    "StateObserver",
    "StateSnapshot",
]
