"""Sliding-window scene cut detection."""
from __future__ import annotations

import logging
from collections import deque
from pathlib import Path
from typing import Callable, List, Optional, Sequence

import numpy as np

from .comparator import Comparator, DssimComparator
from .errors import ConfigError
from .frames import load_frame
from .state import PipelineState
from .types import Frame, SceneBoundary

FrameLoader = Callable[[Path], np.ndarray]


class WindowScanner:
    """Classifies window boundaries as scene cuts.

    A window is an anchor frame plus ``lookahead`` candidate frames. Its score
    is the lowest dissimilarity between the anchor and any candidate, so a cut
    is reported only when nothing within the lookahead horizon still resembles
    the anchor. Each frame image is loaded and prepared once and then slides
    through the window.
    """

    def __init__(
        self,
        comparator: Comparator | None = None,
        state: PipelineState | None = None,
        loader: FrameLoader = load_frame,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._comparator = comparator or DssimComparator()
        self._state = state
        self._loader = loader
        self._logger = logger or logging.getLogger(__name__)

    def scan(self, frames: Sequence[Frame], lookahead: int, threshold: float) -> List[SceneBoundary]:
        if lookahead < 1:
            raise ConfigError(f"lookahead must be at least 1, got {lookahead}")

        frames = list(frames)
        total = len(frames)
        if total == 0:
            return []

        scenes: List[SceneBoundary] = []
        last_scene_start = 0

        if total > lookahead:
            window = deque(self._prepare(frame) for frame in frames[: lookahead + 1])
            for index in range(total - lookahead):
                if index > 0:
                    window.popleft()
                    window.append(self._prepare(frames[index + lookahead]))
                score = self._window_score(window)
                if score > threshold:
                    scenes.append(SceneBoundary(start=last_scene_start, end=index))
                    last_scene_start = index
                self._record(index, threshold, score, lookahead)
            tail = list(window)[1:]
            tail_start = total - lookahead
        else:
            tail = [self._prepare(frame) for frame in frames]
            tail_start = 0

        # Shrinking windows over the frames behind the last full window.
        anchor = tail_start
        while len(tail) > 1:
            score = self._window_score(tail)
            if score > threshold:
                self._logger.debug("Cut candidate at frame %s inside the tail sweep not split", anchor)
                if self._state is not None:
                    self._state.info(f"possible cut at frame {anchor} in the last {len(tail)} frames, kept in final scene")
            self._record(anchor, threshold, score, len(tail) - 1)
            tail = tail[1:]
            anchor += 1

        scenes.append(SceneBoundary(start=last_scene_start, end=total - 1))
        return scenes

    # ------------------------------------------------------------------
    def _prepare(self, frame: Frame):
        return self._comparator.prepare(self._loader(frame.path))

    def _window_score(self, window) -> float:
        images = list(window)
        anchor = images[0]
        return min(self._comparator.compare(anchor, candidate) for candidate in images[1:])

    def _record(self, anchor: int, threshold: float, score: float, lookahead: int) -> None:
        if self._state is None:
            return
        self._state.progress_compare(threshold, score)
        self._state.info(f"compare frame {anchor} to {anchor + 1} [lookahead = {lookahead}]: {score:.6f}")


__all__ = ["WindowScanner"]
