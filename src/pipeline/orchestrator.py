"""High-level scene split orchestrator."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from .comparator import Comparator
from .errors import ConfigError, SceneSplitError, SubprocessError
from .frames import FrameStore, cache_dir_for
from .probe import MetadataProbe
from .scanner import WindowScanner
from .slicer import SceneSlicer, output_dir_for
from .state import PipelineState
from .tools import ToolConfig, ToolRunner
from .types import OutputFormat, SceneBoundary


@dataclass
class SplitConfig:
    scale: float = 0.1
    threshold: float = 1.0
    lookahead: int = 1
    output_format: OutputFormat = OutputFormat.MKV
    slideshow: bool = False
    keep_cache: bool = False
    refresh_cache: bool = False
    output_dir: Optional[Path] = None
    metadata_pause_sec: float = 0.0
    cleanup_pause_sec: float = 0.0
    tool_retries: int = 0
    retry_delay_sec: float = 0.5
    tool_timeout_sec: Optional[float] = None

    def validate(self) -> None:
        if self.lookahead < 1:
            raise ConfigError(f"lookahead must be at least 1, got {self.lookahead}")
        if self.scale <= 0:
            raise ConfigError(f"scale must be positive, got {self.scale}")
        if self.threshold < 0:
            raise ConfigError(f"threshold must not be negative, got {self.threshold}")
        if self.tool_retries < 0:
            raise ConfigError(f"tool_retries must not be negative, got {self.tool_retries}")
        try:
            self.output_format = OutputFormat(self.output_format)
        except ValueError as error:
            choices = ", ".join(fmt.value for fmt in OutputFormat)
            raise ConfigError(f"Unsupported output format {self.output_format!r} (expected one of {choices})") from error


@dataclass
class SplitResult:
    scenes: List[SceneBoundary]
    output_dir: Path
    outputs: List[Path] = field(default_factory=list)
    cache_reused: bool = False


class Orchestrator:
    """Runs probing, extraction, comparison, slicing and cleanup in order.

    Every stage announces itself on the shared state, does its work and then
    reports the result, so presenters attached to the state see each step.
    """

    def __init__(
        self,
        config: SplitConfig,
        state: PipelineState,
        comparator: Comparator | None = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        config.validate()
        self._config = config
        self._state = state
        self._logger = logger or logging.getLogger(__name__)
        runner = ToolRunner(
            ToolConfig(
                timeout_sec=config.tool_timeout_sec,
                retries=config.tool_retries,
                retry_delay_sec=config.retry_delay_sec,
            ),
            self._logger,
        )
        source = state.input_path
        self._probe = MetadataProbe(runner, self._logger)
        self._store = FrameStore(cache_dir_for(source), runner, self._logger)
        self._scanner = WindowScanner(comparator, state, logger=self._logger)
        self._slicer = SceneSlicer(
            config.output_dir or output_dir_for(source),
            config.output_format,
            config.slideshow,
            runner,
            self._logger,
        )
        self._sleep: Callable[[float], None] = time.sleep

    @property
    def state(self) -> PipelineState:
        return self._state

    def run(self) -> SplitResult:
        self.discover_frame_rate()
        self.discover_frame_count()
        self._pause(self._config.metadata_pause_sec)

        cache_reused = self.extract_frames()
        scenes = self.compare_frames()

        self._state.progress_split()
        outputs = self.split_video(scenes)

        self._pause(self._config.cleanup_pause_sec)
        self.cleanup()
        return SplitResult(
            scenes=scenes,
            output_dir=self._slicer.output_dir,
            outputs=outputs,
            cache_reused=cache_reused,
        )

    # ------------------------------------------------------------------
    def discover_frame_rate(self) -> float:
        self._state.info("get framerate")
        frame_rate = self._probe.frame_rate(self._state.input_path)
        self._state.set_frame_rate(frame_rate)
        self._state.info(f"framerate is {frame_rate:g} fps")
        return frame_rate

    def discover_frame_count(self) -> int:
        self._state.info("get frame count")
        frame_count = self._probe.frame_count(self._state.input_path)
        self._state.set_frame_count(frame_count)
        self._state.info(f"got {frame_count} frames")
        return frame_count

    def extract_frames(self) -> bool:
        """Populate the frame cache. Returns True when an existing cache was reused."""
        self._state.info("create image sequence")
        cache_name = self._store.directory.name

        if self._store.exists() and not self._config.refresh_cache:
            self._state.info("found existing cache")
            self._state.set_cache(self._store.directory)
            self._state.info(f"cache set to '{cache_name}'")
            return True

        if self._store.exists():
            self._state.info("discarding existing cache")
            self._store.remove()

        self._store.create()
        self._state.info("created cache")
        self._state.set_cache(self._store.directory)
        self._state.info(f"cache set to '{cache_name}'")

        self._state.info("splitting into frames...")
        try:
            self._store.extract(self._state.input_path, self._config.scale)
        except SceneSplitError:
            # A partial cache would be reused as-is by the next run.
            self._state.info("extraction failed, removing partial cache")
            self._store.remove()
            raise
        self._state.info("created image sequence")
        return False

    def compare_frames(self) -> List[SceneBoundary]:
        self._state.info("compare frames")
        frames = self._store.frames()
        if not frames:
            raise SubprocessError(f"Frame extraction produced no images in {self._store.directory}")

        expected = self._state.frame_count
        if expected is not None and expected != len(frames):
            self._logger.warning(
                "Frame cache holds %d frames but ffprobe reported %d", len(frames), expected
            )

        scenes = self._scanner.scan(frames, self._config.lookahead, self._config.threshold)
        self._state.set_scene_count(len(scenes))
        self._state.info(f"found {len(scenes)} scenes")
        return scenes

    def split_video(self, scenes: List[SceneBoundary]) -> List[Path]:
        """Slice every scene; the progress counter names the scene being written."""
        frame_rate = self._state.frame_rate
        if frame_rate is None:
            raise SceneSplitError("frame rate must be discovered before splitting")

        self._state.info(f"writing scenes to '{self._slicer.output_dir}'")
        self._slicer.prepare()

        outputs: List[Path] = []
        total = len(scenes)
        for number, scene in enumerate(scenes, 1):
            if number > 1:
                self._state.progress_split()
            target = self._slicer.slice(self._state.input_path, scene, number, frame_rate)
            outputs.append(target)
            self._state.info(f"split scene {number}/{total} [{scene.start}, {scene.end}] -> {target.name}")
        return outputs

    def cleanup(self) -> None:
        if self._config.keep_cache:
            self._state.info(f"kept cache '{self._store.directory.name}'")
            return
        self._state.info("remove cache")
        self._store.remove()
        self._state.info("removed cache")

    # ------------------------------------------------------------------
    def _pause(self, seconds: float) -> None:
        if seconds > 0:
            self._sleep(seconds)


__all__ = ["Orchestrator", "SplitConfig", "SplitResult"]
