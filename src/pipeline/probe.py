"""ffprobe based discovery of frame rate and frame count."""
from __future__ import annotations

import logging
from fractions import Fraction
from pathlib import Path
from typing import List, Optional

from .errors import SubprocessError
from .tools import ToolRunner

_COMMON_ARGS = [
    "-v",
    "error",
    "-select_streams",
    "v:0",
    "-of",
    "default=noprint_wrappers=1:nokey=1",
]


def parse_frame_rate(raw: str) -> float:
    """Parse ffprobe's ``r_frame_rate`` which is either ``num/den`` or a decimal."""
    text = raw.strip()
    try:
        value = Fraction(text)
    except (ValueError, ZeroDivisionError) as error:
        raise SubprocessError(f"Could not parse frame rate from ffprobe output {text!r}") from error
    if value <= 0:
        raise SubprocessError(f"ffprobe reported a non-positive frame rate {text!r}")
    return float(value)


def parse_frame_count(raw: str) -> Optional[int]:
    """Return the frame count, or None when ffprobe reports it as unavailable."""
    text = raw.strip()
    if text in {"", "N/A"}:
        return None
    try:
        count = int(text)
    except ValueError as error:
        raise SubprocessError(f"Could not parse frame count from ffprobe output {text!r}") from error
    if count < 0:
        raise SubprocessError(f"ffprobe reported a negative frame count {text!r}")
    return count


class MetadataProbe:
    def __init__(self, runner: ToolRunner | None = None, logger: Optional[logging.Logger] = None) -> None:
        self._runner = runner or ToolRunner()
        self._logger = logger or logging.getLogger(__name__)

    def frame_rate(self, source: Path) -> float:
        cmd = self._command(source, ["-show_entries", "stream=r_frame_rate"])
        try:
            output = self._runner.run(cmd)
        except SubprocessError as error:
            if source.exists():
                raise SubprocessError(f"ffprobe failed: {error}") from error
            raise SubprocessError(f"Input file does not exist: {source}") from error
        return parse_frame_rate(output)

    def frame_count(self, source: Path) -> int:
        output = self._runner.run(self._command(source, ["-show_entries", "stream=nb_frames"]))
        count = parse_frame_count(output)
        if count is not None:
            return count

        # Container carries no frame count; decode the stream and count.
        self._logger.debug("nb_frames unavailable for %s, counting frames", source)
        output = self._runner.run(
            self._command(source, ["-count_frames", "-show_entries", "stream=nb_read_frames"])
        )
        count = parse_frame_count(output)
        if count is None:
            raise SubprocessError(f"ffprobe could not count frames of {source}")
        return count

    def _command(self, source: Path, entries: List[str]) -> List[str]:
        return [self._runner.ffprobe, *_COMMON_ARGS, *entries, str(source)]


__all__ = ["MetadataProbe", "parse_frame_count", "parse_frame_rate"]
