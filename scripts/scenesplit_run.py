#!/usr/bin/env python3
"""Split a video into scenes from the command line."""
from __future__ import annotations

import argparse
import logging
import sys
import uuid
from pathlib import Path
from typing import List, Optional, TextIO

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.pipeline import (  # noqa: E402
    ConfigError,
    Orchestrator,
    OutputFormat,
    PipelineState,
    SceneSplitError,
    SplitConfig,
    SplitResult,
)
from src.service import config as service_config  # noqa: E402
from src.service.reports import build_report, write_reports  # noqa: E402

BAR_WIDTH = 30


class TerminalPresenter:
    """Prints new state messages together with a progress gauge."""

    def __init__(self, stream: TextIO | None = None, quiet: bool = False) -> None:
        self._stream = stream or sys.stdout
        self._quiet = quiet
        self._printed = 0

    def __call__(self, state: PipelineState) -> None:
        new_messages = state.messages_since(self._printed)
        if not new_messages:
            return
        self._printed += len(new_messages)
        if self._quiet:
            return
        gauge = render_gauge(state.phase, state.counter, state.total, state.ratio)
        for message in new_messages:
            print(f"{gauge} {message}", file=self._stream)
        self._stream.flush()


def render_gauge(phase: str, counter: int, total: int, ratio: float) -> str:
    filled = int(round(BAR_WIDTH * max(0.0, min(1.0, ratio))))
    bar = "#" * filled + "." * (BAR_WIDTH - filled)
    return f"[{phase:<9}] [{bar}] {counter}/{total}"


def print_summary(result: SplitResult, frame_rate: Optional[float], stream: TextIO | None = None) -> None:
    stream = stream or sys.stdout
    print(f"Found {len(result.scenes)} scene(s).", file=stream)
    for number, scene in enumerate(result.scenes, 1):
        timing = ""
        if frame_rate:
            timing = f" ({scene.start_seconds(frame_rate):.3f}s, {scene.duration_seconds(frame_rate):.3f}s)"
        print(f"Scene {number:03d}: frames {scene.start}-{scene.end}{timing}", file=stream)
    print(f"Output written to {result.output_dir}", file=stream)


def build_config(args: argparse.Namespace) -> SplitConfig:
    return SplitConfig(
        scale=args.scale,
        threshold=args.threshold,
        lookahead=args.lookahead,
        output_format=args.format,
        slideshow=args.slideshow,
        keep_cache=args.keep_cache,
        refresh_cache=args.refresh_cache,
        output_dir=Path(args.output_dir) if args.output_dir else None,
        metadata_pause_sec=max(0, service_config.METADATA_PAUSE_MS) / 1000,
        cleanup_pause_sec=max(0, service_config.CLEANUP_PAUSE_MS) / 1000,
        tool_retries=max(0, service_config.TOOL_RETRIES),
        retry_delay_sec=service_config.retry_delay(),
        tool_timeout_sec=service_config.tool_timeout(),
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Detect scene changes in a video and split it into scenes")
    parser.add_argument("input", metavar="INPUT", help="Path to video file")
    parser.add_argument(
        "-s",
        "--scale",
        type=float,
        default=0.1,
        help="The scale factor to apply to frames before comparing (default: 0.1)",
    )
    parser.add_argument(
        "-t",
        "--threshold",
        type=float,
        default=1.0,
        help="The DSSIM threshold above which a frame starts a new scene (default: 1)",
    )
    parser.add_argument(
        "-l",
        "--lookahead",
        type=int,
        default=1,
        metavar="FRAMES",
        help="The number of frames to compare against (default: 1)",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=[fmt.value for fmt in OutputFormat],
        default=OutputFormat.MKV.value,
        help="The output file format (default: mkv)",
    )
    parser.add_argument(
        "--slideshow",
        action="store_true",
        help="Export images instead of videos, used for splitting slideshows",
    )
    parser.add_argument(
        "--keep-cache",
        action="store_true",
        help="Leave the frames cache behind after splitting",
    )
    parser.add_argument(
        "--refresh-cache",
        action="store_true",
        help="Re-extract frames even when a frames cache already exists",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Directory for scene outputs (default: scenes_<input stem> next to the input)",
    )
    parser.add_argument(
        "--report-dir",
        type=str,
        default=None,
        help="Write JSON/CSV run reports to this directory",
    )
    parser.add_argument(
        "--report-format",
        choices=["json", "csv", "both"],
        default="both",
        help="Report format to persist when --report-dir is set (default: both)",
    )
    parser.add_argument("--quiet", action="store_true", help="Only print the final summary")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    state = PipelineState(Path(args.input), on_change=TerminalPresenter(quiet=args.quiet))
    try:
        orchestrator = Orchestrator(build_config(args), state)
    except ConfigError as error:
        print(f"[ERROR] {error}", file=sys.stderr)
        return 2

    try:
        result = orchestrator.run()
    except SceneSplitError as error:
        print(f"[ERROR] {error}", file=sys.stderr)
        return 1

    print_summary(result, state.frame_rate)

    if args.report_dir:
        run_id = uuid.uuid4().hex
        report = build_report(run_id, state.snapshot(), result)
        paths = write_reports(
            run_id,
            report,
            Path(args.report_dir),
            report_format=args.report_format,
            max_files=service_config.MAX_REPORT_FILES,
            max_bytes=service_config.MAX_REPORT_BYTES,
        )
        for label, path in sorted(paths.items()):
            print(f"Report {label}: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
