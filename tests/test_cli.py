from __future__ import annotations

import importlib.util
import io
import json
import sys
from pathlib import Path

from src.pipeline.errors import SubprocessError
from src.pipeline.orchestrator import SplitResult
from src.pipeline.state import PipelineState
from src.pipeline.types import SceneBoundary

RUNNER_PATH = Path(__file__).resolve().parents[1] / "scripts" / "scenesplit_run.py"
MODULE_NAME = "scenesplit_run_test_module"
SPEC = importlib.util.spec_from_file_location(MODULE_NAME, RUNNER_PATH)
runner = importlib.util.module_from_spec(SPEC)
assert SPEC.loader is not None
sys.modules[MODULE_NAME] = runner
SPEC.loader.exec_module(runner)  # type: ignore[attr-defined]


class StubOrchestrator:
    fail_with: Exception | None = None

    def __init__(self, config, state: PipelineState, **_kwargs) -> None:
        config.validate()
        self.config = config
        self.state = state

    def run(self) -> SplitResult:
        if self.fail_with is not None:
            raise self.fail_with
        self.state.set_frame_rate(10.0)
        self.state.set_frame_count(20)
        self.state.info("get framerate")
        for _ in range(19):
            self.state.progress_compare(self.config.threshold, 0.01)
        scenes = [SceneBoundary(0, 9), SceneBoundary(9, 19)]
        self.state.set_scene_count(len(scenes))
        self.state.progress_split()
        output_dir = self.state.input_path.parent / "scenes_clip"
        return SplitResult(scenes=scenes, output_dir=output_dir, outputs=[output_dir / "scene_0001.mkv"])


def test_parse_args_defaults() -> None:
    args = runner.parse_args(["clip.mp4"])
    assert args.input == "clip.mp4"
    assert args.scale == 0.1
    assert args.threshold == 1.0
    assert args.lookahead == 1
    assert args.format == "mkv"
    assert args.slideshow is False
    assert args.keep_cache is False


def test_parse_args_short_flags() -> None:
    args = runner.parse_args(["clip.mp4", "-s", "0.25", "-t", "0.4", "-l", "3", "-f", "png", "--keep-cache"])
    assert (args.scale, args.threshold, args.lookahead, args.format) == (0.25, 0.4, 3, "png")
    assert args.keep_cache is True


def test_build_config_maps_arguments(tmp_path) -> None:
    args = runner.parse_args([str(tmp_path / "clip.mp4"), "-f", "mp4", "--slideshow", "--output-dir", str(tmp_path / "out")])
    config = runner.build_config(args)
    assert config.output_format == "mp4"
    assert config.slideshow is True
    assert config.output_dir == tmp_path / "out"


def test_main_rejects_invalid_lookahead(capsys) -> None:
    exit_code = runner.main(["clip.mp4", "-l", "0"])
    assert exit_code == 2
    assert "lookahead" in capsys.readouterr().err


def test_main_reports_pipeline_failure(monkeypatch, tmp_path, capsys) -> None:
    stub = type("FailingOrchestrator", (StubOrchestrator,), {"fail_with": SubprocessError("ffprobe failed: bad data")})
    monkeypatch.setattr(runner, "Orchestrator", stub)

    exit_code = runner.main([str(tmp_path / "clip.mp4")])

    assert exit_code == 1
    assert "ffprobe failed" in capsys.readouterr().err


def test_main_prints_summary_and_writes_reports(monkeypatch, tmp_path, capsys) -> None:
    monkeypatch.setattr(runner, "Orchestrator", StubOrchestrator)
    report_dir = tmp_path / "reports"

    exit_code = runner.main([str(tmp_path / "clip.mp4"), "--report-dir", str(report_dir), "--report-format", "json"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "Found 2 scene(s)." in out
    assert "Scene 002: frames 9-19 (0.900s, 1.100s)" in out
    assert "get framerate" in out

    reports = list(report_dir.glob("*.json"))
    assert len(reports) == 1
    payload = json.loads(reports[0].read_text(encoding="utf-8"))
    assert payload["scene_count"] == 2
    assert len(payload["samples"]) == 19


def test_presenter_prints_each_message_once() -> None:
    stream = io.StringIO()
    presenter = runner.TerminalPresenter(stream=stream)
    state = PipelineState(Path("clip.mp4"), on_change=presenter)
    state.set_frame_count(3)

    state.info("compare frames")
    state.progress_compare(1.0, 0.5)
    state.info("found 1 scenes")

    lines = stream.getvalue().splitlines()
    assert len(lines) == 2
    assert lines[0].endswith("compare frames")
    assert "1/2" in lines[1]


def test_quiet_presenter_prints_nothing() -> None:
    stream = io.StringIO()
    state = PipelineState(Path("clip.mp4"), on_change=runner.TerminalPresenter(stream=stream, quiet=True))
    state.info("get framerate")
    assert stream.getvalue() == ""


def test_render_gauge() -> None:
    assert runner.render_gauge("comparing", 5, 10, 0.5) == "[comparing] [" + "#" * 15 + "." * 15 + "] 5/10"
