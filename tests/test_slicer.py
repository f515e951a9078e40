from __future__ import annotations

from pathlib import Path
from typing import List

from src.pipeline.slicer import SceneSlicer, output_dir_for
from src.pipeline.tools import ToolRunner
from src.pipeline.types import OutputFormat, SceneBoundary


class RecordingRunner(ToolRunner):
    def __init__(self) -> None:
        super().__init__()
        self.commands: List[List[str]] = []

    @property
    def ffmpeg(self) -> str:
        return "ffmpeg"

    def run(self, cmd) -> str:
        self.commands.append(list(cmd))
        return ""


def _option(command: List[str], flag: str) -> str:
    return command[command.index(flag) + 1]


def test_output_dir_uses_input_stem() -> None:
    assert output_dir_for(Path("/videos/holiday.mp4")) == Path("/videos/scenes_holiday")


def test_video_slice_seeks_to_scene_start(tmp_path) -> None:
    runner = RecordingRunner()
    slicer = SceneSlicer(tmp_path / "out", OutputFormat.MP4, runner=runner)

    target = slicer.slice(tmp_path / "clip.mov", SceneBoundary(50, 99), 3, 25.0)

    assert target == tmp_path / "out" / "scene_0003.mp4"
    command = runner.commands[0]
    assert _option(command, "-ss") == "2.000"
    assert _option(command, "-t") == "2.000"
    assert _option(command, "-i") == str(tmp_path / "clip.mov")
    assert command[-1] == str(target)


def test_slideshow_exports_middle_frame_as_png(tmp_path) -> None:
    runner = RecordingRunner()
    slicer = SceneSlicer(tmp_path / "out", OutputFormat.MKV, slideshow=True, runner=runner)

    target = slicer.slice(tmp_path / "deck.mp4", SceneBoundary(10, 20), 1, 10.0)

    assert slicer.output_format is OutputFormat.PNG
    assert target.suffix == ".png"
    command = runner.commands[0]
    assert _option(command, "-ss") == "1.500"
    assert _option(command, "-frames:v") == "1"


def test_prepare_creates_output_dir(tmp_path) -> None:
    slicer = SceneSlicer(tmp_path / "nested" / "out")
    slicer.prepare()
    slicer.prepare()
    assert slicer.output_dir.is_dir()
