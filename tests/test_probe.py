from __future__ import annotations

from typing import List

import pytest

from src.pipeline.errors import SubprocessError
from src.pipeline.probe import MetadataProbe, parse_frame_count, parse_frame_rate
from src.pipeline.tools import ToolRunner


class FakeRunner(ToolRunner):
    def __init__(self, outputs: List[object]) -> None:
        super().__init__()
        self.outputs = list(outputs)
        self.commands: List[List[str]] = []

    @property
    def ffprobe(self) -> str:
        return "ffprobe"

    def run(self, cmd) -> str:
        self.commands.append(list(cmd))
        output = self.outputs.pop(0)
        if isinstance(output, Exception):
            raise output
        return output


@pytest.mark.parametrize(
    "raw, expected",
    [("25/1\n", 25.0), ("30000/1001", 30000 / 1001), ("23.976", 23.976)],
)
def test_parse_frame_rate(raw, expected) -> None:
    assert parse_frame_rate(raw) == pytest.approx(expected)


@pytest.mark.parametrize("raw", ["", "abc", "0/0", "0/1"])
def test_parse_frame_rate_rejects_bad_values(raw) -> None:
    with pytest.raises(SubprocessError):
        parse_frame_rate(raw)


def test_parse_frame_count() -> None:
    assert parse_frame_count("240\n") == 240
    assert parse_frame_count("N/A") is None
    assert parse_frame_count("") is None
    with pytest.raises(SubprocessError):
        parse_frame_count("-3")
    with pytest.raises(SubprocessError):
        parse_frame_count("many")


def test_frame_rate_queries_first_video_stream(tmp_path) -> None:
    source = tmp_path / "clip.mp4"
    source.write_bytes(b"stub")
    runner = FakeRunner(["24/1\n"])

    assert MetadataProbe(runner).frame_rate(source) == 24.0
    command = runner.commands[0]
    assert command[0] == "ffprobe"
    assert "v:0" in command
    assert "stream=r_frame_rate" in command
    assert command[-1] == str(source)


def test_frame_rate_reports_missing_input(tmp_path) -> None:
    runner = FakeRunner([SubprocessError("ffprobe exited with 1")])

    with pytest.raises(SubprocessError, match="Input file does not exist"):
        MetadataProbe(runner).frame_rate(tmp_path / "missing.mp4")


def test_frame_rate_wraps_tool_failure_for_existing_input(tmp_path) -> None:
    source = tmp_path / "broken.mp4"
    source.write_bytes(b"stub")
    runner = FakeRunner([SubprocessError("ffprobe exited with 1: invalid data")])

    with pytest.raises(SubprocessError, match="ffprobe failed"):
        MetadataProbe(runner).frame_rate(source)


def test_frame_count_falls_back_to_counting(tmp_path) -> None:
    source = tmp_path / "clip.mkv"
    runner = FakeRunner(["N/A\n", "312\n"])

    assert MetadataProbe(runner).frame_count(source) == 312
    assert "stream=nb_frames" in runner.commands[0]
    assert "-count_frames" in runner.commands[1]
    assert "stream=nb_read_frames" in runner.commands[1]


def test_frame_count_fails_when_counting_is_unavailable(tmp_path) -> None:
    runner = FakeRunner(["N/A", "N/A"])

    with pytest.raises(SubprocessError):
        MetadataProbe(runner).frame_count(tmp_path / "clip.mkv")
