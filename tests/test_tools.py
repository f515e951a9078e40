from __future__ import annotations

import subprocess
import sys

import pytest

from src.pipeline.errors import SubprocessError
from src.pipeline.tools import ToolConfig, ToolRunner


def test_run_returns_stdout() -> None:
    runner = ToolRunner()
    output = runner.run([sys.executable, "-c", "print('25/1')"])
    assert output.strip() == "25/1"


def test_nonzero_exit_is_wrapped_with_stderr() -> None:
    runner = ToolRunner()
    with pytest.raises(SubprocessError, match="exited with 3: boom"):
        runner.run([sys.executable, "-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"])


def test_missing_executable_is_wrapped(tmp_path) -> None:
    with pytest.raises(SubprocessError, match="could not be started"):
        ToolRunner().run([str(tmp_path / "no-such-tool")])


def test_retries_until_success(monkeypatch) -> None:
    attempts = {"count": 0}

    def fake_run(args, **kwargs):
        attempts["count"] += 1
        if attempts["count"] < 3:
            raise subprocess.CalledProcessError(1, args, stderr=b"busy")
        return subprocess.CompletedProcess(args, 0, stdout=b"ok", stderr=b"")

    monkeypatch.setattr(subprocess, "run", fake_run)
    runner = ToolRunner(ToolConfig(retries=2, retry_delay_sec=0))

    assert runner.run(["ffprobe"]) == "ok"
    assert attempts["count"] == 3


def test_retries_are_bounded(monkeypatch) -> None:
    attempts = {"count": 0}

    def fake_run(args, **kwargs):
        attempts["count"] += 1
        raise subprocess.TimeoutExpired(args, 1.0)

    monkeypatch.setattr(subprocess, "run", fake_run)
    runner = ToolRunner(ToolConfig(retries=1, retry_delay_sec=0))

    with pytest.raises(SubprocessError, match="timed out"):
        runner.run(["ffmpeg"])
    assert attempts["count"] == 2
