"""FastAPI service that runs scene splits and exposes their live progress."""
from __future__ import annotations

import asyncio
import logging
import threading
import time
from pathlib import Path
from typing import Dict, List, Optional
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Query

from src.pipeline import (
    ConfigError,
    Orchestrator,
    PipelineState,
    SceneSplitError,
    SplitConfig,
    StateSnapshot,
)

from .config import (
    CLEANUP_PAUSE_MS,
    MAX_REPORT_BYTES,
    MAX_REPORT_FILES,
    METADATA_PAUSE_MS,
    REPORT_DIR,
    TOOL_RETRIES,
    ensure_dirs,
    retry_delay,
    tool_timeout,
)
from .reports import build_report, scene_entries, write_reports
from .schemas import ProgressSnapshot, RunStatus, RunSummary, Sample, Scene, SplitRequest, SplitResponse

__version__ = "0.1.0"

# Minimum spacing between published snapshots while a run is comparing frames.
SNAPSHOT_INTERVAL_SEC = 0.25

ensure_dirs()

logger = logging.getLogger("scenesplit.service")

app = FastAPI(title="Scene Split Service", version=__version__)

_runs: Dict[str, ProgressSnapshot] = {}
_inputs: Dict[str, str] = {}
_results: Dict[str, SplitResponse] = {}
_runs_lock = threading.Lock()


def _to_model(run_id: str, status: RunStatus, snapshot: StateSnapshot, error: Optional[str] = None) -> ProgressSnapshot:
    return ProgressSnapshot(
        run_id=run_id,
        status=status,
        phase=snapshot.phase,
        counter=snapshot.counter,
        total=snapshot.total,
        ratio=snapshot.ratio,
        frame_rate=snapshot.frame_rate,
        frame_count=snapshot.frame_count,
        scene_count=snapshot.scene_count,
        cache=str(snapshot.cache) if snapshot.cache else None,
        samples=[Sample(anchor_index=sample.anchor_index, score=sample.score) for sample in snapshot.samples],
        thresholds=list(snapshot.thresholds),
        messages=list(snapshot.messages),
        error=error,
    )


def _publish(run_id: str, status: RunStatus, snapshot: StateSnapshot, error: Optional[str] = None) -> None:
    model = _to_model(run_id, status, snapshot, error)
    with _runs_lock:
        _runs[run_id] = model


class _SnapshotPublisher:
    """State observer that publishes throttled snapshots for status polling."""

    def __init__(self, run_id: str) -> None:
        self._run_id = run_id
        self._last_publish = 0.0
        self._last_phase: Optional[str] = None

    def __call__(self, state: PipelineState) -> None:
        now = time.monotonic()
        phase = state.phase
        if phase == self._last_phase and now - self._last_publish < SNAPSHOT_INTERVAL_SEC:
            return
        self._last_publish = now
        self._last_phase = phase
        _publish(self._run_id, RunStatus.RUNNING, state.snapshot())


def _create_orchestrator(request: SplitRequest, state: PipelineState) -> Orchestrator:
    config = SplitConfig(
        scale=request.scale,
        threshold=request.threshold,
        lookahead=request.lookahead,
        output_format=request.output_format,
        slideshow=request.slideshow,
        keep_cache=request.keep_cache,
        refresh_cache=request.refresh_cache,
        output_dir=Path(request.output_dir) if request.output_dir else None,
        metadata_pause_sec=max(0, METADATA_PAUSE_MS) / 1000,
        cleanup_pause_sec=max(0, CLEANUP_PAUSE_MS) / 1000,
        tool_retries=max(0, TOOL_RETRIES),
        retry_delay_sec=retry_delay(),
        tool_timeout_sec=tool_timeout(),
    )
    return Orchestrator(config, state, logger=logger)


@app.get("/health")
def health():
    return {"status": "ok", "service": "scenesplit", "version": __version__}


@app.post("/runs", response_model=SplitResponse)
async def create_run(payload: SplitRequest) -> SplitResponse:
    """Run a split to completion. Poll ``/runs/{run_id}/status`` meanwhile."""

    run_id = payload.run_id or uuid4().hex
    with _runs_lock:
        existing = _runs.get(run_id)
        if existing is not None and existing.status in {RunStatus.PENDING, RunStatus.RUNNING}:
            raise HTTPException(status_code=409, detail="Run id already in progress")
        _inputs[run_id] = payload.input_path
        _results.pop(run_id, None)

    started = time.perf_counter()
    state = PipelineState(Path(payload.input_path), on_change=_SnapshotPublisher(run_id), logger=logger)
    _publish(run_id, RunStatus.PENDING, state.snapshot())

    try:
        orchestrator = _create_orchestrator(payload, state)
    except ConfigError as error:
        _publish(run_id, RunStatus.FAILED, state.snapshot(), str(error))
        raise HTTPException(status_code=422, detail=str(error)) from error

    try:
        result = await asyncio.to_thread(orchestrator.run)
        snapshot = state.snapshot()
        report = build_report(run_id, snapshot, result)
        paths = write_reports(run_id, report, REPORT_DIR, max_files=MAX_REPORT_FILES, max_bytes=MAX_REPORT_BYTES)
        response = SplitResponse(
            run_id=run_id,
            status=RunStatus.COMPLETED,
            scenes=[Scene(**entry) for entry in scene_entries(result.scenes, snapshot.frame_rate, result.outputs)],
            output_dir=str(result.output_dir),
            cache_reused=result.cache_reused,
            reports=paths,
        )
    except SceneSplitError as error:
        _publish(run_id, RunStatus.FAILED, state.snapshot(), str(error))
        logger.error("Run %s failed after %.2fs: %s", run_id, time.perf_counter() - started, error)
        raise HTTPException(status_code=500, detail=f"Split failed: {error}") from error
    except Exception as error:
        _publish(run_id, RunStatus.FAILED, state.snapshot(), f"{type(error).__name__}: {error}")
        logger.exception("Run %s crashed after %.2fs", run_id, time.perf_counter() - started)
        raise HTTPException(status_code=500, detail=f"Split crashed: {type(error).__name__}: {error}") from error

    _publish(run_id, RunStatus.COMPLETED, snapshot)
    with _runs_lock:
        _results[run_id] = response

    logger.info(
        "Run %s completed in %.2fs (frames=%s, scenes=%d)",
        run_id,
        time.perf_counter() - started,
        snapshot.frame_count,
        len(result.scenes),
    )
    return response


@app.get("/runs/{run_id}/status", response_model=ProgressSnapshot)
def run_status(run_id: str) -> ProgressSnapshot:
    with _runs_lock:
        snapshot = _runs.get(run_id)
    if snapshot is None:
        raise HTTPException(status_code=404, detail="Unknown run id")
    return snapshot


@app.get("/runs/{run_id}/result", response_model=SplitResponse)
def run_result(run_id: str) -> SplitResponse:
    with _runs_lock:
        known = run_id in _runs
        result = _results.get(run_id)
    if not known:
        raise HTTPException(status_code=404, detail="Unknown run id")
    if result is None:
        raise HTTPException(status_code=409, detail="Run has not completed")
    return result


@app.get("/runs", response_model=List[RunSummary])
def list_runs(limit: int = Query(50, ge=1, le=500), offset: int = Query(0, ge=0)) -> List[RunSummary]:
    with _runs_lock:
        items = list(_runs.items())
        inputs = dict(_inputs)
    summaries = [
        RunSummary(
            run_id=run_id,
            status=snapshot.status,
            input_path=inputs.get(run_id, ""),
            phase=snapshot.phase,
            counter=snapshot.counter,
            total=snapshot.total,
            scene_count=snapshot.scene_count,
        )
        for run_id, snapshot in items
    ]
    return summaries[offset : offset + limit]
