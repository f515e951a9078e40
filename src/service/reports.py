"""JSON/CSV run reports: scenes plus the comparison series behind them."""
from __future__ import annotations

import csv
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from src.pipeline.orchestrator import SplitResult
from src.pipeline.state import StateSnapshot
from src.pipeline.types import SceneBoundary

from .rotation import enforce_report_rotation

REPORT_SCHEMA_VERSION = "1.0"

logger = logging.getLogger("scenesplit.reports")


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def scene_entries(
    scenes: Sequence[SceneBoundary],
    frame_rate: Optional[float],
    outputs: Sequence[Path] = (),
) -> List[Dict[str, object]]:
    entries: List[Dict[str, object]] = []
    for number, scene in enumerate(scenes, 1):
        start, end = scene.as_tuple()
        entry: Dict[str, object] = {"number": number, "start": start, "end": end}
        if frame_rate:
            entry["start_seconds"] = round(scene.start_seconds(frame_rate), 6)
            entry["duration_seconds"] = round(scene.duration_seconds(frame_rate), 6)
        if number <= len(outputs):
            entry["output_path"] = str(outputs[number - 1])
        entries.append(entry)
    return entries


def build_report(run_id: str, snapshot: StateSnapshot, result: SplitResult) -> Dict[str, object]:
    return {
        "run_id": run_id,
        "schema_version": REPORT_SCHEMA_VERSION,
        "generated_at": _utcnow(),
        "input": str(snapshot.input_path),
        "frame_rate": snapshot.frame_rate,
        "frame_count": snapshot.frame_count,
        "scene_count": snapshot.scene_count,
        "cache": str(snapshot.cache) if snapshot.cache else None,
        "cache_reused": result.cache_reused,
        "output_dir": str(result.output_dir),
        "scenes": scene_entries(result.scenes, snapshot.frame_rate, result.outputs),
        "samples": [
            {"anchor_index": sample.anchor_index, "score": sample.score}
            for sample in snapshot.samples
        ],
        "thresholds": [list(pair) for pair in snapshot.thresholds],
        "messages": list(snapshot.messages),
    }


def write_reports(
    run_id: str,
    report: Dict[str, object],
    report_dir: Path,
    report_format: str = "both",
    max_files: int = 0,
    max_bytes: int = 0,
) -> Dict[str, str]:
    """Write the report as JSON and/or CSV. Failures are logged, never raised."""
    normalized_format = (report_format or "both").lower()
    if normalized_format not in {"json", "csv", "both"}:
        normalized_format = "both"
    write_json = normalized_format in {"json", "both"}
    write_csv = normalized_format in {"csv", "both"}

    try:
        report_dir.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        logger.warning("Failed to create report directory %s for %s: %s", report_dir, run_id, error)
        return {}
    json_path = report_dir / f"{run_id}.json"
    samples_csv_path = report_dir / f"samples_{run_id}.csv"
    scenes_csv_path = report_dir / f"scenes_{run_id}.csv"

    if write_json:
        try:
            json_path.write_text(json.dumps(report, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as error:
            logger.warning("Failed to write JSON report for %s: %s", run_id, error)
            write_json = False

    if write_csv:
        thresholds = {int(counter): float(value) for counter, value in report.get("thresholds", [])}
        try:
            with samples_csv_path.open("w", encoding="utf-8", newline="") as handle:
                writer = csv.writer(handle)
                writer.writerow(["run_id", "anchor_index", "score", "threshold", "above_threshold"])
                for sample in report.get("samples", []):
                    anchor = int(sample["anchor_index"])
                    score = float(sample["score"])
                    threshold = thresholds.get(anchor + 1)
                    writer.writerow(
                        [
                            run_id,
                            anchor,
                            f"{score:.6f}",
                            "" if threshold is None else f"{threshold:.6f}",
                            "" if threshold is None else str(score > threshold),
                        ]
                    )
            with scenes_csv_path.open("w", encoding="utf-8", newline="") as handle:
                writer = csv.writer(handle)
                writer.writerow(["run_id", "number", "start", "end", "start_seconds", "duration_seconds", "output_path"])
                for scene in report.get("scenes", []):
                    writer.writerow(
                        [
                            run_id,
                            scene["number"],
                            scene["start"],
                            scene["end"],
                            scene.get("start_seconds", ""),
                            scene.get("duration_seconds", ""),
                            scene.get("output_path", ""),
                        ]
                    )
        except OSError as error:
            logger.warning("Failed to write CSV reports for %s: %s", run_id, error)
            write_csv = False

    enforce_report_rotation(report_dir, max_files, max_bytes)

    paths: Dict[str, str] = {}
    if write_json and json_path.exists():
        paths["json_path"] = str(json_path)
    if write_csv and samples_csv_path.exists():
        paths["samples_csv_path"] = str(samples_csv_path)
    if write_csv and scenes_csv_path.exists():
        paths["scenes_csv_path"] = str(scenes_csv_path)
    return paths


__all__ = ["REPORT_SCHEMA_VERSION", "build_report", "scene_entries", "write_reports"]
