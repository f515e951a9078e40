"""Report directory rotation helpers."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

REPORT_SUFFIXES = {".json", ".csv"}


def _collect_reports(report_dir: Path) -> List[Path]:
    if not report_dir.exists():
        return []
    return [
        entry
        for entry in report_dir.iterdir()
        if entry.is_file() and entry.suffix.lower() in REPORT_SUFFIXES
    ]


def _total_size(paths: Iterable[Path]) -> int:
    size = 0
    for path in paths:
        try:
            size += path.stat().st_size
        except OSError:
            continue
    return size


def enforce_report_rotation(report_dir: Path, max_files: int, max_bytes: int) -> List[Path]:
    """Delete the oldest reports until both limits hold. Returns the removed paths."""
    removed: List[Path] = []
    if max_files <= 0 and max_bytes <= 0:
        return removed

    files = _collect_reports(report_dir)
    files.sort(key=lambda path: path.stat().st_mtime)

    def over_limits() -> bool:
        if max_files > 0 and len(files) > max_files:
            return True
        return max_bytes > 0 and _total_size(files) > max_bytes

    while files and over_limits():
        victim = files.pop(0)
        try:
            victim.unlink()
        except FileNotFoundError:
            continue
        except OSError:
            # Undeletable entry: stop instead of spinning on it.
            break
        removed.append(victim)
    return removed


__all__ = ["enforce_report_rotation"]
