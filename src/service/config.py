"""Runtime configuration for the scene split service and CLI."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

_BASE_DIR = Path(os.environ.get("SCENESPLIT_BASE_DIR", ".")).resolve()

REPORT_DIR = Path(os.environ.get("SCENESPLIT_REPORT_DIR", _BASE_DIR / "reports")).resolve()

MAX_REPORT_FILES = int(os.environ.get("SCENESPLIT_MAX_REPORT_FILES", "200"))
MAX_REPORT_BYTES = int(os.environ.get("SCENESPLIT_MAX_REPORT_BYTES", str(100 * 1024 * 1024)))
TOOL_RETRIES = int(os.environ.get("SCENESPLIT_TOOL_RETRIES", "0"))
TOOL_RETRY_DELAY_MS = int(os.environ.get("SCENESPLIT_TOOL_RETRY_DELAY_MS", "500"))
TOOL_TIMEOUT_MS = int(os.environ.get("SCENESPLIT_TOOL_TIMEOUT_MS", "0"))
METADATA_PAUSE_MS = int(os.environ.get("SCENESPLIT_METADATA_PAUSE_MS", "0"))
CLEANUP_PAUSE_MS = int(os.environ.get("SCENESPLIT_CLEANUP_PAUSE_MS", "0"))


def tool_timeout() -> Optional[float]:
    return TOOL_TIMEOUT_MS / 1000 if TOOL_TIMEOUT_MS > 0 else None


def retry_delay() -> float:
    return max(0, TOOL_RETRY_DELAY_MS) / 1000


def ensure_dirs() -> Path:
    REPORT_DIR.mkdir(parents=True, exist_ok=True)
    return REPORT_DIR


__all__ = [
    "REPORT_DIR",
    "MAX_REPORT_FILES",
    "MAX_REPORT_BYTES",
    "TOOL_RETRIES",
    "TOOL_RETRY_DELAY_MS",
    "TOOL_TIMEOUT_MS",
    "METADATA_PAUSE_MS",
    "CLEANUP_PAUSE_MS",
    "tool_timeout",
    "retry_delay",
    "ensure_dirs",
]
