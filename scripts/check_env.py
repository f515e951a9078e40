#!/usr/bin/env python3
import os, sys, shutil, subprocess
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

def ok(msg): print("[OK] " + msg)
def warn(msg): print("[WARN] " + msg)
def fail(msg): print("[FAIL] " + msg); sys.exit(1)

# 1) Python libraries
for module in ("numpy", "cv2", "skimage"):
    try:
        __import__(module)
        ok(f"{module} import is available")
    except ImportError as error:
        fail(f"{module} not available: {error}")

# 2) ffmpeg / ffprobe
from src.pipeline.tools import FFMPEG_PATH, FFPROBE_PATH  # noqa: E402

for name, path in (("ffmpeg", FFMPEG_PATH), ("ffprobe", FFPROBE_PATH)):
    if not path:
        fail(f"{name} not found. Install it or set SCENESPLIT_{name.upper()}")
    try:
        banner = subprocess.run([path, "-version"], capture_output=True, text=True, timeout=10).stdout
    except (OSError, subprocess.TimeoutExpired) as error:
        fail(f"{name} at {path} is not runnable: {error}")
    ok(f"{name} found at {path} ({banner.splitlines()[0] if banner else 'unknown version'})")

# 3) Ensure folders
from src.service.config import ensure_dirs  # noqa: E402

report_dir = ensure_dirs()
if os.access(report_dir, os.W_OK):
    ok(f"Report folder ensured at {report_dir}")
else:
    warn(f"Report folder {report_dir} is not writable")

print("\nEnvironment check passed")
