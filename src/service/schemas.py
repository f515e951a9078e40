"""Pydantic models for the scene split service."""
from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from src.pipeline.types import OutputFormat


class RunStatus(str, Enum):
    """Lifecycle states for split runs."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class SplitRequest(BaseModel):
    """Payload for starting a split run."""

    input_path: str = Field(..., description="Path to the input video on the service host")
    run_id: Optional[str] = Field(None, description="Caller-chosen identifier used to poll status while running")
    scale: float = Field(0.1, gt=0, description="Scale factor applied to frames before comparing")
    threshold: float = Field(1.0, ge=0, description="DSSIM above which a window is a scene cut")
    lookahead: int = Field(1, ge=1, description="Number of candidate frames compared against each anchor")
    output_format: OutputFormat = Field(OutputFormat.MKV, description="Output format: mkv|mp4|png")
    slideshow: bool = Field(False, description="Export one image per scene instead of clips")
    keep_cache: bool = Field(False, description="Leave the frame cache behind after splitting")
    refresh_cache: bool = Field(False, description="Re-extract frames even if a cache exists")
    output_dir: Optional[str] = Field(None, description="Directory for scene outputs")


class Sample(BaseModel):
    anchor_index: int
    score: float


class Scene(BaseModel):
    number: int = Field(..., ge=1)
    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)
    start_seconds: Optional[float] = None
    duration_seconds: Optional[float] = None
    output_path: Optional[str] = None


class ProgressSnapshot(BaseModel):
    """Read-only view of a run's progress state."""

    run_id: str
    status: RunStatus
    phase: str = "comparing"
    counter: int = 0
    total: int = 0
    ratio: float = 0.0
    frame_rate: Optional[float] = None
    frame_count: Optional[int] = None
    scene_count: Optional[int] = None
    cache: Optional[str] = None
    samples: List[Sample] = Field(default_factory=list)
    thresholds: List[Tuple[int, float]] = Field(default_factory=list)
    messages: List[str] = Field(default_factory=list)
    error: Optional[str] = None


class SplitResponse(BaseModel):
    run_id: str
    status: RunStatus
    scenes: List[Scene] = Field(default_factory=list)
    output_dir: Optional[str] = None
    cache_reused: bool = False
    reports: Dict[str, str] = Field(default_factory=dict)


class RunSummary(BaseModel):
    run_id: str
    status: RunStatus
    input_path: str
    phase: str
    counter: int
    total: int
    scene_count: Optional[int] = None
