"""Scene detection and splitting pipeline components."""

from .comparator import Comparator, ComparatorConfig, DssimComparator
from .errors import ConfigError, DecodeError, SceneSplitError, StorageError, SubprocessError
from .frames import FrameStore, cache_dir_for, load_frame
from .orchestrator import Orchestrator, SplitConfig, SplitResult
from .probe import MetadataProbe
from .scanner import WindowScanner
from .slicer import SceneSlicer, output_dir_for
from .state import Comparing, PipelineState, Splitting, StateSnapshot
from .tools import ToolConfig, ToolRunner
from .types import ComparisonSample, Frame, OutputFormat, SceneBoundary

__all__ = [
    "Comparator",
    "ComparatorConfig",
    "DssimComparator",
    "ConfigError",
    "DecodeError",
    "SceneSplitError",
    "StorageError",
    "SubprocessError",
    "FrameStore",
    "cache_dir_for",
    "load_frame",
    "Orchestrator",
    "SplitConfig",
    "SplitResult",
    "MetadataProbe",
    "WindowScanner",
    "SceneSlicer",
    "output_dir_for",
    "Comparing",
    "PipelineState",
    "Splitting",
    "StateSnapshot",
    "ToolConfig",
    "ToolRunner",
    "ComparisonSample",
    "Frame",
    "OutputFormat",
    "SceneBoundary",
]
