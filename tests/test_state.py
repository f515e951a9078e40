from __future__ import annotations

from pathlib import Path

from src.pipeline.state import Comparing, PipelineState, Splitting


def test_metadata_fields_are_write_once() -> None:
    state = PipelineState(Path("clip.mp4"))

    state.set_frame_rate(25.0)
    state.set_frame_rate(30.0)
    state.set_frame_count(100)
    state.set_frame_count(5)
    state.set_scene_count(3)
    state.set_scene_count(9)
    state.set_cache(Path("frames_clip.mp4"))
    state.set_cache(Path("elsewhere"))

    assert state.frame_rate == 25.0
    assert state.frame_count == 100
    assert state.scene_count == 3
    assert state.cache == Path("frames_clip.mp4")


def test_compare_progress_records_samples_and_thresholds() -> None:
    state = PipelineState(Path("clip.mp4"))
    state.set_frame_count(4)

    state.progress_compare(0.5, 0.1)
    state.progress_compare(0.5, 0.9)

    assert state.progress == Comparing(2)
    assert state.phase == "comparing"
    assert [sample.anchor_index for sample in state.samples] == [0, 1]
    assert [sample.score for sample in state.samples] == [0.1, 0.9]
    assert state.thresholds == ((1, 0.5), (2, 0.5))
    assert state.total == 3
    assert abs(state.ratio - 2 / 3) < 1e-9


def test_split_transition_resets_counter_and_ignores_comparisons() -> None:
    state = PipelineState(Path("clip.mp4"))
    for _ in range(5):
        state.progress_compare(1.0, 0.2)

    state.progress_split()
    assert state.progress == Splitting(1)
    assert state.phase == "splitting"

    state.progress_compare(1.0, 0.2)
    assert state.counter == 1
    assert len(state.samples) == 5

    state.progress_split()
    assert state.counter == 2


def test_splitting_total_is_scene_count() -> None:
    state = PipelineState(Path("clip.mp4"))
    state.set_frame_count(10)
    state.set_scene_count(4)
    state.progress_split()

    assert state.total == 4
    assert state.ratio == 0.25


def test_ratio_without_frame_count_is_zero() -> None:
    state = PipelineState(Path("clip.mp4"))
    state.progress_compare(1.0, 0.0)
    assert state.total == 0
    assert state.ratio == 0.0


def test_observer_sees_every_change_and_snapshot_is_frozen() -> None:
    seen = []
    state = PipelineState(Path("clip.mp4"), on_change=lambda current: seen.append(current.snapshot()))

    state.info("get framerate")
    state.set_frame_rate(24.0)
    state.set_frame_rate(50.0)
    state.progress_compare(1.0, 0.3)

    assert len(seen) == 3
    assert seen[0].messages == ("get framerate",)
    assert seen[0].frame_rate is None
    assert seen[-1].counter == 1
    assert seen[-1].samples[0].score == 0.3


def test_messages_since_returns_only_new_messages() -> None:
    state = PipelineState(Path("clip.mp4"))
    state.info("one")
    state.info("two")
    state.info("three")

    assert state.messages_since(1) == ("two", "three")
    assert state.messages_since(3) == ()
    assert state.messages == ("one", "two", "three")
