import os
import threading

import numpy as np
import pytest

from pixelsim import score_batch
from pixelsim.models.errors import BatchSizeMismatch, DecodeError
from pixelsim.services.similarity_service import SimilarityService

from .images import solid

BLACK = solid(4, 4, (0, 0, 0))
WHITE = solid(4, 4, (255, 255, 255))


def synthetic_load(ref):
    """'black'/'white' name a 4x4 solid image, 'empty' a 0x0 one, anything else fails."""
    if ref.startswith("black"):
        return BLACK
    if ref.startswith("white"):
        return WHITE
    if ref.startswith("empty"):
        return solid(0, 0)
    raise DecodeError(ref)


def _synthetic_pairs(n):
    paths_a = [f"black{i}" for i in range(n)]
    paths_b = [f"black{i}" if i % 2 == 0 else f"white{i}" for i in range(n)]
    return paths_a, paths_b


def test_length_mismatch_fails_before_dispatch():
    calls = []

    def load(ref):
        calls.append(ref)
        return BLACK

    with pytest.raises(BatchSizeMismatch):
        score_batch(["black0", "black1"], ["black0"], load=load)
    assert calls == []


def test_empty_batch():
    report = score_batch([], [])
    assert report.total == 0
    assert report.successful == 0
    assert report.average is None
    assert report.summary() == "Zero pairs requested."


def test_aggregation_is_independent_of_worker_count():
    paths_a, paths_b = _synthetic_pairs(1000)
    serial = score_batch(paths_a, paths_b, load=synthetic_load, max_workers=1)
    parallel = score_batch(paths_a, paths_b, load=synthetic_load, max_workers=os.cpu_count() or 4)

    for report in (serial, parallel):
        assert report.total == 1000
        assert report.successful == 1000
        assert report.errors == ()
    assert (serial.successful, serial.average, serial.min, serial.max) == \
           (parallel.successful, parallel.average, parallel.min, parallel.max)
    assert serial.average == 50.0
    assert serial.min == 0.0
    assert serial.max == 100.0


def test_failures_are_isolated_and_counted():
    paths_a = ["black0", "missing1", "empty2", "black3", "black4"]
    paths_b = ["white0", "black1", "empty2", "black3", "nothing4"]
    report = score_batch(paths_a, paths_b, load=synthetic_load, max_workers=3)

    assert report.total == 5
    assert report.successful == 2
    assert report.failed == 3
    assert len(report.errors) + report.successful == report.total
    assert report.min == 0.0
    assert report.max == 100.0
    # errors come back in request order with their type
    assert report.errors[0].startswith("[1] missing1 vs black1: DecodeError")
    assert report.errors[1].startswith("[2] empty2 vs empty2: EmptyImage")
    assert report.errors[2].startswith("[4] black4 vs nothing4: DecodeError")


def test_unexpected_exceptions_are_recorded():
    def load(ref):
        if ref == "boom":
            raise RuntimeError("disk on fire")
        return BLACK

    report = score_batch(["boom", "black"], ["black", "black"], load=load)
    assert report.successful == 1
    assert report.errors == ("[0] boom vs black: RuntimeError: disk on fire",)


def test_no_successful_comparisons():
    report = score_batch(["x", "y"], ["x", "y"], load=synthetic_load)
    assert report.successful == 0
    assert report.average is None and report.min is None and report.max is None
    assert "No successful comparisons." in report.summary()
    assert "0/2 succeeded" in report.summary()


def test_progress_observer_sees_every_unit():
    seen = []
    lock = threading.Lock()

    def on_progress(done, total, result):
        with lock:
            seen.append((done, total, result.index))

    paths_a, paths_b = _synthetic_pairs(50)
    score_batch(paths_a, paths_b, load=synthetic_load, max_workers=4, on_progress=on_progress)

    assert sorted(done for done, _, _ in seen) == list(range(1, 51))
    assert {total for _, total, _ in seen} == {50}
    assert sorted(index for _, _, index in seen) == list(range(50))


def test_failing_observer_does_not_break_the_batch():
    def on_progress(done, total, result):
        raise ValueError("observer bug")

    paths_a, paths_b = _synthetic_pairs(4)
    report = score_batch(paths_a, paths_b, load=synthetic_load, on_progress=on_progress)
    assert report.successful == 4


def test_cancelled_batch_still_accounts_for_every_pair():
    cancel = threading.Event()
    cancel.set()
    paths_a, paths_b = _synthetic_pairs(10)
    report = score_batch(paths_a, paths_b, load=synthetic_load, cancel_event=cancel)
    assert report.successful == 0
    assert len(report.errors) == 10
    assert all("cancelled" in error for error in report.errors)


def test_resize_notes_are_collected():
    small = solid(2, 2, (0, 0, 0))

    def load(ref):
        return small if ref == "small" else BLACK

    report = score_batch(["small"], ["big"], load=load)
    assert report.successful == 1
    assert report.average == 100.0
    assert report.notes == ("[0] image B resized from 4x4 to 2x2",)


def test_fixed_size_resizes_both_images():
    report = score_batch(["black"], ["white"], load=synthetic_load, fixed_size=(2, 2))
    assert report.average == 0.0
    assert "both images resized to 2x2" in report.results[0].note


def test_batch_from_files(write_png):
    black = np.zeros((3, 3, 3), dtype=np.uint8)
    white = np.full((3, 3, 3), 255, dtype=np.uint8)
    paths_a = [write_png("a/0.png", black), write_png("a/1.png", black)]
    paths_b = [write_png("b/0.png", black), write_png("b/1.png", white)]
    (paths_b[0].parent / "2.png").write_bytes(b"junk")
    paths_a.append(paths_a[0])
    paths_b.append(paths_b[0].parent / "2.png")

    report = score_batch(paths_a, paths_b, similarity_service=SimilarityService(False))
    assert report.total == 3
    assert report.successful == 2
    assert report.average == 50.0
    assert "DecodeError" in report.errors[0]
