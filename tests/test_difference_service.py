import numpy as np
import pytest

from pixelsim.services.difference_service import DifferenceService, SCALAR, VECTORIZED


def _pair(height, width, seed):
    rng = np.random.default_rng(seed)
    shape = (height, width, 4)
    return (rng.integers(0, 256, size=shape, dtype=np.uint8),
            rng.integers(0, 256, size=shape, dtype=np.uint8))


def _reference_total(a, b, channels):
    return int(np.abs(a[:, :, :channels].astype(np.int64) - b[:, :, :channels].astype(np.int64)).sum())


@pytest.mark.parametrize("lane_width", [1, 7, 16, 32, 64, 4096])
@pytest.mark.parametrize("width", [1, 5, 11, 32, 37])
@pytest.mark.parametrize("channels", [3, 4])
def test_total_matches_reference_for_any_lane_width(lane_width, width, channels):
    a, b = _pair(9, width, seed=width * 10 + channels)
    service = DifferenceService(lane_width=lane_width)
    assert service.total_difference(a, b, channels) == _reference_total(a, b, channels)


def test_vectorized_and_scalar_kernels_agree_on_the_same_rows():
    a, b = _pair(13, 29, seed=3)
    rows_a = a[:, :, :3].reshape(13, 87)
    rows_b = b[:, :, :3].reshape(13, 87)
    assert DifferenceService._vector_total(rows_a, rows_b) == DifferenceService._scalar_total(rows_a, rows_b)


def test_strategy_selected_by_row_width():
    service = DifferenceService(lane_width=32)
    assert service.strategy_for(10, 3) == SCALAR      # 30 bytes
    assert service.strategy_for(8, 4) == VECTORIZED   # 32 bytes
    assert service.strategy_for(100, 3) == VECTORIZED


def test_alpha_only_counted_when_requested():
    a = np.zeros((2, 2, 4), dtype=np.uint8)
    b = np.zeros((2, 2, 4), dtype=np.uint8)
    b[:, :, 3] = 200
    service = DifferenceService(lane_width=16)
    assert service.total_difference(a, b, 3) == 0
    assert service.total_difference(a, b, 4) == 4 * 200


def test_shape_mismatch_is_rejected():
    service = DifferenceService(lane_width=16)
    with pytest.raises(ValueError):
        service.total_difference(np.zeros((2, 2, 4), np.uint8), np.zeros((2, 3, 4), np.uint8), 3)


def test_lane_width_must_be_positive():
    with pytest.raises(ValueError):
        DifferenceService(lane_width=0)


def test_lane_width_from_environment(monkeypatch):
    monkeypatch.setenv("PIXELSIM_LANE_WIDTH", "8")
    assert DifferenceService().lane_width == 8


def test_detected_lane_width_is_a_simd_width():
    assert DifferenceService.detect_lane_width() in {16, 32, 64}
