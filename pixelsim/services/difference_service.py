import logging
import os
import numpy as np
import cv2
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

VECTORIZED = "vectorized"
SCALAR = "scalar"


class DifferenceService:
    """
    Sum of absolute per-channel differences between two equal-sized pixel arrays.

    Each image row is viewed as a flat run of `width * channels` bytes. The
    lane-aligned bulk of every row goes through OpenCV's L1 norm (SIMD
    absolute-difference + horizontal sum); the tail of each row shorter than one
    lane goes through the scalar loop. Rows shorter than a lane are handled
    entirely by the scalar loop.

    Both paths return exact integers. Every term is a non-negative integer
    below 256, so any summation order gives the same total.
    """

    def __init__(self, lane_width: int | None = None):
        if lane_width is None:
            env_width = os.getenv("PIXELSIM_LANE_WIDTH")
            lane_width = int(env_width) if env_width else self.detect_lane_width()
        if lane_width < 1:
            raise ValueError(f"lane_width must be positive, got {lane_width}")
        self.lane_width = lane_width

    @staticmethod
    def detect_lane_width() -> int:
        """Widest SIMD register (in bytes) the host CPU reports to OpenCV."""
        for feature, width in (("CPU_AVX_512F", 64), ("CPU_AVX2", 32)):
            flag = getattr(cv2, feature, None)
            if flag is not None and cv2.checkHardwareSupport(flag):
                return width
        return 16

    def strategy_for(self, width: int, channels: int) -> str:
        return VECTORIZED if width * channels >= self.lane_width else SCALAR

    @staticmethod
    def _scalar_total(rows_a: np.ndarray, rows_b: np.ndarray) -> int:
        total = 0
        for row_a, row_b in zip(rows_a.tolist(), rows_b.tolist()):
            for x, y in zip(row_a, row_b):
                total += abs(x - y)
        return total

    @staticmethod
    def _vector_total(rows_a: np.ndarray, rows_b: np.ndarray) -> int:
        # NORM_L1 accumulates uint8 blocks in integers, the double result is exact
        return int(cv2.norm(np.ascontiguousarray(rows_a), np.ascontiguousarray(rows_b), cv2.NORM_L1))

    def total_difference(self, pixels_a: np.ndarray, pixels_b: np.ndarray, channels: int) -> int:
        """
        Args:
            pixels_a, pixels_b: (H, W, C) uint8 arrays of identical shape, C >= channels
            channels: how many leading channels take part (3 = RGB, 4 = RGBA)

        Returns:
            int: sum over every pixel and active channel of |a - b|
        """
        if pixels_a.shape != pixels_b.shape:
            raise ValueError(f"Shape mismatch: {pixels_a.shape} vs {pixels_b.shape}")

        height, width = pixels_a.shape[:2]
        row_bytes = width * channels
        # writable copies when the input is a read-only Image view
        rows_a = np.require(pixels_a[:, :, :channels], requirements=["C", "W"]).reshape(height, row_bytes)
        rows_b = np.require(pixels_b[:, :, :channels], requirements=["C", "W"]).reshape(height, row_bytes)

        if self.strategy_for(width, channels) == SCALAR:
            logger.debug(f"Scalar kernel: {row_bytes} bytes/row < lane width {self.lane_width}")
            return self._scalar_total(rows_a, rows_b)

        aligned = row_bytes - row_bytes % self.lane_width
        total = self._vector_total(rows_a[:, :aligned], rows_b[:, :aligned])
        if aligned < row_bytes:
            total += self._scalar_total(rows_a[:, aligned:], rows_b[:, aligned:])
        return total
