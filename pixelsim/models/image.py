from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import numpy as np

from .errors import InvalidImage

_CHANNEL_COUNTS = {1, 3, 4}


@dataclass(frozen=True, eq=False)
class Image:
    """
    Simple data object: uint8 pixels (+ optional source path for bookkeeping).
    No OpenCV logic outside the repository layer.

    Pixels are (H, W) grayscale or (H, W, C) with C in {1, 3, 4}; the scorer
    expands them to RGBA. The stored array is a read-only view.
    """
    pixels: np.ndarray # Shape (H, W, 4), dtype uint8, RGBA order once normalized.
    path: Path | None = None # Source of the image.

    def __post_init__(self):
        pixels = np.asarray(self.pixels)
        if pixels.dtype != np.uint8:
            raise InvalidImage(f"dtype must be uint8, got {pixels.dtype}")
        if pixels.ndim not in (2, 3):
            raise InvalidImage(f"expected a 2-D or 3-D array, got shape {pixels.shape}")
        if pixels.ndim == 3 and pixels.shape[2] not in _CHANNEL_COUNTS:
            raise InvalidImage(f"unsupported channel count {pixels.shape[2]}")

        view = pixels.view()
        view.flags.writeable = False
        object.__setattr__(self, "pixels", view)

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def channels(self) -> int:
        return 1 if self.pixels.ndim == 2 else int(self.pixels.shape[2])

    @property
    def is_rgba(self) -> bool:
        return self.channels == 4

    @property
    def size(self) -> tuple[int, int]:
        """(width, height), the order used in notes and messages."""
        return self.width, self.height

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0
