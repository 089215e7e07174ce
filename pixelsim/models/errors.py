from __future__ import annotations


class SimilarityError(Exception):
    """Base class for every failure raised by the scoring engine."""


class BatchSizeMismatch(SimilarityError):
    """The two path sequences of a batch differ in length. Fatal to the batch."""

    def __init__(self, count_a: int, count_b: int):
        self.count_a = count_a
        self.count_b = count_b
        super().__init__(
            f"Cannot pair {count_a} images with {count_b} images: "
            f"both sequences must have the same length"
        )


class DecodeError(SimilarityError):
    """An image file could not be read or decoded."""

    def __init__(self, path, reason: str = "unreadable or corrupt image"):
        self.path = path
        super().__init__(f"{reason}: {path}")


class EmptyImage(SimilarityError):
    """An image has zero width or height, so no average can be taken."""

    def __init__(self, width: int, height: int, which: str = "image"):
        self.width = width
        self.height = height
        super().__init__(f"{which} is empty ({width}x{height})")


class DimensionMismatch(SimilarityError):
    """Images could not be brought to the same dimensions before differencing."""

    def __init__(self, size_a: tuple[int, int], size_b: tuple[int, int]):
        self.size_a = size_a
        self.size_b = size_b
        super().__init__(
            f"image sizes still differ after normalization: "
            f"{size_a[0]}x{size_a[1]} vs {size_b[0]}x{size_b[1]}"
        )


class InvalidImage(SimilarityError):
    """Pixel data whose layout cannot be scored (wrong dtype, rank or channel count)."""

    def __init__(self, reason: str):
        super().__init__(f"unusable pixel data: {reason}")
