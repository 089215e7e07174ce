"""
pixelsim: mean absolute channel-difference similarity between raster images.
"""
from .models.batch_report import BatchReport
from .models.errors import (
    BatchSizeMismatch,
    DecodeError,
    DimensionMismatch,
    EmptyImage,
    InvalidImage,
    SimilarityError,
)
from .models.image import Image
from .models.pair_result import PairResult, PairScore
from .pipeline.batch_scorer import score_batch
from .services.similarity_service import SimilarityService

__version__ = "1.0.0"


def score_single(image_a: Image, image_b: Image, include_alpha: bool | None = None) -> PairScore:
    """Score one decoded pair with a throwaway SimilarityService."""
    return SimilarityService(include_alpha).score_single(image_a, image_b)


__all__ = [
    "BatchReport",
    "BatchSizeMismatch",
    "DecodeError",
    "DimensionMismatch",
    "EmptyImage",
    "Image",
    "InvalidImage",
    "PairResult",
    "PairScore",
    "SimilarityError",
    "SimilarityService",
    "score_batch",
    "score_single",
]
