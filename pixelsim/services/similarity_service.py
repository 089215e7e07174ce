import logging
import os
from dotenv import load_dotenv

from ..models.errors import DimensionMismatch, EmptyImage
from ..models.image import Image
from ..models.pair_result import PairScore
from .difference_service import DifferenceService
from .image_service import ImageService

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

MAX_CHANNEL_VALUE = 255


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class SimilarityService:
    """
    Pair scorer: mean absolute per-channel difference, expressed as a
    similarity percentage.

        similarity = 100 - (total / (pixels * channels)) / 255 * 100

    Identical images score exactly 100, images differing by 255 on every
    active channel score exactly 0.

    Size policy: image A is always the reference. When sizes differ image B is
    resized to A's dimensions and a note is attached to the score, which makes
    score(A, B) and score(B, A) differ for mismatched sizes.
    """

    def __init__(
        self,
        include_alpha: bool | None = None,
        *,
        image_service: ImageService | None = None,
        difference_service: DifferenceService | None = None,
    ):
        if include_alpha is None:
            include_alpha = _env_flag("PIXELSIM_INCLUDE_ALPHA")
        self.include_alpha = include_alpha
        self.channels = 4 if include_alpha else 3
        self.image_service = image_service or ImageService()
        self.difference_service = difference_service or DifferenceService()

    @staticmethod
    def _check_not_empty(img: Image, which: str) -> None:
        if img.is_empty:
            raise EmptyImage(img.width, img.height, which)

    def similarity_from_total(self, total_difference: float, pixel_count: int) -> float:
        average_difference = total_difference / (pixel_count * self.channels)
        return 100 - (average_difference / MAX_CHANNEL_VALUE * 100)

    def score(self, image_a: Image, image_b: Image) -> PairScore:
        """
        Score one decoded pair.

        Raises:
            EmptyImage: either image has zero width or height
            InvalidImage: pixel data is not uint8 grayscale, RGB or RGBA
            DimensionMismatch: image B could not be conformed to image A
        """
        self._check_not_empty(image_a, "image A")
        self._check_not_empty(image_b, "image B")

        image_a = self.image_service.as_rgba(image_a)
        image_b = self.image_service.as_rgba(image_b)
        image_b, note = self.image_service.conform_to(image_a, image_b)
        if image_b.size != image_a.size:
            raise DimensionMismatch(image_a.size, image_b.size)

        total = float(self.difference_service.total_difference(
            image_a.pixels, image_b.pixels, self.channels
        ))
        similarity = self.similarity_from_total(total, image_a.width * image_a.height)
        return PairScore(similarity=similarity, note=note)

    def score_single(self, image_a: Image, image_b: Image) -> PairScore:
        """Public single-pair entry point; same contract as `score`."""
        return self.score(image_a, image_b)

    def score_resized(self, image_a: Image, image_b: Image, width: int, height: int) -> PairScore:
        """
        Resize both images to a common (width, height) before scoring.
        Symmetric, unlike `score`, since neither image is the reference.
        """
        self._check_not_empty(image_a, "image A")
        self._check_not_empty(image_b, "image B")
        if width <= 0 or height <= 0:
            raise EmptyImage(width, height, "target size")

        resized_a = self.image_service.resize(image_a, width, height)
        resized_b = self.image_service.resize(image_b, width, height)
        result = self.score(resized_a, resized_b)
        note = (f"both images resized to {width}x{height} "
                f"(from {image_a.width}x{image_a.height} and {image_b.width}x{image_b.height})")
        return PairScore(similarity=result.similarity, note=note)
