from pathlib import Path
from typing import Union, Iterable, List, Iterator
import logging
import os
import numpy as np
import cv2
from PIL import Image as PILImage, UnidentifiedImageError
from dotenv import load_dotenv

from ..models.image import Image
from ..models.errors import DecodeError

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_EXTS = ".png,.jpg,.jpeg,.bmp,.gif,.tif,.tiff,.webp"

_INTERPOLATIONS = {
    "nearest": cv2.INTER_NEAREST,
    "linear": cv2.INTER_LINEAR,
    "cubic": cv2.INTER_CUBIC,
    "area": cv2.INTER_AREA,
    "lanczos": cv2.INTER_LANCZOS4,
}

# cv2.cvtColor codes keyed by channel count of the decoded array
_BGR_TO_RGBA = {1: cv2.COLOR_GRAY2RGBA, 3: cv2.COLOR_BGR2RGBA, 4: cv2.COLOR_BGRA2RGBA}
_RGB_TO_RGBA = {1: cv2.COLOR_GRAY2RGBA, 3: cv2.COLOR_RGB2RGBA}


class ImageRepository:
    """
    Handles file I/O, resizing and directory listing for Image entities.
    Every Image leaving this class is (H, W, 4) uint8 RGBA.
    """
    def __init__(self, interpolation: str | None = None):
        self.VALID_EXTS = {
            ext.strip().lower()
            for ext in os.getenv("VALID_IMAGE_EXTENSIONS", DEFAULT_EXTS).split(",")
            if ext.strip()
        }
        name = (interpolation or os.getenv("PIXELSIM_RESIZE_INTERPOLATION", "linear")).lower()
        if name not in _INTERPOLATIONS:
            raise ValueError(
                f"Unknown interpolation '{name}', expected one of {sorted(_INTERPOLATIONS)}"
            )
        self.interpolation = _INTERPOLATIONS[name]

    @staticmethod
    def _to_uint8(arr: np.ndarray) -> np.ndarray:
        if arr.dtype == np.uint8:
            return arr
        if arr.dtype == np.uint16:
            return (arr >> 8).astype(np.uint8)
        # float formats (EXR/HDR) are nominally in [0, 1]
        return np.clip(arr.astype(np.float64) * 255.0, 0, 255).astype(np.uint8)

    @staticmethod
    def _channels(arr: np.ndarray) -> int:
        return 1 if arr.ndim == 2 else arr.shape[2]

    @classmethod
    def _convert(cls, arr: np.ndarray, table: dict) -> np.ndarray:
        arr = cls._to_uint8(arr)
        channels = cls._channels(arr)
        if channels == 4 and table is _RGB_TO_RGBA:
            return np.array(arr, order="C", copy=True)
        if channels not in table:
            raise ValueError(f"Unsupported channel count: {channels}")
        if arr.ndim == 3 and channels == 1:
            arr = arr[:, :, 0]
        if arr.size == 0:
            # cvtColor rejects empty input
            return np.zeros((*arr.shape[:2], 4), dtype=np.uint8)
        # Image pixels are read-only views, OpenCV gets a writable C-ordered buffer
        return cv2.cvtColor(np.require(arr, requirements=["C", "W"]), table[channels])

    @classmethod
    def create_image(cls, pixels: np.ndarray, path: Union[str, Path] = None) -> Image:
        """
        Wrap RGB, RGBA or grayscale pixels as an RGBA Image.
        Missing alpha becomes 255 (opaque).
        """
        rgba = cls._convert(np.asarray(pixels), _RGB_TO_RGBA)
        return Image(pixels=rgba, path=None if path is None else Path(path))

    @classmethod
    def to_rgba(cls, image: Image) -> Image:
        """Expand a grayscale or RGB Image to RGBA; RGBA images pass through."""
        if image.is_rgba:
            return image
        return cls.create_image(image.pixels, image.path)

    @classmethod
    def load(cls, path: Union[str, Path]) -> Image:
        path = Path(path)
        if not path.is_file():
            raise DecodeError(path, "image not found")

        arr = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        if arr is not None:
            try:
                return Image(pixels=cls._convert(arr, _BGR_TO_RGBA), path=path)
            except ValueError as err:
                raise DecodeError(path, str(err)) from err

        # OpenCV builds without a GIF/WebP codec return None, so let Pillow try
        logger.debug(f"cv2.imread could not decode {path}, falling back to Pillow")
        try:
            with PILImage.open(path) as pil_img:
                rgba = np.asarray(pil_img.convert("RGBA"), dtype=np.uint8)
        except (UnidentifiedImageError, OSError) as err:
            raise DecodeError(path) from err
        return Image(pixels=np.ascontiguousarray(rgba), path=path)

    def resize(self, image: Image, width: int, height: int) -> Image:
        """Return a new Image of the given size; the input is left untouched."""
        pixels = np.require(image.pixels, requirements=["C", "W"])
        resized = cv2.resize(pixels, (width, height), interpolation=self.interpolation)
        return Image(pixels=resized, path=image.path)

    def iter_dir(
        self,
        folder: Union[str, Path],
        *,
        recursive: bool = False,
        exts: Iterable[str] | None = None,
    ) -> Iterator[Path]:
        """
        Yield image file paths in sorted order. Nothing is decoded here.
        """
        folder = Path(folder)
        if not folder.is_dir():
            raise NotADirectoryError(folder)

        allowed = {e.lower() for e in (exts or self.VALID_EXTS)}
        pattern = "**/*" if recursive else "*"

        for p in sorted(folder.glob(pattern)):
            if p.suffix.lower() not in allowed:
                logger.debug(f"Skipping due to extension: {p}")
                continue
            if not p.is_file():
                logger.debug(f"Skipping because not file: {p}")
                continue
            yield p

    def list_dir(
        self, folder: Union[str, Path], *, recursive=False, exts=None
    ) -> List[Path]:
        return list(self.iter_dir(folder, recursive=recursive, exts=exts))
