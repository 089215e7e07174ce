from pathlib import Path
from typing import List, Tuple, Union
import logging

from ..models.image import Image
from ..repositories.image_repository import ImageRepository

logger = logging.getLogger(__name__)


class ImageService:
    """I/O and geometry helpers.  No scoring logic here."""
    def __init__(self, image_repository: ImageRepository | None = None):
        self.image_repository = image_repository or ImageRepository()

    def load(self, path: str | Path) -> Image:
        """Load a single image from disk into an RGBA Image object."""
        return self.image_repository.load(path)

    def resize(self, image: Image, width: int, height: int) -> Image:
        return self.image_repository.resize(image, width, height)

    def as_rgba(self, img: Image) -> Image:
        return self.image_repository.to_rgba(img)

    def conform_to(self, reference: Image, img: Image) -> Tuple[Image, str | None]:
        """
        Bring *img* to the dimensions of *reference*.

        The reference is never touched, so the result is asymmetric when sizes
        differ: detail only present in the larger image B is thrown away.

        Returns:
            (Image, note): the conformed image and a note describing the resize,
            or the untouched image and None when sizes already match.
        """
        if img.size == reference.size:
            return img, None

        (w, h), (ref_w, ref_h) = img.size, reference.size
        resized = self.resize(img, ref_w, ref_h)
        note = f"image B resized from {w}x{h} to {ref_w}x{ref_h}"
        logger.info(note if img.path is None else f"{note} ({img.path})")
        return resized, note

    def list_files(self, folder: Union[str, Path], *, recursive: bool = False) -> List[Path]:
        """Image files of *folder*, sorted by path."""
        return self.image_repository.list_dir(folder, recursive=recursive)

    def pair_directories(
        self,
        folder_a: Union[str, Path],
        folder_b: Union[str, Path],
        *,
        recursive: bool = False,
    ) -> Tuple[List[Path], List[Path]]:
        """
        List both folders for a batch run. Files are paired by sorted position,
        not by name; the caller decides what to do if the counts differ.
        """
        paths_a = self.list_files(folder_a, recursive=recursive)
        paths_b = self.list_files(folder_b, recursive=recursive)
        logger.info(f"Found {len(paths_a)} images in {folder_a} and {len(paths_b)} in {folder_b}")
        return paths_a, paths_b
