import numpy as np
import pytest
from PIL import Image as PILImage


@pytest.fixture
def write_png(tmp_path):
    """Write an (H, W, C) uint8 array as a PNG under tmp_path and return the path."""
    def _write(name, pixels):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        PILImage.fromarray(np.asarray(pixels, dtype=np.uint8)).save(path)
        return path
    return _write
