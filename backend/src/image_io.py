"""Image loading: decodes a file to the 8-bit grid consumed by stats."""

import logging

import numpy as np
from PIL import Image

from security import validate_dimensions, validate_image_path

logger = logging.getLogger(__name__)


def load_gray(path: str) -> np.ndarray:
    """
    Decode an image file and convert it to 8-bit grayscale.

    Pillow's mode "L" conversion (ITU-R 601-2 luma) handles colour inputs.

    Returns:
        (H, W) uint8 array

    Raises:
        ValueError: path or decoded dimensions fail validation
    """
    errors = validate_image_path(path)
    if errors:
        raise ValueError(f"Invalid image {path}: {'; '.join(errors)}")

    with Image.open(path) as img:
        errors = validate_dimensions(img.width, img.height)
        if errors:
            raise ValueError(f"Invalid image {path}: {'; '.join(errors)}")
        source_mode = img.mode
        gray = img if img.mode == "L" else img.convert("L")
        samples = np.asarray(gray, dtype=np.uint8).copy()

    logger.debug(
        "Loaded %s: %dx%d mode=%s", path, samples.shape[1], samples.shape[0], source_mode
    )
    return samples
