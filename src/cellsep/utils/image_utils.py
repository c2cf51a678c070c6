"""
Image Utilities Module
======================

Image loading and saving for the metrics pipeline.

Author: Cell Separation Metrics Team
Version: 1.0.0
"""

import logging
from pathlib import Path
from typing import Union

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from .error_handler import ImageLoadError


logger = logging.getLogger(__name__)


# ============================================================
# IMAGE I/O OPERATIONS
# ============================================================

def load_image(image_path: Union[str, Path]) -> np.ndarray:
    """
    Load an image as BGR (or single-plane) array, keeping its bit depth.

    OpenCV is tried first; files it cannot decode (multi-page or unusual
    TIFF variants, palette images) are read through Pillow instead.

    Parameters
    ----------
    image_path : str or Path
        Path to the image file

    Returns
    -------
    np.ndarray
        Loaded image

    Raises
    ------
    ImageLoadError
        If the file does not exist or neither decoder can read it

    Examples
    --------
    >>> img = load_image('data/original/slide_01.tif')
    """
    image_path = Path(image_path)

    if not image_path.exists():
        raise ImageLoadError(f"Image not found: {image_path}")

    image = cv2.imread(str(image_path), cv2.IMREAD_COLOR | cv2.IMREAD_ANYDEPTH)
    if image is not None:
        return image

    logger.debug(f"OpenCV could not decode {image_path.name}, trying Pillow")
    try:
        with Image.open(image_path) as pil_image:
            return pil_to_bgr(pil_image)
    except (UnidentifiedImageError, OSError) as e:
        raise ImageLoadError(f"Failed to load image: {image_path} ({e})") from e


def pil_to_bgr(pil_image: Image.Image) -> np.ndarray:
    """Convert a Pillow image to a BGR or single-plane numpy array."""
    if pil_image.mode in ('L', 'I;16', 'I;16B', 'I;16L'):
        return np.array(pil_image)
    if pil_image.mode != 'RGB':
        pil_image = pil_image.convert('RGB')
    return cv2.cvtColor(np.array(pil_image), cv2.COLOR_RGB2BGR)


def save_image(
    image: np.ndarray,
    output_path: Union[str, Path],
    create_dirs: bool = True,
    quality: int = 100
) -> bool:
    """
    Save an image to disk.

    Parameters
    ----------
    image : np.ndarray
        Image to save
    output_path : str or Path
        Output file path; the extension selects the format
    create_dirs : bool, optional
        Create parent directories if they don't exist
    quality : int, optional
        JPEG quality (0-100)

    Returns
    -------
    bool
        True if save was successful
    """
    output_path = Path(output_path)

    if create_dirs:
        output_path.parent.mkdir(parents=True, exist_ok=True)

    ext = output_path.suffix.lower()
    if ext in ['.jpg', '.jpeg']:
        params = [cv2.IMWRITE_JPEG_QUALITY, min(max(quality, 0), 100)]
    elif ext == '.png':
        params = [cv2.IMWRITE_PNG_COMPRESSION, 3]
    else:
        params = []

    try:
        return bool(cv2.imwrite(str(output_path), image, params))
    except cv2.error as e:
        logger.warning(f"Could not write {output_path}: {e}")
        return False


def merge_planes(blue: np.ndarray, green: np.ndarray, red: np.ndarray) -> np.ndarray:
    """Stack three single planes into a BGR image."""
    return cv2.merge([blue, green, red])
