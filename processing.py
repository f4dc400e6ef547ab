"""
LIGHTBOX IMAGE EDITOR - Source Loading

Turns decoded images into the editor's pixel buffer format:
(H, W, 4) uint8 arrays in RGBA order.
"""

import logging
from pathlib import Path

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class ImageLoadError(Exception):
    """The source image could not be turned into a pixel buffer."""


def to_rgba(img: np.ndarray) -> np.ndarray:
    """Normalize an in-memory RGB(A)/gray image to an (H, W, 4) uint8 RGBA buffer.

    Accepts uint8, uint16 and float (0.0-1.0) data with 1, 3 or 4 channels.
    Always returns a new array.
    """
    if img is None or not isinstance(img, np.ndarray):
        raise ImageLoadError("No image data")
    if img.ndim not in (2, 3) or img.size == 0:
        raise ImageLoadError(f"Unsupported image shape: {img.shape}")

    # Normalize bit depth to uint8
    if img.dtype == np.uint8:
        data = img
    elif img.dtype == np.uint16:
        data = np.round(img.astype(np.float32) / 257.0).astype(np.uint8)
    elif np.issubdtype(img.dtype, np.floating):
        data = (np.clip(img, 0, 1) * 255 + 0.5).astype(np.uint8)
    else:
        raise ImageLoadError(f"Unsupported image dtype: {img.dtype}")

    if data.ndim == 2:
        return cv2.cvtColor(np.ascontiguousarray(data), cv2.COLOR_GRAY2RGBA)

    channels = data.shape[2]
    if channels == 1:
        return cv2.cvtColor(np.ascontiguousarray(data[:, :, 0]), cv2.COLOR_GRAY2RGBA)
    if channels == 3:
        return cv2.cvtColor(np.ascontiguousarray(data), cv2.COLOR_RGB2RGBA)
    if channels == 4:
        return data.copy()
    raise ImageLoadError(f"Unsupported channel count: {channels}")


def load_image(path: str) -> np.ndarray:
    """Decode an image file into an RGBA pixel buffer.

    OpenCV decodes to BGR(A); channels are swapped to RGBA here.
    """
    path_obj = Path(path)
    if not path_obj.is_file():
        raise ImageLoadError(f"Could not load image: {path}")

    img = cv2.imread(str(path_obj), cv2.IMREAD_UNCHANGED)
    if img is None:
        raise ImageLoadError(f"Could not decode image: {path}")

    if img.ndim == 3 and img.shape[2] == 3:
        img = cv2.cvtColor(img, cv2.COLOR_BGR2RGB)
    elif img.ndim == 3 and img.shape[2] == 4:
        img = cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)

    buffer = to_rgba(img)
    logger.info("Loaded %s (%dx%d)", path_obj.name, buffer.shape[1], buffer.shape[0])
    return buffer


def save_image(path: str, buffer: np.ndarray) -> bool:
    """Encode an RGBA buffer to disk. The format follows the file extension.

    JPEG has no alpha, so the alpha channel is dropped for it.
    """
    ext = Path(path).suffix.lower()
    if ext in ('.jpg', '.jpeg'):
        output = cv2.cvtColor(buffer, cv2.COLOR_RGBA2BGR)
    else:
        output = cv2.cvtColor(buffer, cv2.COLOR_RGBA2BGRA)
    ok = cv2.imwrite(str(path), output)
    if ok:
        logger.info("Saved %s (%dx%d)", Path(path).name, buffer.shape[1], buffer.shape[0])
    else:
        logger.error("Failed to write %s", path)
    return ok
