"""
PNG export of rendered buffers (Pillow, no pygame needed).
"""

import io
import logging
import os

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

DEFAULT_EXPORT_NAME = "glitch-contour.png"


def _to_image(frame):
    frame = np.asarray(frame)
    if frame.dtype != np.uint8 or frame.ndim != 3 or frame.shape[2] not in (3, 4):
        raise ValueError(
            f"Expected (H, W, 3|4) uint8 frame, got {frame.shape} {frame.dtype}")
    return Image.fromarray(frame.copy())


def encode_png(frame):
    """Encode an RGBA/RGB uint8 frame as PNG bytes."""
    buf = io.BytesIO()
    _to_image(frame).save(buf, format="PNG")
    return buf.getvalue()


def save_png(frame, path=None):
    """
    Save a frame as PNG.

    Args:
        frame: (H, W, 4) uint8 array from Renderer.render
        path: Target file or directory (default: glitch-contour.png in cwd)

    Returns:
        The path written
    """
    if path is None:
        path = DEFAULT_EXPORT_NAME
    elif os.path.isdir(path):
        path = os.path.join(path, DEFAULT_EXPORT_NAME)
    img = _to_image(frame)
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)
    img.save(path, format="PNG")
    logger.info("Saved %dx%d image to %s", img.width, img.height, path)
    return path
