"""
Image Codec
===========

Conversions between OpenCV matrices, RGBA frame buffers and JPEG bytes.

Design Rules:
    - This is the ONLY place in the codebase that encodes images
    - Validates shape and dtype
    - Fails fast on corrupt buffers
"""

import logging

import cv2
import numpy as np

from ninja_prompt.sampling.frame import Frame


logger = logging.getLogger(__name__)


class ImageEncodeError(Exception):
    """Raised when a frame cannot be converted or encoded."""
    pass


def bgr_to_rgba(bgr: np.ndarray) -> np.ndarray:
    """
    Convert a decoded OpenCV BGR image to an RGBA frame buffer.

    Args:
        bgr: BGR image as np.ndarray (H, W, 3), dtype=uint8

    Returns:
        RGBA image as np.ndarray (H, W, 4), dtype=uint8, alpha=255

    Raises:
        ImageEncodeError: If the image has an unexpected shape or dtype
    """
    if bgr is None or bgr.ndim != 3 or bgr.shape[2] != 3:
        shape = None if bgr is None else bgr.shape
        raise ImageEncodeError(f"Invalid BGR image shape: {shape}")
    if bgr.dtype != np.uint8:
        raise ImageEncodeError(f"Invalid BGR image dtype: {bgr.dtype}")

    return cv2.cvtColor(bgr, cv2.COLOR_BGR2RGBA)


def encode_frame_jpeg(frame: Frame, quality: int = 92) -> bytes:
    """
    Encode a frame's RGBA pixels as JPEG bytes.

    The alpha channel is dropped; JPEG has no transparency.

    Args:
        frame: Frame to encode
        quality: JPEG quality (0-100)

    Returns:
        JPEG-encoded image bytes

    Raises:
        ImageEncodeError: If the buffer is invalid or encoding fails
    """
    pixels = frame.pixels
    if not isinstance(pixels, np.ndarray) or pixels.ndim != 3 or pixels.shape[2] != 4:
        raise ImageEncodeError(
            f"Invalid pixel buffer for frame {frame.index}: "
            f"{getattr(pixels, 'shape', None)}"
        )
    if pixels.dtype != np.uint8 or pixels.size == 0:
        raise ImageEncodeError(
            f"Invalid pixel buffer for frame {frame.index}: dtype={pixels.dtype}, size={pixels.size}"
        )

    try:
        bgr = cv2.cvtColor(pixels, cv2.COLOR_RGBA2BGR)
        ok, encoded = cv2.imencode(".jpg", bgr, [int(cv2.IMWRITE_JPEG_QUALITY), quality])
    except cv2.error as e:
        raise ImageEncodeError(f"JPEG encode failed for frame {frame.index}: {e}")

    if not ok:
        raise ImageEncodeError(
            f"JPEG encode failed for frame {frame.index}: cv2.imencode returned False"
        )

    return encoded.tobytes()
