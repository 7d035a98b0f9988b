"""
Video Sources
=============

Seekable video abstraction used by the FrameSampler.

A video source exposes its duration and native resolution, a seek
operation that returns once the new position has settled, and a
capture operation returning the currently displayed image.

Components:
    - VideoSource: Protocol for seekable sources
    - OpenCVVideoSource: cv2.VideoCapture-backed source (files, URLs)

Design Rules:
    - One seek+capture in flight per source (callers hold `lock`)
    - Captured images are RGBA uint8 at native resolution
"""

import logging
import threading
import time
from typing import Optional, Protocol

import cv2
import numpy as np

from ninja_prompt.sampling.image_codec import ImageEncodeError, bgr_to_rgba


logger = logging.getLogger(__name__)


class SourceUnavailable(Exception):
    """Raised when a video cannot be opened or decoded."""
    pass


class SeekTimeout(Exception):
    """Raised when a seek does not settle within the allowed wait."""
    pass


class VideoSource(Protocol):
    """
    Protocol for seekable video sources.

    Implementations:
        - OpenCVVideoSource (local files and streams OpenCV can open)
        - in-memory sources in the test suite
    """

    lock: threading.Lock

    @property
    def duration(self) -> float:
        """Duration of the video in seconds."""
        ...

    @property
    def width(self) -> int:
        ...

    @property
    def height(self) -> int:
        ...

    def seek(self, timestamp: float, timeout: float) -> None:
        """
        Move to `timestamp` and block until the position has settled.

        Raises:
            SeekTimeout: If the seek does not settle within `timeout`
        """
        ...

    def capture(self) -> np.ndarray:
        """Return the current image as an RGBA (H, W, 4) uint8 array."""
        ...

    def close(self) -> None:
        ...


class OpenCVVideoSource:
    """
    Video source backed by cv2.VideoCapture.

    Duration is derived from the container's frame count and FPS.
    A seek sets CAP_PROP_POS_MSEC and is considered settled once a
    frame has been grabbed at the new position.

    Attributes:
        path: File path or URL passed to OpenCV
        poll_interval: Seconds between grab attempts while settling

    Example:
        with OpenCVVideoSource("clip.mp4") as source:
            source.seek(2.5, timeout=5.0)
            rgba = source.capture()
    """

    def __init__(self, path: str, poll_interval: float = 0.01) -> None:
        """
        Open the video.

        Args:
            path: File path or URL
            poll_interval: Delay between grab attempts while seeking

        Raises:
            SourceUnavailable: If the video cannot be opened or reports
                no usable duration or resolution
        """
        self.path = path
        self.poll_interval = poll_interval
        self.lock = threading.Lock()
        self._settled = False

        self._capture: Optional[cv2.VideoCapture] = cv2.VideoCapture(path)
        if not self._capture.isOpened():
            self._capture.release()
            self._capture = None
            raise SourceUnavailable(f"Failed to open video: {path}")

        fps = self._capture.get(cv2.CAP_PROP_FPS)
        frame_count = self._capture.get(cv2.CAP_PROP_FRAME_COUNT)
        self._width = int(self._capture.get(cv2.CAP_PROP_FRAME_WIDTH))
        self._height = int(self._capture.get(cv2.CAP_PROP_FRAME_HEIGHT))

        if fps <= 0 or frame_count <= 0:
            self.close()
            raise SourceUnavailable(
                f"Video reports no duration: {path} (fps={fps}, frames={frame_count})"
            )
        if self._width <= 0 or self._height <= 0:
            self.close()
            raise SourceUnavailable(
                f"Video reports no resolution: {path} ({self._width}x{self._height})"
            )

        self._duration = frame_count / fps

        logger.info(
            f"OpenCVVideoSource opened: {path}, "
            f"{self._width}x{self._height}, {fps:.2f} fps, {self._duration:.2f}s"
        )

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def seek(self, timestamp: float, timeout: float) -> None:
        """
        Seek to `timestamp` seconds and wait until a frame is grabbed.

        Args:
            timestamp: Target position in seconds
            timeout: Maximum seconds to wait for the seek to settle

        Raises:
            SourceUnavailable: If the source has been closed
            SeekTimeout: If no frame could be grabbed before the deadline
        """
        if self._capture is None:
            raise SourceUnavailable(f"Video source is closed: {self.path}")

        self._settled = False
        deadline = time.monotonic() + timeout
        self._capture.set(cv2.CAP_PROP_POS_MSEC, timestamp * 1000.0)

        while True:
            if self._capture.grab():
                self._settled = True
                return
            if time.monotonic() >= deadline:
                raise SeekTimeout(
                    f"Seek to {timestamp:.3f}s did not settle within {timeout:.2f}s"
                )
            time.sleep(self.poll_interval)

    def capture(self) -> np.ndarray:
        """
        Decode the frame grabbed by the last settled seek.

        Raises:
            SourceUnavailable: If no seek has settled or decoding fails
        """
        if self._capture is None or not self._settled:
            raise SourceUnavailable(f"No settled position to capture: {self.path}")

        ok, bgr = self._capture.retrieve()
        if not ok or bgr is None:
            raise SourceUnavailable(f"Failed to decode frame from {self.path}")

        try:
            return bgr_to_rgba(bgr)
        except ImageEncodeError as e:
            raise SourceUnavailable(str(e))

    def close(self) -> None:
        """Release the underlying capture handle."""
        if self._capture is not None:
            self._capture.release()
            self._capture = None

    def __enter__(self) -> "OpenCVVideoSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
