"""
Frame Sampler
=============

Extracts N evenly spaced still images from a video source.

Sampling Contract:
    I   = max(epsilon, D / N)
    t_i = i * I,  i = 0..N-1

For each timestamp the sampler seeks the source, waits for the seek to
settle, and captures the displayed image at native resolution.

Design Rules:
    - Lazy: frames are produced one at a time by a generator
    - Sequential: one seek+capture in flight per source (source.lock)
    - Not restartable: every iteration re-seeks the same source
"""

import logging
from typing import Iterator, List

import numpy as np

from ninja_prompt.sampling.frame import Frame
from ninja_prompt.sampling.source import SourceUnavailable, VideoSource


logger = logging.getLogger(__name__)


def sampling_timestamps(duration: float, count: int, min_interval: float) -> List[float]:
    """
    Compute the sampling timestamps for a video.

    Args:
        duration: Video duration D in seconds
        count: Number of frames N (>= 1)
        min_interval: Lower bound epsilon on the interval

    Returns:
        N timestamps, starting at 0 and spaced by max(epsilon, D / N)
    """
    if count < 1:
        raise ValueError("count must be >= 1")
    if min_interval <= 0:
        raise ValueError("min_interval must be positive")

    interval = max(min_interval, duration / count)
    return [i * interval for i in range(count)]


class FrameSampler:
    """
    Samples evenly spaced frames from a VideoSource.

    Attributes:
        min_interval: Lower bound on the sampling interval (seconds)
        seek_timeout: Maximum wait for each seek to settle (seconds)

    Example:
        sampler = FrameSampler(seek_timeout=5.0)

        with OpenCVVideoSource("clip.mp4") as source:
            for frame in sampler.sample(source, count=6):
                print(frame)
    """

    def __init__(
        self,
        min_interval: float = 0.001,
        seek_timeout: float = 5.0,
    ) -> None:
        if min_interval <= 0:
            raise ValueError("min_interval must be positive")
        if seek_timeout <= 0:
            raise ValueError("seek_timeout must be positive")

        self.min_interval = min_interval
        self.seek_timeout = seek_timeout

        logger.info(
            f"FrameSampler initialized: min_interval={min_interval}s, "
            f"seek_timeout={seek_timeout}s"
        )

    def sample(self, source: VideoSource, count: int) -> Iterator[Frame]:
        """
        Lazily produce `count` frames from `source`.

        Args:
            source: Seekable video source
            count: Number of frames to sample (>= 1)

        Yields:
            Frame objects in timestamp order

        Raises:
            ValueError: If count < 1
            SourceUnavailable: If the source has no duration or a capture
                does not match the source's native resolution
            SeekTimeout: If a seek does not settle in time
        """
        if count < 1:
            raise ValueError("count must be >= 1")

        duration = source.duration
        if not duration or duration <= 0:
            raise SourceUnavailable(f"Video has no usable duration: {duration}")

        timestamps = sampling_timestamps(duration, count, self.min_interval)
        expected_shape = (source.height, source.width, 4)

        for index, timestamp in enumerate(timestamps):
            with source.lock:
                source.seek(timestamp, self.seek_timeout)
                pixels = np.array(source.capture(), dtype=np.uint8, copy=True)

            if pixels.shape != expected_shape:
                raise SourceUnavailable(
                    f"Captured frame {index} has shape {pixels.shape}, "
                    f"expected {expected_shape}"
                )

            logger.debug(f"Captured frame {index + 1}/{count} at {timestamp:.3f}s")
            yield Frame(index=index, timestamp=timestamp, pixels=pixels)

        logger.info(f"Sampled {count} frames over {duration:.2f}s")
