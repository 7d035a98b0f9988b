"""
Frame Data Model
=================

Internal frame representation for the sampling pipeline.

This module defines the typed Frame class that is used as the interface
between the FrameSampler and the per-frame analyzers.

Design Rules:
    - This is the ONLY frame format passed to downstream stages
    - Pixels are an RGBA uint8 array of shape (height, width, 4)
    - The frame holds a read-only view of the pixel buffer
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, slots=True)
class Frame:
    """
    Still image captured from a video at a given timestamp.

    It is immutable (frozen) and its pixel buffer is flagged read-only
    to prevent accidental modification by analyzers.

    Attributes:
        index: Position of the frame within the sample (0..N-1)
        timestamp: Seconds from the start of the source video
        pixels: RGBA pixel buffer, shape (height, width, 4), dtype uint8
    """

    index: int
    timestamp: float
    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError("index must be non-negative")
        if self.timestamp < 0:
            raise ValueError("timestamp must be non-negative")
        if isinstance(self.pixels, np.ndarray):
            # Freeze a view; the caller's array stays writable
            view = self.pixels.view()
            view.flags.writeable = False
            object.__setattr__(self, "pixels", view)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the pixels."""
        return (
            f"Frame(index={self.index}, "
            f"timestamp={self.timestamp:.3f}, "
            f"size={self.width}x{self.height})"
        )
