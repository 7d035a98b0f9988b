"""
Sampling Module
===============

Frame acquisition from seekable video sources.

This module provides the sampling layer for Ninja Prompt:
    - Frame: Immutable still image with index and timestamp
    - VideoSource / OpenCVVideoSource: Seekable video abstraction
    - FrameSampler: Evenly spaced, sequential frame extraction

Example:
    from ninja_prompt.sampling import FrameSampler, OpenCVVideoSource

    sampler = FrameSampler()
    with OpenCVVideoSource("clip.mp4") as source:
        frames = list(sampler.sample(source, count=6))
"""

from ninja_prompt.sampling.frame import Frame
from ninja_prompt.sampling.image_codec import ImageEncodeError, encode_frame_jpeg
from ninja_prompt.sampling.sampler import FrameSampler, sampling_timestamps
from ninja_prompt.sampling.source import (
    OpenCVVideoSource,
    SeekTimeout,
    SourceUnavailable,
    VideoSource,
)


__all__ = [
    "Frame",
    "FrameSampler",
    "sampling_timestamps",
    "VideoSource",
    "OpenCVVideoSource",
    "SourceUnavailable",
    "SeekTimeout",
    "ImageEncodeError",
    "encode_frame_jpeg",
]
