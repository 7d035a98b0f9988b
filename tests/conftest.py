"""
Test Configuration
==================

Pytest fixtures and test configuration for Ninja Prompt.
"""

import threading
from typing import Callable, List, Optional

import numpy as np
import pytest

from ninja_prompt.models.analysis import FrameAnalysis
from ninja_prompt.remote.classifier import RemoteUnavailable
from ninja_prompt.sampling.frame import Frame
from ninja_prompt.sampling.source import SeekTimeout


def solid(rgb, width: int = 100, height: int = 100) -> np.ndarray:
    """Solid-color RGBA buffer."""
    buffer = np.empty((height, width, 4), dtype=np.uint8)
    buffer[:, :, :3] = rgb
    buffer[:, :, 3] = 255
    return buffer


class FakeVideoSource:
    """
    In-memory VideoSource.

    `render(timestamp)` produces the RGBA image shown at a position;
    every seek is recorded in `seeks`.
    """

    def __init__(
        self,
        duration: float = 10.0,
        width: int = 32,
        height: int = 24,
        render: Optional[Callable[[float], np.ndarray]] = None,
        stuck_after: Optional[int] = None,
    ) -> None:
        self._duration = duration
        self._width = width
        self._height = height
        self._render = render or (lambda t: solid((120, 120, 120), width, height))
        self._stuck_after = stuck_after
        self._position: Optional[float] = None
        self.lock = threading.Lock()
        self.seeks: List[float] = []
        self.closed = False

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
        if self._stuck_after is not None and len(self.seeks) >= self._stuck_after:
            raise SeekTimeout(f"Seek to {timestamp:.3f}s did not settle within {timeout:.2f}s")
        self.seeks.append(timestamp)
        self._position = timestamp

    def capture(self) -> np.ndarray:
        return self._render(self._position)

    def close(self) -> None:
        self.closed = True


class StubClassifier:
    """LabelClassifier double returning a fixed analysis or failing."""

    def __init__(self, analysis: Optional[FrameAnalysis] = None, fail: bool = False) -> None:
        self.analysis = analysis
        self.fail = fail
        self.calls = 0

    async def analyze(self, image_bytes: bytes) -> FrameAnalysis:
        self.calls += 1
        assert image_bytes[:2] == b"\xff\xd8"
        if self.fail or self.analysis is None:
            raise RemoteUnavailable("service unreachable")
        return self.analysis


@pytest.fixture
def red_buffer():
    """Solid bright-red 100x100 RGBA buffer."""
    return solid((255, 0, 0))


@pytest.fixture
def red_frame(red_buffer):
    return Frame(index=0, timestamp=0.0, pixels=red_buffer)


@pytest.fixture
def remote_analysis():
    """A typical analysis returned by the remote path."""
    return FrameAnalysis(
        styles=("cinematic shot",),
        elements=("person walking", "city skyline"),
        confidence=88.0,
        raw_labels=("cinematic shot", "person walking", "city skyline"),
    )


@pytest.fixture
def fake_source():
    return FakeVideoSource()


def consolidated(styles=(), elements=(), confidence=70.0, technical=None, raw_labels=(), provenances=None):
    """ConsolidatedAnalysis with fallback-only provenance unless given."""
    from ninja_prompt.models.analysis import ConsolidatedAnalysis, Provenance

    return ConsolidatedAnalysis(
        styles=tuple(styles),
        elements=tuple(elements),
        confidence=confidence,
        technical=technical,
        raw_labels=tuple(raw_labels),
        provenances=tuple(provenances or (Provenance.FALLBACK,)),
    )
