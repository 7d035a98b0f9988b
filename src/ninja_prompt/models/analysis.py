"""
Analysis Models
===============

Per-frame and consolidated analysis results.

Flow:
    FrameAnalyzer     -> AnalysisOutcome (provenance + FrameAnalysis)
    Consolidator      -> ConsolidatedAnalysis
    VideoPromptPipeline -> FrameProgress events (observability only)

All models are frozen; tag collections are tuples ordered by first
appearance.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple

from ninja_prompt.models.features import TechnicalStats


class Provenance(str, Enum):
    """
    Which path produced a frame's analysis.

    Attributes:
        REMOTE: Remote label-ranking service
        FALLBACK: Local pixel statistics + heuristic rules
    """

    REMOTE = "remote"
    FALLBACK = "fallback"


def unique(items: Iterable[str]) -> Tuple[str, ...]:
    """Deduplicate, keeping the order of first appearance."""
    return tuple(dict.fromkeys(items))


@dataclass(frozen=True, slots=True)
class FrameAnalysis:
    """
    Visual fingerprint of one frame.

    Attributes:
        styles: Style tags
        elements: Element tags
        confidence: Confidence in [0, 100]
        raw_labels: Classifier labels (remote path only)
        technical: Pixel statistics (fallback path only)
    """

    styles: Tuple[str, ...]
    elements: Tuple[str, ...]
    confidence: float
    raw_labels: Optional[Tuple[str, ...]] = None
    technical: Optional[TechnicalStats] = None

    def __post_init__(self) -> None:
        """Validate invariants."""
        if not 0.0 <= self.confidence <= 100.0:
            raise ValueError("confidence must be within [0, 100]")


@dataclass(frozen=True, slots=True)
class AnalysisOutcome:
    """
    Tagged per-frame result: Remote(FrameAnalysis) | Fallback(FrameAnalysis).

    Attributes:
        frame_index: Index of the analyzed frame
        provenance: Path that produced the analysis
        analysis: The frame's analysis
        remote_error: Why the remote path was skipped (fallback only)
    """

    frame_index: int
    provenance: Provenance
    analysis: FrameAnalysis
    remote_error: Optional[str] = None

    @property
    def is_remote(self) -> bool:
        return self.provenance is Provenance.REMOTE


@dataclass(frozen=True, slots=True)
class ConsolidatedAnalysis:
    """
    Merged judgment over all sampled frames.

    Invariant: confidence is the arithmetic mean of the per-frame
    confidences, never re-derived from the merged tags.

    Attributes:
        styles: Union of style tags
        elements: Union of element tags
        confidence: Mean per-frame confidence
        technical: Technical stats of the first frame, if it has any
        raw_labels: Union of classifier labels
        provenances: Per-frame provenance, in frame order
    """

    styles: Tuple[str, ...]
    elements: Tuple[str, ...]
    confidence: float
    technical: Optional[TechnicalStats]
    raw_labels: Tuple[str, ...]
    provenances: Tuple[Provenance, ...]

    @property
    def frame_count(self) -> int:
        return len(self.provenances)

    @property
    def used_remote(self) -> bool:
        return Provenance.REMOTE in self.provenances


@dataclass(frozen=True, slots=True)
class FrameProgress:
    """
    Emitted after each frame's analysis completes.

    Attributes:
        frame_index: Index of the frame that just completed
        completed: Number of frames completed so far
        total: Number of frames being analyzed
        provenance: Path that produced the frame's analysis
    """

    frame_index: int
    completed: int
    total: int
    provenance: Provenance

    @property
    def percent(self) -> float:
        return 100.0 * self.completed / self.total if self.total else 100.0

    def to_dict(self) -> dict:
        return {
            "frame_index": self.frame_index,
            "completed": self.completed,
            "total": self.total,
            "percent": round(self.percent, 1),
            "provenance": self.provenance.value,
        }
