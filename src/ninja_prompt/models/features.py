"""
Feature Models
==============

Data models for the pixel statistics computed by the local extractor.

These models are produced by PixelFeatureExtractor and consumed by the
HeuristicInterpreter and the PromptSynthesizer. All of them derive
deterministically from one frame and are never mutated.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class Temperature(str, Enum):
    """Overall color temperature of a frame."""

    WARM = "warm"
    COOL = "cool"
    NEUTRAL = "neutral"


class Complexity(str, Enum):
    """Edge-density bucket."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ThirdsVerdict(str, Enum):
    """Rule-of-thirds verdict over the 3x3 band grid."""

    BALANCED = "balanced"
    DYNAMIC = "dynamic"


class FocusVerdict(str, Enum):
    """Where the frame's edge activity concentrates."""

    CENTERED = "centered"
    DISTRIBUTED = "distributed"


@dataclass(frozen=True, slots=True)
class ColorStats:
    """
    Aggregate color statistics.

    Attributes:
        average_rgb: Mean (R, G, B), each rounded half-up to an integer
        brightness: Mean luma, (r + g + b) / 3 averaged over all pixels
        saturation: Mean of (max - min) / max per pixel, in [0, 1]
        temperature: warm, cool or neutral
    """

    average_rgb: Tuple[int, int, int]
    brightness: float
    saturation: float
    temperature: Temperature

    @property
    def dominant(self) -> str:
        """CSS color string for the average color."""
        r, g, b = self.average_rgb
        return f"rgb({r}, {g}, {b})"

    def to_dict(self) -> dict:
        return {
            "dominant": self.dominant,
            "average_rgb": list(self.average_rgb),
            "brightness": round(self.brightness, 4),
            "saturation": round(self.saturation, 4),
            "temperature": self.temperature.value,
        }


@dataclass(frozen=True, slots=True)
class EdgeStats:
    """
    Horizontal edge statistics.

    Attributes:
        edge_density: Luma transitions / (width * height)
        complexity: Bucket derived from edge_density
    """

    edge_density: float
    complexity: Complexity

    def to_dict(self) -> dict:
        return {
            "edge_density": round(self.edge_density, 6),
            "complexity": self.complexity.value,
        }


@dataclass(frozen=True, slots=True)
class CompositionStats:
    """
    Composition statistics.

    Attributes:
        rule_of_thirds: balanced or dynamic
        symmetry: Left-right mirror similarity in [0, 1]
        focus: centered or distributed
    """

    rule_of_thirds: ThirdsVerdict
    symmetry: float
    focus: FocusVerdict

    def to_dict(self) -> dict:
        return {
            "rule_of_thirds": self.rule_of_thirds.value,
            "symmetry": round(self.symmetry, 4),
            "focus": self.focus.value,
        }


@dataclass(frozen=True, slots=True)
class TechnicalStats:
    """
    Full local feature set for one frame.

    Embedded in a FrameAnalysis produced by the fallback path.
    """

    colors: ColorStats
    edges: EdgeStats
    composition: CompositionStats

    @property
    def brightness(self) -> float:
        return self.colors.brightness

    def to_dict(self) -> dict:
        """Export as dictionary for logging/serialization."""
        return {
            "colors": self.colors.to_dict(),
            "edges": self.edges.to_dict(),
            "composition": self.composition.to_dict(),
            "brightness": round(self.brightness, 4),
        }
