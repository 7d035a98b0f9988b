"""
Pixel Feature Extractor
=======================

Local statistical fingerprint of a single frame.

This module computes, from a raw RGBA (or RGB) pixel buffer:
    - ColorStats: average color, brightness, saturation, temperature
    - EdgeStats: horizontal edge density and complexity bucket
    - CompositionStats: rule-of-thirds, symmetry and focus verdicts

Definitions:
    luma       = (r + g + b) / 3
    saturation = (max(r, g, b) - min(r, g, b)) / max(r, g, b), 0 when max = 0
    transition = |luma(x, y) - luma(x + 1, y)| > edge_luma_delta

Design Rules:
    - Pure: the buffer is never modified
    - The three sub-analyses share no mutable state and may run in any order
    - Malformed buffers fail fast with MalformedBuffer
"""

import logging
import math
from typing import List, Optional

import numpy as np

from ninja_prompt.features.thresholds import FeatureThresholds
from ninja_prompt.models.features import (
    ColorStats,
    Complexity,
    CompositionStats,
    EdgeStats,
    FocusVerdict,
    TechnicalStats,
    Temperature,
    ThirdsVerdict,
)


logger = logging.getLogger(__name__)


class MalformedBuffer(Exception):
    """Raised when a pixel buffer cannot be analyzed."""
    pass


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _band_means(luma: np.ndarray, axis: int) -> List[float]:
    """Mean luma of three equal bands along `axis` (empty bands skipped)."""
    size = luma.shape[axis]
    bounds = [(k * size) // 3 for k in range(4)]
    means = []
    for start, stop in zip(bounds[:-1], bounds[1:]):
        if stop <= start:
            continue
        band = luma[:, start:stop] if axis == 1 else luma[start:stop, :]
        means.append(float(band.mean()))
    return means


class PixelFeatureExtractor:
    """
    Computes color, edge and composition statistics from pixels.

    Attributes:
        thresholds: Tunable feature thresholds

    Example:
        extractor = PixelFeatureExtractor()
        stats = extractor.extract(frame.pixels)
        print(stats.colors.temperature, stats.edges.complexity)
    """

    def __init__(self, thresholds: Optional[FeatureThresholds] = None) -> None:
        self.thresholds = thresholds or FeatureThresholds()

    def extract(self, buffer: np.ndarray) -> TechnicalStats:
        """
        Run all three sub-analyses on one buffer.

        Args:
            buffer: Pixels as np.ndarray (H, W, 4) or (H, W, 3), dtype=uint8

        Returns:
            TechnicalStats bundling colors, edges and composition

        Raises:
            MalformedBuffer: If the buffer is not a valid image
        """
        rgb = self._as_rgb(buffer)
        luma = rgb.sum(axis=2) / 3.0
        transitions = self._transitions(luma)

        stats = TechnicalStats(
            colors=self._colors(rgb, luma),
            edges=self._edges(transitions, luma.shape),
            composition=self._composition(luma, transitions),
        )

        logger.debug(
            f"Extracted features: brightness={stats.brightness:.1f}, "
            f"saturation={stats.colors.saturation:.3f}, "
            f"edge_density={stats.edges.edge_density:.4f}"
        )
        return stats

    def analyze_colors(self, buffer: np.ndarray) -> ColorStats:
        rgb = self._as_rgb(buffer)
        return self._colors(rgb, rgb.sum(axis=2) / 3.0)

    def analyze_edges(self, buffer: np.ndarray) -> EdgeStats:
        luma = self._as_rgb(buffer).sum(axis=2) / 3.0
        return self._edges(self._transitions(luma), luma.shape)

    def analyze_composition(self, buffer: np.ndarray) -> CompositionStats:
        luma = self._as_rgb(buffer).sum(axis=2) / 3.0
        return self._composition(luma, self._transitions(luma))

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    @staticmethod
    def _as_rgb(buffer: np.ndarray) -> np.ndarray:
        """Validate the buffer and return its RGB channels as float64."""
        if not isinstance(buffer, np.ndarray):
            raise MalformedBuffer(f"Expected np.ndarray, got {type(buffer).__name__}")
        if buffer.ndim != 3 or buffer.shape[2] not in (3, 4):
            raise MalformedBuffer(f"Invalid buffer shape: {buffer.shape}")
        if buffer.shape[0] == 0 or buffer.shape[1] == 0:
            raise MalformedBuffer(f"Empty buffer: {buffer.shape}")
        if buffer.dtype != np.uint8:
            raise MalformedBuffer(f"Invalid buffer dtype: {buffer.dtype}")

        return buffer[:, :, :3].astype(np.float64)

    def _transitions(self, luma: np.ndarray) -> np.ndarray:
        """Boolean (H, W-1) map of horizontal luma transitions."""
        return np.abs(luma[:, 1:] - luma[:, :-1]) > self.thresholds.edge_luma_delta

    def _colors(self, rgb: np.ndarray, luma: np.ndarray) -> ColorStats:
        means = rgb.reshape(-1, 3).mean(axis=0)
        avg_r, avg_g, avg_b = (_round_half_up(float(m)) for m in means)

        high = rgb.max(axis=2)
        low = rgb.min(axis=2)
        per_pixel = np.divide(
            high - low,
            high,
            out=np.zeros_like(high),
            where=high > 0,
        )

        return ColorStats(
            average_rgb=(avg_r, avg_g, avg_b),
            brightness=float(luma.mean()),
            saturation=float(per_pixel.mean()),
            temperature=self._temperature(avg_r, avg_g, avg_b),
        )

    def _temperature(self, r: int, g: int, b: int) -> Temperature:
        delta = self.thresholds.temperature_delta
        if r > g + delta and r > b + delta:
            return Temperature.WARM
        if b > r + delta and b > g + delta:
            return Temperature.COOL
        return Temperature.NEUTRAL

    def _edges(self, transitions: np.ndarray, shape: tuple) -> EdgeStats:
        height, width = shape
        density = int(transitions.sum()) / (width * height)

        if density > self.thresholds.complexity_high:
            complexity = Complexity.HIGH
        elif density > self.thresholds.complexity_medium:
            complexity = Complexity.MEDIUM
        else:
            complexity = Complexity.LOW

        return EdgeStats(edge_density=density, complexity=complexity)

    def _composition(self, luma: np.ndarray, transitions: np.ndarray) -> CompositionStats:
        return CompositionStats(
            rule_of_thirds=self._rule_of_thirds(luma),
            symmetry=self._symmetry(luma),
            focus=self._focus(transitions, luma.shape),
        )

    def _rule_of_thirds(self, luma: np.ndarray) -> ThirdsVerdict:
        # Left/center/right columns, then top/middle/bottom rows
        column_means = _band_means(luma, axis=1)
        row_means = _band_means(luma, axis=0)

        column_spread = max(column_means) - min(column_means)
        row_spread = max(row_means) - min(row_means)

        limit = self.thresholds.thirds_spread
        if column_spread < limit and row_spread < limit:
            return ThirdsVerdict.BALANCED
        return ThirdsVerdict.DYNAMIC

    @staticmethod
    def _symmetry(luma: np.ndarray) -> float:
        half = luma.shape[1] // 2
        if half == 0:
            return 1.0

        left = luma[:, :half]
        mirrored = luma[:, ::-1][:, :half]
        return float(np.mean(1.0 - np.abs(left - mirrored) / 255.0))

    def _focus(self, transitions: np.ndarray, shape: tuple) -> FocusVerdict:
        height, width = shape
        total = int(transitions.sum())
        if total == 0:
            return FocusVerdict.DISTRIBUTED

        side = min(width, height) / 4.0
        center_x, center_y = width / 2.0, height / 2.0

        # Integer pixel coordinates with start <= coordinate < stop
        x_start = max(0, math.ceil(center_x - side / 2))
        x_stop = min(width - 1, math.ceil(center_x + side / 2))
        y_start = max(0, math.ceil(center_y - side / 2))
        y_stop = min(height, math.ceil(center_y + side / 2))

        center = 0
        if x_stop > x_start and y_stop > y_start:
            center = int(transitions[y_start:y_stop, x_start:x_stop].sum())

        if center / total > self.thresholds.focus_ratio:
            return FocusVerdict.CENTERED
        return FocusVerdict.DISTRIBUTED


def extract_features(
    buffer: np.ndarray,
    thresholds: Optional[FeatureThresholds] = None,
) -> TechnicalStats:
    """Convenience wrapper around PixelFeatureExtractor.extract."""
    return PixelFeatureExtractor(thresholds).extract(buffer)
