"""
Feature Thresholds
==================

Tunable constants shared by the extractor and the heuristic interpreter.

The defaults were chosen empirically and are kept for compatibility;
they are not known to be optimal. Override them from config.yaml
(`thresholds` section) rather than editing this module.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class FeatureThresholds:
    """
    Thresholds for feature extraction and tag rules.

    Loaded from configuration file.
    """

    # Color temperature: channel must lead both others by more than this
    temperature_delta: float = 30.0

    # Edges
    edge_luma_delta: float = 25.0
    complexity_high: float = 0.10
    complexity_medium: float = 0.05

    # Composition
    thirds_spread: float = 40.0
    focus_ratio: float = 0.3

    # Heuristic tag rules
    bright_level: float = 180.0
    dark_level: float = 100.0
    saturated_level: float = 0.6
    muted_level: float = 0.3
    symmetry_level: float = 0.8
