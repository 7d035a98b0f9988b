"""
Features Module
===============

Local fallback analysis: pixel statistics and heuristic tagging.

Components:
    - PixelFeatureExtractor: color, edge and composition statistics
    - HeuristicInterpreter: rule table from statistics to tags
    - FeatureThresholds: tunable constants used by both
"""

from ninja_prompt.features.thresholds import FeatureThresholds
from ninja_prompt.features.extractor import (
    MalformedBuffer,
    PixelFeatureExtractor,
    extract_features,
)
from ninja_prompt.features.interpreter import HeuristicInterpreter

__all__ = [
    "FeatureThresholds",
    "PixelFeatureExtractor",
    "MalformedBuffer",
    "extract_features",
    "HeuristicInterpreter",
]
