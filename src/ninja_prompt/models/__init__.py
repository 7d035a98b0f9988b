"""
Data Models
===========

Data models for Ninja Prompt.

This module re-exports all data models for convenient access.

Models:
    Features:
        - ColorStats, EdgeStats, CompositionStats, TechnicalStats
        - Temperature, Complexity, ThirdsVerdict, FocusVerdict

    Analysis:
        - Provenance: remote or fallback
        - FrameAnalysis: Per-frame tags and confidence
        - AnalysisOutcome: Tagged per-frame result
        - ConsolidatedAnalysis: Merged result over all frames
        - FrameProgress: Per-frame completion event

    Output:
        - PromptDetails, PromptResult: Output contract
"""

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
from ninja_prompt.models.analysis import (
    AnalysisOutcome,
    ConsolidatedAnalysis,
    FrameAnalysis,
    FrameProgress,
    Provenance,
)
from ninja_prompt.models.output import PromptDetails, PromptResult

__all__ = [
    # Features
    "ColorStats",
    "EdgeStats",
    "CompositionStats",
    "TechnicalStats",
    "Temperature",
    "Complexity",
    "ThirdsVerdict",
    "FocusVerdict",
    # Analysis
    "Provenance",
    "FrameAnalysis",
    "AnalysisOutcome",
    "ConsolidatedAnalysis",
    "FrameProgress",
    # Output
    "PromptDetails",
    "PromptResult",
]
