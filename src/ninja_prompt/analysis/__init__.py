"""
Analysis Module
===============

Per-frame analysis and multi-frame consolidation.

This module implements the decision logic of the pipeline:
    - analyzer.py: LangGraph remote-first / local-fallback state machine
    - consolidator.py: Merge of per-frame outcomes

Key Design Decisions:
    - Fallback is an explicit graph edge, not nested exception handling
    - Every frame independently re-attempts the remote path
    - Consolidation happens once, after all frames complete
"""

from ninja_prompt.analysis.analyzer import AnalyzerStage, FrameAnalyzer
from ninja_prompt.analysis.consolidator import EmptyInput, consolidate

__all__ = [
    "AnalyzerStage",
    "FrameAnalyzer",
    "EmptyInput",
    "consolidate",
]
