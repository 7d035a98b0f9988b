"""
Consolidator
============

Merges per-frame outcomes into one ConsolidatedAnalysis.

Merge Rules:
    - styles, elements, raw labels: concatenate, then deduplicate keeping
      the order of first appearance
    - confidence: sum of per-frame confidences / frame count
    - technical: copied from the first frame only (representative sample)
    - provenances: one entry per frame, in frame order
"""

import logging
from typing import List, Sequence

from ninja_prompt.models.analysis import (
    AnalysisOutcome,
    ConsolidatedAnalysis,
    unique,
)


logger = logging.getLogger(__name__)


class EmptyInput(Exception):
    """Raised when asked to consolidate zero frames."""
    pass


def consolidate(outcomes: Sequence[AnalysisOutcome]) -> ConsolidatedAnalysis:
    """
    Merge an ordered, non-empty sequence of per-frame outcomes.

    Args:
        outcomes: One outcome per sampled frame, in frame order

    Returns:
        ConsolidatedAnalysis

    Raises:
        EmptyInput: If `outcomes` is empty
    """
    if not outcomes:
        raise EmptyInput("Cannot consolidate zero frame analyses")

    styles: List[str] = []
    elements: List[str] = []
    raw_labels: List[str] = []
    total_confidence = 0.0

    for outcome in outcomes:
        analysis = outcome.analysis
        styles.extend(analysis.styles)
        elements.extend(analysis.elements)
        total_confidence += analysis.confidence
        if analysis.raw_labels:
            raw_labels.extend(analysis.raw_labels)

    consolidated = ConsolidatedAnalysis(
        styles=unique(styles),
        elements=unique(elements),
        confidence=total_confidence / len(outcomes),
        technical=outcomes[0].analysis.technical,
        raw_labels=unique(raw_labels),
        provenances=tuple(outcome.provenance for outcome in outcomes),
    )

    logger.info(
        f"Consolidated {len(outcomes)} frames: "
        f"styles={len(consolidated.styles)}, elements={len(consolidated.elements)}, "
        f"conf={consolidated.confidence:.1f}"
    )
    return consolidated
