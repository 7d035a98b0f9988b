"""
Heuristic Interpreter
=====================

Deterministic rule table mapping local pixel statistics to tags.

Rules (first match order is preserved in the output):
    Styles:
        brightness > bright_level      -> bright, vibrant
        brightness < dark_level        -> moody, dramatic
        saturation > saturated_level   -> colorful, saturated
        saturation < muted_level       -> muted, desaturated
        temperature = warm             -> warm tones
        temperature = cool             -> cool tones
    Elements:
        rule-of-thirds = balanced      -> professional composition
        symmetry > symmetry_level      -> symmetrical
        complexity = high              -> detailed, complex
        complexity = low               -> minimalist, clean
        focus = centered               -> centered subject

Confidence:
    min(70 + edge_density * 100, 90)
"""

import logging
from typing import Callable, List, Optional, Tuple

from ninja_prompt.features.thresholds import FeatureThresholds
from ninja_prompt.models.analysis import FrameAnalysis, unique
from ninja_prompt.models.features import (
    Complexity,
    FocusVerdict,
    TechnicalStats,
    Temperature,
    ThirdsVerdict,
)


logger = logging.getLogger(__name__)


BASE_CONFIDENCE = 70.0
MAX_CONFIDENCE = 90.0

Rule = Tuple[Callable[[TechnicalStats, FeatureThresholds], bool], Tuple[str, ...]]


STYLE_RULES: List[Rule] = [
    (lambda s, t: s.colors.brightness > t.bright_level, ("bright", "vibrant")),
    (lambda s, t: s.colors.brightness < t.dark_level, ("moody", "dramatic")),
    (lambda s, t: s.colors.saturation > t.saturated_level, ("colorful", "saturated")),
    (lambda s, t: s.colors.saturation < t.muted_level, ("muted", "desaturated")),
    (lambda s, t: s.colors.temperature == Temperature.WARM, ("warm tones",)),
    (lambda s, t: s.colors.temperature == Temperature.COOL, ("cool tones",)),
]

ELEMENT_RULES: List[Rule] = [
    (lambda s, t: s.composition.rule_of_thirds == ThirdsVerdict.BALANCED, ("professional composition",)),
    (lambda s, t: s.composition.symmetry > t.symmetry_level, ("symmetrical",)),
    (lambda s, t: s.edges.complexity == Complexity.HIGH, ("detailed", "complex")),
    (lambda s, t: s.edges.complexity == Complexity.LOW, ("minimalist", "clean")),
    (lambda s, t: s.composition.focus == FocusVerdict.CENTERED, ("centered subject",)),
]


class HeuristicInterpreter:
    """
    Turns TechnicalStats into a FrameAnalysis.

    Attributes:
        thresholds: Tunable rule thresholds
    """

    def __init__(self, thresholds: Optional[FeatureThresholds] = None) -> None:
        self.thresholds = thresholds or FeatureThresholds()

    def _apply(self, rules: List[Rule], stats: TechnicalStats) -> Tuple[str, ...]:
        tags: List[str] = []
        for condition, rule_tags in rules:
            if condition(stats, self.thresholds):
                tags.extend(rule_tags)
        return unique(tags)

    def interpret(self, stats: TechnicalStats) -> FrameAnalysis:
        """
        Apply the rule table to one frame's statistics.

        Args:
            stats: Output of PixelFeatureExtractor

        Returns:
            FrameAnalysis with deduplicated tags, confidence and the
            embedded technical stats
        """
        confidence = min(BASE_CONFIDENCE + stats.edges.edge_density * 100.0, MAX_CONFIDENCE)

        analysis = FrameAnalysis(
            styles=self._apply(STYLE_RULES, stats),
            elements=self._apply(ELEMENT_RULES, stats),
            confidence=confidence,
            technical=stats,
        )

        logger.debug(
            f"Heuristic tags: styles={list(analysis.styles)}, "
            f"elements={list(analysis.elements)}, conf={confidence:.1f}"
        )
        return analysis
