"""
Prompt Synthesizer
==================

Deterministic rendering of a ConsolidatedAnalysis into a PromptResult.

Template:
    "A {styles} video featuring {elements}, professional quality, high detail"
    + ", cinematic lighting, dramatic atmosphere"   if cinematic/dramatic style
    + ", vibrant colors, well-lit"                  if bright/vibrant style
    + ", highly saturated colors"                   if saturation > 0.6
    + ", trending on ArtStation, masterpiece, 8K resolution"

Pure: no hidden state, identical inputs give identical results.
"""

import math
from typing import Optional

from ninja_prompt.models.analysis import ConsolidatedAnalysis
from ninja_prompt.models.output import (
    PROVENANCE_FALLBACK_ONLY,
    PROVENANCE_REMOTE_AND_FALLBACK,
    PromptDetails,
    PromptResult,
)
from ninja_prompt.models.vocabulary import VOCABULARY_VERSION


DEFAULT_STYLE_TEXT = "professional"
DEFAULT_ELEMENT_TEXT = "well-composed"
DEFAULT_DETECTED_STYLES = ["professional", "high-quality"]
DEFAULT_VISUAL_ELEMENTS = ["well-composed", "detailed"]

BASE_TEMPLATE = "A {styles} video featuring {elements}, professional quality, high detail"
DRAMATIC_CLAUSE = ", cinematic lighting, dramatic atmosphere"
BRIGHT_CLAUSE = ", vibrant colors, well-lit"
SATURATED_CLAUSE = ", highly saturated colors"
CLOSING_SUFFIX = ", trending on ArtStation, masterpiece, 8K resolution"

SATURATION_LEVEL = 0.6

MODEL_REMOTE = "Hugging Face CLIP + Computer Vision"
MODEL_LOCAL = "Computer Vision Analysis"
PROCESSING_METHOD = "Frame-by-frame AI analysis"


def build_prompt(analysis: ConsolidatedAnalysis) -> str:
    """Render the prompt string only."""
    styles = ", ".join(analysis.styles) or DEFAULT_STYLE_TEXT
    elements = ", ".join(analysis.elements) or DEFAULT_ELEMENT_TEXT

    prompt = BASE_TEMPLATE.format(styles=styles, elements=elements)

    if "cinematic" in analysis.styles or "dramatic" in analysis.styles:
        prompt += DRAMATIC_CLAUSE
    if "bright" in analysis.styles or "vibrant" in analysis.styles:
        prompt += BRIGHT_CLAUSE
    if analysis.technical is not None and analysis.technical.colors.saturation > SATURATION_LEVEL:
        prompt += SATURATED_CLAUSE

    return prompt + CLOSING_SUFFIX


def synthesize(
    analysis: ConsolidatedAnalysis,
    source: Optional[str] = None,
) -> PromptResult:
    """
    Render the consolidated analysis into the final PromptResult.

    Args:
        analysis: Output of the Consolidator
        source: Optional description of where the video came from

    Returns:
        PromptResult with prompt text and detail record
    """
    details = PromptDetails(
        detected_styles=list(analysis.styles) or list(DEFAULT_DETECTED_STYLES),
        visual_elements=list(analysis.elements) or list(DEFAULT_VISUAL_ELEMENTS),
        confidence=int(math.floor(analysis.confidence + 0.5)),
        technical_analysis=analysis.technical.to_dict() if analysis.technical else None,
        ai_model=MODEL_REMOTE if analysis.used_remote else MODEL_LOCAL,
        processing_method=PROCESSING_METHOD,
        raw_analysis=list(analysis.raw_labels),
        provenance=(
            PROVENANCE_REMOTE_AND_FALLBACK if analysis.used_remote
            else PROVENANCE_FALLBACK_ONLY
        ),
        frame_provenance=[p.value for p in analysis.provenances],
        source=source,
        vocabulary_version=VOCABULARY_VERSION,
    )

    return PromptResult(prompt=build_prompt(analysis), details=details)
