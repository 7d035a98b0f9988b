"""
Prompt Output Models
====================

This module defines the output contract returned to every caller.

Output Contract:
    {
        "prompt": "A warm tones video featuring minimalist, clean, ...",
        "details": {
            "detected_styles": ["warm tones"],
            "visual_elements": ["minimalist", "clean"],
            "confidence": 70,
            "technical_analysis": {"colors": {...}, "edges": {...}, ...},
            "ai_model": "Computer Vision Analysis",
            "processing_method": "Frame-by-frame AI analysis",
            "raw_analysis": [],
            "provenance": "fallback-only",
            "frame_provenance": ["fallback", "fallback", ...],
            "source": null,
            "vocabulary_version": "1"
        }
    }

Design Rules:
    - PromptResult is terminal and never mutated after creation
    - Identical ConsolidatedAnalysis inputs yield identical outputs
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ninja_prompt.models.vocabulary import VOCABULARY_VERSION


PROVENANCE_REMOTE_AND_FALLBACK = "remote+fallback"
PROVENANCE_FALLBACK_ONLY = "fallback-only"


class PromptDetails(BaseModel):
    """
    Structured report accompanying the prompt.

    Attributes:
        detected_styles: Style tags (defaulted when none were found)
        visual_elements: Element tags (defaulted when none were found)
        confidence: Mean confidence rounded to an integer
        technical_analysis: Pixel statistics of the representative frame
        ai_model: Human-readable model description
        processing_method: How frames were processed
        raw_analysis: Union of classifier labels
        provenance: "remote+fallback" or "fallback-only"
        frame_provenance: Per-frame provenance values
        source: Where the video came from, when known
        vocabulary_version: Version of the keyword tables used for tagging
    """

    detected_styles: List[str] = Field(..., description="Style tags")
    visual_elements: List[str] = Field(..., description="Element tags")
    confidence: int = Field(..., ge=0, le=100, description="Rounded confidence (0-100)")
    technical_analysis: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Pixel statistics from the first frame (fallback path only)",
    )
    ai_model: str = Field(..., description="Model description")
    processing_method: str = Field(..., description="Processing method")
    raw_analysis: List[str] = Field(default_factory=list, description="Classifier labels")
    provenance: str = Field(..., description="remote+fallback or fallback-only")
    frame_provenance: List[str] = Field(default_factory=list, description="Per-frame provenance")
    source: Optional[str] = Field(default=None, description="Video source, if known")
    vocabulary_version: str = Field(
        default=VOCABULARY_VERSION,
        description="Keyword vocabulary version",
    )

    class Config:
        """Pydantic model configuration."""

        frozen = True


class PromptResult(BaseModel):
    """
    Final artifact of the pipeline.

    Attributes:
        prompt: Natural-language generation prompt
        details: Structured detail report
    """

    prompt: str = Field(..., description="Generation prompt")
    details: PromptDetails

    class Config:
        """Pydantic model configuration."""

        frozen = True
