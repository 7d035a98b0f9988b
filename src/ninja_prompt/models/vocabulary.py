"""
Label Vocabularies
==================

Fixed keyword tables used to turn remote classifier labels into tags.

A label becomes a style tag when it contains any STYLE_KEYWORDS entry,
and an element tag when it contains any ELEMENT_KEYWORDS entry
(case-insensitive substring match). Bump VOCABULARY_VERSION whenever a
table changes, since generated prompts depend on it.

Rules:
    - Tables are tuples (immutable, ordered)
    - Keywords are lower-case
"""

VOCABULARY_VERSION = "1"

STYLE_KEYWORDS = (
    "cinematic",
    "photorealistic",
    "animation",
    "3d",
    "digital",
    "painting",
    "art",
    "graphic",
    "minimalist",
    "vibrant",
    "dark",
    "bright",
    "colorful",
    "monochrome",
    "professional",
)

ELEMENT_KEYWORDS = (
    "person",
    "people",
    "human",
    "face",
    "building",
    "city",
    "nature",
    "landscape",
    "animal",
    "car",
    "object",
    "text",
    "light",
    "shadow",
    "water",
    "sky",
    "tree",
    "mountain",
)

# Substituted when the classifier returns no labels at all
DEFAULT_STYLES = ("professional", "digital")
DEFAULT_ELEMENTS = ("well-composed", "detailed")
DEFAULT_CONFIDENCE = 70.0

MAX_STYLE_TAGS = 3
MAX_ELEMENT_TAGS = 4


def matches_any(label: str, keywords: tuple) -> bool:
    """Return True when `label` contains any of `keywords`."""
    lowered = label.lower()
    return any(keyword in lowered for keyword in keywords)
