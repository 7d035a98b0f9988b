"""
Prompt Module
=============

Rendering of consolidated analyses into generation prompts.
"""

from ninja_prompt.prompt.synthesizer import CLOSING_SUFFIX, build_prompt, synthesize

__all__ = [
    "CLOSING_SUFFIX",
    "build_prompt",
    "synthesize",
]
