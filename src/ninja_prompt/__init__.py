"""
Ninja Prompt
============

Video-to-prompt analyzer.

This package samples frames from a video, fingerprints each frame with a
remote label classifier (falling back to local pixel statistics), merges
the per-frame results and renders them into a text-to-video prompt.

Components:
    - sampling: Frame extraction from seekable video sources
    - features: Local pixel statistics and heuristic tagging
    - remote: Remote label classifier adapter
    - analysis: LangGraph per-frame state machine and consolidation
    - prompt: Prompt template rendering
    - pipeline: End-to-end wiring

Example:
    import asyncio
    from ninja_prompt.config import settings
    from ninja_prompt.pipeline import create_pipeline

    pipeline = create_pipeline(settings)
    result = asyncio.run(pipeline.analyze_path("clip.mp4"))
    print(result.prompt)
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
