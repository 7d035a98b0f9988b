"""
Remote Module
=============

Adapter for the external label-ranking service.

The remote classifier is treated as an opaque, untrusted network
service. Any failure is reported as RemoteUnavailable so the analyzer
can fall back to local heuristics.
"""

from ninja_prompt.remote.classifier import (
    HuggingFaceClassifier,
    LabelClassifier,
    LabelScore,
    RemoteUnavailable,
    interpret_labels,
    parse_reply,
)

__all__ = [
    "HuggingFaceClassifier",
    "LabelClassifier",
    "LabelScore",
    "RemoteUnavailable",
    "interpret_labels",
    "parse_reply",
]
