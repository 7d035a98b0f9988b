"""
Analysis Tests
==============

Tests for the per-frame analyzer graph and the consolidator.
"""

import asyncio

import numpy as np
import pytest

from conftest import StubClassifier


def _outcome(index, provenance, styles=(), elements=(), confidence=70.0, raw_labels=None, technical=None):
    from ninja_prompt.models.analysis import AnalysisOutcome, FrameAnalysis

    return AnalysisOutcome(
        frame_index=index,
        provenance=provenance,
        analysis=FrameAnalysis(
            styles=tuple(styles),
            elements=tuple(elements),
            confidence=confidence,
            raw_labels=raw_labels,
            technical=technical,
        ),
    )


class TestFrameAnalyzer:
    """Tests for remote-first, local-fallback analysis."""

    def test_remote_success(self, red_frame, remote_analysis):
        """Verify a successful remote call is tagged remote."""
        from ninja_prompt.analysis.analyzer import FrameAnalyzer
        from ninja_prompt.models.analysis import Provenance

        classifier = StubClassifier(analysis=remote_analysis)
        outcome = asyncio.run(FrameAnalyzer(classifier=classifier).analyze_frame(red_frame))

        assert outcome.provenance == Provenance.REMOTE
        assert outcome.is_remote
        assert outcome.frame_index == 0
        assert outcome.analysis == remote_analysis
        assert classifier.calls == 1

    def test_remote_failure_falls_back(self, red_frame):
        """Verify RemoteUnavailable is recovered with local analysis."""
        from ninja_prompt.analysis.analyzer import FrameAnalyzer
        from ninja_prompt.models.analysis import Provenance

        classifier = StubClassifier(fail=True)
        outcome = asyncio.run(FrameAnalyzer(classifier=classifier).analyze_frame(red_frame))

        assert outcome.provenance == Provenance.FALLBACK
        assert "warm tones" in outcome.analysis.styles
        assert outcome.analysis.technical is not None
        assert outcome.remote_error == "service unreachable"
        assert classifier.calls == 1

    def test_remote_success_has_no_error(self, red_frame, remote_analysis):
        from ninja_prompt.analysis.analyzer import FrameAnalyzer

        outcome = asyncio.run(
            FrameAnalyzer(classifier=StubClassifier(analysis=remote_analysis)).analyze_frame(red_frame)
        )
        assert outcome.remote_error is None

    def test_remote_disabled(self, red_frame):
        from ninja_prompt.analysis.analyzer import FrameAnalyzer
        from ninja_prompt.models.analysis import Provenance

        outcome = asyncio.run(FrameAnalyzer().analyze_frame(red_frame))
        assert outcome.provenance == Provenance.FALLBACK
        assert outcome.remote_error == "remote classifier disabled"

    def test_each_frame_attempts_remote(self, red_buffer):
        """Verify a failure on one frame does not skip the remote path for the next."""
        from ninja_prompt.analysis.analyzer import FrameAnalyzer
        from ninja_prompt.sampling.frame import Frame

        classifier = StubClassifier(fail=True)
        analyzer = FrameAnalyzer(classifier=classifier)

        async def run():
            for i in range(3):
                await analyzer.analyze_frame(Frame(index=i, timestamp=float(i), pixels=red_buffer.copy()))

        asyncio.run(run())
        assert classifier.calls == 3

    def test_malformed_buffer_propagates(self):
        """Verify fallback failures are not swallowed."""
        from ninja_prompt.analysis.analyzer import FrameAnalyzer
        from ninja_prompt.features.extractor import MalformedBuffer
        from ninja_prompt.sampling.frame import Frame

        frame = Frame(index=0, timestamp=0.0, pixels=np.zeros((8, 8), dtype=np.uint8))
        classifier = StubClassifier(fail=True)

        with pytest.raises(MalformedBuffer):
            asyncio.run(FrameAnalyzer(classifier=classifier).analyze_frame(frame))

    def test_encode_failure_uses_fallback_without_remote_call(self):
        """Verify an unencodable frame skips the remote call."""
        from ninja_prompt.analysis.analyzer import FrameAnalyzer
        from ninja_prompt.models.analysis import Provenance
        from ninja_prompt.sampling.frame import Frame

        frame = Frame(index=0, timestamp=0.0, pixels=np.full((8, 8, 3), 90, dtype=np.uint8))
        classifier = StubClassifier(fail=True)

        outcome = asyncio.run(FrameAnalyzer(classifier=classifier).analyze_frame(frame))

        assert outcome.provenance == Provenance.FALLBACK
        assert classifier.calls == 0


class TestConsolidate:
    """Tests for merging per-frame outcomes."""

    def test_single_frame_identity(self):
        """Verify one frame consolidates to itself."""
        from ninja_prompt.analysis.consolidator import consolidate
        from ninja_prompt.models.analysis import Provenance

        outcome = _outcome(0, Provenance.REMOTE, ["cinematic"], ["person"], 81.0, raw_labels=("cinematic person",))
        merged = consolidate([outcome])

        assert merged.styles == ("cinematic",)
        assert merged.elements == ("person",)
        assert merged.confidence == 81.0
        assert merged.raw_labels == ("cinematic person",)
        assert merged.provenances == (Provenance.REMOTE,)
        assert merged.frame_count == 1

    def test_confidence_is_mean(self):
        from ninja_prompt.analysis.consolidator import consolidate
        from ninja_prompt.models.analysis import Provenance

        merged = consolidate([
            _outcome(0, Provenance.REMOTE, confidence=90.0),
            _outcome(1, Provenance.FALLBACK, confidence=70.0),
            _outcome(2, Provenance.FALLBACK, confidence=80.0),
        ])
        assert merged.confidence == pytest.approx(80.0)

    def test_union_keeps_first_appearance(self):
        """Verify tags are deduplicated in order of first appearance."""
        from ninja_prompt.analysis.consolidator import consolidate
        from ninja_prompt.models.analysis import Provenance

        merged = consolidate([
            _outcome(0, Provenance.FALLBACK, ["warm tones", "moody"], ["clean"]),
            _outcome(1, Provenance.FALLBACK, ["moody", "bright"], ["clean", "symmetrical"]),
            _outcome(2, Provenance.FALLBACK, ["warm tones"], ["detailed"]),
        ])

        assert merged.styles == ("warm tones", "moody", "bright")
        assert merged.elements == ("clean", "symmetrical", "detailed")

    def test_technical_from_first_frame(self, red_buffer):
        from ninja_prompt.analysis.consolidator import consolidate
        from ninja_prompt.features.extractor import extract_features
        from ninja_prompt.models.analysis import Provenance

        stats = extract_features(red_buffer)

        remote_first = consolidate([
            _outcome(0, Provenance.REMOTE),
            _outcome(1, Provenance.FALLBACK, technical=stats),
        ])
        fallback_first = consolidate([
            _outcome(0, Provenance.FALLBACK, technical=stats),
            _outcome(1, Provenance.REMOTE),
        ])

        assert remote_first.technical is None
        assert fallback_first.technical == stats

    def test_provenance_order(self):
        from ninja_prompt.analysis.consolidator import consolidate
        from ninja_prompt.models.analysis import Provenance

        merged = consolidate([
            _outcome(0, Provenance.FALLBACK),
            _outcome(1, Provenance.REMOTE),
        ])

        assert merged.provenances == (Provenance.FALLBACK, Provenance.REMOTE)
        assert merged.used_remote

    def test_empty_input(self):
        from ninja_prompt.analysis.consolidator import EmptyInput, consolidate

        with pytest.raises(EmptyInput):
            consolidate([])
