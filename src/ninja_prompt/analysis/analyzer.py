"""
Frame Analyzer Graph
====================

LangGraph state machine producing one AnalysisOutcome per frame.

LangGraph is used for CONTROL FLOW only, not LLM reasoning.

Graph Structure:
    START → attempt_remote ──(labels)──────────────→ END
                  │
                  └─(RemoteUnavailable)→ fall_back → END

    attempt_remote: JPEG-encode the frame, call the remote classifier
    fall_back:      PixelFeatureExtractor + HeuristicInterpreter

Rules:
    - The remote path is attempted exactly once per frame (no retry)
    - Remote failures are recorded on the graph state, not re-raised
    - Fallback failures (MalformedBuffer) propagate to the caller
    - No state is shared between frames
"""

import logging
from enum import Enum
from typing import Any, Dict, Optional, TypedDict

from langgraph.graph import StateGraph, END

from ninja_prompt.features.extractor import PixelFeatureExtractor
from ninja_prompt.features.interpreter import HeuristicInterpreter
from ninja_prompt.models.analysis import AnalysisOutcome, Provenance
from ninja_prompt.remote.classifier import LabelClassifier, RemoteUnavailable
from ninja_prompt.sampling.frame import Frame
from ninja_prompt.sampling.image_codec import ImageEncodeError, encode_frame_jpeg


logger = logging.getLogger(__name__)


class AnalyzerStage(str, Enum):
    """States of the per-frame analysis machine."""

    ATTEMPTING_REMOTE = "attempting_remote"
    FALLING_BACK = "falling_back"
    DONE = "done"


class FrameGraphState(TypedDict):
    """
    State passed through the analyzer graph.

    Attributes:
        frame: Frame under analysis
        stage: Current machine state
        remote_error: Why the remote path failed, if it did
        outcome: Final tagged result
    """
    frame: Frame
    stage: AnalyzerStage
    remote_error: Optional[str]
    outcome: Optional[AnalysisOutcome]


class FrameAnalyzer:
    """
    Remote-first, local-fallback analyzer for single frames.

    Attributes:
        classifier: Remote label classifier (None disables the remote path)
        extractor: Local pixel statistics
        interpreter: Local rule table

    Example:
        analyzer = FrameAnalyzer(classifier=HuggingFaceClassifier(url))
        outcome = await analyzer.analyze_frame(frame)
        print(outcome.provenance, outcome.analysis.styles)
    """

    def __init__(
        self,
        classifier: Optional[LabelClassifier] = None,
        extractor: Optional[PixelFeatureExtractor] = None,
        interpreter: Optional[HeuristicInterpreter] = None,
    ) -> None:
        self.classifier = classifier
        self.extractor = extractor or PixelFeatureExtractor()
        self.interpreter = interpreter or HeuristicInterpreter(self.extractor.thresholds)

        self._graph = self._build_graph()

        logger.info(
            f"FrameAnalyzer initialized: remote={'enabled' if classifier else 'disabled'}"
        )

    def _build_graph(self) -> StateGraph:
        """Build the LangGraph workflow."""
        workflow = StateGraph(FrameGraphState)

        workflow.add_node("attempt_remote", self._attempt_remote_node)
        workflow.add_node("fall_back", self._fall_back_node)

        workflow.set_entry_point("attempt_remote")
        workflow.add_conditional_edges(
            "attempt_remote",
            self._route_after_remote,
            {"done": END, "fall_back": "fall_back"},
        )
        workflow.add_edge("fall_back", END)

        return workflow.compile()

    async def _attempt_remote_node(self, state: FrameGraphState) -> Dict[str, Any]:
        """Try the remote classifier; record the failure instead of raising."""
        frame = state["frame"]

        if self.classifier is None:
            return {
                "stage": AnalyzerStage.FALLING_BACK,
                "remote_error": "remote classifier disabled",
            }

        try:
            image_bytes = encode_frame_jpeg(frame)
            analysis = await self.classifier.analyze(image_bytes)
        except (RemoteUnavailable, ImageEncodeError) as e:
            logger.warning(
                f"Remote analysis failed (frame={frame.index}): {e}. "
                f"Using local fallback"
            )
            return {
                "stage": AnalyzerStage.FALLING_BACK,
                "remote_error": str(e),
            }

        return {
            "stage": AnalyzerStage.DONE,
            "outcome": AnalysisOutcome(
                frame_index=frame.index,
                provenance=Provenance.REMOTE,
                analysis=analysis,
            ),
        }

    @staticmethod
    def _route_after_remote(state: FrameGraphState) -> str:
        if state.get("stage") == AnalyzerStage.DONE:
            return "done"
        return "fall_back"

    def _fall_back_node(self, state: FrameGraphState) -> Dict[str, Any]:
        """Local pixel statistics + heuristics. MalformedBuffer propagates."""
        frame = state["frame"]
        stats = self.extractor.extract(frame.pixels)
        analysis = self.interpreter.interpret(stats)

        return {
            "stage": AnalyzerStage.DONE,
            "outcome": AnalysisOutcome(
                frame_index=frame.index,
                provenance=Provenance.FALLBACK,
                analysis=analysis,
                remote_error=state.get("remote_error"),
            ),
        }

    async def analyze_frame(self, frame: Frame) -> AnalysisOutcome:
        """
        Analyze one frame.

        Args:
            frame: Frame to analyze

        Returns:
            AnalysisOutcome tagged REMOTE or FALLBACK

        Raises:
            MalformedBuffer: If the local fallback cannot read the pixels
        """
        initial: FrameGraphState = {
            "frame": frame,
            "stage": AnalyzerStage.ATTEMPTING_REMOTE,
            "remote_error": None,
            "outcome": None,
        }
        result = await self._graph.ainvoke(initial)
        outcome = result["outcome"]

        logger.debug(
            f"Frame {frame.index} analyzed via {outcome.provenance.value}: "
            f"conf={outcome.analysis.confidence:.1f}"
        )
        return outcome
