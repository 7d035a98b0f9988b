"""
Video Prompt Pipeline
=====================

End-to-end wiring of the analysis stages.

    video → FrameSampler → [Frame]×N
          → FrameAnalyzer (per frame) → [AnalysisOutcome]×N
          → consolidate → ConsolidatedAnalysis
          → synthesize → PromptResult

Concurrency:
    - Sampling is sequential and runs in a worker thread (blocking decode)
    - Frame analyses start only after every frame has been captured and
      run with at most `max_concurrency` in flight
    - Outcomes keep frame order; the Consolidator sees exactly one per frame

Error Handling:
    - RemoteUnavailable is recovered per frame inside the FrameAnalyzer
    - Every other failure aborts this video's analysis (no partial results)
"""

import asyncio
import inspect
import logging
import time
from typing import Any, Callable, List, Optional

from ninja_prompt.analysis.analyzer import FrameAnalyzer
from ninja_prompt.analysis.consolidator import consolidate
from ninja_prompt.config import Settings
from ninja_prompt.features.extractor import PixelFeatureExtractor
from ninja_prompt.features.interpreter import HeuristicInterpreter
from ninja_prompt.features.thresholds import FeatureThresholds
from ninja_prompt.models.analysis import AnalysisOutcome, FrameProgress
from ninja_prompt.models.output import PromptResult
from ninja_prompt.prompt.synthesizer import synthesize
from ninja_prompt.remote.classifier import HuggingFaceClassifier
from ninja_prompt.sampling.frame import Frame
from ninja_prompt.sampling.sampler import FrameSampler
from ninja_prompt.sampling.source import OpenCVVideoSource, VideoSource


logger = logging.getLogger(__name__)


ProgressCallback = Callable[[FrameProgress], Any]


class VideoPromptPipeline:
    """
    Turns a video into a generation prompt.

    Attributes:
        sampler: Frame sampler
        analyzer: Per-frame analyzer
        frame_count: Default number of frames per video
        max_concurrency: Maximum frame analyses in flight

    Example:
        pipeline = create_pipeline(settings)
        result = await pipeline.analyze_path("clip.mp4")
        print(result.prompt)
    """

    def __init__(
        self,
        sampler: FrameSampler,
        analyzer: FrameAnalyzer,
        frame_count: int = 6,
        max_concurrency: int = 1,
        seek_poll_interval: float = 0.01,
    ) -> None:
        if frame_count < 1:
            raise ValueError("frame_count must be >= 1")
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")

        self.sampler = sampler
        self.analyzer = analyzer
        self.frame_count = frame_count
        self.max_concurrency = max_concurrency
        self.seek_poll_interval = seek_poll_interval

        logger.info(
            f"VideoPromptPipeline initialized: frame_count={frame_count}, "
            f"max_concurrency={max_concurrency}"
        )

    async def analyze(
        self,
        source: VideoSource,
        frame_count: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
        source_label: Optional[str] = None,
    ) -> PromptResult:
        """
        Run the full pipeline on an open video source.

        Args:
            source: Seekable video source
            frame_count: Frames to sample (defaults to self.frame_count)
            on_progress: Called (or awaited) after each frame completes
            source_label: Recorded as details.source in the result

        Returns:
            PromptResult

        Raises:
            SourceUnavailable, SeekTimeout, MalformedBuffer: Propagated
        """
        count = self.frame_count if frame_count is None else frame_count
        started = time.monotonic()

        frames = await asyncio.to_thread(lambda: list(self.sampler.sample(source, count)))
        logger.info(f"Extracted {len(frames)} frames")

        outcomes = await self._analyze_frames(frames, on_progress)
        result = synthesize(consolidate(outcomes), source=source_label)

        logger.info(
            f"Analysis completed in {time.monotonic() - started:.2f}s: "
            f"provenance={result.details.provenance}, "
            f"confidence={result.details.confidence}"
        )
        return result

    async def analyze_path(
        self,
        path: str,
        frame_count: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
        source_label: Optional[str] = None,
    ) -> PromptResult:
        """Open `path` with OpenCV, analyze it, and release the handle."""
        source = await asyncio.to_thread(
            OpenCVVideoSource, path, self.seek_poll_interval
        )
        try:
            return await self.analyze(
                source,
                frame_count=frame_count,
                on_progress=on_progress,
                source_label=source_label,
            )
        finally:
            source.close()

    async def _analyze_frames(
        self,
        frames: List[Frame],
        on_progress: Optional[ProgressCallback],
    ) -> List[AnalysisOutcome]:
        semaphore = asyncio.Semaphore(self.max_concurrency)
        total = len(frames)
        completed = 0

        async def run(frame: Frame) -> AnalysisOutcome:
            nonlocal completed
            async with semaphore:
                outcome = await self.analyzer.analyze_frame(frame)
            completed += 1
            reason = f" ({outcome.remote_error})" if outcome.remote_error else ""
            logger.info(
                f"Analyzed frame {frame.index + 1}/{total} via {outcome.provenance.value}{reason}"
            )
            if on_progress is not None:
                event = FrameProgress(
                    frame_index=frame.index,
                    completed=completed,
                    total=total,
                    provenance=outcome.provenance,
                )
                maybe = on_progress(event)
                if inspect.isawaitable(maybe):
                    await maybe
            return outcome

        if self.max_concurrency == 1:
            return [await run(frame) for frame in frames]
        return list(await asyncio.gather(*(run(frame) for frame in frames)))


def create_pipeline(settings: Settings, remote_enabled: Optional[bool] = None) -> VideoPromptPipeline:
    """
    Build a pipeline from configuration.

    Args:
        settings: Loaded settings
        remote_enabled: Overrides settings.remote.enabled when given

    Returns:
        Configured VideoPromptPipeline
    """
    t = settings.thresholds
    thresholds = FeatureThresholds(
        temperature_delta=t.temperature_delta,
        edge_luma_delta=t.edge_luma_delta,
        complexity_high=t.complexity_high,
        complexity_medium=t.complexity_medium,
        thirds_spread=t.thirds_spread,
        focus_ratio=t.focus_ratio,
        bright_level=t.bright_level,
        dark_level=t.dark_level,
        saturated_level=t.saturated_level,
        muted_level=t.muted_level,
        symmetry_level=t.symmetry_level,
    )

    use_remote = settings.remote.enabled if remote_enabled is None else remote_enabled
    classifier = None
    if use_remote:
        classifier = HuggingFaceClassifier(
            endpoint=settings.remote.endpoint,
            api_token=settings.remote.api_token,
            timeout=settings.remote.timeout_seconds,
            top_k=settings.remote.top_k,
        )
    else:
        logger.info("Remote classifier disabled, using local analysis only")

    analyzer = FrameAnalyzer(
        classifier=classifier,
        extractor=PixelFeatureExtractor(thresholds),
        interpreter=HeuristicInterpreter(thresholds),
    )
    sampler = FrameSampler(
        min_interval=settings.sampling.min_interval_seconds,
        seek_timeout=settings.sampling.seek_timeout_seconds,
    )

    return VideoPromptPipeline(
        sampler=sampler,
        analyzer=analyzer,
        frame_count=settings.sampling.frame_count,
        max_concurrency=settings.analysis.max_concurrency,
        seek_poll_interval=settings.sampling.seek_poll_interval_seconds,
    )
