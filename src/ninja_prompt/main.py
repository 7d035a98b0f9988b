"""
Ninja Prompt Service
====================

FastAPI entry point for the video-to-prompt analyzer.

Endpoints:
    GET  /             - Service information
    GET  /health       - Liveness check
    GET  /metrics      - Analysis counters
    POST /analyze      - Analyze a video sent as the raw request body
    POST /analyze-url  - Download a video by URL and analyze it
    WS   /ws/analyze   - Analyze by URL, streaming per-frame progress
"""

import asyncio
import logging
import os
import tempfile
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Tuple

import requests
from fastapi import FastAPI, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

from ninja_prompt.config import settings
from ninja_prompt.features.extractor import MalformedBuffer
from ninja_prompt.models.analysis import FrameProgress
from ninja_prompt.models.output import PromptResult
from ninja_prompt.models.vocabulary import VOCABULARY_VERSION
from ninja_prompt.pipeline import VideoPromptPipeline, create_pipeline
from ninja_prompt.sampling.source import SeekTimeout, SourceUnavailable


logger = logging.getLogger(__name__)


MAX_FRAME_COUNT = 64


class VideoDownloadError(Exception):
    """Raised when a video cannot be fetched from a URL."""
    pass


class AnalyzeUrlRequest(BaseModel):
    """Request body for URL analysis."""

    url: str = Field(..., min_length=1, description="Direct link to a video file")
    frame_count: Optional[int] = Field(
        default=None,
        ge=1,
        le=MAX_FRAME_COUNT,
        description="Frames to sample (defaults to config)",
    )


# =============================================================================
# Global State
# =============================================================================

_pipeline: Optional[VideoPromptPipeline] = None
_startup_time: float = 0.0

# Counters
_analyses_completed: int = 0
_analyses_failed: int = 0
_remote_frames: int = 0
_fallback_frames: int = 0


def get_pipeline() -> VideoPromptPipeline:
    global _pipeline
    if _pipeline is None:
        _pipeline = create_pipeline(settings)
    return _pipeline


def set_pipeline(pipeline: Optional[VideoPromptPipeline]) -> None:
    """Replace the active pipeline (used by tests and embedding apps)."""
    global _pipeline
    _pipeline = pipeline


# =============================================================================
# Helpers
# =============================================================================

def _suffix_for(content_type: str) -> str:
    subtype = content_type.split(";")[0].split("/")[-1].strip()
    return f".{subtype}" if subtype.isalnum() else ".bin"


def _write_temp_video(data: bytes, suffix: str) -> str:
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as f:
        f.write(data)
        return f.name


def download_video(url: str, max_bytes: int, timeout: float) -> str:
    """
    Download a video to a temporary file.

    Args:
        url: Direct video URL
        max_bytes: Largest accepted download
        timeout: Request timeout in seconds

    Returns:
        Path of the temporary file (caller removes it)

    Raises:
        VideoDownloadError: On transport error, non-2xx status, or size limit
    """
    try:
        response = requests.get(url, stream=True, timeout=timeout)
    except requests.RequestException as e:
        raise VideoDownloadError(f"Failed to download video: {e}")

    with response:
        if not response.ok:
            raise VideoDownloadError(f"Failed to download video: status {response.status_code}")

        suffix = os.path.splitext(url.split("?")[0])[1] or ".mp4"
        received = 0
        with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as f:
            path = f.name

        try:
            with open(path, "wb") as f:
                for chunk in response.iter_content(chunk_size=1024 * 1024):
                    received += len(chunk)
                    if received > max_bytes:
                        raise VideoDownloadError(f"Video exceeds the {max_bytes} byte limit")
                    f.write(chunk)
        except requests.RequestException as e:
            _remove(path)
            raise VideoDownloadError(f"Failed to download video: {e}")
        except VideoDownloadError:
            _remove(path)
            raise

    logger.info(f"Downloaded {received} bytes from {url}")
    return path


def _remove(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass


def _record(result: PromptResult) -> None:
    global _analyses_completed, _remote_frames, _fallback_frames
    _analyses_completed += 1
    for value in result.details.frame_provenance:
        if value == "remote":
            _remote_frames += 1
        else:
            _fallback_frames += 1


def _error_payload(error: Exception) -> Tuple[int, dict]:
    """Map pipeline failures to an HTTP status and error body."""
    global _analyses_failed
    _analyses_failed += 1

    if isinstance(error, (SourceUnavailable, VideoDownloadError, MalformedBuffer, ValidationError)):
        status = 422
        logger.error(f"Analysis failed ({type(error).__name__}): {error}")
    elif isinstance(error, SeekTimeout):
        status = 504
        logger.error(f"Analysis failed ({type(error).__name__}): {error}")
    else:
        status = 500
        logger.exception(f"Unexpected analysis failure: {error}")

    return status, {"error": type(error).__name__, "message": str(error)}


def _error_response(error: Exception) -> JSONResponse:
    status, body = _error_payload(error)
    return JSONResponse(body, status_code=status)


def _too_large(limit: int) -> JSONResponse:
    return JSONResponse(
        {"error": "PayloadTooLarge", "message": f"File size must be at most {limit} bytes"},
        status_code=413,
    )


async def _analyze_file(
    path: str,
    frame_count: Optional[int],
    source_label: Optional[str],
    on_progress=None,
) -> PromptResult:
    try:
        result = await get_pipeline().analyze_path(
            path,
            frame_count=frame_count,
            on_progress=on_progress,
            source_label=source_label,
        )
    finally:
        _remove(path)
    _record(result)
    return result


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    global _startup_time

    _startup_time = time.time()
    logger.info(f"Starting {settings.agent.name} {settings.agent.version}")

    get_pipeline()
    logger.info("Pipeline ready")

    yield

    logger.info("Shutdown complete")


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="Ninja Prompt",
    description="Video frame analysis to text-to-video prompt",
    version=settings.agent.version,
    lifespan=lifespan,
)


# =============================================================================
# HTTP Endpoints
# =============================================================================

@app.get("/")
async def root() -> JSONResponse:
    """Service information endpoint."""
    return JSONResponse({
        "service": "NinjaPrompt",
        "version": settings.agent.version,
        "name": settings.agent.name,
        "status": "running",
        "remote_enabled": settings.remote.enabled,
        "default_frame_count": settings.sampling.frame_count,
        "upload_frame_count": settings.service.upload_frame_count,
        "vocabulary_version": VOCABULARY_VERSION,
    })


@app.get("/health")
async def health() -> JSONResponse:
    """Liveness check - always 200 while the process is alive."""
    return JSONResponse({
        "status": "healthy",
        "uptime_seconds": round(time.time() - _startup_time, 1),
    })


@app.get("/metrics")
async def metrics() -> JSONResponse:
    """Analysis counters for observability."""
    classifier = get_pipeline().analyzer.classifier
    classifier_metrics = {}
    if classifier is not None and hasattr(classifier, "get_metrics"):
        classifier_metrics = classifier.get_metrics()

    return JSONResponse({
        "uptime_seconds": round(time.time() - _startup_time, 1),
        "analyses_completed": _analyses_completed,
        "analyses_failed": _analyses_failed,
        "remote_frames": _remote_frames,
        "fallback_frames": _fallback_frames,
        "classifier": classifier_metrics,
    })


@app.post("/analyze")
async def analyze_upload(
    request: Request,
    frame_count: Optional[int] = Query(default=None, ge=1, le=MAX_FRAME_COUNT),
) -> JSONResponse:
    """
    Analyze a video sent as the raw request body.

    The Content-Type must be a video/* type. Bodies larger than
    service.max_upload_bytes are rejected with 413.
    """
    content_type = request.headers.get("content-type", "")
    if not content_type.startswith("video/"):
        return JSONResponse(
            {"error": "UnsupportedMediaType", "message": "Please send a video file (MP4, MOV, AVI, WebM)"},
            status_code=415,
        )

    limit = settings.service.max_upload_bytes
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        return _too_large(limit)

    # Chunked uploads carry no length; stop reading once the cap is crossed
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            return _too_large(limit)

    if not body:
        return JSONResponse(
            {"error": "EmptyBody", "message": "Please upload a video file first"},
            status_code=400,
        )

    path = await asyncio.to_thread(_write_temp_video, bytes(body), _suffix_for(content_type))
    try:
        count = settings.service.upload_frame_count if frame_count is None else frame_count
        result = await _analyze_file(path, count, source_label=None)
    except Exception as e:
        return _error_response(e)

    return JSONResponse(result.model_dump(mode="json"))


@app.post("/analyze-url")
async def analyze_url(payload: AnalyzeUrlRequest) -> JSONResponse:
    """Download a video by URL and analyze it."""
    try:
        path = await asyncio.to_thread(
            download_video,
            payload.url,
            settings.service.max_upload_bytes,
            settings.service.download_timeout_seconds,
        )
        result = await _analyze_file(path, payload.frame_count, source_label=payload.url)
    except Exception as e:
        return _error_response(e)

    return JSONResponse(result.model_dump(mode="json"))


# =============================================================================
# WebSocket Endpoints
# =============================================================================

@app.websocket("/ws/analyze")
async def analyze_stream(websocket: WebSocket) -> None:
    """
    Analyze a video by URL, streaming progress.

    Client sends:  {"url": "...", "frame_count": 6}
    Server sends:  {"type": "progress", ...} per frame, then
                   {"type": "result", "result": {...}} or
                   {"type": "error", "error": "...", "message": "..."}
    """
    await websocket.accept()
    logger.info("Client connected to /ws/analyze")

    async def send_progress(event: FrameProgress) -> None:
        await websocket.send_json({"type": "progress", **event.to_dict()})

    try:
        raw = await websocket.receive_json()
        request = AnalyzeUrlRequest.model_validate(raw)
        path = await asyncio.to_thread(
            download_video,
            request.url,
            settings.service.max_upload_bytes,
            settings.service.download_timeout_seconds,
        )
        result = await _analyze_file(
            path,
            request.frame_count,
            source_label=request.url,
            on_progress=send_progress,
        )
        await websocket.send_json({"type": "result", "result": result.model_dump(mode="json")})
    except WebSocketDisconnect:
        logger.info("Client disconnected from /ws/analyze before completion")
        return
    except Exception as e:
        _, body = _error_payload(e)
        await websocket.send_json({"type": "error", **body})

    await websocket.close()
    logger.info("Closed /ws/analyze session")


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    port = int(os.environ.get("PORT", settings.service.port))

    uvicorn.run(
        "ninja_prompt.main:app",
        host=settings.service.host,
        port=port,
        reload=False,
    )
