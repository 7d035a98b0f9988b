"""
Service Tests
=============

Tests for the FastAPI endpoints and the command line interface.
The pipeline is replaced with a stub; no video decoding or network.
"""

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from conftest import consolidated as _consolidated


class _StubPipeline:
    """Stands in for VideoPromptPipeline.analyze_path."""

    def __init__(self, error=None):
        self.error = error
        self.paths = []
        self.frame_counts = []
        self.analyzer = SimpleNamespace(classifier=None)

    async def analyze_path(self, path, frame_count=None, on_progress=None, source_label=None):
        from ninja_prompt.models.analysis import FrameProgress, Provenance
        from ninja_prompt.prompt import synthesize

        self.paths.append(path)
        self.frame_counts.append(frame_count)
        if self.error is not None:
            raise self.error

        count = frame_count or 2
        if on_progress is not None:
            for i in range(count):
                await on_progress(FrameProgress(i, i + 1, count, Provenance.FALLBACK))

        return synthesize(
            _consolidated(["warm tones"], ["clean"], provenances=[Provenance.FALLBACK] * count),
            source=source_label,
        )


@pytest.fixture
def stub_pipeline():
    from ninja_prompt import main

    pipeline = _StubPipeline()
    main.set_pipeline(pipeline)
    yield pipeline
    main.set_pipeline(None)


@pytest.fixture
def client(stub_pipeline):
    from ninja_prompt.main import app

    return TestClient(app)


class TestInfoEndpoints:
    """Tests for the informational endpoints."""

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["service"] == "NinjaPrompt"
        assert response.json()["vocabulary_version"] == "1"

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_metrics(self, client):
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "analyses_completed" in response.json()
        assert response.json()["classifier"] == {}

    def test_metrics_include_classifier(self, client, stub_pipeline):
        """Verify classifier call counters are reported."""
        from ninja_prompt.remote.classifier import HuggingFaceClassifier

        stub_pipeline.analyzer.classifier = HuggingFaceClassifier("https://example.test/model")
        response = client.get("/metrics")

        classifier = response.json()["classifier"]
        assert classifier["call_count"] == 0
        assert classifier["error_count"] == 0
        assert classifier["endpoint"] == "https://example.test/model"


class TestAnalyzeUpload:
    """Tests for POST /analyze."""

    def test_success(self, client, stub_pipeline):
        """Verify an upload is analyzed and the temp file removed."""
        import os

        response = client.post(
            "/analyze",
            content=b"fake-video-bytes",
            headers={"Content-Type": "video/mp4"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["prompt"].startswith("A warm tones video featuring clean")
        assert body["details"]["provenance"] == "fallback-only"
        assert stub_pipeline.paths[0].endswith(".mp4")
        assert not os.path.exists(stub_pipeline.paths[0])

    def test_wrong_content_type(self, client):
        response = client.post(
            "/analyze",
            content=b"not a video",
            headers={"Content-Type": "image/png"},
        )

        assert response.status_code == 415
        assert response.json()["error"] == "UnsupportedMediaType"

    def test_empty_body(self, client):
        response = client.post("/analyze", content=b"", headers={"Content-Type": "video/mp4"})
        assert response.status_code == 400

    def test_too_large(self, client, monkeypatch):
        from ninja_prompt.config import settings

        monkeypatch.setattr(settings.service, "max_upload_bytes", 8)
        response = client.post(
            "/analyze",
            content=b"0123456789",
            headers={"Content-Type": "video/mp4"},
        )

        assert response.status_code == 413

    def test_chunked_too_large(self, client, stub_pipeline, monkeypatch):
        """Verify a body without Content-Length is capped while streaming."""
        from ninja_prompt.config import settings

        monkeypatch.setattr(settings.service, "max_upload_bytes", 8)
        response = client.post(
            "/analyze",
            content=iter([b"0123", b"4567", b"89"]),
            headers={"Content-Type": "video/mp4"},
        )

        assert response.status_code == 413
        assert stub_pipeline.paths == []

    def test_chunked_within_limit(self, client, stub_pipeline):
        response = client.post(
            "/analyze",
            content=iter([b"fake-", b"video"]),
            headers={"Content-Type": "video/mp4"},
        )

        assert response.status_code == 200
        assert len(stub_pipeline.paths) == 1

    def test_upload_frame_count_default(self, client, stub_pipeline):
        """Verify uploads use the upload-specific frame count."""
        from ninja_prompt.config import settings

        client.post("/analyze", content=b"junk", headers={"Content-Type": "video/mp4"})
        client.post("/analyze?frame_count=3", content=b"junk", headers={"Content-Type": "video/mp4"})

        assert stub_pipeline.frame_counts == [settings.service.upload_frame_count, 3]

    def test_unreadable_video(self, client, stub_pipeline):
        """Verify SourceUnavailable maps to 422."""
        from ninja_prompt.sampling.source import SourceUnavailable

        stub_pipeline.error = SourceUnavailable("Failed to open video")
        response = client.post("/analyze", content=b"junk", headers={"Content-Type": "video/mp4"})

        assert response.status_code == 422
        assert response.json()["error"] == "SourceUnavailable"

    def test_seek_timeout(self, client, stub_pipeline):
        from ninja_prompt.sampling.source import SeekTimeout

        stub_pipeline.error = SeekTimeout("stuck")
        response = client.post("/analyze", content=b"junk", headers={"Content-Type": "video/mp4"})

        assert response.status_code == 504

    def test_frame_count_bounds(self, client):
        response = client.post(
            "/analyze?frame_count=0",
            content=b"junk",
            headers={"Content-Type": "video/mp4"},
        )
        assert response.status_code == 422


class TestAnalyzeUrl:
    """Tests for POST /analyze-url."""

    def test_success(self, client, stub_pipeline, monkeypatch, tmp_path):
        from ninja_prompt import main

        path = tmp_path / "clip.mp4"
        path.write_bytes(b"video")
        monkeypatch.setattr(main, "download_video", lambda url, max_bytes, timeout: str(path))

        response = client.post("/analyze-url", json={"url": "https://example.test/clip.mp4"})

        assert response.status_code == 200
        assert response.json()["details"]["source"] == "https://example.test/clip.mp4"
        assert not path.exists()
        assert stub_pipeline.frame_counts == [None]

    def test_download_failure(self, client, monkeypatch):
        """Verify an unreachable URL maps to 422."""
        import requests

        def fake_get(*args, **kwargs):
            raise requests.ConnectionError("unreachable")

        monkeypatch.setattr(requests, "get", fake_get)

        response = client.post("/analyze-url", json={"url": "https://example.test/clip.mp4"})

        assert response.status_code == 422
        assert response.json()["error"] == "VideoDownloadError"

    def test_missing_url(self, client):
        response = client.post("/analyze-url", json={})
        assert response.status_code == 422


class TestAnalyzeStream:
    """Tests for WS /ws/analyze."""

    def test_progress_then_result(self, client, monkeypatch, tmp_path):
        from ninja_prompt import main

        path = tmp_path / "clip.mp4"
        path.write_bytes(b"video")
        monkeypatch.setattr(main, "download_video", lambda url, max_bytes, timeout: str(path))

        with client.websocket_connect("/ws/analyze") as ws:
            ws.send_json({"url": "https://example.test/clip.mp4", "frame_count": 3})
            messages = [ws.receive_json() for _ in range(4)]

        assert [m["type"] for m in messages] == ["progress", "progress", "progress", "result"]
        assert messages[2]["completed"] == 3
        assert messages[3]["result"]["details"]["frame_provenance"] == ["fallback"] * 3

    def test_invalid_request(self, client):
        with client.websocket_connect("/ws/analyze") as ws:
            ws.send_json({"frame_count": 3})
            message = ws.receive_json()

        assert message["type"] == "error"
        assert message["error"] == "ValidationError"


class TestDownloadVideo:
    """Tests for the URL download helper."""

    def test_size_limit(self, monkeypatch):
        import requests

        from ninja_prompt.main import VideoDownloadError, download_video

        class _Response:
            ok = True
            status_code = 200

            def __enter__(self):
                return self

            def __exit__(self, *exc):
                return False

            def iter_content(self, chunk_size):
                yield b"x" * 10
                yield b"x" * 10

        monkeypatch.setattr(requests, "get", lambda *a, **k: _Response())

        with pytest.raises(VideoDownloadError):
            download_video("https://example.test/clip.mp4", max_bytes=15, timeout=1.0)

    def test_http_error(self, monkeypatch):
        import requests

        from ninja_prompt.main import VideoDownloadError, download_video

        class _Response:
            ok = False
            status_code = 404

            def __enter__(self):
                return self

            def __exit__(self, *exc):
                return False

        monkeypatch.setattr(requests, "get", lambda *a, **k: _Response())

        with pytest.raises(VideoDownloadError, match="404"):
            download_video("https://example.test/clip.mp4", max_bytes=100, timeout=1.0)


class TestCli:
    """Tests for the command line entry point."""

    def test_missing_file(self, tmp_path, capsys):
        from ninja_prompt.cli import main

        exit_code = main([str(tmp_path / "missing.mp4"), "--no-remote"])

        assert exit_code == 1
        assert "Analysis failed" in capsys.readouterr().err

    def test_invalid_frames(self, capsys):
        from ninja_prompt.cli import main

        assert main(["clip.mp4", "--frames", "0"]) == 2
