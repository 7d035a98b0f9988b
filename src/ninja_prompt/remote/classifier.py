"""
Remote Classifier Adapter
=========================

Boundary adapter for an external label-ranking service.

This adapter:
    - POSTs raw image bytes to an HTTP endpoint (Hugging Face inference
      API by default)
    - Validates the ranked [{label, score}] reply
    - Normalizes the top labels into a FrameAnalysis via the keyword
      vocabularies

Design Rules:
    - Every failure surfaces as RemoteUnavailable (never retried here)
    - Calls are bounded by a timeout
    - The reply is untrusted and validated field by field
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

import requests

from ninja_prompt.models.analysis import FrameAnalysis
from ninja_prompt.models.vocabulary import (
    DEFAULT_CONFIDENCE,
    DEFAULT_ELEMENTS,
    DEFAULT_STYLES,
    ELEMENT_KEYWORDS,
    MAX_ELEMENT_TAGS,
    MAX_STYLE_TAGS,
    STYLE_KEYWORDS,
    matches_any,
)


logger = logging.getLogger(__name__)


class RemoteUnavailable(Exception):
    """Raised when the remote classifier cannot produce labels."""
    pass


@dataclass(frozen=True, slots=True)
class LabelScore:
    """One ranked label from the classifier."""

    label: str
    score: float


class LabelClassifier(Protocol):
    """
    Protocol for remote label-ranking backends.

    Implementations:
        - HuggingFaceClassifier (HTTP)
        - stubs in the test suite
    """

    async def analyze(self, image_bytes: bytes) -> FrameAnalysis:
        """
        Classify an image and normalize the reply.

        Raises:
            RemoteUnavailable: On any service failure
        """
        ...


def interpret_labels(labels: List[LabelScore], top_k: int = 5) -> FrameAnalysis:
    """
    Normalize ranked labels into a FrameAnalysis.

    Args:
        labels: Ranked labels, best first
        top_k: Number of leading labels considered

    Returns:
        FrameAnalysis with style/element tags taken from matching label
        texts, confidence = best score * 100, and the raw labels
    """
    top = labels[:top_k]
    if not top:
        return FrameAnalysis(
            styles=DEFAULT_STYLES,
            elements=DEFAULT_ELEMENTS,
            confidence=DEFAULT_CONFIDENCE,
            raw_labels=(),
        )

    texts = [item.label for item in top]
    styles = [text for text in texts if matches_any(text, STYLE_KEYWORDS)][:MAX_STYLE_TAGS]
    elements = [text for text in texts if matches_any(text, ELEMENT_KEYWORDS)][:MAX_ELEMENT_TAGS]

    return FrameAnalysis(
        styles=tuple(styles),
        elements=tuple(elements),
        confidence=max(item.score for item in top) * 100.0,
        raw_labels=tuple(texts),
    )


def parse_reply(payload: object) -> List[LabelScore]:
    """
    Validate a decoded JSON reply.

    Raises:
        RemoteUnavailable: If the reply is not a list of {label, score}
    """
    if not isinstance(payload, list):
        raise RemoteUnavailable(f"Malformed reply: expected list, got {type(payload).__name__}")

    labels = []
    for item in payload:
        if not isinstance(item, dict):
            raise RemoteUnavailable(f"Malformed reply item: {item!r}")
        label = item.get("label")
        score = item.get("score")
        if not isinstance(label, str):
            raise RemoteUnavailable(f"Malformed label: {label!r}")
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            raise RemoteUnavailable(f"Malformed score for {label!r}: {score!r}")
        if not 0.0 <= float(score) <= 1.0:
            raise RemoteUnavailable(f"Score out of range for {label!r}: {score}")
        labels.append(LabelScore(label=label, score=float(score)))

    return labels


class HuggingFaceClassifier:
    """
    Label-ranking client for a Hugging Face style inference endpoint.

    Attributes:
        endpoint: URL accepting raw image bytes
        timeout: Seconds before a call is abandoned
        top_k: Number of ranked labels considered
    """

    def __init__(
        self,
        endpoint: Optional[str],
        api_token: Optional[str] = None,
        timeout: float = 10.0,
        top_k: int = 5,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Initialize the classifier client.

        Args:
            endpoint: Inference URL; None or empty disables remote calls
            api_token: Optional bearer token
            timeout: Per-call timeout in seconds
            top_k: Ranked labels considered per image
            session: Optional requests session (connection pooling)
        """
        self.endpoint = endpoint or None
        self.timeout = timeout
        self.top_k = top_k
        self._api_token = api_token
        self._session = session

        self._call_count: int = 0
        self._error_count: int = 0

        logger.info(
            f"HuggingFaceClassifier initialized: endpoint={self.endpoint}, "
            f"timeout={timeout}s, auth={'yes' if api_token else 'no'}"
        )

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/octet-stream"}
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"
        return headers

    def classify(self, image_bytes: bytes) -> List[LabelScore]:
        """
        Send one image to the service (blocking).

        Args:
            image_bytes: Encoded image (JPEG)

        Returns:
            Ranked labels as returned by the service

        Raises:
            RemoteUnavailable: On transport error, timeout, non-2xx status
                or malformed reply
        """
        if self.endpoint is None:
            raise RemoteUnavailable("No classifier endpoint configured")

        self._call_count += 1
        poster = self._session.post if self._session is not None else requests.post

        try:
            response = poster(
                self.endpoint,
                headers=self._headers(),
                data=image_bytes,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            self._error_count += 1
            raise RemoteUnavailable(f"Classifier request failed: {e}")

        if not response.ok:
            self._error_count += 1
            raise RemoteUnavailable(f"Classifier HTTP error: status {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            self._error_count += 1
            raise RemoteUnavailable(f"Classifier returned non-JSON body: {e}")

        try:
            return parse_reply(payload)
        except RemoteUnavailable:
            self._error_count += 1
            raise

    async def analyze(self, image_bytes: bytes) -> FrameAnalysis:
        """Classify in a worker thread and normalize the reply."""
        labels = await asyncio.to_thread(self.classify, image_bytes)
        analysis = interpret_labels(labels, self.top_k)

        logger.debug(
            f"Classifier labels: {list(analysis.raw_labels or ())}, "
            f"conf={analysis.confidence:.1f}"
        )
        return analysis

    @property
    def call_count(self) -> int:
        """Total classification calls attempted."""
        return self._call_count

    @property
    def error_count(self) -> int:
        """Total classification failures."""
        return self._error_count

    def get_metrics(self) -> dict:
        """Get classifier metrics for observability."""
        return {
            "call_count": self._call_count,
            "error_count": self._error_count,
            "endpoint": self.endpoint,
        }
