"""
Prometheus Metrics for the Relay.

Metrics Exposed:
    tts_relay_requests_total{outcome}                 - Requests by final outcome
    tts_relay_request_duration_seconds{outcome}       - End-to-end latency
    tts_relay_upstream_calls_total{stage,status}      - Provider calls (stage=token|synthesis)
    tts_relay_audio_bytes_total                       - MP3 bytes relayed to callers

``outcome`` is ``success`` or the lower-cased error code
(``empty_text``, ``token_acquisition_failed``, ``synthesis_failed``, ...).
``status`` is the upstream HTTP status, or ``error`` for transport failures.

Usage:
    from tts_relay.core.metrics import metrics

    metrics.record_upstream("token", 200)
    metrics.record_request("success", duration=0.8, audio_bytes=18432)

    content, content_type = metrics.get_metrics_response()
"""
from __future__ import annotations

from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)


class RelayMetrics:
    """
    Relay metrics on a private CollectorRegistry.

    A private registry keeps repeated app construction in tests from
    tripping over duplicate metric registration in the default registry.
    """

    def __init__(self):
        self._registry = CollectorRegistry()

        self._requests_total = Counter(
            "tts_relay_requests_total",
            "Relay requests by outcome",
            ["outcome"],
            registry=self._registry,
        )
        self._request_duration = Histogram(
            "tts_relay_request_duration_seconds",
            "End-to-end relay request duration in seconds",
            ["outcome"],
            buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
            registry=self._registry,
        )
        self._upstream_calls = Counter(
            "tts_relay_upstream_calls_total",
            "Calls made to the speech provider",
            ["stage", "status"],
            registry=self._registry,
        )
        self._audio_bytes_total = Counter(
            "tts_relay_audio_bytes_total",
            "Total audio bytes returned to callers",
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    def record_request(self, outcome: str, duration: float, audio_bytes: int = 0) -> None:
        """
        Record a finished relay request.

        Args:
            outcome: "success" or a lower-cased error code.
            duration: Request duration in seconds.
            audio_bytes: Size of audio returned (success only).
        """
        self._requests_total.labels(outcome=outcome).inc()
        self._request_duration.labels(outcome=outcome).observe(duration)
        if audio_bytes > 0:
            self._audio_bytes_total.inc(audio_bytes)

    def record_upstream(self, stage: str, status: Optional[int]) -> None:
        """Record one provider call; ``status=None`` means a transport error."""
        label = str(status) if status is not None else "error"
        self._upstream_calls.labels(stage=stage, status=label).inc()

    def get_metrics_response(self) -> tuple[bytes, str]:
        """
        Get metrics in Prometheus text format.

        Returns:
            Tuple of (content_bytes, content_type)
        """
        return generate_latest(self._registry), CONTENT_TYPE_LATEST


# Global singleton: from tts_relay.core.metrics import metrics
metrics = RelayMetrics()
