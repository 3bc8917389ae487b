"""Tests for Prometheus metrics."""
from __future__ import annotations

from tts_relay.core.metrics import RelayMetrics, metrics


def _sample(m: RelayMetrics, name: str, labels=None) -> float:
    return m.registry.get_sample_value(name, labels or {}) or 0.0


class TestRelayMetrics:
    """Test RelayMetrics on a fresh registry."""

    def test_global_instance(self):
        assert isinstance(metrics, RelayMetrics)

    def test_record_request(self):
        m = RelayMetrics()
        m.record_request("success", 0.3, audio_bytes=1000)
        m.record_request("empty_text", 0.001)

        assert _sample(m, "tts_relay_requests_total", {"outcome": "success"}) == 1.0
        assert _sample(m, "tts_relay_requests_total", {"outcome": "empty_text"}) == 1.0
        assert _sample(m, "tts_relay_audio_bytes_total") == 1000.0
        assert _sample(m, "tts_relay_request_duration_seconds_count", {"outcome": "success"}) == 1.0

    def test_record_upstream(self):
        m = RelayMetrics()
        m.record_upstream("token", 200)
        m.record_upstream("token", None)
        m.record_upstream("synthesis", 400)

        assert _sample(m, "tts_relay_upstream_calls_total", {"stage": "token", "status": "200"}) == 1.0
        assert _sample(m, "tts_relay_upstream_calls_total", {"stage": "token", "status": "error"}) == 1.0
        assert _sample(m, "tts_relay_upstream_calls_total", {"stage": "synthesis", "status": "400"}) == 1.0

    def test_instances_are_isolated(self):
        a, b = RelayMetrics(), RelayMetrics()
        a.record_request("success", 0.1)
        assert _sample(b, "tts_relay_requests_total", {"outcome": "success"}) == 0.0

    def test_metrics_response(self):
        m = RelayMetrics()
        m.record_request("success", 0.1)
        content, content_type = m.get_metrics_response()

        assert isinstance(content, bytes)
        assert b"tts_relay_requests_total" in content
        assert content_type.startswith("text/plain")
