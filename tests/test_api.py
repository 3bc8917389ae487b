"""
API tests for POST /api/tts, /health and /metrics.

The provider is faked with httpx.MockTransport and injected through
app.dependency_overrides, together with in-memory settings.
"""
import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import PRIMARY_TOKEN_HOST, FALLBACK_TOKEN_HOST, SYNTHESIS_HOST, make_settings
from tts_relay.api.dependencies import get_settings, get_transport
from tts_relay.core.config import Defaults
from tts_relay.main import create_app


@pytest.fixture
def make_client(provider):
    """Build a TestClient with the given settings and the fake provider."""
    def _make(settings=None):
        app = create_app()
        app.dependency_overrides[get_settings] = lambda: settings or make_settings()
        app.dependency_overrides[get_transport] = provider.transport
        return TestClient(app)
    return _make


@pytest.fixture
def client(make_client):
    return make_client()


class TestSynthesizeSuccess:
    """Happy path."""

    def test_end_to_end(self, client, provider):
        """Invalid format falls back to the default; the voice is kept verbatim."""
        response = client.post("/api/tts", json={
            "text": "Hello", "voice": "v1", "rate": 1, "pitch": 1, "format": "<invalid>",
        })

        assert response.status_code == 200
        assert response.headers["content-type"] == "audio/mpeg"
        assert len(response.content) == 1000
        assert response.headers["X-Bytes"] == "1000"
        assert response.headers["Cache-Control"] == "no-store"
        assert response.headers["X-Upstream-Request-Id"] == "upstream-123"
        assert len(response.headers["X-Request-Id"]) == 12

        call = provider.synthesis_calls[0]
        assert call.headers["X-Microsoft-OutputFormat"] == Defaults.SYNTHESIS_DEFAULT_FORMAT
        body = call.content.decode("utf-8")
        assert '<voice name="v1">' in body
        assert 'rate="+0%" pitch="+0%"' in body

    def test_string_numbers_accepted(self, client, provider):
        response = client.post("/api/tts", json={"text": "Hi", "rate": "1.5", "pitch": "0.5"})
        assert response.status_code == 200
        body = provider.synthesis_calls[0].content.decode("utf-8")
        assert 'rate="+50%" pitch="-25%"' in body

    def test_unknown_fields_ignored(self, client):
        response = client.post("/api/tts", json={"text": "Hi", "speaker": "x", "stream": True})
        assert response.status_code == 200

    def test_configured_default_voice(self, make_client, provider):
        client = make_client(make_settings(synthesis={"default_voice": "de-DE-KatjaNeural"}))
        assert client.post("/api/tts", json={"text": "Hallo"}).status_code == 200
        body = provider.synthesis_calls[0].content.decode("utf-8")
        assert 'xml:lang="de-DE"' in body
        assert 'name="de-DE-KatjaNeural"' in body


class TestClientErrors:
    """400 responses never reach the provider."""

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_empty_text(self, client, provider, text):
        response = client.post("/api/tts", json={"text": text})

        assert response.status_code == 400
        data = response.json()
        assert data == {"ok": False, "error": "Empty text", "code": "EMPTY_TEXT"}
        assert response.headers["Cache-Control"] == "no-store"
        assert provider.calls == []

    def test_missing_text(self, client, provider):
        response = client.post("/api/tts", json={"voice": "en-US-GuyNeural"})
        assert response.status_code == 400
        assert response.json()["code"] == "EMPTY_TEXT"
        assert provider.calls == []

    @pytest.mark.parametrize("kwargs", [
        {"content": b"not json", "headers": {"Content-Type": "application/json"}},
        {"json": ["text", "Hello"]},
        {"json": "Hello"},
    ])
    def test_invalid_body(self, client, provider, kwargs):
        response = client.post("/api/tts", **kwargs)

        assert response.status_code == 400
        data = response.json()
        assert data["ok"] is False
        assert data["code"] == "INVALID_BODY"
        assert provider.calls == []


class TestServerErrors:
    """500 and 502 responses."""

    def test_missing_configuration(self, make_client, provider):
        client = make_client(make_settings(key=None))
        response = client.post("/api/tts", json={"text": "Hello"})

        assert response.status_code == 500
        data = response.json()
        assert data["code"] == "CONFIGURATION_MISSING"
        assert data["error"] == "Missing speech provider configuration"
        assert provider.calls == []

    def test_configuration_checked_before_text(self, make_client):
        client = make_client(make_settings(region=None))
        response = client.post("/api/tts", json={"text": ""})
        assert response.status_code == 500
        assert response.json()["code"] == "CONFIGURATION_MISSING"

    def test_token_failure(self, client, provider):
        provider.handlers[PRIMARY_TOKEN_HOST] = lambda r: httpx.Response(401, text="bad key")
        provider.handlers[FALLBACK_TOKEN_HOST] = lambda r: httpx.Response(401, text="bad key")

        response = client.post("/api/tts", json={"text": "Hello"})

        assert response.status_code == 502
        data = response.json()
        assert data["code"] == "TOKEN_ACQUISITION_FAILED"
        assert data["error"] == "Token error: 401"
        assert provider.synthesis_calls == []

    def test_synthesis_bad_request(self, client, provider):
        provider.handlers[SYNTHESIS_HOST] = lambda r: httpx.Response(
            400, text="Unsupported voice", headers={"X-RequestId": "req-1"},
        )

        response = client.post("/api/tts", json={"text": "Hello", "voice": "xx-XX-Nobody"})

        assert response.status_code == 502
        data = response.json()
        assert data["code"] == "SYNTHESIS_FAILED"
        assert data["error"] == "TTS error: 400"
        assert data["details"] == "Unsupported voice"
        assert data["requestId"] == "req-1"
        assert "hint" in data

    def test_empty_audio(self, client, provider):
        provider.handlers[SYNTHESIS_HOST] = lambda r: httpx.Response(200, content=b"")

        response = client.post("/api/tts", json={"text": "Hello"})

        assert response.status_code == 502
        assert response.json()["code"] == "EMPTY_AUDIO"

    def test_unexpected_error_is_internal(self, client, provider):
        def boom(request):
            raise RuntimeError("secret internals")
        provider.handlers[PRIMARY_TOKEN_HOST] = boom

        response = client.post("/api/tts", json={"text": "Hello"})

        assert response.status_code == 500
        data = response.json()
        assert data["code"] == "INTERNAL_ERROR"
        assert "secret internals" not in response.text


class TestHealthAndMetrics:
    """Operational endpoints."""

    def test_health_configured(self, client):
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["configured"] is True
        assert data["region"] == "eastus"
        assert "version" in data

    def test_health_unconfigured(self, make_client):
        data = make_client(make_settings(key=None)).get("/health").json()
        assert data["configured"] is False

    def test_health_does_not_leak_key(self, client):
        from conftest import KEY
        assert KEY not in client.get("/health").text

    def test_metrics_after_request(self, client):
        client.post("/api/tts", json={"text": "Hello"})
        response = client.get("/metrics")

        assert response.status_code == 200
        assert 'tts_relay_requests_total{outcome="success"}' in response.text
        assert 'tts_relay_upstream_calls_total{stage="synthesis",status="200"}' in response.text
