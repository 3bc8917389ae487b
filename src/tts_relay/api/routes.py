"""
Relay API Routes.

Endpoints:
    POST /api/tts   - Synthesize text, returns audio/mpeg
    GET  /health    - Liveness plus whether credentials are configured
    GET  /metrics   - Prometheus metrics

Request Flow:
    1. Generate a request ID for log correlation
    2. Build a credential from configuration (500 if absent)
    3. Sanitize the body (400 on empty text)
    4. Relay to the provider (502 on any upstream failure)
    5. Return MP3 bytes with caching disabled

Error Handling:
    Every failure is answered with JSON:
    {
        "ok": false,
        "error": "<summary>",
        "code": "<ERROR_CODE>",
        "details": "<upstream diagnostics, optional>",
        "requestId": "<provider request id, optional>",
        "hint": "<recovery hint, optional>"
    }

    HTTP status codes:
        - EMPTY_TEXT, INVALID_BODY -> 400
        - CONFIGURATION_MISSING, INTERNAL_ERROR -> 500
        - TOKEN_ACQUISITION_FAILED, SYNTHESIS_FAILED, EMPTY_AUDIO -> 502

Example:
    curl -X POST http://localhost:8000/api/tts \\
        -H "Content-Type: application/json" \\
        -d '{"text": "Hello!", "voice": "en-US-GuyNeural", "rate": 1.1}' \\
        --output speech.mp3
"""
from __future__ import annotations

import uuid
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from tts_relay import __version__
from tts_relay.api.dependencies import get_settings, get_transport
from tts_relay.api.schemas import TTSRequest
from tts_relay.core.config import Settings
from tts_relay.core.logging import debug, error, get_logger, info, set_request_id, warn
from tts_relay.core.metrics import metrics
from tts_relay.services.errors import InternalError, RelayError
from tts_relay.services.relay import ProviderCredential, ProviderRelay
from tts_relay.services.sanitizer import sanitize
from tts_relay.utils.timeit import timeit

router = APIRouter()

_LOG = get_logger("tts-relay.api")

NO_CACHE = "no-store"


def _error_response(err: RelayError, rid: str) -> JSONResponse:
    return JSONResponse(
        status_code=err.status_code,
        content=err.to_dict(),
        headers={"Cache-Control": NO_CACHE, "X-Request-Id": rid},
    )


def _preview(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "…"


@router.post("/api/tts", response_class=Response)
def synthesize_speech(
    req: TTSRequest,
    settings: Settings = Depends(get_settings),
    transport: Optional[httpx.BaseTransport] = Depends(get_transport),
):
    """
    Synthesize speech from free-form text.

    Returns:
        Response: MP3 bytes with headers:
            - Cache-Control: no-store
            - X-Request-Id: Local request identifier
            - X-Bytes: Audio size in bytes
            - X-Upstream-Request-Id: Provider request id, when available
    """
    rid = str(uuid.uuid4())[:12]
    set_request_id(rid)

    with timeit("request") as t:
        try:
            config = settings.get_relay_config()
            credential = ProviderCredential.from_config(config.provider)
            request = sanitize(
                req.model_dump(),
                default_voice=config.synthesis.default_voice,
                default_format=config.synthesis.default_format,
            )
            info(
                _LOG, "relay_request",
                chars=len(request.text),
                voice=request.voice,
                rate=request.rate,
                pitch=request.pitch,
                format=request.output_format,
            )
            debug(_LOG, "relay_request_text", text=_preview(request.text, config.logging.text_preview_chars))

            relay = ProviderRelay.from_config(config, transport=transport)
            result = relay.synthesize(request, credential)

        except RelayError as e:
            warn(_LOG, "relay_error", code=e.code, status=e.status_code)
            metrics.record_request(e.code.lower(), t.elapsed())
            return _error_response(e, rid)

        except Exception:
            error(_LOG, "relay_internal_error", exc_info=True)
            metrics.record_request(InternalError().code.lower(), t.elapsed())
            return _error_response(InternalError(), rid)

    metrics.record_request("success", t.seconds, audio_bytes=len(result.audio))
    headers = {
        "Cache-Control": NO_CACHE,
        "X-Request-Id": rid,
        "X-Bytes": str(len(result.audio)),
    }
    if result.upstream_request_id:
        headers["X-Upstream-Request-Id"] = result.upstream_request_id
    return Response(content=result.audio, media_type=result.content_type, headers=headers)


@router.get("/health")
def health(settings: Settings = Depends(get_settings)):
    """
    Health check for load balancers and probes.

    ``configured`` is False when the subscription key or region is missing;
    the process still serves, but every synthesis request will answer 500.
    """
    return {
        "status": "healthy",
        "configured": bool(settings.subscription_key and settings.region),
        "region": settings.region,
        "version": __version__,
    }


@router.get("/metrics")
def prometheus_metrics():
    """Prometheus metrics in text exposition format."""
    content, content_type = metrics.get_metrics_response()
    return Response(content=content, media_type=content_type)
