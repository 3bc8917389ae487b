"""
FastAPI Application Entry Point.

Usage:
    # Run with uvicorn
    AZURE_SPEECH_KEY=... AZURE_SPEECH_REGION=eastus \\
        uvicorn tts_relay.main:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tts_relay import __version__
from tts_relay.api.routes import NO_CACHE, router
from tts_relay.core.logging import configure_logging, get_logger, info, set_request_id, warn
from tts_relay.core.metrics import metrics
from tts_relay.services.errors import InvalidBodyError

_LOG = get_logger("tts-relay.app")


async def _invalid_body_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Body missing, not JSON, or not a JSON object
    rid = str(uuid.uuid4())[:12]
    set_request_id(rid)
    err = InvalidBodyError("request body must be a JSON object")
    warn(_LOG, "invalid_body", path=request.url.path, errors=len(exc.errors()))
    metrics.record_request(err.code.lower(), 0.0)
    return JSONResponse(
        status_code=err.status_code,
        content=err.to_dict(),
        headers={"Cache-Control": NO_CACHE, "X-Request-Id": rid},
    )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured application instance ready to serve requests.
    """
    # Reads TTS_RELAY_LOG_LEVEL / settings.yaml logging section
    configure_logging()

    app = FastAPI(title="tts-relay", version=__version__)
    app.include_router(router)
    app.add_exception_handler(RequestValidationError, _invalid_body_handler)

    info(_LOG, "app_created", version=__version__)
    return app


# Global application instance for ASGI servers
app = create_app()
