"""
FastAPI REST API Layer for tts-relay.

    - routes.py: POST /api/tts, GET /health, GET /metrics
    - schemas.py: Request body model
    - dependencies.py: Settings and transport providers
"""
