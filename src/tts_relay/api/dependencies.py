"""
FastAPI Dependency Providers.

    get_settings()  - settings loaded once per process (YAML + environment)
    get_transport() - httpx transport for upstream calls; None means the
                      default network transport

Tests swap both through ``app.dependency_overrides``:

    app.dependency_overrides[get_settings] = lambda: Settings(raw={...})
    app.dependency_overrides[get_transport] = lambda: httpx.MockTransport(handler)
"""
from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

import httpx

from tts_relay.core.config import Settings, load_settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Load and cache application settings.

    The file named by TTS_RELAY_SETTINGS (default config/settings.yaml) is
    optional; a deployment can be configured through the environment alone.
    Missing credentials are reported per request, not at startup.
    """
    return load_settings(os.getenv("TTS_RELAY_SETTINGS", "config/settings.yaml"), required=False)


def get_transport() -> Optional[httpx.BaseTransport]:
    return None
