"""Shared fixtures: fake provider and configured settings."""
from __future__ import annotations

import os
from typing import Callable, Dict, List, Optional

import httpx
import pytest

from tts_relay.core.config import Settings

REGION = "eastus"
KEY = "0123456789abcdef0123456789abcdef"

PRIMARY_TOKEN_HOST = f"{REGION}.api.cognitive.microsoft.com"
FALLBACK_TOKEN_HOST = f"{REGION}.sts.speech.microsoft.com"
SYNTHESIS_HOST = f"{REGION}.tts.speech.microsoft.com"


class FakeProvider:
    """
    Scriptable stand-in for the speech provider.

    Each host maps to a handler returning an httpx.Response or raising an
    httpx exception. Every request seen is recorded in ``calls``.
    """

    def __init__(self):
        self.calls: List[httpx.Request] = []
        self.handlers: Dict[str, Callable[[httpx.Request], httpx.Response]] = {
            PRIMARY_TOKEN_HOST: lambda r: httpx.Response(200, text="token-abc"),
            FALLBACK_TOKEN_HOST: lambda r: httpx.Response(200, text="token-fallback"),
            SYNTHESIS_HOST: lambda r: httpx.Response(
                200,
                content=b"\xff\xf3" + b"\x00" * 998,
                headers={"X-RequestId": "upstream-123"},
            ),
        }

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        # Body is consumed here so tests can inspect it after the client closes
        request.read()
        return self.handlers[request.url.host](request)

    def calls_to(self, host: str) -> List[httpx.Request]:
        return [c for c in self.calls if c.url.host == host]

    @property
    def synthesis_calls(self) -> List[httpx.Request]:
        return self.calls_to(SYNTHESIS_HOST)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def make_settings(
    key: Optional[str] = KEY,
    region: Optional[str] = REGION,
    **sections,
) -> Settings:
    provider = dict(sections.pop("provider", {}))
    if key is not None:
        provider["subscription_key"] = key
    if region is not None:
        provider["region"] = region
    raw = {"provider": provider}
    raw.update(sections)
    return Settings(raw=raw)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove provider and relay environment overrides for the test."""
    for name in list(os.environ):
        if name.startswith(("AZURE_SPEECH_", "TTS_RELAY_")):
            monkeypatch.delenv(name, raising=False)
    yield
