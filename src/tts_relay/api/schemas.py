"""
API Request Schemas.

Fields are deliberately untyped: the body comes straight from a browser
form and may carry strings where numbers are expected, nulls, or values
out of range. The sanitizer decides what each value means; the schema
only guarantees the body is a JSON object.

Example Request:
    {
        "text": "Hello there",
        "voice": "en-GB-SoniaNeural",
        "rate": 1.2,
        "pitch": 0.9,
        "format": "audio-24khz-96kbitrate-mono-mp3"
    }
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TTSRequest(BaseModel):
    """
    Synthesis request body for POST /api/tts.

    Attributes:
        text: Text to speak. Required after trimming.
        voice: Provider voice name; blank or missing uses the default voice.
        rate: Speed multiplier, clamped to 0.5-2.0 (default 1.0).
        pitch: Pitch multiplier, clamped to 0.5-2.0 (default 1.0).
        format: Provider MP3 profile; unknown values use the default.
    """
    model_config = ConfigDict(extra="ignore")

    text: Any = Field(default=None, description="Text to synthesize")
    voice: Any = Field(default=None, description="Provider voice name, e.g. en-US-JennyNeural")
    rate: Any = Field(default=None, description="Speaking rate multiplier (0.5-2.0)")
    pitch: Any = Field(default=None, description="Pitch multiplier (0.5-2.0)")
    format: Any = Field(default=None, description="Output format profile")
