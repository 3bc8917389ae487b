"""
Input Sanitizer for Synthesis Requests.

Turns a loosely-typed request body into a fully populated SynthesisRequest
in a single pass, before anything touches the network.

Rules:
    - text: stringified and stripped; empty -> EmptyTextError
    - voice: stringified and stripped; empty or missing -> default voice
    - rate, pitch: numbers or numeric strings; anything else (including
      NaN, infinities and booleans) -> 1.0; then clamped to [0.5, 2.0]
    - format: must be an allow-listed MP3 profile, otherwise the default

The format allow-list matters beyond validation: the value is forwarded
verbatim in the X-Microsoft-OutputFormat header, so arbitrary strings must
never reach it.

Usage:
    from tts_relay.services.sanitizer import sanitize

    req = sanitize({"text": "  Hello ", "rate": "1.5", "format": "wav"})
    # SynthesisRequest(text='Hello', voice='en-US-JennyNeural', rate=1.5,
    #                  pitch=1.0, output_format='audio-16khz-128kbitrate-mono-mp3')
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from tts_relay.core.config import OUTPUT_FORMATS, Defaults
from tts_relay.services.errors import EmptyTextError

DEFAULT_VOICE = Defaults.SYNTHESIS_DEFAULT_VOICE
DEFAULT_OUTPUT_FORMAT = Defaults.SYNTHESIS_DEFAULT_FORMAT

RATE_RANGE = (0.5, 2.0)
PITCH_RANGE = (0.5, 2.0)
NEUTRAL = 1.0


@dataclass(frozen=True)
class SynthesisRequest:
    """
    Canonical, fully-populated synthesis parameters.

    Attributes:
        text: Stripped, non-empty text to speak.
        voice: Provider voice name (e.g. "en-US-JennyNeural").
        rate: Speed multiplier in [0.5, 2.0].
        pitch: Pitch multiplier in [0.5, 2.0].
        output_format: Allow-listed provider encoding profile.
    """
    text: str
    voice: str = DEFAULT_VOICE
    rate: float = NEUTRAL
    pitch: float = NEUTRAL
    output_format: str = DEFAULT_OUTPUT_FORMAT


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def coerce_number(value: Any, default: float = NEUTRAL) -> float:
    """
    Coerce a JSON-ish value to a finite float.

    Ints, floats and numeric strings are accepted. ``None``, booleans,
    non-numeric strings, containers and non-finite values give ``default``.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return default
    else:
        return default
    if not math.isfinite(number):
        return default
    return number


def sanitize_text(value: Any) -> str:
    text = "" if value is None else str(value).strip()
    if not text:
        raise EmptyTextError()
    return text


def sanitize_voice(value: Any, default: str = DEFAULT_VOICE) -> str:
    voice = "" if value is None else str(value).strip()
    return voice or default


def sanitize_format(value: Any, default: str = DEFAULT_OUTPUT_FORMAT) -> str:
    if isinstance(value, str) and value in OUTPUT_FORMATS:
        return value
    return default


def sanitize(
    raw: Optional[Mapping[str, Any]],
    default_voice: str = DEFAULT_VOICE,
    default_format: str = DEFAULT_OUTPUT_FORMAT,
) -> SynthesisRequest:
    """
    Validate and normalize a raw request body.

    Args:
        raw: Decoded JSON body (``None`` is treated as an empty body).
        default_voice: Voice used when none is given.
        default_format: Profile used when the format is missing or not allowed.

    Returns:
        SynthesisRequest with every field populated.

    Raises:
        EmptyTextError: If text is missing or blank.
    """
    raw = raw or {}
    text = sanitize_text(raw.get("text"))
    return SynthesisRequest(
        text=text,
        voice=sanitize_voice(raw.get("voice"), default_voice),
        rate=clamp(coerce_number(raw.get("rate")), *RATE_RANGE),
        pitch=clamp(coerce_number(raw.get("pitch")), *PITCH_RANGE),
        output_format=sanitize_format(raw.get("format"), default_format),
    )
