"""
SSML document construction.

The provider speaks SSML, so everything the caller controls (text and voice
name) is XML-escaped before it is placed in the document. Prosody values
are converted from multipliers to the provider's signed percentages:

    rate  1.5 -> "+50%"    rate  0.5 -> "-50%"
    pitch 1.5 -> "+25%"    pitch 0.5 -> "-25%"

Pitch uses half the slope of rate.
"""
from __future__ import annotations

import math
import re

from tts_relay.core.config import Defaults
from tts_relay.services.sanitizer import SynthesisRequest

SSML_NAMESPACE = "http://www.w3.org/2001/10/synthesis"

_XML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&apos;",
}
_XML_ESCAPE_RE = re.compile("[&<>\"']")

# Azure voice names start with their locale: "hi-IN-SwaraNeural"
_VOICE_LOCALE_RE = re.compile(r"^([a-z]{2,3}-[A-Z]{2})-")


def escape_xml(value: str) -> str:
    """Escape the five XML-reserved characters."""
    return _XML_ESCAPE_RE.sub(lambda m: _XML_ESCAPES[m.group(0)], value)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _signed_percent(value: int) -> str:
    return f"+{value}%" if value >= 0 else f"{value}%"


def rate_to_percent(rate: float) -> str:
    return _signed_percent(_round_half_up((rate - 1) * 100))


def pitch_to_percent(pitch: float) -> str:
    return _signed_percent(_round_half_up((pitch - 1) * 50))


def voice_language(voice: str, default: str = Defaults.SYNTHESIS_DEFAULT_LANGUAGE) -> str:
    """Locale prefix of a voice name, or ``default`` if there is none."""
    match = _VOICE_LOCALE_RE.match(voice)
    return match.group(1) if match else default


def build_ssml(request: SynthesisRequest, default_language: str = Defaults.SYNTHESIS_DEFAULT_LANGUAGE) -> str:
    """
    Build the SSML document for a sanitized request.

    Args:
        request: Sanitized synthesis request.
        default_language: xml:lang used when the voice has no locale prefix.

    Returns:
        A single-line SSML document.
    """
    lang = escape_xml(voice_language(request.voice, default_language))
    return (
        f'<speak version="1.0" xmlns="{SSML_NAMESPACE}" xml:lang="{lang}">'
        f'<voice name="{escape_xml(request.voice)}">'
        f'<prosody rate="{rate_to_percent(request.rate)}" pitch="{pitch_to_percent(request.pitch)}">'
        f"{escape_xml(request.text)}"
        "</prosody></voice></speak>"
    )
