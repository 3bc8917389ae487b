"""
tts-relay Services Layer.

Components:
    - sanitizer.py: Raw request body -> SynthesisRequest
    - ssml.py: SynthesisRequest -> SSML document
    - endpoints.py: Provider URL templates
    - relay.py: ProviderRelay (token exchange + synthesis)
    - errors.py: RelayError taxonomy and error codes
"""
from .errors import (
    ConfigurationMissingError,
    EmptyAudioError,
    EmptyTextError,
    ErrorCode,
    InternalError,
    InvalidBodyError,
    RelayError,
    SynthesisFailedError,
    TokenAcquisitionError,
)
from .relay import AudioResult, ProviderCredential, ProviderRelay
from .sanitizer import SynthesisRequest, sanitize

__all__ = [
    "ProviderRelay",
    "ProviderCredential",
    "AudioResult",
    "SynthesisRequest",
    "sanitize",
    "RelayError",
    "ConfigurationMissingError",
    "InvalidBodyError",
    "EmptyTextError",
    "TokenAcquisitionError",
    "SynthesisFailedError",
    "EmptyAudioError",
    "InternalError",
    "ErrorCode",
]
