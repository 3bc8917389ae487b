"""
Relay Error Taxonomy.

Every failure the relay can produce is a RelayError subclass carrying a
stable code, a short summary for callers, the HTTP status it maps to, and
whatever upstream diagnostics were available.

    Error                      Code                       HTTP
    ConfigurationMissingError  CONFIGURATION_MISSING      500
    InvalidBodyError           INVALID_BODY               400
    EmptyTextError             EMPTY_TEXT                 400
    TokenAcquisitionError      TOKEN_ACQUISITION_FAILED   502
    SynthesisFailedError       SYNTHESIS_FAILED           502
    EmptyAudioError            EMPTY_AUDIO                502
    (anything else)            INTERNAL_ERROR             500

Response payload (to_dict):
    {
        "ok": false,
        "error": "TTS error: 400",         # stable summary
        "code": "SYNTHESIS_FAILED",
        "details": "<upstream body>",      # optional
        "requestId": "<provider id>",      # optional
        "hint": "Check the voice name..."  # optional
    }
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class ErrorCode:
    """Standardized error codes returned in the ``code`` field."""
    CONFIGURATION_MISSING = "CONFIGURATION_MISSING"
    INVALID_BODY = "INVALID_BODY"
    EMPTY_TEXT = "EMPTY_TEXT"
    TOKEN_ACQUISITION_FAILED = "TOKEN_ACQUISITION_FAILED"
    SYNTHESIS_FAILED = "SYNTHESIS_FAILED"
    EMPTY_AUDIO = "EMPTY_AUDIO"
    INTERNAL_ERROR = "INTERNAL_ERROR"


BAD_REQUEST_HINT = (
    "The provider rejected the request as malformed. Check that the voice name "
    "exists (e.g. en-US-JennyNeural), that the output format is supported, and "
    "that rate and pitch are within range."
)


class RelayError(Exception):
    """
    Base exception for relay failures.

    Attributes:
        message: Short, stable summary shown to callers.
        code: Error code from ErrorCode.
        status_code: HTTP status the API answers with.
        details: Upstream diagnostic text, if any.
        request_id: Provider-assigned request id, if any.
        hint: Actionable advice for the caller, if any.
    """
    status_code = 500

    def __init__(
        self,
        message: str,
        code: str = ErrorCode.INTERNAL_ERROR,
        details: Optional[str] = None,
        request_id: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        self.message = message
        self.code = code
        self.details = details
        self.request_id = request_id
        self.hint = hint
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON error payload."""
        result: Dict[str, Any] = {
            "ok": False,
            "error": self.message,
            "code": self.code,
        }
        if self.details:
            result["details"] = self.details
        if self.request_id:
            result["requestId"] = self.request_id
        if self.hint:
            result["hint"] = self.hint
        return result


class ConfigurationMissingError(RelayError):
    """Subscription key or region is not configured."""
    status_code = 500

    def __init__(self, missing: Optional[list] = None):
        details = f"missing: {', '.join(missing)}" if missing else None
        super().__init__(
            "Missing speech provider configuration",
            ErrorCode.CONFIGURATION_MISSING,
            details=details,
        )
        self.missing = list(missing or [])


class InvalidBodyError(RelayError):
    """Request body is not a JSON object."""
    status_code = 400

    def __init__(self, details: Optional[str] = None):
        super().__init__("Invalid request body", ErrorCode.INVALID_BODY, details=details)


class EmptyTextError(RelayError):
    """Text is missing or whitespace-only."""
    status_code = 400

    def __init__(self):
        super().__init__("Empty text", ErrorCode.EMPTY_TEXT)


class TokenAcquisitionError(RelayError):
    """Every token endpoint candidate refused to issue a token."""
    status_code = 502

    def __init__(self, status: Optional[int], reason: str, attempts: int = 1):
        label = status if status is not None else "unreachable"
        super().__init__(
            f"Token error: {label}",
            ErrorCode.TOKEN_ACQUISITION_FAILED,
            details=reason,
        )
        self.upstream_status = status
        self.attempts = attempts


class SynthesisFailedError(RelayError):
    """The synthesis endpoint answered with a non-success status."""
    status_code = 502

    def __init__(
        self,
        status: Optional[int],
        body: str = "",
        request_id: Optional[str] = None,
    ):
        label = status if status is not None else "unreachable"
        super().__init__(
            f"TTS error: {label}",
            ErrorCode.SYNTHESIS_FAILED,
            details=body,
            request_id=request_id,
            hint=BAD_REQUEST_HINT if status == 400 else None,
        )
        self.upstream_status = status


class EmptyAudioError(RelayError):
    """The provider reported success but sent no audio."""
    status_code = 502

    def __init__(self, request_id: Optional[str] = None):
        super().__init__(
            "Empty audio from provider",
            ErrorCode.EMPTY_AUDIO,
            request_id=request_id,
        )


class InternalError(RelayError):
    """Wraps an unexpected exception at the API boundary."""
    status_code = 500

    def __init__(self, details: Optional[str] = None):
        super().__init__("Internal server error", ErrorCode.INTERNAL_ERROR, details=details)
