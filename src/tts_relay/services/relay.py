"""
Provider Relay - token exchange and synthesis against Azure Speech.

Architecture:
    SynthesisRequest + ProviderCredential
        -> token exchange (candidate endpoints, first success wins)
        -> SSML synthesis call with the bearer token
        -> AudioResult (non-empty MP3 bytes)

State machine (per call):
    Start -> TokenPending -> TokenAcquired -> SynthesisPending -> Succeeded
                         |                                   +-> SynthesisFailed
                         +-> TokenAcquisitionFailed          +-> EmptyAudio

Retries:
    Only the token stage moves on to another endpoint, and only once per
    candidate. Nothing is retried with backoff; provider outages surface to
    the caller immediately.

Each synthesize() call opens and closes its own httpx.Client. Nothing is
shared between calls except the endpoint catalogue and the optional
transport used by tests.

Example:
    >>> relay = ProviderRelay(ProviderEndpoints())
    >>> result = relay.synthesize(
    ...     sanitize({"text": "Hello"}),
    ...     ProviderCredential(subscription_key=key, region="eastus"),
    ... )
    >>> len(result.audio) > 0
    True
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

import httpx

from tts_relay.core.config import Defaults, ProviderConfig, RelayConfig
from tts_relay.core.logging import debug, fail, get_logger, mask_secret, success, verbose, warn
from tts_relay.core.metrics import metrics
from tts_relay.services.endpoints import REQUEST_ID_HEADERS, ProviderEndpoints
from tts_relay.services.errors import (
    ConfigurationMissingError,
    EmptyAudioError,
    SynthesisFailedError,
    TokenAcquisitionError,
)
from tts_relay.services.sanitizer import SynthesisRequest
from tts_relay.services.ssml import build_ssml
from tts_relay.utils.timeit import timeit

_LOG = get_logger("tts-relay.relay")

AUDIO_CONTENT_TYPE = "audio/mpeg"
SSML_CONTENT_TYPE = "application/ssml+xml"


@dataclass(frozen=True)
class ProviderCredential:
    """
    Long-lived provider credential.

    The key is excluded from repr() so a credential can never end up in a
    log line or traceback by accident.
    """
    subscription_key: str = field(repr=False)
    region: str

    @classmethod
    def from_config(cls, config: ProviderConfig) -> "ProviderCredential":
        """
        Build a credential from provider configuration.

        Raises:
            ConfigurationMissingError: If the key or region is absent.
        """
        missing = []
        if not config.subscription_key:
            missing.append("subscription_key")
        if not config.region:
            missing.append("region")
        if missing:
            raise ConfigurationMissingError(missing)
        return cls(subscription_key=config.subscription_key, region=config.region)


@dataclass
class AudioResult:
    """
    Successful synthesis output.

    Attributes:
        audio: MP3 bytes, never empty.
        output_format: Provider encoding profile that produced the audio.
        upstream_request_id: Provider request id, when one was returned.
        content_type: Always audio/mpeg.
    """
    audio: bytes
    output_format: str
    upstream_request_id: Optional[str] = None
    content_type: str = AUDIO_CONTENT_TYPE


def upstream_request_id(headers: Mapping[str, str]) -> Optional[str]:
    """First provider request id found among the known header names."""
    for name in REQUEST_ID_HEADERS:
        value = headers.get(name)
        if value:
            return value
    return None


def _read_error_body(response: httpx.Response) -> str:
    # A failed read must not hide the status that got us here
    try:
        response.read()
        return response.text
    except (httpx.HTTPError, httpx.StreamError):
        return ""


class ProviderRelay:
    """
    Two-step relay to the speech provider.

    Args:
        endpoints: Token and synthesis URL templates.
        timeout_s: Transport timeout for each upstream call.
        user_agent: User-Agent sent on the synthesis call.
        default_language: xml:lang for voices without a locale prefix.
        transport: Optional httpx transport (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        endpoints: Optional[ProviderEndpoints] = None,
        timeout_s: float = Defaults.PROVIDER_TIMEOUT_S,
        user_agent: str = Defaults.PROVIDER_USER_AGENT,
        default_language: str = Defaults.SYNTHESIS_DEFAULT_LANGUAGE,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._endpoints = endpoints or ProviderEndpoints()
        self._timeout_s = timeout_s
        self._user_agent = user_agent
        self._default_language = default_language
        self._transport = transport

    @classmethod
    def from_config(cls, config: RelayConfig, transport: Optional[httpx.BaseTransport] = None) -> "ProviderRelay":
        return cls(
            endpoints=ProviderEndpoints.from_config(config.provider),
            timeout_s=config.provider.timeout_s,
            user_agent=config.provider.user_agent,
            default_language=config.synthesis.default_language,
            transport=transport,
        )

    @property
    def endpoints(self) -> ProviderEndpoints:
        return self._endpoints

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self._timeout_s, transport=self._transport)

    # =========================================================================
    # Public API
    # =========================================================================

    def synthesize(self, request: SynthesisRequest, credential: ProviderCredential) -> AudioResult:
        """
        Synthesize ``request`` with the provider.

        Returns:
            AudioResult with non-empty MP3 audio.

        Raises:
            TokenAcquisitionError: No token endpoint issued a token.
            SynthesisFailedError: The synthesis call failed or was unreachable.
            EmptyAudioError: The provider returned success with no audio.
        """
        with self._client() as client:
            with timeit("token") as t_token:
                token = self.fetch_token(client, credential)
            verbose(_LOG, "token_acquired", region=credential.region, seconds=t_token.seconds)

            with timeit("synthesis") as t_synth:
                result = self._synthesize(client, request, credential, token)
            success(
                _LOG, "synthesis_done",
                bytes=len(result.audio),
                format=result.output_format,
                upstream_id=result.upstream_request_id,
                seconds=t_synth.seconds,
            )
            return result

    def fetch_token(self, client: httpx.Client, credential: ProviderCredential) -> str:
        """
        Exchange the subscription key for a bearer token.

        Tries each candidate endpoint once, in order, and returns the first
        token issued.

        Raises:
            TokenAcquisitionError: With the last status and reason seen.
        """
        candidates = self._endpoints.token_candidates(credential.region)
        last_status: Optional[int] = None
        last_reason = "no token endpoints configured"
        headers = {
            "Ocp-Apim-Subscription-Key": credential.subscription_key,
            "Content-Type": "application/x-www-form-urlencoded",
        }

        for attempt, url in enumerate(candidates, start=1):
            verbose(
                _LOG, "token_request",
                url=url,
                attempt=attempt,
                of=len(candidates),
                key=mask_secret(credential.subscription_key),
            )
            try:
                response = client.post(url, headers=headers, content=b"")
            except httpx.TransportError as e:
                metrics.record_upstream("token", None)
                last_status, last_reason = None, f"{type(e).__name__}: {e}"
                warn(_LOG, "token_endpoint_unreachable", url=url, error=last_reason)
                continue

            metrics.record_upstream("token", response.status_code)
            if response.is_success:
                token = response.text.strip()
                if token:
                    return token
                last_status, last_reason = response.status_code, f"{response.status_code}: empty token"
            else:
                last_status, last_reason = response.status_code, f"{response.status_code}: {response.text}"
            warn(_LOG, "token_endpoint_rejected", url=url, status=response.status_code)

        fail(_LOG, "token_failed", status=last_status, attempts=len(candidates))
        raise TokenAcquisitionError(last_status, last_reason, attempts=len(candidates))

    # =========================================================================
    # Internals
    # =========================================================================

    def _synthesize(
        self,
        client: httpx.Client,
        request: SynthesisRequest,
        credential: ProviderCredential,
        token: str,
    ) -> AudioResult:
        ssml = build_ssml(request, self._default_language)
        debug(_LOG, "ssml_built", ssml=ssml)

        url = self._endpoints.synthesis_endpoint(credential.region)
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": SSML_CONTENT_TYPE,
            "X-Microsoft-OutputFormat": request.output_format,
            "User-Agent": self._user_agent,
        }
        verbose(_LOG, "synthesis_request", url=url, voice=request.voice, format=request.output_format)

        status: Optional[int] = None
        request_id: Optional[str] = None
        try:
            with client.stream("POST", url, headers=headers, content=ssml.encode("utf-8")) as response:
                status = response.status_code
                metrics.record_upstream("synthesis", status)
                request_id = upstream_request_id(response.headers)

                if not response.is_success:
                    body = _read_error_body(response)
                    fail(_LOG, "synthesis_failed", status=status, upstream_id=request_id)
                    raise SynthesisFailedError(status, body, request_id)

                audio = response.read()
        except httpx.TransportError as e:
            reason = f"{type(e).__name__}: {e}"
            if status is None:
                metrics.record_upstream("synthesis", None)
                fail(_LOG, "synthesis_unreachable", url=url, error=type(e).__name__)
                raise SynthesisFailedError(None, reason) from e
            # Headers arrived but the audio body did not
            fail(_LOG, "synthesis_read_failed", status=status, upstream_id=request_id, error=type(e).__name__)
            raise SynthesisFailedError(status, reason, request_id) from e

        if not audio:
            fail(_LOG, "synthesis_empty_audio", status=status, upstream_id=request_id)
            raise EmptyAudioError(request_id)

        return AudioResult(
            audio=audio,
            output_format=request.output_format,
            upstream_request_id=request_id,
        )
