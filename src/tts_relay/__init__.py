"""
tts-relay: Sanitizing relay for cloud text-to-speech.

A small HTTP service that accepts free-form synthesis requests, normalizes
them into a safe parameter set, and forwards them to Azure's speech service
using a short-lived bearer token. The MP3 audio returned by the provider is
streamed back to the caller unchanged.

Request flow:
    caller JSON -> sanitize() -> SSML -> token exchange -> synthesis -> MP3

Example Usage:
    >>> from tts_relay.services import ProviderRelay, ProviderCredential, sanitize
    >>> from tts_relay.services.endpoints import ProviderEndpoints
    >>>
    >>> relay = ProviderRelay(ProviderEndpoints())
    >>> request = sanitize({"text": "Hello there", "rate": 1.2})
    >>> credential = ProviderCredential(subscription_key="...", region="eastus")
    >>> result = relay.synthesize(request, credential)
    >>> with open("hello.mp3", "wb") as f:
    ...     f.write(result.audio)
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
