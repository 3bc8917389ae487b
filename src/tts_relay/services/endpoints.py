"""
Provider endpoint catalogue.

Token endpoints are an ordered list of URL templates; the relay walks it
front to back and stops at the first endpoint that issues a token. Adding a
region-specific host is a configuration change, not a code change.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from tts_relay.core.config import Defaults, ProviderConfig

# Header names the provider has used for its request id, in lookup order
REQUEST_ID_HEADERS: Tuple[str, ...] = (
    "X-RequestId",
    "apim-request-id",
    "x-ms-request-id",
    "X-Request-Id",
)


@dataclass(frozen=True)
class ProviderEndpoints:
    """URL templates for the provider, formatted with ``{region}``."""
    token_urls: Tuple[str, ...] = field(default=Defaults.PROVIDER_TOKEN_URLS)
    synthesis_url: str = Defaults.PROVIDER_SYNTHESIS_URL

    @classmethod
    def from_config(cls, config: ProviderConfig) -> "ProviderEndpoints":
        return cls(token_urls=tuple(config.token_urls), synthesis_url=config.synthesis_url)

    def token_candidates(self, region: str) -> List[str]:
        """Token endpoint URLs for ``region``, in the order to try them."""
        return [template.format(region=region) for template in self.token_urls]

    def synthesis_endpoint(self, region: str) -> str:
        return self.synthesis_url.format(region=region)
