"""
Configuration Management for tts-relay.

This module provides centralized configuration handling with:
    - Default values (Defaults class)
    - Dataclass-based configuration sections
    - YAML file loading with environment variable overrides
    - Validation with meaningful error messages

Configuration Hierarchy (highest priority first):
    1. Environment variables (AZURE_SPEECH_KEY, AZURE_SPEECH_REGION, ...)
    2. YAML config file (config/settings.yaml)
    3. Defaults class values

Example settings.yaml:
    provider:
      region: westeurope
      timeout_s: 20
      token_urls:
        - https://{region}.api.cognitive.microsoft.com/sts/v1.0/issueToken

    synthesis:
      default_voice: en-GB-SoniaNeural

    logging:
      level: 3  # VERBOSE

The subscription key should come from the environment; it may be placed in
the YAML file for local development only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import os
import yaml


class ConfigValidationError(Exception):
    """Raised when a configuration value is out of bounds or malformed."""
    pass


# Provider encoding profiles a caller may select. All of them are MP3 so the
# relay can always answer with audio/mpeg.
OUTPUT_FORMATS: Tuple[str, ...] = (
    "audio-16khz-32kbitrate-mono-mp3",
    "audio-16khz-64kbitrate-mono-mp3",
    "audio-16khz-128kbitrate-mono-mp3",
    "audio-24khz-48kbitrate-mono-mp3",
    "audio-24khz-96kbitrate-mono-mp3",
    "audio-24khz-160kbitrate-mono-mp3",
    "audio-48khz-96kbitrate-mono-mp3",
    "audio-48khz-192kbitrate-mono-mp3",
)


class Defaults:
    """
    Centralized default configuration values.

    Sections:
        - Provider: Upstream endpoints and transport
        - Synthesis: Request defaults applied by the sanitizer
        - Logging: Text preview length
    """

    # ─────────────────────────────────────────────────────────────────────────
    # Provider
    # ─────────────────────────────────────────────────────────────────────────
    PROVIDER_TOKEN_URLS = (
        "https://{region}.api.cognitive.microsoft.com/sts/v1.0/issueToken",
        "https://{region}.sts.speech.microsoft.com/sts/v1.0/issueToken",
    )
    PROVIDER_SYNTHESIS_URL = "https://{region}.tts.speech.microsoft.com/cognitiveservices/v1"
    PROVIDER_TIMEOUT_S = 30.0
    PROVIDER_USER_AGENT = "tts-relay"

    # ─────────────────────────────────────────────────────────────────────────
    # Synthesis
    # ─────────────────────────────────────────────────────────────────────────
    SYNTHESIS_DEFAULT_VOICE = "en-US-JennyNeural"
    SYNTHESIS_DEFAULT_FORMAT = "audio-16khz-128kbitrate-mono-mp3"
    SYNTHESIS_DEFAULT_LANGUAGE = "en-US"

    # ─────────────────────────────────────────────────────────────────────────
    # Logging
    # ─────────────────────────────────────────────────────────────────────────
    LOGGING_TEXT_PREVIEW_CHARS = 80


@dataclass
class ProviderConfig:
    """
    Upstream provider configuration.

    URL templates are formatted with ``region``. Token URLs are tried in
    order until one of them issues a token.
    """
    region: Optional[str] = None
    subscription_key: Optional[str] = None
    token_urls: List[str] = field(default_factory=lambda: list(Defaults.PROVIDER_TOKEN_URLS))
    synthesis_url: str = Defaults.PROVIDER_SYNTHESIS_URL
    timeout_s: float = Defaults.PROVIDER_TIMEOUT_S
    user_agent: str = Defaults.PROVIDER_USER_AGENT


@dataclass
class SynthesisConfig:
    """Defaults substituted by the sanitizer for omitted or invalid fields."""
    default_voice: str = Defaults.SYNTHESIS_DEFAULT_VOICE
    default_format: str = Defaults.SYNTHESIS_DEFAULT_FORMAT
    default_language: str = Defaults.SYNTHESIS_DEFAULT_LANGUAGE


@dataclass
class LoggingConfig:
    """
    Logging options the relay itself reads.

    The log level is owned by tts_relay.core.logging, which reads the same
    ``logging`` section through coerce_level().
    """
    text_preview_chars: int = Defaults.LOGGING_TEXT_PREVIEW_CHARS


@dataclass
class RelayConfig:
    """
    Validated configuration for the relay.

    Usage:
        settings = load_settings("config/settings.yaml")
        config = RelayConfig.from_settings(settings)
        print(config.provider.timeout_s)
    """
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    synthesis: SynthesisConfig = field(default_factory=SynthesisConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "RelayConfig":
        """
        Create RelayConfig from Settings with validation.

        Raises:
            ConfigValidationError: If any value fails validation.
        """
        raw = settings.raw

        # ─────────────────────────────────────────────────────────────────────
        # Provider
        # ─────────────────────────────────────────────────────────────────────
        provider_raw = raw.get("provider", {}) or {}
        token_urls = provider_raw.get("token_urls", list(Defaults.PROVIDER_TOKEN_URLS))
        if isinstance(token_urls, str):
            token_urls = [token_urls]
        provider = ProviderConfig(
            region=_optional_str(provider_raw.get("region")),
            subscription_key=_optional_str(provider_raw.get("subscription_key")),
            token_urls=[str(u) for u in token_urls],
            synthesis_url=str(provider_raw.get("synthesis_url", Defaults.PROVIDER_SYNTHESIS_URL)),
            timeout_s=float(provider_raw.get("timeout_s", Defaults.PROVIDER_TIMEOUT_S)),
            user_agent=str(provider_raw.get("user_agent", Defaults.PROVIDER_USER_AGENT)),
        )
        if not provider.token_urls:
            raise ConfigValidationError("provider.token_urls must list at least one URL")
        for url in provider.token_urls + [provider.synthesis_url]:
            cls._validate_url_template(url)
        cls._validate_positive("provider.timeout_s", provider.timeout_s)

        # ─────────────────────────────────────────────────────────────────────
        # Synthesis
        # ─────────────────────────────────────────────────────────────────────
        synthesis_raw = raw.get("synthesis", {}) or {}
        synthesis = SynthesisConfig(
            default_voice=str(synthesis_raw.get("default_voice", Defaults.SYNTHESIS_DEFAULT_VOICE)).strip(),
            default_format=str(synthesis_raw.get("default_format", Defaults.SYNTHESIS_DEFAULT_FORMAT)),
            default_language=str(synthesis_raw.get("default_language", Defaults.SYNTHESIS_DEFAULT_LANGUAGE)),
        )
        if not synthesis.default_voice:
            raise ConfigValidationError("synthesis.default_voice must not be empty")
        if synthesis.default_format not in OUTPUT_FORMATS:
            raise ConfigValidationError(
                f"synthesis.default_format must be one of {', '.join(OUTPUT_FORMATS)}, "
                f"got {synthesis.default_format}"
            )

        # ─────────────────────────────────────────────────────────────────────
        # Logging
        # ─────────────────────────────────────────────────────────────────────
        logging_raw = raw.get("logging", {}) or {}
        logging_cfg = LoggingConfig(
            text_preview_chars=int(logging_raw.get("text_preview_chars", Defaults.LOGGING_TEXT_PREVIEW_CHARS)),
        )
        cls._validate_non_negative("logging.text_preview_chars", logging_cfg.text_preview_chars)

        return cls(provider=provider, synthesis=synthesis, logging=logging_cfg)

    @staticmethod
    def _validate_positive(name: str, value: int | float) -> None:
        if value <= 0:
            raise ConfigValidationError(f"{name} must be positive, got {value}")

    @staticmethod
    def _validate_non_negative(name: str, value: int | float) -> None:
        if value < 0:
            raise ConfigValidationError(f"{name} must be non-negative, got {value}")

    @staticmethod
    def _validate_url_template(url: str) -> None:
        if not url.startswith(("https://", "http://")):
            raise ConfigValidationError(f"provider URL must be http(s), got {url}")
        try:
            url.format(region="region")
        except (KeyError, IndexError, ValueError) as e:
            raise ConfigValidationError(f"provider URL template {url!r} is invalid: {e}") from e


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


@dataclass(frozen=True)
class Settings:
    """
    Immutable settings container loaded from YAML.

    This is the raw settings object before validation. Use
    get_relay_config() to get a validated RelayConfig.
    """
    raw: Dict[str, Any]

    @property
    def region(self) -> Optional[str]:
        """Provider region (e.g. ``eastus``), if configured."""
        return _optional_str((self.raw.get("provider") or {}).get("region"))

    @property
    def subscription_key(self) -> Optional[str]:
        """Provider subscription key, if configured."""
        return _optional_str((self.raw.get("provider") or {}).get("subscription_key"))

    def get_relay_config(self) -> RelayConfig:
        """
        Get validated RelayConfig from these settings.

        Raises:
            ConfigValidationError: If validation fails.
        """
        return RelayConfig.from_settings(self)


def apply_env_overrides(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply environment variable overrides to a raw settings dict in place.

    Environment variable overrides:
        - AZURE_SPEECH_KEY: provider.subscription_key
        - AZURE_SPEECH_REGION: provider.region
        - TTS_RELAY_TIMEOUT_S: provider.timeout_s
    """
    overrides = {
        "subscription_key": os.getenv("AZURE_SPEECH_KEY"),
        "region": os.getenv("AZURE_SPEECH_REGION"),
        "timeout_s": os.getenv("TTS_RELAY_TIMEOUT_S"),
    }
    overrides = {k: v for k, v in overrides.items() if v}
    if overrides:
        raw["provider"] = {**(raw.get("provider") or {}), **overrides}
    return raw


def load_settings(path: str = "config/settings.yaml", required: bool = True) -> Settings:
    """
    Load settings from a YAML configuration file plus environment overrides.

    Args:
        path: Path to the YAML configuration file.
        required: When False, a missing file yields environment-only settings.

    Returns:
        Settings object with loaded configuration.

    Raises:
        FileNotFoundError: If the settings file doesn't exist and is required.
    """
    p = Path(path)
    raw: Dict[str, Any] = {}
    if p.exists():
        with p.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    elif required:
        raise FileNotFoundError(f"settings file not found: {p.resolve()}")

    return Settings(raw=apply_env_overrides(raw))
