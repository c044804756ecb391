"""Run configuration for catalog translation."""

from dataclasses import dataclass
from typing import Optional

from .constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_DELAY,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TARGET_LANGUAGE,
    SUPPORTED_PROVIDERS,
)


class ConfigurationError(Exception):
    """Fatal configuration problem (unsupported provider, missing key or input file).

    Raised before any entry is processed; never retried.
    """


@dataclass
class TranslationConfig:
    """Settings for one translation run."""
    provider: str = 'openai'
    api_key: Optional[str] = None
    model: Optional[str] = None
    target_language: str = DEFAULT_TARGET_LANGUAGE
    batch_size: int = DEFAULT_BATCH_SIZE
    delay: float = DEFAULT_DELAY  # base delay between requests, seconds
    max_retries: int = DEFAULT_MAX_RETRIES

    # Explicit rate limit overrides (None means use provider defaults)
    requests_per_minute: Optional[int] = None
    requests_per_second: Optional[int] = None
    max_concurrent_requests: Optional[int] = None
    adaptive_rate_limit: bool = True

    def __post_init__(self):
        self.provider = self.provider.lower()

    def validate(self):
        """Raise ConfigurationError if the settings cannot drive a run."""
        if self.provider not in SUPPORTED_PROVIDERS:
            raise ConfigurationError(
                f"Unsupported provider: {self.provider} "
                f"(expected one of: {', '.join(SUPPORTED_PROVIDERS)})"
            )
        if not self.target_language:
            raise ConfigurationError("Target language must not be empty")
        if self.batch_size < 1:
            raise ConfigurationError(f"Batch size must be positive, got {self.batch_size}")
        if self.max_retries < 1:
            raise ConfigurationError(f"Max retries must be positive, got {self.max_retries}")
        if self.delay < 0:
            raise ConfigurationError(f"Delay must not be negative, got {self.delay}")
        for name in ('requests_per_minute', 'requests_per_second', 'max_concurrent_requests'):
            value = getattr(self, name)
            if value is not None and value < 1:
                raise ConfigurationError(f"{name} must be positive, got {value}")
