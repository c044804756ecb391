"""Translation service modules."""

from typing import Optional

from config.constants import SUPPORTED_PROVIDERS
from config.settings import ConfigurationError
from .base import BaseTranslator, LLMTranslator, TranslationFailure, TranslationOutcome
from .openai import OpenAITranslatorService
from .anthropic import AnthropicTranslatorService
from .gemini import GeminiTranslatorService
from .google import GoogleTranslatorService

TRANSLATOR_CLASSES = {
    'openai': OpenAITranslatorService,
    'anthropic': AnthropicTranslatorService,
    'gemini': GeminiTranslatorService,
    'google': GoogleTranslatorService,
}


def create_translator(
    provider: str,
    api_key: Optional[str] = None,
    model: Optional[str] = None,
) -> BaseTranslator:
    """Create the translator service for a provider name."""
    service = (provider or '').lower()
    translator_class = TRANSLATOR_CLASSES.get(service)
    if translator_class is None:
        raise ConfigurationError(
            f"Unsupported provider: {provider}. "
            f"Supported providers: {', '.join(SUPPORTED_PROVIDERS)}"
        )
    return translator_class(api_key=api_key, model=model)


__all__ = [
    'BaseTranslator',
    'LLMTranslator',
    'TranslationFailure',
    'TranslationOutcome',
    'OpenAITranslatorService',
    'AnthropicTranslatorService',
    'GeminiTranslatorService',
    'GoogleTranslatorService',
    'create_translator',
]
