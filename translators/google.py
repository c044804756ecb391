"""Google Translate service via deep-translator (no API key required)."""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from deep_translator import GoogleTranslator
from deep_translator.exceptions import LanguageNotSupportedException, TooManyRequests

from config.settings import ConfigurationError
from .base import BaseTranslator, TranslationFailure, TranslationOutcome

logger = logging.getLogger(__name__)


class GoogleTranslatorService(BaseTranslator):
    """
    Google Translate service.

    Machine translation only: catalog comments are not used as context, and
    the target language must be a code or name Google understands
    (e.g. "pt", "portuguese").
    """

    name = 'Google'

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        source_lang: str = 'auto',
        concurrency: int = 10,
    ):
        super().__init__(api_key, model, concurrency)
        self.source_lang = source_lang
        self.executor = ThreadPoolExecutor(max_workers=concurrency)
        self.google_translator: Optional[GoogleTranslator] = None
        self._target_language: Optional[str] = None

    def _get_translator(self, target_language: str) -> GoogleTranslator:
        """Create (or reuse) the deep-translator client for a target language."""
        target = target_language.strip().lower()
        if self.google_translator is None or self._target_language != target:
            try:
                self.google_translator = GoogleTranslator(source=self.source_lang, target=target)
            except LanguageNotSupportedException as e:
                raise ConfigurationError(
                    f"Google Translate does not support target language '{target_language}'"
                ) from e
            self._target_language = target
        return self.google_translator

    async def initialize(self, target_language: Optional[str] = None):
        """Validate the target language up front so a bad one fails before any entry."""
        if target_language:
            self._get_translator(target_language)
        logger.info(f"Google translator initialized: concurrency={self.concurrency}")

    async def translate(
        self,
        text: str,
        target_language: str,
        context: str = "",
    ) -> TranslationOutcome:
        try:
            translator = self._get_translator(target_language)
        except ConfigurationError as e:
            return TranslationFailure(str(e))

        loop = asyncio.get_running_loop()
        try:
            translated = await loop.run_in_executor(self.executor, translator.translate, text)
        except TooManyRequests as e:
            return TranslationFailure(f"Google rate limit: {e}", throttled=True, status=429)
        except Exception as e:
            return TranslationFailure(f"Google translation failed: {e}")

        if not translated or not str(translated).strip():
            return TranslationFailure("Empty response from Google")
        return str(translated)

    async def cleanup(self):
        """Cleanup resources."""
        await super().cleanup()
        if self.executor:
            self.executor.shutdown(wait=False)
