"""Google Gemini generateContent translation service."""

import logging
import os
from typing import Any, Dict, Optional

from config.constants import API_KEY_ENV_VARS, DEFAULT_MODELS
from config.settings import ConfigurationError
from .base import HttpReply, LLMTranslator

logger = logging.getLogger(__name__)

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"


class GeminiTranslatorService(LLMTranslator):
    """Gemini translation service. System and user prompts go in a single part."""

    name = 'Gemini'

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        api_base: str = GEMINI_API_BASE,
        concurrency: int = 5,
        temperature: float = 0.3,
        max_output_tokens: int = 1000,
    ):
        super().__init__(api_key, model or DEFAULT_MODELS['gemini'], concurrency)
        self.api_base = api_base.rstrip('/')
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens

        self.api_key = api_key or os.environ.get(API_KEY_ENV_VARS['gemini'])
        if not self.api_key:
            raise ConfigurationError(
                "Gemini API key required. Pass --api_key or set GEMINI_API_KEY."
            )

    async def initialize(self, target_language: Optional[str] = None):
        """Initialize Gemini translator."""
        await self._init_http_session()
        logger.info(f"Gemini translator initialized: model={self.model}")

    def _endpoint(self) -> str:
        return f"{self.api_base}/{self.model}:generateContent"

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "X-goog-api-key": self.api_key,
        }

    def _build_payload(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        return {
            "contents": [
                {"parts": [{"text": f"{system_prompt}\n\n{user_prompt}"}]}
            ],
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_output_tokens,
            },
        }

    def _extract_text(self, data: Any) -> Optional[str]:
        try:
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return None

    def _is_throttled(self, reply: HttpReply, message: str) -> bool:
        error = reply.data.get('error') if isinstance(reply.data, dict) else None
        if isinstance(error, dict) and error.get('status') == 'RESOURCE_EXHAUSTED':
            return True
        return super()._is_throttled(reply, message)
