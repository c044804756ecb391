"""OpenAI chat completions translation service."""

import logging
import os
from typing import Any, Dict, Optional

from config.constants import API_KEY_ENV_VARS, DEFAULT_MODELS
from config.settings import ConfigurationError
from .base import HttpReply, LLMTranslator

logger = logging.getLogger(__name__)

RATE_LIMIT_ERROR_TYPES = ('rate_limit_exceeded', 'rate_limit_error')


class OpenAITranslatorService(LLMTranslator):
    """OpenAI translation service using the Chat Completions API over aiohttp."""

    name = 'OpenAI'

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: str = "https://api.openai.com/v1",
        concurrency: int = 10,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ):
        super().__init__(api_key, model or DEFAULT_MODELS['openai'], concurrency)
        self.base_url = base_url.rstrip('/')
        self.temperature = temperature
        self.max_tokens = max_tokens

        # Use API key from env if not provided
        self.api_key = api_key or os.environ.get(API_KEY_ENV_VARS['openai'])
        if not self.api_key:
            raise ConfigurationError(
                "OpenAI API key required. Pass --api_key or set OPENAI_API_KEY."
            )

    async def initialize(self, target_language: Optional[str] = None):
        """Initialize OpenAI translator."""
        await self._init_http_session()
        logger.info(f"OpenAI translator initialized: model={self.model}, base_url={self.base_url}")

    def _endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _build_payload(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    def _extract_text(self, data: Any) -> Optional[str]:
        try:
            return data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return None

    def _is_throttled(self, reply: HttpReply, message: str) -> bool:
        error = reply.data.get('error') if isinstance(reply.data, dict) else None
        if isinstance(error, dict) and error.get('type') in RATE_LIMIT_ERROR_TYPES:
            return True
        return super()._is_throttled(reply, message)
