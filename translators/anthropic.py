"""Anthropic Messages API translation service."""

import logging
import os
from typing import Any, Dict, Optional

from config.constants import API_KEY_ENV_VARS, DEFAULT_MODELS
from config.settings import ConfigurationError
from .base import HttpReply, LLMTranslator

logger = logging.getLogger(__name__)

ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
# Anthropic answers 529 when the API is overloaded
OVERLOADED_STATUS = 529


class AnthropicTranslatorService(LLMTranslator):
    """Anthropic (Claude) translation service."""

    name = 'Anthropic'

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        api_url: str = ANTHROPIC_API_URL,
        concurrency: int = 5,
        max_tokens: int = 1000,
    ):
        super().__init__(api_key, model or DEFAULT_MODELS['anthropic'], concurrency)
        self.api_url = api_url
        self.max_tokens = max_tokens

        self.api_key = api_key or os.environ.get(API_KEY_ENV_VARS['anthropic'])
        if not self.api_key:
            raise ConfigurationError(
                "Anthropic API key required. Pass --api_key or set ANTHROPIC_API_KEY."
            )

    async def initialize(self, target_language: Optional[str] = None):
        """Initialize Anthropic translator."""
        await self._init_http_session()
        logger.info(f"Anthropic translator initialized: model={self.model}")

    def _endpoint(self) -> str:
        return self.api_url

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }

    def _build_payload(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_prompt}],
        }

    def _extract_text(self, data: Any) -> Optional[str]:
        try:
            return data["content"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return None

    def _is_throttled(self, reply: HttpReply, message: str) -> bool:
        if reply.status == OVERLOADED_STATUS:
            return True
        return super()._is_throttled(reply, message)
