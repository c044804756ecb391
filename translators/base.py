"""Base translator class and the translate result type."""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

import aiohttp

from config.constants import SYSTEM_PROMPT_TEMPLATE
from utils.validators import is_throttling_error, parse_retry_after

logger = logging.getLogger(__name__)


@dataclass
class TranslationFailure:
    """A classified backend failure.

    `throttled` marks rate-limit / quota signals; `retry_after` is the
    provider-suggested wait in seconds, when it sent one.
    """
    message: str
    throttled: bool = False
    retry_after: Optional[float] = None
    status: Optional[int] = None


TranslationOutcome = Union[str, TranslationFailure]


@dataclass
class HttpReply:
    """Raw HTTP response captured before the session context closes."""
    status: int
    data: Any = None
    text: str = ''
    headers: Dict[str, str] = field(default_factory=dict)


class BaseTranslator(ABC):
    """Base class for all translation services."""

    name = 'base'

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        concurrency: int = 10,
        timeout: float = 60.0,
    ):
        self.api_key = api_key
        self.model = model
        self.concurrency = concurrency
        self.timeout = timeout
        self.http_session: Optional[aiohttp.ClientSession] = None

    async def _init_http_session(self):
        """Initialize HTTP session for async requests."""
        if self.http_session is None:
            connector = aiohttp.TCPConnector(
                limit=self.concurrency,
                limit_per_host=self.concurrency
            )
            timeout = aiohttp.ClientTimeout(total=self.timeout, connect=10)
            self.http_session = aiohttp.ClientSession(
                connector=connector,
                timeout=timeout
            )
        return self.http_session

    async def _close_http_session(self):
        """Close HTTP session."""
        if self.http_session:
            await self.http_session.close()
            self.http_session = None

    async def initialize(self, target_language: Optional[str] = None):
        """Initialize the translator (open sessions, check configuration for the target language)."""
        await self._init_http_session()

    @abstractmethod
    async def translate(
        self,
        text: str,
        target_language: str,
        context: str = "",
    ) -> TranslationOutcome:
        """Translate one string; return the text or a TranslationFailure. Never raises."""
        pass

    async def cleanup(self):
        """Cleanup resources."""
        await self._close_http_session()


class LLMTranslator(BaseTranslator):
    """
    Shared request/response plumbing for chat-style LLM HTTP backends.

    Subclasses provide the endpoint, headers, payload and text extraction;
    they may refine `_is_throttled` with provider-specific signals.
    """

    def _build_prompts(self, text: str, target_language: str, context: str = ""):
        """Return (system_prompt, user_prompt)."""
        system_prompt = SYSTEM_PROMPT_TEMPLATE.format(target_language=target_language)
        if context:
            user_prompt = f'Context: {context}\n\nTranslate this text: "{text}"'
        else:
            user_prompt = f'Translate this text: "{text}"'
        return system_prompt, user_prompt

    @abstractmethod
    def _endpoint(self) -> str:
        pass

    @abstractmethod
    def _headers(self) -> Dict[str, str]:
        pass

    @abstractmethod
    def _build_payload(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        pass

    @abstractmethod
    def _extract_text(self, data: Any) -> Optional[str]:
        pass

    def _error_message(self, reply: HttpReply) -> str:
        """Best-effort error message from an error body."""
        if isinstance(reply.data, dict):
            error = reply.data.get('error')
            if isinstance(error, dict) and error.get('message'):
                return str(error['message'])
            if isinstance(error, str):
                return error
        return reply.text[:500] if reply.text else f"HTTP {reply.status}"

    def _is_throttled(self, reply: HttpReply, message: str) -> bool:
        """Status 429 or a throttling phrase; providers add their own signals."""
        return is_throttling_error(reply.status, message)

    def _classify_error(self, reply: HttpReply) -> TranslationFailure:
        """Turn a non-2xx reply into a classified failure."""
        message = self._error_message(reply)
        throttled = self._is_throttled(reply, message)
        return TranslationFailure(
            message=f"{self.name} API error ({reply.status}): {message}",
            throttled=throttled,
            retry_after=parse_retry_after(reply.headers.get('retry-after')) if throttled else None,
            status=reply.status,
        )

    async def _send(self, payload: Dict[str, Any]) -> HttpReply:
        """POST the payload and capture status, body and headers."""
        session = await self._init_http_session()
        async with session.post(self._endpoint(), json=payload, headers=self._headers()) as response:
            text = await response.text()
            try:
                data = json.loads(text) if text else None
            except json.JSONDecodeError:
                data = None
            headers = {k.lower(): v for k, v in response.headers.items()}
            return HttpReply(status=response.status, data=data, text=text, headers=headers)

    async def translate(
        self,
        text: str,
        target_language: str,
        context: str = "",
    ) -> TranslationOutcome:
        system_prompt, user_prompt = self._build_prompts(text, target_language, context)
        payload = self._build_payload(system_prompt, user_prompt)

        try:
            reply = await self._send(payload)
        except asyncio.TimeoutError:
            return TranslationFailure(f"{self.name} request timed out")
        except aiohttp.ClientError as e:
            return TranslationFailure(f"{self.name} request failed: {e}")

        if not 200 <= reply.status < 300:
            failure = self._classify_error(reply)
            logger.debug(f"{self.name} translation error: {failure.message}")
            return failure

        if reply.data is None:
            return TranslationFailure(f"Malformed response body from {self.name}", status=reply.status)

        translated = self._extract_text(reply.data)
        if not translated or not translated.strip():
            return TranslationFailure(f"Empty response from {self.name}", status=reply.status)
        return translated.strip()
