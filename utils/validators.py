"""Classification helpers for backend failures."""

import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Iterable, Optional

from config.constants import THROTTLING_PHRASES

logger = logging.getLogger(__name__)

THROTTLING_STATUS = 429


def is_throttling_message(message: str, phrases: Iterable[str] = THROTTLING_PHRASES) -> bool:
    """Check if an error message reads like a rate limit / quota signal."""
    if not isinstance(message, str) or not message:
        return False
    lowered = message.lower()
    return any(phrase in lowered for phrase in phrases)


def is_throttling_error(status: Optional[int] = None, message: str = "") -> bool:
    """Status 429 or a throttling phrase in the message."""
    if status == THROTTLING_STATUS:
        return True
    return is_throttling_message(message)


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Convert a Retry-After header (delta seconds or HTTP date) to seconds."""
    if value is None:
        return None
    value = str(value).strip()
    if not value:
        return None

    try:
        seconds = float(value)
    except ValueError:
        seconds = None
    if seconds is not None:
        return max(0.0, seconds)

    try:
        retry_at = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        logger.debug(f"Unparseable Retry-After header: {value!r}")
        return None
    if retry_at.tzinfo is None:
        retry_at = retry_at.replace(tzinfo=timezone.utc)
    return max(0.0, (retry_at - datetime.now(timezone.utc)).total_seconds())
