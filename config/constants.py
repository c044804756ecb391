"""Constants and configuration values."""

# Per-provider default rate limits (conservative for most account tiers)
DEFAULT_RATE_LIMITS = {
    'openai': {
        'requests_per_minute': 3500,
        'requests_per_second': 60,
        'max_concurrent_requests': 10,
    },
    'anthropic': {
        'requests_per_minute': 4000,
        'requests_per_second': 50,
        'max_concurrent_requests': 5,
    },
    'gemini': {
        'requests_per_minute': 1500,
        'requests_per_second': 15,
        'max_concurrent_requests': 5,
    },
}

GENERIC_RATE_LIMITS = {
    'requests_per_minute': 1000,
    'requests_per_second': 10,
    'max_concurrent_requests': 3,
}

DEFAULT_MODELS = {
    'openai': 'gpt-4.1-nano',
    'anthropic': 'claude-3-haiku-20240307',
    'gemini': 'gemini-2.0-flash',
}

API_KEY_ENV_VARS = {
    'openai': 'OPENAI_API_KEY',
    'anthropic': 'ANTHROPIC_API_KEY',
    'gemini': 'GEMINI_API_KEY',
}

SUPPORTED_PROVIDERS = ('openai', 'anthropic', 'gemini', 'google')

DEFAULT_INPUT_FILE = 'web.po'
DEFAULT_OUTPUT_FILE = 'web_translated.po'
DEFAULT_TARGET_LANGUAGE = 'Portuguese (Brazil)'
DEFAULT_BATCH_SIZE = 10
DEFAULT_DELAY = 1.0
DEFAULT_MAX_RETRIES = 3

# Adaptive rate limiting (seconds)
MAX_ADAPTIVE_DELAY = 30.0
CONCURRENCY_SHRINK_FACTOR = 0.8
DELAY_DECAY_FACTOR = 0.95
SLOT_POLL_INTERVAL = 0.1

# Per-entry retry backoff (seconds)
THROTTLE_BACKOFF_BASE = 5.0
GENERIC_BACKOFF_BASE = 2.0

THROTTLING_PHRASES = (
    'rate limit',
    'too many requests',
    'quota exceeded',
    'throttled',
)

SYSTEM_PROMPT_TEMPLATE = """You are a professional translator specializing in software localization.
Your task is to translate user interface strings while preserving:
- HTML tags and markup
- Variable placeholders like {{0}}, {{1}}, etc.
- ICU message format syntax
- Technical terms and proper nouns when appropriate

Target language: {target_language}

Important guidelines:
- Keep the same tone and style as the original
- Maintain consistency with software terminology
- Don't translate variable names, function names, or technical identifiers
- Preserve line breaks and formatting
- If the text contains HTML, keep all tags intact
- For plural forms, maintain the ICU MessageFormat syntax

Only return the translated text, nothing else."""
