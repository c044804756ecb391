import argparse
import asyncio
import logging
import sys

from config.constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_DELAY,
    DEFAULT_INPUT_FILE,
    DEFAULT_MAX_RETRIES,
    DEFAULT_OUTPUT_FILE,
    DEFAULT_TARGET_LANGUAGE,
    SUPPORTED_PROVIDERS,
)
from config.settings import ConfigurationError, TranslationConfig
from manager import TranslationManager

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Translate gettext .po catalogs with LLM providers")
    parser.add_argument("-i", "--input_file", default=DEFAULT_INPUT_FILE, help=f"Path to input .po file (default: {DEFAULT_INPUT_FILE})")
    parser.add_argument("-o", "--output_file", default=DEFAULT_OUTPUT_FILE, help=f"Path to output .po file (default: {DEFAULT_OUTPUT_FILE})")
    parser.add_argument("-p", "--provider", default="openai", help=f"Translation provider ({', '.join(SUPPORTED_PROVIDERS)})")
    parser.add_argument("-k", "--api_key", help="API key (falls back to OPENAI_API_KEY, ANTHROPIC_API_KEY or GEMINI_API_KEY)")
    parser.add_argument("-m", "--model", help="Model name (default depends on provider)")
    parser.add_argument("-l", "--language", default=DEFAULT_TARGET_LANGUAGE, help=f"Target language (default: {DEFAULT_TARGET_LANGUAGE})")
    parser.add_argument("-b", "--batch_size", type=int, default=DEFAULT_BATCH_SIZE, help=f"Entries per batch (default: {DEFAULT_BATCH_SIZE})")
    parser.add_argument("-d", "--delay", type=float, default=DEFAULT_DELAY, help=f"Base delay between requests in seconds (default: {DEFAULT_DELAY})")
    parser.add_argument("-r", "--max_retries", type=int, default=DEFAULT_MAX_RETRIES, help=f"Attempts per entry (default: {DEFAULT_MAX_RETRIES})")
    parser.add_argument("--requests_per_minute", type=int, help="Override the provider's requests per minute")
    parser.add_argument("--requests_per_second", type=int, help="Override the provider's requests per second")
    parser.add_argument("--max_concurrent", type=int, help="Override the provider's max concurrent requests")
    parser.add_argument("--no_adaptive_rate_limit", action="store_true", help="Disable adaptive backoff on rate limit errors")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def config_from_args(args: argparse.Namespace) -> TranslationConfig:
    return TranslationConfig(
        provider=args.provider,
        api_key=args.api_key,
        model=args.model,
        target_language=args.language,
        batch_size=args.batch_size,
        delay=args.delay,
        max_retries=args.max_retries,
        requests_per_minute=args.requests_per_minute,
        requests_per_second=args.requests_per_second,
        max_concurrent_requests=args.max_concurrent,
        adaptive_rate_limit=not args.no_adaptive_rate_limit,
    )


async def main(argv=None):
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    manager = TranslationManager(config_from_args(args))
    return await manager.process_file(args.input_file, args.output_file)


def run(argv=None) -> int:
    """Console entry point. Returns the process exit code."""
    try:
        asyncio.run(main(argv))
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Process interrupted by user.")
        return 130
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(run())
