"""Translation manager that drives a catalog through a rate-limited translation service."""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import List, Optional

from tqdm import tqdm

from config.constants import GENERIC_BACKOFF_BASE, THROTTLE_BACKOFF_BASE
from config.settings import TranslationConfig
from translators import BaseTranslator, TranslationFailure, TranslationOutcome, create_translator
from utils.batch_manager import BatchManager, split_batches
from utils.catalog import Catalog, CatalogEntry
from utils.file_handler import load_catalog_file, save_catalog_file
from utils.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

# Log rate limiter stats after the first batch and every N batches after it
STATS_LOG_INTERVAL = 5


@dataclass
class TranslationProgress:
    """Counters for one run. Observability only."""
    total: int = 0
    completed: int = 0
    failed: int = 0
    rate_limit_hits: int = 0
    average_delay: float = 0.0
    current: Optional[str] = None


class TranslationManager:
    """Manages the translation workflow for one catalog file."""

    def __init__(
        self,
        config: TranslationConfig,
        translator: Optional[BaseTranslator] = None,
        rate_limiter: Optional[RateLimiter] = None,
    ):
        config.validate()
        self.config = config
        self.translator = translator or create_translator(
            config.provider, api_key=config.api_key, model=config.model
        )
        self.rate_limiter = rate_limiter or RateLimiter.from_config(config)
        self.progress = TranslationProgress()
        self._save_lock = asyncio.Lock()

    async def process_file(self, input_file: str, output_file: str) -> TranslationProgress:
        """Translate every pending entry of input_file, writing progress to output_file."""
        start_time = time.time()

        catalog = load_catalog_file(input_file)
        pending = catalog.pending_entries()
        self.progress = TranslationProgress(total=len(pending))
        logger.info(
            f"Total entries: {len(catalog.entries)}. "
            f"Already translated: {len(catalog.entries) - len(pending)}. "
            f"Pending: {len(pending)}."
        )

        try:
            await self.translator.initialize(self.config.target_language)

            if pending:
                logger.info(
                    f"Starting translation to {self.config.target_language} "
                    f"using {self.translator.name}..."
                )
                await self._process_entries(pending, catalog, output_file)
            else:
                logger.info("All entries already translated.")
        finally:
            await self.translator.cleanup()

        async with self._save_lock:
            await save_catalog_file(output_file, catalog)

        elapsed = time.time() - start_time
        self._log_summary(elapsed)
        return self.progress

    async def _process_entries(self, pending: List[CatalogEntry], catalog: Catalog, output_file: str):
        """Run batches one after another; entries within a batch run concurrently."""
        batches = split_batches(pending, self.config.batch_size)
        batch_manager = BatchManager(self.rate_limiter.max_concurrent_requests)

        with tqdm(
            total=len(pending),
            desc=f"Translating ({self.translator.name})",
            unit="entry"
        ) as pbar:

            async def process_entry(entry: CatalogEntry):
                self.progress.current = entry.source_id
                pbar.set_postfix_str(self.progress.current[:50])
                try:
                    await self._translate_entry(entry, catalog, output_file)
                finally:
                    pbar.update(1)

            for batch_number, batch in enumerate(batches, start=1):
                # Ceiling may have shrunk after throttling
                await batch_manager.process(
                    batch, process_entry, concurrency=self.rate_limiter.max_concurrent_requests
                )
                if (batch_number - 1) % STATS_LOG_INTERVAL == 0:
                    logger.info(
                        f"Batch {batch_number}/{len(batches)} done. "
                        f"Rate limiter stats: {self.rate_limiter.get_stats()}"
                    )

        stats = batch_manager.get_stats()
        if stats['failed_items']:
            logger.warning(f"{stats['failed_items']} entries raised unexpected errors")

    async def _call_translator(self, text: str, context: str) -> TranslationOutcome:
        """Invoke the backend; unexpected exceptions become generic failures."""
        try:
            return await self.translator.translate(text, self.config.target_language, context)
        except Exception as e:
            return TranslationFailure(f"{self.translator.name} raised {type(e).__name__}: {e}")

    async def _backoff(self, wait: float):
        await asyncio.sleep(wait)

    async def _translate_entry(self, entry: CatalogEntry, catalog: Catalog, output_file: str) -> bool:
        """
        Translate one entry with retries.

        All failures share one budget of max_retries attempts. On exhaustion
        the source text is copied into the translation so the entry is settled.

        Returns:
            True if the backend produced a translation
        """
        context = " ".join(entry.comments)
        max_retries = self.config.max_retries
        attempt = 0

        while attempt < max_retries:
            async with self.rate_limiter:
                outcome = await self._call_translator(entry.source_id, context)

            if not isinstance(outcome, TranslationFailure):
                entry.translation = outcome
                self.rate_limiter.report_success()
                self.progress.completed += 1
                self._update_average_delay()
                await self._save_progress(catalog, output_file)
                return True

            attempt += 1
            if self.rate_limiter.report_throttled(outcome):
                self.progress.rate_limit_hits += 1
                if outcome.retry_after is not None:
                    wait = outcome.retry_after
                else:
                    wait = THROTTLE_BACKOFF_BASE * 2 ** (attempt - 1)
                logger.warning(
                    f"Rate limited on '{entry.source_id[:50]}' "
                    f"(attempt {attempt}/{max_retries}): {outcome.message}"
                )
            else:
                wait = GENERIC_BACKOFF_BASE * attempt
                logger.warning(
                    f"Translation failed for '{entry.source_id[:50]}' "
                    f"(attempt {attempt}/{max_retries}): {outcome.message}"
                )

            if attempt < max_retries:
                logger.debug(f"Retrying in {wait:.1f}s")
                await self._backoff(wait)

        logger.error(
            f"Giving up on '{entry.source_id[:50]}' after {max_retries} attempts, "
            f"keeping source text"
        )
        entry.translation = entry.source_id
        self.progress.failed += 1
        self._update_average_delay()
        await self._save_progress(catalog, output_file)
        return False

    def _update_average_delay(self):
        self.progress.average_delay = (
            self.progress.average_delay * 0.9 + self.rate_limiter.current_delay * 0.1
        )

    async def _save_progress(self, catalog: Catalog, output_file: str):
        """Persist the whole catalog. Errors are logged; the run goes on."""
        async with self._save_lock:
            try:
                await save_catalog_file(output_file, catalog)
            except OSError as e:
                logger.error(f"Failed to save progress to {output_file}: {e}")

    def _log_summary(self, elapsed: float):
        progress = self.progress
        entries_per_sec = progress.total / elapsed if elapsed > 0 else 0
        logger.info(
            f"Translation completed in {elapsed:.1f}s ({entries_per_sec:.1f} entries/sec). "
            f"Total: {progress.total}, translated: {progress.completed}, "
            f"failed (kept source): {progress.failed}, "
            f"rate limit hits: {progress.rate_limit_hits}, "
            f"average delay: {progress.average_delay:.2f}s"
        )
        logger.info(f"Final rate limiter stats: {self.rate_limiter.get_stats()}")
