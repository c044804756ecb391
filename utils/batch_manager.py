"""Queue-based worker pool for processing a batch of catalog entries."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)


def split_batches(items: Sequence[Any], batch_size: int) -> List[List[Any]]:
    """Split items into consecutive batches of at most batch_size."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    return [list(items[i:i + batch_size]) for i in range(0, len(items), batch_size)]


class BatchManager:
    """
    Runs an async processor over a batch with a fixed number of workers.

    Features:
    - Queue-based processing: at most `concurrency` tasks exist at once,
      regardless of batch size
    - Failure isolation: an exception from one item is logged and counted,
      the remaining items are still processed
    """

    def __init__(self, concurrency: int = 1):
        self.concurrency = max(1, concurrency)
        self.stats = {
            'total_items': 0,
            'processed_items': 0,
            'failed_items': 0,
        }

    async def process(
        self,
        items: Sequence[Any],
        processor: Callable[[Any], Awaitable[None]],
        concurrency: Optional[int] = None,
    ):
        """
        Process every item with `processor`, returning once all are done.

        Args:
            items: Items of one batch
            processor: Async function called once per item
            concurrency: Worker count for this call (defaults to the manager's)
        """
        if not items:
            return

        queue: asyncio.Queue = asyncio.Queue()
        for item in items:
            queue.put_nowait(item)
        self.stats['total_items'] += len(items)

        async def worker():
            while True:
                try:
                    item = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                try:
                    await processor(item)
                    self.stats['processed_items'] += 1
                except Exception as e:
                    self.stats['failed_items'] += 1
                    logger.error(f"Error processing item {item!r}: {e}")
                finally:
                    queue.task_done()

        worker_count = min(len(items), max(1, concurrency or self.concurrency))
        await asyncio.gather(*(worker() for _ in range(worker_count)))

    def get_stats(self) -> Dict:
        """Get processing statistics."""
        return dict(self.stats)
