import asyncio
import logging
from typing import Awaitable, Callable, Iterable, TypeVar

from member_diff.config import DEFAULT_BATCH_DELAY, DEFAULT_BATCH_SIZE


T = TypeVar('T')
R = TypeVar('R')

logger = logging.getLogger(__name__)


class RateLimitedBatcher(object):
    """Runs an async task over items in fixed-size concurrent batches.

    Every task of a batch is awaited until it settles, so one failure never
    cancels its siblings. Batches run one after the other with a fixed pause
    between them (not after the last one). The pause is a plain interval, not
    an adaptive backoff on rate-limit responses.
    """

    def __init__(self, batch_size: int = DEFAULT_BATCH_SIZE, delay: float = DEFAULT_BATCH_DELAY,
                 sleep: Callable[[float], Awaitable] = asyncio.sleep):
        if batch_size < 1:
            raise ValueError(f'batch_size must be at least 1, got {batch_size}')
        self.batch_size = batch_size
        self.delay = delay
        self._sleep = sleep

    async def run(self, items: Iterable[T], task: Callable[[T], Awaitable[R]]) -> list[tuple[T, object]]:
        """Returns (item, result) pairs; result is the raised exception for failed tasks."""
        items = list(items)
        settled = []

        for start in range(0, len(items), self.batch_size):
            if start and self.delay:
                await self._sleep(self.delay)

            batch = items[start:start + self.batch_size]
            logger.debug(f'Running batch {start // self.batch_size + 1} ({len(batch)} tasks)')
            results = await asyncio.gather(*(task(item) for item in batch), return_exceptions=True)
            settled.extend(zip(batch, results))

        return settled
