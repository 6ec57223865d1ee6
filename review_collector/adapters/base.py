"""
Base class for review source adapters.
"""
import asyncio
import functools
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, List, Optional, Tuple

from review_collector.core.config import settings
from review_collector.ingestion import RegionalFanOut, merge_reviews
from review_collector.schemas.review import AppSearchResult, Review, Store


class SourceAdapter(ABC):
    """
    Translates search and review requests into calls against one store.

    Every adapter owns a static catalog of the regions it supports and
    returns canonical Review objects; raw payloads never leave the adapter.
    """

    store: Store
    supported_regions: Tuple[str, ...] = ()
    # Regions fetched when the caller does not pick one
    ingest_regions: Tuple[str, ...] = ()

    def __init__(self, timeout: Optional[float] = None, max_workers: Optional[int] = None):
        self.timeout = settings.HTTP_TIMEOUT_SECONDS if timeout is None else timeout
        self.max_workers = max_workers or settings.ADAPTER_MAX_WORKERS
        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix=f"{type(self).__name__}-worker",
        )
        # One slot per worker thread; held until the thread is free again
        self._slots = asyncio.Semaphore(self.max_workers)
        self._executor_closed = False

    async def _call(self, func: Callable[..., Any], *args, **kwargs) -> Any:
        """
        Run a blocking client call on this adapter's worker pool.

        The timeout covers only the call itself: a worker is reserved first,
        so time spent waiting behind other calls is not counted. A slot is
        returned when its thread finishes, even if the caller already timed out.
        """
        await self._slots.acquire()
        loop = asyncio.get_running_loop()
        try:
            job = self._executor.submit(functools.partial(func, *args, **kwargs))
        except BaseException:
            self._slots.release()
            raise
        job.add_done_callback(lambda _: self._free_slot(loop))
        return await asyncio.wait_for(asyncio.wrap_future(job), timeout=self.timeout)

    def _free_slot(self, loop: asyncio.AbstractEventLoop) -> None:
        # Runs on the worker thread once the call has finished
        try:
            loop.call_soon_threadsafe(self._slots.release)
        except RuntimeError:
            # loop already closed; nothing is left waiting on the slot
            pass

    @abstractmethod
    async def search(self, query: str, region: str = "us", limit: Optional[int] = None) -> List[AppSearchResult]:
        """
        Search the store catalog.

        Never raises: a failed search is logged and returns an empty list.
        """

    @abstractmethod
    async def lookup_app_name(self, app_id: str, region: str) -> Optional[str]:
        """Store listing title for an app, or None if it cannot be resolved."""

    @abstractmethod
    async def fetch_region_reviews(self, app_id: str, region: str, app_name: str) -> List[Review]:
        """
        Fetch reviews for a single region.

        May raise; the fan-out treats a raised error as zero reviews for that region.
        """

    async def fetch_reviews(self, app_id: str, region: Optional[str] = None) -> List[Review]:
        """
        Fetch reviews for one region, or for `ingest_regions` when none is given.

        Returns a list deduplicated by (id, store, region).
        """
        result = await RegionalFanOut(self).run(app_id, region=region)
        return merge_reviews(result.reviews)

    def close(self) -> None:
        """Release network resources and the worker pool. Safe to call more than once."""
        if self._executor_closed:
            return
        self._executor_closed = True
        self._executor.shutdown(wait=False, cancel_futures=True)
