from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from .models import SearchRequest, SearchResult

logger = logging.getLogger(__name__)

DEFAULT_ITEMS = ["apples", "bananas", "milk", "bread", "eggs"]
DEFAULT_STORES = ["Walmart", "Target", "Harris Teeter", "Kroger", "Publix"]

NEARBY = "nearby"


class SearchThrottle:
    """Enforce a minimum interval between page loads.

    Owned by whoever drives a run of searches; nothing is shared between
    throttles.
    """

    def __init__(
        self,
        min_interval_s: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.min_interval_s = min_interval_s
        self._clock = clock
        self._sleep = sleep
        self._last: float | None = None

    def wait(self) -> float:
        """Block until the next search may start; returns the seconds slept."""
        now = self._clock()
        slept = 0.0
        if self._last is not None:
            remaining = self.min_interval_s - (now - self._last)
            if remaining > 0:
                self._sleep(remaining)
                slept = remaining
                now = self._clock()
        self._last = now
        return slept


def cache_key(item: str, store: str | None) -> str:
    return f"{item.strip().lower()}_{(store or NEARBY).strip().lower()}"


class ResultCache:
    """Search results kept for *ttl_s* seconds, keyed by item and store."""

    def __init__(self, ttl_s: float, *, clock: Callable[[], float] = time.monotonic):
        self.ttl_s = ttl_s
        self._clock = clock
        self._entries: dict[str, tuple[float, SearchResult]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> SearchResult | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, result = entry
        if self._clock() - stored_at > self.ttl_s:
            del self._entries[key]
            return None
        return result

    def put(self, key: str, result: SearchResult) -> None:
        self._entries[key] = (self._clock(), result)

    def purge(self) -> int:
        now = self._clock()
        expired = [k for k, (t, _) in self._entries.items() if now - t > self.ttl_s]
        for k in expired:
            del self._entries[k]
        return len(expired)


@dataclass
class BatchEntry:
    item: str
    store: str          # store name or "nearby"
    timestamp: str
    result: SearchResult
    cached: bool = False


def plan_searches(
    items: list[str],
    stores: list[str],
    *,
    include_nearby: bool = True,
) -> list[SearchRequest]:
    requests: list[SearchRequest] = []
    for item in items:
        if include_nearby:
            requests.append(SearchRequest(item=item))
        for store in stores:
            requests.append(SearchRequest(item=item, location_hint=store))
    return requests


def run_batch(
    requests: list[SearchRequest],
    search_fn: Callable[[SearchRequest], SearchResult],
    *,
    throttle: SearchThrottle,
    cache: ResultCache | None = None,
) -> list[BatchEntry]:
    """Run searches one at a time, throttled, reusing cached results."""
    entries: list[BatchEntry] = []
    for idx, req in enumerate(requests):
        store = req.location_hint or NEARBY
        key = cache_key(req.item, req.location_hint)
        logger.info("[%d/%d] Searching for %s at %s", idx + 1, len(requests), req.item, store)

        result = cache.get(key) if cache is not None else None
        cached = result is not None
        if result is None:
            throttle.wait()
            try:
                result = search_fn(req)
            except Exception as exc:
                logger.exception("Error searching for %s at %s", req.item, store)
                result = SearchResult.failure(str(exc))
            if cache is not None and result.success:
                cache.put(key, result)

        if result.success:
            logger.info(
                "Found %d products from %d stores for %s at %s",
                result.total_products, result.total_stores, req.item, store,
            )
        else:
            logger.info("No results for %s at %s: %s", req.item, store, result.error)

        entries.append(
            BatchEntry(
                item=req.item,
                store=store,
                timestamp=datetime.now(timezone.utc).isoformat(),
                result=result,
                cached=cached,
            )
        )
    return entries


def failed_entries(requests: list[SearchRequest], error: str) -> list[BatchEntry]:
    """Record every planned search as failed, e.g. when no browser could start."""
    stamp = datetime.now(timezone.utc).isoformat()
    return [
        BatchEntry(
            item=req.item,
            store=req.location_hint or NEARBY,
            timestamp=stamp,
            result=SearchResult.failure(error),
        )
        for req in requests
    ]
