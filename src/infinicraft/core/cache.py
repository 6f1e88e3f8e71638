"""Process-wide combination cache shared by every room."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError

from .errors import GenerationTimeout, NotFound
from .models import Item

__all__ = ["CombinationCache"]

logger = logging.getLogger(__name__)


class CombinationCache:
    """Maps combo keys to resolved items.

    Entries are never evicted.  ``resolve`` adds single-flight semantics on top
    of the plain map: while one caller is producing the item for a key, other
    callers missing on that key wait for the same outcome instead of starting
    their own generation.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Item] = {}
        self._inflight: dict[str, Future[Item]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def has(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def get(self, key: str) -> Item:
        with self._lock:
            item = self._entries.get(key)
        if item is None:
            raise NotFound(f"combination '{key}' not found")
        return item

    def try_get(self, key: str) -> Item | None:
        with self._lock:
            return self._entries.get(key)

    def set(self, key: str, item: Item) -> None:
        with self._lock:
            self._entries[key] = item

    def snapshot(self) -> dict[str, Item]:
        with self._lock:
            return dict(self._entries)

    def pending(self) -> int:
        """Number of keys currently being resolved."""

        with self._lock:
            return len(self._inflight)

    def resolve(
        self,
        key: str,
        producer: Callable[[], Item],
        *,
        wait_timeout: float | None = None,
    ) -> tuple[Item, bool]:
        """Return ``(item, hit)`` for ``key``, producing it at most once.

        ``hit`` is False only for the caller whose ``producer`` ran.  If the
        producer raises, the exception is re-raised to that caller and to every
        waiter, nothing is stored and the key becomes resolvable again.
        """

        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                logger.debug("combination cache hit", extra={"combo_key": key})
                return cached, True
            future = self._inflight.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._inflight[key] = future

        if not owner:
            logger.debug("awaiting in-flight combination", extra={"combo_key": key})
            try:
                return future.result(timeout=wait_timeout), True
            except FutureTimeoutError as exc:
                raise GenerationTimeout(f"timed out waiting for combination '{key}'") from exc

        try:
            item = producer()
        except BaseException as exc:
            with self._lock:
                self._inflight.pop(key, None)
            future.set_exception(exc)
            raise
        with self._lock:
            # An explicit ``set`` during generation wins; keep the map consistent with waiters.
            item = self._entries.setdefault(key, item)
            self._inflight.pop(key, None)
        future.set_result(item)
        return item, False
