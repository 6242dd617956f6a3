"""Time‑bounded, request‑coalescing memoizer for upstream fetches.

Semantics
---------
* One stored result per key: whatever the producer returned **or raised**.
  Within the freshness window the stored result is replayed verbatim, errors
  included.  A failed upstream call is therefore not retried until the window
  elapses; recovery is time‑driven.
* At most one producer per key is in flight.  Callers arriving while it runs
  wait for it and receive the identical result.
* Producers run on a private thread pool.  A caller that stops waiting
  (``timeout``) gets :class:`FetchTimeoutError`, but the fetch carries on and
  still populates the cache for everyone else.
* A janitor thread periodically drops expired entries.  It only bounds memory;
  expired entries are never served whether or not it has run.
"""
from __future__ import annotations

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as _FutureTimeout
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

from loguru import logger

T = TypeVar("T")

DEFAULT_TTL = 90.0
DEFAULT_SWEEP_INTERVAL = 600.0


# ---------------------------------------------------------------------------
# Exceptions / result types
# ---------------------------------------------------------------------------


class FetchTimeoutError(TimeoutError):
    """Caller gave up waiting; the underlying fetch is still running."""


@dataclass(frozen=True)
class MemoResult(Generic[T]):
    """Outcome of :meth:`Memoizer.call`.

    ``cached`` is ``True`` when this caller did not trigger the producer
    (stored entry or joined an in‑flight fetch).
    """

    value: Optional[T]
    error: Optional[BaseException]
    cached: bool
    error_tb: Optional[TracebackType] = None

    def unwrap(self) -> T:
        if self.error is not None:
            # Reset to the producer's traceback so replays don't stack frames.
            raise self.error.with_traceback(self.error_tb)
        return self.value  # type: ignore[return-value]


@dataclass(frozen=True)
class _Outcome:
    """What the producer returned or raised, captured on the worker thread."""

    value: Any = None
    error: Optional[BaseException] = None
    error_tb: Optional[TracebackType] = None


@dataclass(frozen=True)
class _Entry:
    outcome: _Outcome
    deadline: float


# ---------------------------------------------------------------------------
# Memoizer
# ---------------------------------------------------------------------------


class Memoizer:
    """Keyed single‑flight cache with a freshness window.

    Args:
        ttl: freshness window in seconds (deadline = completion time + ttl)
        sweep_interval: seconds between janitor passes; ``<= 0`` disables it
        clock: monotonic time source, injectable for tests
        max_workers: size of the producer thread pool
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL,
        *,
        clock: Callable[[], float] = time.monotonic,
        max_workers: int = 4,
    ):
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self.ttl = ttl
        self.sweep_interval = sweep_interval
        self._clock = clock

        self._lock = threading.RLock()
        self._entries: Dict[str, _Entry] = {}
        self._inflight: Dict[str, Future] = {}

        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="memoize")
        self._stop_event = threading.Event()
        self._janitor: Optional[threading.Thread] = None

    # ----------------------------- Public API --------------------------------

    def call(
        self,
        key: str,
        producer: Callable[[], T],
        *,
        timeout: Optional[float] = None,
    ) -> MemoResult[T]:
        """Return the memoized outcome for *key*, invoking *producer* if needed.

        Producer errors are returned in :attr:`MemoResult.error`, never raised.
        Only :class:`FetchTimeoutError` escapes, when *timeout* elapses first.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._clock() < entry.deadline:
                if entry.outcome.error is not None:
                    logger.debug("Replaying cached error for key={}: {}", key, entry.outcome.error)
                return _result(entry.outcome, cached=True)

            future = self._inflight.get(key)
            joined = future is not None
            if future is None:
                logger.debug("Cache miss for key={}, invoking producer", key)
                future = self._executor.submit(_run, producer)
                self._inflight[key] = future
                future.add_done_callback(lambda f, k=key: self._store(k, f))
            else:
                logger.debug("Joining in-flight fetch for key={}", key)

        try:
            outcome: _Outcome = future.result(timeout=timeout)
        except _FutureTimeout as err:
            raise FetchTimeoutError(f"Timed out waiting for {key!r}") from err

        self._store(key, future)
        return _result(outcome, cached=joined)

    def fetch(self, key: str, producer: Callable[[], T], *, timeout: Optional[float] = None) -> T:
        """Like :meth:`call` but returns the value or raises the stored error."""
        return self.call(key, producer, timeout=timeout).unwrap()

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def sweep(self) -> int:
        """Evict expired entries; return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [k for k, e in self._entries.items() if e.deadline <= now]
            for k in expired:
                del self._entries[k]
        if expired:
            logger.debug("Swept {} expired cache entries: {}", len(expired), expired)
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # ----------------------------- Lifecycle ---------------------------------

    def start(self) -> None:
        """Start the janitor thread (no‑op if disabled or already running)."""
        if self.sweep_interval <= 0 or self._janitor is not None:
            return
        self._stop_event.clear()
        self._janitor = threading.Thread(target=self._janitor_loop, name="memoize-janitor", daemon=True)
        self._janitor.start()

    def stop(self, wait: bool = True) -> None:
        """Stop the janitor and shut down the producer pool."""
        self._stop_event.set()
        if self._janitor is not None:
            self._janitor.join(timeout=5.0)
            self._janitor = None
        self._executor.shutdown(wait=wait)

    # ----------------------------- Internals ---------------------------------

    def _store(self, key: str, future: Future) -> None:
        # Called by the completion callback and by every waiter; the first one
        # to see the future still registered as in flight records the result.
        outcome = future.result()
        with self._lock:
            if self._inflight.get(key) is not future:
                return
            del self._inflight[key]
            self._entries[key] = _Entry(outcome, deadline=self._clock() + self.ttl)

    def _janitor_loop(self) -> None:
        while not self._stop_event.wait(self.sweep_interval):
            self.sweep()


def _run(producer: Callable[[], Any]) -> _Outcome:
    try:
        return _Outcome(value=producer())
    except Exception as exc:  # noqa: BLE001 - stored and replayed to callers
        return _Outcome(error=exc, error_tb=exc.__traceback__)


def _result(outcome: _Outcome, *, cached: bool) -> MemoResult:
    return MemoResult(outcome.value, outcome.error, cached, outcome.error_tb)
