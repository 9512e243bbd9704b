"""Dashboard state for feedback statistics.

`StatsStateHolder` keeps the last adopted `StatsSummary` for one dashboard
and decides which background result to adopt. Each `refresh` starts a new
generation; a result is adopted only if no newer refresh has started since
(last writer wins). A failed refresh leaves the previous summary in place.
"""

import threading
from collections import OrderedDict
from concurrent.futures import Future
from datetime import datetime
from typing import Optional, Sequence, Tuple

from core import config
from core.logger import get_logger
from schemas.feedback_schema import FeedbackRecord, as_utc
from schemas.stats_schema import StatsSummary
from services.stats_worker import StatsWorker, stats_worker

logger = get_logger("services.stats_state")

# (owner_id, min_rating, max_rating, start_date, end_date)
StatsKey = Tuple[Optional[str], Optional[int], Optional[int], Optional[datetime], Optional[datetime]]


class StatsStateHolder:
    """Caches the current statistics for one dashboard."""

    def __init__(self, worker: StatsWorker, name: str = "default"):
        self.worker = worker
        self.name = name
        self._lock = threading.Lock()
        self._generation = 0
        self._summary = StatsSummary()
        self._last_error: Optional[BaseException] = None

    @property
    def summary(self) -> StatsSummary:
        with self._lock:
            return self._summary

    @property
    def last_error(self) -> Optional[BaseException]:
        with self._lock:
            return self._last_error

    @property
    def is_stale(self) -> bool:
        """True when the most recent refresh failed."""
        return self.last_error is not None

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def refresh(self, records: Sequence[FeedbackRecord]) -> "Future[StatsSummary]":
        """Recompute statistics for `records` in the background.

        Returns a future with the outcome of this refresh. By the time it
        resolves, the outcome has been adopted into `summary`, unless a
        newer refresh started meanwhile.
        """
        with self._lock:
            self._generation += 1
            generation = self._generation

        outcome: Future = Future()

        def _complete(done: Future) -> None:
            self._adopt(generation, done)
            error = done.exception()
            if error is not None:
                outcome.set_exception(error)
            else:
                outcome.set_result(done.result())

        self.worker.submit(records).add_done_callback(_complete)
        return outcome

    def _adopt(self, generation: int, done: Future) -> None:
        error = done.exception()
        with self._lock:
            if generation != self._generation:
                logger.debug("[%s] Discarding stats from generation %s (current %s)",
                             self.name, generation, self._generation)
                return
            if error is not None:
                self._last_error = error
            else:
                self._summary = done.result()
                self._last_error = None
        if error is not None:
            logger.warning("[%s] Stats refresh failed, keeping previous summary: %s", self.name, error)


class StatsStateRegistry:
    """One `StatsStateHolder` per dashboard filter set, least recently used first out.

    A holder's summary always describes the filters it is keyed on. At most
    `max_holders` holders are kept; evicting one drops its cached summary.
    """

    def __init__(self, worker: StatsWorker, max_holders: int = config.STATS_MAX_HOLDERS):
        self.worker = worker
        self.max_holders = max_holders
        self._holders: "OrderedDict[StatsKey, StatsStateHolder]" = OrderedDict()
        self._lock = threading.Lock()

    def get(
        self,
        owner_id: Optional[str] = None,
        min_rating: Optional[int] = None,
        max_rating: Optional[int] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> StatsStateHolder:
        key = (
            owner_id,
            min_rating,
            max_rating,
            as_utc(start_date) if start_date else None,
            as_utc(end_date) if end_date else None,
        )
        with self._lock:
            holder = self._holders.get(key)
            if holder is None:
                holder = StatsStateHolder(self.worker, name=owner_id or "all")
                self._holders[key] = holder
            else:
                self._holders.move_to_end(key)
            while len(self._holders) > self.max_holders:
                evicted, _ = self._holders.popitem(last=False)
                logger.debug("Evicted stats holder %s", evicted)
            return holder

    def __len__(self) -> int:
        with self._lock:
            return len(self._holders)

    def clear(self) -> None:
        with self._lock:
            self._holders.clear()


stats_registry = StatsStateRegistry(stats_worker)
