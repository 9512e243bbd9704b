"""Background execution of feedback statistics.

The aggregation is CPU-bound, so request handlers hand it to `StatsWorker`,
which runs it on a thread or process pool and returns a
`concurrent.futures.Future`. Records cross the pool boundary as plain dicts.
Any failure to dispatch or compute resolves the future with
`StatsComputationError`; `submit` itself never raises.
"""

import threading
from concurrent.futures import CancelledError, Executor, Future, ProcessPoolExecutor, ThreadPoolExecutor
from typing import Optional, Sequence

from core import config
from core.exceptions import StatsComputationError
from core.logger import get_logger
from schemas.feedback_schema import FeedbackRecord
from schemas.stats_schema import StatsSummary
from services.stats_aggregator import calculate_stats_payload, decode_summary, encode_records

logger = get_logger("services.stats_worker")


class StatsWorker:
    """Dispatches statistics computations to an executor.

    Parameters
    ----------
    executor: Executor, optional
        Executor to use. When omitted, one is created on first use according
        to `kind` and recreated after `shutdown`.
    kind: str
        ``"thread"`` or ``"process"``.
    max_workers: int
        Pool size for a self-created executor.
    """

    def __init__(self, executor: Optional[Executor] = None, kind: str = "thread", max_workers: int = 2):
        self._executor = executor
        self._owns_executor = executor is None
        self.kind = kind
        self.max_workers = max_workers
        self._lock = threading.Lock()

    def _get_executor(self) -> Executor:
        with self._lock:
            if self._executor is None:
                if self.kind == "process":
                    self._executor = ProcessPoolExecutor(max_workers=self.max_workers)
                else:
                    self._executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="stats")
                logger.info("Started %s stats executor (max_workers=%s)", self.kind, self.max_workers)
            return self._executor

    def submit(self, records: Sequence[FeedbackRecord]) -> "Future[StatsSummary]":
        """Compute statistics for a snapshot of `records` in the background.

        Args:
            records: Validated feedback records. The list is encoded before
                dispatch, so later changes by the caller do not leak in.

        Returns:
            Future resolving to a `StatsSummary`, or failing with
            `StatsComputationError`.
        """
        result: Future = Future()
        payload = encode_records(records)

        try:
            pending = self._get_executor().submit(calculate_stats_payload, payload)
        except Exception as exc:
            logger.error("Stats worker unavailable: %s", exc)
            result.set_exception(StatsComputationError("Statistics worker unavailable", cause=str(exc)))
            return result

        def _deliver(done: Future) -> None:
            try:
                summary = decode_summary(done.result())
            except (Exception, CancelledError) as exc:
                logger.error("Stats computation failed: %s", exc, exc_info=True)
                result.set_exception(StatsComputationError("Statistics computation failed", cause=str(exc)))
            else:
                result.set_result(summary)

        pending.add_done_callback(_deliver)
        logger.debug("Dispatched stats computation for %s records", len(payload))
        return result

    def shutdown(self, wait: bool = True) -> None:
        """Stop the executor. A self-created executor is rebuilt on next use."""
        with self._lock:
            executor = self._executor
            if executor is None:
                return
            if self._owns_executor:
                self._executor = None
        executor.shutdown(wait=wait)
        logger.info("Stats executor shut down")


stats_worker = StatsWorker(kind=config.STATS_EXECUTOR, max_workers=config.STATS_MAX_WORKERS)
