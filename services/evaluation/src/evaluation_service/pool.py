"""
Bounded worker pool for position evaluations.

A fixed number of worker threads pull jobs from a shared queue and run one
engine invocation each, so at most ``worker_count`` engine processes exist
at any time. Admission is non-blocking: when ``queue_size`` jobs are
already waiting and every worker is busy, ``submit`` fails immediately
instead of buffering more work.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import TypedDict

from common import (
    EngineCancelledError,
    EngineError,
    EvaluationTimeoutError,
    PoolShutdownError,
    QueueFullError,
)

from .config import EngineConfig, PoolConfig
from .engine import CancelToken, EvaluationResult, Evaluator, UciEngine
from .memo import ResultMemo

logger = logging.getLogger(__name__)

# Re-export for convenience
__all__ = [
    "QueueFullError",
    "EvaluationTimeoutError",
    "PoolShutdownError",
    "EvaluationJob",
    "PoolStats",
    "WorkerPool",
]


class PoolStats(TypedDict):
    """Pool status snapshot."""

    workers: int
    alive: int
    queued: int
    in_flight: int
    submitted: int
    completed: int
    failed: int
    rejected: int
    timed_out: int
    memo_hits: int


@dataclass
class EvaluationJob:
    """A queued evaluation with its private single-slot reply."""

    position: str
    cancel: CancelToken = field(default_factory=CancelToken)
    _reply: queue.Queue[EvaluationResult] = field(
        default_factory=lambda: queue.Queue(maxsize=1), repr=False
    )

    def deliver(self, result: EvaluationResult) -> None:
        """Write the job's outcome. Never blocks, even if nobody reads it."""
        try:
            self._reply.put_nowait(result)
        except queue.Full as e:
            raise RuntimeError(f"Job for {self.position} already has an outcome") from e

    def wait(self, timeout: float) -> EvaluationResult | None:
        """Wait for the outcome; None if it did not arrive in time."""
        try:
            return self._reply.get(timeout=timeout)
        except queue.Empty:
            return None


class WorkerPool:
    """
    Fixed set of worker threads evaluating positions from a bounded queue.

    Usage:
        pool = WorkerPool(pool_config, engine_config)
        pool.start()

        result = pool.submit(fen)  # blocks up to job_timeout

        pool.shutdown()  # waits for in-flight jobs
    """

    def __init__(
        self,
        pool_config: PoolConfig | None = None,
        engine_config: EngineConfig | None = None,
        evaluator: Evaluator | None = None,
    ) -> None:
        """Initialize the pool.

        Args:
            pool_config: Pool configuration (workers, queue size, timeouts).
            engine_config: Engine configuration for the default UciEngine.
            evaluator: Evaluator to delegate jobs to. Defaults to a UciEngine
                built from ``engine_config``.
        """
        self._pool_config = pool_config or PoolConfig()
        self._evaluator: Evaluator = evaluator or UciEngine(engine_config)

        self._jobs: queue.Queue[EvaluationJob | None] = queue.Queue()
        # One slot per queued job plus one per busy worker
        self._slots = threading.BoundedSemaphore(
            self._pool_config.queue_size + self._pool_config.worker_count
        )
        self._workers: list[threading.Thread] = []
        self._memo = (
            ResultMemo(self._pool_config.memo_size) if self._pool_config.memo_size > 0 else None
        )

        self._lock = threading.Lock()
        self._started = False
        self._shutdown = False
        self._in_flight = 0
        self._counters: Counter[str] = Counter()

    @property
    def size(self) -> int:
        """Get the configured worker count."""
        return self._pool_config.worker_count

    @property
    def is_started(self) -> bool:
        return self._started

    @property
    def is_shutdown(self) -> bool:
        return self._shutdown

    @property
    def version(self) -> str:
        """Engine version as reported by the evaluator, if it knows it."""
        return str(getattr(self._evaluator, "version", "unknown"))

    def __enter__(self) -> WorkerPool:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def start(self) -> None:
        """Start the worker threads.

        Raises:
            PoolShutdownError: If the pool has already been shut down.
        """
        with self._lock:
            if self._shutdown:
                raise PoolShutdownError("Pool has been shut down")
            if self._started:
                logger.warning("Pool already started")
                return

            for i in range(self._pool_config.worker_count):
                worker = threading.Thread(
                    target=self._worker, args=(i,), name=f"eval-worker-{i}", daemon=True
                )
                worker.start()
                self._workers.append(worker)
            self._started = True

        logger.info(
            f"Worker pool started: {self._pool_config.worker_count} workers, "
            f"queue size {self._pool_config.queue_size}"
        )

    def submit(self, fen: str, timeout: float | None = None) -> EvaluationResult:
        """Evaluate a position on the pool and wait for the result.

        Args:
            fen: Position in FEN notation.
            timeout: Seconds to wait (uses the pool's job_timeout if None).

        Returns:
            The successful EvaluationResult.

        Raises:
            PoolShutdownError: If the pool is not started or shutting down.
            QueueFullError: If no admission slot is free.
            EvaluationTimeoutError: If no result arrives in time.
            ValueError: If ``timeout`` is not positive.
            EngineError: If the engine invocation failed.
        """
        wait = timeout if timeout is not None else self._pool_config.job_timeout
        if wait <= 0:
            raise ValueError(f"timeout must be > 0, got {wait}")

        job = EvaluationJob(fen.strip())

        with self._lock:
            if self._shutdown:
                raise PoolShutdownError("Pool is shutting down")
            if not self._started:
                raise PoolShutdownError("Pool not started")

            if self._memo is not None:
                cached = self._memo.get(job.position)
                if cached is not None:
                    self._counters["memo_hits"] += 1
                    return cached

            if not self._slots.acquire(blocking=False):
                self._counters["rejected"] += 1
                logger.warning(f"Queue full, rejecting {job.position}")
                raise QueueFullError(
                    f"Evaluation queue full ({self._pool_config.queue_size} queued, "
                    f"{self._pool_config.worker_count} workers busy), try again later"
                )

            self._jobs.put(job)
            self._counters["submitted"] += 1

        result = job.wait(wait)

        if result is None:
            with self._lock:
                self._counters["timed_out"] += 1
            if self._pool_config.cancel_on_timeout:
                job.cancel.cancel()
            logger.warning(f"Evaluation timed out after {wait}s: {job.position}")
            raise EvaluationTimeoutError(f"Evaluation timed out after {wait}s")

        if result.error is not None:
            raise result.error
        return result

    def shutdown(self, timeout: float | None = None) -> None:
        """Stop accepting work and wait for in-flight jobs to finish.

        Jobs still waiting in the queue are failed with PoolShutdownError;
        jobs already claimed by a worker run to completion.

        Args:
            timeout: Maximum seconds to wait for workers (uses the pool's
                shutdown_timeout if None).
        """
        with self._lock:
            if self._shutdown:
                return
            self._shutdown = True

        logger.info("Shutting down worker pool")

        dropped = self._drain_queue()
        if dropped:
            logger.info(f"Rejected {dropped} queued jobs")

        for _ in self._workers:
            self._jobs.put(None)

        timeout = timeout if timeout is not None else self._pool_config.shutdown_timeout
        deadline = time.monotonic() + timeout
        for worker in self._workers:
            worker.join(max(0.0, deadline - time.monotonic()))
            if worker.is_alive():
                logger.warning(f"{worker.name} still busy after {timeout}s, not waiting")

        self._started = False
        logger.info("Worker pool shutdown complete")

    def stats(self) -> PoolStats:
        """Snapshot of pool load and job counters."""
        with self._lock:
            return {
                "workers": len(self._workers),
                "alive": sum(1 for w in self._workers if w.is_alive()),
                "queued": self._jobs.qsize(),
                "in_flight": self._in_flight,
                "submitted": self._counters["submitted"],
                "completed": self._counters["completed"],
                "failed": self._counters["failed"],
                "rejected": self._counters["rejected"],
                "timed_out": self._counters["timed_out"],
                "memo_hits": self._counters["memo_hits"],
            }

    def _drain_queue(self) -> int:
        """Fail every job that no worker has claimed yet."""
        dropped = 0
        while True:
            try:
                job = self._jobs.get_nowait()
            except queue.Empty:
                return dropped
            if job is None:
                continue
            self._slots.release()
            job.deliver(EvaluationResult(error=PoolShutdownError("Pool is shutting down")))
            dropped += 1

    def _worker(self, worker_id: int) -> None:
        logger.debug(f"[Worker {worker_id}] started")
        while True:
            job = self._jobs.get()
            if job is None:
                break
            result = self._run_job(worker_id, job)
            # The engine process is already reaped here
            self._slots.release()
            job.deliver(result)
        logger.debug(f"[Worker {worker_id}] shutting down")

    def _run_job(self, worker_id: int, job: EvaluationJob) -> EvaluationResult:
        """Run one job; failures come back packaged in the result."""
        if job.cancel.cancelled:
            logger.debug(f"[Worker {worker_id}] skipping cancelled job {job.position}")
            with self._lock:
                self._counters["failed"] += 1
            return EvaluationResult(
                error=EngineCancelledError("Evaluation cancelled before it started")
            )

        with self._lock:
            self._in_flight += 1
        try:
            result = self._evaluator.evaluate(job.position, cancel=job.cancel)
        except EngineError as e:
            logger.warning(f"[Worker {worker_id}] evaluation failed for {job.position}: {e}")
            result = EvaluationResult(error=e)
        except Exception as e:
            logger.exception(f"[Worker {worker_id}] unexpected error for {job.position}: {e}")
            result = EvaluationResult(error=e)
        finally:
            with self._lock:
                self._in_flight -= 1

        with self._lock:
            self._counters["completed" if result.ok else "failed"] += 1
        if result.ok and self._memo is not None:
            self._memo.put(job.position, result)
        return result
