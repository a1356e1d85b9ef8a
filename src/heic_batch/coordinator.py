"""Bounded-concurrency execution of conversion jobs."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from time import perf_counter
from typing import TYPE_CHECKING

from heic_batch.errors import ErrorHandler
from heic_batch.logging_config import get_logger, log_operation_complete, log_operation_start
from heic_batch.models import BatchResults, ConversionJob, ConversionResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from heic_batch.converter import ConversionWorker


class StartBarrier:
    """One-shot signal releasing every waiting worker at once.

    Only the first call to fire() has an effect; the barrier cannot be reset.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._fired = False

    @property
    def fired(self) -> bool:
        return self._event.is_set()

    def fire(self) -> bool:
        """Release all waiters.

        Returns:
            True if this call fired the barrier, False if it had already fired
        """
        with self._lock:
            if self._fired:
                return False
            self._fired = True
        self._event.set()
        return True

    def wait(self) -> None:
        self._event.wait()


class ConcurrencySlots:
    """Fixed-capacity pool of admission permits.

    Counts acquisitions and releases so a run can be checked for leaked
    slots. Releasing more often than acquired raises ValueError.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._semaphore = threading.BoundedSemaphore(capacity)
        self._lock = threading.Lock()
        self.acquired = 0
        self.released = 0

    @property
    def in_use(self) -> int:
        with self._lock:
            return self.acquired - self.released

    def try_acquire(self) -> bool:
        """Take a slot if one is free, without blocking."""
        if not self._semaphore.acquire(blocking=False):
            return False
        with self._lock:
            self.acquired += 1
        return True

    def acquire(self) -> None:
        """Take a slot, blocking until one is free."""
        self._semaphore.acquire()
        with self._lock:
            self.acquired += 1

    def release(self) -> None:
        self._semaphore.release()
        with self._lock:
            self.released += 1


class _CompletionTracker:
    """Thread-safe completion counter feeding the progress callback."""

    def __init__(self, total: int, progress_callback: Callable[[int, int, str], None] | None):
        self.total = total
        self.progress_callback = progress_callback
        self.completed = 0
        self._lock = threading.Lock()

    def job_done(self, job: ConversionJob, _future: Future[ConversionResult]) -> None:
        with self._lock:
            self.completed += 1
            completed = self.completed
        if self.progress_callback:
            self.progress_callback(completed, self.total, job.source.name)


class BatchCoordinator:
    """Run conversion jobs with at most ``worker_count`` in flight.

    For every job a slot is reserved on the launching thread before the job
    is submitted, so launching blocks once the pool is saturated and never
    more than ``worker_count`` tasks exist at a time. Submitted tasks wait on
    a start barrier which fires once all jobs are launched, or earlier when
    the launcher is about to block on a full pool (the reserved workers must
    be released to ever free a slot). Each task releases its slot in a
    ``finally`` block, and the run waits for every task before aggregating.

    There is no per-job timeout: a hung decode holds its slot and the run
    waits for it indefinitely.
    """

    def __init__(
        self,
        worker: ConversionWorker,
        worker_count: int,
        logger: logging.Logger | None = None,
        progress_callback: Callable[[int, int, str], None] | None = None,
    ):
        """Initialize the coordinator.

        Args:
            worker: Converter invoked once per job, shared by all threads
            worker_count: Maximum number of jobs converting at once
            logger: Optional logger instance
            progress_callback: Optional callback for progress updates (current, total, filename)
        """
        if worker_count < 1:
            raise ValueError(f"worker_count must be at least 1, got {worker_count}")
        self.worker = worker
        self.worker_count = worker_count
        self.logger = logger or get_logger(__name__)
        self.progress_callback = progress_callback

    def run(self, jobs: list[ConversionJob]) -> BatchResults:
        """Convert all jobs and wait for them to finish.

        Args:
            jobs: Jobs to run

        Returns:
            BatchResults in job order
        """
        if not jobs:
            self.logger.info("No files to convert")
            return BatchResults()

        start_time = perf_counter()
        log_operation_start(
            self.logger, "batch conversion", files=len(jobs), workers=self.worker_count
        )

        slots = ConcurrencySlots(self.worker_count)
        barrier = StartBarrier()
        tracker = _CompletionTracker(len(jobs), self.progress_callback)
        futures: dict[Future[ConversionResult], ConversionJob] = {}

        with ThreadPoolExecutor(
            max_workers=self.worker_count, thread_name_prefix="heic-worker"
        ) as executor:
            try:
                for job in jobs:
                    self._reserve_slot(slots, barrier)
                    try:
                        future = executor.submit(self._run_job, job, barrier, slots)
                    except BaseException:
                        slots.release()
                        raise
                    futures[future] = job
                    future.add_done_callback(lambda f, job=job: tracker.job_done(job, f))
            finally:
                # Launched workers must never be left waiting
                if barrier.fire():
                    self.logger.debug(f"Start barrier fired after launching {len(futures)} jobs")

            wait(futures)

        results = [self._collect(future, job) for future, job in futures.items()]
        batch_results = BatchResults.from_results(results, perf_counter() - start_time)

        self.logger.debug(f"Slots acquired={slots.acquired}, released={slots.released}")
        log_operation_complete(
            self.logger,
            "batch conversion",
            success=batch_results.failed == 0,
            duration=batch_results.total_time,
            successful=batch_results.successful,
            failed=batch_results.failed,
            deleted=batch_results.deleted,
        )
        return batch_results

    def _reserve_slot(self, slots: ConcurrencySlots, barrier: StartBarrier) -> None:
        if slots.try_acquire():
            return
        if barrier.fire():
            self.logger.debug(
                f"All {slots.capacity} slots reserved; start barrier fired before launching more"
            )
        slots.acquire()

    def _run_job(
        self, job: ConversionJob, barrier: StartBarrier, slots: ConcurrencySlots
    ) -> ConversionResult:
        try:
            barrier.wait()
            return self.worker.convert(job)
        finally:
            slots.release()

    def _collect(self, future: Future[ConversionResult], job: ConversionJob) -> ConversionResult:
        try:
            return future.result()
        except Exception as e:
            self.logger.debug(f"Worker task raised for {job.source.name}: {e!r}")
            return ErrorHandler(self.logger).handle_error(
                e, {"input_path": job.source, "operation": "batch_processing"}
            )
