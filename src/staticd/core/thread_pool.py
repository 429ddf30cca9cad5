"""
=============================================================================
FIXED-SIZE THREAD POOL
=============================================================================

A thread pool manages a group of worker threads that process jobs from a
shared queue. Each accepted connection becomes one job.

=============================================================================
THREAD POOL ARCHITECTURE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        Thread Pool                                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   execute(job) ──► ┌──────────────────────────────────────────────┐ │
    │                    │                 JOB QUEUE                    │ │
    │                    │  [Job 1] [Job 2] [Job 3] ... [PILL] [PILL]   │ │
    │                    │                                              │ │
    │                    │  • queue.Queue, unbounded (no backpressure)  │ │
    │                    │  • Each item is handed to exactly one worker │ │
    │                    └──────────────────────┬───────────────────────┘ │
    │                                           │ get()                   │
    │                                           ▼                         │
    │         ┌──────────┐ ┌──────────┐ ┌──────────┐ ┌──────────┐         │
    │         │ Worker 0 │ │ Worker 1 │ │ Worker 2 │ │ Worker 3 │         │
    │         │ (idle)   │ │ (busy)   │ │ (busy)   │ │ (idle)   │         │
    │         └──────────┘ └──────────┘ └──────────┘ └──────────┘         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The queue's internal lock gives one worker at a time exclusive access while
it takes the next item; the job itself runs after the lock is released, so
up to `size` jobs execute concurrently.

=============================================================================
SHUTDOWN: CLOSE, THEN JOIN
=============================================================================

    pool.shutdown()
        │
        ├── 1. CLOSE   Mark the pool closed (execute() now refuses jobs)
        │              and append one poison pill per worker.
        │              Pills go in BEHIND every pending job, so the
        │              queue is drained before any worker sees one.
        │
        └── 2. JOIN    Wait for every worker thread to exit.
                       Returns only when all submitted jobs are done.

Both steps happen under one call, and calling it again is harmless.

=============================================================================
"""

import threading
import queue
import time
import logging
from typing import Callable
from enum import Enum


logger = logging.getLogger(__name__)


Job = Callable[[], None]


class _Closed:
    """Poison pill: tells a worker the queue is closed and drained."""

    def __repr__(self) -> str:
        return "<closed>"


_CLOSED = _Closed()


class WorkerState(Enum):
    """Worker thread states, used for monitoring."""
    IDLE = "idle"        # Waiting for a job
    BUSY = "busy"        # Executing a job
    STOPPED = "stopped"  # Thread exited


class Worker(threading.Thread):
    """
    Worker thread that executes jobs from the shared queue.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        Worker Loop                                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. Wait for the next item (blocking get)                          │
    │          │                                                           │
    │          ├── Poison pill → exit loop, thread terminates             │
    │          │                                                           │
    │          └── Job → step 2                                           │
    │                                                                      │
    │   2. Run the job, logging (not raising) any exception               │
    │          │                                                           │
    │          └── Go back to step 1                                       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    A worker never looks at the server's cancellation token. It stops only
    when it receives the poison pill.
    """

    def __init__(self, job_queue: queue.Queue, worker_id: int):
        super().__init__(name=f"worker-{worker_id}", daemon=True)

        self.job_queue = job_queue
        self.worker_id = worker_id

        self.state = WorkerState.IDLE

        # Metrics
        self.jobs_completed = 0
        self.jobs_failed = 0

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while True:
            job = self.job_queue.get()

            if job is _CLOSED:
                break

            self._execute(job)

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} shutting down")

    def _execute(self, job: Job):
        """
        Execute a single job.

        Exceptions are caught here so that one bad connection can never
        take a worker down with it.
        """
        self.state = WorkerState.BUSY
        start_time = time.monotonic()

        try:
            logger.debug(f"Worker {self.worker_id} executing a job")
            job()
            self.jobs_completed += 1
            elapsed = time.monotonic() - start_time
            logger.debug(f"Worker {self.worker_id} completed job in {elapsed:.3f}s")

        except Exception as e:
            elapsed = time.monotonic() - start_time
            logger.exception(
                f"Worker {self.worker_id} job failed after {elapsed:.3f}s: {e}"
            )
            self.jobs_failed += 1

        finally:
            self.state = WorkerState.IDLE


class ThreadPool:
    """
    Fixed-size thread pool.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      ThreadPool Usage                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   pool = ThreadPool(4)          # Workers start immediately         │
    │                                                                      │
    │   pool.execute(job)             # Never blocks, never raises        │
    │                                                                      │
    │   pool.shutdown()               # Drain queue, join all workers     │
    │                                                                      │
    │   with ThreadPool(4) as pool:   # Or let the context manager        │
    │       pool.execute(job)         # call shutdown() for you           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘
    """

    def __init__(self, size: int):
        """
        Create the pool and start its workers.

        Args:
            size: Number of worker threads. Must be at least 1.

        Raises:
            ValueError: If size is less than 1.
        """
        if size < 1:
            raise ValueError("Thread pool size must be greater than 0")

        self._job_queue: queue.Queue = queue.Queue()

        # Protects _closed so that no job can slip in behind the pills
        self._lock = threading.Lock()
        self._closed = False

        self._workers: list[Worker] = [
            Worker(job_queue=self._job_queue, worker_id=worker_id)
            for worker_id in range(size)
        ]
        for worker in self._workers:
            worker.start()

        logger.debug(f"Started thread pool with {size} workers")

    def execute(self, job: Job) -> bool:
        """
        Submit a job for execution.

        Args:
            job: Zero-argument callable.

        Returns:
            True if the job was queued, False if the pool is already closed
            (the job is discarded and will never run).
        """
        with self._lock:
            if self._closed:
                logger.warning("Failed to submit job: thread pool is closed")
                return False

            self._job_queue.put(job)
            return True

    def shutdown(self):
        """
        Close the pool and wait for every worker to finish.

        Jobs submitted before this call all run to completion. Jobs submitted
        after it are refused by execute().
        """
        with self._lock:
            if not self._closed:
                logger.info(f"Shutting down thread pool ({self.queue_size} queued jobs)...")
                self._closed = True
                for _ in self._workers:
                    self._job_queue.put(_CLOSED)

        for worker in self._workers:
            if worker is threading.current_thread():
                continue
            worker.join()

        logger.debug("Thread pool shutdown complete")

    def __enter__(self) -> "ThreadPool":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()
        return False

    # =========================================================================
    # MONITORING
    # =========================================================================

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def size(self) -> int:
        return len(self._workers)

    @property
    def workers(self) -> list[Worker]:
        """The worker threads (read-only view for monitoring and tests)."""
        return list(self._workers)

    @property
    def busy_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.BUSY)

    @property
    def queue_size(self) -> int:
        """Jobs waiting for a worker (includes pills after shutdown)."""
        return self._job_queue.qsize()

    @property
    def stats(self) -> dict:
        """Worker and job counts for logging and tests."""
        return {
            "workers": {
                "total": len(self._workers),
                "alive": sum(1 for w in self._workers if w.is_alive()),
                "busy": self.busy_workers,
            },
            "jobs": {
                "queued": self.queue_size,
                "completed": sum(w.jobs_completed for w in self._workers),
                "failed": sum(w.jobs_failed for w in self._workers),
            },
        }
