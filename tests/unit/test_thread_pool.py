"""
Unit tests for the fixed-size thread pool.
"""

import threading
import time
from collections import Counter

import pytest

from staticd.core.thread_pool import ThreadPool, WorkerState


class ConcurrencyProbe:
    """Records how many jobs run at once and how often each job ran."""

    def __init__(self, duration: float = 0.02):
        self.duration = duration
        self._lock = threading.Lock()
        self.current = 0
        self.peak = 0
        self.runs = Counter()

    def job(self, job_id: int):
        def run():
            with self._lock:
                self.current += 1
                self.peak = max(self.peak, self.current)
            time.sleep(self.duration)
            with self._lock:
                self.current -= 1
                self.runs[job_id] += 1
        return run


class TestConstruction:
    def test_zero_size_rejected(self):
        with pytest.raises(ValueError):
            ThreadPool(0)

    def test_workers_started(self):
        pool = ThreadPool(3)
        try:
            assert pool.size == 3
            assert all(w.is_alive() for w in pool.workers)
            assert [w.name for w in pool.workers] == ["worker-0", "worker-1", "worker-2"]
        finally:
            pool.shutdown()


class TestExecution:
    def test_all_jobs_run_exactly_once(self):
        probe = ConcurrencyProbe()
        jobs, workers = 40, 4

        pool = ThreadPool(workers)
        for job_id in range(jobs):
            assert pool.execute(probe.job(job_id)) is True
        pool.shutdown()

        assert set(probe.runs) == set(range(jobs))
        assert all(count == 1 for count in probe.runs.values())

    def test_concurrency_bounded_by_pool_size(self):
        probe = ConcurrencyProbe(duration=0.05)
        workers = 3

        with ThreadPool(workers) as pool:
            for job_id in range(12):
                pool.execute(probe.job(job_id))

        assert 1 <= probe.peak <= workers

    def test_jobs_run_concurrently(self):
        # Two jobs that wait for each other can only finish in parallel
        barrier = threading.Barrier(2, timeout=5)
        passed = []

        def job():
            barrier.wait()
            passed.append(True)

        with ThreadPool(2) as pool:
            pool.execute(job)
            pool.execute(job)

        assert passed == [True, True]

    def test_failing_job_does_not_kill_worker(self):
        ran = threading.Event()

        def bad_job():
            raise RuntimeError("boom")

        pool = ThreadPool(1)
        pool.execute(bad_job)
        pool.execute(ran.set)
        pool.shutdown()

        assert ran.is_set()
        assert pool.stats["jobs"]["failed"] == 1
        assert pool.stats["jobs"]["completed"] == 1


class TestShutdown:
    def test_shutdown_waits_for_queued_jobs(self):
        done = []
        lock = threading.Lock()

        def slow_job():
            time.sleep(0.05)
            with lock:
                done.append(1)

        pool = ThreadPool(2)
        for _ in range(6):
            pool.execute(slow_job)
        pool.shutdown()

        assert len(done) == 6

    def test_execute_after_shutdown_is_discarded(self):
        ran = threading.Event()

        pool = ThreadPool(2)
        pool.shutdown()

        assert pool.execute(ran.set) is False
        time.sleep(0.05)
        assert not ran.is_set()
        assert pool.closed

    def test_all_workers_joined(self):
        pool = ThreadPool(4)
        pool.shutdown()

        assert not any(w.is_alive() for w in pool.workers)
        assert all(w.state == WorkerState.STOPPED for w in pool.workers)
        assert pool.stats["workers"]["alive"] == 0

    def test_shutdown_is_idempotent(self):
        pool = ThreadPool(2)
        pool.shutdown()
        pool.shutdown()

        assert not any(w.is_alive() for w in pool.workers)

    def test_concurrent_submit_and_shutdown(self):
        # Every job accepted before close must run; refused ones never do
        accepted = []
        ran = Counter()
        lock = threading.Lock()
        pool = ThreadPool(3)

        def make(job_id):
            def run():
                with lock:
                    ran[job_id] += 1
            return run

        def producer(offset):
            for i in range(200):
                job_id = offset + i
                if pool.execute(make(job_id)):
                    with lock:
                        accepted.append(job_id)

        producers = [threading.Thread(target=producer, args=(n * 1000,)) for n in range(3)]
        for t in producers:
            t.start()
        pool.shutdown()
        for t in producers:
            t.join()

        assert sorted(ran) == sorted(accepted)
        assert all(count == 1 for count in ran.values())
