"""Worker pool driving the experiment matrix.

Workers do not talk to each other. Every worker walks the same job sequence
(cases in order, trials 1..max_runs) and executes exactly the jobs whose
claim marker it manages to create. Adding workers, processes or machines
pointing at the same output directory only changes throughput.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from benchrun.claims import JobClaimStore
from benchrun.errors import ClaimIOError, RunFault
from benchrun.executor import RunExecutor
from benchrun.models import DEFAULT_MAX_RUNS, BenchmarkCase, enumerate_jobs

logger = logging.getLogger("benchrun.scheduler")


@dataclass
class WorkerStats:
    """Counters owned by one worker."""

    worker_id: int
    executed: int = 0
    skipped: int = 0
    failed: int = 0


@dataclass
class SchedulerReport:
    workers: List[WorkerStats] = field(default_factory=list)

    @property
    def executed(self) -> int:
        return sum(w.executed for w in self.workers)

    @property
    def skipped(self) -> int:
        return sum(w.skipped for w in self.workers)

    @property
    def failed(self) -> int:
        return sum(w.failed for w in self.workers)


class Scheduler:
    def __init__(
        self,
        cases: Sequence[BenchmarkCase],
        executor: RunExecutor,
        store: JobClaimStore,
        max_runs: int = DEFAULT_MAX_RUNS,
        max_threads: Optional[int] = None,
    ) -> None:
        if max_runs < 1:
            raise ValueError(f"max_runs must be >= 1, got {max_runs}")
        if max_threads is None:
            max_threads = os.cpu_count() or 1
        if max_threads < 1:
            raise ValueError(f"max_threads must be >= 1, got {max_threads}")
        self.cases = tuple(cases)
        self.executor = executor
        self.store = store
        self.max_runs = max_runs
        self.max_threads = max_threads

    def run_worker(self, worker_id: int = 0) -> WorkerStats:
        """One worker loop; returns when every job has been seen once.

        ClaimIOError propagates; per-job faults are logged and skipped.
        """
        stats = WorkerStats(worker_id)
        for job in enumerate_jobs(self.cases, self.max_runs):
            path = self.store.output_path_for(job)
            if not self.store.try_claim(path):
                stats.skipped += 1
                logger.debug("[worker %d] %s#%d taken, skipping", worker_id, job.case.name, job.trial)
                continue
            try:
                self.executor.execute(job, path)
            except RunFault:
                stats.failed += 1
                logger.exception(
                    "[worker %d] %s#%d failed, claim marker left at %s",
                    worker_id,
                    job.case.name,
                    job.trial,
                    path,
                )
                continue
            stats.executed += 1
        return stats

    def run(self) -> SchedulerReport:
        """Run ``max_threads`` workers and wait for all of them.

        If a worker stopped on ClaimIOError (or crashed), the first such
        error is raised after the remaining workers have finished.
        """
        self.store.check_writable()
        results: List[Optional[WorkerStats]] = [None] * self.max_threads
        errors: List[BaseException] = []
        errors_lock = threading.Lock()

        def target(worker_id: int) -> None:
            try:
                results[worker_id] = self.run_worker(worker_id)
            except ClaimIOError as e:
                logger.error("[worker %d] stopped: %s", worker_id, e)
                with errors_lock:
                    errors.append(e)
            except Exception as e:
                logger.exception("[worker %d] crashed", worker_id)
                with errors_lock:
                    errors.append(e)

        logger.info(
            "Scheduling %d cases x %d runs on %d threads into %s",
            len(self.cases),
            self.max_runs,
            self.max_threads,
            self.store.root,
        )
        threads = [
            threading.Thread(target=target, args=(i,), name=f"benchrun-worker-{i}")
            for i in range(self.max_threads)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        report = SchedulerReport([s for s in results if s is not None])
        logger.info(
            "Done: executed=%d skipped=%d failed=%d",
            report.executed,
            report.skipped,
            report.failed,
        )
        if errors:
            raise errors[0]
        return report
