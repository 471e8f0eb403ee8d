"""Execution of a single claimed run."""

from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Optional

from benchrun.context import RunContext
from benchrun.errors import InitializerError, PersistenceFault, SolverFault
from benchrun.init_cache import DeterministicInitCache
from benchrun.models import CreatorInfo, JobKey, LogPoint, ResourceBudget
from benchrun.persistence import build_record, write_result
from benchrun.solvers import SolverFactory

logger = logging.getLogger("benchrun.executor")


class RunExecutor:
    def __init__(
        self,
        solver_factory: SolverFactory,
        init_cache: Optional[DeterministicInitCache] = None,
        budget_overrides: Optional[dict] = None,
        creator: Optional[CreatorInfo] = None,
        seed: int = 0,
    ) -> None:
        self.solver_factory = solver_factory
        self.init_cache = init_cache if init_cache is not None else DeterministicInitCache()
        self.budget_overrides = budget_overrides
        self.creator = creator
        self.seed = seed

    def budget_for(self, job: JobKey) -> ResourceBudget:
        return ResourceBudget.for_case(job.case).with_overrides(self.budget_overrides)

    def execute(self, job: JobKey, path: Path) -> LogPoint:
        """Run ``job`` and turn its zero-byte claim marker at ``path`` into a result.

        Raises:
            SolverFault: initialization or the solver failed; nothing written.
            PersistenceFault: the result could not be written; marker untouched.
        """
        case = job.case
        try:
            init = self.init_cache.get(case)
        except InitializerError as e:
            e.job = job
            raise
        try:
            solver = self.solver_factory()
        except Exception as e:
            raise SolverFault(f"Cannot create solver for {case.name}#{job.trial}: {e}", job) from e

        budget = self.budget_for(job)
        run = RunContext(
            case,
            budget,
            rng=random.Random(f"{self.seed}:{case.name}:{job.trial}"),
            init=init,
        )
        logger.info("Run %s#%d started (%s)", case.name, job.trial, solver.display_name())
        view = run.view()
        try:
            solver.begin_run(view)
            solver.solve(view)
            solver.end_run(view)
        except Exception as e:
            raise SolverFault(
                f"Solver {solver.display_name()} failed on {case.name}#{job.trial}: {e}", job
            ) from e

        final = run.log_point()
        try:
            record = build_record(job, solver, budget, run, self.creator, final)
        except Exception as e:
            raise PersistenceFault(f"Cannot build result of {case.name}#{job.trial}: {e}", job) from e
        write_result(path, record)
        logger.info(
            "Run %s#%d finished: value=%s evals=%d secondary=%d time=%dms",
            case.name,
            job.trial,
            final.objective_value,
            final.consumed_evaluations,
            final.consumed_secondary_evaluations,
            final.consumed_runtime_ms,
        )
        return final
