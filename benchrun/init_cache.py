"""Per-process cache of deterministic initialization results.

A deterministic initializer yields the same result for every trial of a
benchmark case, so it is computed once per case and process. Processes do not
share the cache; recomputation elsewhere is wasteful but safe.
"""

from __future__ import annotations

import logging
import random
import threading
from typing import Dict, Optional

from benchrun.context import RunContext
from benchrun.errors import InitializerError
from benchrun.models import BenchmarkCase, InitResult, ResourceBudget, as_tuple
from benchrun.solvers import SolverFactory

logger = logging.getLogger("benchrun.init_cache")


class DeterministicInitCache:
    def __init__(
        self,
        initializer_factory: Optional[SolverFactory] = None,
        budget_overrides: Optional[dict] = None,
    ) -> None:
        self._factory = initializer_factory
        self._budget_overrides = budget_overrides
        self._results: Dict[BenchmarkCase, InitResult] = {}
        self._locks: Dict[BenchmarkCase, threading.Lock] = {}
        self._guard = threading.Lock()
        self.computed_count = 0

    @property
    def enabled(self) -> bool:
        return self._factory is not None

    def _lock_for(self, case: BenchmarkCase) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(case)
            if lock is None:
                lock = self._locks[case] = threading.Lock()
            return lock

    def get(self, case: BenchmarkCase) -> Optional[InitResult]:
        """Return the cached result for ``case``, computing it on first demand.

        Threads asking for the same case wait for the single computation;
        threads asking for other cases are not blocked.
        """
        if self._factory is None:
            return None
        result = self._results.get(case)
        if result is not None:
            return result
        with self._lock_for(case):
            result = self._results.get(case)
            if result is None:
                result = self._compute(self._factory, case)
                with self._guard:
                    self._results[case] = result
                    self.computed_count += 1
        return result

    def _compute(self, factory: SolverFactory, case: BenchmarkCase) -> InitResult:
        budget = ResourceBudget.for_case(case).with_overrides(self._budget_overrides)
        ctx = RunContext(case, budget, rng=random.Random(f"init:{case.name}"))
        try:
            initializer = factory()
            view = ctx.view()
            initializer.begin_run(view)
            initializer.solve(view)
            initializer.end_run(view)
        except Exception as e:
            raise InitializerError(f"Deterministic initialization failed for {case.name}: {e}") from e
        result = InitResult(
            case_name=case.name,
            initializer=initializer.display_name(),
            log_point=ctx.log_point(),
            best_solution=as_tuple(ctx.best_solution),
        )
        logger.info(
            "Initialized %s with %s: value=%s evals=%d time=%dms",
            case.name,
            result.initializer,
            result.log_point.objective_value,
            result.log_point.consumed_evaluations,
            result.log_point.consumed_runtime_ms,
        )
        return result
