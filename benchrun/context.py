"""Per-run state and the narrow view handed to solvers.

``RunContext`` is owned by the single worker executing a run. Solvers never
see it directly; they receive a ``SolverContext`` which only allows
registering evaluations, checking the budget and reading the best state.
"""

from __future__ import annotations

import random
import time
from typing import Any, Callable, List, Optional, Sequence

from benchrun.models import BenchmarkCase, InitResult, LogPoint, ResourceBudget


class RunContext:
    """Counters, best-so-far state and budget check of one run.

    When seeded with an ``InitResult`` the counters start at the consumption
    of the deterministic initialization, which is charged to every run, and
    the best solution starts at the initializer's result.
    """

    def __init__(
        self,
        case: BenchmarkCase,
        budget: ResourceBudget,
        rng: Optional[random.Random] = None,
        init: Optional[InitResult] = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.case = case
        self.budget = budget
        self.random = rng if rng is not None else random.Random()
        self.init_result = init
        self._clock = clock
        self._start = clock()
        self._runtime_offset_ms = 0
        self._terminated = False
        self.evaluations = 0
        self.secondary_evaluations = 0
        self.best_value: Optional[float] = None
        self._best_solution: Optional[List[Any]] = None
        self.improvements: List[LogPoint] = []
        if init is not None:
            lp = init.log_point
            self.evaluations = lp.consumed_evaluations
            self.secondary_evaluations = lp.consumed_secondary_evaluations
            self._runtime_offset_ms = lp.consumed_runtime_ms
            self.best_value = lp.objective_value
            self._best_solution = init.solution_copy()

    def elapsed_ms(self) -> int:
        """Milliseconds consumed, including the charged initialization."""
        return self._runtime_offset_ms + int((self._clock() - self._start) * 1000)

    def register_evaluation(self, value: float, solution: Optional[Sequence[Any]] = None) -> bool:
        """Count one objective evaluation; returns False once the budget is used up.

        Evaluations past the limit are neither counted nor considered for the
        best value.
        """
        limit = self.budget.max_evaluations
        if limit is not None and self.evaluations >= limit:
            self._terminated = True
            return False
        self.evaluations += 1
        if self.best_value is None or value < self.best_value:
            self.best_value = value
            self._best_solution = list(solution) if solution is not None else None
            self.improvements.append(self.log_point())
        return True

    def register_secondary_evaluations(self, count: int = 1) -> None:
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        self.secondary_evaluations += count

    def should_terminate(self) -> bool:
        if self._terminated:
            return True
        b = self.budget
        if (
            (b.max_evaluations is not None and self.evaluations >= b.max_evaluations)
            or (
                b.max_secondary_evaluations is not None
                and self.secondary_evaluations >= b.max_secondary_evaluations
            )
            or (b.max_time_ms is not None and self.elapsed_ms() >= b.max_time_ms)
        ):
            self._terminated = True
        return self._terminated

    @property
    def best_solution(self) -> Optional[List[Any]]:
        return list(self._best_solution) if self._best_solution is not None else None

    def log_point(self) -> LogPoint:
        return LogPoint(
            consumed_evaluations=self.evaluations,
            consumed_secondary_evaluations=self.secondary_evaluations,
            consumed_runtime_ms=self.elapsed_ms(),
            objective_value=self.best_value,
        )

    def view(self) -> "SolverContext":
        return SolverContext(self)


class SolverContext:
    """Capability interface given to solvers."""

    __slots__ = ("__run",)

    def __init__(self, run: RunContext) -> None:
        self.__run = run

    @property
    def case(self) -> BenchmarkCase:
        return self.__run.case

    @property
    def n(self) -> int:
        return self.__run.case.n

    @property
    def random(self) -> random.Random:
        return self.__run.random

    @property
    def init_result(self) -> Optional[InitResult]:
        return self.__run.init_result

    @property
    def best_value(self) -> Optional[float]:
        return self.__run.best_value

    def get_copy_of_best(self) -> Optional[List[Any]]:
        return self.__run.best_solution

    def register_evaluation(self, value: float, solution: Optional[Sequence[Any]] = None) -> bool:
        return self.__run.register_evaluation(value, solution)

    def register_secondary_evaluations(self, count: int = 1) -> None:
        self.__run.register_secondary_evaluations(count)

    def should_terminate(self) -> bool:
        return self.__run.should_terminate()
