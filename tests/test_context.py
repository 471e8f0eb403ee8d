"""Budget enforcement and best-state tracking of RunContext."""

from __future__ import annotations

import pytest

from benchrun.context import RunContext
from benchrun.models import BenchmarkCase, InitResult, LogPoint, ResourceBudget

CASE = BenchmarkCase("kro8", 8)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_evaluation_budget_stops_at_limit() -> None:
    ctx = RunContext(CASE, ResourceBudget(max_evaluations=5))
    accepted = []
    terminate_flags = []
    for i in range(8):
        accepted.append(ctx.register_evaluation(float(100 - i)))
        terminate_flags.append(ctx.should_terminate())

    assert accepted == [True] * 5 + [False] * 3
    # true at the 5th registration, never before
    assert terminate_flags == [False] * 4 + [True] * 4
    assert ctx.log_point().consumed_evaluations == 5
    # rejected evaluations do not change the best value
    assert ctx.best_value == 96.0


def test_time_budget_uses_clock() -> None:
    clock = FakeClock()
    ctx = RunContext(CASE, ResourceBudget(max_time_ms=1000), clock=clock)
    clock.now = 0.5
    assert not ctx.should_terminate()
    assert ctx.elapsed_ms() == 500
    clock.now = 1.0
    assert ctx.should_terminate()
    # termination is sticky
    clock.now = 0.0
    assert ctx.should_terminate()


def test_secondary_budget() -> None:
    ctx = RunContext(CASE, ResourceBudget(max_secondary_evaluations=10))
    ctx.register_secondary_evaluations(9)
    assert not ctx.should_terminate()
    ctx.register_secondary_evaluations()
    assert ctx.should_terminate()
    with pytest.raises(ValueError):
        ctx.register_secondary_evaluations(-1)


def test_unlimited_budget_never_terminates() -> None:
    ctx = RunContext(CASE, ResourceBudget())
    for i in range(1000):
        ctx.register_evaluation(float(i))
    assert not ctx.should_terminate()


def test_best_value_and_improvement_trace() -> None:
    ctx = RunContext(CASE, ResourceBudget())
    assert ctx.best_value is None
    assert ctx.log_point().objective_value is None
    ctx.register_evaluation(10.0, [0, 1, 2])
    ctx.register_evaluation(12.0, [2, 1, 0])
    ctx.register_evaluation(7.0, [1, 0, 2])

    assert ctx.best_value == 7.0
    assert ctx.best_solution == [1, 0, 2]
    assert [lp.consumed_evaluations for lp in ctx.improvements] == [1, 3]
    assert [lp.objective_value for lp in ctx.improvements] == [10.0, 7.0]


def test_init_result_is_charged_to_the_run() -> None:
    init = InitResult(
        case_name=CASE.name,
        initializer="heuristic",
        log_point=LogPoint(3, 40, 200, 50.0),
        best_solution=(1, 2, 3),
    )
    clock = FakeClock()
    ctx = RunContext(CASE, ResourceBudget(max_evaluations=4), init=init, clock=clock)

    assert ctx.evaluations == 3
    assert ctx.secondary_evaluations == 40
    assert ctx.elapsed_ms() == 200
    assert ctx.best_value == 50.0
    assert ctx.best_solution == [1, 2, 3]
    assert not ctx.should_terminate()
    ctx.register_evaluation(60.0)
    assert ctx.should_terminate()
    assert ctx.best_value == 50.0


def test_solver_view_is_narrow() -> None:
    ctx = RunContext(CASE, ResourceBudget(max_evaluations=2))
    view = ctx.view()
    assert view.case is CASE
    assert view.n == 8
    assert not hasattr(view, "budget")
    assert not hasattr(view, "evaluations")
    with pytest.raises(AttributeError):
        view.budget = ResourceBudget()  # type: ignore[attr-defined]

    view.register_evaluation(5.0, [3, 2, 1])
    best = view.get_copy_of_best()
    best.append(99)
    assert view.get_copy_of_best() == [3, 2, 1]
    assert view.best_value == 5.0
    view.register_evaluation(4.0)
    assert view.should_terminate()
