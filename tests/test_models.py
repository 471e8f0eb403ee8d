from __future__ import annotations

import pytest

from benchrun.models import (
    BenchmarkCase,
    JobKey,
    LogPoint,
    ResourceBudget,
    enumerate_jobs,
)


def test_default_budget_scales_with_instance_size() -> None:
    budget = ResourceBudget.for_case(BenchmarkCase("eil10", 10))
    assert budget.max_evaluations == 100 * 10**3
    assert budget.max_secondary_evaluations == 100 * 10**4
    assert budget.max_time_ms == 3_600_000


def test_budget_overrides_replace_only_given_fields() -> None:
    budget = ResourceBudget.for_case(BenchmarkCase("eil10", 10)).with_overrides(
        {"max_evaluations": 50, "max_time_ms": None}
    )
    assert budget.max_evaluations == 50
    assert budget.max_secondary_evaluations == 1_000_000
    assert budget.max_time_ms == 3_600_000


def test_budget_rejects_unknown_and_non_positive_fields() -> None:
    with pytest.raises(ValueError):
        ResourceBudget().with_overrides({"max_fes": 10})
    with pytest.raises(ValueError):
        ResourceBudget(max_evaluations=0)


@pytest.mark.parametrize("name", ["", "a/b", "..", "x\\y"])
def test_case_name_must_be_a_plain_directory_name(name: str) -> None:
    with pytest.raises(ValueError):
        BenchmarkCase(name, 5)


def test_case_kind() -> None:
    assert BenchmarkCase("a", 3).kind == "symmetric"
    assert BenchmarkCase("b", 3, symmetric=False).kind == "asymmetric"
    with pytest.raises(ValueError):
        BenchmarkCase("c", 0)


def test_enumeration_order_is_cases_then_trials(three_cases) -> None:
    jobs = list(enumerate_jobs(three_cases[:2], 3))
    assert [(j.case.name, j.trial) for j in jobs] == [
        ("a5", 1),
        ("a5", 2),
        ("a5", 3),
        ("b7", 1),
        ("b7", 2),
        ("b7", 3),
    ]
    assert sorted(reversed(jobs)) == jobs


def test_job_key_rejects_trial_zero() -> None:
    with pytest.raises(ValueError):
        JobKey.of(BenchmarkCase("a", 3), 0)


def test_log_point_from_partial_dict() -> None:
    lp = LogPoint.from_dict({"consumed_evaluations": 4, "objective_value": 12.5})
    assert lp == LogPoint(4, 0, 0, 12.5)


def test_job_key_identity_includes_the_case() -> None:
    sym = JobKey.of(BenchmarkCase("eil51", 51), 1)
    asym = JobKey.of(BenchmarkCase("br17", 17, symmetric=False), 1)
    assert sym != asym
    assert len({sym, asym}) == 2
    assert JobKey.of(BenchmarkCase("eil51", 51), 1, position=3) == sym
    assert {sym: "a"}[JobKey.of(BenchmarkCase("eil51", 51), 1)] == "a"
