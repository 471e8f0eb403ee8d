"""Core data structures for benchmark experiments.

This module defines:
    BenchmarkCase -- immutable description of one problem instance.
    JobKey        -- (case, trial) pair identifying one run.
    ResourceBudget -- evaluation / runtime limits of one run.
    LogPoint      -- snapshot of consumption and objective value.
    InitResult    -- cached outcome of the deterministic initialization.
    CreatorInfo   -- researcher metadata stamped into result files.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, Iterable, Iterator, Optional, Sequence, Tuple

DEFAULT_MAX_RUNS = 30
DEFAULT_MAX_TIME_MS = 3_600_000  # one hour per run


@dataclass(frozen=True)
class BenchmarkCase:
    """Immutable problem instance descriptor.

    Attributes:
        name: Instance name, also used as directory name.
        n: Number of nodes (problem size).
        symmetric: True for symmetric instances.
        source: Optional path to the instance data, passed through to solvers.
    """

    name: str
    n: int
    symmetric: bool = True
    source: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name or "/" in self.name or "\\" in self.name or self.name in (".", ".."):
            raise ValueError(f"Invalid benchmark case name: {self.name!r}")
        if self.n < 1:
            raise ValueError(f"Benchmark case {self.name} must have n >= 1, got {self.n}")

    @property
    def kind(self) -> str:
        return "symmetric" if self.symmetric else "asymmetric"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class JobKey:
    """One unit of work: a benchmark case and a 1-based trial index.

    Equality and hashing use ``(case, trial)``. Ordering is by position of
    the case in the enumeration and then by trial, see ``enumerate_jobs``.
    """

    case: BenchmarkCase
    trial: int
    position: int = field(default=0, compare=False, repr=False)

    def sort_key(self) -> Tuple[int, int]:
        return (self.position, self.trial)

    def __lt__(self, other: "JobKey") -> bool:
        if not isinstance(other, JobKey):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    @classmethod
    def of(cls, case: BenchmarkCase, trial: int, position: int = 0) -> "JobKey":
        if trial < 1:
            raise ValueError(f"trial index must be >= 1, got {trial}")
        return cls(position=position, trial=trial, case=case)


def enumerate_jobs(cases: Sequence[BenchmarkCase], max_runs: int) -> Iterator[JobKey]:
    """Yield all jobs: cases in the given order, trials 1..max_runs ascending."""
    for position, case in enumerate(cases):
        for trial in range(1, max_runs + 1):
            yield JobKey.of(case, trial, position)


@dataclass(frozen=True)
class ResourceBudget:
    """Limits of a single run; ``None`` means unlimited."""

    max_evaluations: Optional[int] = None
    max_secondary_evaluations: Optional[int] = None
    max_time_ms: Optional[int] = None

    def __post_init__(self) -> None:
        for name in ("max_evaluations", "max_secondary_evaluations", "max_time_ms"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")

    @classmethod
    def for_case(cls, case: BenchmarkCase) -> "ResourceBudget":
        """Default budget scaled with the instance size."""
        return cls(
            max_evaluations=100 * case.n**3,
            max_secondary_evaluations=100 * case.n**4,
            max_time_ms=DEFAULT_MAX_TIME_MS,
        )

    def with_overrides(self, overrides: Optional[Dict[str, Optional[int]]]) -> "ResourceBudget":
        """Return a copy where every non-None override replaces the field."""
        if not overrides:
            return self
        changes = {k: v for k, v in overrides.items() if v is not None}
        unknown = set(changes) - {"max_evaluations", "max_secondary_evaluations", "max_time_ms"}
        if unknown:
            raise ValueError(f"Unknown budget fields: {sorted(unknown)}")
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class LogPoint:
    """Consumption snapshot of a run.

    Fields:
        consumed_evaluations: Objective function evaluations.
        consumed_secondary_evaluations: Secondary (e.g. distance) evaluations.
        consumed_runtime_ms: Wall-clock milliseconds since run start.
        objective_value: Best objective value so far, None if nothing evaluated.
    """

    consumed_evaluations: int = 0
    consumed_secondary_evaluations: int = 0
    consumed_runtime_ms: int = 0
    objective_value: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogPoint":
        return cls(
            consumed_evaluations=int(data.get("consumed_evaluations", 0)),
            consumed_secondary_evaluations=int(data.get("consumed_secondary_evaluations", 0)),
            consumed_runtime_ms=int(data.get("consumed_runtime_ms", 0)),
            objective_value=data.get("objective_value"),
        )


@dataclass(frozen=True)
class InitResult:
    """Deterministic initialization outcome shared by all trials of a case."""

    case_name: str
    initializer: str
    log_point: LogPoint
    best_solution: Optional[tuple] = None

    def solution_copy(self) -> Optional[list]:
        return list(self.best_solution) if self.best_solution is not None else None


@dataclass(frozen=True)
class CreatorInfo:
    """Who ran the experiment; written into every result file."""

    researcher_name: Optional[str] = None
    affiliation: Optional[str] = None
    email: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


def as_tuple(solution: Optional[Iterable[Any]]) -> Optional[tuple]:
    return tuple(solution) if solution is not None else None
