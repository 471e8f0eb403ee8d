"""Distributed, crash-safe runner for optimization benchmark experiments.

Exports the data model, the solver interface and the scheduling components.
"""

from benchrun.claims import JobClaimStore, delete_incomplete  # noqa: F401
from benchrun.context import RunContext, SolverContext  # noqa: F401
from benchrun.executor import RunExecutor  # noqa: F401
from benchrun.init_cache import DeterministicInitCache  # noqa: F401
from benchrun.models import (  # noqa: F401
    BenchmarkCase,
    CreatorInfo,
    InitResult,
    JobKey,
    LogPoint,
    ResourceBudget,
)
from benchrun.scheduler import Scheduler  # noqa: F401
from benchrun.solvers import Solver, make_factory  # noqa: F401

__all__ = [
    "BenchmarkCase",
    "CreatorInfo",
    "DeterministicInitCache",
    "InitResult",
    "JobClaimStore",
    "JobKey",
    "LogPoint",
    "ResourceBudget",
    "RunContext",
    "RunExecutor",
    "Scheduler",
    "Solver",
    "SolverContext",
    "delete_incomplete",
    "make_factory",
]
