"""Exception hierarchy.

Claim denial and budget exhaustion are not errors and have no exception
type: ``JobClaimStore.try_claim`` returns False and solvers simply return.
"""

from __future__ import annotations


class BenchrunError(Exception):
    """Base class for all errors raised by benchrun."""


class ConfigError(BenchrunError):
    """Invalid experiment configuration."""


class OutputRootError(BenchrunError):
    """The output root cannot be created or written."""


class ClaimIOError(BenchrunError):
    """Creating a claim marker failed for a reason other than existence."""

    def __init__(self, path, cause: OSError) -> None:
        super().__init__(f"Cannot claim {path}: {cause}")
        self.path = path
        self.cause = cause


class RunFault(BenchrunError):
    """Per-job failure; the claim marker stays zero-byte."""

    def __init__(self, message: str, job=None) -> None:
        super().__init__(message)
        self.job = job


class SolverFault(RunFault):
    """The solver raised while executing a run."""


class InitializerError(SolverFault):
    """The deterministic initializer failed for a benchmark case."""


class PersistenceFault(RunFault):
    """Writing the final result failed."""
