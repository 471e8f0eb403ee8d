"""Solver base class and factories.

Each run gets its own solver instance built by a ``SolverFactory``; solvers
therefore need not be thread-safe and must not share mutable state.
"""

from __future__ import annotations

import copy
import importlib
from typing import Any, Callable, Dict, Optional, Union

from benchrun.context import SolverContext
from benchrun.errors import ConfigError


class Solver:
    """Base class of pluggable optimization algorithms.

    Subclasses implement ``solve`` and call ``ctx.should_terminate()``
    regularly, e.g. after every candidate evaluation. The budget is
    enforced cooperatively only: a solver that never checks can overrun it.
    """

    name: Optional[str] = None

    def solve(self, ctx: SolverContext) -> None:
        raise NotImplementedError

    def begin_run(self, ctx: SolverContext) -> None:
        """Allocate per-run data structures."""

    def end_run(self, ctx: SolverContext) -> None:
        """Release per-run data structures."""

    def configuration(self) -> Dict[str, Any]:
        """Parameter values written into the result file."""
        return {}

    def display_name(self) -> str:
        return self.name or type(self).__name__


SolverFactory = Callable[[], Solver]


def load_object(qualified_name: str) -> Any:
    """Resolve ``package.module:Name`` or ``package.module.Name``."""
    if ":" in qualified_name:
        module_name, _, attr_path = qualified_name.partition(":")
    else:
        module_name, _, attr_path = qualified_name.rpartition(".")
    if not module_name or not attr_path:
        raise ConfigError(f"Not a fully-qualified name: {qualified_name!r}")
    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Cannot import module {module_name!r}: {e}") from e
    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise ConfigError(f"{module_name!r} has no attribute {attr_path!r}") from e
    return obj


def make_factory(
    target: Union[str, Callable[..., Solver]],
    params: Optional[Dict[str, Any]] = None,
) -> SolverFactory:
    """Build a factory constructing a new, independent solver per call.

    ``params`` is deep-copied for every instance so no mutable value is
    aliased between solvers running in different threads.
    """
    ctor = load_object(target) if isinstance(target, str) else target
    if not callable(ctor):
        raise ConfigError(f"Solver target {target!r} is not callable")
    prototype = dict(params or {})

    def factory() -> Solver:
        solver = ctor(**copy.deepcopy(prototype))
        if not isinstance(solver, Solver):
            raise ConfigError(f"{target!r} produced {type(solver).__name__}, not a Solver")
        return solver

    return factory
