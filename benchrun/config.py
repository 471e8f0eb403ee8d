"""Experiment configuration loaded from YAML or JSON."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import yaml

from benchrun.errors import ConfigError
from benchrun.models import DEFAULT_MAX_RUNS, BenchmarkCase, CreatorInfo

BUDGET_KEYS = ("max_evaluations", "max_secondary_evaluations", "max_time_ms")


@dataclass(frozen=True)
class ExperimentConfig:
    """Validated experiment settings.

    Budget fields left as None fall back to the per-case defaults
    (``ResourceBudget.for_case``).
    """

    solver: str
    instances: Tuple[BenchmarkCase, ...]
    output_dir: str = "results"
    max_threads: Optional[int] = None
    max_runs: int = DEFAULT_MAX_RUNS
    max_evaluations: Optional[int] = None
    max_secondary_evaluations: Optional[int] = None
    max_time_ms: Optional[int] = None
    solver_params: Dict[str, Any] = field(default_factory=dict)
    initializer: Optional[str] = None
    initializer_params: Dict[str, Any] = field(default_factory=dict)
    seed: int = 0
    creator: Optional[CreatorInfo] = None
    log_level: str = "INFO"

    def budget_overrides(self) -> Dict[str, Optional[int]]:
        return {k: getattr(self, k) for k in BUDGET_KEYS}


def _positive_int(cfg: Dict[str, Any], key: str, default: Optional[int]) -> Optional[int]:
    value = cfg.get(key, default)
    if value is None:
        return None
    try:
        value = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"'{key}' must be an integer, got {cfg.get(key)!r}") from e
    if value < 1:
        raise ConfigError(f"'{key}' must be positive, got {value}")
    return value


def _mapping(cfg: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = cfg.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a mapping")
    return dict(value)


def _parse_instance(idx: int, raw: Any) -> BenchmarkCase:
    if not isinstance(raw, dict):
        raise ConfigError(f"instances[{idx}] must be a mapping")
    try:
        return BenchmarkCase(
            name=str(raw["name"]),
            n=int(raw["n"]),
            symmetric=bool(raw.get("symmetric", True)),
            source=raw.get("source"),
        )
    except KeyError as e:
        raise ConfigError(f"instances[{idx}] is missing {e.args[0]!r}") from e
    except (TypeError, ValueError) as e:
        raise ConfigError(f"instances[{idx}] is invalid: {e}") from e


def config_from_dict(cfg: Dict[str, Any]) -> ExperimentConfig:
    if not isinstance(cfg, dict):
        raise ConfigError("Configuration root must be a mapping")
    solver = cfg.get("solver")
    if not solver or not isinstance(solver, str):
        raise ConfigError("'solver' must name a solver class, e.g. 'mypkg.solvers:MySolver'")

    raw_instances = cfg.get("instances") or []
    if not isinstance(raw_instances, list) or not raw_instances:
        raise ConfigError("'instances' list must be set and non-empty")
    instances = tuple(_parse_instance(i, raw) for i, raw in enumerate(raw_instances))
    names = [c.name for c in instances]
    if len(set(names)) != len(names):
        raise ConfigError("instance names must be unique")

    initializer = cfg.get("initializer")
    if initializer is not None and not isinstance(initializer, str):
        raise ConfigError("'initializer' must be a fully-qualified name")

    researcher = _mapping(cfg, "researcher")
    creator = (
        CreatorInfo(
            researcher_name=researcher.get("name"),
            affiliation=researcher.get("affiliation"),
            email=researcher.get("email"),
        )
        if researcher
        else None
    )

    try:
        seed = int(cfg.get("seed", 0))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"'seed' must be an integer, got {cfg.get('seed')!r}") from e

    return ExperimentConfig(
        solver=solver,
        instances=instances,
        output_dir=str(cfg.get("output_dir", "results")),
        max_threads=_positive_int(cfg, "max_threads", None),
        max_runs=_positive_int(cfg, "max_runs", DEFAULT_MAX_RUNS) or DEFAULT_MAX_RUNS,
        max_evaluations=_positive_int(cfg, "max_evaluations", None),
        max_secondary_evaluations=_positive_int(cfg, "max_secondary_evaluations", None),
        max_time_ms=_positive_int(cfg, "max_time_ms", None),
        solver_params=_mapping(cfg, "solver_params"),
        initializer=initializer or None,
        initializer_params=_mapping(cfg, "initializer_params"),
        seed=seed,
        creator=creator,
        log_level=str(cfg.get("log_level", "INFO")),
    )


def load_config(config_file: str) -> ExperimentConfig:
    """Load configuration from a YAML (.yml/.yaml) or JSON file."""
    if not os.path.isfile(config_file):
        raise ConfigError(f"Config file not found: {config_file}")
    with open(config_file, "r", encoding="utf-8") as f:
        text = f.read()
    try:
        if config_file.endswith((".yml", ".yaml")):
            cfg = yaml.safe_load(text) or {}
        else:
            cfg = json.loads(text)
    except (yaml.YAMLError, ValueError) as e:
        raise ConfigError(f"Cannot parse {config_file}: {e}") from e
    return config_from_dict(cfg)
