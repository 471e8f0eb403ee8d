"""Result files: crash-safe writing, loading and CSV summary.

A result is written to a temp file next to the claim marker, flushed,
fsync'ed and then renamed over the marker. Readers see either the zero-byte
marker or the complete document, never a truncated one.
"""

from __future__ import annotations

import csv
import json
import logging
import os
import platform
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from benchrun.claims import RESULT_SUFFIX, TEMP_SUFFIX, PathLike
from benchrun.context import RunContext
from benchrun.errors import PersistenceFault
from benchrun.models import CreatorInfo, JobKey, LogPoint, ResourceBudget
from benchrun.solvers import Solver

logger = logging.getLogger("benchrun.persistence")

FORMAT_VERSION = 1

SUMMARY_COLUMNS = [
    "case",
    "kind",
    "n",
    "trial",
    "solver",
    "consumed_evaluations",
    "consumed_secondary_evaluations",
    "consumed_runtime_ms",
    "objective_value",
]


def build_record(
    job: JobKey,
    solver: Solver,
    budget: ResourceBudget,
    run: RunContext,
    creator: Optional[CreatorInfo] = None,
    final: Optional[LogPoint] = None,
) -> Dict[str, Any]:
    init = run.init_result
    if final is None:
        final = run.log_point()
    return {
        "format_version": FORMAT_VERSION,
        "case": job.case.to_dict(),
        "trial": job.trial,
        "solver": {"name": solver.display_name(), "configuration": solver.configuration()},
        "budget": budget.to_dict(),
        "init": (
            {"initializer": init.initializer, "log_point": init.log_point.to_dict()}
            if init is not None
            else None
        ),
        "final": final.to_dict(),
        "improvements": [lp.to_dict() for lp in run.improvements],
        "best_solution": run.best_solution,
        "creator": creator.to_dict() if creator is not None else {},
        "host": platform.node(),
        "finished_utc": datetime.now(timezone.utc).isoformat(),
    }


def _temp_path_for(path: Path) -> Path:
    return path.with_name(f".{path.name}.{os.getpid()}.{threading.get_ident()}{TEMP_SUFFIX}")


def write_result(path: PathLike, record: Dict[str, Any]) -> None:
    """Atomically replace the claim marker at ``path`` with ``record``.

    On failure the temp file is removed, the marker is left untouched and
    PersistenceFault is raised.
    """
    path = Path(path)
    tmp = _temp_path_for(path)
    try:
        payload = json.dumps(record, indent=2, ensure_ascii=False)
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(payload)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except (OSError, TypeError, ValueError) as e:
        try:
            tmp.unlink()
        except FileNotFoundError:
            pass
        except OSError as cleanup_error:
            logger.warning("Could not remove temp file %s: %s", tmp, cleanup_error)
        raise PersistenceFault(f"Failed to write result {path}: {e}") from e


def load_result(path: PathLike) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_results(root: PathLike) -> Iterator[Dict[str, Any]]:
    """Yield all complete results under ``root``, skipping claim markers."""
    root = Path(root)
    if not root.is_dir():
        return
    for file in sorted(root.rglob(f"*{RESULT_SUFFIX}")):
        if file.name.startswith(".") or file.stat().st_size == 0:
            continue
        try:
            yield load_result(file)
        except (OSError, ValueError) as e:
            logger.warning("Failed to load %s: %s", file, e)


def write_summary_csv(root: PathLike, out_path: Optional[PathLike] = None) -> Path:
    """One row per completed run."""
    root = Path(root)
    out = Path(out_path) if out_path is not None else root / "summary.csv"
    rows: List[List[Any]] = []
    for r in load_results(root):
        case = r.get("case", {})
        final = r.get("final", {})
        rows.append(
            [
                case.get("name"),
                "symmetric" if case.get("symmetric", True) else "asymmetric",
                case.get("n"),
                r.get("trial"),
                r.get("solver", {}).get("name"),
                final.get("consumed_evaluations"),
                final.get("consumed_secondary_evaluations"),
                final.get("consumed_runtime_ms"),
                final.get("objective_value"),
            ]
        )
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(SUMMARY_COLUMNS)
        writer.writerows(rows)
    logger.info("Summary of %d runs written: %s", len(rows), out)
    return out
