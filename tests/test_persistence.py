from __future__ import annotations

import csv
import json
from pathlib import Path

import pytest

from benchrun.claims import JobClaimStore, find_stale_temp_files
from benchrun.errors import PersistenceFault
from benchrun.executor import RunExecutor
from benchrun.models import BenchmarkCase, JobKey
from benchrun.persistence import (
    SUMMARY_COLUMNS,
    load_result,
    load_results,
    write_result,
    write_summary_csv,
)
from tests.solvers import EvaluatingSolver


def _marker(root: Path, name: str = "1.json") -> Path:
    path = root / "symmetric" / "a" / name
    assert JobClaimStore(root).try_claim(path)
    return path


def test_write_result_replaces_marker(tmp_path: Path) -> None:
    path = _marker(tmp_path)
    write_result(path, {"trial": 1, "final": {"objective_value": 3.5}})
    assert load_result(path) == {"trial": 1, "final": {"objective_value": 3.5}}
    assert path.read_text(encoding="utf-8").endswith("\n")
    assert find_stale_temp_files(tmp_path) == []


def test_failed_write_keeps_marker_empty(tmp_path: Path) -> None:
    path = _marker(tmp_path)
    with pytest.raises(PersistenceFault):
        write_result(path, {"bad": {1, 2}})
    assert path.stat().st_size == 0
    assert find_stale_temp_files(tmp_path) == []


def test_load_results_skips_markers_and_garbage(tmp_path: Path) -> None:
    complete = _marker(tmp_path, "1.json")
    write_result(complete, {"trial": 1})
    _marker(tmp_path, "2.json")
    (tmp_path / "symmetric" / "a" / "3.json").write_text("{not json", encoding="utf-8")
    (tmp_path / "symmetric" / "a" / ".4.json.1.2.tmp").write_text("{}", encoding="utf-8")

    assert list(load_results(tmp_path)) == [{"trial": 1}]
    assert list(load_results(tmp_path / "missing")) == []


def test_summary_csv_has_one_row_per_run(tmp_path: Path) -> None:
    store = JobClaimStore(tmp_path)
    executor = RunExecutor(EvaluatingSolver, budget_overrides={"max_evaluations": 4})
    cases = [BenchmarkCase("a", 4), BenchmarkCase("b", 5, symmetric=False)]
    for case in cases:
        for trial in (1, 2):
            job = JobKey.of(case, trial)
            path = store.output_path_for(job)
            assert store.try_claim(path)
            executor.execute(job, path)

    out = write_summary_csv(tmp_path, tmp_path / "reports" / "summary.csv")
    with open(out, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert list(rows[0].keys()) == SUMMARY_COLUMNS
    assert len(rows) == 4
    assert {(r["case"], r["kind"], r["trial"]) for r in rows} == {
        ("a", "symmetric", "1"),
        ("a", "symmetric", "2"),
        ("b", "asymmetric", "1"),
        ("b", "asymmetric", "2"),
    }
    assert all(r["consumed_evaluations"] == "4" for r in rows)
    assert all(float(r["objective_value"]) == 97.0 for r in rows)


def test_result_record_is_plain_json(tmp_path: Path) -> None:
    store = JobClaimStore(tmp_path)
    job = JobKey.of(BenchmarkCase("a", 3), 1)
    path = store.output_path_for(job)
    store.try_claim(path)
    RunExecutor(EvaluatingSolver, budget_overrides={"max_evaluations": 1}).execute(job, path)
    record = json.loads(path.read_text(encoding="utf-8"))
    for key in ("format_version", "host", "finished_utc", "budget", "final", "improvements"):
        assert key in record
