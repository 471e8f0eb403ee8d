"""Command-line entry point: run an experiment described by a config file."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from benchrun.claims import JobClaimStore, delete_incomplete
from benchrun.config import ExperimentConfig, load_config
from benchrun.errors import BenchrunError
from benchrun.executor import RunExecutor
from benchrun.init_cache import DeterministicInitCache
from benchrun.persistence import write_summary_csv
from benchrun.scheduler import Scheduler, SchedulerReport
from benchrun.solvers import make_factory

logger = logging.getLogger("benchrun")


def build_scheduler(config: ExperimentConfig) -> Scheduler:
    """Wire solver factory, init cache, executor and claim store from config."""
    overrides = config.budget_overrides()
    init_factory = (
        make_factory(config.initializer, config.initializer_params)
        if config.initializer
        else None
    )
    executor = RunExecutor(
        solver_factory=make_factory(config.solver, config.solver_params),
        init_cache=DeterministicInitCache(init_factory, budget_overrides=overrides),
        budget_overrides=overrides,
        creator=config.creator,
        seed=config.seed,
    )
    return Scheduler(
        cases=config.instances,
        executor=executor,
        store=JobClaimStore(config.output_dir),
        max_runs=config.max_runs,
        max_threads=config.max_threads,
    )


def run_experiment(
    config: ExperimentConfig,
    cleanup: bool = False,
    summary_path: Optional[str] = None,
    scheduler: Optional[Scheduler] = None,
) -> SchedulerReport:
    """Run the experiment; solver names are resolved before any cleanup."""
    if scheduler is None:
        scheduler = build_scheduler(config)
    if cleanup:
        deleted = delete_incomplete(config.output_dir)
        logger.info("Recovery: deleted %d incomplete files", len(deleted))
    report = scheduler.run()
    if summary_path:
        write_summary_csv(config.output_dir, summary_path)
    return report


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Distributed benchmark experiment runner")
    parser.add_argument("--config", required=True, help="Path to YAML/JSON experiment config")
    parser.add_argument(
        "--cleanup",
        action="store_true",
        help=(
            "Delete zero-byte (crashed) result files before running; "
            "no worker on any machine may be running"
        ),
    )
    parser.add_argument(
        "--cleanup-only",
        action="store_true",
        help="Delete zero-byte result files and exit; no worker on any machine may be running",
    )
    parser.add_argument("--summary", default=None, help="Write a CSV summary to this path")
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
        scheduler = build_scheduler(config)
    except BenchrunError as e:
        print(f"[benchrun] {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cleanup_only:
        deleted = delete_incomplete(config.output_dir)
        print(f"[benchrun] Deleted {len(deleted)} incomplete files under {config.output_dir}")
        return 0

    try:
        report = run_experiment(
            config, cleanup=args.cleanup, summary_path=args.summary, scheduler=scheduler
        )
    except BenchrunError as e:
        logger.error("Experiment aborted: %s", e)
        return 1
    print(
        f"[benchrun] executed={report.executed} skipped={report.skipped} failed={report.failed}"
    )
    return 1 if report.failed else 0


if __name__ == "__main__":
    sys.exit(main())
