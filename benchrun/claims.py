"""Filesystem-based job claiming.

Each job owns one file ``<root>/<kind>/<case>/<trial>.json``. Creating that
file with O_EXCL is the only synchronization between workers, threads or
machines sharing the output directory:

* the file does not exist -> the job is free;
* zero bytes               -> claimed, not (yet) complete;
* non-zero bytes           -> complete, holds the persisted result.

After a crash, deleting all zero-byte files makes the affected jobs
claimable again, e.g. ``find <root> -type f -empty -delete``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Union

from benchrun.errors import ClaimIOError, OutputRootError
from benchrun.models import JobKey

logger = logging.getLogger("benchrun.claims")

RESULT_SUFFIX = ".json"
TEMP_SUFFIX = ".tmp"

PathLike = Union[str, Path]


class JobClaimStore:
    def __init__(self, root: PathLike) -> None:
        self.root = Path(root)

    def output_path_for(self, job: JobKey) -> Path:
        return self.root / job.case.kind / job.case.name / f"{job.trial}{RESULT_SUFFIX}"

    def check_writable(self) -> None:
        """Fail before scheduling if the output root cannot hold claim files."""
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputRootError(f"Cannot create output directory {self.root}: {e}") from e
        if not os.access(self.root, os.W_OK | os.X_OK):
            raise OutputRootError(f"Output directory {self.root} is not writable")

    def try_claim(self, path: PathLike) -> bool:
        """Atomically create ``path``; True only for the single creator.

        Returns False if the file already exists. Any other failure raises
        ClaimIOError and must not be treated as "already done".
        """
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ClaimIOError(path, e) from e
        try:
            fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            return False
        except OSError as e:
            raise ClaimIOError(path, e) from e
        os.close(fd)
        return True


def is_complete(path: PathLike) -> bool:
    try:
        return os.stat(path).st_size > 0
    except FileNotFoundError:
        return False


def find_incomplete(root: PathLike) -> List[Path]:
    """Zero-byte result files: claimed by a worker that never finished."""
    root = Path(root)
    if not root.is_dir():
        return []
    return sorted(
        p for p in root.rglob(f"*{RESULT_SUFFIX}") if p.is_file() and p.stat().st_size == 0
    )


def find_stale_temp_files(root: PathLike) -> List[Path]:
    """Leftovers of result writes interrupted by a crash."""
    root = Path(root)
    if not root.is_dir():
        return []
    return sorted(p for p in root.rglob(f".*{TEMP_SUFFIX}") if p.is_file())


def delete_incomplete(root: PathLike) -> List[Path]:
    """Recovery after an unclean shutdown; run only while no worker is active."""
    deleted: List[Path] = []
    for path in find_incomplete(root) + find_stale_temp_files(root):
        try:
            path.unlink()
        except FileNotFoundError:
            continue
        deleted.append(path)
        logger.info("Deleted incomplete %s", path)
    return deleted
