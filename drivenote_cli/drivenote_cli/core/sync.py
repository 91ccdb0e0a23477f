"""Upload vault notes to OneDrive, once or on a fixed interval."""

from __future__ import annotations

import logging
import posixpath
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from tqdm import tqdm

from .errors import AuthError, DriveError
from .graph import GraphClient
from .notes import NoteVault

logger = logging.getLogger(__name__)


@dataclass
class SyncReport:
    uploaded: List[str] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)
    unchanged: int = 0


class VaultSync:
    """Uploads notes whose modification time changed since the last run.

    Upload times are remembered for the lifetime of the process only, so
    the first run after start-up uploads every note.
    """

    def __init__(self, client: GraphClient, vault: NoteVault, remote_dir: str):
        self.client = client
        self.vault = vault
        self.remote_dir = "/" + remote_dir.strip("/") if remote_dir.strip("/") else "/"
        self._synced: Dict[str, float] = {}

    def remote_path(self, rel: str) -> str:
        return posixpath.join(self.remote_dir, rel)

    def run_once(self, *, progress: bool = True) -> SyncReport:
        report = SyncReport()
        pending = []
        for path in self.vault.iter_notes():
            rel = path.relative_to(self.vault.root).as_posix()
            try:
                mtime = path.stat().st_mtime
            except OSError as e:
                logger.error("Cannot read %s: %s", rel, e)
                report.failed.append((rel, str(e)))
                continue
            if self._synced.get(rel) == mtime:
                report.unchanged += 1
                continue
            pending.append((path, rel, mtime))

        with tqdm(total=len(pending), unit="note", desc="Syncing", disable=not progress) as bar:
            for path, rel, mtime in pending:
                try:
                    self.client.upload(self.remote_path(rel), path.read_bytes())
                except AuthError:
                    raise
                except (DriveError, OSError) as e:
                    logger.error("Failed to upload %s: %s", rel, e)
                    report.failed.append((rel, str(e)))
                else:
                    self._synced[rel] = mtime
                    report.uploaded.append(rel)
                bar.update(1)
        logger.info(
            "Sync finished: %d uploaded, %d failed, %d unchanged",
            len(report.uploaded), len(report.failed), report.unchanged,
        )
        return report


def run_periodic(
    task: Callable[[], object],
    interval: float,
    *,
    sleep: Callable[[float], None] = time.sleep,
    max_runs: Optional[int] = None,
) -> int:
    """Call ``task`` every ``interval`` seconds and return the number of runs.

    The wait starts once the previous run has finished, so two runs never
    overlap.  A failed run is logged and the schedule continues.
    """
    runs = 0
    while max_runs is None or runs < max_runs:
        try:
            task()
        except (DriveError, OSError) as e:
            logger.error("Scheduled sync failed: %s", e)
        runs += 1
        if max_runs is not None and runs >= max_runs:
            break
        sleep(interval)
    return runs
