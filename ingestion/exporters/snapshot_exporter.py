"""
Hot snapshot export of the working store into a standalone SQLite file.

The copy runs in bounded steps of EXPORT_STEP_PAGES pages so memory stays
bounded and progress is reported after every step. Each step reports one of:

- MORE: pages remain and the step made progress, continue immediately
- CONTENDED: another connection holds a conflicting lock; wait
  EXPORT_BACKOFF_MS and retry the same step
- DONE: the destination is complete and independently valid
- FAILED (any other status): abort the export

There is no deadline on the loop; it retries contention until a terminal
status arrives. The copy is staged beside the final path as
``<name>.partial`` and only moved into place by ``publish``, so a failed
export (or a failure in a later stage that still holds the staged copy)
leaves the previous snapshot untouched.
"""

import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Union
from core.backup import CopyStatus
from core.config import settings
from core.database import SqliteStore
from core.exceptions import ExportError, SnapshotCopyError
import logging

logger = logging.getLogger(__name__)

PARTIAL_SUFFIX = ".partial"


@dataclass
class ExportResult:
    """Outcome of one snapshot export"""
    snapshot_path: Path
    pages_total: int = 0
    steps: int = 0
    contended_steps: int = 0
    source_counts: Dict[str, int] = field(default_factory=dict)
    snapshot_counts: Dict[str, int] = field(default_factory=dict)
    staged_path: Optional[Path] = None


class SnapshotExporter:
    """
    Copy a live store into a durable snapshot file.

    Attributes:
        step_pages: Pages copied per step
        backoff_seconds: Delay before retrying a contended step
    """

    def __init__(
        self,
        step_pages: Optional[int] = None,
        backoff_ms: Optional[int] = None,
        sleep=time.sleep
    ):
        self.step_pages = settings.EXPORT_STEP_PAGES if step_pages is None else step_pages
        self.backoff_seconds = (settings.EXPORT_BACKOFF_MS if backoff_ms is None else backoff_ms) / 1000
        self._sleep = sleep

    def export(self, source: SqliteStore, snapshot_path: Union[str, Path]) -> ExportResult:
        """
        Export ``source`` to ``snapshot_path``, replacing any previous file.

        Raises:
            SnapshotCopyError: On a non-recoverable copy status
            ExportError: If the finished copy cannot be moved into place
        """
        result = self.stage(source, snapshot_path)
        self.publish(result)
        return result

    def stage(self, source: SqliteStore, snapshot_path: Union[str, Path]) -> ExportResult:
        """
        Copy ``source`` to ``<snapshot_path>.partial`` without publishing it.

        The staged file is a complete, valid database. It is removed again
        if the copy fails.

        Raises:
            SnapshotCopyError: On a non-recoverable copy status
            ValueError: If the configured step size is not positive
        """
        snapshot_path = Path(snapshot_path)
        partial_path = snapshot_path.with_name(snapshot_path.name + PARTIAL_SUFFIX)
        snapshot_path.parent.mkdir(parents=True, exist_ok=True)
        partial_path.unlink(missing_ok=True)

        result = ExportResult(snapshot_path=snapshot_path)
        result.source_counts = source.row_counts()
        logger.info(f"Exporting snapshot to {snapshot_path} (source rows: {result.source_counts})")

        destination = SqliteStore.open_file(partial_path)
        completed = False
        try:
            destination.create_schema()
            self._copy(source, destination, result, partial_path)
            result.snapshot_counts = destination.row_counts()
            completed = True
        finally:
            destination.dispose()
            if not completed:
                partial_path.unlink(missing_ok=True)

        result.staged_path = partial_path
        logger.info(
            f"Staged snapshot: {partial_path} ({result.pages_total} pages, "
            f"{result.steps} steps, {result.contended_steps} contended, "
            f"rows: {result.snapshot_counts})"
        )
        return result

    def publish(self, result: ExportResult) -> Path:
        """
        Move a staged snapshot over ``result.snapshot_path``.

        Raises:
            ExportError: If nothing is staged or the rename fails
        """
        if result.staged_path is None:
            raise ExportError(
                "No staged snapshot to publish",
                context={"snapshot_path": str(result.snapshot_path)}
            )

        try:
            os.replace(result.staged_path, result.snapshot_path)
        except OSError as e:
            raise ExportError(
                f"Failed to publish snapshot {result.snapshot_path}",
                context={
                    "snapshot_path": str(result.snapshot_path),
                    "staged_path": str(result.staged_path)
                },
                original_exception=e
            )

        result.staged_path = None
        logger.info(f"Saved snapshot: {result.snapshot_path}")
        return result.snapshot_path

    def _copy(
        self,
        source: SqliteStore,
        destination: SqliteStore,
        result: ExportResult,
        partial_path: Path
    ) -> None:
        with source.begin_incremental_copy(destination, self.step_pages) as copy:
            while True:
                step = copy.step()
                result.steps += 1
                result.pages_total = step.total
                logger.info(f"Export progress: {step.remaining}/{step.total} pages remaining ({step.status.value})")

                if step.status is CopyStatus.MORE:
                    continue
                if step.status is CopyStatus.CONTENDED:
                    result.contended_steps += 1
                    self._sleep(self.backoff_seconds)
                    continue
                if step.status is CopyStatus.DONE:
                    return

                raise SnapshotCopyError(
                    f"Snapshot copy failed with status {step.code}",
                    context={
                        "snapshot_path": str(partial_path),
                        "status_code": step.code,
                        "remaining": step.remaining,
                        "total": step.total
                    },
                    original_exception=getattr(copy, "error", None)
                )
