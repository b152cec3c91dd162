"""
Stepped online copy of a SQLite database.

SQLite's online backup API copies a live database a bounded number of pages
at a time and reports a status after each step. The stdlib exposes it only
as a single blocking call (``sqlite3.Connection.backup``) that invokes a
progress callback after every step. ``SqliteIncrementalCopy`` runs that call
on a worker thread and parks the worker inside the callback, so the caller
drives the copy one ``step()`` at a time and decides itself how to react to
each status.
"""

from dataclasses import dataclass
from typing import Optional, Protocol
import enum
import logging
import queue
import sqlite3
import threading

logger = logging.getLogger(__name__)

# Primary SQLite result codes reported by sqlite3_backup_step
SQLITE_OK = 0
SQLITE_ERROR = 1
SQLITE_BUSY = 5
SQLITE_LOCKED = 6
SQLITE_DONE = 101


class CopyStatus(str, enum.Enum):
    """Outcome of one copy step"""
    MORE = "more"
    CONTENDED = "contended"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class CopyStep:
    """Status and progress reported after one copy step"""
    status: CopyStatus
    code: int
    remaining: int
    total: int


def classify_status(code: int) -> CopyStatus:
    """Map a SQLite result code (primary or extended) to a copy status."""
    primary = code & 0xFF
    if primary == SQLITE_OK:
        return CopyStatus.MORE
    if primary in (SQLITE_BUSY, SQLITE_LOCKED):
        return CopyStatus.CONTENDED
    if primary == SQLITE_DONE:
        return CopyStatus.DONE
    return CopyStatus.FAILED


class IncrementalCopy(Protocol):
    """Operations the snapshot exporter needs from a storage engine."""

    @property
    def remaining(self) -> int: ...

    @property
    def total(self) -> int: ...

    def step(self) -> CopyStep: ...

    def close(self) -> None: ...


class _CopyAborted(Exception):
    """Raised inside the progress callback to abandon an unfinished copy."""


class SqliteIncrementalCopy:
    """
    Copy ``source`` into ``target`` in steps of ``pages`` pages.

    Both connections must be usable from another thread
    (``check_same_thread=False``). The step size is fixed for the lifetime
    of the copy. After a DONE or FAILED step, further calls to ``step()``
    return that terminal step again.
    """

    def __init__(self, source: sqlite3.Connection, target: sqlite3.Connection, pages: int):
        if pages <= 0:
            raise ValueError(f"pages must be positive, got {pages}")
        self._source = source
        self._target = target
        self._pages = pages
        self._steps: "queue.Queue[CopyStep]" = queue.Queue()
        self._resume: "queue.Queue[bool]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._last: Optional[CopyStep] = None
        self._terminal_sent = False
        self.error: Optional[Exception] = None

    @property
    def remaining(self) -> int:
        return self._last.remaining if self._last else 0

    @property
    def total(self) -> int:
        return self._last.total if self._last else 0

    def step(self) -> CopyStep:
        """Copy the next batch of pages and report the resulting status."""
        if self._last is not None and self._last.status in (CopyStatus.DONE, CopyStatus.FAILED):
            return self._last

        if self._thread is None:
            self._thread = threading.Thread(
                target=self._run, name="sqlite-incremental-copy", daemon=True
            )
            self._thread.start()
        else:
            self._resume.put(True)

        self._last = self._steps.get()
        return self._last

    def close(self) -> None:
        """Release the worker, abandoning the copy if it is unfinished."""
        if self._thread is None:
            return
        if self._last is not None and self._last.status in (CopyStatus.MORE, CopyStatus.CONTENDED):
            self._resume.put(False)
        self._thread.join()

    def __enter__(self) -> "SqliteIncrementalCopy":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _run(self) -> None:
        try:
            # sleep=0: backoff on contention is the caller's decision
            self._source.backup(
                self._target, pages=self._pages, progress=self._on_step, sleep=0
            )
        except _CopyAborted:
            logger.debug("Incremental copy abandoned before completion")
        except Exception as e:
            self.error = e
            if not self._terminal_sent:
                self._terminal_sent = True
                self._steps.put(CopyStep(
                    status=CopyStatus.FAILED,
                    code=getattr(e, "sqlite_errorcode", SQLITE_ERROR),
                    remaining=self.remaining,
                    total=self.total,
                ))

    def _on_step(self, status: int, remaining: int, total: int) -> None:
        step = CopyStep(classify_status(status), status, remaining, total)
        if step.status in (CopyStatus.DONE, CopyStatus.FAILED):
            self._terminal_sent = True
            self._steps.put(step)
            return

        self._steps.put(step)
        if not self._resume.get():
            raise _CopyAborted()
