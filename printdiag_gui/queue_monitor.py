"""
QueueMonitor owns spooler access and the published queue snapshot.

Every query and mutation goes through the spool lock, so at most one command
is in flight against the spooler at a time. A refresh cycle (status ->
job listing -> evaluation -> publish) holds the lock for its whole duration;
a caller that wants to act after it simply takes the lock and waits.
"""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Callable, List, Optional

from PySide6.QtCore import QObject, Signal

from .evaluator import StateEvaluator
from .executor import CommandExecutor
from .job_parser import looks_like_tool_error, looks_like_unsupported_option, parse_job_listing
from .job_types import MutationKind, Notice, PrintJob, QueryKind, Severity, Snapshot


class QueueMonitor(QObject):
    """Snapshot cache plus the single sequential path to the spooler."""

    snapshot_published = Signal(object)
    notice = Signal(object)

    def __init__(
        self,
        executor: CommandExecutor,
        evaluator: Optional[StateEvaluator] = None,
        clock: Optional[Callable[[], datetime]] = None,
        parent=None,
    ):
        super().__init__(parent)
        self._executor = executor
        self._evaluator = evaluator or StateEvaluator()
        self._clock = clock or datetime.now
        self._lock = threading.RLock()
        self._snapshot = Snapshot.empty()
        self._pending_listing_supported = True
        self._refresh_count = 0

    # ------------- Introspection -------------
    @property
    def spool_lock(self) -> threading.RLock:
        return self._lock

    @property
    def evaluator(self) -> StateEvaluator:
        return self._evaluator

    def snapshot(self) -> Snapshot:
        return self._snapshot

    def refresh_count(self) -> int:
        return self._refresh_count

    def now(self) -> datetime:
        return self._clock()

    # ------------- Refresh cycle -------------
    def refresh(self) -> Snapshot:
        """Run one full query/parse/evaluate cycle and publish the result."""
        with self._lock:
            snapshot = self._capture()
            self._publish(snapshot)
            return snapshot

    def _capture(self) -> Snapshot:
        raw_status = self.query(QueryKind.PRINTER_STATUS)
        state = self._evaluator.queue_state(raw_status)
        jobs = self.fetch_jobs()

        recovery = None
        description = ""
        if state.disabled:
            long_status = self.query(QueryKind.PRINTER_STATUS_VERBOSE)
            recovery = self._evaluator.assess_recovery(long_status, jobs)
            description = self._evaluator.printer_description(long_status)

        return Snapshot(
            state=state,
            jobs=tuple(jobs),
            captured_at=self._clock(),
            recovery=recovery,
            description=description,
        )

    def _publish(self, snapshot: Snapshot) -> None:
        self._snapshot = snapshot
        self._refresh_count += 1
        self.snapshot_published.emit(snapshot)

    def fetch_jobs(self) -> List[PrintJob]:
        """Current job list, falling back to the all-jobs listing if needed."""
        with self._lock:
            text = None
            if self._pending_listing_supported:
                text = self.query(QueryKind.JOB_LIST_PENDING)
                if looks_like_unsupported_option(text):
                    self._pending_listing_supported = False
                    self.notify(Severity.INFO, "Spooler rejected the pending-only listing; using the full job list.")
                    text = None
            if text is None:
                text = self.query(QueryKind.JOB_LIST_ALL)
        if looks_like_tool_error(text):
            self.notify(Severity.WARNING, f"Job listing failed: {text.strip().splitlines()[0]}")
            return []
        return parse_job_listing(text)

    # ------------- Spooler access -------------
    def query(self, kind: QueryKind) -> str:
        with self._lock:
            try:
                return self._executor.run_query(kind) or ""
            except Exception as exc:
                self.notify(Severity.ERROR, f"Query {kind.value} failed: {exc}")
                return ""

    def mutate(self, kind: MutationKind, *args: str) -> Optional[str]:
        """Issue a mutation; returns its text, or None if the executor blew up."""
        with self._lock:
            try:
                return self._executor.run_mutation(kind, *args) or ""
            except Exception as exc:
                self.notify(Severity.ERROR, f"Command {kind.value} failed: {exc}")
                return None

    # ------------- Notifications -------------
    def notify(self, severity: Severity, message: str) -> None:
        self.notice.emit(Notice(severity=severity, message=message, at=self._clock()))
