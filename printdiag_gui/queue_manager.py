"""
QueueManager: the surface the GUI (or any other consumer) talks to.

Spooler commands can block for seconds, so everything that reaches the
executor runs on a single background worker. The worker being single-threaded
is what keeps scheduled refreshes, forced refreshes and mutations in one
sequential line; the monitor's spool lock covers synchronous callers too.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from PySide6.QtCore import QObject, Signal

from . import diagnostics
from .aging import build_rows
from .evaluator import StateEvaluator
from .executor import DEFAULT_PRINTER, CommandExecutor, CupsCommandExecutor
from .job_types import JobRow, Notice, Outcome, QueryKind, Severity, Snapshot
from .mutations import MutationGateway
from .queue_monitor import QueueMonitor
from .scheduler import RefreshScheduler
from .settings_store import DEFAULTS, HIGHLIGHT_RANGE, KEYS, REFRESH_RANGE, read_bool, read_int, read_str


@dataclass
class ManagerOptions:
    printer_name: str = DEFAULT_PRINTER
    refresh_interval_sec: int = 5
    highlight_minutes: int = 10
    use_sudo: bool = True
    strip_ansi: bool = True
    command_timeout_sec: int = 20

    @classmethod
    def from_settings(cls, settings) -> "ManagerOptions":
        return cls(
            printer_name=read_str(settings, KEYS["printer_name"], DEFAULTS["printer_name"]) or DEFAULT_PRINTER,
            refresh_interval_sec=read_int(
                settings, KEYS["refresh_interval_sec"], DEFAULTS["refresh_interval_sec"], *REFRESH_RANGE
            ),
            highlight_minutes=read_int(
                settings, KEYS["highlight_minutes"], DEFAULTS["highlight_minutes"], *HIGHLIGHT_RANGE
            ),
            use_sudo=read_bool(settings, KEYS["use_sudo"], DEFAULTS["use_sudo"]),
            strip_ansi=read_bool(settings, KEYS["strip_ansi"], DEFAULTS["strip_ansi"]),
            command_timeout_sec=read_int(
                settings, KEYS["command_timeout_sec"], DEFAULTS["command_timeout_sec"], 1, 600
            ),
        )

    def build_executor(self) -> CupsCommandExecutor:
        return CupsCommandExecutor(
            printer_name=self.printer_name,
            use_sudo=self.use_sudo,
            timeout_sec=self.command_timeout_sec,
            strip_escapes=self.strip_ansi,
        )


class QueueManager(QObject):
    """Snapshot access, refresh control and queue mutations."""

    snapshot_published = Signal(object)
    notice = Signal(object)
    highlight_changed = Signal(int)
    refresh_interval_changed = Signal(int)
    description_changed = Signal(str)

    def __init__(
        self,
        executor: Optional[CommandExecutor] = None,
        options: Optional[ManagerOptions] = None,
        evaluator: Optional[StateEvaluator] = None,
        clock: Optional[Callable[[], datetime]] = None,
        parent=None,
    ):
        super().__init__(parent)
        self.options = options or ManagerOptions()
        self._executor = executor or self.options.build_executor()
        self._highlight_minutes = max(0, int(self.options.highlight_minutes))

        self._worker = ThreadPoolExecutor(max_workers=1, thread_name_prefix="spooler")
        self._closed = False

        self.monitor = QueueMonitor(self._executor, evaluator, clock, self)
        self.monitor.snapshot_published.connect(self.snapshot_published)
        self.monitor.notice.connect(self.notice)

        self.gateway = MutationGateway(self.monitor)
        self.scheduler = RefreshScheduler(self.request_refresh, self)

    # ------------- Snapshot access -------------
    def get_snapshot(self) -> Snapshot:
        return self.monitor.snapshot()

    def highlight_threshold(self) -> int:
        return self._highlight_minutes

    def refresh_interval(self) -> int:
        return self.scheduler.interval() if self.scheduler.is_running() else 0

    def job_rows(self, snapshot: Optional[Snapshot] = None, now: Optional[datetime] = None) -> List[JobRow]:
        """Jobs with age labels and highlight flags for the current threshold."""
        snapshot = snapshot or self.get_snapshot()
        return build_rows(snapshot.jobs, now or self.monitor.now(), self._highlight_minutes)

    # ------------- Configuration -------------
    def set_refresh_interval(self, seconds: int) -> None:
        """Restart auto-refresh at a new period; 0 or less turns it off."""
        self.scheduler.start(seconds)
        self.refresh_interval_changed.emit(self.refresh_interval())

    def set_highlight_threshold(self, minutes: int) -> None:
        minutes = max(0, int(minutes))
        if minutes == self._highlight_minutes:
            return
        self._highlight_minutes = minutes
        self.highlight_changed.emit(minutes)

    def start(self) -> Future:
        """Initial refresh plus auto-refresh at the configured interval."""
        future = self.request_refresh()
        self.set_refresh_interval(self.options.refresh_interval_sec)
        return future

    def shutdown(self) -> None:
        self.scheduler.stop()
        self._closed = True
        self._worker.shutdown(wait=False, cancel_futures=True)

    # ------------- Background work -------------
    def request_refresh(self) -> Future:
        return self._submit(self.monitor.refresh)

    def cancel_job(self, job_id: str) -> Future:
        return self._submit(self.gateway.cancel_job, job_id)

    def cancel_all_by_owner(self, owner: str) -> Future:
        return self._submit(self.gateway.cancel_all_by_owner, owner)

    def cancel_all(self) -> Future:
        return self._submit(self.gateway.cancel_all)

    def pause_queue(self) -> Future:
        return self._submit(self.gateway.pause_queue)

    def resume_queue(self) -> Future:
        return self._submit(self.gateway.resume_queue)

    def print_test_page(self) -> Future:
        return self._submit(self.gateway.print_test_page)

    def run_diagnostics(self) -> Future:
        return self._submit(self._diagnose)

    def printer_description(self) -> Future:
        """Friendly printer name; also announced through `description_changed`."""
        return self._submit(self._describe)

    def _diagnose(self) -> List[Outcome]:
        self.monitor.notify(Severity.INFO, "Checking CUPS printer queue...")
        snapshot = self.monitor.refresh()
        findings = diagnostics.run_all(snapshot, self.options.printer_name)
        for finding in findings:
            self.monitor.notify(finding.severity, finding.message)
        return findings

    def _describe(self) -> str:
        description = self.get_snapshot().description
        if not description:
            long_status = self.monitor.query(QueryKind.PRINTER_STATUS_VERBOSE)
            description = self.monitor.evaluator.printer_description(long_status, self.options.printer_name)
        self.description_changed.emit(description)
        return description

    def _submit(self, fn, *args) -> Future:
        if self._closed:
            future: Future = Future()
            future.set_exception(RuntimeError("QueueManager has been shut down"))
            return future
        future = self._worker.submit(fn, *args)
        future.add_done_callback(self._report_crash)
        return future

    def _report_crash(self, future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            self.notice.emit(Notice(Severity.ERROR, f"Queue task failed: {exc}"))
