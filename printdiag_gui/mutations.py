"""
Mutation gateway: cancel, pause, resume and test pages against the spooler.

Each operation issues its command(s) under the spool lock and then forces an
immediate refresh. Spooler replies are free text with no exit status, so a
reply is never taken as proof of anything: silence is reported as success,
any output as a warning, and the following refresh shows what really happened.
"""

from __future__ import annotations

from typing import Optional

from .job_types import MutationKind, Outcome, Severity
from .queue_monitor import QueueMonitor
from .utils import EXPORT_STAMP

TEST_PAGE_TITLE = "Diagnostic Test Page"


def _first_line(text: str) -> str:
    for line in (text or "").splitlines():
        if line.strip():
            return line.strip()
    return ""


class MutationGateway:
    """Validates and issues destructive queue commands."""

    def __init__(self, monitor: QueueMonitor):
        self._monitor = monitor

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def cancel_job(self, job_id: str) -> Outcome:
        job_id = (job_id or "").strip()
        if not job_id:
            return self._report(Outcome(Severity.WARNING, "No job selected."))

        self._monitor.notify(Severity.INFO, f"Cancelling job {job_id} ...")
        with self._monitor.spool_lock:
            reply = self._monitor.mutate(MutationKind.CANCEL_JOB, job_id)
            outcome = self._classify(reply, f"Cancel requested for {job_id}")
            self._monitor.refresh()
        return self._report(outcome)

    def cancel_all_by_owner(self, owner: str) -> Outcome:
        """Cancel each of the owner's jobs one by one. Not atomic, no retry."""
        owner = (owner or "").strip()
        if not owner:
            return self._report(Outcome(Severity.WARNING, "Selected job has no user."))

        self._monitor.notify(Severity.INFO, f"Cancelling all jobs for user {owner} ...")
        with self._monitor.spool_lock:
            # fresh listing, not the cached snapshot
            current = self._monitor.refresh()
            targets = [job.job_id for job in current.jobs_by_owner(owner)]
            failed = []
            for job_id in targets:
                reply = self._monitor.mutate(MutationKind.CANCEL_JOB, job_id)
                if reply is None or _first_line(reply):
                    failed.append(job_id)
            self._monitor.refresh()

        if not targets:
            outcome = Outcome(Severity.WARNING, f"No jobs found for {owner}.")
        elif failed:
            outcome = Outcome(
                Severity.WARNING,
                f"Cancel requested for {len(targets) - len(failed)} of {len(targets)} jobs by {owner}; "
                f"check: {', '.join(failed)}",
            )
        else:
            outcome = Outcome(Severity.SUCCESS, f"Cancel requested for all jobs by {owner}")
        return self._report(outcome)

    def cancel_all(self) -> Outcome:
        self._monitor.notify(Severity.INFO, "Cancelling ALL jobs in queue ...")
        with self._monitor.spool_lock:
            reply = self._monitor.mutate(MutationKind.CANCEL_ALL)
            outcome = self._classify(reply, "Cancel requested for ALL jobs.")
            self._monitor.refresh()
        return self._report(outcome)

    def pause_queue(self) -> Outcome:
        self._monitor.notify(Severity.INFO, "Pausing queue (cupsdisable) ...")
        with self._monitor.spool_lock:
            reply = self._monitor.mutate(MutationKind.DISABLE_QUEUE)
            outcome = self._classify(reply, "Pause requested.")
            self._monitor.refresh()
        return self._report(outcome)

    def resume_queue(self) -> Outcome:
        self._monitor.notify(Severity.INFO, "Resuming queue (cupsenable) ...")
        with self._monitor.spool_lock:
            reply = self._monitor.mutate(MutationKind.ENABLE_QUEUE)
            outcome = self._classify(reply, "Resume requested.")
            self._monitor.refresh()
        return self._report(outcome)

    def print_test_page(self) -> Outcome:
        """Send a one-line text page through lpr."""
        stamp = self._monitor.now().strftime(EXPORT_STAMP)
        self._monitor.notify(Severity.INFO, "Sending test page to printer ...")
        with self._monitor.spool_lock:
            reply = self._monitor.mutate(MutationKind.PRINT_TEST_PAGE, f"{TEST_PAGE_TITLE} - {stamp}\n")
            outcome = self._classify(reply, "Test page sent - check printer.")
            self._monitor.refresh()
        return self._report(outcome)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _classify(reply: Optional[str], ok_message: str) -> Outcome:
        if reply is None:
            return Outcome(Severity.ERROR, f"{ok_message.rstrip('.')} failed: command could not be run.")
        said = _first_line(reply)
        if said:
            return Outcome(Severity.WARNING, f"{ok_message.rstrip('.')} (spooler said: {said})")
        return Outcome(Severity.SUCCESS, ok_message)

    def _report(self, outcome: Outcome) -> Outcome:
        self._monitor.notify(outcome.severity, outcome.message)
        return outcome
