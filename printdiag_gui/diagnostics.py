"""
Queue diagnostics: turn a snapshot into short classified findings.

Nothing here touches the spooler; the caller refreshes first and passes the
resulting snapshot in.
"""

from __future__ import annotations

from typing import List, Optional

from .job_types import AutoRecoveryAssessment, Outcome, QueueStatus, Severity, Snapshot


def check_queue_status(snapshot: Snapshot, printer_name: str) -> List[Outcome]:
    state = snapshot.state
    if state.status == QueueStatus.IDLE:
        return [Outcome(Severity.SUCCESS, "CUPS queue is idle and ready")]
    if state.status == QueueStatus.PRINTING:
        return [Outcome(Severity.SUCCESS, "CUPS queue is enabled and printing")]
    if state.status == QueueStatus.DISABLED:
        findings = [
            Outcome(Severity.ERROR, "CUPS queue is DISABLED"),
            Outcome(Severity.WARNING, f'Run: sudo cupsenable "{printer_name}"'),
        ]
        findings.extend(recovery_advice(snapshot.recovery))
        return findings

    findings = [Outcome(Severity.WARNING, "Unknown CUPS status")]
    if state.raw_status_line:
        findings.append(Outcome(Severity.INFO, state.raw_status_line))
    return findings


def recovery_advice(assessment: Optional[AutoRecoveryAssessment]) -> List[Outcome]:
    """Explain the auto-recovery verdict. Advisory only, nothing is executed."""
    if assessment is None:
        return [Outcome(Severity.WARNING, "Auto-Recovery assessment unavailable.")]
    if assessment.eligible:
        return [
            Outcome(
                Severity.SUCCESS,
                "Auto-Recovery eligible: queue is empty and reason looks recoverable "
                f"({assessment.recoverable_reason_hint}).",
            ),
            Outcome(Severity.INFO, "Would run: cupsenable + cupsaccept for this queue (not auto-executed)."),
        ]
    if not assessment.queue_empty:
        return [Outcome(Severity.WARNING, "Auto-Recovery skipped: queue is not empty (active/pending jobs present).")]
    return [
        Outcome(Severity.WARNING, "Auto-Recovery skipped: reason not recognized as safely recoverable."),
        Outcome(Severity.INFO, "Tip: If this is truly stale (e.g., you added paper), manually re-enable via CUPS."),
    ]


def check_stuck_jobs(snapshot: Snapshot) -> Outcome:
    count = len(snapshot.jobs)
    if count == 0:
        return Outcome(Severity.SUCCESS, "No stuck jobs in queue")
    noun = "job" if count == 1 else "jobs"
    return Outcome(Severity.WARNING, f"Found {count} {noun} in queue")


def run_all(snapshot: Snapshot, printer_name: str) -> List[Outcome]:
    findings = check_queue_status(snapshot, printer_name)
    findings.append(check_stuck_jobs(snapshot))
    return findings
