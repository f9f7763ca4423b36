"""
Queue state inference from spooler status text.

All matching is plain substring search against another program's
human-readable output. The keyword tables below are the only thing that
should need editing when the spooler's wording changes.

Known limitation: any occurrence of the disabled marker disables the whole
queue, even if it only shows up inside e.g. a printer description.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .job_types import AutoRecoveryAssessment, PrintJob, QueueState, QueueStatus

DISABLED_MARKER = "disabled"
IDLE_MARKER = "idle"
PRINTING_MARKERS = ("now printing", "printing")
DESCRIPTION_LABEL = "Description:"

# (needle, label); matched case-insensitively, first hit wins
RECOVERABLE_REASONS: Tuple[Tuple[str, str], ...] = (
    ("out of paper", "out of paper"),
    ("media-empty", "media-empty"),
    ("media empty", "media empty"),
)


@dataclass
class StateEvaluator:
    """Derives queue-level facts and the auto-recovery verdict."""

    disabled_marker: str = DISABLED_MARKER
    recoverable_reasons: Tuple[Tuple[str, str], ...] = RECOVERABLE_REASONS

    def is_disabled(self, raw_status: str) -> bool:
        return self.disabled_marker in (raw_status or "")

    def classify(self, raw_status: str) -> QueueStatus:
        raw = raw_status or ""
        if self.is_disabled(raw):
            return QueueStatus.DISABLED
        if IDLE_MARKER in raw:
            return QueueStatus.IDLE
        if any(marker in raw for marker in PRINTING_MARKERS):
            return QueueStatus.PRINTING
        return QueueStatus.UNKNOWN

    def queue_state(self, raw_status: str) -> QueueState:
        raw = (raw_status or "").strip()
        return QueueState(
            raw_status_line=raw,
            disabled=self.is_disabled(raw),
            status=self.classify(raw),
        )

    def recoverable_reason(self, long_status: str) -> Optional[str]:
        haystack = (long_status or "").lower()
        for needle, label in self.recoverable_reasons:
            if needle.lower() in haystack:
                return label
        return None

    def assess_recovery(self, long_status: str, jobs: Sequence[PrintJob]) -> AutoRecoveryAssessment:
        """Advisory only: nothing is ever re-enabled on the strength of this."""
        return AutoRecoveryAssessment(
            queue_empty=len(jobs) == 0,
            recoverable_reason_hint=self.recoverable_reason(long_status),
        )

    @staticmethod
    def printer_description(long_status: str, fallback: str = "") -> str:
        """Friendly printer name from the `Description:` line, if any."""
        for line in (long_status or "").splitlines():
            pos = line.find(DESCRIPTION_LABEL)
            if pos < 0:
                continue
            desc = line[pos + len(DESCRIPTION_LABEL):].strip()
            if desc:
                return desc
        return fallback
