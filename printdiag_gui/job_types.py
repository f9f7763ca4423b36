"""
Job, queue-state and snapshot data structures for the print queue manager.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple


class Severity(str, Enum):
    """Classification for notices and mutation outcomes."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"

    def is_failure(self) -> bool:
        return self in {Severity.WARNING, Severity.ERROR}


class QueueStatus(str, Enum):
    """Coarse queue condition inferred from the short status text."""

    IDLE = "idle"
    PRINTING = "printing"
    DISABLED = "disabled"
    UNKNOWN = "unknown"


class QueryKind(str, Enum):
    PRINTER_STATUS = "printerStatus"
    PRINTER_STATUS_VERBOSE = "printerStatusVerbose"
    JOB_LIST_PENDING = "jobListPending"
    JOB_LIST_ALL = "jobListAll"


class MutationKind(str, Enum):
    CANCEL_JOB = "cancelJob"
    CANCEL_ALL = "cancelAll"
    CANCEL_BY_PATTERN = "cancelByPattern"
    DISABLE_QUEUE = "disableQueue"
    ENABLE_QUEUE = "enableQueue"
    PRINT_TEST_PAGE = "printTestPage"


@dataclass(frozen=True)
class PrintJob:
    """One pending or active spool entry."""

    job_id: str
    owner: str = ""
    status_text: str = ""
    file_description: str = ""
    submitted_at: Optional[datetime] = None


@dataclass(frozen=True)
class QueueState:
    """Queue-level facts at the moment of a query."""

    raw_status_line: str = ""
    disabled: bool = False
    status: QueueStatus = QueueStatus.UNKNOWN

    def summary(self) -> str:
        text = "Queue Status: DISABLED / PAUSED" if self.disabled else "Queue Status: ENABLED"
        if self.raw_status_line:
            text += f"   ({self.raw_status_line})"
        return text


@dataclass(frozen=True)
class AutoRecoveryAssessment:
    """Advisory verdict on whether a disabled queue looks safe to re-enable."""

    queue_empty: bool
    recoverable_reason_hint: Optional[str] = None

    @property
    def eligible(self) -> bool:
        return self.queue_empty and self.recoverable_reason_hint is not None


@dataclass(frozen=True)
class Snapshot:
    """Immutable capture of queue state plus job list."""

    state: QueueState = field(default_factory=QueueState)
    jobs: Tuple[PrintJob, ...] = ()
    captured_at: Optional[datetime] = None
    recovery: Optional[AutoRecoveryAssessment] = None
    description: str = ""

    @classmethod
    def empty(cls) -> "Snapshot":
        return cls()

    def jobs_by_owner(self, owner: str) -> Tuple[PrintJob, ...]:
        return tuple(j for j in self.jobs if j.owner == owner)


@dataclass(frozen=True)
class JobAge:
    """Display-ready age of a job relative to some 'now'."""

    label: str
    minutes: int
    highlighted: bool = False


@dataclass(frozen=True)
class JobRow:
    """A job paired with its computed age, as shown in a table row."""

    job: PrintJob
    age: JobAge


@dataclass(frozen=True)
class Outcome:
    """Short classified result of a diagnostic or mutation."""

    severity: Severity
    message: str

    @property
    def ok(self) -> bool:
        return not self.severity.is_failure()


@dataclass(frozen=True)
class Notice:
    """Event emitted to any subscriber (GUI log panel, tests, files)."""

    severity: Severity
    message: str
    at: datetime = field(default_factory=datetime.now)
