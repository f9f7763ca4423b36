"""
Job age formatting and stale-job highlighting.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from .job_types import JobAge, JobRow, PrintJob

UNKNOWN_AGE = "unknown"


def age_minutes(submitted_at: Optional[datetime], now: datetime) -> int:
    """Whole minutes elapsed; future timestamps clamp to 0."""
    if submitted_at is None:
        return 0
    seconds = (now - submitted_at).total_seconds()
    return max(0, int(seconds // 60))


def format_age(minutes: int) -> str:
    minutes = max(0, int(minutes))
    if minutes < 1:
        return "<1m"
    if minutes < 60:
        return f"{minutes}m"
    hours, rem = divmod(minutes, 60)
    if hours < 24:
        return f"{hours}h {rem}m"
    days, hours = divmod(hours, 24)
    return f"{days}d {hours}h"


def is_highlighted(minutes: int, threshold: int) -> bool:
    return threshold > 0 and minutes >= threshold


def compute_age(submitted_at: Optional[datetime], now: datetime, threshold: int = 0) -> JobAge:
    """Map a submission time to (label, minutes, highlight)."""
    if submitted_at is None:
        return JobAge(label=UNKNOWN_AGE, minutes=0, highlighted=False)
    minutes = age_minutes(submitted_at, now)
    return JobAge(
        label=format_age(minutes),
        minutes=minutes,
        highlighted=is_highlighted(minutes, threshold),
    )


def build_rows(jobs: Iterable[PrintJob], now: datetime, threshold: int = 0) -> List[JobRow]:
    return [JobRow(job=job, age=compute_age(job.submitted_at, now, threshold)) for job in jobs]
