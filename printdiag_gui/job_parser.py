"""
Parser for spooler job listings (`lpstat -o -l` style output).

Records are told apart purely by indentation:
- a line starting with a non-space character opens a new job
  (`<id> <owner> <rest...>`),
- an indented line continues the open job (file / media details),
- a blank line closes the open job.

Nothing here raises on odd input; unparsable fields come back empty or None.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Iterable, List, Optional

from .job_types import PrintJob

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
MERIDIANS = ("AM", "PM")
CONTINUATION_SEPARATOR = " | "

_DATETIME_FORMATS = ("%d %b %Y %H:%M:%S", "%d %b %Y %H:%M")
ANSI_RE = re.compile(r"\x1b[@-_][0-?]*[ -/]*[@-~]|\x1b.")


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences (colour codes from wrapped tools)."""
    return ANSI_RE.sub("", text or "")


def parse_submitted_at(status_text: str) -> Optional[datetime]:
    """
    Best-effort recovery of a submission time from a free-text status tail.

    Looks for `<day> <Mon> <year> <HH:MM[:SS]> [AM|PM]`. Returns a naive local
    datetime, or None when nothing recognisable is found.
    """
    tokens = (status_text or "").split()
    for i, tok in enumerate(tokens):
        if tok not in MONTHS:
            continue
        if i == 0 or i + 2 >= len(tokens):
            continue
        day, year, clock = tokens[i - 1], tokens[i + 1], tokens[i + 2]
        if ":" not in clock:
            continue
        parsed = _parse_fields(day, tok, year, clock)
        if parsed is None:
            continue
        if i + 3 < len(tokens) and tokens[i + 3] in MERIDIANS:
            parsed = _fold_meridian(parsed, tokens[i + 3])
        return parsed
    return None


def _parse_fields(day: str, month: str, year: str, clock: str) -> Optional[datetime]:
    text = f"{day} {month} {year} {clock}"
    for fmt in _DATETIME_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def _fold_meridian(value: datetime, meridian: str) -> datetime:
    # Hours past 12 are already 24-hour; a stray "PM" after them is ignored
    # rather than rolled into the next day.
    hour = value.hour
    if meridian == "AM":
        if hour == 12:
            hour = 0
    elif hour < 12:
        hour += 12
    return value.replace(hour=hour)


class _OpenRecord:
    __slots__ = ("job_id", "owner", "status_text", "files", "submitted_at")

    def __init__(self, job_id: str, owner: str, status_text: str) -> None:
        self.job_id = job_id
        self.owner = owner
        self.status_text = status_text
        self.files: List[str] = []
        self.submitted_at = parse_submitted_at(status_text)

    def freeze(self) -> PrintJob:
        return PrintJob(
            job_id=self.job_id,
            owner=self.owner,
            status_text=self.status_text,
            file_description=CONTINUATION_SEPARATOR.join(self.files),
            submitted_at=self.submitted_at,
        )


def _open_record(line: str) -> _OpenRecord:
    parts = line.split(None, 2)
    job_id = parts[0] if parts else ""
    owner = parts[1] if len(parts) > 1 else ""
    rest = parts[2].strip() if len(parts) > 2 else ""
    return _OpenRecord(job_id, owner, rest)


def parse_job_listing(text: str) -> List[PrintJob]:
    """Turn raw listing text into an ordered list of jobs."""
    return list(iter_jobs((text or "").splitlines()))


def iter_jobs(lines: Iterable[str]) -> Iterable[PrintJob]:
    current: Optional[_OpenRecord] = None
    for line in lines:
        if not line.strip():
            if current is not None and current.job_id:
                yield current.freeze()
            current = None
            continue

        if not line[0].isspace():
            if current is not None and current.job_id:
                yield current.freeze()
            current = _open_record(line)
            continue

        # continuation line; dropped when no job is open
        if current is not None:
            current.files.append(line.strip())

    if current is not None and current.job_id:
        yield current.freeze()


def looks_like_unsupported_option(text: str) -> bool:
    """True when a listing command rejected one of its flags."""
    return "Unknown option" in (text or "") or "invalid option" in (text or "")


TOOL_ERROR_PREFIXES = ("lpstat:", "cancel:", "sudo:", "cupsenable:", "cupsdisable:")


def looks_like_tool_error(text: str) -> bool:
    """True when every non-blank line is a tool complaint (`lpstat: ...`)."""
    lines = [ln.strip() for ln in (text or "").splitlines() if ln.strip()]
    if not lines:
        return False
    return all(ln.startswith(TOOL_ERROR_PREFIXES) for ln in lines)
