import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

# Ensure repo root is on sys.path so `import printdiag_gui...` works in tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from PySide6.QtCore import QCoreApplication  # noqa: E402

from printdiag_gui.executor import CommandExecutor  # noqa: E402
from printdiag_gui.job_types import MutationKind, QueryKind  # noqa: E402

PRINTER = "HP_LaserJet_Professional_P1102w"
NOW = datetime(2026, 10, 17, 13, 30, 0)

IDLE_STATUS = f"printer {PRINTER} is idle.  enabled since Sat 17 Oct 2026 09:00:00 AM EDT\n"
DISABLED_STATUS = (
    f"printer {PRINTER} disabled since Sat 17 Oct 2026 11:02:10 AM EDT -\n"
    "\tPaused\n"
)
VERBOSE_MEDIA_EMPTY = (
    f"printer {PRINTER} disabled since Sat 17 Oct 2026 11:02:10 AM EDT -\n"
    "\tPaused\n"
    "\tForm mounted:\n"
    "\tAlerts: Media-Empty-Error\n"
    "\tDescription: HP LaserJet Professional P1102w\n"
    "\tLocation: Office\n"
)

THREE_JOBS = (
    f"{PRINTER}-101 alice 1024 Sat 17 Oct 2026 01:05:09 PM EDT\n"
    "\tqueued for HP_LaserJet_Professional_P1102w\n"
    f"{PRINTER}-102 bob 2048 Sat 17 Oct 2026 01:20:00 PM EDT\n"
    "\tqueued for HP_LaserJet_Professional_P1102w\n"
    f"{PRINTER}-103 alice 512 Sat 17 Oct 2026 01:29:30 PM EDT\n"
)


class FakeExecutor(CommandExecutor):
    """Records every call; can hold one query open until released."""

    def __init__(
        self,
        status: str = IDLE_STATUS,
        listing: str = "",
        verbose: str = "",
        pending_listing: Optional[str] = None,
    ):
        self.responses: Dict[QueryKind, str] = {
            QueryKind.PRINTER_STATUS: status,
            QueryKind.PRINTER_STATUS_VERBOSE: verbose,
            QueryKind.JOB_LIST_PENDING: listing if pending_listing is None else pending_listing,
            QueryKind.JOB_LIST_ALL: listing,
        }
        self.mutation_replies: Dict[MutationKind, str] = {}
        self.raise_on: Optional[object] = None
        self.calls: List[Tuple[object, Tuple[str, ...]]] = []

        self.block_kind: Optional[QueryKind] = None
        self.entered = threading.Event()
        self.release = threading.Event()

        self._guard = threading.Lock()
        self._active = 0
        self.max_active = 0

    def set_listing(self, text: str) -> None:
        self.responses[QueryKind.JOB_LIST_PENDING] = text
        self.responses[QueryKind.JOB_LIST_ALL] = text

    def mutations(self) -> List[Tuple[object, Tuple[str, ...]]]:
        return [c for c in self.calls if isinstance(c[0], MutationKind)]

    def queries(self) -> List[QueryKind]:
        return [c[0] for c in self.calls if isinstance(c[0], QueryKind)]

    def _enter(self, kind, args) -> None:
        with self._guard:
            self._active += 1
            self.max_active = max(self.max_active, self._active)
            self.calls.append((kind, tuple(args)))

    def _leave(self) -> None:
        with self._guard:
            self._active -= 1

    def run_query(self, kind: QueryKind) -> str:
        self._enter(kind, ())
        try:
            if self.raise_on == kind:
                raise OSError("spooler went away")
            if self.block_kind == kind:
                self.block_kind = None
                self.entered.set()
                self.release.wait(5)
            return self.responses.get(kind, "")
        finally:
            self._leave()

    def run_mutation(self, kind: MutationKind, *args: str) -> str:
        self._enter(kind, args)
        try:
            if self.raise_on == kind:
                raise OSError("permission denied")
            return self.mutation_replies.get(kind, "")
        finally:
            self._leave()


@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def fake_executor():
    return FakeExecutor(listing=THREE_JOBS)
