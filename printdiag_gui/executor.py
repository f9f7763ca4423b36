"""
Command executors: the only code that talks to the spooler.

An executor turns a named query or mutation into raw text. It never raises
for spooler-side problems; failures come back as text for the caller to
inspect, the same way `lpstat ... 2>&1` would print them.
"""

from __future__ import annotations

import shlex
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence

from PySide6.QtCore import QProcess

from .job_parser import strip_ansi
from .job_types import MutationKind, QueryKind
from .utils import which

DEFAULT_PRINTER = "HP_LaserJet_Professional_P1102w"
DEFAULT_TIMEOUT_SEC = 20


class CommandExecutor(ABC):
    """Text-in / text-out access to the spooler."""

    @abstractmethod
    def run_query(self, kind: QueryKind) -> str:
        pass

    @abstractmethod
    def run_mutation(self, kind: MutationKind, *args: str) -> str:
        pass


class CupsCommandExecutor(CommandExecutor):
    """Runs CUPS command-line tools (`lpstat`, `cancel`, `cupsenable`...)."""

    def __init__(
        self,
        printer_name: str = DEFAULT_PRINTER,
        use_sudo: bool = True,
        timeout_sec: int = DEFAULT_TIMEOUT_SEC,
        strip_escapes: bool = True,
        on_command: Optional[Callable[[str], None]] = None,
    ):
        self.printer_name = printer_name or DEFAULT_PRINTER
        self.use_sudo = bool(use_sudo)
        self.timeout_sec = max(1, int(timeout_sec))
        self.strip_escapes = bool(strip_escapes)
        self._on_command = on_command

    # ------------------------------------------------------------------
    # Command lines
    # ------------------------------------------------------------------
    def query_args(self, kind: QueryKind) -> List[str]:
        if kind == QueryKind.PRINTER_STATUS:
            return ["lpstat", "-p", self.printer_name]
        if kind == QueryKind.PRINTER_STATUS_VERBOSE:
            return ["lpstat", "-l", "-p", self.printer_name]
        if kind == QueryKind.JOB_LIST_PENDING:
            return ["lpstat", "-W", "not-completed", "-o", "-l"]
        if kind == QueryKind.JOB_LIST_ALL:
            return ["lpstat", "-o", "-l"]
        raise ValueError(f"Unknown query kind: {kind!r}")

    def mutation_args(self, kind: MutationKind, args: Sequence[str] = ()) -> List[str]:
        if kind == MutationKind.CANCEL_JOB:
            return ["cancel", _single_arg(kind, args)]
        if kind == MutationKind.CANCEL_ALL:
            return ["cancel", "-a"]
        if kind == MutationKind.CANCEL_BY_PATTERN:
            return ["cancel", "-u", _single_arg(kind, args)]
        if kind == MutationKind.DISABLE_QUEUE:
            return self._privileged(["cupsdisable", self.printer_name])
        if kind == MutationKind.ENABLE_QUEUE:
            return self._privileged(["cupsenable", self.printer_name])
        if kind == MutationKind.PRINT_TEST_PAGE:
            _single_arg(kind, args)
            return ["lpr", "-P", self.printer_name]
        raise ValueError(f"Unknown mutation kind: {kind!r}")

    def _privileged(self, argv: List[str]) -> List[str]:
        if self.use_sudo:
            # -n: fail instead of prompting, there is no terminal to answer
            return ["sudo", "-n"] + argv
        return argv

    # ------------------------------------------------------------------
    # CommandExecutor
    # ------------------------------------------------------------------
    def run_query(self, kind: QueryKind) -> str:
        return self._run(self.query_args(kind))

    def run_mutation(self, kind: MutationKind, *args: str) -> str:
        argv = self.mutation_args(kind, args)
        # lpr reads the page body from stdin
        stdin_text = args[0] if kind == MutationKind.PRINT_TEST_PAGE else None
        return self._run(argv, stdin_text)

    def _run(self, argv: List[str], stdin_text: Optional[str] = None) -> str:
        pretty = " ".join(shlex.quote(a) for a in argv)
        if self._on_command:
            self._on_command(pretty)
        if not which(argv[0]):
            return f"{argv[0]}: command not found\n"

        timeout_ms = self.timeout_sec * 1000
        # Created on the calling (worker) thread; driven by waitFor*, no event loop needed.
        proc = QProcess()
        proc.setProcessChannelMode(QProcess.MergedChannels)
        if stdin_text is None:
            proc.setStandardInputFile(QProcess.nullDevice())
        proc.start(argv[0], argv[1:])
        if not proc.waitForStarted(timeout_ms):
            return f"{argv[0]}: command failed: {proc.errorString()}\n"
        if stdin_text is not None:
            proc.write(stdin_text.encode("utf-8"))
            proc.closeWriteChannel()
        if proc.state() != QProcess.NotRunning and not proc.waitForFinished(timeout_ms):
            if proc.error() == QProcess.Timedout:
                proc.kill()
                proc.waitForFinished(1500)
                return f"{argv[0]}: timed out after {self.timeout_sec}s\n"
            return f"{argv[0]}: command failed: {proc.errorString()}\n"

        text = bytes(proc.readAllStandardOutput()).decode("utf-8", "replace")
        if self.strip_escapes:
            text = strip_ansi(text)
        return text


def _single_arg(kind: MutationKind, args: Sequence[str]) -> str:
    if len(args) != 1 or not str(args[0]).strip():
        raise ValueError(f"{kind.value} needs exactly one non-empty argument")
    return str(args[0]).strip()
