"""Unit tests for the CUPS command executor (no real spooler needed)."""
import shutil

import pytest

from printdiag_gui import executor as executor_mod
from printdiag_gui.executor import CupsCommandExecutor
from printdiag_gui.job_types import MutationKind, QueryKind


@pytest.fixture
def cups():
    return CupsCommandExecutor(printer_name="Office_Laser", use_sudo=True, timeout_sec=3)


def test_query_args(cups):
    assert cups.query_args(QueryKind.PRINTER_STATUS) == ["lpstat", "-p", "Office_Laser"]
    assert cups.query_args(QueryKind.PRINTER_STATUS_VERBOSE) == ["lpstat", "-l", "-p", "Office_Laser"]
    assert cups.query_args(QueryKind.JOB_LIST_PENDING) == ["lpstat", "-W", "not-completed", "-o", "-l"]
    assert cups.query_args(QueryKind.JOB_LIST_ALL) == ["lpstat", "-o", "-l"]


def test_mutation_args(cups):
    assert cups.mutation_args(MutationKind.CANCEL_JOB, ["Office_Laser-7"]) == ["cancel", "Office_Laser-7"]
    assert cups.mutation_args(MutationKind.CANCEL_ALL) == ["cancel", "-a"]
    assert cups.mutation_args(MutationKind.CANCEL_BY_PATTERN, ["alice"]) == ["cancel", "-u", "alice"]
    assert cups.mutation_args(MutationKind.DISABLE_QUEUE) == ["sudo", "-n", "cupsdisable", "Office_Laser"]
    assert cups.mutation_args(MutationKind.ENABLE_QUEUE) == ["sudo", "-n", "cupsenable", "Office_Laser"]


def test_mutation_args_without_sudo():
    cups = CupsCommandExecutor(printer_name="Office_Laser", use_sudo=False)
    assert cups.mutation_args(MutationKind.ENABLE_QUEUE) == ["cupsenable", "Office_Laser"]


def test_cancel_job_needs_an_id(cups):
    with pytest.raises(ValueError):
        cups.mutation_args(MutationKind.CANCEL_JOB, [])
    with pytest.raises(ValueError):
        cups.mutation_args(MutationKind.CANCEL_JOB, ["  "])


def test_unknown_kind_is_a_programming_error(cups):
    with pytest.raises(ValueError):
        cups.query_args("bogus")


def test_empty_printer_name_falls_back_to_default():
    assert CupsCommandExecutor(printer_name="").printer_name == executor_mod.DEFAULT_PRINTER


def test_missing_tool_returns_text(cups, monkeypatch):
    monkeypatch.setattr(executor_mod, "which", lambda cmd: None)
    assert cups.run_query(QueryKind.PRINTER_STATUS) == "lpstat: command not found\n"


class FakeProcess:
    """Stands in for QProcess; behaviour is chosen per test through class attributes."""

    MergedChannels = "merged"
    NotRunning = "not-running"
    Running = "running"
    Timedout = "timed-out"
    Crashed = "crashed"

    started = True
    finishes = True
    output = b""
    instances = []

    def __init__(self):
        self.program = None
        self.args = None
        self.channel_mode = None
        self.stdin_file = None
        self.written = b""
        self.write_closed = False
        self.killed = False
        self._error = None
        type(self).instances.append(self)

    @staticmethod
    def nullDevice():
        return "/dev/null"

    def setProcessChannelMode(self, mode):
        self.channel_mode = mode

    def setStandardInputFile(self, name):
        self.stdin_file = name

    def start(self, program, args):
        self.program = program
        self.args = list(args)

    def waitForStarted(self, msecs):
        if not self.started:
            self._error = "failed-to-start"
        return self.started

    def write(self, data):
        self.written += data

    def closeWriteChannel(self):
        self.write_closed = True

    def state(self):
        return self.Running

    def waitForFinished(self, msecs):
        if self.killed:
            return True
        if not self.finishes:
            self._error = self.Timedout
        return self.finishes

    def error(self):
        return self._error

    def errorString(self):
        return "No such file or directory" if self._error == "failed-to-start" else "Process operation timed out"

    def kill(self):
        self.killed = True

    def readAllStandardOutput(self):
        return self.output


@pytest.fixture
def fake_process(monkeypatch):
    class Proc(FakeProcess):
        instances = []

    monkeypatch.setattr(executor_mod, "which", lambda cmd: f"/usr/bin/{cmd}")
    monkeypatch.setattr(executor_mod, "QProcess", Proc)
    return Proc


def test_timeout_kills_and_returns_text(cups, fake_process):
    fake_process.finishes = False
    assert cups.run_mutation(MutationKind.CANCEL_ALL) == "cancel: timed out after 3s\n"
    assert fake_process.instances[0].killed


def test_start_failure_returns_text(cups, fake_process):
    fake_process.started = False
    assert cups.run_query(QueryKind.JOB_LIST_ALL) == "lpstat: command failed: No such file or directory\n"


def test_output_is_merged_decoded_and_stripped(cups, fake_process):
    fake_process.output = b"\x1b[1mprinter Office_Laser is idle.\x1b[0m\n"
    assert cups.run_query(QueryKind.PRINTER_STATUS) == "printer Office_Laser is idle.\n"
    proc = fake_process.instances[0]
    assert (proc.program, proc.args) == ("lpstat", ["-p", "Office_Laser"])
    assert proc.channel_mode == fake_process.MergedChannels
    assert proc.stdin_file == "/dev/null"


def test_invalid_utf8_is_replaced(cups, fake_process):
    fake_process.output = b"cancel: bad \xff byte\n"
    assert cups.run_mutation(MutationKind.CANCEL_JOB, "Office_Laser-1") == "cancel: bad \ufffd byte\n"


def test_test_page_is_piped_to_lpr(cups, fake_process):
    cups.run_mutation(MutationKind.PRINT_TEST_PAGE, "Diagnostic Test Page - 20261017_133000\n")
    proc = fake_process.instances[0]
    assert (proc.program, proc.args) == ("lpr", ["-P", "Office_Laser"])
    assert proc.written == b"Diagnostic Test Page - 20261017_133000\n"
    assert proc.write_closed
    assert proc.stdin_file is None


def test_test_page_needs_a_body(cups):
    with pytest.raises(ValueError):
        cups.mutation_args(MutationKind.PRINT_TEST_PAGE, [])


def test_on_command_hook_sees_quoted_command(monkeypatch):
    lines = []
    cups = CupsCommandExecutor(printer_name="Office Laser", on_command=lines.append)
    monkeypatch.setattr(executor_mod, "which", lambda cmd: None)
    cups.run_query(QueryKind.PRINTER_STATUS)
    assert lines == ["lpstat -p 'Office Laser'"]


needs_sh = pytest.mark.skipif(shutil.which("sh") is None, reason="needs a POSIX shell")


@needs_sh
def test_real_process_merges_stderr(qapp):
    cups = CupsCommandExecutor(timeout_sec=5)
    assert cups._run(["sh", "-c", "echo out; echo err 1>&2"]) == "out\nerr\n"


@needs_sh
def test_real_process_times_out(qapp):
    cups = CupsCommandExecutor(timeout_sec=1)
    assert cups._run(["sh", "-c", "sleep 5"]) == "sh: timed out after 1s\n"


@needs_sh
def test_real_process_reads_stdin(qapp):
    cups = CupsCommandExecutor(timeout_sec=5)
    assert cups._run(["sh", "-c", "cat"], "page body\n") == "page body\n"
