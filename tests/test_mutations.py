"""Tests for the mutation gateway."""
from printdiag_gui.job_types import MutationKind, QueryKind, Severity
from printdiag_gui.mutations import MutationGateway
from printdiag_gui.queue_monitor import QueueMonitor

from conftest import PRINTER


def _gateway(executor, clock):
    monitor = QueueMonitor(executor, clock=clock)
    notices = []
    monitor.notice.connect(lambda n: notices.append(n))
    return MutationGateway(monitor), monitor, notices


def test_cancel_by_owner_cancels_each_job_individually(qapp, fake_executor, clock):
    gateway, monitor, _ = _gateway(fake_executor, clock)
    monitor.refresh()
    fake_executor.calls.clear()

    outcome = gateway.cancel_all_by_owner("alice")

    assert fake_executor.mutations() == [
        (MutationKind.CANCEL_JOB, (f"{PRINTER}-101",)),
        (MutationKind.CANCEL_JOB, (f"{PRINTER}-103",)),
    ]
    kinds = [kind for kind, _ in fake_executor.mutations()]
    assert MutationKind.CANCEL_ALL not in kinds
    assert MutationKind.CANCEL_BY_PATTERN not in kinds
    assert outcome.severity == Severity.SUCCESS
    assert outcome.ok


def test_cancel_by_owner_keeps_going_after_a_failure(qapp, fake_executor, clock):
    gateway, _, _ = _gateway(fake_executor, clock)
    fake_executor.mutation_replies[MutationKind.CANCEL_JOB] = "cancel: job already completed\n"

    outcome = gateway.cancel_all_by_owner("alice")

    assert len(fake_executor.mutations()) == 2
    assert outcome.severity == Severity.WARNING
    assert "0 of 2" in outcome.message


def test_cancel_by_owner_with_no_matching_jobs(qapp, fake_executor, clock):
    gateway, _, _ = _gateway(fake_executor, clock)
    outcome = gateway.cancel_all_by_owner("mallory")
    assert fake_executor.mutations() == []
    assert outcome.severity == Severity.WARNING


def test_cancel_by_owner_rejects_empty_owner(qapp, fake_executor, clock):
    gateway, monitor, _ = _gateway(fake_executor, clock)
    outcome = gateway.cancel_all_by_owner("  ")
    assert outcome.severity == Severity.WARNING
    assert fake_executor.calls == []
    assert monitor.refresh_count() == 0


def test_cancel_job_then_forced_refresh(qapp, fake_executor, clock):
    gateway, monitor, notices = _gateway(fake_executor, clock)
    outcome = gateway.cancel_job(f"{PRINTER}-102")

    assert outcome.severity == Severity.SUCCESS
    assert fake_executor.calls[0] == (MutationKind.CANCEL_JOB, (f"{PRINTER}-102",))
    assert fake_executor.calls[1] == (QueryKind.PRINTER_STATUS, ())
    assert monitor.refresh_count() == 1
    assert [n.severity for n in notices] == [Severity.INFO, Severity.SUCCESS]


def test_cancel_unknown_job_is_not_fatal(qapp, fake_executor, clock):
    gateway, monitor, _ = _gateway(fake_executor, clock)
    fake_executor.mutation_replies[MutationKind.CANCEL_JOB] = "cancel: Job #999 does not exist.\n"
    outcome = gateway.cancel_job("999")
    assert outcome.severity == Severity.WARNING
    assert "does not exist" in outcome.message
    assert monitor.refresh_count() == 1


def test_cancel_job_rejects_empty_id(qapp, fake_executor, clock):
    gateway, monitor, _ = _gateway(fake_executor, clock)
    outcome = gateway.cancel_job("")
    assert outcome.severity == Severity.WARNING
    assert fake_executor.calls == []
    assert monitor.refresh_count() == 0


def test_cancel_all_uses_bulk_command(qapp, fake_executor, clock):
    gateway, monitor, _ = _gateway(fake_executor, clock)
    outcome = gateway.cancel_all()
    assert fake_executor.mutations() == [(MutationKind.CANCEL_ALL, ())]
    assert outcome.ok
    assert monitor.refresh_count() == 1


def test_pause_without_privilege_is_a_warning(qapp, fake_executor, clock):
    gateway, monitor, _ = _gateway(fake_executor, clock)
    fake_executor.mutation_replies[MutationKind.DISABLE_QUEUE] = "sudo: a password is required\n"
    outcome = gateway.pause_queue()
    assert fake_executor.mutations() == [(MutationKind.DISABLE_QUEUE, ())]
    assert outcome.severity == Severity.WARNING
    assert "a password is required" in outcome.message
    assert monitor.refresh_count() == 1


def test_resume_success(qapp, fake_executor, clock):
    gateway, _, _ = _gateway(fake_executor, clock)
    outcome = gateway.resume_queue()
    assert fake_executor.mutations() == [(MutationKind.ENABLE_QUEUE, ())]
    assert outcome.severity == Severity.SUCCESS
    assert outcome.message == "Resume requested."


def test_executor_crash_is_an_error_outcome(qapp, fake_executor, clock):
    gateway, monitor, _ = _gateway(fake_executor, clock)
    fake_executor.raise_on = MutationKind.ENABLE_QUEUE
    outcome = gateway.resume_queue()
    assert outcome.severity == Severity.ERROR
    assert not outcome.ok
    assert monitor.refresh_count() == 1


def test_cancel_by_owner_uses_a_fresh_listing(qapp, fake_executor, clock):
    gateway, monitor, _ = _gateway(fake_executor, clock)
    monitor.refresh()
    fake_executor.set_listing(f"{PRINTER}-200 alice 64 Sat 17 Oct 2026 01:25:00 PM EDT\n")

    outcome = gateway.cancel_all_by_owner("alice")

    assert fake_executor.mutations() == [(MutationKind.CANCEL_JOB, (f"{PRINTER}-200",))]
    assert outcome.ok
    assert monitor.snapshot().jobs_by_owner("alice")[0].job_id == f"{PRINTER}-200"


def test_print_test_page_sends_stamped_body(qapp, fake_executor, clock):
    gateway, monitor, notices = _gateway(fake_executor, clock)
    outcome = gateway.print_test_page()

    assert fake_executor.mutations() == [
        (MutationKind.PRINT_TEST_PAGE, ("Diagnostic Test Page - 20261017_133000\n",)),
    ]
    assert outcome.severity == Severity.SUCCESS
    assert outcome.message == "Test page sent - check printer."
    assert monitor.refresh_count() == 1
    assert notices[0].message == "Sending test page to printer ..."


def test_print_test_page_reports_lpr_output(qapp, fake_executor, clock):
    gateway, _, _ = _gateway(fake_executor, clock)
    fake_executor.mutation_replies[MutationKind.PRINT_TEST_PAGE] = "lpr: The printer or class does not exist.\n"
    outcome = gateway.print_test_page()
    assert outcome.severity == Severity.WARNING
    assert "does not exist" in outcome.message
