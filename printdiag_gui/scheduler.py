"""
Recurring refresh timer.

States: STOPPED -> start(interval) -> RUNNING -> stop() -> STOPPED.
start() while RUNNING re-arms with the new interval; it never stacks timers.
The timer is single-shot and is only re-armed once the refresh it triggered
has finished, so ticks never overlap however slow the spooler is.
"""

from __future__ import annotations

from concurrent.futures import Future
from enum import Enum
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer, Signal, Slot


class SchedulerState(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"


class RefreshScheduler(QObject):
    """Cancellable recurring trigger for queue refreshes."""

    state_changed = Signal(str)
    # emitted from whichever thread finished the refresh; delivered on ours
    _cycle_done = Signal()

    def __init__(self, tick: Callable[[], Optional[Future]], parent=None):
        super().__init__(parent)
        self._tick = tick
        self._state = SchedulerState.STOPPED
        self._interval_sec = 0
        self._in_flight = False
        self._ticks = 0

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._on_timeout)
        self._cycle_done.connect(self._on_cycle_done)

    # ------------- Introspection -------------
    def state(self) -> SchedulerState:
        return self._state

    def is_running(self) -> bool:
        return self._state == SchedulerState.RUNNING

    def interval(self) -> int:
        return self._interval_sec

    def is_armed(self) -> bool:
        return self._timer.isActive()

    def in_flight(self) -> bool:
        return self._in_flight

    def tick_count(self) -> int:
        return self._ticks

    # ------------- Control -------------
    def start(self, interval_sec: int) -> None:
        try:
            interval = int(interval_sec)
        except (TypeError, ValueError):
            interval = 0
        if interval <= 0:
            self.stop()
            return
        self._interval_sec = interval
        self._timer.stop()
        self._set_state(SchedulerState.RUNNING)
        if not self._in_flight:
            self._arm()

    def stop(self) -> None:
        """Prevent future ticks. A refresh already running still finishes."""
        self._timer.stop()
        self._set_state(SchedulerState.STOPPED)

    # ------------- Internals -------------
    def _set_state(self, state: SchedulerState) -> None:
        if self._state == state:
            return
        self._state = state
        self.state_changed.emit(state.value)

    def _arm(self) -> None:
        self._timer.start(self._interval_sec * 1000)

    @Slot()
    def _on_timeout(self) -> None:
        if self._state != SchedulerState.RUNNING or self._in_flight:
            return
        self._in_flight = True
        self._ticks += 1
        future = None
        try:
            future = self._tick()
        finally:
            if future is None:
                self._on_cycle_done()
        if future is not None:
            future.add_done_callback(lambda _f: self._cycle_done.emit())

    @Slot()
    def _on_cycle_done(self) -> None:
        self._in_flight = False
        if self._state == SchedulerState.RUNNING and not self._timer.isActive():
            self._arm()
