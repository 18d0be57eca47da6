"""Qt schedulers that drive the state machines.

The state machines own no timers.  These helpers watch ``phase_changed``
and start or stop a ``QTimer`` accordingly:

- ``Ticker`` calls ``tick()`` while the target is running.
- ``StepAdvancer`` calls ``advance_to_next_step()`` once, a short delay
  after a routine enters STEP_FINISHED.
"""

from __future__ import annotations

from PyQt6.QtCore import QObject, QTimer

from .routine import RoutinePhase, RoutineRunner

SINGLE_TIMER_INTERVAL_MS = 250
ROUTINE_INTERVAL_MS = 1000
STEP_ADVANCE_DELAY_MS = 2000


class Ticker(QObject):
    """Periodic ``tick()`` for a ``SingleTimer`` or ``RoutineRunner``."""

    def __init__(
        self,
        target,
        interval_ms: int = SINGLE_TIMER_INTERVAL_MS,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._target = target
        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(interval_ms)
        self._qt_timer.timeout.connect(target.tick)
        target.phase_changed.connect(self._on_phase_changed)
        self._on_phase_changed(None)

    @property
    def active(self) -> bool:
        return self._qt_timer.isActive()

    @property
    def interval_ms(self) -> int:
        return self._qt_timer.interval()

    def stop(self) -> None:
        self._qt_timer.stop()

    def _on_phase_changed(self, _phase) -> None:
        if self._target.is_running:
            if not self._qt_timer.isActive():
                self._qt_timer.start()
        else:
            self._qt_timer.stop()


class StepAdvancer(QObject):
    """Auto-advance a routine after each finished step."""

    def __init__(
        self,
        runner: RoutineRunner,
        delay_ms: int = STEP_ADVANCE_DELAY_MS,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._runner = runner
        self._qt_timer = QTimer(self)
        self._qt_timer.setSingleShot(True)
        self._qt_timer.setInterval(delay_ms)
        self._qt_timer.timeout.connect(runner.advance_to_next_step)
        runner.phase_changed.connect(self._on_phase_changed)

    @property
    def armed(self) -> bool:
        return self._qt_timer.isActive()

    def _on_phase_changed(self, phase) -> None:
        if phase == RoutinePhase.STEP_FINISHED:
            self._qt_timer.start()
        else:
            self._qt_timer.stop()
