"""Routine runner: a list of named timed steps played back to back.

States
------
IDLE              No routine loaded.
RUNNING           Current step counting down.
PAUSED            Current step frozen.
STEP_FINISHED     Current step hit zero; waiting for
                  ``advance_to_next_step()`` (the scheduler calls it ~2 s
                  later).  The step index is not advanced yet.
ROUTINE_FINISHED  Last step hit zero, or skipped past the end.

Transitions
-----------
any                → RUNNING            (start_routine, non-empty)
RUNNING            → STEP_FINISHED      (tick reaches 0, more steps)
RUNNING            → ROUTINE_FINISHED   (tick reaches 0, last step)
STEP_FINISHED      → RUNNING            (advance_to_next_step)
RUNNING | PAUSED   → RUNNING | ROUTINE_FINISHED   (skip_step)
RUNNING | PAUSED   → RUNNING            (go_to_step)
RUNNING ↔ PAUSED                        (pause / resume)
any                → IDLE               (reset)

Tick modes
----------
By default each ``tick()`` takes one second off the current step, so the
scheduler must call it at 1 Hz and dropped ticks show up as drift.  A
runner built with ``clock=`` instead recomputes the step countdown from
monotonic elapsed time with the same ``RunClock`` the single timer uses.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from PyQt6.QtCore import QObject, pyqtSignal

from .clock import MonotonicClock, RunClock
from .engine import Cue, play_cue

logger = logging.getLogger(__name__)


# ── routine data ──────────────────────────────────────────────────────────


def format_step_name(minutes: int) -> str:
    """Default label for an unnamed step: ``5 min``, ``1h``, ``1h 30m``."""
    if minutes < 60:
        return f"{minutes} min"
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}m" if mins else f"{hours}h"


@dataclass(frozen=True)
class RoutineStep:
    minutes: int
    name: str = ""

    def __post_init__(self) -> None:
        minutes = max(1, int(self.minutes))
        object.__setattr__(self, "minutes", minutes)
        name = (self.name or "").strip()
        object.__setattr__(self, "name", name or format_step_name(minutes))

    @property
    def seconds(self) -> int:
        return self.minutes * 60


@dataclass(frozen=True)
class Routine:
    id: str
    name: str
    emoji: str = "📋"
    steps: tuple[RoutineStep, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "steps", tuple(self.steps))

    @property
    def total_minutes(self) -> int:
        return sum(step.minutes for step in self.steps)

    @property
    def is_runnable(self) -> bool:
        return len(self.steps) > 0


class RoutinePhase(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    STEP_FINISHED = "step_finished"
    ROUTINE_FINISHED = "routine_finished"


# ── runner ────────────────────────────────────────────────────────────────


class RoutineRunner(QObject):
    """Runs a ``Routine`` step by step.

    Signals
    -------
    phase_changed(new_phase: RoutinePhase)
        Emitted on every phase transition.
    step_changed(step_index: int)
        Emitted when a different step is loaded.
    remaining_changed(step_remaining_seconds: int)
        Emitted whenever the current step's countdown changes.
    """

    phase_changed = pyqtSignal(object)
    step_changed = pyqtSignal(int)
    remaining_changed = pyqtSignal(int)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        clock: MonotonicClock | None = None,
        cue_player=None,
    ) -> None:
        super().__init__(parent)
        self._cue_player = cue_player
        # None → tick-count mode
        self._run_clock: RunClock | None = RunClock(clock) if clock is not None else None

        self._phase: RoutinePhase = RoutinePhase.IDLE
        self._routine: Routine | None = None
        self._index: int = 0
        self._step_total: int = 0
        self._step_remaining: int = 0

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def phase(self) -> RoutinePhase:
        return self._phase

    @property
    def active_routine(self) -> Routine | None:
        return self._routine

    @property
    def current_step_index(self) -> int:
        return self._index

    @property
    def step_total_seconds(self) -> int:
        return self._step_total

    @property
    def step_remaining_seconds(self) -> int:
        return self._step_remaining

    @property
    def is_running(self) -> bool:
        return self._phase == RoutinePhase.RUNNING

    @property
    def uses_monotonic_clock(self) -> bool:
        return self._run_clock is not None

    # ══════════════════════════════════════════════════════════════════
    #  QUERIES
    # ══════════════════════════════════════════════════════════════════

    def current_step(self) -> RoutineStep | None:
        if self._routine is None or self._phase == RoutinePhase.IDLE:
            return None
        if not 0 <= self._index < len(self._routine.steps):
            return None
        return self._routine.steps[self._index]

    def total_routine_minutes(self) -> int:
        if self._routine is None:
            return 0
        return self._routine.total_minutes

    def elapsed_routine_minutes(self) -> float:
        """Completed steps plus the fraction of the current one."""
        if self._routine is None:
            return 0.0
        steps = self._routine.steps
        elapsed = float(sum(s.minutes for s in steps[: self._index]))
        if self._step_total > 0:
            elapsed += (self._step_total - self._step_remaining) / 60
        return elapsed

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start_routine(self, routine: Routine | None) -> None:
        """Load *routine* and start its first step.

        A routine without steps is ignored.
        """
        if routine is None or not routine.steps:
            return
        self._routine = routine
        logger.debug("Routine %r started (%d steps)", routine.name, len(routine.steps))
        self._load_step(0)

    def tick(self) -> None:
        if self._phase != RoutinePhase.RUNNING or self._routine is None:
            return

        if self._run_clock is None:
            remaining = max(0, self._step_remaining - 1)
        else:
            remaining = self._run_clock.remaining(self._step_total)
            if remaining == self._step_remaining:
                return

        self._step_remaining = remaining
        if remaining > 0:
            self.remaining_changed.emit(remaining)
            return

        if self._index + 1 < len(self._routine.steps):
            self._phase = RoutinePhase.STEP_FINISHED
            cue = Cue.STEP_COMPLETE
        else:
            self._phase = RoutinePhase.ROUTINE_FINISHED
            cue = Cue.ROUTINE_COMPLETE
        if self._run_clock is not None:
            self._run_clock.clear()
        logger.debug("Routine step %d done → %s", self._index, self._phase.value)

        play_cue(self._cue_player, cue)
        self.remaining_changed.emit(0)
        self.phase_changed.emit(self._phase)

    def advance_to_next_step(self) -> None:
        """Leave STEP_FINISHED and start the following step."""
        if self._phase != RoutinePhase.STEP_FINISHED or self._routine is None:
            return
        next_index = self._index + 1
        if next_index >= len(self._routine.steps):
            self._finish_routine()
            return
        self._load_step(next_index)

    def skip_step(self) -> None:
        if self._phase not in (RoutinePhase.RUNNING, RoutinePhase.PAUSED):
            return
        next_index = self._index + 1
        if next_index >= len(self._routine.steps):
            self._finish_routine()
            return
        self._load_step(next_index)

    def go_to_step(self, step_index: int) -> None:
        if self._phase not in (RoutinePhase.RUNNING, RoutinePhase.PAUSED):
            return
        if not 0 <= step_index < len(self._routine.steps):
            return
        self._load_step(step_index)

    def pause(self) -> None:
        if self._phase != RoutinePhase.RUNNING:
            return
        if self._run_clock is not None:
            self._run_clock.pause()
        self._set_phase(RoutinePhase.PAUSED)

    def resume(self) -> None:
        if self._phase != RoutinePhase.PAUSED:
            return
        if self._run_clock is not None:
            self._run_clock.resume()
        self._set_phase(RoutinePhase.RUNNING)

    def reset(self) -> None:
        """Drop the routine and return to IDLE."""
        self._routine = None
        self._index = 0
        self._step_total = 0
        self._step_remaining = 0
        if self._run_clock is not None:
            self._run_clock.clear()
        self._set_phase(RoutinePhase.IDLE)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _load_step(self, index: int) -> None:
        step = self._routine.steps[index]
        self._index = index
        self._step_total = step.seconds
        self._step_remaining = step.seconds
        if self._run_clock is not None:
            self._run_clock.start()
        self._phase = RoutinePhase.RUNNING

        self.step_changed.emit(index)
        self.remaining_changed.emit(self._step_remaining)
        self.phase_changed.emit(self._phase)

    def _finish_routine(self) -> None:
        self._step_remaining = 0
        if self._run_clock is not None:
            self._run_clock.clear()
        self._phase = RoutinePhase.ROUTINE_FINISHED
        logger.debug("Routine %r finished", self._routine.name)

        play_cue(self._cue_player, Cue.ROUTINE_COMPLETE)
        self.remaining_changed.emit(0)
        self.phase_changed.emit(self._phase)

    def _set_phase(self, new_phase: RoutinePhase) -> None:
        self._phase = new_phase
        self.phase_changed.emit(new_phase)
