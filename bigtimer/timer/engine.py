"""Single countdown timer state machine for BigTimer.

States
------
IDLE       Never started, or reset.
RUNNING    Counting down.
PAUSED     Countdown frozen, resumable.
FINISHED   Reached zero.  Terminal until reset or a new start.

Transitions
-----------
any      → RUNNING | FINISHED   (start_preset; FINISHED when 0 seconds)
RUNNING  → PAUSED               (pause)
PAUSED   → RUNNING              (resume)
RUNNING  → FINISHED             (tick reaches 0)
any      → IDLE                 (reset)

Timing
------
``remaining`` is recomputed from monotonic elapsed time on every
``tick()``, never decremented, so the ticker may call it as often as it
likes (250 ms by default) and missed or late ticks cannot cause drift.

Cues
----
``start``, ``halfway``, ``last_ten`` and ``finish`` are handed to the
injected cue player by name.  The halfway and last-ten cues fire at most
once per run; their guards are only cleared by ``start_preset``.
"""

from __future__ import annotations

import logging
from enum import Enum

from PyQt6.QtCore import QObject, pyqtSignal

from ..settings import TimerSettings, clamp_custom_minutes
from .clock import MonotonicClock, RunClock

logger = logging.getLogger(__name__)


# ── enums ─────────────────────────────────────────────────────────────────


class TimerPhase(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    FINISHED = "finished"


class TimerStyle(Enum):
    NUMBERS = "numbers"
    PIE = "pie"
    BAR = "bar"


class Cue(Enum):
    START = "start"
    FINISH = "finish"
    HALFWAY = "halfway"
    LAST_TEN = "last_ten"
    STEP_COMPLETE = "step_complete"
    ROUTINE_COMPLETE = "routine_complete"


# ── constants ─────────────────────────────────────────────────────────────

_STYLE_CYCLE = (TimerStyle.NUMBERS, TimerStyle.PIE, TimerStyle.BAR)
LAST_TEN_SECONDS = 10


def play_cue(player, cue: Cue) -> None:
    """Hand *cue* to *player* by name.  ``None`` player means silent."""
    if player is not None:
        player.play(cue.value)


# ── engine ────────────────────────────────────────────────────────────────


class SingleTimer(QObject):
    """One countdown with pause/resume, display style, focus lock and
    threshold sound cues.

    Signals
    -------
    phase_changed(new_phase: TimerPhase)
        Emitted on every phase transition.
    remaining_changed(remaining_seconds: int)
        Emitted whenever the whole-second countdown value changes.
    preferences_changed(settings: TimerSettings)
        Emitted after any preference mutation, with the snapshot to
        persist.
    """

    phase_changed = pyqtSignal(object)
    remaining_changed = pyqtSignal(int)
    preferences_changed = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        clock: MonotonicClock | None = None,
        cue_player=None,
    ) -> None:
        super().__init__(parent)

        self._cue_player = cue_player
        self._run_clock = RunClock(clock or MonotonicClock())

        # ── run state ─────────────────────────────────────────────────
        self._phase: TimerPhase = TimerPhase.IDLE
        self._total: int = 0
        self._remaining: int = 0
        self._halfway_fired: bool = False
        self._last_ten_fired: bool = False

        # ── preferences ───────────────────────────────────────────────
        defaults = TimerSettings()
        self._style = TimerStyle(defaults.style)
        self._focus_lock_enabled = defaults.focus_lock_enabled
        self._last_custom_minutes = defaults.last_custom_minutes
        self._sound_enabled = defaults.sound_enabled
        self._sound_halfway = defaults.sound_halfway
        self._sound_last_ten = defaults.sound_last_ten

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def phase(self) -> TimerPhase:
        return self._phase

    @property
    def total_seconds(self) -> int:
        return self._total

    @property
    def remaining_seconds(self) -> int:
        return self._remaining

    @property
    def is_running(self) -> bool:
        return self._phase == TimerPhase.RUNNING

    @property
    def percent_complete(self) -> float:
        """0.0 → 1.0 progress through the current run."""
        if self._total <= 0:
            return 1.0 if self._phase == TimerPhase.FINISHED else 0.0
        return (self._total - self._remaining) / self._total

    @property
    def style(self) -> TimerStyle:
        return self._style

    @property
    def focus_lock_enabled(self) -> bool:
        return self._focus_lock_enabled

    @property
    def reset_requires_confirmation(self) -> bool:
        """True when the UI must ask for a long-press before ``reset()``."""
        return self._focus_lock_enabled and self._phase in (
            TimerPhase.RUNNING, TimerPhase.PAUSED,
        )

    @property
    def last_custom_minutes(self) -> int:
        return self._last_custom_minutes

    @property
    def sound_enabled(self) -> bool:
        return self._sound_enabled

    @property
    def sound_halfway(self) -> bool:
        return self._sound_halfway

    @property
    def sound_last_ten(self) -> bool:
        return self._sound_last_ten

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start_preset(self, minutes: int) -> None:
        """Start a fresh countdown of *minutes*.  Valid from any phase."""
        total = max(0, minutes * 60)
        custom = clamp_custom_minutes(minutes)
        custom_changed = custom != self._last_custom_minutes
        self._total = total
        self._remaining = total
        self._last_custom_minutes = custom
        self._halfway_fired = False
        self._last_ten_fired = False
        self._run_clock.start()
        self._phase = TimerPhase.RUNNING if total > 0 else TimerPhase.FINISHED
        logger.debug("Timer started: %s s", total)

        if self._sound_enabled and total > 0:
            play_cue(self._cue_player, Cue.START)

        self.phase_changed.emit(self._phase)
        self.remaining_changed.emit(self._remaining)
        if custom_changed:
            self.preferences_changed.emit(self.preferences())

    def pause(self) -> None:
        if self._phase != TimerPhase.RUNNING:
            return
        self._run_clock.pause()
        self._set_phase(TimerPhase.PAUSED)

    def resume(self) -> None:
        if self._phase != TimerPhase.PAUSED:
            return
        self._run_clock.resume()
        self._set_phase(TimerPhase.RUNNING)

    def tick(self) -> None:
        """Recompute the countdown from elapsed time.

        Cheap and idempotent: nothing is emitted unless the whole-second
        value actually changed.
        """
        if self._phase != TimerPhase.RUNNING or not self._run_clock.started:
            return
        remaining = self._run_clock.remaining(self._total)
        if remaining == self._remaining:
            return

        self._remaining = remaining
        cues: list[Cue] = []
        if remaining == 0:
            self._phase = TimerPhase.FINISHED
            logger.debug("Timer finished after %s s", self._total)
            if self._sound_enabled:
                cues.append(Cue.FINISH)
        elif self._sound_enabled:
            cues.extend(self._threshold_cues(remaining))

        for cue in cues:
            play_cue(self._cue_player, cue)

        self.remaining_changed.emit(remaining)
        if self._phase == TimerPhase.FINISHED:
            self.phase_changed.emit(self._phase)

    def reset(self) -> None:
        """Return to IDLE.  Preferences are kept."""
        self._run_clock.clear()
        self._total = 0
        self._remaining = 0
        self._halfway_fired = False
        self._last_ten_fired = False
        self._phase = TimerPhase.IDLE
        self.remaining_changed.emit(0)
        self.phase_changed.emit(TimerPhase.IDLE)

    # ══════════════════════════════════════════════════════════════════
    #  PREFERENCES
    # ══════════════════════════════════════════════════════════════════

    def toggle_focus_lock(self) -> None:
        self._focus_lock_enabled = not self._focus_lock_enabled
        self._preferences_updated()

    def cycle_style(self) -> None:
        """NUMBERS → PIE → BAR → NUMBERS."""
        idx = _STYLE_CYCLE.index(self._style)
        self._style = _STYLE_CYCLE[(idx + 1) % len(_STYLE_CYCLE)]
        self._preferences_updated()

    def toggle_sound(self) -> None:
        self._sound_enabled = not self._sound_enabled
        self._preferences_updated()

    def toggle_halfway(self) -> None:
        self._sound_halfway = not self._sound_halfway
        self._preferences_updated()

    def toggle_last_ten(self) -> None:
        self._sound_last_ten = not self._sound_last_ten
        self._preferences_updated()

    def set_last_custom_minutes(self, minutes: int) -> None:
        self._last_custom_minutes = clamp_custom_minutes(minutes)
        self._preferences_updated()

    def apply_persisted_settings(self, settings: TimerSettings) -> None:
        """Bulk-load preferences from a stored snapshot.

        Run state is untouched, so a snapshot arriving mid-countdown does
        not interrupt it.
        """
        settings = settings.normalized()
        self._focus_lock_enabled = settings.focus_lock_enabled
        self._style = TimerStyle(settings.style)
        self._last_custom_minutes = settings.last_custom_minutes
        self._sound_enabled = settings.sound_enabled
        self._sound_halfway = settings.sound_halfway
        self._sound_last_ten = settings.sound_last_ten
        self._preferences_updated()

    def preferences(self, base: TimerSettings | None = None) -> TimerSettings:
        """Current preferences as a persistable snapshot.

        Fields the timer does not own (``sound_volume``) are copied from
        *base* when given.
        """
        base = base or TimerSettings()
        return TimerSettings(
            focus_lock_enabled=self._focus_lock_enabled,
            style=self._style.value,
            last_custom_minutes=self._last_custom_minutes,
            sound_enabled=self._sound_enabled,
            sound_halfway=self._sound_halfway,
            sound_last_ten=self._sound_last_ten,
            sound_volume=base.sound_volume,
        )

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _threshold_cues(self, remaining: int) -> list[Cue]:
        cues: list[Cue] = []
        if (
            self._sound_halfway
            and not self._halfway_fired
            and 0 < remaining <= self._total // 2
        ):
            self._halfway_fired = True
            cues.append(Cue.HALFWAY)
        if (
            self._sound_last_ten
            and not self._last_ten_fired
            and 0 < remaining <= LAST_TEN_SECONDS
        ):
            self._last_ten_fired = True
            cues.append(Cue.LAST_TEN)
        return cues

    def _preferences_updated(self) -> None:
        self.preferences_changed.emit(self.preferences())

    def _set_phase(self, new_phase: TimerPhase) -> None:
        self._phase = new_phase
        self.phase_changed.emit(new_phase)
