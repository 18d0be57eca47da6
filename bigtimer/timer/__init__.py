"""Timer package."""

from .clock import MonotonicClock, RunClock, format_clock
from .engine import (
    SingleTimer,
    TimerPhase,
    TimerStyle,
    Cue,
    LAST_TEN_SECONDS,
)
from .routine import (
    RoutineRunner,
    RoutinePhase,
    Routine,
    RoutineStep,
    format_step_name,
)
from .ticker import (
    Ticker,
    StepAdvancer,
    SINGLE_TIMER_INTERVAL_MS,
    ROUTINE_INTERVAL_MS,
    STEP_ADVANCE_DELAY_MS,
)

__all__ = [
    "MonotonicClock",
    "RunClock",
    "format_clock",
    "SingleTimer",
    "TimerPhase",
    "TimerStyle",
    "Cue",
    "LAST_TEN_SECONDS",
    "RoutineRunner",
    "RoutinePhase",
    "Routine",
    "RoutineStep",
    "format_step_name",
    "Ticker",
    "StepAdvancer",
    "SINGLE_TIMER_INTERVAL_MS",
    "ROUTINE_INTERVAL_MS",
    "STEP_ADVANCE_DELAY_MS",
]
