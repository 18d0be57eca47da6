"""Run BigTimer from a terminal: python -m bigtimer."""

from __future__ import annotations

import argparse
import logging
import signal
import sys

from PyQt6.QtCore import QCoreApplication, QTimer

from .database.db import init_db
from .database.store import RoutineStore
from .settings import SettingsStore
from .timer import (
    MonotonicClock,
    RoutinePhase,
    RoutineRunner,
    RoutineStep,
    SingleTimer,
    StepAdvancer,
    Ticker,
    TimerPhase,
    format_clock,
    ROUTINE_INTERVAL_MS,
    SINGLE_TIMER_INTERVAL_MS,
)

logger = logging.getLogger(__name__)

QUIT_DELAY_MS = 1500  # let the final cue play out


def parse_step(text: str) -> RoutineStep:
    """``MIN`` or ``MIN:name`` → ``RoutineStep``."""
    minutes, _, name = text.partition(":")
    try:
        value = int(minutes)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid step {text!r}: expected MIN[:name]")
    if value < 1:
        raise argparse.ArgumentTypeError(f"invalid step {text!r}: minutes must be >= 1")
    return RoutineStep(minutes=value, name=name)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bigtimer", description="Big, simple countdown timers.")
    parser.add_argument("--mute", action="store_true", help="don't play audio cues")
    parser.add_argument("--profile", default="default", help="routine library profile")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("start", help="run a single countdown")
    p.add_argument("minutes", type=int)

    p = sub.add_parser("routine", help="run a saved routine")
    p.add_argument("routine_id")
    p.add_argument(
        "--drift-proof", action="store_true",
        help="count steps down from monotonic elapsed time instead of ticks",
    )

    sub.add_parser("routines", help="list saved routines")

    p = sub.add_parser("add-routine", help="save a routine")
    p.add_argument("name")
    p.add_argument("steps", nargs="+", type=parse_step, metavar="MIN[:name]")
    p.add_argument("--emoji", default="📋")

    p = sub.add_parser("delete-routine", help="delete a saved routine")
    p.add_argument("routine_id")

    p = sub.add_parser("settings", help="show or change timer preferences")
    p.add_argument("--toggle-lock", action="store_true")
    p.add_argument("--cycle-style", action="store_true")
    p.add_argument("--toggle-sound", action="store_true")
    p.add_argument("--toggle-halfway", action="store_true")
    p.add_argument("--toggle-last-ten", action="store_true")
    p.add_argument("--custom-minutes", type=int)
    p.add_argument("--volume", type=int)
    return parser


# ── helpers ──────────────────────────────────────────────────────────────


def _make_player(app: QCoreApplication, args, volume: int):
    if args.mute:
        return None
    from .audio.cues import SoundManager

    player = SoundManager(parent=app)
    player.set_volume(volume)
    return player


def _print_clock(label: str, seconds: int) -> None:
    print(f"\r{label} {format_clock(seconds):>7}", end="", flush=True)


def _quit_soon(app: QCoreApplication) -> None:
    print()
    QTimer.singleShot(QUIT_DELAY_MS, app.quit)


# ── commands ─────────────────────────────────────────────────────────────


def run_single(app: QCoreApplication, args, settings_store: SettingsStore) -> int:
    settings = settings_store.load()
    timer = SingleTimer(parent=app, cue_player=_make_player(app, args, settings.sound_volume))
    timer.apply_persisted_settings(settings)
    timer.preferences_changed.connect(
        lambda _snapshot: settings_store.save(timer.preferences(base=settings))
    )
    ticker = Ticker(timer, SINGLE_TIMER_INTERVAL_MS, parent=app)

    timer.remaining_changed.connect(lambda s: _print_clock("⏱", s))

    def on_phase(phase: TimerPhase) -> None:
        if phase == TimerPhase.FINISHED:
            print("\nTime's up!", end="")
            _quit_soon(app)

    timer.phase_changed.connect(on_phase)
    timer.start_preset(args.minutes)
    return app.exec()


def run_routine(app: QCoreApplication, args, settings_store: SettingsStore) -> int:
    routine = RoutineStore(args.profile).get(args.routine_id)
    if routine is None or not routine.is_runnable:
        print(f"No runnable routine {args.routine_id!r}", file=sys.stderr)
        return 1

    settings = settings_store.load()
    player = _make_player(app, args, settings.sound_volume)
    clock = MonotonicClock() if args.drift_proof else None
    runner = RoutineRunner(parent=app, clock=clock, cue_player=player)
    interval = SINGLE_TIMER_INTERVAL_MS if args.drift_proof else ROUTINE_INTERVAL_MS
    ticker = Ticker(runner, interval, parent=app)
    advancer = StepAdvancer(runner, parent=app)

    def on_step(index: int) -> None:
        step = routine.steps[index]
        print(f"\n{routine.emoji} Step {index + 1}/{len(routine.steps)}: {step.name}")

    def on_remaining(seconds: int) -> None:
        done = runner.elapsed_routine_minutes()
        _print_clock(f"  {done:5.1f}/{runner.total_routine_minutes()} min", seconds)

    def on_phase(phase: RoutinePhase) -> None:
        if phase == RoutinePhase.STEP_FINISHED:
            print("\n  ✓ step done", end="")
        elif phase == RoutinePhase.ROUTINE_FINISHED:
            print(f"\n{routine.name} complete!", end="")
            _quit_soon(app)

    runner.step_changed.connect(on_step)
    runner.remaining_changed.connect(on_remaining)
    runner.phase_changed.connect(on_phase)
    runner.start_routine(routine)
    return app.exec()


def list_routines(args) -> int:
    routines = RoutineStore(args.profile).list_routines()
    if not routines:
        print("No routines saved.")
    for routine in routines:
        steps = ", ".join(f"{s.name} ({s.minutes}m)" for s in routine.steps)
        print(f"{routine.id}  {routine.emoji} {routine.name}  [{routine.total_minutes} min]  {steps}")
    return 0


def add_routine(args) -> int:
    routine = RoutineStore(args.profile).create(args.name, args.steps, emoji=args.emoji)
    if routine is None:
        print("Routine name must not be blank", file=sys.stderr)
        return 1
    print(routine.id)
    return 0


def delete_routine(args) -> int:
    if not RoutineStore(args.profile).delete(args.routine_id):
        print(f"No routine {args.routine_id!r}", file=sys.stderr)
        return 1
    return 0


def edit_settings(app: QCoreApplication, args, settings_store: SettingsStore) -> int:
    settings = settings_store.load()
    if args.volume is not None:
        settings.sound_volume = args.volume
        settings = settings.normalized()
        settings_store.save(settings)

    timer = SingleTimer(parent=app)
    timer.apply_persisted_settings(settings)
    timer.preferences_changed.connect(
        lambda _snapshot: settings_store.save(timer.preferences(base=settings))
    )
    if args.toggle_lock:
        timer.toggle_focus_lock()
    if args.cycle_style:
        timer.cycle_style()
    if args.toggle_sound:
        timer.toggle_sound()
    if args.toggle_halfway:
        timer.toggle_halfway()
    if args.toggle_last_ten:
        timer.toggle_last_ten()
    if args.custom_minutes is not None:
        timer.set_last_custom_minutes(args.custom_minutes)

    current = timer.preferences(base=settings)
    print(f"focus lock:      {'on' if current.focus_lock_enabled else 'off'}")
    print(f"style:           {current.style}")
    print(f"custom minutes:  {current.last_custom_minutes}")
    print(f"sound:           {'on' if current.sound_enabled else 'off'}")
    print(f"  halfway cue:   {'on' if current.sound_halfway else 'off'}")
    print(f"  last-ten cue:  {'on' if current.sound_last_ten else 'off'}")
    print(f"  volume:        {current.sound_volume}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    signal.signal(signal.SIGINT, signal.SIG_DFL)
    logger.debug("Command: %s", args.command)

    init_db()
    settings_store = SettingsStore()

    if args.command == "routines":
        return list_routines(args)
    if args.command == "add-routine":
        return add_routine(args)
    if args.command == "delete-routine":
        return delete_routine(args)

    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    app.setApplicationName("BigTimer")
    app.setOrganizationName("BigTimer")

    if args.command == "start":
        return run_single(app, args, settings_store)
    if args.command == "routine":
        return run_routine(app, args, settings_store)
    return edit_settings(app, args, settings_store)


if __name__ == "__main__":
    sys.exit(main())
