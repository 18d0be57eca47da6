"""Tests for the routine runner.

Covers: step sequencing, STEP_FINISHED hold and advance, skip and jump
navigation, pause/resume, progress queries, cues, and the monotonic tick
mode.
"""

import pytest

from bigtimer.timer.routine import (
    Routine, RoutinePhase, RoutineStep, format_step_name,
)

from helpers import SignalCollector


def ticks(runner, n: int) -> None:
    for _ in range(n):
        runner.tick()


@pytest.fixture
def two_steps():
    return Routine(id="r2", name="Two", steps=(RoutineStep(2), RoutineStep(3)))


# ═══════════════════════════════════════════════════════════════════════════
#  ROUTINE DATA
# ═══════════════════════════════════════════════════════════════════════════


class TestRoutineData:

    @pytest.mark.parametrize("minutes, label", [
        (1, "1 min"), (45, "45 min"), (60, "1h"), (90, "1h 30m"), (125, "2h 5m"),
    ])
    def test_format_step_name(self, minutes, label):
        assert format_step_name(minutes) == label

    def test_unnamed_step_gets_duration_label(self):
        assert RoutineStep(5).name == "5 min"
        assert RoutineStep(5, "   ").name == "5 min"
        assert RoutineStep(5, None).name == "5 min"

    def test_step_name_is_trimmed(self):
        assert RoutineStep(5, "  Read  ").name == "Read"

    def test_step_minutes_at_least_one(self):
        assert RoutineStep(0).minutes == 1

    def test_steps_are_a_tuple(self):
        r = Routine(id="x", name="X", steps=[RoutineStep(1)])
        assert isinstance(r.steps, tuple)

    def test_total_minutes(self, morning):
        assert morning.total_minutes == 6
        assert morning.is_runnable is True


# ═══════════════════════════════════════════════════════════════════════════
#  START / RESET
# ═══════════════════════════════════════════════════════════════════════════


class TestStart:

    def test_initial_state(self, runner):
        assert runner.phase == RoutinePhase.IDLE
        assert runner.active_routine is None
        assert runner.current_step() is None

    def test_start_loads_first_step(self, runner, morning):
        runner.start_routine(morning)
        assert runner.phase == RoutinePhase.RUNNING
        assert runner.active_routine is morning
        assert runner.current_step_index == 0
        assert runner.step_total_seconds == 120
        assert runner.step_remaining_seconds == 120
        assert runner.current_step().name == "Brush teeth"

    def test_empty_routine_is_ignored(self, runner):
        runner.start_routine(Routine(id="e", name="Empty"))
        assert runner.phase == RoutinePhase.IDLE
        assert runner.active_routine is None

    def test_none_routine_is_ignored(self, runner):
        runner.start_routine(None)
        assert runner.phase == RoutinePhase.IDLE

    def test_reset_clears_everything(self, runner, morning):
        runner.start_routine(morning)
        ticks(runner, 10)
        runner.reset()
        assert runner.phase == RoutinePhase.IDLE
        assert runner.active_routine is None
        assert runner.step_total_seconds == 0
        assert runner.step_remaining_seconds == 0
        assert runner.total_routine_minutes() == 0

    def test_signals_on_start(self, runner, morning):
        phases, steps = SignalCollector(), SignalCollector()
        runner.phase_changed.connect(phases)
        runner.step_changed.connect(steps)
        runner.start_routine(morning)
        assert phases.last == RoutinePhase.RUNNING
        assert steps.last == 0


# ═══════════════════════════════════════════════════════════════════════════
#  SEQUENCING
# ═══════════════════════════════════════════════════════════════════════════


class TestSequencing:

    def test_tick_decrements_one_second(self, runner, two_steps):
        runner.start_routine(two_steps)
        runner.tick()
        assert runner.step_remaining_seconds == 119

    def test_step_finished_holds_index(self, runner, two_steps, cues):
        runner.start_routine(two_steps)
        ticks(runner, 120)
        assert runner.phase == RoutinePhase.STEP_FINISHED
        assert runner.current_step_index == 0
        assert runner.step_remaining_seconds == 0
        assert cues.played == ["step_complete"]

    def test_ticks_ignored_while_step_finished(self, runner, two_steps):
        runner.start_routine(two_steps)
        ticks(runner, 125)
        assert runner.phase == RoutinePhase.STEP_FINISHED
        assert runner.step_remaining_seconds == 0

    def test_advance_loads_next_step(self, runner, two_steps):
        runner.start_routine(two_steps)
        ticks(runner, 120)
        runner.advance_to_next_step()
        assert runner.phase == RoutinePhase.RUNNING
        assert runner.current_step_index == 1
        assert runner.step_total_seconds == 180
        assert runner.step_remaining_seconds == 180

    def test_advance_is_noop_when_running(self, runner, two_steps):
        runner.start_routine(two_steps)
        runner.advance_to_next_step()
        assert runner.current_step_index == 0
        assert runner.phase == RoutinePhase.RUNNING

    def test_last_step_finishes_routine(self, runner, two_steps, cues):
        runner.start_routine(two_steps)
        ticks(runner, 120)
        runner.advance_to_next_step()
        ticks(runner, 180)
        assert runner.phase == RoutinePhase.ROUTINE_FINISHED
        assert runner.current_step_index == 1
        assert runner.step_remaining_seconds == 0
        assert cues.played == ["step_complete", "routine_complete"]

    def test_full_routine(self, runner, morning):
        runner.start_routine(morning)
        visited = []
        while runner.phase != RoutinePhase.ROUTINE_FINISHED:
            visited.append(runner.current_step_index)
            ticks(runner, runner.step_remaining_seconds)
            runner.advance_to_next_step()
        assert visited == [0, 1, 2]

    def test_routine_is_not_mutated(self, runner, morning):
        before = morning.steps
        runner.start_routine(morning)
        ticks(runner, 120)
        runner.advance_to_next_step()
        runner.skip_step()
        assert morning.steps == before


# ═══════════════════════════════════════════════════════════════════════════
#  NAVIGATION
# ═══════════════════════════════════════════════════════════════════════════


class TestNavigation:

    def test_skip_single_step_finishes(self, runner, cues):
        runner.start_routine(Routine(id="one", name="One", steps=(RoutineStep(5),)))
        runner.skip_step()
        assert runner.phase == RoutinePhase.ROUTINE_FINISHED
        assert runner.step_remaining_seconds == 0
        assert cues.played == ["routine_complete"]

    def test_skip_moves_to_next_step(self, runner, morning):
        runner.start_routine(morning)
        ticks(runner, 30)
        runner.skip_step()
        assert runner.phase == RoutinePhase.RUNNING
        assert runner.current_step_index == 1
        assert runner.step_remaining_seconds == 180

    def test_skip_from_paused_runs(self, runner, morning):
        runner.start_routine(morning)
        runner.pause()
        runner.skip_step()
        assert runner.phase == RoutinePhase.RUNNING
        assert runner.current_step_index == 1

    def test_skip_is_noop_when_idle(self, runner):
        runner.skip_step()
        assert runner.phase == RoutinePhase.IDLE

    def test_go_to_step(self, runner, morning):
        runner.start_routine(morning)
        runner.go_to_step(2)
        assert runner.current_step_index == 2
        assert runner.step_total_seconds == 60
        runner.go_to_step(0)
        assert runner.current_step_index == 0

    def test_go_to_step_forces_running(self, runner, morning):
        runner.start_routine(morning)
        runner.pause()
        runner.go_to_step(1)
        assert runner.phase == RoutinePhase.RUNNING

    @pytest.mark.parametrize("index", [-1, 3, 99])
    def test_go_to_step_out_of_range_is_noop(self, runner, morning, index):
        runner.start_routine(morning)
        ticks(runner, 5)
        runner.go_to_step(index)
        assert runner.current_step_index == 0
        assert runner.step_remaining_seconds == 115

    def test_go_to_step_is_noop_when_idle(self, runner):
        runner.go_to_step(0)
        assert runner.phase == RoutinePhase.IDLE


# ═══════════════════════════════════════════════════════════════════════════
#  PAUSE / RESUME
# ═══════════════════════════════════════════════════════════════════════════


class TestPauseResume:

    def test_pause_freezes_countdown(self, runner, morning):
        runner.start_routine(morning)
        ticks(runner, 10)
        runner.pause()
        ticks(runner, 10)
        assert runner.phase == RoutinePhase.PAUSED
        assert runner.step_remaining_seconds == 110

    def test_resume_continues(self, runner, morning):
        runner.start_routine(morning)
        ticks(runner, 10)
        runner.pause()
        runner.resume()
        runner.tick()
        assert runner.step_remaining_seconds == 109

    def test_pause_is_noop_when_step_finished(self, runner, two_steps):
        runner.start_routine(two_steps)
        ticks(runner, 120)
        runner.pause()
        assert runner.phase == RoutinePhase.STEP_FINISHED

    def test_resume_is_noop_when_running(self, runner, morning):
        runner.start_routine(morning)
        runner.resume()
        assert runner.phase == RoutinePhase.RUNNING


# ═══════════════════════════════════════════════════════════════════════════
#  PROGRESS
# ═══════════════════════════════════════════════════════════════════════════


class TestProgress:

    def test_total_routine_minutes(self, runner, morning):
        assert runner.total_routine_minutes() == 0
        runner.start_routine(morning)
        assert runner.total_routine_minutes() == 6

    def test_elapsed_routine_minutes(self, runner, morning):
        runner.start_routine(morning)
        assert runner.elapsed_routine_minutes() == pytest.approx(0.0)
        ticks(runner, 60)
        assert runner.elapsed_routine_minutes() == pytest.approx(1.0)
        runner.skip_step()
        ticks(runner, 90)
        assert runner.elapsed_routine_minutes() == pytest.approx(3.5)

    def test_elapsed_at_step_finished_counts_whole_step(self, runner, two_steps):
        runner.start_routine(two_steps)
        ticks(runner, 120)
        assert runner.elapsed_routine_minutes() == pytest.approx(2.0)

    def test_elapsed_after_finish_equals_total(self, runner, morning):
        runner.start_routine(morning)
        runner.go_to_step(2)
        ticks(runner, 60)
        assert runner.phase == RoutinePhase.ROUTINE_FINISHED
        assert runner.elapsed_routine_minutes() == pytest.approx(6.0)


# ═══════════════════════════════════════════════════════════════════════════
#  MONOTONIC MODE
# ═══════════════════════════════════════════════════════════════════════════


class TestMonotonicMode:

    def test_uses_monotonic_clock(self, runner, runner_monotonic):
        assert runner.uses_monotonic_clock is False
        assert runner_monotonic.uses_monotonic_clock is True

    def test_dropped_ticks_do_not_drift(self, runner_monotonic, clock, two_steps):
        r = runner_monotonic
        r.start_routine(two_steps)
        clock.advance(90)
        r.tick()
        assert r.step_remaining_seconds == 30

    def test_single_late_tick_finishes_step(self, runner_monotonic, clock, two_steps, cues):
        r = runner_monotonic
        r.start_routine(two_steps)
        clock.advance(500)
        r.tick()
        assert r.phase == RoutinePhase.STEP_FINISHED
        assert r.current_step_index == 0
        assert cues.played == ["step_complete"]

    def test_repeated_ticks_within_a_second_are_idempotent(self, runner_monotonic, clock, two_steps):
        r = runner_monotonic
        c = SignalCollector()
        r.start_routine(two_steps)
        r.remaining_changed.connect(c)
        clock.advance(1.5)
        for _ in range(6):
            r.tick()
        assert c.items == [119]

    def test_pause_excludes_paused_time(self, runner_monotonic, clock, two_steps):
        r = runner_monotonic
        r.start_routine(two_steps)
        clock.advance(20)
        r.tick()
        r.pause()
        clock.advance(600)
        r.resume()
        clock.advance(10)
        r.tick()
        assert r.step_remaining_seconds == 90

    def test_next_step_restarts_clock(self, runner_monotonic, clock, two_steps):
        r = runner_monotonic
        r.start_routine(two_steps)
        clock.advance(120)
        r.tick()
        clock.advance(2)
        r.advance_to_next_step()
        clock.advance(30)
        r.tick()
        assert r.step_remaining_seconds == 150
