"""Shared pytest fixtures for BigTimer tests."""

import os
import sys
import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication

from bigtimer.database.db import configure_engine, init_db
from bigtimer.timer.engine import SingleTimer
from bigtimer.timer.routine import RoutineRunner, Routine, RoutineStep

from helpers import FakeClock, CueRecorder


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cues():
    return CueRecorder()


@pytest.fixture
def timer(qapp, clock, cues):
    """Fresh SingleTimer on a fake clock with a recording cue player."""
    return SingleTimer(parent=None, clock=clock, cue_player=cues)


@pytest.fixture
def runner(qapp, cues):
    """Fresh RoutineRunner in tick-count mode."""
    return RoutineRunner(parent=None, cue_player=cues)


@pytest.fixture
def runner_monotonic(qapp, clock, cues):
    """Fresh RoutineRunner driven by the fake monotonic clock."""
    return RoutineRunner(parent=None, clock=clock, cue_player=cues)


@pytest.fixture
def morning():
    """Three-step routine: 2m, 3m, 1m."""
    return Routine(
        id="routine-morning",
        name="Morning",
        emoji="🌅",
        steps=(
            RoutineStep(2, "Brush teeth"),
            RoutineStep(3, "Get dressed"),
            RoutineStep(1),
        ),
    )
