"""Database package."""

from .db import get_session, init_db, configure_engine
from .store import RoutineStore

__all__ = ["get_session", "init_db", "configure_engine", "RoutineStore"]
