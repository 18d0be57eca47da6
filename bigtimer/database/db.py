"""Engine and session plumbing for the routine library."""

import logging
from pathlib import Path
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session as OrmSession

from .models import Base

logger = logging.getLogger(__name__)

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "BigTimer"
DB_PATH = APP_SUPPORT_DIR / "bigtimer.db"

_engine = None
_SessionFactory = None


def _make_engine(url: str):
    # the Qt loop and CLI commands may touch the store from different threads
    return create_engine(url, connect_args={"check_same_thread": False})


def _get_engine():
    global _engine
    if _engine is None:
        APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
        _engine = _make_engine(f"sqlite:///{DB_PATH}")
    return _engine


def _get_session_factory():
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=_get_engine(), expire_on_commit=False)
    return _SessionFactory


def configure_engine(url: str) -> None:
    """Point the routine library at *url*, e.g. ``sqlite://`` in tests."""
    global _engine, _SessionFactory
    _engine = _make_engine(url)
    _SessionFactory = None


def init_db() -> None:
    """Create the routine tables if they are missing."""
    engine = _get_engine()
    Base.metadata.create_all(engine)
    logger.debug("Routine library ready at %s", engine.url)


@contextmanager
def get_session():
    """Yield a session that commits on success and rolls back on error."""
    session: OrmSession = _get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
