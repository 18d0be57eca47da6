"""Routine library: saved routines per profile.

The store hands out frozen ``Routine`` values.  Editing a routine replaces
its whole step list; the runner never writes back.
"""

from __future__ import annotations

import logging
import uuid
from typing import Iterable

from sqlalchemy import func

from ..timer.routine import Routine, RoutineStep
from .db import get_session
from .models import RoutineRecord, RoutineStepRecord

logger = logging.getLogger(__name__)

DEFAULT_EMOJI = "📋"


def _to_routine(record: RoutineRecord) -> Routine:
    return Routine(
        id=record.id,
        name=record.name,
        emoji=record.emoji,
        steps=tuple(RoutineStep(minutes=s.minutes, name=s.name) for s in record.steps),
    )


def _step_records(steps: Iterable[RoutineStep]) -> list[RoutineStepRecord]:
    return [
        RoutineStepRecord(position=i, minutes=step.minutes, name=step.name)
        for i, step in enumerate(steps)
    ]


class RoutineStore:
    """CRUD for one profile's routines."""

    def __init__(self, profile_id: str = "default") -> None:
        self._profile_id = profile_id

    @property
    def profile_id(self) -> str:
        return self._profile_id

    def list_routines(self) -> list[Routine]:
        with get_session() as db:
            records = (
                db.query(RoutineRecord)
                .filter(RoutineRecord.profile_id == self._profile_id)
                .order_by(RoutineRecord.position, RoutineRecord.created_at)
                .all()
            )
            return [_to_routine(r) for r in records]

    def get(self, routine_id: str) -> Routine | None:
        with get_session() as db:
            record = self._find(db, routine_id)
            return _to_routine(record) if record else None

    def create(
        self,
        name: str,
        steps: Iterable[RoutineStep],
        emoji: str = DEFAULT_EMOJI,
    ) -> Routine | None:
        """Save a new routine at the end of the list.

        Returns ``None`` for a blank name.
        """
        name = name.strip()
        if not name:
            return None
        with get_session() as db:
            last = (
                db.query(func.max(RoutineRecord.position))
                .filter(RoutineRecord.profile_id == self._profile_id)
                .scalar()
            )
            record = RoutineRecord(
                id=f"routine-{uuid.uuid4().hex[:12]}",
                profile_id=self._profile_id,
                name=name,
                emoji=emoji or DEFAULT_EMOJI,
                position=0 if last is None else last + 1,
                steps=_step_records(steps),
            )
            db.add(record)
            db.flush()
            logger.debug("Created routine %s (%s)", record.id, name)
            return _to_routine(record)

    def update(
        self,
        routine_id: str,
        *,
        name: str | None = None,
        emoji: str | None = None,
        steps: Iterable[RoutineStep] | None = None,
    ) -> Routine | None:
        with get_session() as db:
            record = self._find(db, routine_id)
            if record is None:
                return None
            if name is not None and name.strip():
                record.name = name.strip()
            if emoji:
                record.emoji = emoji
            if steps is not None:
                record.steps = _step_records(steps)
            db.flush()
            return _to_routine(record)

    def delete(self, routine_id: str) -> bool:
        with get_session() as db:
            record = self._find(db, routine_id)
            if record is None:
                return False
            db.delete(record)
            logger.debug("Deleted routine %s", routine_id)
            return True

    def reorder(self, routine_ids: list[str]) -> None:
        """Set list order; ids not mentioned keep their relative order after."""
        with get_session() as db:
            records = (
                db.query(RoutineRecord)
                .filter(RoutineRecord.profile_id == self._profile_id)
                .order_by(RoutineRecord.position, RoutineRecord.created_at)
                .all()
            )
            rank = {rid: i for i, rid in enumerate(routine_ids)}
            ordered = sorted(
                records, key=lambda r: (r.id not in rank, rank.get(r.id, 0)),
            )
            for position, record in enumerate(ordered):
                record.position = position

    def _find(self, db, routine_id: str) -> RoutineRecord | None:
        return (
            db.query(RoutineRecord)
            .filter(
                RoutineRecord.id == routine_id,
                RoutineRecord.profile_id == self._profile_id,
            )
            .first()
        )
