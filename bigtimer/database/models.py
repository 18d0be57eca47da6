"""SQLAlchemy ORM models for BigTimer's routine library."""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    pass


class RoutineRecord(Base):
    """A saved routine belonging to one profile."""

    __tablename__ = "routines"

    id = Column(String(64), primary_key=True)
    profile_id = Column(String(64), nullable=False, default="default", index=True)
    name = Column(String(255), nullable=False)
    emoji = Column(String(16), nullable=False, default="📋")
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    steps = relationship(
        "RoutineStepRecord",
        order_by="RoutineStepRecord.position",
        cascade="all, delete-orphan",
        back_populates="routine",
    )

    def __repr__(self) -> str:
        return (
            f"<RoutineRecord id={self.id} name={self.name!r} "
            f"steps={len(self.steps)}>"
        )


class RoutineStepRecord(Base):
    """One timed step of a routine, ordered by ``position``."""

    __tablename__ = "routine_steps"

    id = Column(Integer, primary_key=True, autoincrement=True)
    routine_id = Column(
        String(64), ForeignKey("routines.id", ondelete="CASCADE"), nullable=False,
    )
    position = Column(Integer, nullable=False)
    minutes = Column(Integer, nullable=False)
    name = Column(String(255), nullable=False)

    routine = relationship("RoutineRecord", back_populates="steps")

    def __repr__(self) -> str:
        return f"<RoutineStepRecord {self.position}: {self.minutes}m {self.name!r}>"
