"""Habit segments and their daily completion entries."""

from __future__ import annotations

from datetime import date
from typing import ClassVar, Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from .slot import new_record_id


class HabitSegment(SQLModel, table=True):
    """A named, coloured occupancy of a slot between two calendar days.

    ``end_date`` is ``None`` while the segment is still open. ``streak`` and
    ``last_completed_date`` are cached from the entry history and rewritten
    on every toggle.
    """

    __tablename__: ClassVar[str] = "habit_segment"

    id: str = Field(default_factory=new_record_id, primary_key=True, max_length=64)
    device_id: str = Field(foreign_key="device.device_id", nullable=False, index=True, max_length=64)
    # Plain indexed reference: cascades delete the slot before its segments.
    slot_id: str = Field(nullable=False, index=True, max_length=64)
    name: str = Field(nullable=False, max_length=80)
    color: str = Field(nullable=False, max_length=32)
    start_date: date = Field(nullable=False, index=True)
    end_date: Optional[date] = Field(default=None)
    streak: int = Field(default=0, nullable=False)
    last_completed_date: Optional[date] = Field(default=None)

    @property
    def is_open(self) -> bool:
        return self.end_date is None


class HabitEntry(SQLModel, table=True):
    """Completion flag of one segment on one calendar day."""

    __tablename__: ClassVar[str] = "habit_entry"
    __table_args__ = (UniqueConstraint("segment_id", "occurred_on", name="uq_habit_entry_segment_day"),)

    id: str = Field(default_factory=new_record_id, primary_key=True, max_length=64)
    device_id: str = Field(foreign_key="device.device_id", nullable=False, index=True, max_length=64)
    segment_id: str = Field(nullable=False, index=True, max_length=64)
    occurred_on: date = Field(nullable=False, index=True)
    completed: bool = Field(default=False, nullable=False)
