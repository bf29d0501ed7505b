"""SQLModel implementation of the habit entry repository."""

from __future__ import annotations

from datetime import date
from typing import Optional

from sqlmodel import Session, col, select

from ...models.habit import HabitEntry, HabitSegment
from .base import SQLModelRepository, adapter_call


class SQLModelEntryRepository(SQLModelRepository):
    """SQLModel-based habit entry repository implementation."""

    @adapter_call("load_entries")
    def load_entries(
        self, device_id: str, month_range: Optional[tuple[date, date]] = None
    ) -> list[HabitEntry]:
        """List a device's entries, optionally inside an inclusive date range."""
        with self.session_factory() as session:
            statement = select(HabitEntry).where(HabitEntry.device_id == device_id)
            if month_range is not None:
                range_start, range_end = month_range
                statement = statement.where(HabitEntry.occurred_on >= range_start).where(
                    HabitEntry.occurred_on <= range_end
                )
            statement = statement.order_by(col(HabitEntry.occurred_on))
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    @adapter_call("load_segment_entries")
    def load_segment_entries(self, segment_id: str, *, completed_only: bool = False) -> list[HabitEntry]:
        """List every entry of one segment, oldest first."""
        with self.session_factory() as session:
            statement = select(HabitEntry).where(HabitEntry.segment_id == segment_id)
            if completed_only:
                statement = statement.where(HabitEntry.completed == True)  # noqa: E712
            rows = list(session.exec(statement.order_by(col(HabitEntry.occurred_on))).all())
            session.expunge_all()
            return rows

    @staticmethod
    def _stage_entry(
        session: Session, segment_id: str, occurred_on: date, completed: bool, device_id: str
    ) -> HabitEntry:
        entry = session.exec(
            select(HabitEntry)
            .where(HabitEntry.segment_id == segment_id)
            .where(HabitEntry.occurred_on == occurred_on)
        ).first()
        if entry is None:
            entry = HabitEntry(
                device_id=device_id,
                segment_id=segment_id,
                occurred_on=occurred_on,
                completed=completed,
            )
        else:
            entry.completed = completed
        session.add(entry)
        return entry

    @adapter_call("upsert_entry")
    def upsert_entry(
        self, segment_id: str, occurred_on: date, completed: bool, *, device_id: str
    ) -> HabitEntry:
        """Insert or update the entry for ``(segment_id, occurred_on)``."""
        with self.session_factory() as session:
            entry = self._stage_entry(session, segment_id, occurred_on, completed, device_id)
            session.commit()
            session.refresh(entry)
            session.expunge(entry)
            return entry

    @adapter_call("save_toggle")
    def save_toggle(
        self, segment: HabitSegment, occurred_on: date, completed: bool
    ) -> tuple[HabitEntry, HabitSegment]:
        """Upsert the day's entry and the segment's cached streak in one transaction."""
        with self.session_factory() as session:
            entry = self._stage_entry(session, segment.id, occurred_on, completed, segment.device_id)
            merged = session.merge(segment)
            session.commit()
            session.refresh(entry)
            session.refresh(merged)
            session.expunge_all()
            return entry, merged

    @adapter_call("delete_entries")
    def delete_entries(self, segment_id: str) -> int:
        """Delete all entries of a segment."""
        with self.session_factory() as session:
            rows = session.exec(select(HabitEntry).where(HabitEntry.segment_id == segment_id)).all()
            for entry in rows:
                session.delete(entry)
            session.commit()
            return len(rows)
