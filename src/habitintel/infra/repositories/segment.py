"""SQLModel implementation of the habit segment repository."""

from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from sqlmodel import col, or_, select

from ...models.habit import HabitSegment
from .base import SQLModelRepository, adapter_call


class SQLModelSegmentRepository(SQLModelRepository):
    """SQLModel-based habit segment repository implementation."""

    @adapter_call("load_segments")
    def load_segments(
        self, device_id: str, month_range: Optional[tuple[date, date]] = None
    ) -> list[HabitSegment]:
        """List segments, keeping only those overlapping ``month_range`` when given."""
        with self.session_factory() as session:
            statement = select(HabitSegment).where(HabitSegment.device_id == device_id)
            if month_range is not None:
                range_start, range_end = month_range
                statement = statement.where(HabitSegment.start_date <= range_end).where(
                    or_(
                        col(HabitSegment.end_date).is_(None),
                        col(HabitSegment.end_date) >= range_start,
                    )
                )
            statement = statement.order_by(col(HabitSegment.start_date), col(HabitSegment.id))
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    @adapter_call("get_segment")
    def get_segment(self, segment_id: str) -> Optional[HabitSegment]:
        """Retrieve a segment by id."""
        with self.session_factory() as session:
            obj = session.get(HabitSegment, segment_id)
            if obj:
                session.expunge(obj)
            return obj

    @adapter_call("save_segment")
    def save_segment(self, segment: HabitSegment) -> HabitSegment:
        """Create or update a segment."""
        return self._save(segment)

    @adapter_call("save_segments")
    def save_segments(self, segments: Sequence[HabitSegment]) -> list[HabitSegment]:
        """Create or update several segments in a single transaction."""
        with self.session_factory() as session:
            merged = [session.merge(segment) for segment in segments]
            session.commit()
            for obj in merged:
                session.refresh(obj)
            session.expunge_all()
            return merged

    @adapter_call("delete_segment")
    def delete_segment(self, segment_id: str) -> None:
        """Delete a segment by id."""
        with self.session_factory() as session:
            segment = session.get(HabitSegment, segment_id)
            if segment:
                session.delete(segment)
                session.commit()
