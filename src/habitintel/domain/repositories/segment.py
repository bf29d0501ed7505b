"""Habit segment repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ...models.habit import HabitSegment


class SegmentRepository(Protocol):
    """Repository for habit segments."""

    def load_segments(
        self, device_id: str, month_range: Optional[tuple[date, date]] = None
    ) -> list[HabitSegment]:
        """List a device's segments, optionally only those overlapping a range."""
        ...

    def get_segment(self, segment_id: str) -> Optional[HabitSegment]:
        """Retrieve a segment by id."""
        ...

    def save_segment(self, segment: HabitSegment) -> HabitSegment:
        """Create or update a segment."""
        ...

    def save_segments(self, segments: Sequence[HabitSegment]) -> list[HabitSegment]:
        """Create or update several segments in one round trip."""
        ...

    def delete_segment(self, segment_id: str) -> None:
        """Delete a segment; its entries are removed by the caller."""
        ...
