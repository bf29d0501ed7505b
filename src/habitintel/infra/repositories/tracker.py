"""SQLModel persistence adapter combining every tracker repository."""

from __future__ import annotations

from .device import SQLModelDeviceRepository
from .entry import SQLModelEntryRepository
from .segment import SQLModelSegmentRepository
from .slot import SQLModelSlotRepository


class SQLModelTrackerRepository(
    SQLModelDeviceRepository,
    SQLModelSlotRepository,
    SQLModelSegmentRepository,
    SQLModelEntryRepository,
):
    """Single adapter object satisfying ``TrackerRepository``."""


__all__ = ["SQLModelTrackerRepository"]
