"""Concrete repository implementations."""

from .device import SQLModelDeviceRepository
from .entry import SQLModelEntryRepository
from .memory import InMemoryTrackerRepository
from .segment import SQLModelSegmentRepository
from .slot import SQLModelSlotRepository
from .tracker import SQLModelTrackerRepository

__all__ = [
    "InMemoryTrackerRepository",
    "SQLModelDeviceRepository",
    "SQLModelEntryRepository",
    "SQLModelSegmentRepository",
    "SQLModelSlotRepository",
    "SQLModelTrackerRepository",
]
