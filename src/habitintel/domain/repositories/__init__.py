"""Repository protocol definitions for domain layer."""

from typing import Protocol

from .device import DeviceRepository
from .entry import EntryRepository
from .segment import SegmentRepository
from .slot import SlotRepository


class TrackerRepository(DeviceRepository, SlotRepository, SegmentRepository, EntryRepository, Protocol):
    """Full persistence capability consumed by ``HabitTracker``."""


__all__ = [
    "DeviceRepository",
    "EntryRepository",
    "SegmentRepository",
    "SlotRepository",
    "TrackerRepository",
]
