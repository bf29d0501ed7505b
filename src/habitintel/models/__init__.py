"""SQLModel table exports."""

from .device import Device
from .habit import HabitEntry, HabitSegment
from .slot import Slot

__all__ = [
    "Device",
    "HabitEntry",
    "HabitSegment",
    "Slot",
]
