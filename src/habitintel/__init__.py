"""HabitIntel: slot-based daily habit tracking with streaks and monthly analytics."""

from __future__ import annotations

from .config import BaseConfig, DevConfig
from .services.tracker import HabitTracker

__all__ = ["BaseConfig", "DevConfig", "HabitTracker"]
