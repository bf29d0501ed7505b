"""Service module exports.

``export_json`` is imported on demand; it depends on ``models.wire``, which
itself relies on ``services.dates``.
"""

from . import (
    analytics,
    dates,
    jobs,
    streaks,
    timeline,
    tracker,
)

__all__ = [
    "analytics",
    "dates",
    "jobs",
    "streaks",
    "timeline",
    "tracker",
]
