"""Shared constants."""

from __future__ import annotations

# Palette offered when creating a habit; any CSS colour string is accepted.
COLORS: tuple[str, ...] = (
    "#3B82F6",  # blue
    "#22C55E",  # green
    "#8B5CF6",  # purple
    "#F59E0B",  # orange
    "#EC4899",  # pink
    "#06B6D4",  # cyan
    "#F43F5E",  # rose
)

DEFAULT_COLOR = COLORS[0]
