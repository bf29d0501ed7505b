"""Domain interfaces for the tracker core."""
