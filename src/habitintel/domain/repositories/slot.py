"""Slot repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ...models.slot import Slot


class SlotRepository(Protocol):
    """Repository for time-of-day slots."""

    def load_slots(self, device_id: str) -> list[Slot]:
        """List a device's slots ordered by ``order`` ascending."""
        ...

    def get_slot(self, slot_id: str) -> Optional[Slot]:
        """Retrieve a slot by id."""
        ...

    def save_slot(self, slot: Slot) -> Slot:
        """Create or update a slot."""
        ...

    def reorder_slots(self, device_id: str, ordered_ids: Sequence[str]) -> None:
        """Set each listed slot's ``order`` to its position in ``ordered_ids``."""
        ...

    def delete_slot(self, slot_id: str) -> None:
        """Delete a slot; owned segments are removed by the caller."""
        ...
