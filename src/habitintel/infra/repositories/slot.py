"""SQLModel implementation of the slot repository."""

from __future__ import annotations

from typing import Optional, Sequence

from sqlmodel import col, select

from ...models.slot import Slot
from .base import SQLModelRepository, adapter_call


class SQLModelSlotRepository(SQLModelRepository):
    """SQLModel-based slot repository implementation."""

    @adapter_call("load_slots")
    def load_slots(self, device_id: str) -> list[Slot]:
        """List a device's slots by display order."""
        with self.session_factory() as session:
            statement = (
                select(Slot).where(Slot.device_id == device_id).order_by(col(Slot.order), col(Slot.id))
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    @adapter_call("get_slot")
    def get_slot(self, slot_id: str) -> Optional[Slot]:
        """Retrieve a slot by id."""
        with self.session_factory() as session:
            obj = session.get(Slot, slot_id)
            if obj:
                session.expunge(obj)
            return obj

    @adapter_call("save_slot")
    def save_slot(self, slot: Slot) -> Slot:
        """Create or update a slot."""
        return self._save(slot)

    @adapter_call("reorder_slots")
    def reorder_slots(self, device_id: str, ordered_ids: Sequence[str]) -> None:
        """Rewrite ``order`` for every listed slot in one transaction."""
        positions = {slot_id: index for index, slot_id in enumerate(ordered_ids)}
        with self.session_factory() as session:
            rows = session.exec(
                select(Slot).where(Slot.device_id == device_id).where(col(Slot.id).in_(list(positions)))
            ).all()
            for slot in rows:
                slot.order = positions[slot.id]
                session.add(slot)
            session.commit()

    @adapter_call("delete_slot")
    def delete_slot(self, slot_id: str) -> None:
        """Delete a slot by id."""
        with self.session_factory() as session:
            slot = session.get(Slot, slot_id)
            if slot:
                session.delete(slot)
                session.commit()
