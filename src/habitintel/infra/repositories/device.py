"""SQLModel implementation of the device repository."""

from __future__ import annotations

from typing import Optional

from sqlmodel import select

from ...models.device import Device
from .base import SQLModelRepository, adapter_call


class SQLModelDeviceRepository(SQLModelRepository):
    """SQLModel-based device repository implementation."""

    @adapter_call("get_device")
    def get_device(self, device_id: str) -> Optional[Device]:
        """Retrieve a device by id."""
        with self.session_factory() as session:
            obj = session.exec(select(Device).where(Device.device_id == device_id)).first()
            if obj:
                session.expunge(obj)
            return obj

    @adapter_call("save_device")
    def save_device(self, device: Device) -> Device:
        """Create or update a device."""
        return self._save(device)
