"""Device repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.device import Device


class DeviceRepository(Protocol):
    """Repository for the installation's device identity."""

    def get_device(self, device_id: str) -> Optional[Device]:
        """Retrieve a device by id."""
        ...

    def save_device(self, device: Device) -> Device:
        """Create or update a device."""
        ...
