"""Device identity for a single installation."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar

from sqlmodel import Field, SQLModel


class Device(SQLModel, table=True):
    """One installation; owns every slot, segment and entry recorded on it."""

    __tablename__: ClassVar[str] = "device"

    device_id: str = Field(primary_key=True, max_length=64)
    username: str = Field(nullable=False, max_length=64)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
