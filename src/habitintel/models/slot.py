"""Time-of-day tracking rows."""

from __future__ import annotations

from typing import ClassVar
from uuid import uuid4

from sqlmodel import Field, SQLModel


def new_record_id() -> str:
    return uuid4().hex


class Slot(SQLModel, table=True):
    """A recurring time-of-day row that habits occupy over time."""

    __tablename__: ClassVar[str] = "slot"

    id: str = Field(default_factory=new_record_id, primary_key=True, max_length=64)
    device_id: str = Field(foreign_key="device.device_id", nullable=False, index=True, max_length=64)
    # HH:MM, only used for display
    time: str = Field(nullable=False, max_length=5)
    order: int = Field(default=0, nullable=False)
