"""Application context for dependency injection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

from .config import BaseConfig
from .infra.database import create_db_engine, create_session_factory, init_database
from .infra.repositories.base import SessionFactory
from .infra.repositories.tracker import SQLModelTrackerRepository
from .services.tracker import HabitTracker

logger = logging.getLogger("habitintel.context")


@dataclass
class AppContext:
    """Centralized application context with services and state."""

    config: BaseConfig
    session_factory: SessionFactory
    repository: SQLModelTrackerRepository
    tracker: HabitTracker
    device_id: str


def ensure_device_id(config: BaseConfig) -> str:
    """Return this installation's device id, generating and persisting it once."""

    path = config.device_id_path
    if path.exists():
        device_id = path.read_text(encoding="utf-8").strip()
        if device_id:
            return device_id
    device_id = uuid4().hex
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(device_id, encoding="utf-8")
    logger.info("Generated device id", extra={"device_id": device_id, "path": str(path)})
    return device_id


def create_app_context(config: Optional[BaseConfig] = None) -> AppContext:
    """Create and initialize the application context."""

    if config is None:
        config = BaseConfig()

    engine = create_db_engine(config)
    init_database(engine)
    session_factory = create_session_factory(engine)

    repository = SQLModelTrackerRepository(session_factory)
    return AppContext(
        config=config,
        session_factory=session_factory,
        repository=repository,
        tracker=HabitTracker(repository),
        device_id=ensure_device_id(config),
    )
