"""Shared plumbing for SQLModel repositories."""

from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from functools import wraps
from typing import Any, Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel

from ...errors import AdapterUnavailableError

SessionFactory = Callable[[], AbstractContextManager[Session]]

logger = logging.getLogger("habitintel.infra.repositories")

_F = TypeVar("_F", bound=Callable[..., Any])


def _record_id(args: tuple[Any, ...]) -> Any:
    if not args:
        return None
    if isinstance(args[0], str):
        return args[0]
    if isinstance(args[0], SQLModel):
        return getattr(args[0], "id", None)
    return None


def adapter_call(operation: str) -> Callable[[_F], _F]:
    """Surface storage failures as ``AdapterUnavailableError``.

    The first positional argument is reported as the record id: a string id
    as-is, a record through its ``id``.
    """

    def decorator(func: _F) -> _F:
        @wraps(func)
        def wrapper(self, *args: Any, **kwargs: Any) -> Any:
            try:
                return func(self, *args, **kwargs)
            except SQLAlchemyError as exc:
                record_id = _record_id(args)
                logger.error(
                    "Storage call failed",
                    extra={"operation": operation, "record_id": record_id},
                    exc_info=True,
                )
                raise AdapterUnavailableError(
                    f"{operation} failed: {exc}", operation=operation, record_id=record_id
                ) from exc

        return wrapper  # type: ignore[return-value]

    return decorator


class SQLModelRepository:
    """Base class holding the session factory."""

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def _save(self, record: SQLModel) -> Any:
        """Insert or update ``record`` and return a detached copy."""
        with self.session_factory() as session:
            merged = session.merge(record)
            session.commit()
            session.refresh(merged)
            session.expunge(merged)
            return merged
