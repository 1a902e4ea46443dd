"""
BaseService -- abstract base for all kernel write services.

Services receive a SQLAlchemy ``Session`` and persist changes with
``session.flush()`` -- never ``session.commit()``.  The caller (usually
``session_scope()``) owns commit and rollback.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from ledger_kernel.db.base import Base
from ledger_kernel.domain.clock import Clock, SystemClock

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for all kernel services.

    Guarantees:
        - The service never commits or rolls back.
        - All timestamps come from the injected clock.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self.session = session
        self._clock = clock or SystemClock()
