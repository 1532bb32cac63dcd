"""Shared error signalling for the persistence services."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the database fails for any reason other than a missing row."""

    def __init__(self, message: str = "Internal server error") -> None:
        self.message = message
        super().__init__(message)


@contextmanager
def store_operation(db: Session, action: str) -> Iterator[None]:
    """
    Run a unit of store work. SQLAlchemy failures roll the session back, are
    logged with their traceback and re-raised as StoreError.
    """
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Store operation failed: %s", action)
        raise StoreError() from e
