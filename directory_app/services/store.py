"""
Helpers for talking to the data store from services.
"""

import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from directory_app.errors import TransientStoreError

logger = logging.getLogger(__name__)


@contextmanager
def store_operation(db: Session, operation: str):
    """
    Run a block of store calls; on failure roll back and raise TransientStoreError.

    Nothing is retried here: the caller surfaces the error and the user retries.
    """
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Store operation '%s' failed: %s", operation, e)
        raise TransientStoreError(operation, e) from e
