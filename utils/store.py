"""
Session handling shared by the SQLAlchemy-backed stores.
"""

from contextlib import contextmanager
from typing import Callable, Iterator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from core.exceptions import StoreUnavailable
from utils.logger import get_logger

logger = get_logger(__name__)

SessionFactory = Callable[[], Session]


@contextmanager
def store_session(session_factory: SessionFactory, step: str) -> Iterator[Session]:
    """
    Open a session for one store operation.

    Database errors that escape the block are rolled back and re-raised as
    StoreUnavailable naming `step`. Anything else propagates untouched.
    """
    db = session_factory()
    try:
        yield db
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(
            "Store operation failed",
            extra={"step": step, "error_type": type(exc).__name__},
            exc_info=True
        )
        raise StoreUnavailable(step) from exc
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
