import logging
from functools import wraps

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.core.exceptions import ConflictError, StorageError

logger = logging.getLogger(__name__)


def _rollback(args):
    # Service methods are bound: args[0] is the service holding the session
    db = getattr(args[0], "db", None) if args else None
    if db is not None:
        db.rollback()


def db_exception(func):
    """Map persistence failures raised inside a service method to app errors."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except IntegrityError:
            # Unique constraint hit: duplicate entry
            _rollback(args)
            raise ConflictError("Duplicate entry: already exists")
        except SQLAlchemyError as e:
            _rollback(args)
            logger.error(
                f"Storage failure in {func.__qualname__}: {type(e).__name__}",
                exc_info=True,
            )
            raise StorageError("Database error occurred")

    return wrapper
