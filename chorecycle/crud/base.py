# crud/base.py
import functools
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from chorecycle.core.exceptions import DatabaseConflictError, DatabaseError

logger = logging.getLogger(__name__)


def db_operation(func):
    """
    Wrap a CRUD method so driver errors surface as DatabaseError.

    The session is rolled back first, so a failed write never leaves
    half-applied changes pending on the session.
    """

    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        db = args[0] if args else kwargs["db"]
        try:
            return func(self, *args, **kwargs)
        except IntegrityError as exc:
            db.rollback()
            raise DatabaseConflictError(str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("%s failed: %s", func.__qualname__, exc)
            raise DatabaseError(str(exc)) from exc

    return wrapper
