import functools
import logging
from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.requests import Request

logger = logging.getLogger(__name__)

# ---------------------------
# CRUD (Database abstraction)
# ---------------------------

class DatabaseError(Exception):
    """Base class for all database-related errors."""
    pass

class DatabaseConflictError(DatabaseError):
    """Raised when a database constraint is violated (e.g., unique key)."""
    pass

# ---------------------------
# Service (Business logic)
# ---------------------------

class BusinessError(Exception):
    """Base class for all business logic errors."""
    pass

class StoreError(BusinessError):
    """Raised when a store read or write fails; the request is aborted."""
    pass

class NotFoundError(BusinessError):
    """Raised when a requested user, activity or completion does not exist."""
    pass

class ConflictError(BusinessError):
    """Raised when a write collides with an existing row."""
    pass

class AuthorizationError(BusinessError):
    """Raised when a caller acts on a user they share no family with."""
    pass

class ValidationError(BusinessError):
    """Raised when an id, date or transition is missing or malformed."""
    pass

class InvalidTransitionError(ValidationError):
    """Raised when a timer action is not allowed from the current status."""
    pass


def translate_store_errors(func):
    """Service decorator: CRUD DatabaseErrors become StoreError/ConflictError."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseConflictError as exc:
            raise ConflictError(str(exc)) from exc
        except DatabaseError as exc:
            raise StoreError(str(exc)) from exc

    return wrapper


# ---------------------------
# FastAPI Exception Handlers
# ---------------------------

def register_exception_handlers(app):
    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": str(exc)},
        )

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError):
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"detail": str(exc)},
        )

    @app.exception_handler(AuthorizationError)
    async def authorization_handler(request: Request, exc: AuthorizationError):
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={"detail": str(exc)},
        )

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc)},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        logger.error("Store error: %s", exc, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )
