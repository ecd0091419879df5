# core/security.py
from datetime import datetime, timedelta, timezone
from uuid import UUID

from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from chorecycle.core.config import settings, get_db
from chorecycle.crud.user import crud_user
from chorecycle.models.user import User


# =====================================================================
# JWT TOKEN CONFIGURATION
# =====================================================================

security = HTTPBearer()


def _credentials_exception(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# =====================================================================
# TOKENS
# =====================================================================

def create_access_token(data: dict) -> str:
    """
    Create a signed access token.

    Sign-in lives with the identity provider; this is used by local tooling
    and tests to mint tokens the API accepts.
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_access_token(token: str) -> UUID:
    """
    Verify an access token and return the user id in `sub`.

    Raises:
        HTTPException: 401 if the token is invalid, expired or of another type
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise _credentials_exception()

    if payload.get("type") != "access":
        raise _credentials_exception("Invalid token type. Expected access")

    try:
        return UUID(payload.get("sub"))
    except (TypeError, ValueError):
        raise _credentials_exception()


# =====================================================================
# USER AUTHENTICATION DEPENDENCY
# =====================================================================

async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Authenticated user from the bearer token."""
    user_id = verify_access_token(credentials.credentials)

    user = crud_user.get(db, id=user_id)
    if user is None:
        raise _credentials_exception("User not found")
    return user
