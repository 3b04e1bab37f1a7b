"""Authentication helpers and FastAPI security dependencies.

Clients send the session token returned by `/api/login` in the
`X-Authorization` header. `get_current_user` validates it and returns
the corresponding `User`; `get_optional_user` does the same for
endpoints where authentication only narrows the result.

Failures raise `UnauthorizedError`, so the dependencies can be used
directly inside route signatures.
"""

from typing import Optional
from fastapi import Depends, Security
from fastapi.security import APIKeyHeader
from sqlmodel import Session
from . import models, services
from .database import get_session
from .errors import UnauthorizedError

session_token_scheme = APIKeyHeader(name="X-Authorization", auto_error=False)


def get_current_user(
    token: Optional[str] = Security(session_token_scheme),
    db: Session = Depends(get_session),
) -> models.User:
    """FastAPI dependency that returns the authenticated user.

    Raises `UnauthorizedError` when the header is missing or the token
    does not map to an active session.
    """
    if not token:
        raise UnauthorizedError("Missing session token")
    return services.AuthService(db).resolve(token)


def get_optional_user(
    token: Optional[str] = Security(session_token_scheme),
    db: Session = Depends(get_session),
) -> Optional[models.User]:
    """Like `get_current_user` but returns `None` when no token is sent.

    A token that is present but invalid is still rejected.
    """
    if not token:
        return None
    return services.AuthService(db).resolve(token)
