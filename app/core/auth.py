# app/core/auth.py
"""
Bearer-token authentication for Supabase-issued JWTs.

Every protected route resolves the caller through `get_current_user`.
`require_user` (cart owners) and `require_admin` (catalog managers)
then gate on the application role stored in our `users` table.
"""
import logging
import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlmodel import Session

from app.core.config import get_settings
from app.database import get_session
from app.models.user import ROLE_ADMIN, ROLE_USER, USERNAME_MAX_LENGTH, User
from app.repositories.user_repo import UserRepository

settings = get_settings()
logger = logging.getLogger(__name__)

# A missing header is reported as 401 by get_current_user, not by the scheme.
bearer_scheme = HTTPBearer(auto_error=False)
users = UserRepository()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def identity_from_token(token: str) -> tuple[uuid.UUID, str]:
    """
    Verify signature and expiry of an access token and return
    `(user_id, email)` from its `sub` and `email` claims.

    The `aud` claim is not checked; Supabase sets it per project.
    """
    try:
        claims = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.SUPABASE_JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError:
        raise _unauthorized("Invalid or expired token")

    email = claims.get("email")
    if not email:
        raise _unauthorized("Token carries no email")

    try:
        user_id = uuid.UUID(str(claims.get("sub") or ""))
    except ValueError:
        raise _unauthorized("Token subject is not a user id")

    return user_id, email


def default_username(email: str) -> str:
    """Local part of the email, cut to fit the username column."""
    local = email.partition("@")[0] or email
    return local[:USERNAME_MAX_LENGTH]


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User:
    """
    Resolve the caller's profile, creating it on first sight.

    New profiles start as customers; admins are promoted by another admin.
    """
    if credentials is None:
        raise _unauthorized("Authentication required")

    user_id, email = identity_from_token(credentials.credentials)

    user = users.get_by_id(session, user_id)
    if user is None:
        user = users.save(
            session,
            User(id=user_id, email=email, username=default_username(email)),
        )
        logger.info("Provisioned profile for %s", user_id)

    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != ROLE_ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


def require_user(user: User = Depends(get_current_user)) -> User:
    """Cart routes: customers only, admins get 403."""
    if user.role != ROLE_USER:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Customer access required",
        )
    return user
