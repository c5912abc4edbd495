"""
Authentication utilities for the LLM admin panel.

Every mutating provider/model route depends on require_admin_auth, so the
admin check lives in exactly one place.
"""

import bcrypt
import logging
import secrets
from datetime import timedelta
from typing import Optional, Tuple

from fastapi import Depends, Request
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from llm_admin.config import settings
from llm_admin.database import User, UserSession, get_session
from llm_admin.utils.exceptions import raise_forbidden, raise_unauthorized
from llm_admin.utils.time import utcnow

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt with automatic salt."""
    return bcrypt.hashpw(
        password.encode(), bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    ).decode()


def verify_password(password: str, stored_hash: str) -> bool:
    """Verify a password against a stored bcrypt hash (constant-time comparison)."""
    try:
        return bcrypt.checkpw(password.encode(), stored_hash.encode())
    except (ValueError, TypeError):
        return False


def generate_token() -> str:
    """Generate a secure random token."""
    return secrets.token_hex(32)


async def create_session(session: AsyncSession, user: User) -> str:
    """Create a new session for the user and return the token."""
    token = generate_token()
    expires_at = utcnow() + timedelta(hours=settings.session_expiry_hours)

    session.add(UserSession(user_id=user.id, token=token, expires_at=expires_at))
    await session.commit()

    return token


async def invalidate_token(token: str, session: AsyncSession) -> bool:
    """Invalidate (delete) a session token."""
    stmt = delete(UserSession).where(UserSession.token == token)
    result = await session.execute(stmt)
    await session.commit()
    return result.rowcount > 0


def get_token_from_request(request: Request) -> Optional[str]:
    """Extract the bearer token from the Authorization header."""
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:]
    return None


async def _get_user_from_token(token: str, session: AsyncSession) -> Optional[User]:
    """
    Look up active user by session token.

    Returns User if token is valid and user is active, None otherwise.
    """
    stmt = (
        select(User)
        .join(UserSession, UserSession.user_id == User.id)
        .where(
            UserSession.token == token,
            UserSession.expires_at > utcnow(),
            User.is_active == True,
        )
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


def ensure_admin(user: Optional[User]) -> User:
    """Authorization predicate shared by every admin-only operation."""
    if user is None or not user.is_admin:
        raise_forbidden("not allowed")
    return user


async def require_user_auth(
    request: Request, session: AsyncSession = Depends(get_session)
) -> Tuple[str, User]:
    """Dependency to require user authentication. Returns (token, user)."""
    token = get_token_from_request(request)

    if not token:
        raise_unauthorized("Missing authentication token")

    user = await _get_user_from_token(token, session)

    if not user:
        raise_unauthorized("Invalid or expired token")

    return token, user


async def require_admin_auth(
    auth: Tuple[str, User] = Depends(require_user_auth),
) -> User:
    """Dependency to require an authenticated administrator."""
    _, user = auth
    return ensure_admin(user)


async def optional_user_auth(
    request: Request, session: AsyncSession = Depends(get_session)
) -> Optional[User]:
    """Optional user auth - returns User if authenticated, None if anonymous."""
    token = get_token_from_request(request)
    if not token:
        return None

    return await _get_user_from_token(token, session)
