"""
Bearer-token identity.

Tokens are issued by the identity provider (Google / OIDC login lives outside
this service) and signed with the shared SECRET_KEY. We only verify them,
make sure a matching user row exists, and authorize by the role stored on
that row.
"""
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import AuthorizationError, UnauthorizedError
from app.models.user import User
from app.services.database import get_db

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(subject: Any, expires_delta: Optional[timedelta] = None, **claims: Any) -> str:
    """Mint a token the way the identity provider does. Used by scripts and tests."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode: Dict[str, Any] = {"sub": str(subject), "exp": expire, **claims}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.warning(f"Rejected bearer token: {e}")
        raise UnauthorizedError("Could not validate credentials")


async def _user_from_token(token: str, db: AsyncSession) -> User:
    claims = decode_access_token(token)
    try:
        user_id = uuid.UUID(str(claims.get("sub")))
    except ValueError:
        raise UnauthorizedError("Could not validate credentials")

    user = await db.get(User, user_id)
    if user:
        return user

    # First request from someone the identity provider knows but we don't yet.
    email = claims.get("email")
    if not email:
        raise UnauthorizedError("Unknown user")
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise UnauthorizedError("Email is linked to a different account")

    user = User(
        id=user_id,
        email=email,
        first_name=claims.get("first_name"),
        last_name=claims.get("last_name"),
        profile_image_url=claims.get("picture"),
    )
    db.add(user)
    await db.flush()
    logger.info(f"Provisioned user {user.id} ({email}) from identity provider")
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    if credentials is None:
        raise UnauthorizedError()
    return await _user_from_token(credentials.credentials, db)


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise AuthorizationError("Admin access required")
    return current_user
