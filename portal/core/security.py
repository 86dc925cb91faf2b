"""Security utilities: JWT, password hashing, current-user resolution."""

import uuid
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.config import settings
from portal.core.exceptions import Forbidden, Unauthorized
from portal.db.session import get_db
from portal.models.user import User

# HTTPBearer for simple token authentication in Swagger (just paste the access token)
security = HTTPBearer(auto_error=False)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class Role(str, Enum):
    """User roles."""

    STUDENT = "student"
    COMPANY = "company"
    ADMIN = "admin"


def get_password_hash(password: str) -> str:
    """Hash a password for storage."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Check a plain password against its stored hash."""
    if not password_hash:
        return False
    return pwd_context.verify(plain_password, password_hash)


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token carrying the actor identity."""
    expire = datetime.utcnow() + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {
        "sub": str(user.id),
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "is_demo": bool(user.is_demo),
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise Unauthorized("Could not validate credentials")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Get current authenticated user from Bearer token."""
    if credentials is None:
        raise Unauthorized("Not authenticated")

    payload = decode_token(credentials.credentials)

    subject = payload.get("sub")
    if subject is None or payload.get("type") != "access":
        raise Unauthorized("Could not validate credentials")

    try:
        user_id = uuid.UUID(subject)
    except ValueError:
        raise Unauthorized("Could not validate credentials")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None:
        raise Unauthorized("User not found")

    if not user.is_active:
        raise Forbidden("Inactive user")

    return user


def require_role(*allowed_roles: Role):
    """Dependency factory that admits only the given roles."""

    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in {role.value for role in allowed_roles}:
            raise Forbidden(
                f"Insufficient permissions. Required: {[r.value for r in allowed_roles]}"
            )
        return current_user

    return role_checker
