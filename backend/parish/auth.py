"""
Authentication utilities: bcrypt password hashing, JWT bearer tokens,
and the FastAPI dependency that guards admin routes.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from parish.config import Settings, get_settings
from parish.db import get_db
from parish.models.user import User

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is a 401, same as a bad token
security = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


def create_access_token(user: User, expires_hours: Optional[int] = None) -> str:
    """Create a JWT access token carrying the user's id, username and role."""
    settings = get_settings()
    hours = settings.jwt_expire_hours if expires_hours is None else expires_hours
    expire = datetime.now(timezone.utc) + timedelta(hours=hours)
    to_encode = {
        "sub": str(user.id),
        "username": user.username,
        "role": user.role,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def warn_if_default_secret(settings: Optional[Settings] = None) -> bool:
    """Log a warning (and return True) when tokens would be signed with the built-in secret."""
    settings = settings or get_settings()
    if settings.jwt_secret == Settings.jwt_secret:
        logger.warning(
            "JWT_SECRET is not set; tokens are signed with the built-in development secret"
        )
        return True
    return False


def decode_token(token: str) -> Optional[dict]:
    """Decode and validate a JWT token (signature and expiry). None if invalid."""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def authenticate_user(db: Session, username: str, password: str) -> Optional[User]:
    user = db.query(User).filter(User.username == username).first()
    if user is None or not user.is_active:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Dependency to get the current authenticated user.
    Validates the bearer JWT and loads the (still active) user.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None or not credentials.credentials:
        raise credentials_exception

    payload = decode_token(credentials.credentials)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise credentials_exception

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        raise credentials_exception
    return user
