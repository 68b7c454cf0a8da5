"""Authentication and authorization."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import func
from sqlalchemy.orm import Session

from .config import Settings
from .constants import USER_ROLES
from .errors import ConfigurationError, ForbiddenError, UnauthorizedError
from .models import User

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
logger = logging.getLogger(__name__)

# Bearer token scheme; missing credentials are reported by get_current_user.
security = HTTPBearer(auto_error=False)

INVALID_TOKEN = "Invalid or expired token"


@dataclass(frozen=True)
class Principal:
    """Identity resolved from a verified access token."""

    id: str
    email: str
    role: str

    def claims(self) -> dict:
        return {"id": self.id, "email": self.email, "role": self.role}


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # Invalid/corrupted hash should not crash login flow.
        logger.exception("Password verification failed due to invalid hash format")
        return False


def get_password_hash(password: str) -> str:
    """Hash password."""
    return pwd_context.hash(password)


def _signing_secret(settings: Settings) -> str:
    if not settings.JWT_SECRET:
        raise ConfigurationError("JWT secret is not configured")
    return settings.JWT_SECRET


def create_access_token(principal: Principal, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token embedding {id, email, role}."""
    now = int(time.time())
    lifetime = expires_delta if expires_delta is not None else timedelta(hours=settings.JWT_EXPIRE_HOURS)
    to_encode = principal.claims()
    to_encode.update({"sub": principal.id, "iat": now, "exp": now + int(lifetime.total_seconds())})
    return jwt.encode(to_encode, _signing_secret(settings), algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str, settings: Settings) -> Principal:
    """Verify signature and expiry, and return the embedded principal."""
    secret = _signing_secret(settings)
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise UnauthorizedError(INVALID_TOKEN)

    user_id, email, role = payload.get("id"), payload.get("email"), payload.get("role")
    if not isinstance(user_id, str) or not isinstance(email, str) or role not in USER_ROLES:
        raise UnauthorizedError(INVALID_TOKEN)
    return Principal(id=user_id, email=email, role=role)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Principal:
    """Authenticate the request and attach the principal to ``request.state.user``."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Access token required")

    principal = decode_token(credentials.credentials, request.app.state.settings)
    request.state.user = principal
    return principal


def require_role(*allowed: str) -> Callable[[Request], Principal]:
    """Second-stage guard; must run after get_current_user."""
    allowed_roles = frozenset(allowed)

    def checker(request: Request) -> Principal:
        principal = getattr(request.state, "user", None)
        if principal is None or principal.role not in allowed_roles:
            raise ForbiddenError("Insufficient permissions")
        return principal

    return checker


def find_user_by_email(db: Session, email: str) -> User | None:
    # Emails are matched case-insensitively everywhere.
    return db.query(User).filter(func.lower(User.email) == email.lower()).first()


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    """Return the user for valid credentials, otherwise None.

    Unknown emails still pay for one bcrypt verification so response timing
    doesn't reveal which accounts exist.
    """
    user = find_user_by_email(db, email)
    if user is None:
        pwd_context.dummy_verify()
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def principal_for(user: User) -> Principal:
    return Principal(id=str(user.id), email=user.email, role=user.role)
