"""
Access guard: refresh-token verification, role gating and password hashing.

Tokens are HS256 JWTs carried in the ``refresh_token`` cookie. Issuing them
belongs to the login flow, which lives outside this service;
``create_refresh_token`` exists so tooling and tests can mint tokens the
guard accepts.

Route handlers never read the cookie themselves. They depend on
``get_auth_context`` / ``require_event_manager`` and receive an explicit
``AuthContext`` which is then passed down into the services.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Depends, Request
from jose import JWTError, jwt

from eventhub.core.config import get_settings
from eventhub.core.errors import ForbiddenError, InvalidTokenError, UnauthorizedError
from eventhub.core.logging import get_logger
from eventhub.core.metrics import record_auth_denial

logger = get_logger(__name__)
settings = get_settings()

EVENT_MANAGER_ROLES = frozenset({"admin", "owner"})

# bcrypt only looks at the first 72 bytes and newer releases refuse longer input
BCRYPT_MAX_BYTES = 72


@dataclass(frozen=True)
class AuthContext:
    email: Optional[str]
    role: str

    @property
    def can_manage_events(self) -> bool:
        return self.role in EVENT_MANAGER_ROLES


@dataclass
class TokenVerification:
    success: bool
    message: str
    payload: dict = field(default_factory=dict)


def hash_password(password: str) -> str:
    digest = bcrypt.hashpw(password.encode("utf-8")[:BCRYPT_MAX_BYTES], bcrypt.gensalt())
    return digest.decode("utf-8")


def create_refresh_token(
    email: str,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS))
    claims = {
        "user_email": email,
        "role": role,
        "type": "refresh",
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_refresh_token(token: str) -> TokenVerification:
    """Decode and check a refresh token. Never raises."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.info("refresh_token_rejected", reason=type(e).__name__)
        return TokenVerification(success=False, message="Invalid token")

    if payload.get("type") != "refresh" or not payload.get("role"):
        logger.info("refresh_token_rejected", reason="bad_claims")
        return TokenVerification(success=False, message="Invalid token")

    return TokenVerification(success=True, message="Token verified", payload=payload)


def get_auth_context(request: Request) -> AuthContext:
    """FastAPI dependency: resolve the caller from the refresh token cookie."""
    token = request.cookies.get(settings.REFRESH_TOKEN_COOKIE)
    if not token:
        record_auth_denial("no_token")
        raise UnauthorizedError()

    result = verify_refresh_token(token)
    if not result.success:
        record_auth_denial("invalid_token")
        raise InvalidTokenError()

    return AuthContext(email=result.payload.get("user_email"), role=result.payload["role"])


def require_event_manager(auth: AuthContext = Depends(get_auth_context)) -> AuthContext:
    """FastAPI dependency: only admins and owners may create events."""
    if not auth.can_manage_events:
        record_auth_denial("forbidden")
        logger.warning("event_manager_required", email=auth.email, role=auth.role)
        raise ForbiddenError()
    return auth
