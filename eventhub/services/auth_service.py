"""
Auth flow helpers: registration and the forgot-password email check.
"""

import re

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.errors import DatabaseError, DuplicateEmailError
from eventhub.core.logging import get_logger
from eventhub.core.metrics import record_db_operation
from eventhub.core.security import hash_password
from eventhub.models.user import User
from eventhub.schemas.user import RegisterRequest, ForgotPasswordResponse

logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


async def register_user(db: AsyncSession, user_data: RegisterRequest) -> User:
    """
    Register a new user with a hashed password.
    Raises 409 if the email is already registered.
    """
    result = await db.execute(select(User.user_id).where(User.email == user_data.email))
    record_db_operation("read")
    if result.first() is not None:
        logger.warning("registration_failed", reason="email_exists", email=user_data.email)
        raise DuplicateEmailError()

    user = User(email=user_data.email, hashed_password=hash_password(user_data.password))
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with another registration for the same address
        await db.rollback()
        logger.warning("registration_failed", reason="email_exists", email=user_data.email)
        raise DuplicateEmailError()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("registration_failed", reason="db_error", error=str(e))
        raise DatabaseError("Failed to register user")

    record_db_operation("write")
    logger.info("user_registered", user_id=user.user_id, email=user.email)
    return user


async def check_reset_email(db: AsyncSession, email: str) -> ForgotPasswordResponse:
    """Confirm an account exists for ``email`` before a password reset."""
    try:
        result = await db.execute(select(User.user_id).where(User.email == email))
    except SQLAlchemyError as e:
        logger.error("reset_email_check_failed", error=str(e))
        raise DatabaseError("Server error processing request")
    record_db_operation("read")

    user_id = result.scalar_one_or_none()
    if user_id is None:
        logger.info("reset_email_unknown")
        return ForgotPasswordResponse(success=False, message="Email not found", showError=True)

    logger.info("reset_email_verified", user_id=user_id)
    return ForgotPasswordResponse(
        success=True, message="Email verified", userId=user_id, showError=False
    )
