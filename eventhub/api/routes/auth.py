"""
Authentication helper endpoints: registration and forgot-password check.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.errors import InvalidFormError
from eventhub.db.session import get_db
from eventhub.schemas.user import (
    RegisterRequest, RegisterResponse, ForgotPasswordRequest, ForgotPasswordResponse,
)
from eventhub.services.auth_service import register_user, check_reset_email, is_valid_email

router = APIRouter(tags=["Authentication"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Register a new user account."""
    await register_user(db, user_data)
    return RegisterResponse(success=True, message="User registered")


@router.post("/forgot-password", response_model=ForgotPasswordResponse)
async def forgot_password(payload: ForgotPasswordRequest, db: AsyncSession = Depends(get_db)):
    """Check that an account exists for the email before starting a reset."""
    if not payload.email:
        raise InvalidFormError("Email Required")
    if not is_valid_email(payload.email):
        raise InvalidFormError("Invalid email format")
    return await check_reset_email(db, payload.email)
