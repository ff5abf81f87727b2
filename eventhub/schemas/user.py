"""
Pydantic schemas for the registration and forgot-password flows.
"""

from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    email: EmailStr
    # bcrypt ignores anything past 72 bytes
    password: str = Field(..., min_length=8, max_length=72)


class RegisterResponse(BaseModel):
    success: bool
    message: str


class ForgotPasswordRequest(BaseModel):
    # Format is checked by the route so it can answer with its own messages
    email: Optional[str] = None


class ForgotPasswordResponse(BaseModel):
    success: bool
    message: str
    userId: Optional[int] = None
    showError: bool = True
