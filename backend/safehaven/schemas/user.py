"""
Safe Haven Backend: Account Schemas
=====================================

What:  Request/response models for /api/auth and /api/users.

No response model declares a password field, so a stored hash cannot be
serialized even if a handler returns the ORM row directly.
"""

import uuid
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from safehaven.schemas.appointment import PHONE_PATTERN


class RegisterRequest(BaseModel):
    first_name: str = Field(min_length=2, max_length=50)
    last_name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    date_of_birth: Optional[date] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class ProfileUpdateRequest(BaseModel):
    """Every field optional; only the ones sent are written."""

    first_name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    date_of_birth: Optional[date] = None
    bio: Optional[str] = Field(default=None, max_length=500)
    specializations: Optional[List[str]] = None
    license_number: Optional[str] = Field(default=None, max_length=64)
    email_notifications: Optional[bool] = None


class ActivationRequest(BaseModel):
    is_active: bool


class UserResponse(BaseModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    role: str
    is_active: bool
    bio: Optional[str] = None
    specializations: List[str] = Field(default_factory=list)
    license_number: Optional[str] = None
    email_notifications: bool = True
    created_at: datetime

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    success: bool = True
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class UserEnvelope(BaseModel):
    success: bool = True
    user: UserResponse
