"""
Safe Haven Backend: Contact Form Schema
"""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from safehaven.enums import ContactSubject
from safehaven.schemas.appointment import PHONE_PATTERN


class ContactRequest(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    subject: ContactSubject
    message: str = Field(min_length=10, max_length=1000)


class ContactResponse(BaseModel):
    success: bool = True
    message: str = "Thank you for your message. We will get back to you within 24 hours."
