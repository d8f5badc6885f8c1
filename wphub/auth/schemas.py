"""Auth domain schemas.

Request and response schemas for authentication operations.
"""

from pydantic import BaseModel, EmailStr, Field


class AuthRegister(BaseModel):
    """Request schema for user registration."""

    email: EmailStr
    password: str = Field(min_length=8)
    full_name: str = Field(min_length=1, max_length=120)
    company: str | None = Field(default=None, max_length=120)


class EmailPasswordLoginRequest(BaseModel):
    email: EmailStr
    password: str


class PasswordResetRequest(BaseModel):
    email: EmailStr


class ConfirmPasswordResetRequest(BaseModel):
    oob_code: str
    new_password: str = Field(min_length=8)
