"""Pydantic schemas for authentication endpoints"""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class SignupRequest(BaseModel):
    """Request schema for account creation.

    Attributes:
        first_name: Given name
        last_name: Family name
        username: Unique login name
        email: Unique email address (stored lower-cased)
        password: Plain text password (hashed before storage)
        phone: Optional phone number
    """
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    username: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=1)
    phone: Optional[str] = Field(None, max_length=30)


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginUser(BaseModel):
    username: str
    role: str


class LoginResponse(BaseModel):
    """Response schema for successful login."""
    message: str = "Login successful"
    user: LoginUser


class ResetPasswordRequest(BaseModel):
    username: str = Field(..., min_length=1)
    email: EmailStr
    new_password: str = Field(..., alias="newPassword", min_length=1)

    class Config:
        populate_by_name = True


class SendOTPRequest(BaseModel):
    username: Optional[str] = None
    email: EmailStr


class VerifyOTPRequest(BaseModel):
    email: EmailStr
    entered_otp: str = Field(..., alias="enteredOtp", min_length=1, max_length=12)

    class Config:
        populate_by_name = True


class MessageResponse(BaseModel):
    message: str


class SuccessResponse(BaseModel):
    success: bool = True
