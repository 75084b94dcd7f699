# cafe_orders/models/user.py
from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import EmailStr, Field, field_validator
from ..utils.security import MAX_PASSWORD_BYTES, password_too_long
from .base import CamelModel, TimeStampedModel

OTP_PATTERN = r"^[0-9]{6}$"

class Role(str, Enum):
    STUDENT = "student"
    ADMIN = "admin"

class Student(TimeStampedModel):
    """Customer who signs in with mobile number and OTP"""
    id: int
    mobile: str
    name: Optional[str] = None
    email: Optional[str] = None
    otp: Optional[str] = None
    otp_expiry: Optional[datetime] = None

class Admin(TimeStampedModel):
    """Shop staff account"""
    id: int
    mobile: str
    password: str
    name: Optional[str] = None
    otp: Optional[str] = None
    otp_expiry: Optional[datetime] = None

class SessionUser(CamelModel):
    """Caller identity kept in the session cookie"""
    id: int
    mobile: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def owner_tag(self) -> str:
        """Identifier stored on orders placed by this user"""
        return f"{self.role.value}:{self.id}"

class SendOtpRequest(CamelModel):
    mobile: str = Field(min_length=10, max_length=15)

class VerifyOtpRequest(CamelModel):
    mobile: str
    otp: str = Field(pattern=OTP_PATTERN)

class AdminLoginRequest(CamelModel):
    mobile: str
    password: str
    otp: Optional[str] = Field(default=None, pattern=OTP_PATTERN)

class UpdateProfileRequest(CamelModel):
    email: Optional[EmailStr] = None
    name: Optional[str] = Field(default=None, min_length=1)

class ChangePasswordRequest(CamelModel):
    old_password: str = Field(min_length=1)
    new_password: str = Field(min_length=1, max_length=MAX_PASSWORD_BYTES)

    @field_validator("new_password")
    @classmethod
    def check_password_bytes(cls, value: str) -> str:
        if password_too_long(value):
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value
