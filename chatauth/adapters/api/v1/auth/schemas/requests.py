"""Request-payload Pydantic models for authentication endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, constr

from chatauth.domain.entities.device import DeviceType

# ---------------------------------------------------------------------------
# Shared / primitive types ---------------------------------------------------
# ---------------------------------------------------------------------------

UsernameStr = constr(min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
PasswordStr = constr(min_length=8, max_length=128)
DisplayNameStr = constr(strip_whitespace=True, min_length=1, max_length=100)
PhoneStr = constr(strip_whitespace=True, max_length=20)

# ---------------------------------------------------------------------------
# Concrete request models ----------------------------------------------------
# ---------------------------------------------------------------------------


class DeviceInfo(BaseModel):
    """Optional push device fields accepted on register and login."""

    device_token: Optional[str] = Field(None, max_length=512, examples=["fcm:APA91bH..."])
    device_type: Optional[DeviceType] = Field(None, examples=["ios"])
    device_name: Optional[str] = Field(None, max_length=100, examples=["iPhone 15"])


class RegisterRequest(DeviceInfo):
    """Payload expected by ``POST /auth/register``."""

    email: EmailStr = Field(..., examples=["john@example.com"])
    password: PasswordStr = Field(..., examples=["Str0ngP@ssw0rd"])
    display_name: DisplayNameStr = Field(..., examples=["John Doe"])
    username: Optional[UsernameStr] = Field(None, examples=["john_doe"])
    phone_number: Optional[PhoneStr] = Field(None, examples=["+84901234567"])
    bio: Optional[str] = Field(None, max_length=500)


class LoginRequest(DeviceInfo):
    """Payload expected by ``POST /auth/login``."""

    email: EmailStr = Field(..., examples=["john@example.com"])
    password: str = Field(..., min_length=1, examples=["Str0ngP@ssw0rd"])


class RefreshRequest(BaseModel):
    """Payload expected by ``POST /auth/refresh``."""

    refresh_token: str = Field(..., min_length=1, examples=["eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9..."])


class LogoutRequest(BaseModel):
    """Payload expected by ``POST /auth/logout``."""

    device_token: Optional[str] = Field(None, examples=["fcm:APA91bH..."])
