"""Admin authentication schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .common import CamelModel


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=255)
    remember_me: bool = False
    totp_code: Optional[str] = Field(None, max_length=10)


class AdminUserInfo(CamelModel):
    id: int
    email: str
    name: str
    role: str
    created_at: Optional[datetime] = None


class LoginResponse(CamelModel):
    access_token: str
    refresh_token: str
    expires_in: str
    user: AdminUserInfo


class TwoFactorChallenge(CamelModel):
    requires_two_factor: bool = True
    message: str = "Please enter your 2FA code"


class RefreshRequest(CamelModel):
    refresh_token: Optional[str] = None


class RefreshResponse(CamelModel):
    access_token: str
    expires_in: str


class MeResponse(CamelModel):
    user: AdminUserInfo


class TwoFactorSetupResponse(CamelModel):
    secret: str
    qr_code: str
    manual_entry: str


class TwoFactorCodeRequest(CamelModel):
    code: Optional[str] = Field(None, max_length=10)


class TwoFactorStatus(CamelModel):
    enabled: bool
