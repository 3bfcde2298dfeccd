"""Admin authentication router: login, token refresh and two-factor setup."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DatabaseSession, RequiredAdmin
from ..core.exceptions import ProblemDetailsException, internal_error
from ..core.rate_limit import auth_limit
from ..schemas.auth import (
    AdminUserInfo,
    LoginRequest,
    LoginResponse,
    MeResponse,
    RefreshRequest,
    RefreshResponse,
    TwoFactorChallenge,
    TwoFactorCodeRequest,
    TwoFactorSetupResponse,
    TwoFactorStatus,
)
from ..schemas.common import SuccessResponse
from ..services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"], dependencies=[Depends(auth_limit)])

USER_AGENT_HEADER = Header(None, alias="User-Agent")


@router.post("/login", response_model=LoginResponse | TwoFactorChallenge)
async def login(
    request: LoginRequest,
    db: AsyncSession = DatabaseSession,
    user_agent: Optional[str] = USER_AGENT_HEADER,
) -> JSONResponse:
    """
    Log the admin in.

    When two-factor authentication is enabled and no code was sent, the
    response asks for one instead of issuing tokens.
    """
    try:
        result = await AuthService(db).login(
            email=request.email,
            password=request.password,
            remember_me=request.remember_me,
            totp_code=request.totp_code,
            device_info=user_agent,
        )

        if result.get("requires_two_factor"):
            return JSONResponse(content=TwoFactorChallenge().to_json())

        response = LoginResponse(
            access_token=result["access_token"],
            refresh_token=result["refresh_token"],
            expires_in=result["expires_in"],
            user=AdminUserInfo.model_validate(result["user"]),
        )
        return JSONResponse(content=response.to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "log in", e) from e


@router.post("/refresh", response_model=RefreshResponse)
async def refresh_token(
    request: RefreshRequest,
    db: AsyncSession = DatabaseSession,
) -> JSONResponse:
    try:
        result = await AuthService(db).refresh(request.refresh_token)
        return JSONResponse(content=RefreshResponse(**result).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "refresh token", e) from e


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    request: Optional[RefreshRequest] = None,
    db: AsyncSession = DatabaseSession,
) -> JSONResponse:
    """Revoke the refresh token. Always succeeds."""
    try:
        await AuthService(db).logout(request.refresh_token if request else None)
    except Exception as e:
        logger.error("Logout failed", extra={"error": str(e)}, exc_info=True)

    return JSONResponse(content=SuccessResponse().to_json())


@router.get("/me", response_model=MeResponse)
async def me(
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        user = await AuthService(db).get_user(admin["user_id"])
        return JSONResponse(content=MeResponse(user=AdminUserInfo.model_validate(user)).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "get user info", e) from e


@router.post("/2fa/setup", response_model=TwoFactorSetupResponse)
async def setup_two_factor(
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    """Start TOTP enrollment: returns the secret and a QR code for an authenticator app."""
    try:
        result = await AuthService(db).setup_two_factor(admin["user_id"])
        return JSONResponse(content=TwoFactorSetupResponse(**result).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "setup 2FA", e) from e


@router.post("/2fa/verify", response_model=SuccessResponse)
async def verify_two_factor(
    request: TwoFactorCodeRequest,
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        await AuthService(db).verify_two_factor(admin["user_id"], request.code)
        return JSONResponse(content=SuccessResponse(message="2FA enabled successfully").to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "verify 2FA", e) from e


@router.post("/2fa/disable", response_model=SuccessResponse)
async def disable_two_factor(
    request: TwoFactorCodeRequest,
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        await AuthService(db).disable_two_factor(admin["user_id"], request.code)
        return JSONResponse(content=SuccessResponse(message="2FA disabled successfully").to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "disable 2FA", e) from e


@router.get("/2fa/status", response_model=TwoFactorStatus)
async def two_factor_status(
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        enabled = await AuthService(db).two_factor_enabled(admin["user_id"])
        return JSONResponse(content=TwoFactorStatus(enabled=enabled).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "get 2FA status", e) from e
