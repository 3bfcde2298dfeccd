"""Admin login, token refresh and TOTP two-factor management."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..core import security
from ..core.config import settings
from ..core.exceptions import AuthenticationError, InternalServerError, NotFoundError, ValidationError
from ..core.observability import metrics_collector
from ..models.admin import ENV_MANAGED_PASSWORD, AdminUser, RefreshToken

logger = logging.getLogger(__name__)

REMEMBER_ME_DAYS = settings.refresh_token_days
SESSION_DAYS = 1


class AuthService:
    """
    Authentication for the single dashboard admin.

    The credentials come from configuration. The ``admin_users`` row is
    created on first login and holds the TOTP state and refresh tokens.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_user_by_email(self, email: str) -> Optional[AdminUser]:
        result = await self.db.execute(select(AdminUser).where(AdminUser.email == email))
        return result.scalar_one_or_none()

    async def get_user(self, user_id: int) -> AdminUser:
        result = await self.db.execute(
            select(AdminUser).where(AdminUser.id == user_id, AdminUser.is_active.is_(True))
        )
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError("user", str(user_id), detail="User not found")
        return user

    async def login(
        self,
        email: str,
        password: str,
        remember_me: bool = False,
        totp_code: Optional[str] = None,
        device_info: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> dict[str, Any]:
        """
        Check the configured credentials (and TOTP code when enabled) and open a session.

        Returns:
            ``{"requires_two_factor": True}`` when a TOTP code is needed,
            otherwise the access token, refresh token and user.

        Raises:
            InternalServerError: If admin credentials are not configured
            AuthenticationError: If the credentials or the TOTP code are wrong
        """
        if not settings.admin_email or not settings.admin_password:
            logger.error("ADMIN_EMAIL or ADMIN_PASSWORD not set")
            raise InternalServerError(detail="Server configuration error")

        email_ok = security.constant_time_equals(email.strip().lower(), settings.admin_email.strip().lower())
        password_ok = security.constant_time_equals(password, settings.admin_password)
        if not (email_ok and password_ok):
            metrics_collector.record_login("invalid_credentials")
            logger.warning("Admin login failed", extra={"reason": "invalid_credentials"})
            raise AuthenticationError("Invalid credentials")

        user = await self._get_user_by_email(settings.admin_email)
        if user is None:
            user = AdminUser(
                email=settings.admin_email,
                password_hash=ENV_MANAGED_PASSWORD,
                name="Admin",
                role="admin",
            )
            self.db.add(user)
            await self.db.flush()
            logger.info("Admin user record created", extra={"user_id": user.id})
        elif user.totp_enabled and user.totp_secret:
            if not totp_code:
                metrics_collector.record_login("two_factor_required")
                return {"requires_two_factor": True}
            if not security.verify_totp(user.totp_secret, totp_code):
                metrics_collector.record_login("invalid_totp")
                logger.warning("Admin login failed", extra={"reason": "invalid_totp", "user_id": user.id})
                raise AuthenticationError("Invalid 2FA code")

        if not user.is_active:
            metrics_collector.record_login("inactive")
            raise AuthenticationError("Account is disabled")

        now = now or datetime.now(timezone.utc)
        refresh_token = security.generate_refresh_token()
        lifetime = timedelta(days=REMEMBER_ME_DAYS if remember_me else SESSION_DAYS)
        self.db.add(RefreshToken(
            user_id=user.id,
            token_hash=security.hash_token(refresh_token),
            expires_at=now + lifetime,
            device_info=(device_info or "Unknown")[:512],
        ))
        await self.db.commit()
        await self.db.refresh(user)

        metrics_collector.record_login("success")
        logger.info("Admin logged in", extra={"user_id": user.id, "remember_me": remember_me})

        return {
            "access_token": security.create_access_token(user.id, user.email, user.role),
            "refresh_token": refresh_token,
            "expires_in": security.access_token_expiry_label(),
            "user": user,
        }

    async def refresh(self, refresh_token: Optional[str], now: Optional[datetime] = None) -> dict[str, str]:
        """
        Exchange a refresh token for a new access token.

        Raises:
            ValidationError: If no token is supplied
            AuthenticationError: If the token is unknown, revoked or expired,
                or its user is inactive
        """
        if not refresh_token:
            raise ValidationError("Refresh token required")

        now = now or datetime.now(timezone.utc)
        result = await self.db.execute(
            select(AdminUser)
            .join(RefreshToken, RefreshToken.user_id == AdminUser.id)
            .where(
                RefreshToken.token_hash == security.hash_token(refresh_token),
                RefreshToken.is_revoked.is_(False),
                RefreshToken.expires_at > now,
                AdminUser.is_active.is_(True),
            )
        )
        user = result.scalar_one_or_none()
        if user is None:
            raise AuthenticationError("Invalid or expired refresh token")

        return {
            "access_token": security.create_access_token(user.id, user.email, user.role),
            "expires_in": security.access_token_expiry_label(),
        }

    async def logout(self, refresh_token: Optional[str]) -> None:
        """Revoke the refresh token if one is given. Unknown tokens are ignored."""
        if not refresh_token:
            return

        await self.db.execute(
            update(RefreshToken)
            .where(RefreshToken.token_hash == security.hash_token(refresh_token))
            .values(is_revoked=True)
        )
        await self.db.commit()

    async def setup_two_factor(self, user_id: int) -> dict[str, str]:
        """Store a pending TOTP secret. It takes effect once a code is verified."""
        user = await self.get_user(user_id)
        if user.totp_enabled:
            raise ValidationError("2FA is already enabled")

        secret = security.generate_totp_secret()
        uri = security.totp_provisioning_uri(secret, user.email)

        user.totp_secret = secret
        await self.db.commit()

        logger.info("2FA setup started", extra={"user_id": user_id})
        return {
            "secret": secret,
            "qr_code": security.qr_code_data_url(uri),
            "manual_entry": secret,
        }

    async def verify_two_factor(self, user_id: int, code: Optional[str]) -> None:
        if not code:
            raise ValidationError("Verification code required")

        user = await self.get_user(user_id)
        if not user.totp_secret:
            raise ValidationError("Please setup 2FA first")
        if user.totp_enabled:
            raise ValidationError("2FA is already enabled")
        if not security.verify_totp(user.totp_secret, code):
            raise ValidationError("Invalid verification code")

        user.totp_enabled = True
        await self.db.commit()
        logger.info("2FA enabled", extra={"user_id": user_id})

    async def disable_two_factor(self, user_id: int, code: Optional[str]) -> None:
        if not code:
            raise ValidationError("Current 2FA code required")

        user = await self.get_user(user_id)
        if not user.totp_enabled or not user.totp_secret:
            raise ValidationError("2FA is not enabled")
        if not security.verify_totp(user.totp_secret, code):
            raise ValidationError("Invalid verification code")

        user.totp_enabled = False
        user.totp_secret = None
        await self.db.commit()
        logger.info("2FA disabled", extra={"user_id": user_id})

    async def two_factor_enabled(self, user_id: int) -> bool:
        user = await self.db.get(AdminUser, user_id)
        return bool(user and user.totp_enabled)
