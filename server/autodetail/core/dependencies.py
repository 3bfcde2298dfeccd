"""FastAPI dependencies for database, admin authentication and outbound clients."""

from typing import Any, AsyncGenerator, Optional

import jwt
from fastapi import Depends, Header
from jwt import PyJWTError
from sqlalchemy.ext.asyncio import AsyncSession

from ..clients import BrevoClient, GooglePlacesClient, SquareClient, TelnyxClient
from ..services.notification_service import NotificationService
from .config import settings
from .database import get_async_session
from .exceptions import AuthenticationError
from .security import decode_access_token


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Database dependency that provides async database sessions.

    Yields:
        AsyncSession: Database session
    """
    async for session in get_async_session():
        yield session


async def get_current_admin(
    authorization: Optional[str] = Header(None, alias="Authorization")
) -> dict[str, Any]:
    """
    Validate the Bearer access token of a dashboard request.

    Returns:
        dict with ``user_id``, ``email`` and ``role`` from the token claims

    Raises:
        AuthenticationError: If the header is missing, malformed, expired or
            signed with another key
    """
    if not authorization:
        raise AuthenticationError("Access token required")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Invalid authorization header format")

    try:
        payload = decode_access_token(token.strip())
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except PyJWTError:
        raise AuthenticationError("Invalid token")

    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise AuthenticationError("Invalid token payload")

    return {
        "user_id": user_id,
        "email": payload.get("email"),
        "role": payload.get("role", "admin"),
    }


def get_notification_service() -> NotificationService:
    """Notification channels configured from settings; unconfigured ones are skipped."""
    email_client = None
    if settings.brevo_api_key:
        email_client = BrevoClient(
            api_key=settings.brevo_api_key,
            sender_email=settings.brevo_sender_email,
            sender_name=settings.business_name,
            timeout=settings.http_timeout_seconds,
        )

    sms_client = None
    if settings.telnyx_api_key and settings.telnyx_from_number:
        sms_client = TelnyxClient(
            api_key=settings.telnyx_api_key,
            from_number=settings.telnyx_from_number,
            timeout=settings.http_timeout_seconds,
        )

    return NotificationService(
        email_client=email_client,
        sms_client=sms_client,
        admin_email=settings.notification_email,
        admin_phone=settings.admin_phone,
        business_name=settings.business_name,
    )


def get_square_client() -> Optional[SquareClient]:
    if not settings.square_configured:
        return None
    return SquareClient(
        access_token=settings.square_access_token,
        location_id=settings.square_location_id,
        environment=settings.square_environment,
        timeout=settings.http_timeout_seconds,
    )


def get_google_places_client() -> Optional[GooglePlacesClient]:
    if not settings.google_reviews_configured:
        return None
    return GooglePlacesClient(api_key=settings.google_maps_api_key, timeout=settings.http_timeout_seconds)


RequiredAdmin = Depends(get_current_admin)
DatabaseSession = Depends(get_db)
Notifications = Depends(get_notification_service)
Square = Depends(get_square_client)
GooglePlaces = Depends(get_google_places_client)
