"""Payment router for the customer payment page (Square Web Payments)."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..clients import SquareClient
from ..core.config import settings
from ..core.dependencies import DatabaseSession, Notifications, Square
from ..core.exceptions import ProblemDetailsException, UpstreamServiceError, internal_error
from ..core.rate_limit import general_limit
from ..schemas.payment import PaymentConfig, PaymentRequest, PaymentResult
from ..services.notification_service import NotificationService
from ..services.payment_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payments", tags=["payments"], dependencies=[Depends(general_limit)])


@router.get("/config", response_model=PaymentConfig)
async def payment_config() -> JSONResponse:
    """Public identifiers for initializing the Square card form."""
    if not settings.square_application_id or not settings.square_location_id:
        raise UpstreamServiceError("Square", "Payments are not configured", status_code=503)

    config = PaymentConfig(
        application_id=settings.square_application_id,
        location_id=settings.square_location_id,
        environment=settings.square_environment,
    )
    return JSONResponse(content=config.to_json())


@router.post("/deposit", response_model=PaymentResult)
async def pay_deposit(
    request: PaymentRequest,
    db: AsyncSession = DatabaseSession,
    square: Optional[SquareClient] = Square,
    notifications: NotificationService = Notifications,
) -> JSONResponse:
    try:
        result = await PaymentService(db, square, notifications).pay_deposit(request)
        return JSONResponse(content=PaymentResult(**result).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "process deposit payment", e, booking_id=request.booking_id) from e


@router.post("/final", response_model=PaymentResult)
async def pay_final(
    request: PaymentRequest,
    db: AsyncSession = DatabaseSession,
    square: Optional[SquareClient] = Square,
    notifications: NotificationService = Notifications,
) -> JSONResponse:
    try:
        result = await PaymentService(db, square, notifications).pay_final(request)
        return JSONResponse(content=PaymentResult(**result).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "process final payment", e, booking_id=request.booking_id) from e
