"""Booking router for booking operations."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DatabaseSession, Notifications, RequiredAdmin
from ..core.exceptions import ProblemDetailsException, internal_error
from ..core.rate_limit import general_limit, submission_limit
from ..schemas.booking import (
    Booking,
    BookingAddonLine,
    BookingStats,
    CreateBookingRequest,
    CreateBookingResponse,
    DeleteBookingResponse,
    DeletedBooking,
    MarkPaidRequest,
    MarkPaidResponse,
    PaymentInfo,
    ResendLinkResponse,
    UpdateBookingRequest,
    UpdateBookingStatusRequest,
)
from ..services.booking_service import BookingService
from ..services.notification_service import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bookings", tags=["bookings"], dependencies=[Depends(general_limit)])


def _convert_booking_to_schema(booking_model, service_name: Optional[str] = None) -> Booking:
    """Convert booking model to schema."""
    booking = Booking.model_validate(booking_model)
    booking.service_name = service_name
    return booking


@router.post(
    "",
    response_model=CreateBookingResponse,
    status_code=201,
    dependencies=[Depends(submission_limit)],
)
async def create_booking(
    request: CreateBookingRequest,
    db: AsyncSession = DatabaseSession,
    notifications: NotificationService = Notifications,
) -> JSONResponse:
    """
    Create a booking from the public booking form.

    Prices the service (or legacy package) and add-ons for the vehicle,
    computes the deposit and returns the customer's payment link.
    """
    try:
        result = await BookingService(db, notifications).create_booking(request)
        booking = result["booking"]

        response = CreateBookingResponse(
            booking=_convert_booking_to_schema(booking, result["service_name"]),
            total_amount=booking.total_amount,
            deposit_amount=booking.deposit_amount,
            addons=[BookingAddonLine(**line) for line in result["addons"]],
            payment_link=result["payment_link"],
        )
        return JSONResponse(status_code=201, content=response.to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "create booking", e, vehicle_type=request.vehicle_type.value) from e


@router.get("", response_model=list[Booking])
async def list_bookings(
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    """All bookings, latest appointment first (admin)."""
    try:
        service = BookingService(db)
        bookings = await service.list_bookings()
        names = await service.service_names(bookings)
        return JSONResponse(content=[
            _convert_booking_to_schema(booking, names.get(booking.id)).to_json() for booking in bookings
        ])

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "fetch bookings", e) from e


@router.get("/stats/summary", response_model=BookingStats)
async def booking_stats(
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    """Dashboard counters (admin)."""
    try:
        stats = await BookingService(db).get_stats()
        return JSONResponse(content=BookingStats(**stats).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "fetch stats", e) from e


@router.get("/{booking_id}", response_model=Booking)
async def get_booking(
    booking_id: int,
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        service = BookingService(db)
        booking = await service.get_booking(booking_id)
        names = await service.service_names([booking])
        return JSONResponse(content=_convert_booking_to_schema(booking, names.get(booking.id)).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "fetch booking", e, booking_id=booking_id) from e


@router.get("/{booking_id}/payment-info", response_model=PaymentInfo)
async def get_payment_info(
    booking_id: int,
    token: Optional[str] = Query(None, max_length=64),
    db: AsyncSession = DatabaseSession,
) -> JSONResponse:
    """
    Booking summary for the customer payment page.

    Public, but only with the payment token from the booking's link.
    """
    try:
        info = await BookingService(db).get_payment_info(booking_id, token)
        return JSONResponse(content=PaymentInfo(**info).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "fetch payment info", e, booking_id=booking_id) from e


@router.patch("/{booking_id}/status", response_model=Booking)
async def update_booking_status(
    booking_id: int,
    request: UpdateBookingStatusRequest,
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        booking = await BookingService(db).update_status(booking_id, request.status)
        return JSONResponse(content=_convert_booking_to_schema(booking).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "update booking", e, booking_id=booking_id) from e


@router.put("/{booking_id}", response_model=Booking)
async def update_booking(
    booking_id: int,
    request: UpdateBookingRequest,
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    """Partial update of booking details (admin). Only fields present in the body change."""
    try:
        booking = await BookingService(db).update_booking(booking_id, request)
        return JSONResponse(content=_convert_booking_to_schema(booking).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "update booking", e, booking_id=booking_id) from e


@router.delete("/{booking_id}", response_model=DeleteBookingResponse)
async def delete_booking(
    booking_id: int,
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        deleted = await BookingService(db).delete_booking(booking_id)
        return JSONResponse(content=DeleteBookingResponse(deleted=DeletedBooking(**deleted)).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "delete booking", e, booking_id=booking_id) from e


@router.post("/{booking_id}/mark-paid", response_model=MarkPaidResponse)
async def mark_booking_paid(
    booking_id: int,
    request: Optional[MarkPaidRequest] = None,
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    """Record a deposit taken outside Square (admin)."""
    try:
        payment_id = request.payment_id if request else None
        booking = await BookingService(db).mark_paid(booking_id, payment_id)
        response = MarkPaidResponse(booking=_convert_booking_to_schema(booking))
        return JSONResponse(content=response.to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "mark as paid", e, booking_id=booking_id) from e


@router.post("/{booking_id}/resend-link", response_model=ResendLinkResponse)
async def resend_payment_link(
    booking_id: int,
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
    notifications: NotificationService = Notifications,
) -> JSONResponse:
    try:
        payment_link = await BookingService(db, notifications).resend_payment_link(booking_id)
        return JSONResponse(content=ResendLinkResponse(payment_link=payment_link).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "resend payment link", e, booking_id=booking_id) from e
