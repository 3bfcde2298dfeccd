"""Deposit and final payments charged through Square."""

import logging
import uuid
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..clients import IntegrationError, SquareClient
from ..core.exceptions import PaymentError, UpstreamServiceError, ValidationError
from ..core.observability import metrics_collector
from ..models.booking import Booking, BookingStatus
from ..schemas.payment import PaymentRequest
from .booking_service import BookingService
from .notification_service import DEPOSIT_PAID, PAYMENT_RECEIVED, NotificationService

logger = logging.getLogger(__name__)

DEPOSIT = "deposit"
FINAL = "final"


class PaymentService:
    """Charges customers for a booking through its payment link."""

    def __init__(
        self,
        db: AsyncSession,
        square: Optional[SquareClient],
        notifications: Optional[NotificationService] = None,
    ):
        self.db = db
        self.square = square
        self.notifications = notifications
        self.bookings = BookingService(db)

    def _require_square(self) -> SquareClient:
        if self.square is None:
            raise UpstreamServiceError("Square", "Payments are not configured", status_code=503)
        return self.square

    async def _charge(self, kind: str, booking: Booking, amount: Decimal, source_id: str) -> dict[str, Any]:
        square = self._require_square()

        try:
            payment = await square.create_payment(
                source_id=source_id,
                amount=amount,
                reference_id=str(booking.id),
                note=f"{kind.capitalize()} for booking #{booking.id}",
                buyer_email=booking.customer_email,
                idempotency_key=str(uuid.uuid4()),
            )
        except IntegrationError as e:
            if e.is_client_error:
                metrics_collector.record_payment(kind, "declined")
                raise PaymentError(detail=e.message, processor_errors=e.errors)
            metrics_collector.record_payment(kind, "error")
            logger.error(
                "Square payment request failed",
                extra={"booking_id": booking.id, "kind": kind, "status_code": e.status_code, "error": e.message}
            )
            raise UpstreamServiceError("Square", "Payment processor unavailable, please try again")

        metrics_collector.record_payment(kind, "succeeded")
        return payment

    async def pay_deposit(self, request: PaymentRequest) -> dict[str, Any]:
        """
        Charge the deposit. A pending booking becomes confirmed.

        Raises:
            ValidationError: If the deposit is already paid or zero
            NotFoundError: If the booking or token is wrong
            PaymentError: If Square declines the card
            UpstreamServiceError: If Square is unconfigured (503) or unreachable (502)
        """
        booking = await self.bookings.get_booking_for_token(request.booking_id, request.token)

        if booking.deposit_paid:
            raise ValidationError("Deposit already paid")

        amount = Decimal(booking.deposit_amount)
        if amount <= 0:
            raise ValidationError("No deposit is due for this booking")

        payment = await self._charge(DEPOSIT, booking, amount, request.source_id)

        booking.deposit_paid = True
        booking.deposit_payment_id = payment.get("id")
        if booking.status == BookingStatus.PENDING.value:
            booking.status = BookingStatus.CONFIRMED.value
        await self.db.commit()
        await self.db.refresh(booking)

        logger.info(
            "Deposit paid",
            extra={"booking_id": booking.id, "payment_id": booking.deposit_payment_id, "amount": str(amount)}
        )

        if self.notifications is not None:
            await self.notifications.send(DEPOSIT_PAID, {
                "booking_id": booking.id,
                "customer_name": booking.customer_name,
                "customer_email": booking.customer_email,
                "booking_date": booking.booking_date.isoformat(),
                "booking_time": booking.booking_time,
                "amount": amount,
                "remaining_balance": booking.remaining_balance,
                "payment_id": booking.deposit_payment_id,
            })

        return self._result(booking, payment, amount)

    async def pay_final(self, request: PaymentRequest) -> dict[str, Any]:
        """
        Charge the remaining balance after the deposit.

        Raises:
            ValidationError: If the deposit is unpaid, the final payment is
                already made or nothing remains to pay
            NotFoundError: If the booking or token is wrong
            PaymentError: If Square declines the card
            UpstreamServiceError: If Square is unconfigured (503) or unreachable (502)
        """
        booking = await self.bookings.get_booking_for_token(request.booking_id, request.token)

        if not booking.deposit_paid:
            raise ValidationError("Deposit must be paid before the final payment")
        if booking.final_paid:
            raise ValidationError("Final payment already made")

        amount = booking.remaining_balance
        if amount <= 0:
            raise ValidationError("No balance remaining for this booking")

        payment = await self._charge(FINAL, booking, amount, request.source_id)

        booking.final_paid = True
        booking.final_payment_id = payment.get("id")
        await self.db.commit()
        await self.db.refresh(booking)

        logger.info(
            "Final payment received",
            extra={"booking_id": booking.id, "payment_id": booking.final_payment_id, "amount": str(amount)}
        )

        if self.notifications is not None:
            await self.notifications.send(PAYMENT_RECEIVED, {
                "booking_id": booking.id,
                "customer_name": booking.customer_name,
                "customer_email": booking.customer_email,
                "amount": amount,
                "payment_id": booking.final_payment_id,
            })

        return self._result(booking, payment, amount)

    @staticmethod
    def _result(booking: Booking, payment: dict[str, Any], amount: Decimal) -> dict[str, Any]:
        return {
            "payment_id": payment.get("id"),
            "amount_paid": amount,
            "receipt_url": payment.get("receipt_url"),
            "deposit_paid": booking.deposit_paid,
            "final_paid": booking.final_paid,
            "remaining_balance": Decimal(0) if booking.final_paid else booking.remaining_balance,
            "booking_status": booking.status,
        }
