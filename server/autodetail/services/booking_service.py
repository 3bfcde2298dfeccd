"""Booking service for business logic operations."""

import logging
import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import NotFoundError, ValidationError
from ..core.observability import metrics_collector
from ..core.security import constant_time_equals, generate_payment_token
from ..models.booking import Booking, BookingAddon, BookingStatus
from ..models.catalog import Addon, Package, Service
from ..models.setting import DEPOSIT_PERCENTAGE_KEY, SiteSetting
from ..schemas.booking import CreateBookingRequest, UpdateBookingRequest
from . import pricing
from .notification_service import NEW_BOOKING, PAYMENT_REMINDER, NotificationService

logger = logging.getLogger(__name__)

VALID_STATUSES = {status.value for status in BookingStatus}

# NOT NULL columns an admin update may change but never clear
REQUIRED_BOOKING_FIELDS = frozenset({
    "customer_name",
    "customer_email",
    "customer_phone",
    "vehicle_type",
    "booking_date",
    "booking_time",
    "total_amount",
    "deposit_amount",
    "status",
})


def build_payment_link(booking_id: int, token: str) -> str:
    return f"{settings.app_url.rstrip('/')}/pay?id={booking_id}&token={token}"


class BookingService:
    """Service for booking-related operations."""

    def __init__(self, db: AsyncSession, notifications: Optional[NotificationService] = None):
        self.db = db
        self.notifications = notifications

    async def get_deposit_percentage(self) -> Decimal:
        """Deposit share from the settings table, falling back to configuration."""
        result = await self.db.execute(
            select(SiteSetting.value).where(SiteSetting.key == DEPOSIT_PERCENTAGE_KEY)
        )
        value = result.scalar_one_or_none()
        if value is not None:
            try:
                return pricing.to_decimal(value)
            except ArithmeticError:
                logger.warning("Ignoring malformed deposit setting", extra={"value": value})
        return pricing.to_decimal(settings.deposit_percentage)

    async def _base_price(self, request: CreateBookingRequest) -> tuple[Decimal, str]:
        """Price and display name of the booked service (preferred) or legacy package."""
        if request.service_id:
            service = await self.db.get(Service, request.service_id)
            if service is None:
                raise NotFoundError("service", str(request.service_id))
            return pricing.service_price(service, request.vehicle_type.value), service.name

        if request.package_id:
            package = await self.db.get(Package, request.package_id)
            if package is None:
                raise NotFoundError("package", str(request.package_id))
            price = pricing.package_price(
                package.base_price, package.vehicle_multipliers, request.vehicle_type.value
            )
            return price, package.name

        raise ValidationError("Service or package ID required")

    async def _selected_addons(self, addon_ids: list[int]) -> list[Addon]:
        if not addon_ids:
            return []
        result = await self.db.execute(
            select(Addon)
            .where(Addon.id.in_(set(addon_ids)), Addon.is_active.is_(True))
            .order_by(Addon.display_order, Addon.id)
        )
        return list(result.scalars().all())

    async def create_booking(self, request: CreateBookingRequest) -> dict[str, Any]:
        """
        Price and store a new booking with its add-ons.

        Returns:
            dict with ``booking``, ``service_name``, ``addons`` (id, name, price
            charged) and ``payment_link``.

        Raises:
            ValidationError: If neither a service nor a package is given
            NotFoundError: If the service or package does not exist
        """
        vehicle = request.vehicle_type.value
        base_price, service_name = await self._base_price(request)

        addons = await self._selected_addons(request.addon_ids)
        addon_lines = [
            {"id": addon.id, "name": addon.name, "price": pricing.round_money(pricing.addon_price(addon, vehicle))}
            for addon in addons
        ]

        total = pricing.round_money(base_price + pricing.addons_total(line["price"] for line in addon_lines))
        deposit = pricing.round_money(pricing.deposit_for(total, await self.get_deposit_percentage()))
        token = generate_payment_token()

        booking = Booking(
            customer_name=request.customer_name.strip(),
            customer_email=str(request.customer_email),
            customer_phone=request.customer_phone.strip(),
            vehicle_type=vehicle,
            service_id=request.service_id if request.service_id else None,
            package_id=None if request.service_id else request.package_id,
            booking_date=request.booking_date,
            booking_time=request.booking_time,
            address=request.address,
            notes=request.notes,
            total_amount=total,
            deposit_amount=deposit,
            status=BookingStatus.PENDING.value,
            payment_token=token,
        )
        self.db.add(booking)
        await self.db.flush()

        for line in addon_lines:
            self.db.add(BookingAddon(booking_id=booking.id, addon_id=line["id"], price_charged=line["price"]))

        await self.db.commit()
        await self.db.refresh(booking)

        metrics_collector.record_booking_created(vehicle)
        logger.info(
            "Booking created",
            extra={
                "booking_id": booking.id,
                "vehicle_type": vehicle,
                "total_amount": str(total),
                "deposit_amount": str(deposit),
                "addon_count": len(addon_lines),
            }
        )

        payment_link = build_payment_link(booking.id, token)

        if self.notifications is not None:
            await self.notifications.send(NEW_BOOKING, {
                "booking_id": booking.id,
                "customer_name": booking.customer_name,
                "customer_email": booking.customer_email,
                "customer_phone": booking.customer_phone,
                "vehicle_type": vehicle,
                "service_name": service_name,
                "booking_date": booking.booking_date.isoformat(),
                "booking_time": booking.booking_time,
                "total_amount": total,
                "deposit_amount": deposit,
                "addons": addon_lines,
                "payment_link": payment_link,
            })

        return {
            "booking": booking,
            "service_name": service_name,
            "addons": addon_lines,
            "payment_link": payment_link,
        }

    async def service_names(self, bookings: list[Booking]) -> dict[int, Optional[str]]:
        """Map booking id to the name of its service, or its package for legacy bookings."""
        service_ids = {b.service_id for b in bookings if b.service_id}
        package_ids = {b.package_id for b in bookings if b.package_id}

        services: dict[int, str] = {}
        packages: dict[int, str] = {}
        if service_ids:
            rows = await self.db.execute(select(Service.id, Service.name).where(Service.id.in_(service_ids)))
            services = dict(rows.all())
        if package_ids:
            rows = await self.db.execute(select(Package.id, Package.name).where(Package.id.in_(package_ids)))
            packages = dict(rows.all())

        return {
            b.id: services.get(b.service_id) or packages.get(b.package_id)
            for b in bookings
        }

    async def list_bookings(self) -> list[Booking]:
        """All bookings, latest appointment first."""
        result = await self.db.execute(
            select(Booking).order_by(Booking.booking_date.desc(), Booking.booking_time.desc(), Booking.id.desc())
        )
        return list(result.scalars().all())

    async def get_booking(self, booking_id: int) -> Booking:
        booking = await self.db.get(Booking, booking_id)
        if booking is None:
            raise NotFoundError("booking", str(booking_id))
        return booking

    async def get_booking_for_token(self, booking_id: int, token: Optional[str]) -> Booking:
        """
        Load a booking through its customer payment link.

        Raises:
            ValidationError: If no token is supplied
            NotFoundError: If the booking does not exist or the token does not match
        """
        if not token:
            raise ValidationError("Payment token required")

        booking = await self.get_booking(booking_id)
        if not constant_time_equals(booking.payment_token, token):
            logger.warning("Payment link token mismatch", extra={"booking_id": booking_id})
            raise NotFoundError("booking", str(booking_id), detail="Invalid payment link")
        return booking

    async def get_payment_info(self, booking_id: int, token: Optional[str]) -> dict[str, Any]:
        """Limited booking summary for the customer payment page."""
        booking = await self.get_booking_for_token(booking_id, token)
        names = await self.service_names([booking])

        return {
            "id": booking.id,
            "customer_first_name": booking.customer_name.split(" ")[0],
            "vehicle_type": booking.vehicle_type,
            "service_name": names.get(booking.id),
            "booking_date": booking.booking_date,
            "booking_time": booking.booking_time,
            "total_amount": booking.total_amount,
            "deposit_amount": booking.deposit_amount,
            "remaining_balance": booking.remaining_balance,
            "deposit_paid": booking.deposit_paid,
            "final_paid": booking.final_paid,
            "coupon_code": booking.coupon_code,
            "coupon_discount": booking.coupon_discount,
        }

    async def update_status(self, booking_id: int, status: str) -> Booking:
        if status not in VALID_STATUSES:
            raise ValidationError("Invalid status")

        booking = await self.get_booking(booking_id)
        previous = booking.status
        booking.status = status
        await self.db.commit()
        await self.db.refresh(booking)

        logger.info(
            "Booking status updated",
            extra={"booking_id": booking_id, "from_status": previous, "to_status": status}
        )
        return booking

    async def update_booking(self, booking_id: int, request: UpdateBookingRequest) -> Booking:
        """
        Apply the fields present in ``request``.

        Raises:
            ValidationError: If no field is supplied, the status is unknown or
                the deposit would exceed the total
            NotFoundError: If the booking does not exist
        """
        changes = request.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError("No fields to update")

        if "status" in changes and changes["status"] not in VALID_STATUSES:
            raise ValidationError("Invalid status")

        cleared = sorted(field for field in REQUIRED_BOOKING_FIELDS if field in changes and changes[field] is None)
        if cleared:
            raise ValidationError(f"Required fields cannot be cleared: {', '.join(cleared)}")

        booking = await self.get_booking(booking_id)

        total = changes.get("total_amount", booking.total_amount)
        deposit = changes.get("deposit_amount", booking.deposit_amount)
        if pricing.to_decimal(deposit) > pricing.to_decimal(total):
            raise ValidationError("Deposit cannot exceed the total amount")

        for field, value in changes.items():
            if field == "vehicle_type" and value is not None:
                value = value.value
            elif field == "customer_email" and value is not None:
                value = str(value)
            elif field in ("total_amount", "deposit_amount"):
                value = pricing.round_money(value)
            setattr(booking, field, value)

        await self.db.commit()
        await self.db.refresh(booking)

        logger.info(
            "Booking updated",
            extra={"booking_id": booking_id, "fields": sorted(changes)}
        )
        return booking

    async def delete_booking(self, booking_id: int) -> dict[str, Any]:
        booking = await self.get_booking(booking_id)
        deleted = {"id": booking.id, "customer_name": booking.customer_name}

        await self.db.execute(delete(BookingAddon).where(BookingAddon.booking_id == booking_id))
        await self.db.delete(booking)
        await self.db.commit()

        logger.info("Booking deleted", extra={"booking_id": booking_id})
        return deleted

    async def mark_paid(self, booking_id: int, payment_id: Optional[str] = None) -> Booking:
        """Record a deposit paid outside Square (cash, card reader, ...)."""
        booking = await self.get_booking(booking_id)
        booking.deposit_paid = True
        booking.deposit_payment_id = payment_id or f"MANUAL_{int(time.time() * 1000)}"
        await self.db.commit()
        await self.db.refresh(booking)

        logger.info(
            "Booking deposit marked as paid",
            extra={"booking_id": booking_id, "payment_id": booking.deposit_payment_id}
        )
        return booking

    async def resend_payment_link(self, booking_id: int) -> str:
        booking = await self.get_booking(booking_id)

        if booking.deposit_paid:
            raise ValidationError("Deposit already paid")
        if not booking.payment_token:
            raise ValidationError("No payment link exists for this booking")

        payment_link = build_payment_link(booking.id, booking.payment_token)
        names = await self.service_names([booking])

        if self.notifications is not None:
            await self.notifications.send(PAYMENT_REMINDER, {
                "booking_id": booking.id,
                "customer_name": booking.customer_name,
                "customer_email": booking.customer_email,
                "customer_phone": booking.customer_phone,
                "service_name": names.get(booking.id),
                "deposit_amount": booking.deposit_amount,
                "payment_link": payment_link,
            })

        logger.info("Payment link resent", extra={"booking_id": booking_id})
        return payment_link

    async def get_stats(self, now: Optional[datetime] = None) -> dict[str, Any]:
        """Dashboard counters. The revenue month is the current UTC calendar month."""
        now = now or datetime.now(timezone.utc)
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

        total_bookings = await self.db.scalar(select(func.count(Booking.id)))

        pending_payments = await self.db.scalar(
            select(func.count(Booking.id)).where(
                Booking.deposit_paid.is_(False),
                Booking.status != BookingStatus.CANCELLED.value,
            )
        )

        revenue = await self.db.scalar(
            select(func.coalesce(func.sum(Booking.deposit_amount), 0)).where(
                Booking.deposit_paid.is_(True),
                Booking.created_at >= month_start,
            )
        )

        rows = await self.db.execute(
            select(Booking.status, func.count(Booking.id)).group_by(Booking.status)
        )

        return {
            "total_bookings": total_bookings or 0,
            "pending_payments": pending_payments or 0,
            "this_month_revenue": pricing.round_money(revenue or 0),
            "status_counts": {status: count for status, count in rows.all()},
        }
