"""Coupon management, validation and application to bookings."""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError, ValidationError
from ..core.observability import metrics_collector
from ..models.booking import Booking
from ..models.coupon import Coupon, DiscountType
from ..schemas.coupon import CreateCouponRequest
from . import pricing

logger = logging.getLogger(__name__)

INVALID_COUPON = "Invalid or expired coupon code"


class CouponService:
    """Service for coupon-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_coupons(self) -> list[Coupon]:
        result = await self.db.execute(select(Coupon).order_by(Coupon.created_at.desc(), Coupon.id.desc()))
        return list(result.scalars().all())

    async def create_coupon(self, request: CreateCouponRequest) -> Coupon:
        """
        Create a coupon. Codes are stored upper-case.

        Raises:
            ValidationError: If a field is missing or out of range, or the code
                already exists
        """
        code = (request.code or "").strip().upper()
        if not code or not request.discount_type or request.discount_value is None:
            raise ValidationError("Code, discount type, and value required")

        discount_type = request.discount_type.strip().lower()
        if discount_type not in (DiscountType.PERCENT.value, DiscountType.FIXED.value):
            raise ValidationError("Discount type must be percent or fixed")

        if request.discount_value <= 0:
            raise ValidationError("Discount value must be greater than zero")
        if discount_type == DiscountType.PERCENT.value and request.discount_value > 100:
            raise ValidationError("Percent discount must be between 0 and 100")

        existing = await self.db.scalar(select(Coupon.id).where(Coupon.code == code))
        if existing is not None:
            raise ValidationError("Coupon code already exists")

        coupon = Coupon(
            code=code,
            discount_type=discount_type,
            discount_value=request.discount_value,
            max_uses=request.max_uses,
            expires_at=request.expires_at,
            used_count=0,
            is_active=True,
        )
        self.db.add(coupon)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ValidationError("Coupon code already exists")
        await self.db.refresh(coupon)

        logger.info(
            "Coupon created",
            extra={"coupon_id": coupon.id, "code": code, "discount_type": discount_type}
        )
        return coupon

    async def _get(self, coupon_id: int) -> Coupon:
        coupon = await self.db.get(Coupon, coupon_id)
        if coupon is None:
            raise NotFoundError("coupon", str(coupon_id))
        return coupon

    async def toggle_coupon(self, coupon_id: int) -> Coupon:
        coupon = await self._get(coupon_id)
        coupon.is_active = not coupon.is_active
        await self.db.commit()
        await self.db.refresh(coupon)

        logger.info("Coupon toggled", extra={"coupon_id": coupon_id, "is_active": coupon.is_active})
        return coupon

    async def delete_coupon(self, coupon_id: int) -> dict[str, Any]:
        coupon = await self._get(coupon_id)
        deleted = {"id": coupon.id, "label": coupon.code}
        await self.db.delete(coupon)
        await self.db.commit()

        logger.info("Coupon deleted", extra={"coupon_id": coupon_id})
        return deleted

    async def find_usable(self, code: Optional[str], now: Optional[datetime] = None) -> Coupon:
        """
        Active, unexpired coupon with uses left.

        Raises:
            NotFoundError: If no such coupon exists
        """
        now = now or datetime.now(timezone.utc)
        result = await self.db.execute(
            select(Coupon).where(
                Coupon.code == (code or "").strip().upper(),
                Coupon.is_active.is_(True),
                or_(Coupon.expires_at.is_(None), Coupon.expires_at > now),
                or_(Coupon.max_uses.is_(None), Coupon.used_count < Coupon.max_uses),
            )
        )
        coupon = result.scalar_one_or_none()
        if coupon is None:
            raise NotFoundError("coupon", detail=INVALID_COUPON)
        return coupon

    async def validate_coupon(self, code: Optional[str], subtotal: Decimal) -> dict[str, Any]:
        """Discount the coupon would grant on ``subtotal``. Nothing is written."""
        if not code or not code.strip():
            raise ValidationError("Coupon code required")

        coupon = await self.find_usable(code)
        discount = pricing.coupon_discount(coupon.discount_type, coupon.discount_value, subtotal)

        return {
            "code": coupon.code,
            "discount_type": coupon.discount_type,
            "discount_value": coupon.discount_value,
            "discount_amount": discount,
        }

    async def apply_coupon(self, code: Optional[str], booking_id: Optional[int]) -> dict[str, Decimal]:
        """
        Discount a booking and count one use of the coupon.

        The booking update and the usage increment are committed together.

        Raises:
            ValidationError: If code or booking id is missing, or the booking
                already has a coupon or a paid deposit
            NotFoundError: If the coupon is not usable or the booking does not exist
        """
        if not code or not code.strip() or not booking_id:
            raise ValidationError("Coupon code and booking ID required")

        coupon = await self.find_usable(code)

        booking = await self.db.get(Booking, booking_id)
        if booking is None:
            raise NotFoundError("booking", str(booking_id))

        if booking.coupon_code:
            raise ValidationError("A coupon has already been applied to this booking")
        if booking.deposit_paid:
            raise ValidationError("Coupons cannot be applied after the deposit is paid")

        # Counted in SQL so concurrent applies cannot both take the last use
        claimed = await self.db.execute(
            update(Coupon)
            .where(
                Coupon.id == coupon.id,
                or_(Coupon.max_uses.is_(None), Coupon.used_count < Coupon.max_uses),
            )
            .values(used_count=Coupon.used_count + 1)
            .execution_options(synchronize_session=False)
        )
        if claimed.rowcount == 0:
            await self.db.rollback()
            raise NotFoundError("coupon", detail=INVALID_COUPON)

        discount = pricing.coupon_discount(coupon.discount_type, coupon.discount_value, booking.total_amount)
        new_total, new_deposit = pricing.rebalance_after_discount(
            booking.total_amount, booking.deposit_amount, discount
        )

        booking.coupon_code = coupon.code
        booking.coupon_discount = discount
        booking.total_amount = new_total
        booking.deposit_amount = new_deposit

        await self.db.commit()
        await self.db.refresh(coupon)

        metrics_collector.record_coupon_applied(coupon.discount_type)
        logger.info(
            "Coupon applied",
            extra={
                "booking_id": booking_id,
                "code": coupon.code,
                "discount": str(discount),
                "new_total": str(new_total),
            }
        )
        return {"discount_applied": discount, "new_total": new_total, "new_deposit": new_deposit}
