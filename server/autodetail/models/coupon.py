"""Coupon model definition."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, Numeric, String, true
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base, TimestampMixin


class DiscountType(str, Enum):
    PERCENT = "percent"
    FIXED = "fixed"


class Coupon(TimestampMixin, Base):
    """Discount code redeemable on the payment page."""

    __tablename__ = "coupons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    discount_type: Mapped[str] = mapped_column(String(10), nullable=False)
    discount_value: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    max_uses: Mapped[int | None] = mapped_column(Integer, nullable=True)
    used_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())

    __table_args__ = (
        CheckConstraint("discount_type IN ('percent', 'fixed')", name="ck_coupon_discount_type"),
        CheckConstraint("discount_value >= 0", name="ck_coupon_discount_value_non_negative"),
        CheckConstraint("used_count >= 0", name="ck_coupon_used_count_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Coupon(id={self.id}, code='{self.code}', used={self.used_count}/{self.max_uses})>"
