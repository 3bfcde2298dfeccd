"""Booking and booking add-on model definitions."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    false,
)
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base, TimestampMixin


class BookingStatus(str, Enum):
    """Booking status enumeration."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class VehicleType(str, Enum):
    SEDAN = "sedan"
    SUV = "suv"
    TRUCK = "truck"
    COMMERCIAL = "commercial"


class Booking(TimestampMixin, Base):
    """A scheduled detailing appointment and its payment state."""

    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Customer
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    customer_phone: Mapped[str] = mapped_column(String(32), nullable=False)

    # What and when
    vehicle_type: Mapped[str] = mapped_column(String(20), nullable=False)
    service_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("services.id", ondelete="SET NULL"), nullable=True, index=True
    )
    package_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("packages.id", ondelete="SET NULL"), nullable=True, index=True
    )
    booking_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    booking_time: Mapped[str] = mapped_column(String(16), nullable=False)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Amounts
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    deposit_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    coupon_code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    coupon_discount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=BookingStatus.PENDING.value,
        index=True
    )

    # Payment link and payment state
    payment_token: Mapped[str | None] = mapped_column(String(32), nullable=True)
    deposit_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    deposit_payment_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    final_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    final_payment_id: Mapped[str | None] = mapped_column(String(128), nullable=True)

    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="ck_booking_total_non_negative"),
        CheckConstraint("deposit_amount >= 0", name="ck_booking_deposit_non_negative"),
        CheckConstraint("deposit_amount <= total_amount", name="ck_booking_deposit_lte_total"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'in_progress', 'completed', 'cancelled')",
            name="ck_booking_status_valid",
        ),
    )

    @property
    def remaining_balance(self) -> Decimal:
        return Decimal(self.total_amount) - Decimal(self.deposit_amount)

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, customer='{self.customer_name}', "
            f"date={self.booking_date}, status={self.status})>"
        )


class BookingAddon(Base):
    """Add-on attached to a booking, with the price charged at booking time."""

    __tablename__ = "booking_addons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    booking_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    addon_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("addons.id", ondelete="RESTRICT"), nullable=False
    )
    price_charged: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    def __repr__(self) -> str:
        return f"<BookingAddon(booking_id={self.booking_id}, addon_id={self.addon_id})>"
