"""Booking-related Pydantic schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from ..models.booking import VehicleType
from .common import CamelModel


def _lower(value):
    return value.strip().lower() if isinstance(value, str) else value


class CreateBookingRequest(CamelModel):
    """Request schema for creating a booking from the public booking form."""

    customer_name: str = Field(..., min_length=2, max_length=255, description="Customer full name")
    customer_email: EmailStr = Field(..., description="Customer email")
    customer_phone: str = Field(..., min_length=7, max_length=32, description="Customer phone")
    vehicle_type: VehicleType = Field(..., description="Vehicle class used for pricing")
    service_id: Optional[int] = Field(None, ge=1, description="Service to book")
    package_id: Optional[int] = Field(None, ge=1, description="Legacy package to book")
    addon_ids: list[int] = Field(default_factory=list, max_length=20, description="Optional add-ons")
    booking_date: date = Field(..., description="Appointment date")
    booking_time: str = Field(..., min_length=1, max_length=16, description="Appointment time slot")
    address: Optional[str] = Field(None, max_length=500, description="Service address")
    notes: Optional[str] = Field(None, max_length=2000, description="Customer notes")

    @field_validator("vehicle_type", mode="before")
    @classmethod
    def normalize_vehicle_type(cls, v):
        return _lower(v)

    @field_validator("booking_date")
    @classmethod
    def not_in_past(cls, v: date) -> date:
        if v < date.today():
            raise ValueError("Booking date cannot be in the past")
        return v


class UpdateBookingRequest(CamelModel):
    """Partial update from the admin dashboard. Omitted fields are left alone."""

    customer_name: Optional[str] = Field(None, min_length=2, max_length=255)
    customer_email: Optional[EmailStr] = None
    customer_phone: Optional[str] = Field(None, min_length=7, max_length=32)
    vehicle_type: Optional[VehicleType] = None
    booking_date: Optional[date] = None
    booking_time: Optional[str] = Field(None, min_length=1, max_length=16)
    address: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = Field(None, max_length=2000)
    total_amount: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    deposit_amount: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    status: Optional[str] = None

    @field_validator("vehicle_type", mode="before")
    @classmethod
    def normalize_vehicle_type(cls, v):
        return _lower(v)


class UpdateBookingStatusRequest(CamelModel):
    status: str = Field(..., description="New booking status")


class MarkPaidRequest(CamelModel):
    payment_id: Optional[str] = Field(None, max_length=128, description="External payment reference")


class BookingAddonLine(CamelModel):
    id: int
    name: str
    price: float


class Booking(CamelModel):
    """Booking response schema."""

    id: int
    customer_name: str
    customer_email: str
    customer_phone: str
    vehicle_type: str
    service_id: Optional[int] = None
    package_id: Optional[int] = None
    service_name: Optional[str] = None
    booking_date: date
    booking_time: str
    address: Optional[str] = None
    notes: Optional[str] = None
    total_amount: float
    deposit_amount: float
    coupon_code: Optional[str] = None
    coupon_discount: Optional[float] = None
    status: str
    payment_token: Optional[str] = None
    deposit_paid: bool
    deposit_payment_id: Optional[str] = None
    final_paid: bool
    final_payment_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CreateBookingResponse(CamelModel):
    success: bool = True
    booking: Booking
    total_amount: float
    deposit_amount: float
    addons: list[BookingAddonLine]
    payment_link: str


class MarkPaidResponse(CamelModel):
    success: bool = True
    booking: Booking


class ResendLinkResponse(CamelModel):
    success: bool = True
    payment_link: str


class PaymentInfo(CamelModel):
    """What the customer payment page may see, given a valid token."""

    id: int
    customer_first_name: str
    vehicle_type: str
    service_name: Optional[str] = None
    booking_date: date
    booking_time: str
    total_amount: float
    deposit_amount: float
    remaining_balance: float
    deposit_paid: bool
    final_paid: bool
    coupon_code: Optional[str] = None
    coupon_discount: Optional[float] = None


class BookingStats(CamelModel):
    total_bookings: int
    pending_payments: int
    this_month_revenue: float
    status_counts: dict[str, int]


class DeletedBooking(CamelModel):
    id: int
    customer_name: str


class DeleteBookingResponse(CamelModel):
    success: bool = True
    deleted: DeletedBooking
