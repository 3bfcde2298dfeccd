"""Coupon schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from .common import CamelModel


class CreateCouponRequest(CamelModel):
    # Required-ness is checked by the service so the error reads like the dashboard expects
    code: Optional[str] = Field(None, max_length=64)
    discount_type: Optional[str] = None
    discount_value: Optional[Decimal] = Field(None, max_digits=10, decimal_places=2)
    max_uses: Optional[int] = Field(None, ge=1)
    expires_at: Optional[datetime] = None


class Coupon(CamelModel):
    id: int
    code: str
    discount_type: str
    discount_value: float
    max_uses: Optional[int] = None
    used_count: int
    expires_at: Optional[datetime] = None
    is_active: bool
    created_at: Optional[datetime] = None


class ValidateCouponRequest(CamelModel):
    code: Optional[str] = Field(None, max_length=64)
    subtotal: Decimal = Field(Decimal("0"), ge=0, max_digits=10, decimal_places=2)


class ValidateCouponResponse(CamelModel):
    valid: bool = True
    code: str
    discount_type: str
    discount_value: float
    discount_amount: float


class ApplyCouponRequest(CamelModel):
    code: Optional[str] = Field(None, max_length=64)
    booking_id: Optional[int] = Field(None, ge=1)


class ApplyCouponResponse(CamelModel):
    success: bool = True
    discount_applied: float
    new_total: float
    new_deposit: float
