"""Square payment schemas."""

from typing import Optional

from pydantic import Field

from .common import CamelModel


class PaymentConfig(CamelModel):
    """Public identifiers the Square Web Payments SDK needs in the browser."""

    application_id: str
    location_id: str
    environment: str


class PaymentRequest(CamelModel):
    booking_id: int = Field(..., ge=1)
    token: str = Field(..., min_length=1, max_length=64, description="Payment link token")
    source_id: str = Field(..., min_length=1, max_length=512, description="Card nonce from the Square SDK")


class PaymentResult(CamelModel):
    success: bool = True
    payment_id: str
    amount_paid: float
    receipt_url: Optional[str] = None
    deposit_paid: bool
    final_paid: bool
    remaining_balance: float
    booking_status: str
