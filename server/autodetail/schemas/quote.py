"""Quote request schemas."""

from datetime import date, datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from ..models.booking import VehicleType
from .common import CamelModel


class CreateQuoteRequest(CamelModel):
    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=32)
    vehicle_type: Optional[VehicleType] = None
    service_type: Optional[str] = Field(None, max_length=255)
    preferred_date: Optional[date] = None
    message: Optional[str] = Field(None, max_length=2000)

    @field_validator("vehicle_type", mode="before")
    @classmethod
    def normalize_vehicle_type(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class UpdateQuoteStatusRequest(CamelModel):
    status: str


class Quote(CamelModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    vehicle_type: Optional[str] = None
    service_type: Optional[str] = None
    preferred_date: Optional[date] = None
    message: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
