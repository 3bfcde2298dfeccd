"""Service, package and add-on schemas."""

from decimal import Decimal
from typing import Any, Optional

from pydantic import Field

from .common import CamelModel

Price = Field(..., ge=0, max_digits=10, decimal_places=2)


class CreateServiceRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=4000)
    sedan_price: Decimal = Price
    suv_price: Decimal = Price
    truck_price: Decimal = Price
    duration_minutes: Optional[int] = Field(None, ge=1)
    features: list[str] = Field(default_factory=list)
    display_order: int = 0


class UpdateServiceRequest(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=4000)
    sedan_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    suv_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    truck_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    duration_minutes: Optional[int] = Field(None, ge=1)
    features: Optional[list[str]] = None
    display_order: Optional[int] = None
    is_active: Optional[bool] = None


class Service(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    sedan_price: float
    suv_price: float
    truck_price: float
    duration_minutes: Optional[int] = None
    features: list[str] = Field(default_factory=list)
    is_active: bool
    display_order: int


class Package(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    base_price: float
    vehicle_multipliers: dict[str, Any] = Field(default_factory=dict)
    features: list[str] = Field(default_factory=list)
    is_active: bool


class CreateAddonRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    sedan_price: Decimal = Price
    suv_price: Decimal = Price
    commercial_price: Decimal = Price
    display_order: int = 0


class UpdateAddonRequest(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    sedan_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    suv_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    commercial_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    display_order: Optional[int] = None
    is_active: Optional[bool] = None


class Addon(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    sedan_price: float
    suv_price: float
    commercial_price: float
    is_active: bool
    display_order: int
