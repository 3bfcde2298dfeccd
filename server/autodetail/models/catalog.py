"""Service, legacy package and add-on models."""

from decimal import Decimal
from typing import Any

from sqlalchemy import Boolean, CheckConstraint, Integer, Numeric, String, Text, true
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base, JSONType, TimestampMixin


class Service(TimestampMixin, Base):
    """Detailing service with a fixed price per vehicle class."""

    __tablename__ = "services"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    sedan_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    suv_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    truck_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    features: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    __table_args__ = (
        CheckConstraint("sedan_price >= 0", name="ck_service_sedan_price_non_negative"),
        CheckConstraint("suv_price >= 0", name="ck_service_suv_price_non_negative"),
        CheckConstraint("truck_price >= 0", name="ck_service_truck_price_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Service(id={self.id}, name='{self.name}')>"


class Package(TimestampMixin, Base):
    """Legacy package priced as a base price times a per-vehicle multiplier."""

    __tablename__ = "packages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    vehicle_multipliers: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    features: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())

    __table_args__ = (
        CheckConstraint("base_price >= 0", name="ck_package_base_price_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Package(id={self.id}, name='{self.name}', base_price={self.base_price})>"


class Addon(TimestampMixin, Base):
    """Optional extra added to a booking."""

    __tablename__ = "addons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    sedan_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    suv_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    commercial_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    def __repr__(self) -> str:
        return f"<Addon(id={self.id}, name='{self.name}')>"
