"""Services, legacy packages and add-ons offered on the booking form."""

import logging
from typing import Any, TypeVar

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..models.booking import BookingAddon
from ..models.catalog import Addon, Package, Service
from ..schemas.catalog import (
    CreateAddonRequest,
    CreateServiceRequest,
    UpdateAddonRequest,
    UpdateServiceRequest,
)

logger = logging.getLogger(__name__)

Row = TypeVar("Row", Service, Addon)


class CatalogService:
    """Service for catalog-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # Services

    async def list_services(self) -> list[Service]:
        result = await self.db.execute(
            select(Service).where(Service.is_active.is_(True)).order_by(Service.display_order, Service.id)
        )
        return list(result.scalars().all())

    async def get_service(self, service_id: int) -> Service:
        service = await self.db.get(Service, service_id)
        if service is None:
            raise NotFoundError("service", str(service_id))
        return service

    async def create_service(self, request: CreateServiceRequest) -> Service:
        service = Service(**request.model_dump(), is_active=True)
        self.db.add(service)
        await self.db.commit()
        await self.db.refresh(service)

        logger.info("Service created", extra={"service_id": service.id, "service_name": service.name})
        return service

    async def update_service(self, service_id: int, request: UpdateServiceRequest) -> Service:
        service = await self.get_service(service_id)
        return await self._apply(service, request.model_dump(exclude_unset=True))

    async def delete_service(self, service_id: int) -> dict[str, Any]:
        """Bookings keep their amounts; their service reference is cleared by the foreign key."""
        service = await self.get_service(service_id)
        deleted = {"id": service.id, "label": service.name}
        await self.db.delete(service)
        await self.db.commit()

        logger.info("Service deleted", extra={"service_id": service_id})
        return deleted

    # Legacy packages

    async def list_packages(self) -> list[Package]:
        result = await self.db.execute(
            select(Package).where(Package.is_active.is_(True)).order_by(Package.base_price, Package.id)
        )
        return list(result.scalars().all())

    # Add-ons

    async def list_addons(self) -> list[Addon]:
        result = await self.db.execute(
            select(Addon).where(Addon.is_active.is_(True)).order_by(Addon.display_order, Addon.id)
        )
        return list(result.scalars().all())

    async def get_addon(self, addon_id: int) -> Addon:
        addon = await self.db.get(Addon, addon_id)
        if addon is None:
            raise NotFoundError("addon", str(addon_id))
        return addon

    async def create_addon(self, request: CreateAddonRequest) -> Addon:
        addon = Addon(**request.model_dump(), is_active=True)
        self.db.add(addon)
        await self.db.commit()
        await self.db.refresh(addon)

        logger.info("Add-on created", extra={"addon_id": addon.id, "addon_name": addon.name})
        return addon

    async def update_addon(self, addon_id: int, request: UpdateAddonRequest) -> Addon:
        addon = await self.get_addon(addon_id)
        return await self._apply(addon, request.model_dump(exclude_unset=True))

    async def delete_addon(self, addon_id: int) -> dict[str, Any]:
        """
        Raises:
            ConflictError: If a booking was charged for the add-on; deactivate it instead
        """
        addon = await self.get_addon(addon_id)

        in_use = await self.db.scalar(select(exists().where(BookingAddon.addon_id == addon_id)))
        if in_use:
            raise ConflictError("Add-on is used by existing bookings; deactivate it instead")

        deleted = {"id": addon.id, "label": addon.name}
        await self.db.delete(addon)
        await self.db.commit()

        logger.info("Add-on deleted", extra={"addon_id": addon_id})
        return deleted

    async def _apply(self, row: Row, changes: dict[str, Any]) -> Row:
        if not changes:
            raise ValidationError("No fields to update")

        for field, value in changes.items():
            if value is None and field not in ("description", "duration_minutes"):
                continue
            setattr(row, field, value)
        await self.db.commit()
        await self.db.refresh(row)
        return row
