"""Before/after gallery photos."""

import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError, ValidationError
from ..models.gallery import GalleryPhoto
from ..schemas.gallery import CreateGalleryPhotoRequest, UpdateGalleryPhotoRequest

logger = logging.getLogger(__name__)


class GalleryService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_photos(self, category: Optional[str] = None) -> list[GalleryPhoto]:
        query = select(GalleryPhoto).where(GalleryPhoto.is_active.is_(True))
        if category:
            query = query.where(GalleryPhoto.category == category)
        result = await self.db.execute(query.order_by(GalleryPhoto.display_order, GalleryPhoto.id.desc()))
        return list(result.scalars().all())

    async def create_photo(self, request: CreateGalleryPhotoRequest) -> GalleryPhoto:
        photo = GalleryPhoto(**request.model_dump(), is_active=True)
        self.db.add(photo)
        await self.db.commit()
        await self.db.refresh(photo)

        logger.info("Gallery photo added", extra={"photo_id": photo.id, "category": photo.category})
        return photo

    async def _get(self, photo_id: int) -> GalleryPhoto:
        photo = await self.db.get(GalleryPhoto, photo_id)
        if photo is None:
            raise NotFoundError("photo", str(photo_id))
        return photo

    async def update_photo(self, photo_id: int, request: UpdateGalleryPhotoRequest) -> GalleryPhoto:
        changes = request.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError("No fields to update")

        photo = await self._get(photo_id)
        for field, value in changes.items():
            setattr(photo, field, value)
        await self.db.commit()
        await self.db.refresh(photo)
        return photo

    async def delete_photo(self, photo_id: int) -> dict[str, Any]:
        photo = await self._get(photo_id)
        deleted = {"id": photo.id, "label": photo.title}
        await self.db.delete(photo)
        await self.db.commit()

        logger.info("Gallery photo deleted", extra={"photo_id": photo_id})
        return deleted
