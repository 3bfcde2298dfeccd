"""Gallery router."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DatabaseSession, RequiredAdmin
from ..core.exceptions import ProblemDetailsException, internal_error
from ..core.rate_limit import general_limit
from ..schemas.common import DeletedRecord, DeleteResponse
from ..schemas.gallery import CreateGalleryPhotoRequest, GalleryPhoto, UpdateGalleryPhotoRequest
from ..services.gallery_service import GalleryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/gallery", tags=["gallery"], dependencies=[Depends(general_limit)])


@router.get("", response_model=list[GalleryPhoto])
async def list_photos(
    category: Optional[str] = Query(None, max_length=64),
    db: AsyncSession = DatabaseSession,
) -> JSONResponse:
    try:
        photos = await GalleryService(db).list_photos(category)
        return JSONResponse(content=[GalleryPhoto.model_validate(p).to_json() for p in photos])

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "fetch gallery", e) from e


@router.post("", response_model=GalleryPhoto, status_code=201)
async def add_photo(
    request: CreateGalleryPhotoRequest,
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        photo = await GalleryService(db).create_photo(request)
        return JSONResponse(status_code=201, content=GalleryPhoto.model_validate(photo).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "add photo", e) from e


@router.put("/{photo_id}", response_model=GalleryPhoto)
async def update_photo(
    photo_id: int,
    request: UpdateGalleryPhotoRequest,
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        photo = await GalleryService(db).update_photo(photo_id, request)
        return JSONResponse(content=GalleryPhoto.model_validate(photo).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "update photo", e, photo_id=photo_id) from e


@router.delete("/{photo_id}", response_model=DeleteResponse)
async def delete_photo(
    photo_id: int,
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        deleted = await GalleryService(db).delete_photo(photo_id)
        return JSONResponse(content=DeleteResponse(deleted=DeletedRecord(**deleted)).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "delete photo", e, photo_id=photo_id) from e
