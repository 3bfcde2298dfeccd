"""Gallery schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .common import CamelModel


class CreateGalleryPhotoRequest(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    image_url: str = Field(..., min_length=1, max_length=1024)
    before_image_url: Optional[str] = Field(None, max_length=1024)
    category: Optional[str] = Field(None, max_length=64)
    display_order: int = 0


class UpdateGalleryPhotoRequest(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    image_url: Optional[str] = Field(None, min_length=1, max_length=1024)
    before_image_url: Optional[str] = Field(None, max_length=1024)
    category: Optional[str] = Field(None, max_length=64)
    display_order: Optional[int] = None
    is_active: Optional[bool] = None


class GalleryPhoto(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    image_url: str
    before_image_url: Optional[str] = None
    category: Optional[str] = None
    display_order: int
    is_active: bool
    created_at: Optional[datetime] = None
