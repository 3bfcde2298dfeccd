"""Customer review and Google review schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .common import CamelModel


class CreateReviewRequest(CamelModel):
    customer_name: str = Field(..., min_length=2, max_length=255)
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1, max_length=2000)
    service_type: Optional[str] = Field(None, max_length=255)


class ApproveReviewRequest(CamelModel):
    approved: bool = True


class Review(CamelModel):
    id: int
    customer_name: str
    rating: int
    comment: str
    service_type: Optional[str] = None
    is_approved: bool
    is_featured: bool
    created_at: Optional[datetime] = None


class GoogleReview(BaseModel):
    """One review as shown on the site (snake_case, as cached)."""

    author_name: str = "Anonymous"
    author_photo_url: Optional[str] = None
    rating: int = 5
    text: str = ""
    relative_time: str = ""
    publish_time: Optional[str] = None
    google_maps_uri: Optional[str] = None


class GoogleReviewsResponse(BaseModel):
    enabled: bool
    success: Optional[bool] = None
    overall_rating: Optional[float] = None
    total_reviews: int = 0
    business_name: Optional[str] = None
    reviews: list[GoogleReview] = Field(default_factory=list)
    cached: Optional[bool] = None
    stale: Optional[bool] = None
    cached_at: Optional[datetime] = None
    message: Optional[str] = None
    error: Optional[str] = None

    def to_json(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)
