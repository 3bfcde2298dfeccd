"""Customer review and Google reviews cache models."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, Numeric, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base, JSONType, TimestampMixin, utcnow


class Review(TimestampMixin, Base):
    """Review submitted through the site; hidden until approved."""

    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    service_type: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())

    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_review_rating_range"),
    )

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, rating={self.rating}, approved={self.is_approved})>"


class GoogleReviewsCache(Base):
    """Last Google Places response for a place, transformed for the frontend."""

    __tablename__ = "google_reviews_cache"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    place_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    overall_rating: Mapped[Decimal | None] = mapped_column(Numeric(2, 1), nullable=True)
    total_reviews: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reviews_data: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False)
    cached_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<GoogleReviewsCache(place_id='{self.place_id}', cached_at={self.cached_at})>"
