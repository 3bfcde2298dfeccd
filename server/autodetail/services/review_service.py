"""Customer-submitted reviews and their moderation."""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError
from ..models.review import Review
from ..schemas.review import CreateReviewRequest

logger = logging.getLogger(__name__)


class ReviewService:
    """Service for review-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_review(self, request: CreateReviewRequest) -> Review:
        """Store a review. It stays hidden until an admin approves it."""
        review = Review(
            customer_name=request.customer_name.strip(),
            rating=request.rating,
            comment=request.comment.strip(),
            service_type=request.service_type,
            is_approved=False,
            is_featured=False,
        )
        self.db.add(review)
        await self.db.commit()
        await self.db.refresh(review)

        logger.info("Review submitted", extra={"review_id": review.id, "rating": review.rating})
        return review

    async def list_approved(self) -> list[Review]:
        result = await self.db.execute(
            select(Review)
            .where(Review.is_approved.is_(True))
            .order_by(Review.is_featured.desc(), Review.created_at.desc(), Review.id.desc())
        )
        return list(result.scalars().all())

    async def list_all(self) -> list[Review]:
        result = await self.db.execute(select(Review).order_by(Review.created_at.desc(), Review.id.desc()))
        return list(result.scalars().all())

    async def _get(self, review_id: int) -> Review:
        review = await self.db.get(Review, review_id)
        if review is None:
            raise NotFoundError("review", str(review_id))
        return review

    async def set_approved(self, review_id: int, approved: bool) -> Review:
        review = await self._get(review_id)
        review.is_approved = approved
        await self.db.commit()
        await self.db.refresh(review)

        logger.info("Review moderated", extra={"review_id": review_id, "approved": approved})
        return review

    async def toggle_featured(self, review_id: int) -> Review:
        review = await self._get(review_id)
        review.is_featured = not review.is_featured
        await self.db.commit()
        await self.db.refresh(review)
        return review

    async def delete_review(self, review_id: int) -> dict[str, Any]:
        review = await self._get(review_id)
        deleted = {"id": review.id, "label": review.customer_name}
        await self.db.delete(review)
        await self.db.commit()

        logger.info("Review deleted", extra={"review_id": review_id})
        return deleted
