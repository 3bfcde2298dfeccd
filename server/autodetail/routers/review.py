"""Customer review router."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DatabaseSession, RequiredAdmin
from ..core.exceptions import ProblemDetailsException, internal_error
from ..core.rate_limit import general_limit, submission_limit
from ..schemas.common import DeletedRecord, DeleteResponse
from ..schemas.review import ApproveReviewRequest, CreateReviewRequest, Review
from ..services.review_service import ReviewService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reviews", tags=["reviews"], dependencies=[Depends(general_limit)])


@router.post("", response_model=Review, status_code=201, dependencies=[Depends(submission_limit)])
async def submit_review(
    request: CreateReviewRequest,
    db: AsyncSession = DatabaseSession,
) -> JSONResponse:
    """Submit a review. It is published once an admin approves it."""
    try:
        review = await ReviewService(db).create_review(request)
        return JSONResponse(status_code=201, content=Review.model_validate(review).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "submit review", e) from e


@router.get("", response_model=list[Review])
async def list_approved_reviews(db: AsyncSession = DatabaseSession) -> JSONResponse:
    """Approved reviews, featured first."""
    try:
        reviews = await ReviewService(db).list_approved()
        return JSONResponse(content=[Review.model_validate(r).to_json() for r in reviews])

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "fetch reviews", e) from e


@router.get("/all", response_model=list[Review])
async def list_all_reviews(
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        reviews = await ReviewService(db).list_all()
        return JSONResponse(content=[Review.model_validate(r).to_json() for r in reviews])

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "fetch reviews", e) from e


@router.patch("/{review_id}/approve", response_model=Review)
async def approve_review(
    review_id: int,
    request: ApproveReviewRequest,
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        review = await ReviewService(db).set_approved(review_id, request.approved)
        return JSONResponse(content=Review.model_validate(review).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "update review", e, review_id=review_id) from e


@router.patch("/{review_id}/feature", response_model=Review)
async def feature_review(
    review_id: int,
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        review = await ReviewService(db).toggle_featured(review_id)
        return JSONResponse(content=Review.model_validate(review).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "update review", e, review_id=review_id) from e


@router.delete("/{review_id}", response_model=DeleteResponse)
async def delete_review(
    review_id: int,
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        deleted = await ReviewService(db).delete_review(review_id)
        return JSONResponse(content=DeleteResponse(deleted=DeletedRecord(**deleted)).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "delete review", e, review_id=review_id) from e
