"""Google reviews router."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..clients import GooglePlacesClient, IntegrationError
from ..core.config import settings
from ..core.dependencies import DatabaseSession, GooglePlaces, RequiredAdmin
from ..core.exceptions import ProblemDetailsException, UpstreamServiceError, ValidationError, internal_error
from ..core.rate_limit import general_limit
from ..schemas.review import GoogleReviewsResponse
from ..services.google_reviews_service import GoogleReviewsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/google-reviews", tags=["google-reviews"], dependencies=[Depends(general_limit)])

NOT_CONFIGURED = "Google Reviews not configured"


def _service(db: AsyncSession, client: Optional[GooglePlacesClient]) -> GoogleReviewsService:
    return GoogleReviewsService(
        db,
        client,
        place_id=settings.google_place_id,
        cache_hours=settings.google_reviews_cache_hours,
    )


@router.get("", response_model=GoogleReviewsResponse)
async def get_google_reviews(
    db: AsyncSession = DatabaseSession,
    client: Optional[GooglePlacesClient] = GooglePlaces,
) -> JSONResponse:
    """
    Cached Google reviews for the business listing.

    Served from a cache row younger than the TTL, otherwise fetched from
    Google. When Google fails the last cached copy is served as stale.
    """
    service = _service(db, client)
    if not service.enabled:
        response = GoogleReviewsResponse(enabled=False, message=NOT_CONFIGURED)
        return JSONResponse(content=response.to_json())

    try:
        data = await service.get_reviews_with_fallback()
        return JSONResponse(content=GoogleReviewsResponse(enabled=True, **data).to_json())

    except IntegrationError:
        response = GoogleReviewsResponse(enabled=True, error="Failed to fetch Google reviews")
        return JSONResponse(status_code=500, content=response.to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "fetch Google reviews", e) from e


@router.get("/refresh", response_model=GoogleReviewsResponse)
async def refresh_google_reviews(
    db: AsyncSession = DatabaseSession,
    client: Optional[GooglePlacesClient] = GooglePlaces,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    """Bypass the cache and fetch from Google now (admin)."""
    service = _service(db, client)
    if not service.enabled:
        raise ValidationError(NOT_CONFIGURED)

    try:
        data = await service.get_reviews(force_refresh=True)
        response = GoogleReviewsResponse(
            enabled=True,
            success=True,
            message="Cache refreshed successfully",
            **data,
        )
        return JSONResponse(content=response.to_json())

    except IntegrationError as e:
        raise UpstreamServiceError("Google Places", f"Failed to refresh Google reviews: {e.message}") from e

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "refresh Google reviews", e) from e
