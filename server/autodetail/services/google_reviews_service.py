"""Google reviews for the business listing, cached in the database."""

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from ..clients import GooglePlacesClient, IntegrationError
from ..core.database import as_utc
from ..core.observability import metrics_collector
from ..models.review import GoogleReviewsCache

logger = logging.getLogger(__name__)

# INSERT constructs with ON CONFLICT support, by dialect name
UPSERT_INSERTS = {"postgresql": postgresql.insert, "sqlite": sqlite.insert}


def transform_place(place: dict[str, Any]) -> dict[str, Any]:
    """Reduce a Places API (New) place to what the reviews section shows."""
    reviews = []
    for review in place.get("reviews") or []:
        author = review.get("authorAttribution") or {}
        text = (review.get("text") or {}).get("text") or (review.get("originalText") or {}).get("text") or ""
        reviews.append({
            "author_name": author.get("displayName") or "Anonymous",
            "author_photo_url": author.get("photoUri"),
            "rating": review.get("rating") or 5,
            "text": text,
            "relative_time": review.get("relativePublishTimeDescription") or "",
            "publish_time": review.get("publishTime"),
            "google_maps_uri": review.get("googleMapsUri"),
        })

    return {
        "overall_rating": place.get("rating"),
        "total_reviews": place.get("userRatingCount") or 0,
        "business_name": (place.get("displayName") or {}).get("text") or "",
        "reviews": reviews,
    }


def _from_cache(row: GoogleReviewsCache) -> dict[str, Any]:
    data = row.reviews_data or {}
    return {
        "overall_rating": float(row.overall_rating) if row.overall_rating is not None else None,
        "total_reviews": row.total_reviews,
        "business_name": data.get("business_name", ""),
        "reviews": data.get("reviews", []),
        "cached": True,
        "cached_at": as_utc(row.cached_at),
    }


class GoogleReviewsService:
    """Cache-or-fetch over the Google Places API with a stale fallback."""

    def __init__(
        self,
        db: AsyncSession,
        client: Optional[GooglePlacesClient],
        place_id: str,
        cache_hours: int = 24,
    ):
        self.db = db
        self.client = client
        self.place_id = place_id
        self.cache_ttl = timedelta(hours=cache_hours)

    @property
    def enabled(self) -> bool:
        return self.client is not None and bool(self.place_id)

    async def _cache_row(self) -> Optional[GoogleReviewsCache]:
        result = await self.db.execute(
            select(GoogleReviewsCache)
            .where(GoogleReviewsCache.place_id == self.place_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _upsert(self, values: dict[str, Any]) -> None:
        """Insert or overwrite the cache row of this place in one statement."""
        insert = UPSERT_INSERTS[self.db.get_bind().dialect.name]
        statement = insert(GoogleReviewsCache).values(place_id=self.place_id, **values)
        await self.db.execute(
            statement.on_conflict_do_update(index_elements=[GoogleReviewsCache.place_id], set_=values)
        )
        await self.db.commit()

    async def _fetch_and_store(self, now: datetime) -> dict[str, Any]:
        place = await self.client.get_place(self.place_id)
        transformed = transform_place(place)

        rating = transformed["overall_rating"]
        values = {
            "overall_rating": Decimal(str(rating)) if rating is not None else None,
            "total_reviews": transformed["total_reviews"],
            "reviews_data": transformed,
            "cached_at": now,
        }
        await self._upsert(values)

        logger.info(
            "Google reviews cache refreshed",
            extra={"place_id": self.place_id, "review_count": len(transformed["reviews"])}
        )
        return {**transformed, "cached": False, "cached_at": now}

    async def get_reviews(self, force_refresh: bool = False, now: Optional[datetime] = None) -> dict[str, Any]:
        """
        Reviews from a fresh cache row, else from Google.

        Raises:
            IntegrationError: If Google has to be asked and the call fails
        """
        now = now or datetime.now(timezone.utc)

        if not force_refresh:
            row = await self._cache_row()
            if row is not None and as_utc(row.cached_at) > now - self.cache_ttl:
                metrics_collector.record_google_reviews_lookup("hit")
                return _from_cache(row)

        data = await self._fetch_and_store(now)
        metrics_collector.record_google_reviews_lookup("refresh" if force_refresh else "miss")
        return data

    async def get_reviews_with_fallback(self, now: Optional[datetime] = None) -> dict[str, Any]:
        """
        Like ``get_reviews`` but serves the last cached copy when Google fails.

        Raises:
            IntegrationError: If Google fails and nothing has ever been cached
        """
        try:
            return await self.get_reviews(now=now)
        except IntegrationError as e:
            logger.error(
                "Google reviews fetch failed",
                extra={"place_id": self.place_id, "status_code": e.status_code, "error": e.message}
            )
            await self.db.rollback()
            row = await self._cache_row()
            if row is None:
                metrics_collector.record_google_reviews_lookup("error")
                raise

        metrics_collector.record_google_reviews_lookup("stale")
        return {**_from_cache(row), "stale": True, "error": "Using stale cache due to API error"}
