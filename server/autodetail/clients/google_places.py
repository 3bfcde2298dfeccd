"""Google Places API (New) client for the business listing."""

from typing import Any, Optional

import httpx

from ..core.observability import get_logger
from .base import BaseAPIClient, IntegrationError

logger = get_logger(__name__, integration="google_places")

GOOGLE_PLACES_URL = "https://places.googleapis.com/v1/places"
PLACE_FIELD_MASK = "id,displayName,rating,userRatingCount,reviews"


class GooglePlacesClient(BaseAPIClient):
    service_name = "Google Places"

    def __init__(
        self,
        api_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self.api_key = api_key

    async def get_place(self, place_id: str) -> dict[str, Any]:
        """Fetch rating, review count and the latest reviews of a place."""
        response = await self._request(
            "GET",
            f"{GOOGLE_PLACES_URL}/{place_id}",
            headers={
                "Content-Type": "application/json",
                "X-Goog-Api-Key": self.api_key,
                "X-Goog-FieldMask": PLACE_FIELD_MASK,
            },
        )

        if response.status_code != 200:
            logger.error(
                "Google Places request failed",
                status_code=response.status_code,
                place_id=place_id,
            )
            raise IntegrationError(
                self.service_name,
                f"{response.status_code} - {response.text}",
                response.status_code,
            )

        return self._json(response)
