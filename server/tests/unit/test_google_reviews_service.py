"""Unit tests for the Google reviews cache."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import select

from autodetail.clients import IntegrationError
from autodetail.models.review import GoogleReviewsCache
from autodetail.services.google_reviews_service import GoogleReviewsService, transform_place


def _service(test_session, places, cache_hours=24):
    return GoogleReviewsService(test_session, places.client(), place_id="test-place", cache_hours=cache_hours)


def test_transform_place(places):
    data = transform_place(places.place)

    assert data["overall_rating"] == 4.9
    assert data["total_reviews"] == 87
    assert data["business_name"] == "Showers Auto Detail"
    assert data["reviews"][0] == {
        "author_name": "Dana R.",
        "author_photo_url": "https://example.com/d.png",
        "rating": 5,
        "text": "Truck looks brand new.",
        "relative_time": "2 weeks ago",
        "publish_time": "2026-09-30T15:00:00Z",
        "google_maps_uri": None,
    }
    # Missing author and translated text fall back
    assert data["reviews"][1]["author_name"] == "Anonymous"
    assert data["reviews"][1]["text"] == "Great interior job."


def test_transform_place_without_reviews():
    data = transform_place({"displayName": {"text": "New Shop"}})

    assert data == {"overall_rating": None, "total_reviews": 0, "business_name": "New Shop", "reviews": []}


def test_disabled_without_client_or_place(test_session, places):
    assert GoogleReviewsService(test_session, None, place_id="test-place").enabled is False
    assert GoogleReviewsService(test_session, places.client(), place_id="").enabled is False
    assert _service(test_session, places).enabled is True


@pytest.mark.asyncio
async def test_fetches_once_then_serves_cache(test_session, places):
    service = _service(test_session, places)

    first = await service.get_reviews()
    second = await service.get_reviews()

    assert places.calls == 1
    assert first["cached"] is False
    assert second["cached"] is True
    assert second["overall_rating"] == 4.9
    assert second["reviews"] == first["reviews"]

    row = (await test_session.execute(select(GoogleReviewsCache))).scalar_one()
    assert row.overall_rating == Decimal("4.9")
    assert row.total_reviews == 87


@pytest.mark.asyncio
async def test_expired_cache_is_refetched(test_session, places):
    service = _service(test_session, places, cache_hours=1)
    now = datetime.now(timezone.utc)

    await service.get_reviews(now=now)
    result = await service.get_reviews(now=now + timedelta(hours=2))

    assert places.calls == 2
    assert result["cached"] is False
    assert len((await test_session.execute(select(GoogleReviewsCache))).scalars().all()) == 1


@pytest.mark.asyncio
async def test_cold_cache_fetch_overwrites_row_stored_meanwhile(test_session, places, monkeypatch):
    service = _service(test_session, places)
    earlier = datetime.now(timezone.utc) - timedelta(minutes=5)

    # Another request stores the row between this request's cache check and its write
    test_session.add(GoogleReviewsCache(
        place_id="test-place",
        overall_rating=Decimal("4.1"),
        total_reviews=12,
        reviews_data={"business_name": "Showers Auto Detail", "reviews": []},
        cached_at=earlier,
    ))
    await test_session.commit()

    async def nothing_cached():
        return None

    monkeypatch.setattr(service, "_cache_row", nothing_cached)

    result = await service.get_reviews()

    assert result["cached"] is False
    assert result["total_reviews"] == 87

    rows = (await test_session.execute(
        select(GoogleReviewsCache).execution_options(populate_existing=True)
    )).scalars().all()
    assert len(rows) == 1
    assert rows[0].total_reviews == 87
    assert rows[0].overall_rating == Decimal("4.9")


@pytest.mark.asyncio
async def test_force_refresh_skips_cache(test_session, places):
    service = _service(test_session, places)
    await service.get_reviews()

    result = await service.get_reviews(force_refresh=True)

    assert places.calls == 2
    assert result["cached"] is False


@pytest.mark.asyncio
async def test_stale_cache_served_when_google_fails(test_session, places):
    service = _service(test_session, places, cache_hours=1)
    now = datetime.now(timezone.utc)
    await service.get_reviews(now=now)

    places.fail = True
    result = await service.get_reviews_with_fallback(now=now + timedelta(hours=3))

    assert result["stale"] is True
    assert result["cached"] is True
    assert result["error"] == "Using stale cache due to API error"
    assert result["total_reviews"] == 87


@pytest.mark.asyncio
async def test_google_failure_without_cache_raises(test_session, places):
    places.fail = True

    with pytest.raises(IntegrationError) as exc_info:
        await _service(test_session, places).get_reviews_with_fallback()

    assert exc_info.value.status_code == 503
