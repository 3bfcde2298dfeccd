"""Integration tests for catalog, quote, review, gallery and Google reviews endpoints."""

import pytest

from autodetail.core import dependencies
from autodetail.services.notification_service import NEW_QUOTE


@pytest.mark.asyncio
async def test_public_catalog(test_client, service, package, addon):
    response = await test_client.get("/api/packages/services")
    assert response.status_code == 200
    services = response.json()
    assert services[0]["name"] == "Full Detail"
    assert services[0]["truckPrice"] == 220.0
    assert services[0]["features"] == ["Hand wash", "Interior vacuum"]

    response = await test_client.get("/api/packages")
    assert response.json()[0]["vehicleMultipliers"]["suv"] == 1.2

    response = await test_client.get("/api/addons")
    assert response.json()[0]["commercialPrice"] == 45.0

    response = await test_client.get(f"/api/packages/services/{service.id}")
    assert response.json()["id"] == service.id

    response = await test_client.get("/api/packages/services/9999")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_service_admin(test_client, admin_headers):
    response = await test_client.post(
        "/api/packages/services",
        json={"name": "Ceramic Coating", "sedanPrice": 600, "suvPrice": 700, "truckPrice": 800},
        headers=admin_headers,
    )
    assert response.status_code == 201
    created = response.json()
    assert created["isActive"] is True

    response = await test_client.put(
        f"/api/packages/services/{created['id']}", json={"isActive": False}, headers=admin_headers
    )
    assert response.json()["isActive"] is False
    assert (await test_client.get("/api/packages/services")).json() == []

    response = await test_client.delete(f"/api/packages/services/{created['id']}", headers=admin_headers)
    assert response.json()["deleted"]["label"] == "Ceramic Coating"


@pytest.mark.asyncio
async def test_catalog_writes_require_admin(test_client, addon):
    assert (await test_client.post("/api/packages/services", json={})).status_code == 401
    assert (await test_client.post("/api/addons", json={})).status_code == 401
    assert (await test_client.delete(f"/api/addons/{addon.id}")).status_code == 401


@pytest.mark.asyncio
async def test_addon_in_use_cannot_be_deleted(test_client, admin_headers, booking, addon):
    response = await test_client.delete(f"/api/addons/{addon.id}", headers=admin_headers)

    assert response.status_code == 409
    assert response.json()["title"] == "Conflict"

    response = await test_client.put(f"/api/addons/{addon.id}", json={"isActive": False}, headers=admin_headers)
    assert response.status_code == 200
    assert (await test_client.get("/api/addons")).json() == []


@pytest.mark.asyncio
async def test_addon_update_needs_a_field(test_client, admin_headers, addon):
    response = await test_client.put(f"/api/addons/{addon.id}", json={}, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "No fields to update"


@pytest.mark.asyncio
async def test_quote_flow(test_client, admin_headers, notifications):
    response = await test_client.post("/api/quotes", json={
        "name": "Casey Fox",
        "email": "casey@example.com",
        "phone": "5550102222",
        "vehicleType": "Truck",
        "serviceType": "Ceramic coating",
        "message": "How long does it take?",
    })
    assert response.status_code == 201
    quote = response.json()
    assert quote["status"] == "new"
    assert quote["vehicleType"] == "truck"
    assert notifications.types() == [NEW_QUOTE]

    response = await test_client.get("/api/quotes", headers=admin_headers)
    assert [q["id"] for q in response.json()] == [quote["id"]]

    response = await test_client.patch(
        f"/api/quotes/{quote['id']}/status", json={"status": "contacted"}, headers=admin_headers
    )
    assert response.json()["status"] == "contacted"

    response = await test_client.patch(
        f"/api/quotes/{quote['id']}/status", json={"status": "ghosted"}, headers=admin_headers
    )
    assert response.status_code == 400

    response = await test_client.delete(f"/api/quotes/{quote['id']}", headers=admin_headers)
    assert response.json()["deleted"] == {"id": quote["id"], "label": "Casey Fox"}


@pytest.mark.asyncio
async def test_quotes_list_requires_admin(test_client):
    assert (await test_client.get("/api/quotes")).status_code == 401


@pytest.mark.asyncio
async def test_reviews_are_hidden_until_approved(test_client, admin_headers):
    response = await test_client.post(
        "/api/reviews", json={"customerName": "Dana Ray", "rating": 5, "comment": "Spotless."}
    )
    assert response.status_code == 201
    review = response.json()
    assert review["isApproved"] is False

    assert (await test_client.get("/api/reviews")).json() == []

    all_reviews = (await test_client.get("/api/reviews/all", headers=admin_headers)).json()
    assert [r["id"] for r in all_reviews] == [review["id"]]

    response = await test_client.patch(
        f"/api/reviews/{review['id']}/approve", json={"approved": True}, headers=admin_headers
    )
    assert response.json()["isApproved"] is True

    response = await test_client.patch(f"/api/reviews/{review['id']}/feature", headers=admin_headers)
    assert response.json()["isFeatured"] is True

    public = (await test_client.get("/api/reviews")).json()
    assert [r["id"] for r in public] == [review["id"]]


@pytest.mark.asyncio
async def test_featured_reviews_come_first(test_client, admin_headers):
    ids = []
    for name in ("First Customer", "Second Customer"):
        response = await test_client.post("/api/reviews", json={"customerName": name, "rating": 4, "comment": "Good"})
        ids.append(response.json()["id"])
        await test_client.patch(f"/api/reviews/{ids[-1]}/approve", json={}, headers=admin_headers)

    await test_client.patch(f"/api/reviews/{ids[0]}/feature", headers=admin_headers)

    public = (await test_client.get("/api/reviews")).json()
    assert [r["id"] for r in public] == [ids[0], ids[1]]


@pytest.mark.asyncio
async def test_review_rating_must_be_one_to_five(test_client):
    response = await test_client.post("/api/reviews", json={"customerName": "Dana Ray", "rating": 6, "comment": "!"})

    assert response.status_code == 422
    assert response.json()["violations"][0]["path"] == "rating"


@pytest.mark.asyncio
async def test_gallery(test_client, admin_headers):
    for title, category in (("Jeep interior", "interior"), ("F-150 polish", "exterior")):
        response = await test_client.post(
            "/api/gallery",
            json={"title": title, "imageUrl": f"https://cdn.test/{category}.jpg", "category": category},
            headers=admin_headers,
        )
        assert response.status_code == 201

    photos = (await test_client.get("/api/gallery")).json()
    assert len(photos) == 2

    interior = (await test_client.get("/api/gallery", params={"category": "interior"})).json()
    assert [p["title"] for p in interior] == ["Jeep interior"]

    response = await test_client.put(
        f"/api/gallery/{interior[0]['id']}", json={"beforeImageUrl": "https://cdn.test/before.jpg"},
        headers=admin_headers,
    )
    assert response.json()["beforeImageUrl"] == "https://cdn.test/before.jpg"

    response = await test_client.delete(f"/api/gallery/{interior[0]['id']}", headers=admin_headers)
    assert response.json()["deleted"]["label"] == "Jeep interior"
    assert len((await test_client.get("/api/gallery")).json()) == 1


@pytest.mark.asyncio
async def test_google_reviews_cached(test_client, places):
    response = await test_client.get("/api/google-reviews")
    assert response.status_code == 200
    data = response.json()
    assert data["enabled"] is True
    assert data["overall_rating"] == 4.9
    assert data["total_reviews"] == 87
    assert data["business_name"] == "Showers Auto Detail"
    assert data["cached"] is False
    assert data["reviews"][0]["author_name"] == "Dana R."

    response = await test_client.get("/api/google-reviews")
    assert response.json()["cached"] is True
    assert places.calls == 1


@pytest.mark.asyncio
async def test_google_reviews_not_configured(test_app, test_client):
    test_app.dependency_overrides[dependencies.get_google_places_client] = lambda: None

    response = await test_client.get("/api/google-reviews")

    assert response.status_code == 200
    assert response.json() == {"enabled": False, "total_reviews": 0, "reviews": [], "message": "Google Reviews not configured"}


@pytest.mark.asyncio
async def test_google_reviews_failure_without_cache(test_client, places):
    places.fail = True

    response = await test_client.get("/api/google-reviews")

    assert response.status_code == 500
    data = response.json()
    assert data["enabled"] is True
    assert data["error"] == "Failed to fetch Google reviews"
    assert data["reviews"] == []


@pytest.mark.asyncio
async def test_google_reviews_refresh(test_client, admin_headers, places):
    assert (await test_client.get("/api/google-reviews/refresh")).status_code == 401

    await test_client.get("/api/google-reviews")
    response = await test_client.get("/api/google-reviews/refresh", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["message"] == "Cache refreshed successfully"
    assert places.calls == 2

    places.fail = True
    response = await test_client.get("/api/google-reviews/refresh", headers=admin_headers)
    assert response.status_code == 502
